"""
Route handlers for sign-up and login.
"""
from fastapi import APIRouter, Depends, status

from models.api_models import Credentials
from services.user_service import UserService
from utils.store import JsonStore, get_store

router = APIRouter(prefix="/api")


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(credentials: Credentials, store: JsonStore = Depends(get_store)):
    """Create an account."""
    return UserService.signup(store, credentials)


@router.post("/login")
def login(credentials: Credentials, store: JsonStore = Depends(get_store)):
    """Exchange email and password for a bearer token."""
    return UserService.login(store, credentials)
