"""
Route handlers for the community feed.
"""
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from auth import current_user_email, current_user_id
from models.api_models import PostCreate
from services.post_service import PostService
from utils.store import JsonStore, get_store

router = APIRouter(prefix="/api/posts")

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_post_payload(request: Request) -> PostCreate:
    """
    Post body as JSON or as form fields.

    The browser client sends multipart form data with an optional image part;
    only the text content is kept.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        async with request.form() as form:
            raw = {key: value for key, value in form.items() if key == "content"}
    else:
        try:
            raw = await request.json()
        except ValueError as e:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": "Request body is not valid JSON"}]
            ) from e

    try:
        return PostCreate.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(
            [{**error, "loc": ("body", *error["loc"])} for error in e.errors(include_url=False)]
        ) from e


@router.get("")
def list_posts(store: JsonStore = Depends(get_store)):
    """Public feed, newest first."""
    return PostService.list_posts(store)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_post(payload: PostCreate = Depends(read_post_payload), user_id: int = Depends(current_user_id),
                user_email: str = Depends(current_user_email), store: JsonStore = Depends(get_store)):
    return PostService.create_post(store, user_id, user_email, payload)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(post_id: int, user_id: int = Depends(current_user_id), store: JsonStore = Depends(get_store)):
    PostService.delete_post(store, user_id, post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
