"""
Route handler for the project idea catalogue.
"""
from fastapi import APIRouter

from utils.constants import PROJECT_IDEAS

router = APIRouter()


@router.get("/api/project-ideas")
async def list_project_ideas():
    """Curated project suggestions for the home tab."""
    return PROJECT_IDEAS
