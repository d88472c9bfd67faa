"""
Route handlers for projects, checklist items and materials.
"""
from fastapi import APIRouter, Depends, Response, status

from auth import current_user_id
from models.api_models import MaterialCreate, ProjectCreate, TodoCreate
from services.project_service import ProjectService
from utils.store import JsonStore, get_store

router = APIRouter(prefix="/api/projects")


def project_view(project: dict) -> dict:
    """Project as returned to clients, with its material total."""
    return {**project, "totalCost": ProjectService.total_cost(project)}


@router.get("")
def list_projects(user_id: int = Depends(current_user_id), store: JsonStore = Depends(get_store)):
    return [project_view(p) for p in ProjectService.list_projects(store, user_id)]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_project(payload: ProjectCreate, user_id: int = Depends(current_user_id),
                   store: JsonStore = Depends(get_store)):
    return project_view(ProjectService.create_project(store, user_id, payload))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: int, user_id: int = Depends(current_user_id),
                   store: JsonStore = Depends(get_store)):
    ProjectService.delete_project(store, user_id, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{project_id}/todos", status_code=status.HTTP_201_CREATED)
def add_todo(project_id: int, payload: TodoCreate, user_id: int = Depends(current_user_id),
             store: JsonStore = Depends(get_store)):
    return project_view(ProjectService.add_todo(store, user_id, project_id, payload))


@router.put("/{project_id}/todos/{todo_id}")
def toggle_todo(project_id: int, todo_id: int, user_id: int = Depends(current_user_id),
                store: JsonStore = Depends(get_store)):
    """Toggle a checklist item between done and not done."""
    return project_view(ProjectService.toggle_todo(store, user_id, project_id, todo_id))


@router.delete("/{project_id}/todos/{todo_id}")
def delete_todo(project_id: int, todo_id: int, user_id: int = Depends(current_user_id),
                store: JsonStore = Depends(get_store)):
    return project_view(ProjectService.delete_todo(store, user_id, project_id, todo_id))


@router.post("/{project_id}/materials", status_code=status.HTTP_201_CREATED)
def add_material(project_id: int, payload: MaterialCreate, user_id: int = Depends(current_user_id),
                 store: JsonStore = Depends(get_store)):
    return project_view(ProjectService.add_material(store, user_id, project_id, payload))


@router.delete("/{project_id}/materials/{material_id}")
def delete_material(project_id: int, material_id: int, user_id: int = Depends(current_user_id),
                    store: JsonStore = Depends(get_store)):
    return project_view(ProjectService.delete_material(store, user_id, project_id, material_id))
