"""
Project service: projects, checklist items and materials, scoped to their owner.
"""
from datetime import datetime, timezone

from fastapi import HTTPException, status

from models.api_models import MaterialCreate, ProjectCreate, TodoCreate
from utils.logger import app_logger
from utils.store import JsonStore


class ProjectService:
    """Service for project CRUD."""

    @staticmethod
    def _find_project(data: dict, user_id: int, project_id: int) -> dict:
        project = next(
            (p for p in data["projects"] if p.get("id") == project_id and p.get("userId") == user_id),
            None
        )
        if project is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
        project.setdefault("todos", [])
        project.setdefault("materials", [])
        return project

    @staticmethod
    def _find_item(items: list, item_id: int, label: str) -> dict:
        item = next((i for i in items if i.get("id") == item_id), None)
        if item is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
        return item

    @staticmethod
    def list_projects(store: JsonStore, user_id: int) -> list:
        """Projects owned by the user, oldest first."""
        return [p for p in store.read_all()["projects"] if p.get("userId") == user_id]

    @staticmethod
    def create_project(store: JsonStore, user_id: int, payload: ProjectCreate) -> dict:
        name = payload.name.strip()
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Project name is required")

        with store.transaction() as data:
            project = {
                "id": store.next_id(data["projects"]),
                "userId": user_id,
                "name": name,
                "todos": [],
                "materials": [],
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
            data["projects"].append(project)

        app_logger.info(f"Project {project['id']} created by user {user_id}")
        return project

    @staticmethod
    def delete_project(store: JsonStore, user_id: int, project_id: int) -> None:
        with store.transaction() as data:
            project = ProjectService._find_project(data, user_id, project_id)
            data["projects"].remove(project)
        app_logger.info(f"Project {project_id} deleted by user {user_id}")

    @staticmethod
    def add_todo(store: JsonStore, user_id: int, project_id: int, payload: TodoCreate) -> dict:
        text = payload.text.strip()
        if not text:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Checklist item text is required")

        with store.transaction() as data:
            project = ProjectService._find_project(data, user_id, project_id)
            project["todos"].append({
                "id": store.next_id(project["todos"]),
                "text": text,
                "completed": False,
            })
        return project

    @staticmethod
    def toggle_todo(store: JsonStore, user_id: int, project_id: int, todo_id: int) -> dict:
        """Flip a checklist item's completed flag."""
        with store.transaction() as data:
            project = ProjectService._find_project(data, user_id, project_id)
            todo = ProjectService._find_item(project["todos"], todo_id, "Checklist item")
            todo["completed"] = not todo.get("completed", False)
        return project

    @staticmethod
    def delete_todo(store: JsonStore, user_id: int, project_id: int, todo_id: int) -> dict:
        with store.transaction() as data:
            project = ProjectService._find_project(data, user_id, project_id)
            project["todos"].remove(ProjectService._find_item(project["todos"], todo_id, "Checklist item"))
        return project

    @staticmethod
    def add_material(store: JsonStore, user_id: int, project_id: int, payload: MaterialCreate) -> dict:
        name = payload.name.strip()
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Material name is required")

        with store.transaction() as data:
            project = ProjectService._find_project(data, user_id, project_id)
            project["materials"].append({
                "id": store.next_id(project["materials"]),
                "name": name,
                "quantity": payload.quantity,
                "cost": round(payload.cost, 2),
            })
        return project

    @staticmethod
    def delete_material(store: JsonStore, user_id: int, project_id: int, material_id: int) -> dict:
        with store.transaction() as data:
            project = ProjectService._find_project(data, user_id, project_id)
            project["materials"].remove(ProjectService._find_item(project["materials"], material_id, "Material"))
        return project

    @staticmethod
    def total_cost(project: dict) -> float:
        """Sum of material costs for a project."""
        return round(sum(float(m.get("cost") or 0) for m in project.get("materials", [])), 2)
