"""
Project Routes Module

This module handles project search and owner-only project management.
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import List, Optional

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from ..utils.logger import api_logger as logger
from .auth import get_current_user

router = APIRouter(
    tags=["Projects"],
    dependencies=[Depends(get_current_user)]
)


async def get_owned_project(storage: Storage, project_id: int, user_id: int, action: str = "update") -> schemas.Project:
    """
    Load a project the caller owns.

    Raises:
        HTTPException(404): if the project does not exist
        HTTPException(403): if it belongs to someone else
    """
    project = await storage.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if project.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"You can only {action} your own projects")
    return project


@router.get("/projects", response_model=List[schemas.Project])
async def search_projects(
    q: Optional[str] = Query(None, description="Matches title, description, looking_for and tags"),
    storage: Storage = Depends(get_storage),
):
    return await storage.search_projects(q or "")


@router.get("/users/{user_id}/projects", response_model=List[schemas.Project])
async def get_user_projects(user_id: int, storage: Storage = Depends(get_storage)):
    return await storage.get_projects_by_user_id(user_id)


@router.post("/projects", response_model=schemas.Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: schemas.ProjectCreate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    created = await storage.create_project({**project.model_dump(), "user_id": current_user.id})
    logger.info(f"Created project {created.id} for user {current_user.id}")
    return created


@router.put("/projects/{project_id}", response_model=schemas.Project)
async def update_project(
    project_id: int,
    project_update: schemas.ProjectUpdate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await get_owned_project(storage, project_id, current_user.id)
    updated = await storage.update_project(project_id, project_update.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return updated


@router.delete("/projects/{project_id}", response_model=schemas.StatusMessage)
async def delete_project(
    project_id: int,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await get_owned_project(storage, project_id, current_user.id, action="delete")
    if not await storage.delete_project(project_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")

    logger.info(f"Deleted project {project_id}")
    return {"message": "Project deleted successfully"}
