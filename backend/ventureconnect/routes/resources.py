"""
Resource Routes Module

Per-category "have / need" rows behind a user's resource grid.
"""

from fastapi import APIRouter, HTTPException, Depends, status
from typing import List

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from .auth import get_current_user

router = APIRouter(
    tags=["Resources"],
    dependencies=[Depends(get_current_user)]
)


@router.get("/users/{user_id}/resources", response_model=List[schemas.Resource])
async def get_user_resources(user_id: int, storage: Storage = Depends(get_storage)):
    return await storage.get_resources_by_user_id(user_id)


@router.post("/resources", response_model=schemas.Resource, status_code=status.HTTP_201_CREATED)
async def create_resource(
    resource: schemas.ResourceCreate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.create_resource({**resource.model_dump(), "user_id": current_user.id})


@router.put("/resources/{resource_id}", response_model=schemas.Resource)
async def update_resource(
    resource_id: int,
    resource_update: schemas.ResourceUpdate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Update one of the caller's resources; other ids are reported as missing."""
    owned = {r.id for r in await storage.get_resources_by_user_id(current_user.id)}
    if resource_id not in owned:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")

    updated = await storage.update_resource(resource_id, resource_update.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return updated
