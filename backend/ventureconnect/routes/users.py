"""
User Routes Module

This module handles user search, profile retrieval and profile updates,
including avatar uploads and the resource grid view.

Key Features:
- User search
- Owner-only profile edits
- Avatar upload with type and size checks
"""

from fastapi import APIRouter, HTTPException, Depends, File, Query, UploadFile, status
from typing import List, Optional

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from ..services.profile import build_resource_grid, compute_profile_completion
from ..services.uploads import UploadService, get_upload_service
from ..utils.logger import api_logger as logger
from .auth import get_current_user

router = APIRouter(
    tags=["Users"],
    dependencies=[Depends(get_current_user)]
)


async def get_user_or_404(storage: Storage, user_id: int) -> schemas.User:
    user = await storage.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def require_self(current_user: schemas.User, user_id: int) -> None:
    if current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only update your own profile")


@router.get("/users", response_model=List[schemas.PublicUser])
async def search_users(
    q: Optional[str] = Query(None, description="Matches name, username, bio, headline and company"),
    storage: Storage = Depends(get_storage),
):
    users = await storage.search_users(q or "")
    return [u.public() for u in users]


@router.get("/users/{user_id}", response_model=schemas.PublicUser)
async def get_user(user_id: int, storage: Storage = Depends(get_storage)):
    return (await get_user_or_404(storage, user_id)).public()


@router.put("/users/{user_id}", response_model=schemas.PublicUser)
async def update_user(
    user_id: int,
    user_update: schemas.UserUpdate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Update the caller's own profile and recompute its completion.

    Raises:
        HTTPException(403): for someone else's profile
        HTTPException(404): if the user no longer exists
    """
    require_self(current_user, user_id)
    user = await get_user_or_404(storage, user_id)

    changes = user_update.model_dump(exclude_unset=True)
    changes["profile_completion"] = compute_profile_completion(user.model_copy(update=changes))
    updated = await storage.update_user(user_id, changes)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    logger.info(f"Updated profile for user {user_id}: {sorted(changes)}")
    return updated.public()


@router.post("/users/{user_id}/avatar", response_model=schemas.PublicUser)
async def upload_avatar(
    user_id: int,
    avatar: UploadFile = File(...),
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    uploads: UploadService = Depends(get_upload_service),
):
    """Store a new avatar image and replace the previous local one."""
    require_self(current_user, user_id)
    user = await get_user_or_404(storage, user_id)

    avatar_url = await uploads.save_avatar(avatar)
    previous = user.avatar_url

    updated_user = user.model_copy(update={"avatar_url": avatar_url})
    updated = await storage.update_user(user_id, {
        "avatar_url": avatar_url,
        "profile_completion": compute_profile_completion(updated_user),
    })
    if previous and previous != avatar_url:
        uploads.delete_avatar(previous)

    return updated.public()


@router.get("/users/{user_id}/resource-grid", response_model=schemas.ResourceGrid)
async def get_resource_grid(user_id: int, storage: Storage = Depends(get_storage)):
    return build_resource_grid(await storage.get_resources_by_user_id(user_id))
