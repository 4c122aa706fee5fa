"""
Skill Routes Module
"""

from fastapi import APIRouter, HTTPException, Depends, status
from typing import List

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from .auth import get_current_user

router = APIRouter(
    tags=["Skills"],
    dependencies=[Depends(get_current_user)]
)


async def require_own_skill(storage: Storage, skill_id: int, user_id: int) -> None:
    owned = {s.id for s in await storage.get_skills_by_user_id(user_id)}
    if skill_id not in owned:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Skill not found")


@router.get("/users/{user_id}/skills", response_model=List[schemas.Skill])
async def get_user_skills(user_id: int, storage: Storage = Depends(get_storage)):
    return await storage.get_skills_by_user_id(user_id)


@router.post("/skills", response_model=schemas.Skill, status_code=status.HTTP_201_CREATED)
async def create_skill(
    skill: schemas.SkillCreate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await storage.create_skill({**skill.model_dump(), "user_id": current_user.id})


@router.put("/skills/{skill_id}", response_model=schemas.Skill)
async def update_skill(
    skill_id: int,
    skill_update: schemas.SkillUpdate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await require_own_skill(storage, skill_id, current_user.id)
    updated = await storage.update_skill(skill_id, skill_update.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Skill not found")
    return updated


@router.delete("/skills/{skill_id}", response_model=schemas.StatusMessage)
async def delete_skill(
    skill_id: int,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await require_own_skill(storage, skill_id, current_user.id)
    await storage.delete_skill(skill_id)
    return {"message": "Skill deleted successfully"}
