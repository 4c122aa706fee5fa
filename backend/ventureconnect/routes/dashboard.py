"""
Dashboard Routes Module

Aggregates the caller's profile, network statistics, skills, resources and
projects into one response for the home page.
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from .auth import get_current_user

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard", response_model=schemas.DashboardResponse)
async def get_dashboard(
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    user = await storage.get_user(current_user.id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    projects = await storage.get_projects_by_user_id(user.id)
    stats = schemas.DashboardStats(
        connection_count=await storage.get_connection_count(user.id),
        pending_count=len(await storage.get_pending_connections(user.id)),
        project_count=len(projects),
        unread_message_count=await storage.get_unread_message_count(user.id),
    )
    return schemas.DashboardResponse(
        user=user.public(),
        stats=stats,
        skills=await storage.get_skills_by_user_id(user.id),
        resources=await storage.get_resources_by_user_id(user.id),
        projects=projects,
    )
