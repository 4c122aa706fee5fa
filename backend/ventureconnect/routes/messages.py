"""
Message Routes Module
"""

from fastapi import APIRouter, Depends, status
from typing import List

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from ..services import messaging
from .auth import get_current_user

router = APIRouter(
    prefix="/messages",
    tags=["Messages"],
    dependencies=[Depends(get_current_user)]
)


@router.get("", response_model=List[schemas.Conversation])
async def get_conversations(
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await messaging.list_conversations(storage, current_user.id)


@router.get("/{user_id}", response_model=List[schemas.Message])
async def get_thread(
    user_id: int,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Thread with ``user_id``, oldest first; incoming messages are marked read."""
    return await messaging.open_thread(storage, current_user.id, user_id)


@router.post("", response_model=schemas.Message, status_code=status.HTTP_201_CREATED)
async def send_message(
    message: schemas.MessageCreate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await messaging.send_message(storage, current_user.id, message)
