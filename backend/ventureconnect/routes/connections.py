"""
Connection Routes Module

This module handles connection requests between users.

Key Features:
- Accepted and incoming pending connections, each with the other user
- Request creation with auto-accept of an opposite pending request
- Recipient-only accept / reject
"""

from fastapi import APIRouter, Depends, Response, status
from typing import List, Union

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from ..services import connections as connection_service
from .auth import get_current_user

router = APIRouter(
    prefix="/connections",
    tags=["Connections"],
    dependencies=[Depends(get_current_user)]
)


@router.get("", response_model=List[schemas.ConnectionWithUser])
async def get_connections(
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await connection_service.list_connections(storage, current_user.id)


@router.get("/pending", response_model=List[schemas.ConnectionWithUser])
async def get_pending_connections(
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await connection_service.list_pending(storage, current_user.id)


@router.post(
    "",
    response_model=Union[schemas.ConnectionAccepted, schemas.Connection],
    status_code=status.HTTP_201_CREATED,
)
async def create_connection(
    request_data: schemas.ConnectionCreate,
    response: Response,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Send a connection request.

    Returns 201 with the new pending connection, or 200 with the accepted
    connection when the recipient had already asked the caller.
    """
    connection, created = await connection_service.request_connection(
        storage, current_user.id, request_data.recipient_id
    )
    if created:
        return connection

    response.status_code = status.HTTP_200_OK
    return schemas.ConnectionAccepted(message="Accepted existing connection request", connection=connection)


@router.put("/{connection_id}", response_model=schemas.Connection)
async def update_connection(
    connection_id: int,
    status_update: schemas.ConnectionStatusUpdate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    return await connection_service.respond_to_connection(
        storage, current_user.id, connection_id, status_update.status
    )
