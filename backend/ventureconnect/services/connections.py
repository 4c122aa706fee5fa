"""
Connection Service Module

The connection request state machine:

    pending -> accepted   (by the recipient, or when both users request)
    pending -> rejected   (by the recipient)

Rejected rows are kept but never block a fresh request.
"""
from typing import List, Optional, Tuple

from fastapi import HTTPException, status

from ..db import schemas
from ..db.storage import Storage
from ..utils.logger import api_logger as logger

RESPONSE_STATUSES = ("accepted", "rejected")


def counterpart_id(connection: schemas.Connection, user_id: int) -> int:
    if connection.requester_id == user_id:
        return connection.recipient_id
    return connection.requester_id


async def find_accepted(storage: Storage, user_id: int, other_id: int) -> Optional[schemas.Connection]:
    for connection in await storage.get_connections(user_id):
        if counterpart_id(connection, user_id) == other_id:
            return connection
    return None


async def request_connection(
    storage: Storage, requester_id: int, recipient_id: int
) -> Tuple[schemas.Connection, bool]:
    """
    Ask ``recipient_id`` to connect.

    Returns:
        ``(connection, created)``. ``created`` is False when an opposite
        pending request was accepted instead of creating a new one.

    Raises:
        HTTPException(404): unknown recipient
        HTTPException(400): self request, existing connection or duplicate request
    """
    if await storage.get_user(recipient_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipient not found")

    if recipient_id == requester_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot connect to yourself")

    if await find_accepted(storage, requester_id, recipient_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Connection already exists")

    for incoming in await storage.get_pending_connections(requester_id):
        if incoming.requester_id == recipient_id:
            logger.info(f"Auto-accepting connection {incoming.id} between {recipient_id} and {requester_id}")
            accepted = await storage.update_connection_status(incoming.id, "accepted")
            return accepted, False

    for outgoing in await storage.get_outgoing_pending_connections(requester_id):
        if outgoing.recipient_id == recipient_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Connection request already pending"
            )

    connection = await storage.create_connection({
        "requester_id": requester_id,
        "recipient_id": recipient_id,
        "status": "pending",
    })
    logger.info(f"Connection request {connection.id}: {requester_id} -> {recipient_id}")
    return connection, True


async def respond_to_connection(
    storage: Storage, user_id: int, connection_id: int, new_status: Optional[str]
) -> schemas.Connection:
    """Accept or reject a pending request addressed to ``user_id``."""
    if new_status not in RESPONSE_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    connection = await storage.get_connection(connection_id)
    if connection is None or connection.recipient_id != user_id or connection.status != "pending":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Connection request not found")

    logger.info(f"Connection {connection_id} {new_status} by user {user_id}")
    return await storage.update_connection_status(connection_id, new_status)


async def _with_users(storage: Storage, user_id: int, connections) -> List[schemas.ConnectionWithUser]:
    result = []
    for connection in connections:
        other = await storage.get_user(counterpart_id(connection, user_id))
        if other is None:
            continue
        result.append(schemas.ConnectionWithUser(connection=connection, user=other.public()))
    return result


async def list_connections(storage: Storage, user_id: int) -> List[schemas.ConnectionWithUser]:
    return await _with_users(storage, user_id, await storage.get_connections(user_id))


async def list_pending(storage: Storage, user_id: int) -> List[schemas.ConnectionWithUser]:
    return await _with_users(storage, user_id, await storage.get_pending_connections(user_id))
