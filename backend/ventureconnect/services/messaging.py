"""
Messaging Service Module

Conversation aggregation and read-state tracking for direct messages.
"""
from typing import Dict, List, Tuple

from fastapi import HTTPException, status

from ..db import schemas
from ..db.storage import Storage
from ..utils.logger import api_logger as logger


def _sort_key(message: schemas.Message):
    return (message.created_at, message.id)


def group_conversations(user_id: int, messages: List[schemas.Message]) -> Dict[int, Tuple[schemas.Message, int]]:
    """
    Group ``user_id``'s messages by counterpart.

    Returns:
        Mapping of counterpart id to ``(newest message, unread count)``, where
        only unread messages addressed to ``user_id`` are counted.
    """
    grouped: Dict[int, Tuple[schemas.Message, int]] = {}
    for message in messages:
        other_id = message.recipient_id if message.sender_id == user_id else message.sender_id
        unread = int(message.recipient_id == user_id and not message.is_read)

        if other_id not in grouped:
            grouped[other_id] = (message, unread)
            continue

        last, count = grouped[other_id]
        if _sort_key(message) > _sort_key(last):
            last = message
        grouped[other_id] = (last, count + unread)
    return grouped


async def list_conversations(storage: Storage, user_id: int) -> List[schemas.Conversation]:
    """Conversation list for the inbox, newest activity first."""
    grouped = group_conversations(user_id, await storage.get_messages_by_user_id(user_id))

    conversations = []
    for other_id, (last_message, unread_count) in grouped.items():
        other = await storage.get_user(other_id)
        if other is None:
            logger.warning(f"Skipping conversation with missing user {other_id}")
            continue
        conversations.append(schemas.Conversation(
            user=other.public(), last_message=last_message, unread_count=unread_count
        ))

    conversations.sort(key=lambda c: _sort_key(c.last_message), reverse=True)
    return conversations


async def open_thread(storage: Storage, user_id: int, other_id: int) -> List[schemas.Message]:
    """
    Return the thread with ``other_id`` oldest first, marking incoming
    messages read. The returned messages carry their updated read state.
    """
    if await storage.get_user(other_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    thread = await storage.get_messages_between_users(user_id, other_id)
    result = []
    for message in thread:
        if message.recipient_id == user_id and not message.is_read:
            message = await storage.mark_message_as_read(message.id) or message
        result.append(message)
    return result


async def send_message(storage: Storage, sender_id: int, data: schemas.MessageCreate) -> schemas.Message:
    if await storage.get_user(data.recipient_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipient not found")

    message = await storage.create_message({
        "sender_id": sender_id,
        "recipient_id": data.recipient_id,
        "content": data.content,
        "is_read": False,
    })
    logger.info(f"Message {message.id}: {sender_id} -> {data.recipient_id}")
    return message
