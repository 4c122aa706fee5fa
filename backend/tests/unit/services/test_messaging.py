"""
Unit tests for conversation aggregation and read-state tracking.
"""
import pytest
from datetime import datetime, timedelta
from fastapi import HTTPException

from ventureconnect.db import schemas
from ventureconnect.services import messaging

NOW = datetime(2024, 5, 1, 12, 0, 0)


def message(id, sender, recipient, minutes_ago=0, is_read=False):
    return schemas.Message(
        id=id, sender_id=sender, recipient_id=recipient, content=f"m{id}",
        is_read=is_read, created_at=NOW - timedelta(minutes=minutes_ago),
    )


def test_group_conversations_by_counterpart():
    grouped = messaging.group_conversations(1, [
        message(1, 2, 1, minutes_ago=30),
        message(2, 1, 2, minutes_ago=20),
        message(3, 2, 1, minutes_ago=10),
        message(4, 3, 1, minutes_ago=5, is_read=True),
    ])

    assert set(grouped) == {2, 3}
    last, unread = grouped[2]
    assert last.id == 3
    assert unread == 2
    assert grouped[3][1] == 0


def test_own_unread_outgoing_messages_are_not_counted():
    grouped = messaging.group_conversations(1, [message(1, 1, 2), message(2, 1, 2)])
    assert grouped[2][1] == 0


def test_self_addressed_message_forms_own_conversation():
    grouped = messaging.group_conversations(1, [message(1, 1, 1)])
    assert list(grouped) == [1]
    assert grouped[1][1] == 1


def test_equal_timestamps_break_ties_by_id():
    grouped = messaging.group_conversations(1, [message(5, 2, 1), message(4, 1, 2)])
    assert grouped[2][0].id == 5


@pytest.fixture
async def inbox(mem_storage):
    ids = {}
    for name in ("ada", "grace", "linus"):
        user = await mem_storage.create_user({
            "username": name, "email": f"{name}@example.com", "name": name.title(), "user_type": "entrepreneur",
        })
        ids[name] = user.id

    def send(sender, recipient, minutes_ago, is_read=False):
        return mem_storage.create_message({
            "sender_id": ids[sender], "recipient_id": ids[recipient], "content": f"{sender}->{recipient}",
            "is_read": is_read, "created_at": datetime.utcnow() - timedelta(minutes=minutes_ago),
        })

    await send("grace", "ada", 50)
    await send("ada", "grace", 40)
    await send("linus", "ada", 30)
    await send("grace", "ada", 20)
    return mem_storage, ids


async def test_list_conversations_newest_first(inbox):
    storage, ids = inbox

    conversations = await messaging.list_conversations(storage, ids["ada"])

    assert [c.user.username for c in conversations] == ["grace", "linus"]
    assert conversations[0].unread_count == 2
    assert conversations[0].last_message.content == "grace->ada"
    assert conversations[1].unread_count == 1


async def test_list_conversations_skips_missing_users(inbox):
    storage, ids = inbox
    del storage.users[ids["linus"]]

    conversations = await messaging.list_conversations(storage, ids["ada"])

    assert [c.user.username for c in conversations] == ["grace"]


async def test_open_thread_marks_incoming_read(inbox):
    storage, ids = inbox

    thread = await messaging.open_thread(storage, ids["ada"], ids["grace"])

    assert [m.content for m in thread] == ["grace->ada", "ada->grace", "grace->ada"]
    assert all(m.is_read for m in thread if m.recipient_id == ids["ada"])
    assert await storage.get_unread_message_count(ids["ada"]) == 1


async def test_open_thread_leaves_outgoing_unread(inbox):
    storage, ids = inbox

    thread = await messaging.open_thread(storage, ids["ada"], ids["grace"])

    outgoing = [m for m in thread if m.sender_id == ids["ada"]]
    assert [m.is_read for m in outgoing] == [False]
    assert await storage.get_unread_message_count(ids["grace"]) == 1


async def test_open_thread_unknown_user(inbox):
    storage, ids = inbox
    with pytest.raises(HTTPException) as exc:
        await messaging.open_thread(storage, ids["ada"], 999)
    assert exc.value.status_code == 404
    assert exc.value.detail == "User not found"


async def test_send_message(inbox):
    storage, ids = inbox

    sent = await messaging.send_message(storage, ids["linus"], schemas.MessageCreate(recipient_id=ids["grace"], content="hey"))

    assert sent.is_read is False
    assert sent.sender_id == ids["linus"]
    with pytest.raises(HTTPException) as exc:
        await messaging.send_message(storage, ids["linus"], schemas.MessageCreate(recipient_id=999, content="hey"))
    assert exc.value.detail == "Recipient not found"
