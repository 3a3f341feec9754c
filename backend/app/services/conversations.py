from __future__ import annotations

from typing import Iterable

from app.models import Message


def group_conversations(messages: Iterable[Message], user_id: int) -> list[dict]:
    """
    Fold a flat message list (newest first) into one entry per counterpart.

    The first message seen for a counterpart becomes its last_message;
    unread_count counts unread messages that counterpart sent to `user_id`.
    Insertion order is kept, so conversations come out newest first too.
    """
    conversations: dict[int, dict] = {}

    for m in messages:
        outgoing = m.sender_id == user_id
        other_id = m.receiver_id if outgoing else m.sender_id
        other = m.receiver if outgoing else m.sender

        if other_id not in conversations:
            conversations[other_id] = {
                "id": other_id,
                "other_user": {
                    "id": other_id,
                    "name": other.name if other else "Unknown user",
                    "role": other.role if other else "unknown",
                },
                "last_message": {
                    "message": m.message,
                    "created_at": m.created_at,
                    "read": m.read,
                },
                "unread_count": 0,
            }

        if m.receiver_id == user_id and not m.read:
            conversations[other_id]["unread_count"] += 1

    return list(conversations.values())
