from __future__ import annotations

import json
import uuid
from typing import Any

from app.db.connection import connection_lock, get_connection, utc_now
from app.schemas.conversation import Conversation, Message

_UPDATABLE_FIELDS = ("industry", "current_step", "business_profile", "section_content", "messages")


def _dump_profile(profile: Any) -> str | None:
    if profile is None:
        return None
    if hasattr(profile, "model_dump"):
        profile = profile.model_dump(mode="json", exclude_none=True)
    return json.dumps(profile, ensure_ascii=False)


def _dump_messages(messages: list[Any]) -> str:
    rows = [m.model_dump(mode="json") if hasattr(m, "model_dump") else m for m in messages]
    return json.dumps(rows, ensure_ascii=False)


def _row_to_conversation(row) -> Conversation:
    profile = json.loads(row["business_profile_json"]) if row["business_profile_json"] else None
    return Conversation.model_validate(
        {
            "id": row["id"],
            "user_id": row["user_id"],
            "industry": row["industry"],
            "current_step": row["current_step"],
            "business_profile": profile,
            "section_content": json.loads(row["section_content_json"] or "{}"),
            "messages": json.loads(row["messages_json"] or "[]"),
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
    )


def create_conversation(user_id: str | None = None, industry: str | None = None) -> Conversation:
    conn = get_connection()
    now = utc_now().isoformat()
    conversation_id = str(uuid.uuid4())
    with connection_lock():
        conn.execute(
            """
            INSERT INTO conversations (
                id, user_id, industry, current_step, business_profile_json,
                section_content_json, messages_json, created_at, updated_at
            ) VALUES (?, ?, ?, ?, NULL, '{}', '[]', ?, ?)
            """,
            (conversation_id, user_id, industry, "industry_selection", now, now),
        )
    return get_conversation(conversation_id)


def get_conversation(conversation_id: str) -> Conversation | None:
    conn = get_connection()
    with connection_lock():
        row = conn.execute("SELECT * FROM conversations WHERE id = ?", (conversation_id,)).fetchone()
    if row is None:
        return None
    return _row_to_conversation(row)


def update_conversation(conversation_id: str, **updates: Any) -> Conversation | None:
    """Apply the given field updates and bump ``updated_at``; returns None if missing."""
    unknown = set(updates) - set(_UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unsupported conversation fields: {sorted(unknown)}")

    columns: list[str] = []
    values: list[Any] = []
    if "industry" in updates:
        columns.append("industry = ?")
        values.append(updates["industry"])
    if "current_step" in updates:
        columns.append("current_step = ?")
        values.append(updates["current_step"])
    if "business_profile" in updates:
        columns.append("business_profile_json = ?")
        values.append(_dump_profile(updates["business_profile"]))
    if "section_content" in updates:
        columns.append("section_content_json = ?")
        values.append(json.dumps(updates["section_content"] or {}, ensure_ascii=False))
    if "messages" in updates:
        columns.append("messages_json = ?")
        values.append(_dump_messages(updates["messages"] or []))

    columns.append("updated_at = ?")
    values.append(utc_now().isoformat())
    values.append(conversation_id)

    conn = get_connection()
    with connection_lock():
        cur = conn.execute(f"UPDATE conversations SET {', '.join(columns)} WHERE id = ?", values)
        if cur.rowcount == 0:
            return None
    return get_conversation(conversation_id)


def delete_conversation(conversation_id: str) -> bool:
    conn = get_connection()
    with connection_lock():
        cur = conn.execute("DELETE FROM conversations WHERE id = ?", (conversation_id,))
    return cur.rowcount > 0


def list_user_conversations(user_id: str) -> list[Conversation]:
    conn = get_connection()
    with connection_lock():
        rows = conn.execute(
            "SELECT * FROM conversations WHERE user_id = ? ORDER BY updated_at DESC",
            (user_id,),
        ).fetchall()
    return [_row_to_conversation(row) for row in rows]


def add_message(conversation_id: str, message: Message) -> Conversation | None:
    conn = get_connection()
    with connection_lock():
        row = conn.execute(
            "SELECT messages_json FROM conversations WHERE id = ?", (conversation_id,)
        ).fetchone()
        if row is None:
            return None
        messages = json.loads(row["messages_json"] or "[]")
        messages.append(message.model_dump(mode="json"))
        conn.execute(
            "UPDATE conversations SET messages_json = ?, updated_at = ? WHERE id = ?",
            (json.dumps(messages, ensure_ascii=False), utc_now().isoformat(), conversation_id),
        )
    return get_conversation(conversation_id)
