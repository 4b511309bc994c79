from __future__ import annotations

import json
import uuid
from typing import Any

from app.db.connection import connection_lock, get_connection, utc_now
from app.schemas.site_config import SiteDraft


def _row_to_draft(row) -> SiteDraft:
    launch = json.loads(row["launch_preferences_json"]) if row["launch_preferences_json"] else None
    return SiteDraft.model_validate(
        {
            "id": row["id"],
            "session_id": row["session_id"],
            "business_profile": json.loads(row["business_profile_json"] or "{}"),
            "content": json.loads(row["content_json"] or "{}"),
            "site_config": json.loads(row["site_config_json"] or "{}"),
            "status": row["status"],
            "slug": row["slug"],
            "published_at": row["published_at"],
            "launch_preferences": launch,
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
    )


def _fetch_one(query: str, params: tuple) -> SiteDraft | None:
    conn = get_connection()
    with connection_lock():
        row = conn.execute(query, params).fetchone()
    return _row_to_draft(row) if row is not None else None


def save_site_draft(
    *,
    session_id: str,
    business_profile: dict[str, Any],
    content: dict[str, Any],
    site_config: dict[str, Any],
) -> SiteDraft:
    """Insert a draft for the session or overwrite the existing one."""
    conn = get_connection()
    now = utc_now().isoformat()
    with connection_lock():
        existing = conn.execute(
            "SELECT id FROM site_drafts WHERE session_id = ?", (session_id,)
        ).fetchone()
        if existing is None:
            conn.execute(
                """
                INSERT INTO site_drafts (
                    id, session_id, business_profile_json, content_json, site_config_json,
                    status, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(uuid.uuid4()),
                    session_id,
                    json.dumps(business_profile or {}, ensure_ascii=False),
                    json.dumps(content or {}, ensure_ascii=False),
                    json.dumps(site_config or {}, ensure_ascii=False),
                    "building",
                    now,
                    now,
                ),
            )
        else:
            conn.execute(
                """
                UPDATE site_drafts
                SET business_profile_json = ?, content_json = ?, site_config_json = ?, updated_at = ?
                WHERE session_id = ?
                """,
                (
                    json.dumps(business_profile or {}, ensure_ascii=False),
                    json.dumps(content or {}, ensure_ascii=False),
                    json.dumps(site_config or {}, ensure_ascii=False),
                    now,
                    session_id,
                ),
            )
    return get_site_by_session(session_id)


def get_site(site_id: str) -> SiteDraft | None:
    return _fetch_one("SELECT * FROM site_drafts WHERE id = ?", (site_id,))


def get_site_by_session(session_id: str) -> SiteDraft | None:
    return _fetch_one("SELECT * FROM site_drafts WHERE session_id = ?", (session_id,))


def get_site_by_slug(slug_or_id: str) -> SiteDraft | None:
    return _fetch_one(
        "SELECT * FROM site_drafts WHERE slug = ? OR id = ? LIMIT 1",
        (slug_or_id, slug_or_id),
    )


def update_site(
    site_id: str,
    *,
    status: str | None = None,
    launch_preferences: dict[str, Any] | None = None,
) -> SiteDraft | None:
    columns: list[str] = []
    values: list[Any] = []
    if status is not None:
        columns.append("status = ?")
        values.append(status)
    if launch_preferences is not None:
        columns.append("launch_preferences_json = ?")
        values.append(json.dumps(launch_preferences, ensure_ascii=False))
    columns.append("updated_at = ?")
    values.append(utc_now().isoformat())
    values.append(site_id)

    conn = get_connection()
    with connection_lock():
        cur = conn.execute(f"UPDATE site_drafts SET {', '.join(columns)} WHERE id = ?", values)
        if cur.rowcount == 0:
            return None
    return get_site(site_id)


def publish_site(site_id: str, slug: str) -> SiteDraft | None:
    now = utc_now().isoformat()
    conn = get_connection()
    with connection_lock():
        cur = conn.execute(
            """
            UPDATE site_drafts
            SET slug = ?, published_at = ?, status = 'launched', updated_at = ?
            WHERE id = ?
            """,
            (slug, now, now, site_id),
        )
        if cur.rowcount == 0:
            return None
    return get_site(site_id)
