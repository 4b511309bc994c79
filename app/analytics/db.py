from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from app.core.config import settings


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_db_path() -> Path:
    return Path(settings.analytics_db_path)


def _connect() -> sqlite3.Connection:
    db_path = _get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS component_usage (
            id TEXT PRIMARY KEY,
            selected_at TEXT NOT NULL,
            site_id TEXT NOT NULL,
            section_type TEXT NOT NULL,
            variant_number INTEGER NOT NULL,
            is_override INTEGER NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_component_usage_site
        ON component_usage (site_id, selected_at)
        """
    )
    return conn


def init_db() -> None:
    if not settings.analytics_enabled:
        return
    with _connect() as conn:
        conn.commit()
    purge_old_records()


def track_component_usage(
    *,
    site_id: str,
    section_type: str,
    variant_number: int,
    is_override: bool,
) -> str | None:
    if not settings.analytics_enabled:
        return None
    usage_id = f"usage_{uuid.uuid4().hex[:12]}"
    with _connect() as conn:
        conn.execute(
            """
            INSERT INTO component_usage (
                id, selected_at, site_id, section_type, variant_number, is_override
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                usage_id,
                _utc_now(),
                site_id,
                section_type,
                int(variant_number),
                1 if is_override else 0,
            ),
        )
        conn.commit()
    return usage_id


def get_site_component_usage(site_id: str) -> list[dict[str, Any]]:
    if not settings.analytics_enabled:
        return []
    with _connect() as conn:
        cur = conn.execute(
            """
            SELECT section_type, variant_number, is_override, selected_at
            FROM component_usage
            WHERE site_id = ?
            ORDER BY selected_at DESC, rowid DESC
            """,
            (site_id,),
        )
        rows = cur.fetchall()
    return [
        {
            "section_type": section_type,
            "variant_number": variant_number,
            "is_override": bool(is_override),
            "selected_at": selected_at,
        }
        for section_type, variant_number, is_override, selected_at in rows
    ]


def get_override_stats() -> dict[str, Any]:
    stats: dict[str, Any] = {
        "total_overrides": 0,
        "overrides_by_section": {},
        "overrides_by_variant": {},
        "most_overridden_section": None,
    }
    if not settings.analytics_enabled:
        return stats

    with _connect() as conn:
        by_section = conn.execute(
            """
            SELECT section_type, COUNT(*) AS count
            FROM component_usage
            WHERE is_override = 1
            GROUP BY section_type
            ORDER BY count DESC, section_type ASC
            """
        ).fetchall()
        by_variant = conn.execute(
            """
            SELECT variant_number, COUNT(*) AS count
            FROM component_usage
            WHERE is_override = 1
            GROUP BY variant_number
            ORDER BY variant_number ASC
            """
        ).fetchall()

    stats["overrides_by_section"] = {section: count for section, count in by_section}
    stats["overrides_by_variant"] = {int(variant): count for variant, count in by_variant}
    stats["total_overrides"] = sum(count for _, count in by_section)
    if by_section:
        stats["most_overridden_section"] = by_section[0][0]
    return stats


def purge_old_records() -> dict[str, int]:
    if not settings.analytics_enabled:
        return {"component_usage": 0}

    retention = max(1, int(settings.analytics_retention_days))
    with _connect() as conn:
        cur = conn.execute(
            "DELETE FROM component_usage WHERE selected_at < datetime('now', ?)",
            (f"-{retention} days",),
        )
        deleted = int(cur.rowcount or 0)
        conn.commit()
    return {"component_usage": deleted}


def clear_component_usage() -> None:
    with _connect() as conn:
        conn.execute("DELETE FROM component_usage")
        conn.commit()
