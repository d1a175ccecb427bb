"""Lightweight helper for recording activity log entries.

Usage:
    await log_activity(
        db, user_id, action="setup_step_saved", branch_id=branch.id,
        entity_type="branch_setup", entity_id=setup.id,
        summary="Saved step 2 (modules)",
    )

The row is added to the current session and committed with the
enclosing transaction; no extra flush is performed.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog


async def log_activity(
    db: AsyncSession,
    user_id: str | None,
    *,
    action: str,
    branch_id: str,
    entity_type: str,
    entity_id: str | None = None,
    summary: str | None = None,
    details: dict | None = None,
) -> None:
    """Append an activity log entry to the current DB session."""
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        branch_id=branch_id,
        entity_type=entity_type,
        entity_id=entity_id,
        summary=summary,
        details=details,
    )
    db.add(entry)
