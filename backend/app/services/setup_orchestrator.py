"""Façade over the setup workflow used by the HTTP layer and the CLI.

Validates arguments, serializes writes per branch, and owns the
transaction boundary: a mutating call commits on success and rolls back
on any error, so a failed call never leaves partial state behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import BackofficeException, PersistenceFailureError
from app.models.branch_setup import BranchSetup
from app.services import step_catalog
from app.services.initialization import InitializationAggregator, InitializationStatus
from app.services.setup_state import SetupStateMachine, StepRecord, progress_of, step_records
from app.services.step_store import StepStore
from app.utils.branch_locks import branch_lock

logger = logging.getLogger(__name__)


@dataclass
class SetupSnapshot:
    process: BranchSetup
    steps: list[StepRecord]
    progress: int


@dataclass
class ReadinessReport:
    status: InitializationStatus
    setup_completed: bool


def _user_ref(user_id) -> str | None:
    return str(user_id) if user_id is not None else None


def require_branch_id(branch_id: str | None) -> str:
    """Return the stripped branch id; every lock and lookup uses this form."""
    if not branch_id or not str(branch_id).strip():
        raise BackofficeException(
            "Branch identifier is required",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="BRANCH_ID_REQUIRED",
        )
    return str(branch_id).strip()


class SetupOrchestrator:
    def __init__(self, db: AsyncSession, store: StepStore | None = None):
        self.db = db
        self.machine = SetupStateMachine(db, store)
        self.aggregator = InitializationAggregator(db)

    # ── Queries ──────────────────────────────────────────────

    async def get_status(self, branch_id: str) -> SetupSnapshot:
        branch_id = require_branch_id(branch_id)
        process = await self.machine.status(branch_id)
        return self._snapshot(process)

    async def get_init_status(self, branch_id: str) -> ReadinessReport:
        branch_id = require_branch_id(branch_id)
        init_status = await self.aggregator.status(branch_id)
        process = await self.machine.load(branch_id)
        return ReadinessReport(
            status=init_status,
            setup_completed=bool(process and process.is_completed),
        )

    # ── Commands ─────────────────────────────────────────────

    async def initialize(self, branch_id: str, user_id=None) -> SetupSnapshot:
        branch_id = require_branch_id(branch_id)

        async def _op():
            process, _created = await self.machine.initialize(branch_id, _user_ref(user_id))
            return process

        return await self._write(branch_id, _op)

    async def save_step(self, branch_id: str, step_key: str, data: dict, user_id=None) -> SetupSnapshot:
        branch_id = require_branch_id(branch_id)
        step_catalog.get_by_key(step_key)
        return await self._write(
            branch_id,
            lambda: self.machine.save_step(branch_id, step_key, data or {}, _user_ref(user_id)),
        )

    async def skip_step(self, branch_id: str, step: int, user_id=None) -> SetupSnapshot:
        branch_id = require_branch_id(branch_id)
        step_catalog.get_by_number(step)
        return await self._write(
            branch_id, lambda: self.machine.skip(branch_id, step, _user_ref(user_id))
        )

    async def go_to(self, branch_id: str, step: int) -> SetupSnapshot:
        branch_id = require_branch_id(branch_id)
        step_catalog.get_by_number(step)
        return await self._write(branch_id, lambda: self.machine.go_to(branch_id, step))

    async def finalize(self, branch_id: str, user_id=None) -> SetupSnapshot:
        branch_id = require_branch_id(branch_id)
        return await self._write(
            branch_id, lambda: self.machine.finalize(branch_id, _user_ref(user_id))
        )

    # ── Internals ────────────────────────────────────────────

    async def _write(
        self, branch_id: str, operation: Callable[[], Awaitable[BranchSetup]]
    ) -> SetupSnapshot:
        async with branch_lock(branch_id):
            try:
                process = await operation()
                await self.db.commit()
            except SQLAlchemyError as exc:
                await self.db.rollback()
                logger.exception("Setup write failed for branch %s", branch_id)
                raise PersistenceFailureError() from exc
            except Exception:
                await self.db.rollback()
                raise
        return self._snapshot(process)

    @staticmethod
    def _snapshot(process: BranchSetup) -> SetupSnapshot:
        return SetupSnapshot(
            process=process,
            steps=step_records(process),
            progress=progress_of(process),
        )
