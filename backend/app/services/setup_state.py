"""Branch setup state machine.

States:
    NotStarted   no BranchSetup row for the branch
    in_progress  row exists, completed_at is null
    completed    completed_at is set; step pointer and flags are frozen

Transitions:
    initialize   NotStarted → in_progress (idempotent afterwards)
    save_step    persist payload via StepStore, then mark the step complete
    skip         optional steps only; marks complete without a payload
    go_to        move the pointer without touching completion flags
    finalize     complete the process once every mandatory step is done

A step is never un-completed. Completion flags change only after the
store has flushed the step's payload, so a failed write leaves the
process exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import (
    IncompleteSetupError,
    NotSkippableError,
    ResourceNotFoundError,
    SetupCompletedError,
    SetupNotFoundError,
)
from app.models.branch import Branch
from app.models.branch_setup import BranchSetup
from app.schemas.setup import STEP_PAYLOAD_SCHEMAS
from app.services import progress, step_catalog
from app.services.branch_defaults import provision_defaults
from app.services.step_store import StepStore
from app.utils.activity import log_activity

logger = logging.getLogger(__name__)

IN_PROGRESS = "in_progress"
COMPLETED = "completed"


@dataclass(frozen=True)
class StepRecord:
    step: int
    key: str
    name: str
    description: str
    is_completed: bool
    is_optional: bool


def step_records(process: BranchSetup) -> list[StepRecord]:
    """One record per catalog step, flagged from the process's completed list."""
    completed = set(process.completed_steps or [])
    return [
        StepRecord(
            step=d.step,
            key=d.key,
            name=d.name,
            description=d.description,
            is_completed=d.step in completed,
            is_optional=d.is_optional,
        )
        for d in step_catalog.definitions()
    ]


def progress_of(process: BranchSetup) -> int:
    return progress.compute(step_records(process))


class SetupStateMachine:
    def __init__(self, db: AsyncSession, store: StepStore | None = None):
        self.db = db
        self.store = store or StepStore(db)

    # ── Loading ──────────────────────────────────────────────

    async def load(self, branch_id: str, *, for_update: bool = False) -> BranchSetup | None:
        query = select(BranchSetup).where(BranchSetup.branch_id == branch_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _require(self, branch_id: str, *, for_update: bool = True) -> BranchSetup:
        process = await self.load(branch_id, for_update=for_update)
        if process is None:
            raise SetupNotFoundError(branch_id)
        return process

    async def _get_branch(self, branch_id: str) -> Branch:
        branch = await self.db.get(Branch, branch_id)
        if branch is None:
            raise ResourceNotFoundError("Branch", branch_id)
        return branch

    # ── Transitions ──────────────────────────────────────────

    async def initialize(self, branch_id: str, user_id: str | None = None) -> tuple[BranchSetup, bool]:
        """Create the process for a branch, or return the existing one.

        Returns (process, created). Default modules and store settings are
        provisioned only when the process is created.
        """
        process = await self.load(branch_id, for_update=True)
        if process is not None:
            return process, False

        branch = await self._get_branch(branch_id)
        process = BranchSetup(
            branch_id=branch.id,
            status=IN_PROGRESS,
            current_step=1,
            completed_steps=[],
            setup_data={},
            started_at=datetime.utcnow(),
            started_by=user_id,
        )
        self.db.add(process)
        await self.db.flush()

        await provision_defaults(self.db, branch, user_id)
        await log_activity(
            self.db, user_id,
            action="setup_initialized", branch_id=branch.id,
            entity_type="branch_setup", entity_id=process.id,
            summary=f"Started setup for branch {branch.code}",
        )
        logger.info("Initialized setup for branch %s", branch.id)
        return process, True

    async def status(self, branch_id: str) -> BranchSetup:
        return await self._require(branch_id, for_update=False)

    async def save_step(
        self,
        branch_id: str,
        step_key: str,
        data: dict,
        user_id: str | None = None,
    ) -> BranchSetup:
        definition = step_catalog.get_by_key(step_key)
        process = await self._require(branch_id)
        payload = STEP_PAYLOAD_SCHEMAS[step_key].model_validate(data)
        branch = await self._get_branch(branch_id)

        await self.store.apply(branch, step_key, payload, user_id)

        # The write is flushed; only now does the process change
        process.setup_data = {
            **(process.setup_data or {}),
            step_key: payload.model_dump(mode="json", by_alias=True),
        }
        if not process.is_completed:
            await self._complete_step(process, branch, definition.step, user_id)

        await log_activity(
            self.db, user_id,
            action="setup_step_saved", branch_id=branch_id,
            entity_type="branch_setup", entity_id=process.id,
            summary=f"Saved step {definition.step} ({definition.key})",
        )
        await self.db.flush()
        return process

    async def skip(self, branch_id: str, step: int, user_id: str | None = None) -> BranchSetup:
        definition = step_catalog.get_by_number(step)
        process = await self._require(branch_id)
        if process.is_completed:
            raise SetupCompletedError(branch_id)
        if not definition.is_optional:
            raise NotSkippableError(definition.step, definition.name)

        branch = await self._get_branch(branch_id)
        await self._complete_step(process, branch, definition.step, user_id)
        await log_activity(
            self.db, user_id,
            action="setup_step_skipped", branch_id=branch_id,
            entity_type="branch_setup", entity_id=process.id,
            summary=f"Skipped step {definition.step} ({definition.key})",
        )
        await self.db.flush()
        return process

    async def go_to(self, branch_id: str, step: int) -> BranchSetup:
        step_catalog.get_by_number(step)
        process = await self._require(branch_id)
        if process.is_completed:
            raise SetupCompletedError(branch_id)
        process.current_step = step
        await self.db.flush()
        return process

    async def finalize(self, branch_id: str, user_id: str | None = None) -> BranchSetup:
        """Complete the process once every mandatory step is done.

        Optional steps that were never acted upon are marked skipped.
        A completed process is returned unchanged.
        """
        process = await self._require(branch_id)
        if process.is_completed:
            return process

        outstanding = step_catalog.mandatory_steps() - set(process.completed_steps or [])
        missing = [
            f"Step {d.step} ({d.name})"
            for d in map(step_catalog.get_by_number, sorted(outstanding))
        ]
        if missing:
            raise IncompleteSetupError(missing)

        branch = await self._get_branch(branch_id)
        process.completed_steps = [d.step for d in step_catalog.definitions()]
        await self._finish(process, branch, user_id)
        await self.db.flush()
        return process

    # ── Internals ────────────────────────────────────────────

    async def _complete_step(
        self, process: BranchSetup, branch: Branch, step: int, user_id: str | None
    ) -> None:
        """Mark `step` complete and move the pointer.

        The process completes only when all six steps are complete. Saving
        the last step while a mandatory step is still open therefore does
        not complete it; the pointer returns to the first incomplete step.
        Since the last step is the only optional one, "all steps complete"
        here is the same as "every mandatory step plus the last one".
        """
        completed = set(process.completed_steps or [])
        completed.add(step)
        # Assign a new list so the JSON column is flagged dirty
        process.completed_steps = sorted(completed)

        if len(completed) == step_catalog.TOTAL_STEPS:
            await self._finish(process, branch, user_id)
        elif step == step_catalog.LAST_STEP:
            process.current_step = min(
                d.step for d in step_catalog.definitions() if d.step not in completed
            )
        elif process.current_step == step:
            process.current_step = step + 1

    async def _finish(self, process: BranchSetup, branch: Branch, user_id: str | None) -> None:
        now = datetime.utcnow()
        process.status = COMPLETED
        process.completed_at = now
        process.completed_by = user_id
        process.current_step = step_catalog.LAST_STEP

        branch.status = "active"
        branch.setup_completed_at = now

        await log_activity(
            self.db, user_id,
            action="setup_completed", branch_id=branch.id,
            entity_type="branch_setup", entity_id=process.id,
            summary=f"Completed setup for branch {branch.code}",
        )
        logger.info("Setup completed for branch %s", branch.id)
