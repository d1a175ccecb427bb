"""Branch setup router — guided six-step onboarding with save/resume.

Endpoints:
  GET  /api/branches/{id}/setup               → steps + pointer + progress (404 if not initialized)
  POST /api/branches/{id}/setup               → initialize (or return existing) process
  PUT  /api/branches/{id}/setup               → save one step's data and advance
  POST /api/branches/{id}/setup/skip          → skip an optional step
  PUT  /api/branches/{id}/setup/current-step  → move the pointer without completing anything
  POST /api/branches/{id}/setup/complete      → finalize once mandatory steps are done
  GET  /api/branches/{id}/initialize          → readiness of downstream services

Design:
  - Each step writes into the real branch tables (modules, staff, …),
    not a staging area; the payload is also kept on the setup row.
  - Progress is derived from completed steps, never set by the caller.
  - Step 6 (printers) is optional and may be skipped.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.setup import (
    FinalizeRequest,
    GoToStepRequest,
    InitStatusOut,
    InitializeRequest,
    SaveStepRequest,
    ServiceStatusOut,
    SetupOut,
    SetupStatusOut,
    SkipStepRequest,
    StepRecordOut,
)
from app.services.setup_orchestrator import SetupOrchestrator, SetupSnapshot

router = APIRouter()


def get_orchestrator(db: AsyncSession = Depends(get_db)) -> SetupOrchestrator:
    return SetupOrchestrator(db)


def _make_status(snapshot: SetupSnapshot) -> SetupStatusOut:
    """Build the setup response from an orchestrator snapshot."""
    process = snapshot.process
    return SetupStatusOut(
        steps=[StepRecordOut.model_validate(s) for s in snapshot.steps],
        setup=SetupOut(
            id=process.id,
            branch_id=process.branch_id,
            current_step=process.current_step,
            status=process.status,
            progress=snapshot.progress,
            started_at=process.started_at,
            completed_at=process.completed_at,
            completed_by=process.completed_by,
            setup_data=process.setup_data or {},
        ),
        progress=snapshot.progress,
    )


# ── Setup process ────────────────────────────────────────────

@router.get("/{branch_id}/setup", response_model=SetupStatusOut)
async def get_setup_status(
    branch_id: str,
    orchestrator: SetupOrchestrator = Depends(get_orchestrator),
):
    return _make_status(await orchestrator.get_status(branch_id))


@router.post("/{branch_id}/setup", response_model=SetupStatusOut)
async def initialize_setup(
    branch_id: str,
    body: InitializeRequest | None = None,
    orchestrator: SetupOrchestrator = Depends(get_orchestrator),
):
    """Start onboarding for a branch. Calling it again returns the existing process."""
    user_id = body.user_id if body else None
    return _make_status(await orchestrator.initialize(branch_id, user_id))


@router.put("/{branch_id}/setup", response_model=SetupStatusOut)
async def save_setup_step(
    branch_id: str,
    body: SaveStepRequest,
    orchestrator: SetupOrchestrator = Depends(get_orchestrator),
):
    """Save the data of one step (by key) and mark it complete."""
    return _make_status(
        await orchestrator.save_step(branch_id, body.step, body.data, body.user_id)
    )


@router.post("/{branch_id}/setup/skip", response_model=SetupStatusOut)
async def skip_setup_step(
    branch_id: str,
    body: SkipStepRequest,
    orchestrator: SetupOrchestrator = Depends(get_orchestrator),
):
    return _make_status(await orchestrator.skip_step(branch_id, body.step, body.user_id))


@router.put("/{branch_id}/setup/current-step", response_model=SetupStatusOut)
async def go_to_setup_step(
    branch_id: str,
    body: GoToStepRequest,
    orchestrator: SetupOrchestrator = Depends(get_orchestrator),
):
    return _make_status(await orchestrator.go_to(branch_id, body.step))


@router.post("/{branch_id}/setup/complete", response_model=SetupStatusOut)
async def complete_setup(
    branch_id: str,
    body: FinalizeRequest | None = None,
    orchestrator: SetupOrchestrator = Depends(get_orchestrator),
):
    """Finalize setup. All mandatory steps (1-5) must be completed."""
    user_id = body.user_id if body else None
    return _make_status(await orchestrator.finalize(branch_id, user_id))


# ── Readiness ────────────────────────────────────────────────

@router.get("/{branch_id}/initialize", response_model=InitStatusOut)
async def get_initialization_status(
    branch_id: str,
    orchestrator: SetupOrchestrator = Depends(get_orchestrator),
):
    report = await orchestrator.get_init_status(branch_id)
    return InitStatusOut(
        is_fully_initialized=report.status.is_fully_initialized,
        setup_completed=report.setup_completed,
        services={
            name: ServiceStatusOut(initialized=s.initialized, count=s.count)
            for name, s in report.status.services.items()
        },
    )
