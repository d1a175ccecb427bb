"""Branch modules router.

Endpoints:
    GET  /api/branches/{id}/modules    Full module catalog with the branch's activation flags
    PUT  /api/branches/{id}/modules    Enable / disable modules (core modules stay enabled)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.middleware.exceptions import PersistenceFailureError, ResourceNotFoundError
from app.models.branch import Branch
from app.schemas.module import ModuleOut, ModulesOut, ModulesUpdate
from app.services.branch_modules import apply_module_selection, load_module_set
from app.services.setup_orchestrator import require_branch_id
from app.utils.activity import log_activity
from app.utils.branch_locks import branch_lock

router = APIRouter()


async def _get_branch(db: AsyncSession, branch_id: str) -> Branch:
    branch = await db.get(Branch, branch_id)
    if not branch:
        raise ResourceNotFoundError("Branch", branch_id)
    return branch


@router.get("/{branch_id}/modules", response_model=ModulesOut)
async def list_branch_modules(
    branch_id: str,
    db: AsyncSession = Depends(get_db),
):
    branch_id = require_branch_id(branch_id)
    await _get_branch(db, branch_id)
    modules = await load_module_set(db, branch_id)
    return ModulesOut(
        branch_id=branch_id,
        modules=[ModuleOut.model_validate(m) for m in modules],
    )


@router.put("/{branch_id}/modules", response_model=ModulesOut)
async def update_branch_modules(
    branch_id: str,
    body: ModulesUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Apply module toggles. Disabling a core module is rejected with 422."""
    user_id = str(body.user_id) if body.user_id is not None else None
    branch_id = require_branch_id(branch_id)
    requested = {m.code: m.is_enabled for m in body.modules}

    async with branch_lock(branch_id):
        await _get_branch(db, branch_id)
        try:
            modules = await apply_module_selection(db, branch_id, requested, user_id)
            await log_activity(
                db, user_id,
                action="modules_updated", branch_id=branch_id,
                entity_type="branch_module",
                summary=f"Updated {len(requested)} module(s)",
                details={"modules": requested},
            )
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            raise PersistenceFailureError() from exc

    return ModulesOut(
        branch_id=branch_id,
        modules=[ModuleOut.model_validate(m) for m in modules],
    )
