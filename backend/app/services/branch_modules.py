"""Branch module activation: read and write a branch's module set.

Shared by the modules endpoints and the `modules` setup step so the core
module rule is enforced in one place.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.branch_module import BranchModule
from app.services import module_policy
from app.services.module_policy import ModuleConfig


async def load_module_set(db: AsyncSession, branch_id: str) -> list[ModuleConfig]:
    result = await db.execute(
        select(BranchModule).where(BranchModule.branch_id == branch_id)
    )
    enabled = {bm.module_code: bm.is_enabled for bm in result.scalars().all()}
    return module_policy.build_module_set(enabled)


async def apply_module_selection(
    db: AsyncSession,
    branch_id: str,
    requested: dict[str, bool],
    user_id: str | None = None,
) -> list[ModuleConfig]:
    """Validate and persist a {code: is_enabled} selection.

    Raises InvariantViolationError (nothing written) if the resulting set
    would disable a core module.
    """
    current = await load_module_set(db, branch_id)
    updated = module_policy.merge(current, requested)
    module_policy.validate_set(updated)

    result = await db.execute(
        select(BranchModule).where(BranchModule.branch_id == branch_id)
    )
    existing = {bm.module_code: bm for bm in result.scalars().all()}
    now = datetime.utcnow()

    for mod in updated:
        record = existing.get(mod.code)
        if record is None:
            db.add(BranchModule(
                branch_id=branch_id,
                module_code=mod.code,
                is_enabled=mod.is_enabled,
                enabled_by=user_id if mod.is_enabled else None,
                enabled_at=now if mod.is_enabled else None,
            ))
        elif record.is_enabled != mod.is_enabled:
            record.is_enabled = mod.is_enabled
            if mod.is_enabled:
                record.enabled_by = user_id
                record.enabled_at = now
    await db.flush()
    return updated
