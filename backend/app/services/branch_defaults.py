"""Default provisioning performed when a branch setup is first initialized.

  - Enables core modules plus the optional defaults for the branch type
  - Seeds general, POS and inventory store settings

Every write is find-or-create, so running it twice changes nothing.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.branch import Branch
from app.models.branch_module import BranchModule
from app.models.store_setting import StoreSetting
from app.services.module_catalog import MODULE_CATALOG, default_enabled_codes

logger = logging.getLogger(__name__)

# (category, key, value, data_type); None value → filled from the branch
DEFAULT_SETTINGS: tuple[tuple[str, str, str | None, str], ...] = (
    ("general", "currency", "IDR", "string"),
    ("general", "timezone", "Asia/Jakarta", "string"),
    ("pos", "receipt_header", None, "string"),
    ("pos", "receipt_footer", "Thank you for your visit", "string"),
    ("pos", "tax_enabled", "true", "boolean"),
    ("pos", "tax_rate", "11", "number"),
    ("inventory", "low_stock_threshold", "10", "number"),
    ("inventory", "auto_reorder", "false", "boolean"),
)


async def enable_default_modules(
    db: AsyncSession, branch: Branch, user_id: str | None = None
) -> int:
    """Create a BranchModule row for every catalog module that has none.

    Returns the number of rows created.
    """
    enabled_codes = default_enabled_codes(branch.branch_type or settings.default_branch_type)
    result = await db.execute(
        select(BranchModule.module_code).where(BranchModule.branch_id == branch.id)
    )
    existing = set(result.scalars().all())

    created = 0
    for mod in MODULE_CATALOG:
        if mod.code in existing:
            continue
        is_enabled = mod.is_core or mod.code in enabled_codes
        db.add(BranchModule(
            branch_id=branch.id,
            module_code=mod.code,
            is_enabled=is_enabled,
            enabled_by=user_id if is_enabled else None,
        ))
        created += 1
    await db.flush()
    return created


async def seed_store_settings(db: AsyncSession, branch: Branch) -> int:
    result = await db.execute(
        select(StoreSetting.category, StoreSetting.key).where(
            StoreSetting.branch_id == branch.id
        )
    )
    existing = {(row[0], row[1]) for row in result.all()}

    created = 0
    for category, key, value, data_type in DEFAULT_SETTINGS:
        if (category, key) in existing:
            continue
        db.add(StoreSetting(
            branch_id=branch.id,
            category=category,
            key=key,
            value=value if value is not None else branch.name,
            data_type=data_type,
        ))
        created += 1
    await db.flush()
    return created


async def provision_defaults(
    db: AsyncSession, branch: Branch, user_id: str | None = None
) -> None:
    modules = await enable_default_modules(db, branch, user_id)
    store_settings = await seed_store_settings(db, branch)
    logger.info(
        "Provisioned defaults for branch %s: %d modules, %d settings",
        branch.id, modules, store_settings,
    )
