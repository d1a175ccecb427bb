"""Writes each setup step's payload into the real branch tables.

The state machine treats payloads as opaque; this store is the only place
that knows what a step's data means. Every writer flushes, and any
database failure is surfaced as PersistenceFailureError so the caller
can roll back and retry without the step being marked complete.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.exceptions import PersistenceFailureError
from app.models.branch import Branch
from app.models.branch_staff import BranchStaff
from app.models.inventory_policy import InventoryPolicy
from app.models.payment_method import BranchPaymentMethod
from app.models.printer_config import PrinterConfig
from app.schemas.setup import (
    BasicInfoData,
    InventoryData,
    ModulesData,
    PaymentData,
    PrinterData,
    UsersData,
)
from app.services.branch_modules import apply_module_selection

logger = logging.getLogger(__name__)


class StepStore:
    def __init__(self, db: AsyncSession):
        self.db = db
        self._writers = {
            "basic_info": self._write_basic_info,
            "modules": self._write_modules,
            "users": self._write_users,
            "inventory": self._write_inventory,
            "payment": self._write_payment,
            "printer": self._write_printers,
        }

    async def apply(self, branch: Branch, step_key: str, payload, user_id: str | None) -> None:
        """Persist `payload` for `step_key`. Raises PersistenceFailureError on DB errors."""
        writer = self._writers[step_key]
        try:
            await writer(branch, payload, user_id)
            await self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception("Failed to persist step %s for branch %s", step_key, branch.id)
            raise PersistenceFailureError() from exc

    # ── Step 1 ───────────────────────────────────────────────

    async def _write_basic_info(self, branch: Branch, payload: BasicInfoData, user_id):
        branch.operating_hours = [
            e.model_dump(by_alias=True) for e in payload.operating_hours
        ]
        if payload.settings:
            branch.settings = {**(branch.settings or {}), **payload.settings}

    # ── Step 2 ───────────────────────────────────────────────

    async def _write_modules(self, branch: Branch, payload: ModulesData, user_id):
        requested = {m.code: m.is_enabled for m in payload.modules}
        await apply_module_selection(self.db, branch.id, requested, user_id)

    # ── Step 3 ───────────────────────────────────────────────

    async def _write_users(self, branch: Branch, payload: UsersData, user_id):
        # Upsert invitations by e-mail; provisioned accounts are never removed here
        result = await self.db.execute(
            select(BranchStaff).where(BranchStaff.branch_id == branch.id)
        )
        existing = {s.email.lower(): s for s in result.scalars().all()}

        seen: set[str] = set()
        for invite in payload.users:
            email = invite.email.lower()
            seen.add(email)
            staff = existing.get(email)
            if staff:
                staff.name = invite.name
                staff.role = invite.role
                staff.phone = invite.phone
            else:
                self.db.add(BranchStaff(
                    branch_id=branch.id,
                    name=invite.name,
                    email=email,
                    role=invite.role,
                    phone=invite.phone,
                    status="invited",
                    invited_by=user_id,
                ))

        for email, staff in existing.items():
            if email not in seen and staff.status == "invited":
                await self.db.delete(staff)

    # ── Step 4 ───────────────────────────────────────────────

    async def _write_inventory(self, branch: Branch, payload: InventoryData, user_id):
        result = await self.db.execute(
            select(InventoryPolicy).where(InventoryPolicy.branch_id == branch.id)
        )
        policy = result.scalar_one_or_none()
        if policy is None:
            policy = InventoryPolicy(branch_id=branch.id)
            self.db.add(policy)
        policy.sync_from_hq = payload.sync_from_hq
        policy.low_stock_threshold = payload.low_stock_threshold
        policy.auto_reorder = payload.auto_reorder
        policy.updated_by = user_id

    # ── Step 5 ───────────────────────────────────────────────

    async def _write_payment(self, branch: Branch, payload: PaymentData, user_id):
        await self.db.execute(
            delete(BranchPaymentMethod).where(BranchPaymentMethod.branch_id == branch.id)
        )
        for order, method in enumerate(payload.payment_methods, start=1):
            self.db.add(BranchPaymentMethod(
                branch_id=branch.id,
                code=method.code,
                name=method.name,
                is_enabled=method.enabled,
                sort_order=order,
            ))

    # ── Step 6 ───────────────────────────────────────────────

    async def _write_printers(self, branch: Branch, payload: PrinterData, user_id):
        await self.db.execute(
            delete(PrinterConfig).where(PrinterConfig.branch_id == branch.id)
        )
        for printer in payload.printers:
            self.db.add(PrinterConfig(
                branch_id=branch.id,
                name=printer.name,
                printer_type=printer.type,
                ip_address=printer.ip,
                port=printer.port,
                is_default=printer.is_default,
            ))
