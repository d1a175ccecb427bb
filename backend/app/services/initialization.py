"""Readiness of the subsystems a branch depends on.

Read-only: every call recounts the provisioning records, and nothing here
touches the setup process. A branch can finish the setup workflow while a
service still reports `initialized: false` (for example when no staff
account has been activated yet); callers get both facts side by side.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.branch_module import BranchModule
from app.models.branch_staff import BranchStaff
from app.models.inventory_policy import InventoryPolicy
from app.models.payment_method import BranchPaymentMethod
from app.models.printer_config import PrinterConfig

TRACKED_SERVICES = ("modules", "inventory", "users", "payment", "printers")


@dataclass(frozen=True)
class ServiceStatus:
    initialized: bool
    count: int | None = None


@dataclass(frozen=True)
class InitializationStatus:
    branch_id: str
    services: dict[str, ServiceStatus]

    @property
    def is_fully_initialized(self) -> bool:
        return all(s.initialized for s in self.services.values())


class InitializationAggregator:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *criteria) -> int:
        result = await self.db.execute(
            select(func.count(model.id)).where(*criteria)
        )
        return int(result.scalar() or 0)

    async def status(self, branch_id: str) -> InitializationStatus:
        counts = {
            "modules": await self._count(
                BranchModule,
                BranchModule.branch_id == branch_id,
                BranchModule.is_enabled == True,  # noqa: E712
            ),
            "inventory": await self._count(
                InventoryPolicy, InventoryPolicy.branch_id == branch_id
            ),
            # Invitations do not count, only provisioned accounts
            "users": await self._count(
                BranchStaff,
                BranchStaff.branch_id == branch_id,
                BranchStaff.status == "active",
            ),
            "payment": await self._count(
                BranchPaymentMethod,
                BranchPaymentMethod.branch_id == branch_id,
                BranchPaymentMethod.is_enabled == True,  # noqa: E712
            ),
            "printers": await self._count(
                PrinterConfig,
                PrinterConfig.branch_id == branch_id,
                PrinterConfig.is_active == True,  # noqa: E712
            ),
        }
        return InitializationStatus(
            branch_id=branch_id,
            services={
                name: ServiceStatus(initialized=counts[name] > 0, count=counts[name])
                for name in TRACKED_SERVICES
            },
        )
