"""Aggregate model imports for Alembic auto-detection."""

from app.models.branch import Branch  # noqa: F401
from app.models.branch_setup import BranchSetup  # noqa: F401

# ── Provisioning records touched by the setup steps ─────────
from app.models.branch_module import BranchModule  # noqa: F401
from app.models.branch_staff import BranchStaff  # noqa: F401
from app.models.inventory_policy import InventoryPolicy  # noqa: F401
from app.models.payment_method import BranchPaymentMethod  # noqa: F401
from app.models.printer_config import PrinterConfig  # noqa: F401
from app.models.store_setting import StoreSetting  # noqa: F401

# ── Audit ───────────────────────────────────────────────────
from app.models.activity_log import ActivityLog  # noqa: F401
