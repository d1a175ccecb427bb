"""Feature modules available to every branch.

Shared read-only across branches. A branch's own activation state lives
in BranchModule rows; core modules are always enabled.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModuleDefinition:
    code: str
    name: str
    description: str
    icon: str
    is_core: bool


MODULE_CATALOG: tuple[ModuleDefinition, ...] = (
    # ── Core ────────────────────────────────────────────────
    ModuleDefinition("dashboard", "Dashboard", "Business overview dashboard", "layout-dashboard", True),
    ModuleDefinition("pos", "POS / Cashier", "Point of sale for sales transactions", "shopping-cart", True),
    ModuleDefinition("inventory", "Inventory", "Stock and inventory management", "package", True),
    ModuleDefinition("products", "Products", "Product catalog and prices", "box", True),
    ModuleDefinition("customers", "Customers", "Customer database", "users", True),
    ModuleDefinition("finance", "Finance", "Finance and accounting", "wallet", True),
    ModuleDefinition("reports", "Reports", "Business reports and analysis", "bar-chart-3", True),
    ModuleDefinition("employees", "Employees", "Employee and shift management", "users", True),
    ModuleDefinition("settings", "Settings", "System settings", "settings", True),
    # ── Optional ────────────────────────────────────────────
    ModuleDefinition("tables", "Table management", "Table management for restaurants and cafes", "utensils", False),
    ModuleDefinition("reservations", "Reservations", "Table reservation system", "calendar", False),
    ModuleDefinition("hpp", "COGS analysis", "Cost of goods sold analysis", "dollar-sign", False),
    ModuleDefinition("suppliers", "Suppliers", "Supplier and purchase order management", "truck", False),
    ModuleDefinition("promo", "Promos & vouchers", "Promotion and voucher management", "ticket", False),
    ModuleDefinition("loyalty", "Loyalty program", "Customer loyalty program", "award", False),
)

MODULES_BY_CODE = {m.code: m for m in MODULE_CATALOG}

# Optional modules switched on when a branch of the given type is initialized
DEFAULT_OPTIONAL_MODULES: dict[str, tuple[str, ...]] = {
    "main": ("tables", "reservations", "hpp", "suppliers", "promo", "loyalty"),
    "branch": ("tables", "promo", "loyalty"),
    "warehouse": ("suppliers",),
    "kiosk": ("promo",),
}


def default_enabled_codes(branch_type: str | None) -> set[str]:
    """Core modules plus the optional defaults for the branch type."""
    optional = DEFAULT_OPTIONAL_MODULES.get(branch_type or "", DEFAULT_OPTIONAL_MODULES["branch"])
    return {m.code for m in MODULE_CATALOG if m.is_core} | set(optional)
