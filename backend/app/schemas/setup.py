"""Pydantic schemas for the branch setup workflow.

The HTTP surface speaks camelCase; snake_case keys are accepted on input.
Step payload schemas (`*Data`) validate the `data` object of a step save
before anything is written.
"""

import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Progress responses ──────────────────────────────────────

class StepRecordOut(CamelModel):
    step: int
    key: str
    name: str
    description: str
    is_completed: bool
    is_optional: bool


class SetupOut(CamelModel):
    id: str
    branch_id: str
    current_step: int
    status: str
    progress: int
    started_at: datetime | None = None
    completed_at: datetime | None = None
    completed_by: str | None = None
    setup_data: dict[str, Any] = {}


class SetupStatusOut(CamelModel):
    steps: list[StepRecordOut]
    setup: SetupOut
    progress: int


class ServiceStatusOut(CamelModel):
    initialized: bool
    count: int | None = None


class InitStatusOut(CamelModel):
    is_fully_initialized: bool
    setup_completed: bool
    services: dict[str, ServiceStatusOut]


# ── Requests ────────────────────────────────────────────────

class InitializeRequest(CamelModel):
    user_id: int | str | None = None


class SaveStepRequest(CamelModel):
    step: str
    data: dict[str, Any] = {}
    user_id: int | str | None = None


class SkipStepRequest(CamelModel):
    step: int
    user_id: int | str | None = None


class GoToStepRequest(CamelModel):
    step: int


class FinalizeRequest(CamelModel):
    user_id: int | str | None = None


# ── Step 1: Basic info ──────────────────────────────────────

class OperatingHoursEntry(CamelModel):
    day: str = Field(..., min_length=1, max_length=20)
    open: str = "08:00"
    close: str = "22:00"
    is_open: bool = True

    @field_validator("open", "close")
    @classmethod
    def _hh_mm(cls, v: str) -> str:
        if not _TIME_RE.match(v):
            raise ValueError("Time must be HH:MM (24h)")
        return v


class BasicInfoData(CamelModel):
    operating_hours: list[OperatingHoursEntry] = Field(..., min_length=1, max_length=7)
    settings: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _unique_days(self):
        days = [e.day.lower() for e in self.operating_hours]
        if len(days) != len(set(days)):
            raise ValueError("Each day may appear only once in operating hours")
        return self


# ── Step 2: Modules ─────────────────────────────────────────

class ModuleSelection(CamelModel):
    code: str
    is_enabled: bool


class ModulesData(CamelModel):
    modules: list[ModuleSelection] = Field(..., min_length=1)


# ── Step 3: Staff ───────────────────────────────────────────

class StaffInvitation(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: str = "cashier"
    phone: str | None = Field(None, max_length=30)


class UsersData(CamelModel):
    # May be empty when staff accounts are provisioned outside onboarding
    users: list[StaffInvitation] = []

    @model_validator(mode="after")
    def _unique_emails(self):
        emails = [u.email.lower() for u in self.users]
        if len(emails) != len(set(emails)):
            raise ValueError("Duplicate staff e-mail addresses")
        return self


# ── Step 4: Inventory ───────────────────────────────────────

class InventoryData(CamelModel):
    sync_from_hq: bool = Field(True, alias="syncFromHQ")
    low_stock_threshold: int = Field(10, ge=0)
    auto_reorder: bool = False


# ── Step 5: Payment ─────────────────────────────────────────

class PaymentMethodSelection(CamelModel):
    code: str = Field(..., max_length=50)
    name: str = Field(..., max_length=100)
    enabled: bool = True


class PaymentData(CamelModel):
    payment_methods: list[PaymentMethodSelection] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _at_least_one_enabled(self):
        if not any(p.enabled for p in self.payment_methods):
            raise ValueError("At least one payment method must be enabled")
        return self


# ── Step 6: Printers ────────────────────────────────────────

class PrinterInput(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: str = "receipt"
    ip: str | None = Field(None, max_length=100)
    port: int = Field(9100, ge=1, le=65535)
    is_default: bool = False


class PrinterData(CamelModel):
    printers: list[PrinterInput] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _single_default(self):
        if sum(1 for p in self.printers if p.is_default) > 1:
            raise ValueError("Only one printer can be the default")
        return self


STEP_PAYLOAD_SCHEMAS: dict[str, type[CamelModel]] = {
    "basic_info": BasicInfoData,
    "modules": ModulesData,
    "users": UsersData,
    "inventory": InventoryData,
    "payment": PaymentData,
    "printer": PrinterData,
}
