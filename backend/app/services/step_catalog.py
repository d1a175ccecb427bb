"""Static catalog of the six branch setup steps.

The catalog is immutable and shared by every request; nothing here
touches the database.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.middleware.exceptions import UnknownStepError


@dataclass(frozen=True)
class StepDefinition:
    step: int
    key: str
    name: str
    description: str
    is_optional: bool = False


STEP_DEFINITIONS: tuple[StepDefinition, ...] = (
    StepDefinition(1, "basic_info", "Basic information", "Operating hours and basic branch settings"),
    StepDefinition(2, "modules", "Modules & features", "Choose the modules enabled for this branch"),
    StepDefinition(3, "users", "Staff", "Invite the manager and staff for this branch"),
    StepDefinition(4, "inventory", "Inventory", "Stock sync and reorder policy"),
    StepDefinition(5, "payment", "Payment methods", "Payment methods accepted at this branch"),
    StepDefinition(6, "printer", "Printers", "Receipt and kitchen printer configuration", is_optional=True),
)

TOTAL_STEPS = len(STEP_DEFINITIONS)
LAST_STEP = STEP_DEFINITIONS[-1].step

_BY_KEY = {d.key: d for d in STEP_DEFINITIONS}
_BY_NUMBER = {d.step: d for d in STEP_DEFINITIONS}


def definitions() -> tuple[StepDefinition, ...]:
    return STEP_DEFINITIONS


def get_by_key(key: str) -> StepDefinition:
    try:
        return _BY_KEY[key]
    except KeyError:
        raise UnknownStepError(key) from None


def get_by_number(step: int) -> StepDefinition:
    try:
        return _BY_NUMBER[step]
    except KeyError:
        raise UnknownStepError(step) from None


def mandatory_steps() -> set[int]:
    return {d.step for d in STEP_DEFINITIONS if not d.is_optional}
