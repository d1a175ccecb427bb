"""Module activation policy.

Core modules are structurally required: toggling one is a silent no-op,
and any module set that has a core module disabled is rejected before it
is persisted. Both rules hold no matter who the caller is (setup step,
modules endpoint, batch job).
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from app.middleware.exceptions import InvariantViolationError, UnknownModuleError
from app.services.module_catalog import MODULE_CATALOG, MODULES_BY_CODE


@dataclass(frozen=True)
class ModuleConfig:
    code: str
    name: str
    description: str
    icon: str
    is_core: bool
    is_enabled: bool


def build_module_set(enabled: dict[str, bool]) -> list[ModuleConfig]:
    """Materialize the full catalog with a branch's activation flags.

    Modules without a record are disabled, except core modules which are
    always reported enabled.
    """
    return [
        ModuleConfig(
            code=m.code,
            name=m.name,
            description=m.description,
            icon=m.icon,
            is_core=m.is_core,
            is_enabled=m.is_core or enabled.get(m.code, False),
        )
        for m in MODULE_CATALOG
    ]


def toggle(modules: list[ModuleConfig], code: str) -> list[ModuleConfig]:
    """Flip is_enabled for `code` unless it is a core module."""
    return [
        replace(m, is_enabled=not m.is_enabled) if m.code == code and not m.is_core else m
        for m in modules
    ]


def validate_set(modules: list[ModuleConfig]) -> None:
    """Raise InvariantViolationError if any core module is disabled."""
    disabled_core = [m.code for m in modules if m.is_core and not m.is_enabled]
    if disabled_core:
        raise InvariantViolationError(disabled_core)


def merge(current: list[ModuleConfig], requested: dict[str, bool]) -> list[ModuleConfig]:
    """Overlay requested {code: is_enabled} flags on the current set.

    Unknown codes are rejected. The result is not validated; callers run
    validate_set() before persisting it.
    """
    unknown = sorted(code for code in requested if code not in MODULES_BY_CODE)
    if unknown:
        raise UnknownModuleError(unknown)
    return [
        replace(m, is_enabled=requested[m.code]) if m.code in requested else m
        for m in current
    ]
