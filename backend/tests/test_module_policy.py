"""Module policy tests: core modules can never end up disabled."""

from dataclasses import replace

import pytest

from app.middleware.exceptions import InvariantViolationError, UnknownModuleError
from app.services import module_policy
from app.services.module_catalog import MODULE_CATALOG, default_enabled_codes

CORE_CODES = [m.code for m in MODULE_CATALOG if m.is_core]


@pytest.fixture
def modules():
    return module_policy.build_module_set({"tables": True, "promo": False})


@pytest.mark.unit
class TestModuleSet:
    def test_core_modules_always_enabled(self):
        modules = module_policy.build_module_set({"pos": False})
        by_code = {m.code: m for m in modules}
        assert all(by_code[c].is_enabled for c in CORE_CODES)

    def test_missing_records_are_disabled(self):
        modules = module_policy.build_module_set({})
        assert not any(m.is_enabled for m in modules if not m.is_core)

    def test_default_codes_per_branch_type(self):
        assert "tables" in default_enabled_codes("branch")
        assert "tables" not in default_enabled_codes("warehouse")
        assert set(CORE_CODES) <= default_enabled_codes("kiosk")
        # Unknown types fall back to the regular branch defaults
        assert default_enabled_codes("food_truck") == default_enabled_codes("branch")


@pytest.mark.unit
class TestToggle:
    def test_toggle_optional_module(self, modules):
        toggled = {m.code: m for m in module_policy.toggle(modules, "tables")}
        assert toggled["tables"].is_enabled is False
        toggled = {m.code: m for m in module_policy.toggle(modules, "promo")}
        assert toggled["promo"].is_enabled is True

    @pytest.mark.parametrize("code", CORE_CODES)
    def test_toggle_core_is_noop(self, modules, code):
        once = module_policy.toggle(modules, code)
        twice = module_policy.toggle(once, code)
        assert once == modules
        assert twice == modules

    def test_toggle_unknown_code_is_noop(self, modules):
        assert module_policy.toggle(modules, "nope") == modules

    def test_toggle_does_not_mutate_input(self, modules):
        before = list(modules)
        module_policy.toggle(modules, "tables")
        assert modules == before


@pytest.mark.unit
class TestValidateSet:
    def test_valid_set_passes(self, modules):
        module_policy.validate_set(modules)

    def test_disabled_core_module_rejected(self, modules):
        broken = [
            replace(m, is_enabled=False) if m.code == "pos" else m
            for m in modules
        ]
        with pytest.raises(InvariantViolationError) as exc_info:
            module_policy.validate_set(broken)
        assert exc_info.value.codes == ["pos"]
        assert exc_info.value.status_code == 422

    def test_merge_then_validate_rejects_core_disable(self, modules):
        merged = module_policy.merge(modules, {"inventory": False, "tables": False})
        with pytest.raises(InvariantViolationError):
            module_policy.validate_set(merged)

    def test_merge_applies_optional_flags(self, modules):
        merged = {m.code: m for m in module_policy.merge(modules, {"loyalty": True})}
        assert merged["loyalty"].is_enabled is True
        assert merged["tables"].is_enabled is True

    def test_merge_rejects_unknown_codes(self, modules):
        with pytest.raises(UnknownModuleError) as exc_info:
            module_policy.merge(modules, {"teleport": True, "pos": True})
        assert exc_info.value.codes == ["teleport"]
