"""Readiness aggregation tests."""

import pytest
from sqlalchemy import update

from app.models.branch_staff import BranchStaff
from app.models.printer_config import PrinterConfig
from app.services.initialization import TRACKED_SERVICES, InitializationAggregator
from app.services.setup_orchestrator import SetupOrchestrator

BRANCH_ID = "B1"


@pytest.mark.asyncio
class TestInitializationAggregator:
    async def test_unknown_branch_reports_nothing_initialized(self, db_session):
        status = await InitializationAggregator(db_session).status("nowhere")
        assert set(status.services) == set(TRACKED_SERVICES)
        assert all(not s.initialized and s.count == 0 for s in status.services.values())
        assert status.is_fully_initialized is False

    async def test_modules_initialized_after_setup_starts(self, db_session, test_branch):
        await SetupOrchestrator(db_session).initialize(BRANCH_ID)
        status = await InitializationAggregator(db_session).status(BRANCH_ID)
        # 9 core + tables, promo, loyalty for a regular branch
        assert status.services["modules"].count == 12
        assert status.services["inventory"].initialized is False

    async def test_completed_setup_can_lack_active_users(self, db_session, test_branch, step_payloads):
        orchestrator = SetupOrchestrator(db_session)
        await orchestrator.initialize(BRANCH_ID)
        for key in ["basic_info", "modules", "users", "inventory", "payment", "printer"]:
            await orchestrator.save_step(BRANCH_ID, key, step_payloads[key])

        report = await orchestrator.get_init_status(BRANCH_ID)
        assert report.setup_completed is True
        assert report.status.is_fully_initialized is False
        assert report.status.services["users"].initialized is False
        assert report.status.services["payment"].count == 2
        assert report.status.services["printers"].count == 1
        assert report.status.services["inventory"].count == 1

        await db_session.execute(
            update(BranchStaff)
            .where(BranchStaff.branch_id == BRANCH_ID, BranchStaff.email == "rina@example.com")
            .values(status="active")
        )
        await db_session.commit()

        report = await orchestrator.get_init_status(BRANCH_ID)
        assert report.status.services["users"].count == 1
        assert report.status.is_fully_initialized is True

    async def test_inactive_printers_not_counted(self, db_session, test_branch):
        db_session.add(PrinterConfig(branch_id=BRANCH_ID, name="Old", is_active=False))
        await db_session.commit()
        status = await InitializationAggregator(db_session).status(BRANCH_ID)
        assert status.services["printers"].initialized is False
        assert status.services["printers"].count == 0

    async def test_setup_not_started(self, db_session, test_branch):
        report = await SetupOrchestrator(db_session).get_init_status(BRANCH_ID)
        assert report.setup_completed is False
