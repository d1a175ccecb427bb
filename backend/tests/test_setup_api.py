"""HTTP tests for the branch setup endpoints."""

import pytest
from fastapi import Depends
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.main import app
from app.routers.branch_setup import get_orchestrator
from app.services.setup_orchestrator import SetupOrchestrator
from app.services.step_store import StepStore

SETUP_URL = "/api/branches/B1/setup"


class BrokenPrinterStore(StepStore):
    async def _write_printers(self, branch, payload, user_id):
        raise OperationalError("DELETE FROM printer_configs", {}, Exception("connection reset"))


async def _save(client, step, data, **extra):
    return await client.put(SETUP_URL, json={"step": step, "data": data, **extra})


@pytest.mark.api
@pytest.mark.asyncio
class TestSetupLifecycle:
    async def test_status_before_initialize(self, client, test_branch):
        response = await client.get(SETUP_URL)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SETUP_NOT_FOUND"

    async def test_initialize_unknown_branch(self, client):
        response = await client.post("/api/branches/NOPE/setup", json={})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    async def test_initialize_response_shape(self, client, test_branch):
        response = await client.post(SETUP_URL, json={"userId": 1})
        assert response.status_code == 200
        body = response.json()

        assert body["progress"] == 0
        assert len(body["steps"]) == 6
        assert body["steps"][0] == {
            "step": 1,
            "key": "basic_info",
            "name": "Basic information",
            "description": "Operating hours and basic branch settings",
            "isCompleted": False,
            "isOptional": False,
        }
        assert [s["isOptional"] for s in body["steps"]] == [False] * 5 + [True]

        setup = body["setup"]
        assert setup["branchId"] == "B1"
        assert setup["currentStep"] == 1
        assert setup["status"] == "in_progress"
        assert setup["startedAt"] is not None
        assert setup["completedAt"] is None

    async def test_initialize_without_body(self, client, test_branch):
        response = await client.post(SETUP_URL)
        assert response.status_code == 200
        assert response.json()["setup"]["currentStep"] == 1

    async def test_full_onboarding_scenario(self, client, test_branch, step_payloads):
        await client.post(SETUP_URL, json={"userId": 1})

        expected = [17, 33, 50, 67, 83]
        for key, progress in zip(
            ["basic_info", "modules", "users", "inventory", "payment"], expected
        ):
            response = await _save(client, key, step_payloads[key], userId=1)
            assert response.status_code == 200, response.text
            assert response.json()["progress"] == progress

        body = response.json()
        assert body["setup"]["currentStep"] == 6
        assert body["setup"]["completedAt"] is None

        response = await _save(client, "printer", step_payloads["printer"], userId=1)
        assert response.status_code == 200
        body = response.json()
        assert body["progress"] == 100
        assert body["setup"]["status"] == "completed"
        assert body["setup"]["completedAt"] is not None
        assert body["setup"]["completedBy"] == "1"
        assert all(s["isCompleted"] for s in body["steps"])
        assert body["setup"]["setupData"]["printer"]["printers"][0]["port"] == 9100

        status = await client.get(SETUP_URL)
        assert status.json()["setup"]["completedAt"] == body["setup"]["completedAt"]

    async def test_skip_optional_printer_step(self, client, test_branch, step_payloads):
        await client.post(SETUP_URL)
        for key in ["basic_info", "modules", "users", "inventory", "payment"]:
            await _save(client, key, step_payloads[key])

        response = await client.post(f"{SETUP_URL}/skip", json={"step": 6})
        assert response.status_code == 200
        assert response.json()["progress"] == 100

    async def test_empty_staff_list_completes_users_step(self, client, test_branch, step_payloads):
        await client.post(SETUP_URL)
        await _save(client, "basic_info", step_payloads["basic_info"])
        await _save(client, "modules", step_payloads["modules"])

        response = await _save(client, "users", {"users": []})
        assert response.status_code == 200, response.text
        body = response.json()
        assert body["progress"] == 50
        assert body["setup"]["currentStep"] == 4
        assert body["steps"][2]["isCompleted"] is True

        readiness = (await client.get("/api/branches/B1/initialize")).json()
        assert readiness["services"]["users"] == {"initialized": False, "count": 0}

    async def test_finalize(self, client, test_branch, step_payloads):
        await client.post(SETUP_URL)
        response = await client.post(f"{SETUP_URL}/complete", json={})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INCOMPLETE_SETUP"
        assert len(response.json()["error"]["details"]["missing"]) == 5

        for key in ["basic_info", "modules", "users", "inventory", "payment"]:
            await _save(client, key, step_payloads[key])
        response = await client.post(f"{SETUP_URL}/complete", json={"userId": "admin"})
        assert response.status_code == 200
        assert response.json()["setup"]["completedBy"] == "admin"


@pytest.mark.api
@pytest.mark.asyncio
class TestSetupErrors:
    async def test_unknown_step_key(self, client, test_branch):
        await client.post(SETUP_URL)
        response = await _save(client, "loyalty", {})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "UNKNOWN_STEP"

    async def test_save_before_initialize(self, client, test_branch, step_payloads):
        response = await _save(client, "basic_info", step_payloads["basic_info"])
        assert response.status_code == 404

    async def test_disabling_core_module_rejected(self, client, test_branch, step_payloads):
        await client.post(SETUP_URL)
        await _save(client, "basic_info", step_payloads["basic_info"])

        response = await _save(client, "modules", {"modules": [{"code": "pos", "isEnabled": False}]})
        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "CORE_MODULE_REQUIRED"
        assert error["details"]["modules"] == ["pos"]

        status = (await client.get(SETUP_URL)).json()
        assert status["progress"] == 17
        assert status["setup"]["currentStep"] == 2

        modules = (await client.get("/api/branches/B1/modules")).json()["modules"]
        assert next(m for m in modules if m["code"] == "pos")["isEnabled"] is True

    async def test_invalid_payload(self, client, test_branch):
        await client.post(SETUP_URL)
        response = await _save(client, "payment", {
            "paymentMethods": [{"code": "cash", "name": "Cash", "enabled": False}],
        })
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

        status = (await client.get(SETUP_URL)).json()
        assert status["progress"] == 0

    async def test_invalid_request_body(self, client, test_branch):
        await client.post(SETUP_URL)
        response = await client.put(SETUP_URL, json={"data": {}})
        assert response.status_code == 422

    @pytest.mark.parametrize("step", [1, 3, 5])
    async def test_skip_mandatory_step(self, client, test_branch, step):
        await client.post(SETUP_URL)
        response = await client.post(f"{SETUP_URL}/skip", json={"step": step})
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "STEP_NOT_SKIPPABLE"

    async def test_skip_unknown_step(self, client, test_branch):
        await client.post(SETUP_URL)
        response = await client.post(f"{SETUP_URL}/skip", json={"step": 9})
        assert response.status_code == 400

    async def test_go_to_step(self, client, test_branch):
        await client.post(SETUP_URL)
        response = await client.put(f"{SETUP_URL}/current-step", json={"step": 4})
        assert response.status_code == 200
        body = response.json()
        assert body["setup"]["currentStep"] == 4
        assert body["progress"] == 0

        response = await client.put(f"{SETUP_URL}/current-step", json={"step": 0})
        assert response.status_code == 400

    async def test_persistence_failure_is_503(self, client, test_branch, step_payloads):
        await client.post(SETUP_URL)
        for key in ["basic_info", "modules", "users", "inventory", "payment"]:
            await _save(client, key, step_payloads[key])

        async def broken_orchestrator(db: AsyncSession = Depends(get_db)):
            return SetupOrchestrator(db, BrokenPrinterStore(db))

        app.dependency_overrides[get_orchestrator] = broken_orchestrator
        try:
            response = await _save(client, "printer", step_payloads["printer"])
        finally:
            del app.dependency_overrides[get_orchestrator]

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "PERSISTENCE_FAILURE"

        status = (await client.get(SETUP_URL)).json()
        assert status["progress"] == 83
        assert status["setup"]["completedAt"] is None


@pytest.mark.api
@pytest.mark.asyncio
class TestInitializationEndpoint:
    async def test_readiness_shape(self, client, test_branch, step_payloads):
        await client.post(SETUP_URL)
        await _save(client, "inventory", step_payloads["inventory"])

        response = await client.get("/api/branches/B1/initialize")
        assert response.status_code == 200
        body = response.json()
        assert body["isFullyInitialized"] is False
        assert body["setupCompleted"] is False
        assert set(body["services"]) == {"modules", "inventory", "users", "payment", "printers"}
        assert body["services"]["inventory"] == {"initialized": True, "count": 1}
        assert body["services"]["users"] == {"initialized": False, "count": 0}

    async def test_readiness_for_branch_without_data(self, client):
        response = await client.get("/api/branches/EMPTY/initialize")
        assert response.status_code == 200
        body = response.json()
        assert body["isFullyInitialized"] is False
        assert not any(s["initialized"] for s in body["services"].values())
