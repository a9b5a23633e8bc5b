import pytest
from fastapi.testclient import TestClient

from conftest import VALID_PROMPT, FakeEngine

from flowgen.ir.errors import EngineError
from flowgen.main import app
from flowgen.pipeline.orchestrator import WorkflowOrchestrator, get_orchestrator


@pytest.fixture
def client(orchestrator):
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_orchestrate_success(client):
    response = client.post(
        "/automations/orchestrate",
        json={"tenantId": "tenant-1", "prompt": VALID_PROMPT},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [n["id"] for n in body["workflow"]["nodes"]] == ["node_1", "node_2"]
    assert body["workflow"]["nodes"][1]["position"]["y"] == 180


def test_security_rejection_status(client):
    response = client.post(
        "/automations/orchestrate",
        json={"tenantId": "tenant-1", "prompt": "¿Cuál es la capital de Francia?"},
    )

    assert response.status_code == 422
    assert response.json()["errorKind"] == "security_rejected"


def test_rate_limit_status_and_retry_after(client):
    for _ in range(10):
        client.post("/automations/orchestrate", json={"tenantId": "t", "prompt": VALID_PROMPT})

    response = client.post(
        "/automations/orchestrate", json={"tenantId": "t", "prompt": VALID_PROMPT}
    )

    assert response.status_code == 429
    assert response.headers["Retry-After"] == str(
        response.json()["rateLimitInfo"]["resetInSeconds"]
    )


def test_engine_failure_status(limiter, guard):
    broken = WorkflowOrchestrator(
        engine=FakeEngine(error=EngineError("down")), rate_limiter=limiter, guard=guard
    )
    app.dependency_overrides[get_orchestrator] = lambda: broken
    try:
        response = TestClient(app).post(
            "/automations/orchestrate", json={"tenantId": "t", "prompt": VALID_PROMPT}
        )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["errorKind"] == "unexpected_error"


def test_missing_tenant_is_a_request_error(client):
    response = client.post("/automations/orchestrate", json={"prompt": VALID_PROMPT})
    assert response.status_code == 422
