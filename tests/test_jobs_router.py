"""
Tests for jobs router.

Submit, list, status, cancel and explicit processing over HTTP.
"""

import uuid

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.infra.settings import JobQueueSettings
from src.jobqueue import JobQueueService, JobStatus


@pytest.fixture
def service():
    """Service with zero-latency, always-successful execution."""
    svc = JobQueueService.create(
        JobQueueSettings(
            tick_interval_ms=10,
            min_execution_ms=0,
            max_execution_ms=0,
            failure_rate=0.0,
            auto_start=False,
        )
    )
    yield svc
    if svc.is_running():
        svc.stop_loop(timeout=2)
    svc.wait_idle(timeout=2)


@pytest.fixture
def client(service):
    """Create test client for API."""
    app = create_app(service=service, settings=JobQueueSettings(auto_start=False))
    return TestClient(app)


def _submit(client, **overrides):
    body = {"type": "email", "payload": {"to": "user@example.com"}}
    body.update(overrides)
    return client.post("/jobs", json=body)


class TestSubmitEndpoint:
    """Tests for POST /jobs endpoint."""

    def test_submit_job(self, client):
        """Should create a pending job and return 201."""
        response = _submit(client, config={"delay": 5000})

        assert response.status_code == 201
        data = response.json()
        assert uuid.UUID(data["id"])
        assert data["status"] == "pending"
        assert data["data"]["type"] == "email"
        assert data["data"]["payload"] == {"to": "user@example.com"}
        assert data["data"]["config"]["delay"] == 5000
        assert data["eligible_at"] == data["created_at"] + 5000
        assert data["result"] is None
        assert data["execution_time"] is None

    def test_submit_without_config_defaults_delay(self, client):
        response = _submit(client)

        assert response.status_code == 201
        assert response.json()["data"]["config"]["delay"] == 0

    def test_submit_empty_payload(self, client):
        """Should reject an empty payload with 400."""
        response = _submit(client, payload={})

        assert response.status_code == 400
        assert response.json()["detail"] == "Payload cannot be empty"

    def test_submit_negative_delay(self, client):
        response = _submit(client, config={"delay": -5})

        assert response.status_code == 400
        assert "non-negative" in response.json()["detail"]

    def test_submit_blank_type(self, client):
        response = _submit(client, type="   ")

        assert response.status_code == 400
        assert response.json()["detail"] == "Job type is required and cannot be empty"

    def test_submit_infinite_delay(self, client, service):
        """1e400 is valid JSON but parses to infinity; it must not create a job."""
        response = client.post(
            "/jobs",
            content='{"type": "email", "payload": {"to": "a"}, "config": {"delay": 1e400}}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert service.list_jobs() == []

    def test_submit_float_delay(self, client):
        response = _submit(client, config={"delay": 1.5})

        assert response.status_code == 201
        assert response.json()["data"]["config"]["delay"] == 1.5

    @pytest.mark.parametrize(
        "body",
        [
            {"payload": {"to": "a"}},
            {"type": "email"},
            {"type": "email", "payload": ["a"]},
            {"type": "email", "payload": {"to": "a"}, "config": {"delay": "100"}},
            {"type": "email", "payload": {"to": "a"}, "config": {"delay": True}},
        ],
    )
    def test_submit_malformed_body(self, client, body):
        """Malformed bodies are 400, not 422."""
        response = client.post("/jobs", json=body)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request"


class TestGetEndpoint:
    """Tests for GET /jobs/{job_id} endpoint."""

    def test_get_job(self, client):
        job_id = _submit(client).json()["id"]

        response = client.get(f"/jobs/{job_id}")

        assert response.status_code == 200
        assert response.json()["id"] == job_id

    def test_get_unknown_job(self, client):
        missing = str(uuid.uuid4())

        response = client.get(f"/jobs/{missing}")

        assert response.status_code == 404
        assert response.json()["detail"] == f"Job with id {missing} not found"

    def test_get_malformed_id(self, client):
        response = client.get("/jobs/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["detail"] == "Job ID must be a valid UUID"


class TestListEndpoint:
    """Tests for GET /jobs endpoint."""

    def test_list_jobs(self, client):
        ids = [_submit(client, payload={"n": i}).json()["id"] for i in range(3)]

        response = client.get("/jobs")

        assert response.status_code == 200
        data = response.json()
        assert [j["id"] for j in data["jobs"]] == ids
        assert data["total"] == 3
        assert data["counts"]["pending"] == 3

    def test_list_filtered_by_status(self, client):
        first = _submit(client).json()["id"]
        _submit(client)
        client.delete(f"/jobs/{first}")

        response = client.get("/jobs", params={"status": "cancelled"})

        data = response.json()
        assert [j["id"] for j in data["jobs"]] == [first]
        assert data["counts"]["pending"] == 1

    def test_list_invalid_status(self, client):
        response = client.get("/jobs", params={"status": "sleeping"})
        assert response.status_code == 400


class TestCancelEndpoint:
    """Tests for DELETE /jobs/{job_id} endpoint."""

    def test_cancel_pending_job(self, client):
        job_id = _submit(client, config={"delay": 60000}).json()["id"]

        response = client.delete(f"/jobs/{job_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "cancelled"
        assert data["result"] == {"kind": "error", "message": "Job was cancelled", "code": 499}
        assert data["finished_at"] is not None

    def test_cancel_twice_conflicts(self, client):
        job_id = _submit(client).json()["id"]
        client.delete(f"/jobs/{job_id}")

        response = client.delete(f"/jobs/{job_id}")

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert "cancelled status" in detail
        assert detail.endswith("Only pending jobs can be cancelled.")

    def test_cancel_unknown(self, client):
        response = client.delete(f"/jobs/{uuid.uuid4()}")
        assert response.status_code == 404


class TestProcessEndpoint:
    """Tests for POST /jobs/{job_id}/process endpoint."""

    def test_process_job(self, client, service):
        job_id = _submit(client).json()["id"]

        response = client.post(f"/jobs/{job_id}/process")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["result"]["message"] == "Email sent successfully!"
        assert data["execution_time"] == data["finished_at"] - data["started_at"]
        assert service.get_status(job_id).status == JobStatus.COMPLETED

    def test_process_not_eligible(self, client):
        job_id = _submit(client, config={"delay": 60000}).json()["id"]

        response = client.post(f"/jobs/{job_id}/process")

        assert response.status_code == 409
        assert "not eligible yet" in response.json()["detail"]

    def test_process_completed_job(self, client):
        job_id = _submit(client).json()["id"]
        client.post(f"/jobs/{job_id}/process")

        response = client.post(f"/jobs/{job_id}/process")

        assert response.status_code == 409
        assert "completed status" in response.json()["detail"]

    def test_process_unknown(self, client):
        response = client.post(f"/jobs/{uuid.uuid4()}/process")
        assert response.status_code == 404
