"""Tests for the REST API."""

import pytest
from fastapi.testclient import TestClient

from valibook.api.server import create_app
from valibook.core.types import TableKind


@pytest.fixture
def client(builder):
    """Client for a project with a source of truth and an unlinked export."""
    builder.add("customers", TableKind.SOURCE, {"id": [1, 2, 3], "name": ["a", "b", "c"]})
    builder.add("crm", TableKind.TARGET, {"id": [1, 2], "name": ["a", "x"]})
    builder.store.save()

    with TestClient(create_app(project_path=builder.store.path)) as client:
        yield client


def test_root_and_health(client):
    """The service reports its project."""
    assert client.get("/").json()["name"] == "Valibook API"

    data = client.get("/health").json()
    assert data["status"] == "healthy"
    assert data["project_loaded"] is True
    assert data["num_tables"] == 2
    assert data["num_links"] == 0


def test_tables(client):
    """Tables are listed with column statistics."""
    data = client.get("/api/v1/tables").json()
    assert data["total"] == 2
    assert [t["name"] for t in data["tables"]] == ["customers", "crm"]

    table = client.get("/api/v1/tables/customers").json()
    assert table["kind"] == "SOURCE"
    assert table["row_count"] == 3
    assert table["columns"][0]["unique_count"] == 3

    assert client.get("/api/v1/tables/nope").status_code == 404


def test_discover_and_validate(client):
    """Applied suggestions are used by the next validation."""
    response = client.post("/api/v1/discover", json={"mode": "mappings"})
    assert response.status_code == 200
    assert len(response.json()["suggestions"]) == 2
    assert client.get("/health").json()["num_links"] == 0

    response = client.post("/api/v1/discover", json={"apply": True})
    assert response.json()["applied"] is True
    assert client.get("/health").json()["num_links"] == 2

    response = client.post("/api/v1/validate", json={})
    assert response.status_code == 200
    report = response.json()
    assert report["summary"] == {"totalChecks": 3, "passed": 1, "failed": 2}
    assert {f["type"] for f in report["reconciliation"]} == {"MISMATCH", "MISSING_ROW"}
    assert report["protocol"].startswith("VALIDATION PROTOCOL")
    assert "generatedAt" in report
    assert "ruleFailures" in report


def test_bad_discovery_mode(client):
    """Unknown discovery modes are rejected."""
    response = client.post("/api/v1/discover", json={"mode": "everything"})
    assert response.status_code == 422


def test_validate_scope_setup_error(client):
    """Setup problems are part of a successful response."""
    response = client.post("/api/v1/validate", json={"scope_table": "nope"})
    assert response.status_code == 200
    assert response.json()["setupErrors"][0]["message"] == "Scope table nope not found"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
