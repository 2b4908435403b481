"""Tests for the workspace, project and task listing endpoints."""

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from taskpilot.api import deps
from taskpilot.core.config import settings
from taskpilot.main import create_app
from taskpilot.platform.listings import TASK_FIELDS
from taskpilot.schemas.credentials import Credentials

TOKEN = {"x-asana-token": "test-token"}


@pytest.fixture
def app(client_factory):
    """Create the application with request clients bound to the fake API."""

    async def fake_client(credentials: Credentials = Depends(deps.get_credentials)):
        async with client_factory(credentials) as client:
            yield client

    application = create_app()
    application.dependency_overrides[deps.get_asana_client] = fake_client
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """Create a test client."""
    return TestClient(app)


def test_list_workspaces(client, fake_asana):
    """Test that every visible workspace is returned."""
    fake_asana.add_workspace("ws1", "Engineering")
    fake_asana.add_workspace("ws2", "Marketing")

    response = client.get("/api/v1/workspaces", headers=TOKEN)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "workspaces": [
            {"gid": "ws1", "name": "Engineering"},
            {"gid": "ws2", "name": "Marketing"},
        ],
    }


def test_list_projects_of_default_workspace(client, fake_asana):
    """Test that only the default workspace's projects are listed."""
    fake_asana.add_project("proj1", workspace="ws1", name="Launch")
    fake_asana.add_project("proj2", workspace="ws2", name="Other")

    response = client.get("/api/v1/projects", headers={**TOKEN, "x-workspace-gid": "ws1"})

    assert response.status_code == 200
    assert response.json()["projects"] == [{"gid": "proj1", "name": "Launch"}]
    assert fake_asana.calls_to("GET", "/workspaces/ws1/projects")


def test_list_projects_requires_workspace(client, fake_asana):
    """Test that listing projects without a workspace is rejected before any remote call."""
    response = client.get("/api/v1/projects", headers=TOKEN)

    assert response.status_code == 400
    assert response.json()["detail"] == "Please configure token and workspace first"
    assert fake_asana.calls == []


@pytest.mark.parametrize("path", ["/api/v1/workspaces", "/api/v1/projects", "/api/v1/tasks"])
def test_listings_require_token(client, fake_asana, path):
    """Test that every listing rejects a request without a token."""
    response = client.get(path, headers={"x-workspace-gid": "ws1"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please configure credentials first"
    assert fake_asana.calls == []


def test_list_tasks_prefers_project(client, fake_asana):
    """Test that the default project wins over user and workspace."""
    fake_asana.add_task("t1", projects=["proj1"], name="In project")
    fake_asana.add_task("t2", name="Elsewhere")

    response = client.get(
        "/api/v1/tasks",
        headers={
            **TOKEN,
            "x-workspace-gid": "ws1",
            "x-project-gid": "proj1",
            "x-user-gid": "u1",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [task["gid"] for task in body["tasks"]] == ["t1"]
    assert body["count"] == 1
    (call,) = fake_asana.calls_to("GET", "/projects/proj1/tasks")
    assert call.params["opt_fields"] == TASK_FIELDS


def test_list_tasks_of_user_in_workspace(client, fake_asana):
    """Test that without a project the user's tasks in the workspace are listed."""
    fake_asana.add_task("t1", assignee="u1")
    fake_asana.add_task("t2", assignee="u2")

    response = client.get(
        "/api/v1/tasks", headers={**TOKEN, "x-workspace-gid": "ws1", "x-user-gid": "u1"}
    )

    assert response.status_code == 200
    assert [task["gid"] for task in response.json()["tasks"]] == ["t1"]
    (call,) = fake_asana.calls_to("GET", "/tasks")
    assert call.params["assignee"] == "u1"
    assert call.params["workspace"] == "ws1"
    assert call.params["opt_fields"] == TASK_FIELDS


def test_list_tasks_searches_workspace(client, fake_asana):
    """Test that with only a workspace its tasks are searched."""
    fake_asana.add_task("t1", workspace="ws1")
    fake_asana.add_task("t2", workspace="ws2")

    response = client.get("/api/v1/tasks", headers={**TOKEN, "x-workspace-gid": "ws1"})

    assert response.status_code == 200
    assert response.json()["count"] == 1
    (call,) = fake_asana.calls_to("GET", "/workspaces/ws1/tasks/search")
    assert call.params["opt_fields"] == TASK_FIELDS


def test_list_tasks_without_defaults_is_empty(client, fake_asana):
    """Test that a token alone lists no tasks and makes no remote call."""
    response = client.get("/api/v1/tasks", headers=TOKEN)

    assert response.status_code == 200
    assert response.json() == {"success": True, "tasks": [], "count": 0}
    assert fake_asana.calls == []


def test_list_tasks_follows_pagination(client, fake_asana, monkeypatch):
    """Test that every page of a project's tasks is collected."""
    for index in range(3):
        fake_asana.add_task(f"t{index}", projects=["proj1"])

    monkeypatch.setattr(settings, "ASANA_PAGE_SIZE", 2)
    response = client.get("/api/v1/tasks", headers={**TOKEN, "x-project-gid": "proj1"})

    assert response.json()["count"] == 3
    assert len(fake_asana.calls_to("GET", "/projects/proj1/tasks")) == 2


@pytest.mark.parametrize(
    "path, remote_path, label",
    [
        ("/api/v1/workspaces", "/workspaces", "workspaces"),
        ("/api/v1/projects", "/workspaces/ws1/projects", "projects"),
        ("/api/v1/tasks", "/workspaces/ws1/tasks/search", "tasks"),
    ],
)
def test_listing_failure_is_server_error(client, fake_asana, path, remote_path, label):
    """Test that a failed remote listing surfaces as a 500 with the remote message."""
    fake_asana.fail("GET", remote_path, 403, "Forbidden workspace")

    response = client.get(path, headers={**TOKEN, "x-workspace-gid": "ws1"})

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail.startswith(f"Failed to fetch {label}:")
    assert "Forbidden workspace" in detail
