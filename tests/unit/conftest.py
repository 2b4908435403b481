"""Unit test conftest: test environment and an in-memory Asana API."""

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple

# Set environment before importing any taskpilot modules so Settings picks it up
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOCAL_DEVELOPMENT", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import httpx  # noqa: E402
import pytest  # noqa: E402

from taskpilot.platform.actions.executor import BatchExecutor  # noqa: E402
from taskpilot.platform.http_client.asana_client import AsanaClient  # noqa: E402
from taskpilot.schemas.credentials import Credentials  # noqa: E402

API_ROOT = "https://asana.test/api/1.0"
_API_PATH = "/api/1.0"


@dataclass
class RecordedCall:
    """One request received by the fake API."""

    method: str
    path: str
    params: Dict[str, str]
    body: Optional[Dict[str, Any]]


def _ok(data: Any, status: int = 200, next_page: Optional[Dict[str, Any]] = None):
    payload: Dict[str, Any] = {"data": data}
    if next_page is not None or isinstance(data, list):
        payload["next_page"] = next_page
    return httpx.Response(status, json=payload)


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"errors": [{"message": message}]})


class FakeAsana:
    """Minimal stateful Asana API.

    Tasks must be seeded with ``add_task`` before actions can touch them; requests for unknown
    tasks get a 404 the way the real service answers them. ``fail`` forces an error response
    for one method and path; ``respond`` forces an arbitrary JSON body and ``disconnect``
    fails the call without a response.
    """

    def __init__(self):
        self.calls: List[RecordedCall] = []
        self.workspaces: List[Dict[str, str]] = []
        self.projects: Dict[str, Dict[str, Any]] = {}
        self.tasks: Dict[str, Dict[str, Any]] = {}
        self.tags: Dict[str, List[Dict[str, str]]] = {}
        self.sections: Dict[str, List[Dict[str, str]]] = {}
        self.users: Dict[str, List[Dict[str, str]]] = {}
        self.failures: Dict[Tuple[str, str], Tuple[int, str]] = {}
        self.responses: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.disconnects: Set[Tuple[str, str]] = set()
        self._next_gid = 9000

    # Seeding

    def add_workspace(self, gid: str, name: str = "Workspace") -> None:
        self.workspaces.append({"gid": gid, "name": name})

    def add_project(self, gid: str, workspace: str = "ws1", name: str = "Project") -> None:
        self.projects[gid] = {"gid": gid, "name": name, "workspace": {"gid": workspace}}

    def add_task(self, gid: str, workspace: str = "ws1", **fields: Any) -> Dict[str, Any]:
        task = {"gid": gid, "workspace": {"gid": workspace}, "completed": False, **fields}
        self.tasks[gid] = task
        return task

    def add_tag(self, workspace: str, name: str, gid: Optional[str] = None) -> str:
        tag = {"gid": gid or self._new_gid(), "name": name}
        self.tags.setdefault(workspace, []).append(tag)
        return tag["gid"]

    def add_section(self, project: str, name: str, gid: Optional[str] = None) -> str:
        section = {"gid": gid or self._new_gid(), "name": name}
        self.sections.setdefault(project, []).append(section)
        return section["gid"]

    def add_user(self, workspace: str, email: str, gid: Optional[str] = None) -> str:
        user = {"gid": gid or self._new_gid(), "email": email, "name": email.split("@")[0]}
        self.users.setdefault(workspace, []).append(user)
        return user["gid"]

    def fail(self, method: str, path: str, status: int = 400, message: str = "Bad request"):
        self.failures[(method, path)] = (status, message)

    def disconnect(self, method: str, path: str):
        self.disconnects.add((method, path))

    def respond(self, method: str, path: str, payload: Any, status: int = 200):
        self.responses[(method, path)] = (status, payload)

    # Inspection

    def calls_to(self, method: str, path: Optional[str] = None) -> List[RecordedCall]:
        return [
            call
            for call in self.calls
            if call.method == method and (path is None or call.path == path)
        ]

    # Transport

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len(_API_PATH) :]
        params = dict(request.url.params)
        body = json.loads(request.content)["data"] if request.content else None
        self.calls.append(RecordedCall(request.method, path, params, body))

        if (request.method, path) in self.disconnects:
            raise httpx.ConnectError("connection refused", request=request)
        failure = self.failures.get((request.method, path))
        if failure:
            return _error(*failure)
        canned = self.responses.get((request.method, path))
        if canned:
            status, payload = canned
            return httpx.Response(status, json=payload)
        return self._route(request.method, path.strip("/").split("/"), params, body)

    def _route(self, method: str, parts: List[str], params: Dict[str, str], body: Any):
        if method == "GET":
            listing = self._listing(parts, params)
            if listing is not None:
                return self._page(listing, params)

        if parts[0] == "projects" and len(parts) == 2 and method == "GET":
            project = self.projects.get(parts[1])
            if project is None:
                return _error(404, f"project: Unknown object: {parts[1]}")
            return _ok(project)

        if parts[0] == "projects" and parts[2:] == ["sections"] and method == "POST":
            gid = self.add_section(parts[1], body["name"])
            return _ok({"gid": gid, "name": body["name"]}, 201)

        if parts == ["tags"] and method == "POST":
            gid = self.add_tag(body["workspace"], body["name"])
            return _ok({"gid": gid, "name": body["name"]}, 201)

        if parts == ["tasks"] and method == "POST":
            gid = self._new_gid()
            fields = {key: value for key, value in body.items() if key != "workspace"}
            workspace = body.get("workspace")
            for project in body.get("projects", []):
                if not workspace and project in self.projects:
                    workspace = self.projects[project]["workspace"]["gid"]
            task = self.add_task(gid, workspace=workspace or "ws1", **fields)
            return _ok({"gid": gid, "name": task.get("name")}, 201)

        if parts[0] == "tasks" and len(parts) >= 2:
            return self._task_route(method, parts, body)

        if parts[0] == "sections" and parts[-1] == "addTask" and method == "POST":
            return _ok({})

        return _error(404, f"No route for {method} /{'/'.join(parts)}")

    def _task_route(self, method: str, parts: List[str], body: Any) -> httpx.Response:
        task = self.tasks.get(parts[1])
        if task is None:
            return _error(404, f"task: Unknown object: {parts[1]}")

        if len(parts) == 2:
            if method == "GET":
                return _ok({"gid": task["gid"], "workspace": task["workspace"]})
            if method == "PUT":
                task.update(body)
                return _ok({"gid": task["gid"], **body})

        action = parts[2] if len(parts) == 3 else None
        if method != "POST" or action is None:
            return _error(404, f"No route for {method} /{'/'.join(parts)}")
        if action == "subtasks":
            gid = self._new_gid()
            self.add_task(gid, workspace=task["workspace"]["gid"], parent=task["gid"], **body)
            return _ok({"gid": gid, "name": body.get("name")}, 201)
        if action == "stories":
            return _ok({"gid": self._new_gid(), "type": "comment", "text": body["text"]}, 201)
        if action in ("addTag", "removeTag", "addProject"):
            return _ok({})
        return _error(404, f"No route for {method} /{'/'.join(parts)}")

    def _listing(self, parts: List[str], params: Dict[str, str]) -> Optional[List[Any]]:
        if parts == ["workspaces"]:
            return self.workspaces
        if parts == ["tasks"]:
            return [
                task
                for task in self.tasks.values()
                if task.get("assignee") == params.get("assignee")
                and task["workspace"]["gid"] == params.get("workspace")
            ]
        if parts[0] == "workspaces" and len(parts) == 3:
            if parts[2] == "projects":
                return [
                    {"gid": p["gid"], "name": p["name"]}
                    for p in self.projects.values()
                    if p["workspace"]["gid"] == parts[1]
                ]
            store = {"tags": self.tags, "users": self.users}.get(parts[2])
            return store.get(parts[1], []) if store is not None else None
        if parts[0] == "workspaces" and parts[2:] == ["tasks", "search"]:
            return [t for t in self.tasks.values() if t["workspace"]["gid"] == parts[1]]
        if parts[0] == "projects" and parts[2:] == ["tasks"]:
            return [t for t in self.tasks.values() if parts[1] in t.get("projects", [])]
        if parts[0] == "projects" and parts[2:] == ["sections"]:
            return self.sections.get(parts[1], [])
        return None

    def _page(self, items: List[Dict[str, str]], params: Dict[str, str]) -> httpx.Response:
        limit = int(params.get("limit", 100))
        start = int(params.get("offset", 0))
        end = start + limit
        next_page = {"offset": str(end)} if end < len(items) else None
        return _ok(items[start:end], next_page=next_page)

    def _new_gid(self) -> str:
        self._next_gid += 1
        return str(self._next_gid)


@pytest.fixture
def fake_asana():
    """Create an empty fake Asana API."""
    return FakeAsana()


@pytest.fixture
def credentials():
    """Create credentials with workspace and project defaults."""
    return Credentials(token="test-token", workspace_gid="ws1", project_gid="proj1")


@pytest.fixture
def client_factory(fake_asana):
    """Create a factory for clients talking to the fake API."""

    def factory(creds: Credentials) -> AsanaClient:
        return AsanaClient(
            creds.token, base_url=API_ROOT, transport=httpx.MockTransport(fake_asana.handle)
        )

    return factory


@pytest.fixture
def asana_client(client_factory, credentials):
    """Create a client bound to the fake API."""
    return client_factory(credentials)


@pytest.fixture
def executor(client_factory):
    """Create a batch executor bound to the fake API."""
    return BatchExecutor(client_factory=client_factory)
