"""Read-only listings used to discover the gids an action batch refers to."""

from typing import Any, Dict, List

from taskpilot.core.logging import logger
from taskpilot.platform.http_client.asana_client import AsanaClient
from taskpilot.schemas.credentials import Credentials

TASK_FIELDS = (
    "name,completed,due_on,due_at,assignee,assignee.name,tags,tags.name,notes,"
    "created_at,modified_at,priority,completed_at"
)


async def list_workspaces(client: AsanaClient) -> List[Dict[str, Any]]:
    """Every workspace visible to the token."""
    return [item async for item in client.paginate("/workspaces")]


async def list_projects(client: AsanaClient, workspace_gid: str) -> List[Dict[str, Any]]:
    """Every project in a workspace."""
    return [item async for item in client.paginate(f"/workspaces/{workspace_gid}/projects")]


async def list_tasks(client: AsanaClient, credentials: Credentials) -> List[Dict[str, Any]]:
    """Tasks in scope of the caller's defaults.

    The default project wins; otherwise the default user's tasks in the default workspace;
    otherwise every task a workspace search returns. With no defaults the list is empty.

    Raises:
        RemoteApiError: If any listing page fails
    """
    params: Dict[str, Any] = {"opt_fields": TASK_FIELDS}
    if credentials.project_gid:
        path = f"/projects/{credentials.project_gid}/tasks"
    elif credentials.user_gid and credentials.workspace_gid:
        path = "/tasks"
        params.update(assignee=credentials.user_gid, workspace=credentials.workspace_gid)
    elif credentials.workspace_gid:
        path = f"/workspaces/{credentials.workspace_gid}/tasks/search"
    else:
        logger.debug("No project, user or workspace configured; no tasks to list")
        return []

    return [item async for item in client.paginate(path, params=params)]
