"""API endpoints listing workspaces, projects and tasks.

These let a caller discover the gids its action batches refer to.
"""

from fastapi import APIRouter, Depends, HTTPException

from taskpilot.api import deps
from taskpilot.core.exceptions import RemoteApiError
from taskpilot.core.logging import ContextualLogger
from taskpilot.platform import listings
from taskpilot.platform.http_client.asana_client import AsanaClient
from taskpilot.schemas.credentials import Credentials
from taskpilot.schemas.listings import ProjectList, TaskList, WorkspaceList

router = APIRouter()


@router.get("/workspaces", response_model=WorkspaceList)
async def list_workspaces(
    credentials: Credentials = Depends(deps.get_credentials),
    client: AsanaClient = Depends(deps.get_asana_client),
    logger: ContextualLogger = Depends(deps.get_logger),
) -> WorkspaceList:
    """List the workspaces visible to the token."""
    try:
        workspaces = await listings.list_workspaces(client)
    except RemoteApiError as e:
        logger.error(f"Failed to fetch workspaces: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch workspaces: {e}") from e
    return WorkspaceList(workspaces=workspaces)


@router.get("/projects", response_model=ProjectList)
async def list_projects(
    credentials: Credentials = Depends(deps.get_credentials),
    client: AsanaClient = Depends(deps.get_asana_client),
    logger: ContextualLogger = Depends(deps.get_logger),
) -> ProjectList:
    """List the projects of the default workspace.

    Raises:
        HTTPException: 400 if no workspace is configured, 500 if the listing fails
    """
    if not credentials.workspace_gid:
        raise HTTPException(status_code=400, detail="Please configure token and workspace first")
    try:
        projects = await listings.list_projects(client, credentials.workspace_gid)
    except RemoteApiError as e:
        logger.error(f"Failed to fetch projects: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch projects: {e}") from e
    return ProjectList(projects=projects)


@router.get("/tasks", response_model=TaskList)
async def list_tasks(
    credentials: Credentials = Depends(deps.get_credentials),
    client: AsanaClient = Depends(deps.get_asana_client),
    logger: ContextualLogger = Depends(deps.get_logger),
) -> TaskList:
    """List tasks of the default project, user or workspace, in that order of preference."""
    try:
        tasks = await listings.list_tasks(client, credentials)
    except RemoteApiError as e:
        logger.error(f"Failed to fetch tasks: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch tasks: {e}") from e
    return TaskList(tasks=tasks, count=len(tasks))
