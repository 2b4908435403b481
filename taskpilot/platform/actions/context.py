"""Context handed to action handlers."""

from dataclasses import dataclass
from typing import Optional

from taskpilot.core.exceptions import NotFoundException
from taskpilot.core.logging import ContextualLogger
from taskpilot.platform.actions.resolver import EntityResolver
from taskpilot.platform.http_client.asana_client import AsanaClient
from taskpilot.schemas.credentials import Credentials


@dataclass
class ActionContext:
    """Everything a handler needs to apply one action.

    Attributes:
        client: Gateway to the remote API
        resolver: Batch-scoped entity resolver (shared by every action in the batch)
        credentials: Caller's credentials and defaults
        logger: Logger carrying batch and action dimensions
    """

    client: AsanaClient
    resolver: EntityResolver
    credentials: Credentials
    logger: ContextualLogger

    def default_workspace(self, explicit: Optional[str] = None) -> Optional[str]:
        """Explicit workspace if given, else the caller's default."""
        return explicit or self.credentials.workspace_gid

    def default_project(self, explicit: Optional[str] = None) -> Optional[str]:
        """Explicit project if given, else the caller's default."""
        return explicit or self.credentials.project_gid

    async def workspace_for_task(self, task_gid: str, explicit: Optional[str] = None) -> str:
        """Resolve the workspace an action on ``task_gid`` should be scoped to.

        Order: explicit value, the caller's default, then the task's own workspace.

        Raises:
            NotFoundException: If the task carries no workspace
            RemoteApiError: If reading the task fails
        """
        workspace = self.default_workspace(explicit)
        if workspace:
            return workspace

        return await self._workspace_of("task", f"/tasks/{task_gid}", task_gid)

    async def workspace_for_project(self, project_gid: str) -> str:
        """Read the workspace a project belongs to.

        Raises:
            NotFoundException: If the project carries no workspace
            RemoteApiError: If reading the project fails
        """
        return await self._workspace_of("project", f"/projects/{project_gid}", project_gid)

    async def _workspace_of(self, kind: str, path: str, gid: str) -> str:
        envelope = await self.client.get(path, params={"opt_fields": "workspace"})
        data = envelope.get("data") if isinstance(envelope, dict) else None
        workspace = data.get("workspace") if isinstance(data, dict) else None
        workspace_gid = workspace.get("gid") if isinstance(workspace, dict) else None
        if not workspace_gid:
            raise NotFoundException(f"Could not determine workspace for {kind} {gid}")
        self.logger.debug(f"Resolved workspace {workspace_gid} from {kind} {gid}")
        return workspace_gid
