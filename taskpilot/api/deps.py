"""Dependencies that are used in the API endpoints."""

from typing import AsyncIterator, Optional

from fastapi import Depends, Header, HTTPException

from taskpilot.core.logging import ContextualLogger, logger
from taskpilot.platform.actions.executor import BatchExecutor
from taskpilot.platform.http_client.asana_client import AsanaClient
from taskpilot.schemas.credentials import Credentials


async def get_optional_credentials(
    x_asana_token: Optional[str] = Header(None),
    x_workspace_gid: Optional[str] = Header(None),
    x_project_gid: Optional[str] = Header(None),
    x_user_gid: Optional[str] = Header(None),
) -> Optional[Credentials]:
    """Build credentials from the request headers, or None when no token is sent."""
    if not x_asana_token:
        return None
    return Credentials(
        token=x_asana_token,
        workspace_gid=x_workspace_gid or None,
        project_gid=x_project_gid or None,
        user_gid=x_user_gid or None,
    )


async def get_credentials(
    credentials: Optional[Credentials] = Depends(get_optional_credentials),
) -> Credentials:
    """Require credentials on the request.

    Raises:
        HTTPException: 400 when the token header is missing
    """
    if credentials is None:
        raise HTTPException(status_code=400, detail="Please configure credentials first")
    return credentials


async def get_asana_client(
    credentials: Credentials = Depends(get_credentials),
) -> AsyncIterator[AsanaClient]:
    """Request-scoped Asana client, closed when the response is sent."""
    async with AsanaClient.from_credentials(credentials) as client:
        yield client


def get_executor() -> BatchExecutor:
    """Batch executor used by the endpoints."""
    return BatchExecutor()


def get_logger() -> ContextualLogger:
    """Request-scoped API logger."""
    return logger.with_context(component="api")
