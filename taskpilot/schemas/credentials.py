"""Credentials schema."""

from typing import Optional

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Bearer token plus optional defaults used when an action omits them.

    Owned by the calling request; the engine never stores it.
    """

    token: str = Field(
        ..., min_length=1, repr=False, description="Asana personal access or OAuth token"
    )
    workspace_gid: Optional[str] = Field(
        None, description="Default workspace used when an action does not name one"
    )
    project_gid: Optional[str] = Field(
        None, description="Default project used when an action does not name one"
    )
    user_gid: Optional[str] = Field(None, description="GID of the acting user")

    model_config = {"frozen": True}


class CredentialsStatus(BaseModel):
    """Which parts of the credentials a request carried."""

    configured: bool
    has_workspace: bool
    has_project: bool
    has_user: bool

    @classmethod
    def from_credentials(cls, credentials: Optional[Credentials]) -> "CredentialsStatus":
        """Build the status view of (possibly missing) credentials."""
        if credentials is None:
            return cls(configured=False, has_workspace=False, has_project=False, has_user=False)
        return cls(
            configured=True,
            has_workspace=bool(credentials.workspace_gid),
            has_project=bool(credentials.project_gid),
            has_user=bool(credentials.user_gid),
        )
