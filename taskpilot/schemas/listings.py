"""Response schemas for the workspace, project and task listings."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class WorkspaceList(BaseModel):
    """Workspaces visible to the token."""

    success: bool = True
    workspaces: List[Dict[str, Any]]


class ProjectList(BaseModel):
    """Projects of the default workspace."""

    success: bool = True
    projects: List[Dict[str, Any]]


class TaskList(BaseModel):
    """Tasks in scope of the caller's defaults."""

    success: bool = True
    tasks: List[Dict[str, Any]]
    count: int = Field(..., ge=0, description="Number of tasks returned")
