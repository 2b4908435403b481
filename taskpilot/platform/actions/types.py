"""Action descriptor and result types.

Descriptors arrive as loosely-typed JSON objects and are validated into a closed union,
discriminated on ``type``, before they reach the dispatcher. One model per action kind.
"""

from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator


def _coerce_str(value: Any) -> Any:
    """Accept integers (models often emit gids unquoted) and strip whitespace."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _clean_names(values: Any) -> Any:
    """Strip tag names, dropping blanks. A single string is treated as a one-item list."""
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    if isinstance(values, list):
        return [v.strip() for v in values if isinstance(v, str) and v.strip()]
    return values


Gid = Annotated[str, BeforeValidator(_coerce_str), Field(min_length=1)]
OptionalGid = Annotated[Optional[str], BeforeValidator(_coerce_str)]
NameList = Annotated[List[str], BeforeValidator(_clean_names)]


class BaseDescriptor(BaseModel):
    """Base class for all action descriptors."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str


class UpdateTaskAction(BaseDescriptor):
    """Patch arbitrary fields of an existing task."""

    type: Literal["update_task"] = "update_task"
    task_gid: Gid
    fields: Dict[str, Any] = Field(default_factory=dict)


class CreateSubtaskAction(BaseDescriptor):
    """Create a child task under an existing task."""

    type: Literal["create_subtask"] = "create_subtask"
    parent_task_gid: Gid
    fields: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _accept_task_gid(cls, data: Any) -> Any:
        # Models sometimes name the parent ``task_gid``
        if isinstance(data, dict) and "parent_task_gid" not in data and "task_gid" in data:
            data = {**data, "parent_task_gid": data["task_gid"]}
        return data


class CommentTaskAction(BaseDescriptor):
    """Append a text comment (story) to a task."""

    type: Literal["comment_task"] = "comment_task"
    task_gid: Gid
    text: Annotated[str, BeforeValidator(_coerce_str), Field(min_length=1)]


class CreateTaskFields(BaseModel):
    """Fields of a task to create.

    Unknown keys are passed through to the remote create call untouched.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    name: Annotated[str, BeforeValidator(_coerce_str), Field(min_length=1)]
    notes: Optional[str] = None
    due_on: Optional[str] = None
    workspace: OptionalGid = None
    projects: List[Gid] = Field(default_factory=list)
    assignee: OptionalGid = None
    tags: NameList = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_single_project(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("projects"), (str, int)):
            data = {**data, "projects": [data["projects"]]}
        return data


class CreateTaskAction(BaseDescriptor):
    """Create a task, resolving workspace, project, assignee and tags."""

    type: Literal["create_task"] = "create_task"
    fields: CreateTaskFields


class AssignTaskAction(BaseDescriptor):
    """Set the assignee of a task, by gid or by email."""

    type: Literal["assign_task"] = "assign_task"
    task_gid: Gid
    assignee_gid: OptionalGid = None
    assignee_email: OptionalGid = None
    workspace_gid: OptionalGid = None

    @model_validator(mode="before")
    @classmethod
    def _split_assignee(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "assignee" not in data:
            return data
        assignee = _coerce_str(data["assignee"])
        if isinstance(assignee, str) and assignee:
            key = "assignee_email" if "@" in assignee else "assignee_gid"
            data = {key: assignee, **data}
        return data

    @model_validator(mode="after")
    def _require_assignee(self) -> "AssignTaskAction":
        if not self.assignee_gid and not self.assignee_email:
            raise ValueError("assign_task requires assignee_gid or assignee_email")
        return self


class SetTagsAction(BaseDescriptor):
    """Attach and/or detach tags (by name) on a task."""

    type: Literal["set_tags"] = "set_tags"
    task_gid: Gid
    add_tags: NameList = Field(default_factory=list)
    remove_tags: NameList = Field(default_factory=list)
    workspace_gid: OptionalGid = None

    @model_validator(mode="after")
    def _require_tags(self) -> "SetTagsAction":
        if not self.add_tags and not self.remove_tags:
            raise ValueError("set_tags requires add_tags or remove_tags")
        return self


class SetSectionAction(BaseDescriptor):
    """Move a task into a section of a project."""

    type: Literal["set_section"] = "set_section"
    task_gid: Gid
    project_gid: OptionalGid = None
    section_gid: OptionalGid = None
    section_name: OptionalGid = None

    @model_validator(mode="after")
    def _require_section(self) -> "SetSectionAction":
        if not self.section_gid and not self.section_name:
            raise ValueError("set_section requires section_gid or section_name")
        return self


class CompleteTaskAction(BaseDescriptor):
    """Mark a task complete (or incomplete)."""

    type: Literal["complete_task"] = "complete_task"
    task_gid: Gid
    completed: bool = True


ActionDescriptor = Annotated[
    Union[
        UpdateTaskAction,
        CreateSubtaskAction,
        CommentTaskAction,
        CreateTaskAction,
        AssignTaskAction,
        SetTagsAction,
        SetSectionAction,
        CompleteTaskAction,
    ],
    Field(discriminator="type"),
]

ACTION_KINDS = (
    "update_task",
    "create_subtask",
    "comment_task",
    "create_task",
    "assign_task",
    "set_tags",
    "set_section",
    "complete_task",
)

UNKNOWN_KIND = "unknown"


# =============================================================================
# Outcomes
# =============================================================================


@dataclass
class ActionOutcome:
    """What a handler reports after applying an action's effect.

    Attributes:
        data: Payload returned by the primary remote call
        task_gid: Task the action created or touched
        assignee_gid: Assignee that was set
        section_gid: Section the task was moved into
        tags_added: Tag gids attached
        tags_removed: Tag gids detached
        warnings: Best-effort sub-steps that were skipped
    """

    data: Any = None
    task_gid: Optional[str] = None
    assignee_gid: Optional[str] = None
    section_gid: Optional[str] = None
    tags_added: Optional[List[str]] = None
    tags_removed: Optional[List[str]] = None
    warnings: List[str] = field(default_factory=list)


class ActionResult(BaseModel):
    """Outcome record for one descriptor, positionally tied to the input batch."""

    index: int = Field(..., ge=0, description="Position of the descriptor in the batch")
    kind: str = Field(..., description="Declared action type")
    ok: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    task_gid: Optional[str] = None
    assignee_gid: Optional[str] = None
    section_gid: Optional[str] = None
    tags_added: Optional[List[str]] = None
    tags_removed: Optional[List[str]] = None
    warnings: List[str] = Field(default_factory=list)

    @classmethod
    def success(cls, index: int, kind: str, outcome: ActionOutcome) -> "ActionResult":
        """Build a successful result from a handler outcome."""
        return cls(
            index=index,
            kind=kind,
            ok=True,
            data=outcome.data,
            task_gid=outcome.task_gid,
            assignee_gid=outcome.assignee_gid,
            section_gid=outcome.section_gid,
            tags_added=outcome.tags_added,
            tags_removed=outcome.tags_removed,
            warnings=list(outcome.warnings),
        )

    @classmethod
    def failure(cls, index: int, kind: str, error: str) -> "ActionResult":
        """Build a failed result."""
        return cls(index=index, kind=kind, ok=False, error=error)
