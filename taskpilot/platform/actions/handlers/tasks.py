"""Task handlers: create, update, subtask, comment, complete."""

from typing import Any, Dict, List, Optional, Tuple

from taskpilot.core.exceptions import InvalidActionError, NotFoundException, RemoteApiError
from taskpilot.platform.actions.context import ActionContext
from taskpilot.platform.actions.handlers.base import ActionHandler, envelope_data
from taskpilot.platform.actions.handlers.tags import attach_tags
from taskpilot.platform.actions.resolver import EntityKind
from taskpilot.platform.actions.types import (
    ActionOutcome,
    CommentTaskAction,
    CompleteTaskAction,
    CreateSubtaskAction,
    CreateTaskAction,
    UpdateTaskAction,
)

# Keys of CreateTaskFields that are resolved by the handler rather than sent verbatim
_RESOLVED_FIELDS = {"workspace", "projects", "assignee", "tags"}


class UpdateTaskHandler(ActionHandler[UpdateTaskAction]):
    """Updates arbitrary task fields."""

    kind = "update_task"

    async def handle(self, action: UpdateTaskAction, context: ActionContext) -> ActionOutcome:
        """PUT the field map onto the task."""
        envelope = await context.client.put(f"/tasks/{action.task_gid}", dict(action.fields))
        return ActionOutcome(data=envelope_data(envelope), task_gid=action.task_gid)


class CompleteTaskHandler(ActionHandler[CompleteTaskAction]):
    """Sets the completion state of a task."""

    kind = "complete_task"

    async def handle(self, action: CompleteTaskAction, context: ActionContext) -> ActionOutcome:
        """PUT the completed flag onto the task."""
        envelope = await context.client.put(
            f"/tasks/{action.task_gid}", {"completed": action.completed}
        )
        return ActionOutcome(data=envelope_data(envelope), task_gid=action.task_gid)


class CommentTaskHandler(ActionHandler[CommentTaskAction]):
    """Adds a comment story to a task."""

    kind = "comment_task"

    async def handle(self, action: CommentTaskAction, context: ActionContext) -> ActionOutcome:
        """POST a story with the comment text."""
        envelope = await context.client.post(
            f"/tasks/{action.task_gid}/stories", {"text": action.text}
        )
        return ActionOutcome(data=envelope_data(envelope), task_gid=action.task_gid)


class CreateSubtaskHandler(ActionHandler[CreateSubtaskAction]):
    """Creates a subtask under a parent task."""

    kind = "create_subtask"

    async def handle(self, action: CreateSubtaskAction, context: ActionContext) -> ActionOutcome:
        """POST the field map as a new subtask."""
        envelope = await context.client.post(
            f"/tasks/{action.parent_task_gid}/subtasks", dict(action.fields)
        )
        data = envelope_data(envelope)
        return ActionOutcome(data=data, task_gid=data.get("gid"))


class CreateTaskHandler(ActionHandler[CreateTaskAction]):
    """Creates a task with defaults, assignee and tags resolved.

    The task itself is the success criterion: tags are attached best effort after creation.
    The assignee is resolved before creation so an unknown email creates nothing.
    """

    kind = "create_task"

    def validate(self, action: CreateTaskAction, context: ActionContext) -> None:
        """Require a workspace or project, explicit or from the caller's defaults."""
        if not self._workspace(action, context) and not self._projects(action, context):
            raise InvalidActionError(
                "create_task needs a workspace or project (none given and no default configured)",
                kind=self.kind,
            )

    async def handle(self, action: CreateTaskAction, context: ActionContext) -> ActionOutcome:
        """Resolve the assignee, create the task, then attach tags."""
        fields = action.fields
        workspace = self._workspace(action, context)
        projects = self._projects(action, context)

        if not workspace and _is_email(fields.assignee):
            # Users are looked up per workspace; take it from the task's project
            workspace = await context.workspace_for_project(projects[0])
        assignee_gid = await self._resolve_assignee(fields.assignee, workspace, context)

        body: Dict[str, Any] = fields.model_dump(exclude=_RESOLVED_FIELDS, exclude_none=True)
        if workspace:
            body["workspace"] = workspace
        if projects:
            body["projects"] = projects
        if assignee_gid:
            body["assignee"] = assignee_gid

        envelope = await context.client.post("/tasks", body)
        data = envelope_data(envelope)
        task_gid = data.get("gid")
        if not task_gid:
            raise RemoteApiError("Create task returned no gid", method="POST", path="/tasks")
        context.logger.info(f"Created task {task_gid} '{fields.name}'")

        tags_added: Optional[List[str]] = None
        warnings: List[str] = []
        if fields.tags:
            tags_added, warnings = await self._attach_tags(
                context, task_gid, fields.tags, workspace
            )

        return ActionOutcome(
            data=data,
            task_gid=task_gid,
            assignee_gid=assignee_gid,
            tags_added=tags_added,
            warnings=warnings,
        )

    @staticmethod
    def _workspace(action: CreateTaskAction, context: ActionContext) -> Optional[str]:
        return context.default_workspace(action.fields.workspace)

    @staticmethod
    def _projects(action: CreateTaskAction, context: ActionContext) -> List[str]:
        if action.fields.projects:
            return list(action.fields.projects)
        default = context.default_project()
        return [default] if default else []

    @staticmethod
    async def _attach_tags(
        context: ActionContext, task_gid: str, names: List[str], workspace: Optional[str]
    ) -> Tuple[List[str], List[str]]:
        """Attach tags to the created task; the task already exists, so nothing here raises."""
        if not workspace:
            try:
                workspace = await context.workspace_for_task(task_gid)
            except (RemoteApiError, NotFoundException) as e:
                context.logger.warning(f"No workspace for task {task_gid}, skipping tags: {e}")
                return [], [f"tag '{name}' not added: {e}" for name in names]
        return await attach_tags(context, task_gid, names, workspace)

    @staticmethod
    async def _resolve_assignee(
        assignee: Optional[str], workspace: Optional[str], context: ActionContext
    ) -> Optional[str]:
        if not _is_email(assignee):
            return assignee or None
        if not workspace:
            raise NotFoundException(f"No workspace to look up assignee '{assignee}'")
        return await context.resolver.resolve_or_create(EntityKind.USER, assignee, workspace)


def _is_email(assignee: Optional[str]) -> bool:
    return bool(assignee) and "@" in assignee
