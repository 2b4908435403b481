"""Assignment handler."""

from taskpilot.platform.actions.context import ActionContext
from taskpilot.platform.actions.handlers.base import ActionHandler, envelope_data
from taskpilot.platform.actions.resolver import EntityKind
from taskpilot.platform.actions.types import ActionOutcome, AssignTaskAction


class AssignTaskHandler(ActionHandler[AssignTaskAction]):
    """Sets a task's assignee, resolving an email to a user gid when needed."""

    kind = "assign_task"

    async def handle(self, action: AssignTaskAction, context: ActionContext) -> ActionOutcome:
        """Resolve the assignee and PUT it onto the task.

        Raises:
            NotFoundException: If no user in the workspace has the given email
        """
        assignee_gid = action.assignee_gid
        if not assignee_gid:
            workspace = await context.workspace_for_task(action.task_gid, action.workspace_gid)
            assignee_gid = await context.resolver.resolve_or_create(
                EntityKind.USER, action.assignee_email, workspace
            )

        envelope = await context.client.put(f"/tasks/{action.task_gid}", {"assignee": assignee_gid})
        return ActionOutcome(
            data=envelope_data(envelope), task_gid=action.task_gid, assignee_gid=assignee_gid
        )
