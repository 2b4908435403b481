"""Section handler."""

from typing import Optional

from taskpilot.core.exceptions import InvalidActionError, RemoteApiError
from taskpilot.platform.actions.context import ActionContext
from taskpilot.platform.actions.handlers.base import ActionHandler, envelope_data
from taskpilot.platform.actions.resolver import EntityKind
from taskpilot.platform.actions.types import ActionOutcome, SetSectionAction


class SetSectionHandler(ActionHandler[SetSectionAction]):
    """Moves a task into a section, creating the section by name if needed.

    Tries ``POST /sections/{gid}/addTask`` first and falls back to
    ``POST /tasks/{gid}/addProject`` with the section when the first shape is rejected.
    """

    kind = "set_section"

    def validate(self, action: SetSectionAction, context: ActionContext) -> None:
        """A section name can only be resolved within a project."""
        if action.section_name and not action.section_gid:
            if not context.default_project(action.project_gid):
                raise InvalidActionError(
                    "set_section by name needs project_gid (none given and no default configured)",
                    kind=self.kind,
                )

    async def handle(self, action: SetSectionAction, context: ActionContext) -> ActionOutcome:
        """Resolve the section and move the task into it."""
        project = context.default_project(action.project_gid)
        section_gid = action.section_gid or await context.resolver.resolve_or_create(
            EntityKind.SECTION, action.section_name, project
        )

        data = await self._move(action.task_gid, section_gid, project, context)
        return ActionOutcome(data=data, task_gid=action.task_gid, section_gid=section_gid)

    async def _move(
        self,
        task_gid: str,
        section_gid: str,
        project: Optional[str],
        context: ActionContext,
    ) -> dict:
        try:
            envelope = await context.client.post(
                f"/sections/{section_gid}/addTask", {"task": task_gid}
            )
            return envelope_data(envelope)
        except RemoteApiError as primary:
            if not project:
                raise
            context.logger.warning(
                f"addTask rejected for task {task_gid} -> section {section_gid}, "
                f"falling back to addProject: {primary}"
            )
            try:
                envelope = await context.client.post(
                    f"/tasks/{task_gid}/addProject", {"project": project, "section": section_gid}
                )
            except RemoteApiError as fallback:
                raise RemoteApiError(
                    f"Could not move task {task_gid} to section {section_gid}: "
                    f"{primary}; fallback: {fallback}",
                    status_code=fallback.status_code,
                ) from fallback
            return envelope_data(envelope)
