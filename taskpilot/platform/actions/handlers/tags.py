"""Tag handlers.

Attaching and detaching individual tags is best effort: a tag that cannot be resolved,
created, attached or detached is logged and reported as a warning, never raised.
"""

from typing import List, Tuple

from taskpilot.core.exceptions import NotFoundException, RemoteApiError
from taskpilot.platform.actions.context import ActionContext
from taskpilot.platform.actions.handlers.base import ActionHandler
from taskpilot.platform.actions.resolver import EntityKind
from taskpilot.platform.actions.types import ActionOutcome, SetTagsAction


async def attach_tags(
    context: ActionContext, task_gid: str, names: List[str], workspace_gid: str
) -> Tuple[List[str], List[str]]:
    """Resolve (creating if needed) and attach each tag name to a task.

    Args:
        context: Action context
        task_gid: Task to tag
        names: Tag names
        workspace_gid: Workspace the tags live in

    Returns:
        Tuple of (attached tag gids, warnings for skipped tags)
    """
    attached: List[str] = []
    warnings: List[str] = []
    for name in names:
        try:
            tag_gid = await context.resolver.resolve_or_create(EntityKind.TAG, name, workspace_gid)
            await context.client.post(f"/tasks/{task_gid}/addTag", {"tag": tag_gid})
        except (RemoteApiError, NotFoundException) as e:
            context.logger.warning(f"Skipping tag '{name}' on task {task_gid}: {e}")
            warnings.append(f"tag '{name}' not added: {e}")
            continue
        attached.append(tag_gid)
    return attached, warnings


async def detach_tags(
    context: ActionContext, task_gid: str, names: List[str], workspace_gid: str
) -> Tuple[List[str], List[str]]:
    """Detach each known tag name from a task. Unknown names are skipped silently.

    Returns:
        Tuple of (detached tag gids, warnings for failed detaches)
    """
    detached: List[str] = []
    warnings: List[str] = []
    for name in names:
        resolution = await context.resolver.lookup(EntityKind.TAG, name, workspace_gid)
        if resolution.is_absent:
            context.logger.debug(f"Tag '{name}' does not exist, nothing to remove")
            continue
        try:
            await context.client.post(f"/tasks/{task_gid}/removeTag", {"tag": resolution.gid})
        except RemoteApiError as e:
            context.logger.warning(f"Could not remove tag '{name}' from task {task_gid}: {e}")
            warnings.append(f"tag '{name}' not removed: {e}")
            continue
        detached.append(resolution.gid)
    return detached, warnings


class SetTagsHandler(ActionHandler[SetTagsAction]):
    """Adds and removes tags on a task by name."""

    kind = "set_tags"

    async def handle(self, action: SetTagsAction, context: ActionContext) -> ActionOutcome:
        """Resolve the workspace, then attach and detach tags."""
        workspace = await context.workspace_for_task(action.task_gid, action.workspace_gid)

        added, add_warnings = await attach_tags(
            context, action.task_gid, action.add_tags, workspace
        )
        removed, remove_warnings = await detach_tags(
            context, action.task_gid, action.remove_tags, workspace
        )
        return ActionOutcome(
            data={"added": added, "removed": removed},
            task_gid=action.task_gid,
            tags_added=added,
            tags_removed=removed,
            warnings=add_warnings + remove_warnings,
        )
