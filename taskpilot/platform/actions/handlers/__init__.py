"""Handlers module for the action engine.

One handler per action kind:
- UpdateTaskHandler, CompleteTaskHandler, CommentTaskHandler, CreateSubtaskHandler,
  CreateTaskHandler: task effects
- AssignTaskHandler: assignee changes
- SetTagsHandler: tag attach/detach
- SetSectionHandler: section membership
"""

from typing import Dict

from .assignment import AssignTaskHandler
from .base import ActionHandler
from .sections import SetSectionHandler
from .tags import SetTagsHandler
from .tasks import (
    CommentTaskHandler,
    CompleteTaskHandler,
    CreateSubtaskHandler,
    CreateTaskHandler,
    UpdateTaskHandler,
)


def default_handlers() -> Dict[str, ActionHandler]:
    """Build the kind -> handler registry."""
    handlers = [
        UpdateTaskHandler(),
        CreateSubtaskHandler(),
        CommentTaskHandler(),
        CreateTaskHandler(),
        AssignTaskHandler(),
        SetTagsHandler(),
        SetSectionHandler(),
        CompleteTaskHandler(),
    ]
    return {handler.kind: handler for handler in handlers}


__all__ = [
    "ActionHandler",
    "AssignTaskHandler",
    "CommentTaskHandler",
    "CompleteTaskHandler",
    "CreateSubtaskHandler",
    "CreateTaskHandler",
    "SetSectionHandler",
    "SetTagsHandler",
    "UpdateTaskHandler",
    "default_handlers",
]
