"""Action engine.

Descriptor types (types.py):
    ActionDescriptor union: UpdateTaskAction, CreateSubtaskAction, CommentTaskAction,
    CreateTaskAction, AssignTaskAction, SetTagsAction, SetSectionAction, CompleteTaskAction
    ActionOutcome, ActionResult

Resolution, dispatch and execution:
    EntityResolver: name -> gid lookups with a per-batch cache
    ActionDispatcher: descriptor -> handler
    BatchExecutor: ordered, failure-isolated batch execution
"""

from .dispatcher import ActionDispatcher
from .executor import BatchExecutor
from .parser import parse_descriptor, parse_model_output
from .resolver import EntityKind, EntityResolver, Resolution, ResolutionStatus
from .types import (
    ActionDescriptor,
    ActionOutcome,
    ActionResult,
    AssignTaskAction,
    BaseDescriptor,
    CommentTaskAction,
    CompleteTaskAction,
    CreateSubtaskAction,
    CreateTaskAction,
    SetSectionAction,
    SetTagsAction,
    UpdateTaskAction,
)

__all__ = [
    # Types
    "ActionDescriptor",
    "ActionOutcome",
    "ActionResult",
    "AssignTaskAction",
    "BaseDescriptor",
    "CommentTaskAction",
    "CompleteTaskAction",
    "CreateSubtaskAction",
    "CreateTaskAction",
    "SetSectionAction",
    "SetTagsAction",
    "UpdateTaskAction",
    # Resolution, dispatch and execution
    "ActionDispatcher",
    "BatchExecutor",
    "EntityKind",
    "EntityResolver",
    "Resolution",
    "ResolutionStatus",
    # Parsing
    "parse_descriptor",
    "parse_model_output",
]
