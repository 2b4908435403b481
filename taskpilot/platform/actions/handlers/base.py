"""Base handler for action execution.

Each action kind has exactly one handler. The dispatcher calls ``validate`` first (no remote
calls allowed there) and ``handle`` only if validation passed.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Generic, TypeVar

from taskpilot.platform.actions.context import ActionContext
from taskpilot.platform.actions.types import ActionOutcome, BaseDescriptor

ActionT = TypeVar("ActionT", bound=BaseDescriptor)


class ActionHandler(ABC, Generic[ActionT]):
    """Applies one kind of action to the remote service.

    Contract:
    - ``validate`` MUST NOT make remote calls; it raises InvalidActionError for descriptors
      that cannot be dispatched with the given credentials
    - ``handle`` raises for failures of the action's primary effect and records failures of
      best-effort sub-steps as warnings on the outcome
    """

    kind: ClassVar[str]

    @property
    def name(self) -> str:
        """Handler name for logging and debugging."""
        return self.__class__.__name__

    def validate(self, action: ActionT, context: ActionContext) -> None:  # noqa: B027
        """Check context-dependent requirements before any remote call.

        Args:
            action: Parsed descriptor
            context: Action context

        Raises:
            InvalidActionError: If the action cannot be dispatched
        """
        pass

    @abstractmethod
    async def handle(self, action: ActionT, context: ActionContext) -> ActionOutcome:
        """Apply the action.

        Args:
            action: Parsed and validated descriptor
            context: Action context

        Returns:
            Outcome with the primary call's payload and identifiers

        Raises:
            NotFoundException: If a required entity cannot be resolved
            RemoteApiError: If the primary remote call fails
        """
        pass


def envelope_data(envelope: Dict[str, Any]) -> Dict[str, Any]:
    """Return the ``data`` object of an envelope (empty dict when absent)."""
    data = envelope.get("data")
    return data if isinstance(data, dict) else {}
