"""Action dispatcher: routes a descriptor to the handler for its kind.

Validation always completes before the handler runs, so a descriptor that is missing a
required field (including one that credential defaults cannot fill) never causes a remote
call.
"""

from typing import Any, Dict, Optional, Union

from taskpilot.core.exceptions import InvalidActionError
from taskpilot.core.logging import ContextualLogger
from taskpilot.core.logging import logger as default_logger
from taskpilot.platform.actions.context import ActionContext
from taskpilot.platform.actions.handlers import ActionHandler, default_handlers
from taskpilot.platform.actions.parser import parse_descriptor
from taskpilot.platform.actions.resolver import EntityResolver
from taskpilot.platform.actions.types import ActionOutcome, BaseDescriptor
from taskpilot.platform.http_client.asana_client import AsanaClient
from taskpilot.schemas.credentials import Credentials


class ActionDispatcher:
    """Dispatches descriptors to their handlers.

    Bound to one batch: the gateway client and the resolver (with its cache) are shared by
    every action dispatched through this instance.
    """

    def __init__(
        self,
        client: AsanaClient,
        resolver: EntityResolver,
        handlers: Optional[Dict[str, ActionHandler]] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize dispatcher.

        Args:
            client: Gateway to the remote API
            resolver: Batch-scoped entity resolver
            handlers: kind -> handler registry (defaults to every built-in handler)
            logger: Optional contextual logger
        """
        self._client = client
        self._resolver = resolver
        self._handlers = handlers if handlers is not None else default_handlers()
        self.logger = logger or default_logger.with_context(component="action_dispatcher")

    async def dispatch(
        self,
        descriptor: Union[BaseDescriptor, Dict[str, Any]],
        credentials: Credentials,
        logger: Optional[ContextualLogger] = None,
    ) -> ActionOutcome:
        """Validate and apply one action.

        Args:
            descriptor: Typed descriptor, or a raw JSON object to parse first
            credentials: Caller's credentials and defaults
            logger: Logger for this action (defaults to the dispatcher's)

        Returns:
            The handler's outcome

        Raises:
            InvalidActionError: If the descriptor cannot be dispatched (no remote call made)
            NotFoundException: If a referenced entity cannot be resolved
            RemoteApiError: If the action's primary remote call fails
        """
        if not isinstance(descriptor, BaseDescriptor):
            descriptor = parse_descriptor(descriptor)

        handler = self._handlers.get(descriptor.type)
        if handler is None:
            raise InvalidActionError(
                f"No handler registered for action type '{descriptor.type}'", kind=descriptor.type
            )

        context = ActionContext(
            client=self._client,
            resolver=self._resolver,
            credentials=credentials,
            logger=logger or self.logger,
        )
        handler.validate(descriptor, context)

        context.logger.debug(f"[Dispatcher] {descriptor.type} -> {handler.name}")
        return await handler.handle(descriptor, context)
