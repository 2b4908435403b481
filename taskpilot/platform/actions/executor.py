"""Batch executor: runs a batch of action descriptors in order with per-action isolation.

Every descriptor yields exactly one ActionResult at its own index. A failing action is
recorded and the batch moves on; only an empty or malformed batch fails the call itself.
"""

import uuid
from typing import Any, Callable, List, Optional, Sequence

from taskpilot.core.exceptions import EmptyBatchError, InvalidBatchError, TaskpilotException
from taskpilot.core.logging import ContextualLogger
from taskpilot.core.logging import logger as default_logger
from taskpilot.platform.actions.dispatcher import ActionDispatcher
from taskpilot.platform.actions.parser import declared_kind, parse_descriptor
from taskpilot.platform.actions.resolver import EntityResolver
from taskpilot.platform.actions.types import ActionResult, BaseDescriptor
from taskpilot.platform.http_client.asana_client import AsanaClient
from taskpilot.schemas.credentials import Credentials

ClientFactory = Callable[[Credentials], AsanaClient]


class BatchExecutor:
    """Executes batches of descriptors against the remote API.

    Holds no per-batch state: each ``execute_batch`` call opens its own client and resolver,
    so concurrent batches never share a cache.
    """

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the executor.

        Args:
            client_factory: Builds a gateway client from credentials
                (defaults to AsanaClient.from_credentials)
            logger: Optional contextual logger
        """
        self._client_factory = client_factory or AsanaClient.from_credentials
        self.logger = logger or default_logger.with_context(component="batch_executor")

    async def execute_batch(
        self, descriptors: Sequence[Any], credentials: Credentials
    ) -> List[ActionResult]:
        """Execute every descriptor in order.

        Args:
            descriptors: Raw JSON objects or typed descriptors, in execution order
            credentials: Caller's credentials and defaults

        Returns:
            One result per descriptor, in input order

        Raises:
            EmptyBatchError: If the batch has no descriptors
            InvalidBatchError: If the batch is not a list
        """
        if isinstance(descriptors, (str, bytes, dict)) or not isinstance(descriptors, Sequence):
            raise InvalidBatchError(
                f"Batch must be a list of actions, got {type(descriptors).__name__}"
            )
        if len(descriptors) == 0:
            raise EmptyBatchError()

        batch_logger = self.logger.with_context(batch_id=uuid.uuid4().hex[:8])
        batch_logger.info(f"Executing batch of {len(descriptors)} action(s)")

        async with self._client_factory(credentials) as client:
            resolver = EntityResolver(
                client, logger=batch_logger.with_context(component="entity_resolver")
            )
            dispatcher = ActionDispatcher(client, resolver, logger=batch_logger)
            results = [
                await self._run_isolated(index, raw, dispatcher, credentials, batch_logger)
                for index, raw in enumerate(descriptors)
            ]

        failed = sum(1 for r in results if not r.ok)
        batch_logger.info(f"Batch finished: {len(results) - failed} succeeded, {failed} failed")
        return results

    async def _run_isolated(
        self,
        index: int,
        raw: Any,
        dispatcher: ActionDispatcher,
        credentials: Credentials,
        batch_logger: ContextualLogger,
    ) -> ActionResult:
        """Parse and dispatch one descriptor, converting any failure into a failed result."""
        kind = raw.type if isinstance(raw, BaseDescriptor) else declared_kind(raw)
        action_logger = batch_logger.with_context(action_index=index, action_type=kind)

        try:
            descriptor = raw if isinstance(raw, BaseDescriptor) else parse_descriptor(raw)
            outcome = await dispatcher.dispatch(descriptor, credentials, logger=action_logger)
        except TaskpilotException as e:
            action_logger.warning(f"Action {index} ({kind}) failed: {e}")
            return ActionResult.failure(index, kind, str(e))
        except Exception as e:
            action_logger.error(f"Action {index} ({kind}) failed unexpectedly: {e}", exc_info=True)
            return ActionResult.failure(index, kind, f"{e.__class__.__name__}: {e}")

        action_logger.debug(f"Action {index} ({kind}) succeeded")
        return ActionResult.success(index, kind, outcome)
