"""API endpoints for executing model-proposed actions."""

from fastapi import APIRouter, Depends, HTTPException

from taskpilot.api import deps
from taskpilot.core.exceptions import InvalidBatchError
from taskpilot.core.logging import ContextualLogger
from taskpilot.platform.actions.executor import BatchExecutor
from taskpilot.platform.actions.parser import parse_model_output
from taskpilot.schemas.actions import ExecuteActionsRequest, ExecuteActionsResponse
from taskpilot.schemas.credentials import Credentials

router = APIRouter()


@router.post("/execute", response_model=ExecuteActionsResponse, response_model_exclude_none=True)
async def execute_actions(
    request: ExecuteActionsRequest,
    credentials: Credentials = Depends(deps.get_credentials),
    executor: BatchExecutor = Depends(deps.get_executor),
    logger: ContextualLogger = Depends(deps.get_logger),
) -> ExecuteActionsResponse:
    """Execute a batch of actions against Asana.

    Each action succeeds or fails on its own; the response always carries one result per
    action, in order. Only an empty or malformed batch is rejected as a whole.

    Args:
        request: Descriptors, or a raw model completion carrying them
        credentials: Credentials from the request headers
        executor: Batch executor
        logger: API logger

    Returns:
        Per-action results with success/failure counts

    Raises:
        HTTPException: 400 if the batch is empty or malformed
    """
    try:
        descriptors = (
            request.actions
            if request.actions is not None
            else parse_model_output(request.completion)
        )
        results = await executor.execute_batch(descriptors, credentials)
    except InvalidBatchError as e:
        logger.warning(f"Rejected batch: {e}")
        raise HTTPException(status_code=400, detail=str(e)) from e

    return ExecuteActionsResponse.from_results(results)
