"""Request and response schemas for action execution."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from taskpilot.platform.actions.types import ActionResult


class ExecuteActionsRequest(BaseModel):
    """Batch to execute: either parsed descriptors or a raw model completion."""

    actions: Optional[List[Any]] = Field(
        None, description="Loosely-typed action descriptors, executed in order"
    )
    completion: Optional[str] = Field(
        None, description="Raw language-model output carrying the action list"
    )

    @model_validator(mode="after")
    def _require_one_source(self) -> "ExecuteActionsRequest":
        if self.actions is None and self.completion is None:
            raise ValueError("Provide either 'actions' or 'completion'")
        if self.actions is not None and self.completion is not None:
            raise ValueError("Provide only one of 'actions' or 'completion'")
        return self


class ExecuteActionsResponse(BaseModel):
    """Per-action results of a batch, in input order."""

    success: bool = Field(..., description="True when every action succeeded")
    succeeded: int
    failed: int
    results: List[ActionResult]

    @classmethod
    def from_results(cls, results: List[ActionResult]) -> "ExecuteActionsResponse":
        """Summarize a result list."""
        failed = sum(1 for result in results if not result.ok)
        return cls(
            success=failed == 0,
            succeeded=len(results) - failed,
            failed=failed,
            results=results,
        )
