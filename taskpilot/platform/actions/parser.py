"""Parsing of model output and raw descriptors.

Two boundaries:
- ``parse_model_output`` turns a completion's text into the raw descriptor list
- ``parse_descriptor`` validates one raw descriptor into the closed ActionDescriptor union
"""

import json
import re
from typing import Any, Dict, List

from pydantic import TypeAdapter, ValidationError

from taskpilot.core.exceptions import InvalidActionError, InvalidBatchError
from taskpilot.platform.actions.types import (
    ACTION_KINDS,
    UNKNOWN_KIND,
    ActionDescriptor,
    BaseDescriptor,
)

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)

_descriptor_adapter: TypeAdapter = TypeAdapter(ActionDescriptor)


def declared_kind(raw: Any) -> str:
    """Return the ``type`` a raw descriptor declares, or ``"unknown"``."""
    if isinstance(raw, dict):
        kind = raw.get("type")
        if isinstance(kind, str) and kind.strip():
            return kind.strip()
    return UNKNOWN_KIND


def parse_descriptor(raw: Any) -> BaseDescriptor:
    """Validate a loosely-typed descriptor into its action model.

    Args:
        raw: JSON object as produced by the model-output parser

    Returns:
        The typed descriptor

    Raises:
        InvalidActionError: If the kind is unknown or required fields are missing
    """
    kind = declared_kind(raw)
    if not isinstance(raw, dict):
        raise InvalidActionError(f"Action must be an object, got {type(raw).__name__}", kind=kind)
    if kind == UNKNOWN_KIND:
        raise InvalidActionError("Action has no type", kind=kind)
    if kind not in ACTION_KINDS:
        raise InvalidActionError(
            f"Unknown action type '{kind}' (expected one of: {', '.join(ACTION_KINDS)})",
            kind=kind,
        )

    try:
        return _descriptor_adapter.validate_python({**raw, "type": kind})
    except ValidationError as e:
        raise InvalidActionError(f"Invalid {kind}: {_summarize(e, kind)}", kind=kind) from e


def parse_model_output(output: Any) -> List[Dict[str, Any]]:
    """Extract the raw descriptor list from a language-model completion.

    Accepts the completion text (optionally wrapped in a fenced code block) or an already
    decoded object. The payload may be a bare list or an object with an ``actions`` list.

    Args:
        output: Completion text or decoded JSON

    Returns:
        The list of raw descriptors (possibly empty)

    Raises:
        InvalidBatchError: If no descriptor list can be extracted
    """
    payload = output
    if isinstance(output, str):
        text = output.strip()
        fenced = _FENCE.search(text)
        if fenced:
            text = fenced.group(1).strip()
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidBatchError(f"Model output is not valid JSON: {e.msg}") from e

    if isinstance(payload, dict):
        payload = payload.get("actions")
    if not isinstance(payload, list):
        raise InvalidBatchError("Model output does not contain an action list")
    return payload


def _summarize(error: ValidationError, kind: str) -> str:
    parts = []
    for detail in error.errors():
        loc = [str(p) for p in detail.get("loc", ()) if p != kind]
        where = ".".join(loc)
        message = detail.get("msg", "invalid")
        parts.append(f"{where}: {message}" if where else message)
    return "; ".join(parts)
