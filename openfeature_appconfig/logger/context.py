"""
Per-evaluation log context.

PROBLEM:
    A single flag evaluation logs from several places (session manager,
    provider, transports). Those lines should be easy to group together.

SOLUTION:
    1. The provider opens an evaluation_scope() for each resolution
    2. The scope stores an evaluation ID and the flag key in contextvars
       (thread-safe and async-safe)
    3. inject_evaluation_context adds them to every log line

USAGE:
    from openfeature_appconfig.logger import logger
    from openfeature_appconfig.logger.context import evaluation_scope

    with evaluation_scope(flag_key="new-checkout", targeting_key="user-123"):
        logger.info("appconfig_flag_resolved")
        # -> {"msg": "appconfig_flag_resolved", "evaluation_id": "...",
        #     "flag_key": "new-checkout", "targeting_key": "user-123", ...}
"""

from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

# =============================================================================
# CONTEXT VARIABLES
# =============================================================================

_evaluation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "evaluation_id",
    default=None,
)

# Additional context fields (flag_key, targeting_key, ...)
_extra_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "extra_context",
    default={},
)


# =============================================================================
# CONTEXT GETTERS AND SETTERS
# =============================================================================


def get_evaluation_id() -> str | None:
    """Get the ID of the evaluation running in this context, if any."""
    return _evaluation_id.get()


def set_evaluation_id(evaluation_id: str) -> None:
    _evaluation_id.set(evaluation_id)


def generate_evaluation_id() -> str:
    return str(uuid.uuid4())


def get_extra_context() -> dict[str, Any]:
    return _extra_context.get().copy()


def set_extra_context(**kwargs: Any) -> None:
    """
    Add fields to the log context of the current evaluation.

    Example:
        set_extra_context(flag_type="boolean")
    """
    current = _extra_context.get().copy()
    current.update(kwargs)
    _extra_context.set(current)


def clear_context() -> None:
    _evaluation_id.set(None)
    _extra_context.set({})


# =============================================================================
# STRUCTLOG PROCESSOR
# =============================================================================


def inject_evaluation_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Structlog processor that injects the evaluation context into logs.

    Adds:
        - evaluation_id: ID of the current evaluation
        - Any extra context set via set_extra_context()

    Fields already present on the event are never overwritten.
    """
    evaluation_id = get_evaluation_id()
    if evaluation_id:
        event_dict.setdefault("evaluation_id", evaluation_id)

    for key, value in get_extra_context().items():
        if key not in event_dict:
            event_dict[key] = value

    return event_dict


# =============================================================================
# EVALUATION SCOPE
# =============================================================================


@contextmanager
def evaluation_scope(
    evaluation_id: str | None = None,
    **fields: Any,
) -> Iterator[str]:
    """
    Set the log context for one evaluation and restore the previous one on exit.

    Args:
        evaluation_id: ID to use (generated if None)
        **fields: Extra fields for every log line in the scope

    Yields:
        The evaluation ID
    """
    resolved_id = evaluation_id or generate_evaluation_id()
    id_token = _evaluation_id.set(resolved_id)
    extra_token = _extra_context.set(
        {**_extra_context.get(), **{k: v for k, v in fields.items() if v is not None}}
    )
    try:
        yield resolved_id
    finally:
        _extra_context.reset(extra_token)
        _evaluation_id.reset(id_token)
