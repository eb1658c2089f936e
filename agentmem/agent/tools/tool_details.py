"""Shared constants/helpers for structured tool result details."""

from __future__ import annotations

from typing import Any

OP_LOAD = "memory_load"
OP_SAVE = "memory_save"
OP_ADD_MESSAGE = "memory_add_message"
OP_GET_CONTEXT = "memory_get_context"
OP_GET_LANE = "memory_get_lane"
OP_APPLY_SUMMARY = "memory_apply_summary"
OP_GET_RECENT = "memory_get_recent"
OP_APPLY_PERSONA = "memory_apply_persona"
OP_STATUS = "memory_status"
OP_SET_NORMATIVE = "memory_set_normative"

# Ops that change in-memory state and must hold the agent lock
MUTATING_OPS = frozenset({
    OP_LOAD,
    OP_SAVE,
    OP_ADD_MESSAGE,
    OP_APPLY_SUMMARY,
    OP_APPLY_PERSONA,
    OP_SET_NORMATIVE,
})


def details_with_op(op: str, **fields: Any) -> dict[str, Any]:
    """Build a structured details payload with a normalized ``op`` field."""
    return {"op": op, **fields}
