"""Lane partitioning and coarse context budgeting."""

from __future__ import annotations

import math
from typing import Iterable

from agentmem.config.schema import MemoryConfig
from agentmem.memory.types import ROLES, MemoryState, Message

# Per-message allowance for role tags and formatting around the content
MESSAGE_OVERHEAD_CHARS = 32


def partition_messages(messages: Iterable[Message]) -> dict[str, list[Message]]:
    """Split *messages* by role, keeping relative order. Every role is present."""
    lanes: dict[str, list[Message]] = {role: [] for role in ROLES}
    for msg in messages:
        lanes[msg.role].append(msg)
    return lanes


def count_context_chars(state: MemoryState) -> int:
    chars = len(state.base_prompt) + len(state.normative_block)
    summaries = state.lane_summaries
    chars += len(summaries.assistant) + len(summaries.system) + len(summaries.user)
    for msg in state.recent_messages:
        chars += len(msg.content) + MESSAGE_OVERHEAD_CHARS
    return chars


def estimate_tokens(state: MemoryState, avg_chars_per_token: float = 4) -> int:
    """Approximate token count of the assembled context.

    This is a chars-per-token proxy, not a tokenizer. It only needs to grow
    with every buffered message so the summarization trigger fires.
    """
    return math.ceil(count_context_chars(state) / avg_chars_per_token)


def needs_summarization(state: MemoryState, config: MemoryConfig) -> bool:
    """True when the estimate exceeds ``context_tokens * high_ratio``.

    ``config.low_ratio`` is not consulted: how far to compress is left to the
    caller and the external summarizer.
    """
    budget = config.context_tokens * config.high_ratio
    return estimate_tokens(state, config.avg_chars_per_token) > budget
