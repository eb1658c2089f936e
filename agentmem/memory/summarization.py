"""Two-phase, externally assisted lane compression."""

from __future__ import annotations

from agentmem.config.schema import MemoryConfig
from agentmem.logging import get_logger
from agentmem.memory.budget import partition_messages
from agentmem.memory.types import ROLES, MemoryState, Message, now_ms, validate_lane

logger = get_logger(__name__)

SUMMARY_SEPARATOR = "\n\n---\n\n"


def _tail(messages: list[Message], keep: int) -> list[Message]:
    if keep <= 0:
        return []
    return messages[-keep:]


def _older(messages: list[Message], keep: int) -> list[Message]:
    return messages[: max(0, len(messages) - keep)]


class LaneSummarizer:
    """Extracts the compressible slice of a lane and folds summaries back in.

    Phase A (:meth:`get_lane_for_summarization`) hands the older messages of a
    lane to an external summarizer. Phase B (:meth:`apply_lane_summary`)
    prepends the produced summary and compacts the raw buffer. ``tool``
    messages are never summarized, but they are compacted like every other role.
    """

    def __init__(self, config: MemoryConfig):
        self.config = config

    def older_slice(self, state: MemoryState, lane: str) -> list[Message]:
        lane_messages = partition_messages(state.recent_messages)[validate_lane(lane)]
        return _older(lane_messages, self.config.keep_recent_per_lane)

    def get_lane_for_summarization(self, state: MemoryState, lane: str) -> str:
        """Render the older slice of *lane* as bullets, or ``""`` when there is nothing to do."""
        older = self.older_slice(state, lane)
        if not older:
            return ""
        label = lane.upper()
        return "\n\n".join(f"- {label}: {m.content}" for m in older)

    def apply_lane_summary(self, state: MemoryState, lane: str, summary: str) -> None:
        """Prepend *summary* to the lane and keep only the recent tail of every role.

        The buffer compaction runs even when the lane had nothing older than its
        tail, so applying a summary to one lane also trims the others.
        """
        validate_lane(lane)
        existing = state.lane_summaries.get(lane)
        if existing:
            state.lane_summaries.set(lane, f"{summary}{SUMMARY_SEPARATOR}{existing}")
        else:
            state.lane_summaries.set(lane, summary)
        state.lane_summaries.last_summarized_at = now_ms()

        before = len(state.recent_messages)
        lanes = partition_messages(state.recent_messages)
        keep = self.config.keep_recent_per_lane
        kept: list[Message] = []
        for role in ROLES:
            kept.extend(_tail(lanes[role], keep))
        kept.sort(key=lambda m: m.timestamp)
        state.recent_messages = kept

        logger.debug(
            "lane_summary_applied",
            agent_id=state.agent_id,
            lane=lane,
            summary_chars=len(summary),
            lane_summary_chars=len(state.lane_summaries.get(lane)),
            messages_before=before,
            messages_after=len(kept),
        )
