"""Per-agent memory manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from agentmem.config.schema import MemoryConfig
from agentmem.logging import get_logger
from agentmem.memory import budget
from agentmem.memory.persistence import MemoryPersistence
from agentmem.memory.persona import PersonaEngine
from agentmem.memory.render import render_context
from agentmem.memory.summarization import LaneSummarizer
from agentmem.memory.types import (
    Lane,
    MemoryState,
    Message,
    PersonaModel,
    PersonaUpdate,
    Role,
    now_ms,
    validate_role,
)

logger = get_logger(__name__)

DEFAULT_REFLECTION_WINDOW = 16


@dataclass(frozen=True)
class MemoryStatus:
    """Read-only snapshot for introspection."""

    agent_id: str
    persona_version: int
    counts: dict[str, int] = field(default_factory=dict)
    recent_messages: int = 0
    has_summaries: bool = False
    estimated_tokens: int = 0
    needs_summarization: bool = False
    needs_reflection: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "persona_version": self.persona_version,
            **self.counts,
            "recent_messages": self.recent_messages,
            "has_summaries": self.has_summaries,
            "estimated_tokens": self.estimated_tokens,
            "needs_summarization": self.needs_summarization,
            "needs_reflection": self.needs_reflection,
        }


class MemoryManager:
    """
    Owns one agent's :class:`MemoryState` and drives it through lanes,
    summarization, persona mining and rendering.

    Every method is synchronous and in-memory; only :meth:`load` and
    :meth:`save` touch the persistence collaborator. The turn counters are
    process-local and start at zero for every new manager.
    """

    def __init__(
        self,
        agent_id: str,
        config: MemoryConfig | None = None,
        persistence: MemoryPersistence | None = None,
    ):
        self.agent_id = agent_id
        self.config = config or MemoryConfig()
        self.persistence = persistence
        self.summarizer = LaneSummarizer(self.config)
        self.persona_engine = PersonaEngine(self.config)
        self._state = MemoryState.empty(agent_id)
        self._turn_counter = 0
        self._last_reflect_turn = 0

    @property
    def state(self) -> MemoryState:
        return self._state

    @property
    def persona(self) -> PersonaModel:
        return self._state.persona

    @property
    def turn_counter(self) -> int:
        return self._turn_counter

    def load(self) -> bool:
        """Adopt persisted state if any; otherwise keep the current (empty) state."""
        if self.persistence is None:
            return False
        loaded = self.persistence.load(self.agent_id)
        if loaded is None:
            return False
        self._state = loaded
        logger.info("Loaded memory", agent_id=self.agent_id, persona_version=loaded.persona.version)
        return True

    def save(self) -> None:
        if self.persistence is None:
            raise RuntimeError(f"No persistence configured for agent '{self.agent_id}'")
        self.persistence.save(self._state)

    def set_base_prompt(self, prompt: str) -> None:
        """Set the base identity (mission, commandments). Meant to be set once."""
        self._state.base_prompt = prompt

    def get_base_prompt(self) -> str:
        return self._state.base_prompt

    def set_normative_block(self, block: str) -> None:
        self._state.normative_block = block

    def add_message(self, role: Role, content: str) -> Message:
        """Append to the recent buffer and advance the turn counter."""
        validate_role(role)
        # Timestamps stay strictly increasing so re-sorting keeps insertion order
        timestamp = now_ms()
        if self._state.recent_messages:
            timestamp = max(timestamp, self._state.recent_messages[-1].timestamp + 1)
        msg = Message(role=role, content=content, timestamp=timestamp)
        self._state.recent_messages.append(msg)
        self._turn_counter += 1
        return msg

    def estimate_tokens(self) -> int:
        return budget.estimate_tokens(self._state, self.config.avg_chars_per_token)

    def needs_summarization(self) -> bool:
        return budget.needs_summarization(self._state, self.config)

    def get_lane_for_summarization(self, lane: Lane) -> str:
        return self.summarizer.get_lane_for_summarization(self._state, lane)

    def apply_lane_summary(self, lane: Lane, summary: str) -> None:
        self.summarizer.apply_lane_summary(self._state, lane, summary)

    def needs_reflection(self) -> bool:
        return self._turn_counter - self._last_reflect_turn >= self.config.min_reflect_gap_turns

    def get_recent_for_reflection(self, max_messages: int = DEFAULT_REFLECTION_WINDOW) -> list[Message]:
        if max_messages <= 0:
            return []
        return list(self._state.recent_messages[-max_messages:])

    def apply_persona_update(self, update: PersonaUpdate | dict[str, Any]) -> bool:
        if isinstance(update, dict):
            update = PersonaUpdate.from_dict(update)
        self.persona_engine.apply(self._state.persona, update, self._turn_counter)
        self._last_reflect_turn = self._turn_counter
        return True

    def render_context(self) -> str:
        return render_context(self._state)

    def status(self) -> MemoryStatus:
        state = self._state
        return MemoryStatus(
            agent_id=self.agent_id,
            persona_version=state.persona.version,
            counts=state.persona.counts(),
            recent_messages=len(state.recent_messages),
            has_summaries=state.lane_summaries.has_any(),
            estimated_tokens=self.estimate_tokens(),
            needs_summarization=self.needs_summarization(),
            needs_reflection=self.needs_reflection(),
        )
