"""Memory state types.

Every type round-trips through ``to_dict``/``from_dict`` using the camelCase
keys of the on-disk ``memory.json`` format.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, TypeAlias

Role: TypeAlias = Literal["assistant", "user", "system", "tool"]
Lane: TypeAlias = Literal["assistant", "user", "system"]

ROLES: tuple[str, ...] = ("assistant", "user", "system", "tool")
LANES: tuple[str, ...] = ("assistant", "user", "system")

PERSONA_CATEGORIES: tuple[str, ...] = ("roles", "style", "heuristics", "goals", "antigoals")

STATE_SCHEMA_VERSION = 1


def now_ms() -> int:
    return int(time.time() * 1000)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def validate_role(role: str) -> str:
    if role not in ROLES:
        raise ValueError(f"Unknown role '{role}'. Expected one of: {', '.join(ROLES)}")
    return role


def validate_lane(lane: str) -> str:
    if lane not in LANES:
        raise ValueError(f"Unknown lane '{lane}'. Expected one of: {', '.join(LANES)}")
    return lane


def _clamp_unit(value: Any) -> float:
    return min(1.0, max(0.0, float(value)))


@dataclass(frozen=True)
class Message:
    """One buffered conversation message."""

    role: str
    content: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        if not isinstance(data, dict):
            raise ValueError(f"message must be a JSON object, got {type(data).__name__}")
        return cls(
            role=validate_role(data["role"]),
            content=str(data.get("content", "")),
            timestamp=int(data.get("timestamp", 0)),
        )


@dataclass
class LaneSummaries:
    """Cumulative per-lane summaries, newest block first."""

    assistant: str = ""
    system: str = ""
    user: str = ""
    last_summarized_at: int = 0

    def get(self, lane: str) -> str:
        return getattr(self, validate_lane(lane))

    def set(self, lane: str, text: str) -> None:
        setattr(self, validate_lane(lane), text)

    def has_any(self) -> bool:
        return bool(self.assistant or self.system or self.user)

    def to_dict(self) -> dict[str, Any]:
        return {
            "assistant": self.assistant,
            "system": self.system,
            "user": self.user,
            "lastSummarizedAt": self.last_summarized_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LaneSummaries:
        return cls(
            assistant=str(data.get("assistant", "")),
            system=str(data.get("system", "")),
            user=str(data.get("user", "")),
            last_summarized_at=int(data.get("lastSummarizedAt", 0)),
        )


@dataclass
class PersonaFacet:
    """A weighted persona trait."""

    text: str
    weight: float

    @property
    def key(self) -> str:
        return self.text.strip().casefold()

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "weight": self.weight}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PersonaFacet:
        if not isinstance(data, dict):
            raise ValueError(f"facet must be a JSON object, got {type(data).__name__}")
        return cls(text=str(data["text"]), weight=_clamp_unit(data.get("weight", 0.0)))


def _object(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"'{key}' must be a JSON object, got {type(value).__name__}")
    return value


def _facets_from(raw: Any) -> list[PersonaFacet]:
    if not raw:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"facet list must be a JSON array, got {type(raw).__name__}")
    return [PersonaFacet.from_dict(item) for item in raw]


@dataclass
class PersonaModel:
    """Self-evolving identity: five capped, weight-sorted facet categories."""

    version: int = 0
    last_updated_turn: int = 0
    roles: list[PersonaFacet] = field(default_factory=list)
    style: list[PersonaFacet] = field(default_factory=list)
    heuristics: list[PersonaFacet] = field(default_factory=list)
    goals: list[PersonaFacet] = field(default_factory=list)
    antigoals: list[PersonaFacet] = field(default_factory=list)

    def category(self, name: str) -> list[PersonaFacet]:
        if name not in PERSONA_CATEGORIES:
            raise ValueError(f"Unknown persona category '{name}'")
        return getattr(self, name)

    def counts(self) -> dict[str, int]:
        return {name: len(self.category(name)) for name in PERSONA_CATEGORIES}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"version": self.version, "lastUpdatedTurn": self.last_updated_turn}
        for name in PERSONA_CATEGORIES:
            data[name] = [f.to_dict() for f in self.category(name)]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PersonaModel:
        return cls(
            version=int(data.get("version", 0)),
            last_updated_turn=int(data.get("lastUpdatedTurn", 0)),
            **{name: _facets_from(data.get(name)) for name in PERSONA_CATEGORIES},
        )


@dataclass
class PersonaPatch:
    """Partial persona as mined by reflection; absent categories are empty."""

    roles: list[PersonaFacet] = field(default_factory=list)
    style: list[PersonaFacet] = field(default_factory=list)
    heuristics: list[PersonaFacet] = field(default_factory=list)
    goals: list[PersonaFacet] = field(default_factory=list)
    antigoals: list[PersonaFacet] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PersonaPatch:
        return cls(**{name: _facets_from(data.get(name)) for name in PERSONA_CATEGORIES})


@dataclass
class PersonaUpdate:
    """Output of one reflection pass.

    ``friction`` and ``confidence`` are carried for future weighting and do not
    affect the merge.
    """

    friction: float = 0.0
    confidence: float = 0.0
    persona: PersonaPatch = field(default_factory=PersonaPatch)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PersonaUpdate:
        return cls(
            friction=_clamp_unit(data.get("friction", 0.0)),
            confidence=_clamp_unit(data.get("confidence", 0.0)),
            persona=PersonaPatch.from_dict(_object(data, "persona")),
        )


@dataclass
class MemoryState:
    """Root aggregate: everything persisted for one agent identity."""

    agent_id: str
    version: int = STATE_SCHEMA_VERSION
    persona: PersonaModel = field(default_factory=PersonaModel)
    lane_summaries: LaneSummaries = field(default_factory=LaneSummaries)
    recent_messages: list[Message] = field(default_factory=list)
    base_prompt: str = ""
    normative_block: str = ""
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    @classmethod
    def empty(cls, agent_id: str, base_prompt: str = "") -> MemoryState:
        now = now_iso()
        return cls(agent_id=agent_id, base_prompt=base_prompt, created_at=now, updated_at=now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "agentId": self.agent_id,
            "persona": self.persona.to_dict(),
            "laneSummaries": self.lane_summaries.to_dict(),
            "recentMessages": [m.to_dict() for m in self.recent_messages],
            "basePrompt": self.base_prompt,
            "normativeBlock": self.normative_block,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoryState:
        if "agentId" not in data:
            raise ValueError("memory state is missing 'agentId'")
        messages = data.get("recentMessages") or []
        if not isinstance(messages, list):
            raise ValueError(f"'recentMessages' must be a JSON array, got {type(messages).__name__}")
        return cls(
            agent_id=str(data["agentId"]),
            version=int(data.get("version", STATE_SCHEMA_VERSION)),
            persona=PersonaModel.from_dict(_object(data, "persona")),
            lane_summaries=LaneSummaries.from_dict(_object(data, "laneSummaries")),
            recent_messages=[Message.from_dict(m) for m in messages],
            base_prompt=str(data.get("basePrompt", "")),
            normative_block=str(data.get("normativeBlock", "")),
            created_at=str(data.get("createdAt") or now_iso()),
            updated_at=str(data.get("updatedAt") or now_iso()),
        )

