"""Memory tools: the agent-facing surface of the memory core."""

from __future__ import annotations

import json
from abc import abstractmethod
from typing import Any

import json_repair

from agentmem.agent.tools.base import Tool, ToolExecutionResult
from agentmem.agent.tools.registry import ToolRegistry
from agentmem.agent.tools.tool_details import (
    MUTATING_OPS,
    OP_ADD_MESSAGE,
    OP_APPLY_PERSONA,
    OP_APPLY_SUMMARY,
    OP_GET_CONTEXT,
    OP_GET_LANE,
    OP_GET_RECENT,
    OP_LOAD,
    OP_SAVE,
    OP_SET_NORMATIVE,
    OP_STATUS,
    details_with_op,
)
from agentmem.logging import agent_context
from agentmem.memory.manager import DEFAULT_REFLECTION_WINDOW, MemoryManager
from agentmem.memory.types import LANES, ROLES, PersonaUpdate
from agentmem.session.registry import ManagerRegistry

_AGENT_ID = {"type": "string", "description": "The agent identifier (e.g., \"God\", \"moderator\")"}
_LANE = {"type": "string", "enum": list(LANES)}


def _json_result(op: str, payload: dict[str, Any] | list[Any], *, indent: int | None = None) -> ToolExecutionResult:
    return ToolExecutionResult(
        text=json.dumps(payload, ensure_ascii=False, indent=indent),
        details=details_with_op(op),
    )


class MemoryTool(Tool):
    """Base for tools that act on one agent's manager.

    Subclasses implement :meth:`run`; ops listed in ``MUTATING_OPS`` run under
    the agent's lock.
    """

    def __init__(self, managers: ManagerRegistry):
        self._managers = managers

    @abstractmethod
    def run(self, manager: MemoryManager, **kwargs: Any) -> ToolExecutionResult:
        """Act on the agent's manager."""

    async def execute(self, agent_id: str, **kwargs: Any) -> ToolExecutionResult:
        with agent_context(agent_id):
            if self.name in MUTATING_OPS:
                return await self._managers.run_exclusive(agent_id, lambda m: self.run(m, **kwargs))
            return self.run(self._managers.get_or_create(agent_id), **kwargs)


class MemoryLoadTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_LOAD

    @property
    def description(self) -> str:
        return "Load memory state for an agent. Call on resurrection/startup."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "agent_id": _AGENT_ID,
                "base_prompt": {
                    "type": "string",
                    "description": "Immutable base prompt (mission, commandments). Only used if no existing state.",
                },
            },
            "required": ["agent_id"],
        }

    def run(self, manager: MemoryManager, base_prompt: str | None = None, **kwargs: Any) -> ToolExecutionResult:
        loaded = manager.load()
        if not loaded and base_prompt:
            manager.set_base_prompt(base_prompt)

        if manager.persistence is not None and not manager.get_base_prompt():
            commandments = manager.persistence.read_commandments(manager.agent_id)
            if commandments:
                manager.set_base_prompt(commandments)

        return _json_result(OP_LOAD, {
            "success": True,
            "loaded": loaded,
            "persona_version": manager.persona.version,
        })


class MemorySaveTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_SAVE

    @property
    def description(self) -> str:
        return "Save current memory state to disk. Call before shutdown or periodically."

    @property
    def parameters(self) -> dict[str, Any]:
        return {"type": "object", "properties": {"agent_id": _AGENT_ID}, "required": ["agent_id"]}

    def run(self, manager: MemoryManager, **kwargs: Any) -> ToolExecutionResult:
        manager.save()
        return _json_result(OP_SAVE, {"success": True})


class MemoryAddMessageTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_ADD_MESSAGE

    @property
    def description(self) -> str:
        return "Add a message to the memory buffer for later summarization."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "agent_id": _AGENT_ID,
                "role": {"type": "string", "enum": list(ROLES)},
                "content": {"type": "string"},
            },
            "required": ["agent_id", "role", "content"],
        }

    def run(self, manager: MemoryManager, role: str = "", content: str = "", **kwargs: Any) -> ToolExecutionResult:
        manager.add_message(role, content)
        return _json_result(OP_ADD_MESSAGE, {
            "success": True,
            "needs_summarization": manager.needs_summarization(),
            "needs_reflection": manager.needs_reflection(),
        })


class MemoryGetContextTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_GET_CONTEXT

    @property
    def description(self) -> str:
        return "Get the full rendered context for injection into system prompt."

    @property
    def parameters(self) -> dict[str, Any]:
        return {"type": "object", "properties": {"agent_id": _AGENT_ID}, "required": ["agent_id"]}

    def run(self, manager: MemoryManager, **kwargs: Any) -> ToolExecutionResult:
        context = manager.render_context()
        return ToolExecutionResult(text=context, details=details_with_op(OP_GET_CONTEXT, chars=len(context)))


class MemoryGetLaneTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_GET_LANE

    @property
    def description(self) -> str:
        return "Get messages from a lane for summarization by external LLM."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"agent_id": _AGENT_ID, "lane": _LANE},
            "required": ["agent_id", "lane"],
        }

    def run(self, manager: MemoryManager, lane: str = "", **kwargs: Any) -> ToolExecutionResult:
        content = manager.get_lane_for_summarization(lane)
        return ToolExecutionResult(
            text=content or "(empty)",
            details=details_with_op(OP_GET_LANE, lane=lane, empty=not content),
        )


class MemoryApplySummaryTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_APPLY_SUMMARY

    @property
    def description(self) -> str:
        return "Apply a lane summary (after LLM summarization)."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"agent_id": _AGENT_ID, "lane": _LANE, "summary": {"type": "string"}},
            "required": ["agent_id", "lane", "summary"],
        }

    def run(self, manager: MemoryManager, lane: str = "", summary: str = "", **kwargs: Any) -> ToolExecutionResult:
        manager.apply_lane_summary(lane, summary)
        return _json_result(OP_APPLY_SUMMARY, {"success": True})


class MemoryGetRecentTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_GET_RECENT

    @property
    def description(self) -> str:
        return "Get recent messages for persona mining/reflection."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "agent_id": _AGENT_ID,
                "max_messages": {"type": "integer", "minimum": 0, "default": DEFAULT_REFLECTION_WINDOW},
            },
            "required": ["agent_id"],
        }

    def run(
        self,
        manager: MemoryManager,
        max_messages: int = DEFAULT_REFLECTION_WINDOW,
        **kwargs: Any,
    ) -> ToolExecutionResult:
        messages = manager.get_recent_for_reflection(max_messages)
        return _json_result(OP_GET_RECENT, [m.to_dict() for m in messages])


class MemoryApplyPersonaTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_APPLY_PERSONA

    @property
    def description(self) -> str:
        return "Apply a persona update (from LLM persona mining)."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "agent_id": _AGENT_ID,
                "update": {
                    "description": "PersonaUpdate with friction, confidence, and persona facets "
                    "(object, or its JSON text)",
                },
            },
            "required": ["agent_id", "update"],
        }

    @staticmethod
    def _coerce_update(raw: Any) -> PersonaUpdate:
        if isinstance(raw, str):
            # Miner output is model text; tolerate trailing commas, fences and the like
            raw = json_repair.loads(raw)
        if not isinstance(raw, dict):
            raise ValueError("update must be a JSON object")
        return PersonaUpdate.from_dict(raw)

    def run(self, manager: MemoryManager, update: Any = None, **kwargs: Any) -> ToolExecutionResult:
        applied = manager.apply_persona_update(self._coerce_update(update))
        return _json_result(OP_APPLY_PERSONA, {"success": applied, "new_version": manager.persona.version})


class MemoryStatusTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_STATUS

    @property
    def description(self) -> str:
        return "Get memory status: persona weights, lane sizes, token estimate."

    @property
    def parameters(self) -> dict[str, Any]:
        return {"type": "object", "properties": {"agent_id": _AGENT_ID}, "required": ["agent_id"]}

    def run(self, manager: MemoryManager, **kwargs: Any) -> ToolExecutionResult:
        return _json_result(OP_STATUS, manager.status().to_dict(), indent=2)


class MemorySetNormativeTool(MemoryTool):
    @property
    def name(self) -> str:
        return OP_SET_NORMATIVE

    @property
    def description(self) -> str:
        return "Set the normative policy block (soft defaults, evolvable)."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"agent_id": _AGENT_ID, "normative": {"type": "string"}},
            "required": ["agent_id", "normative"],
        }

    def run(self, manager: MemoryManager, normative: str = "", **kwargs: Any) -> ToolExecutionResult:
        manager.set_normative_block(normative)
        return _json_result(OP_SET_NORMATIVE, {"success": True})


MEMORY_TOOL_TYPES: tuple[type[MemoryTool], ...] = (
    MemoryLoadTool,
    MemorySaveTool,
    MemoryAddMessageTool,
    MemoryGetContextTool,
    MemoryGetLaneTool,
    MemoryApplySummaryTool,
    MemoryGetRecentTool,
    MemoryApplyPersonaTool,
    MemoryStatusTool,
    MemorySetNormativeTool,
)


def build_memory_tools(managers: ManagerRegistry, registry: ToolRegistry | None = None) -> ToolRegistry:
    """Register every memory tool against *managers* and return the tool registry."""
    registry = registry or ToolRegistry()
    for tool_type in MEMORY_TOOL_TYPES:
        registry.register(tool_type(managers))
    return registry
