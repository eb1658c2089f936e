"""Tool registry for dispatching memory tool calls."""

import time
from typing import Any

from agentmem.agent.tools.base import Tool, ToolExecutionResult
from agentmem.logging import get_logger

audit_log = get_logger("agentmem.audit")


class ToolRegistry:
    """
    Registry for agent tools.

    Looks tools up by name, validates parameters and turns failures into
    error results instead of raising.
    """

    _TRUNCATE_KEYS = {"content", "summary", "normative", "base_prompt"}
    _REDACT_KEYS = {"update"}

    def __init__(self, audit: bool = True):
        self._tools: dict[str, Tool] = {}
        self._audit = audit

    def register(self, tool: Tool) -> None:
        """Register a tool."""
        self._tools[tool.name] = tool

    def unregister(self, name: str) -> None:
        self._tools.pop(name, None)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def get_definitions(self) -> list[dict[str, Any]]:
        """Get all tool definitions in OpenAI format."""
        return [tool.to_schema() for tool in self._tools.values()]

    def _sanitize_params(self, params: dict) -> dict:
        """Shorten long text params for the audit log."""
        sanitized = {}
        for k, v in params.items():
            if k in self._REDACT_KEYS:
                sanitized[k] = f"<{len(str(v))} chars>"
            elif k in self._TRUNCATE_KEYS and isinstance(v, str) and len(v) > 200:
                sanitized[k] = v[:200] + "..."
            else:
                sanitized[k] = v
        return sanitized

    @staticmethod
    def _ensure_result(result: str | ToolExecutionResult) -> ToolExecutionResult:
        if isinstance(result, ToolExecutionResult):
            return result
        return ToolExecutionResult(text=str(result))

    async def execute_result(self, name: str, params: dict[str, Any]) -> ToolExecutionResult:
        """Execute a tool and return a structured result."""
        tool = self._tools.get(name)
        if not tool:
            return ToolExecutionResult(
                text=f"Unknown tool: {name}. Available: {', '.join(self.tool_names)}",
                is_error=True,
            )

        if self._audit:
            audit_log.info("tool_call_started", tool=name, params=self._sanitize_params(params))

        t0 = time.monotonic()
        try:
            errors = tool.validate_params(params)
            if errors:
                if self._audit:
                    audit_log.warning("tool_call_failed", tool=name, error="invalid_params")
                return ToolExecutionResult(
                    text=f"Error: Invalid parameters for tool '{name}': " + "; ".join(errors),
                    is_error=True,
                )

            result = self._ensure_result(await tool.execute(**params))
            if self._audit:
                elapsed = (time.monotonic() - t0) * 1000
                audit_log.info(
                    "tool_call_completed",
                    tool=name,
                    duration_ms=round(elapsed, 1),
                    result_length=len(result.text),
                    is_error=result.is_error,
                    detail_op=result.details.get("op") if result.details else None,
                )
            return result
        except Exception as e:
            if self._audit:
                elapsed = (time.monotonic() - t0) * 1000
                audit_log.warning("tool_call_failed", tool=name, error=str(e), duration_ms=round(elapsed, 1))
            return ToolExecutionResult(text=f"Error: {e}", is_error=True)

    async def execute(self, name: str, params: dict[str, Any]) -> str:
        """
        Execute a tool by name with given parameters.

        Args:
            name: Tool name.
            params: Tool parameters.

        Returns:
            Tool execution result as string.
        """
        return (await self.execute_result(name, params)).text

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools
