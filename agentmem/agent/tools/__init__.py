"""Agent tools module."""

from agentmem.agent.tools.base import Tool, ToolExecutionResult
from agentmem.agent.tools.memory import build_memory_tools
from agentmem.agent.tools.registry import ToolRegistry

__all__ = ["Tool", "ToolExecutionResult", "ToolRegistry", "build_memory_tools"]
