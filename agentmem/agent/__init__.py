"""Agent-facing surfaces (tool dispatch)."""
