"""Per-agent manager registry."""
