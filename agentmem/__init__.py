"""agentmem - persistent lane/persona memory for long-lived agents."""

__version__ = "0.1.0"
