"""Configuration module for agentmem."""

from agentmem.config.loader import get_config_path, load_config
from agentmem.config.schema import Config, MemoryConfig

__all__ = ["Config", "MemoryConfig", "get_config_path", "load_config"]
