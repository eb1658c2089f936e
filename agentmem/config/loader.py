"""Configuration loading utilities."""

import json
from pathlib import Path


from agentmem.config.schema import Config
from agentmem.logging import get_logger

logger = get_logger(__name__)


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".agentmem" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return Config.model_validate(data)
        except (ValueError, OSError) as e:
            # covers JSONDecodeError, UnicodeDecodeError and ValidationError
            logger.warning("Failed to load config, using defaults", path=str(path), error=str(e))

    return Config()
