"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MemoryConfig(Base):
    """Tunables for context budgeting, recency and persona mining."""

    # Context budgeting
    context_tokens: int = Field(default=8192, gt=0)
    avg_chars_per_token: float = Field(default=4, gt=0)
    high_ratio: float = Field(default=0.70, gt=0)
    # Target ratio after summarization; informational only, nothing enforces it.
    low_ratio: float = Field(default=0.50, gt=0)

    # Recency
    keep_recent_per_lane: int = Field(default=4, ge=0)

    # Persona mining
    min_reflect_gap_turns: int = Field(default=3, ge=0)
    decay_per_pass: float = Field(default=0.03, ge=0, le=1)
    min_keep_weight: float = Field(default=0.22, ge=0, le=1)
    merge_aggressiveness: float = Field(default=0.60, ge=0, le=1)


class StorageConfig(Base):
    """Where per-agent state lives on disk."""

    root: str = "~/.agentchat/agents"

    @property
    def root_path(self) -> Path:
        return Path(self.root).expanduser()


class LoggingConfig(Base):
    json_output: bool = False
    level: str = "INFO"


class Config(Base):
    """Root configuration for agentmem."""

    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
