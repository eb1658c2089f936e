"""On-disk persistence for per-agent memory state."""

from __future__ import annotations

import json
import time
from pathlib import Path

from agentmem.logging import get_logger
from agentmem.memory.io import MemoryIO
from agentmem.memory.render import render_context_file
from agentmem.memory.types import MemoryState, now_iso
from agentmem.utils.helpers import safe_filename

logger = get_logger(__name__)


class MemoryPersistence:
    """
    Stores each agent under ``<root>/<agent_id>/``.

    ``memory.json`` is the canonical state; ``context.md`` is a rendered copy
    for people; ``commandments.md`` is an optional hand-written base prompt.
    """

    STATE_FILE = "memory.json"
    CONTEXT_FILE = "context.md"
    COMMANDMENTS_FILE = "commandments.md"

    def __init__(self, root: Path, io: MemoryIO | None = None):
        self.root = root
        self.io = io or MemoryIO()

    def agent_dir(self, agent_id: str) -> Path:
        return self.root / safe_filename(agent_id)

    def memory_path(self, agent_id: str) -> Path:
        return self.agent_dir(agent_id) / self.STATE_FILE

    def context_path(self, agent_id: str) -> Path:
        return self.agent_dir(agent_id) / self.CONTEXT_FILE

    def commandments_path(self, agent_id: str) -> Path:
        return self.agent_dir(agent_id) / self.COMMANDMENTS_FILE

    def load(self, agent_id: str) -> MemoryState | None:
        """Load persisted state; ``None`` when absent or unreadable."""
        path = self.memory_path(agent_id)
        if not path.exists():
            return None

        try:
            raw = self.io.read_text(path)
            data = json.loads(raw or "")
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            state = MemoryState.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning("Failed to load memory", agent_id=agent_id, path=str(path), error=str(e))
            return None

        logger.debug(
            "memory_loaded",
            agent_id=agent_id,
            persona_version=state.persona.version,
            message_count=len(state.recent_messages),
        )
        return state

    def save(self, state: MemoryState) -> None:
        """Write ``memory.json`` then refresh ``context.md``. I/O errors propagate."""
        started = time.perf_counter()
        state.updated_at = now_iso()

        path = self.memory_path(state.agent_id)
        payload = json.dumps(state.to_dict(), ensure_ascii=False, indent=2)
        self.io.write_text(path, payload)
        self.io.write_text(self.context_path(state.agent_id), render_context_file(state))

        elapsed_ms = round((time.perf_counter() - started) * 1000, 3)
        logger.debug(
            "memory_saved",
            agent_id=state.agent_id,
            persona_version=state.persona.version,
            message_count=len(state.recent_messages),
            elapsed_ms=elapsed_ms,
            file_bytes=path.stat().st_size if path.exists() else None,
        )

    def read_commandments(self, agent_id: str) -> str | None:
        return self.io.read_text(self.commandments_path(agent_id))
