"""Memory file I/O helpers with atomic semantics."""

from __future__ import annotations

from pathlib import Path

from agentmem.utils.helpers import atomic_write_text


class MemoryIO:
    """Thin I/O adapter so persistence can be tested independently."""

    @staticmethod
    def read_text(path: Path, *, encoding: str = "utf-8") -> str | None:
        if not path.exists():
            return None
        return path.read_text(encoding=encoding)

    @staticmethod
    def write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
        atomic_write_text(path, content, encoding=encoding)
