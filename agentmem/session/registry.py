"""Registry of live memory managers, one per agent identity."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from agentmem.config.schema import MemoryConfig
from agentmem.logging import get_logger
from agentmem.memory.manager import MemoryManager
from agentmem.memory.persistence import MemoryPersistence

logger = get_logger(__name__)

T = TypeVar("T")


class ManagerRegistry:
    """
    Creates managers lazily and keeps them for the registry's lifetime.

    Owned and passed around by the caller; there is no process-wide instance.
    Mutating work for one agent is serialized through :meth:`run_exclusive`.
    """

    def __init__(self, persistence: MemoryPersistence, config: MemoryConfig | None = None):
        self.persistence = persistence
        self.config = config or MemoryConfig()
        self._managers: dict[str, MemoryManager] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get_or_create(self, agent_id: str) -> MemoryManager:
        """Return the manager for *agent_id*, creating an empty one on first use."""
        manager = self._managers.get(agent_id)
        if manager is None:
            manager = MemoryManager(agent_id, self.config, self.persistence)
            self._managers[agent_id] = manager
            logger.debug("memory_manager_created", agent_id=agent_id, live_managers=len(self._managers))
        return manager

    def has(self, agent_id: str) -> bool:
        return agent_id in self._managers

    def invalidate(self, agent_id: str) -> None:
        """Drop the cached manager; the next access starts from an empty state."""
        self._managers.pop(agent_id, None)
        lock = self._locks.get(agent_id)
        if lock is not None and not lock.locked():
            self._locks.pop(agent_id, None)

    @property
    def agent_ids(self) -> list[str]:
        return list(self._managers.keys())

    def get_lock(self, agent_id: str) -> asyncio.Lock:
        lock = self._locks.get(agent_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[agent_id] = lock
        return lock

    async def run_exclusive(
        self,
        agent_id: str,
        work: Callable[[MemoryManager], T | Awaitable[T]],
    ) -> T:
        """Run *work* against the agent's manager while holding its lock."""
        lock = self.get_lock(agent_id)
        async with lock:
            result = work(self.get_or_create(agent_id))
            if asyncio.iscoroutine(result):
                result = await result
            return result

    def __len__(self) -> int:
        return len(self._managers)

    def __contains__(self, agent_id: str) -> bool:
        return agent_id in self._managers
