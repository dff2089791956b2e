# ============================================================================
# SCOPE: GLOBAL
# Description: Cache in-memory de instancias de agentes por (usuario, agente).
#              LRU global y por usuario, inicializacion single-flight.
# Tenant-Aware: Yes - limite independiente por usuario.
# ============================================================================
"""
Agent Cache Manager - Shared cache for agent instances with LRU eviction.

Keeps at most one live instance per (user_id, agent_id) pair and enforces
a global bound and a per-user bound. Invalidation disposes the agent
immediately so the next access rebuilds a fresh instance.

Features:
- Single-flight initialization (one initializer run per key at a time)
- LRU eviction by re-insertion order (global and per-user indices)
- Failed initializations are dropped so the next call retries
- Best-effort disposal: dispose() errors are logged, never raised

Usage:
    from agentcache.core.cache import agent_cache_manager

    agent = await agent_cache_manager.get_or_create(user_id, agent_id, build_agent)

    # Drop on agent configuration changes
    await agent_cache_manager.invalidate(user_id, agent_id)
"""

import asyncio
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic

from agentcache.core.interfaces.agent import AgentInitializer, AgentT
from agentcache.core.shared.logger import get_cache_logger

from .exceptions import AgentInitializationTimeoutError
from .limits import CacheLimits, normalize_limit, normalize_timeout

logger = logging.getLogger(__name__)

# Marker for configure() options that were not passed
_UNSET: Any = object()


def _now_ms() -> float:
    return time.monotonic() * 1000


class EntryState(str, Enum):
    """Lifecycle state of a cache entry."""

    PENDING = "pending"
    READY = "ready"


@dataclass(eq=False)
class CacheEntry(Generic[AgentT]):
    """
    Bookkeeping record for one (user_id, agent_id) slot.

    Exactly one of ``agent`` / ``pending`` is set while the entry is indexed.
    Timestamps are diagnostic only; eviction order comes from index order.
    """

    user_id: str
    agent_id: str
    created_at: float = field(default_factory=_now_ms)
    last_used: float = field(default_factory=_now_ms)
    agent: AgentT | None = None
    pending: "asyncio.Task[AgentT] | None" = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.user_id, self.agent_id)

    @property
    def label(self) -> str:
        """Readable form of the key, for logs and task names only."""
        return f"{self.user_id}:{self.agent_id}"

    @property
    def state(self) -> EntryState:
        return EntryState.READY if self.agent is not None else EntryState.PENDING

    def touch(self) -> None:
        self.last_used = _now_ms()


@dataclass
class CacheStats:
    """Agent cache statistics."""

    hits: int = 0
    pending_joins: int = 0
    misses: int = 0
    constructions: int = 0
    construction_failures: int = 0
    evictions: int = 0
    invalidations: int = 0
    disposals: int = 0
    disposal_failures: int = 0

    @property
    def hit_rate(self) -> float:
        """Share of lookups served without starting a construction."""
        served = self.hits + self.pending_joins
        total = served + self.misses
        return served / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "pending_joins": self.pending_joins,
            "misses": self.misses,
            "constructions": self.constructions,
            "construction_failures": self.construction_failures,
            "evictions": self.evictions,
            "invalidations": self.invalidations,
            "disposals": self.disposals,
            "disposal_failures": self.disposal_failures,
            "hit_rate": self.hit_rate,
        }


class AgentCacheManager(Generic[AgentT]):
    """
    Shared cache for agent instances with LRU eviction.

    Two indices are kept in sync and always mutated together within one
    synchronous step:

    - global index: ``(user_id, agent_id)`` -> entry, oldest first
    - per-user index: user_id -> (agent_id -> entry), oldest first

    Both bounds default to unbounded. All methods are safe to call
    concurrently from many tasks on the same event loop.
    """

    def __init__(
        self,
        max_cached_agents: int | None = None,
        max_cached_agents_per_user: int | None = None,
        init_timeout_seconds: float | None = None,
    ) -> None:
        """Initialize manager with optional bounds.

        Args:
            max_cached_agents: Global bound (None = unbounded)
            max_cached_agents_per_user: Per-user bound (None = unbounded)
            init_timeout_seconds: Default initializer timeout (None = no timeout)
        """
        self._limits = CacheLimits(
            max_cached_agents=normalize_limit(max_cached_agents),
            max_cached_agents_per_user=normalize_limit(max_cached_agents_per_user),
            init_timeout_seconds=normalize_timeout(init_timeout_seconds),
        )
        self._global_cache: OrderedDict[tuple[str, str], CacheEntry[AgentT]] = OrderedDict()
        self._per_user_cache: dict[str, OrderedDict[str, CacheEntry[AgentT]]] = {}
        self._stats = CacheStats()
        self._background_disposals: set[asyncio.Task[None]] = set()
        self._logger = get_cache_logger("agent_cache")

    # =========================================================================
    # Configuration
    # =========================================================================

    def configure(
        self,
        max_cached_agents: Any = _UNSET,
        max_cached_agents_per_user: Any = _UNSET,
        init_timeout_seconds: Any = _UNSET,
    ) -> None:
        """
        Configure cache limits.

        Options that are not passed keep their current value. Positive values
        are used as counts, zero caches nothing, and negative, non-finite or
        non-numeric values mean unbounded. Never raises and never evicts by
        itself: the next insertion enforces the new bounds.

        Args:
            max_cached_agents: Global bound
            max_cached_agents_per_user: Per-user bound
            init_timeout_seconds: Default initializer timeout in seconds
        """
        if max_cached_agents is not _UNSET:
            self._limits.max_cached_agents = normalize_limit(max_cached_agents)
        if max_cached_agents_per_user is not _UNSET:
            self._limits.max_cached_agents_per_user = normalize_limit(max_cached_agents_per_user)
        if init_timeout_seconds is not _UNSET:
            self._limits.init_timeout_seconds = normalize_timeout(init_timeout_seconds)

        logger.info(
            f"[AgentCache] Configured limits: global={self._limits.max_cached_agents}, "
            f"per_user={self._limits.max_cached_agents_per_user}, "
            f"init_timeout={self._limits.init_timeout_seconds}"
        )

    @property
    def limits(self) -> CacheLimits:
        """Get a copy of the effective limits."""
        return CacheLimits(**self._limits.to_dict())

    # =========================================================================
    # Public API
    # =========================================================================

    async def get_or_create(
        self,
        user_id: str,
        agent_id: str,
        initializer: AgentInitializer[AgentT],
        timeout: float | None = None,
    ) -> AgentT:
        """
        Retrieve an agent from the cache or build it with the initializer.

        Only one initializer runs per key at a time: concurrent callers for
        the same key share one construction and observe the same agent or
        the same exception.

        Args:
            user_id: Owner of the agent
            agent_id: Agent identifier
            initializer: Zero-argument async factory, called at most once
            timeout: Optional initializer timeout in seconds; overrides the
                configured default for constructions started by this call

        Returns:
            The cached or freshly constructed agent. With a zero bound the
            agent is returned even though it was evicted right after.

        Raises:
            AgentInitializationTimeoutError: If the initializer timed out
            Exception: Whatever the initializer raised
        """
        existing = self._global_cache.get(self._make_key(user_id, agent_id))

        if existing is not None and existing.agent is not None:
            self._touch_entry(existing)
            self._stats.hits += 1
            return existing.agent

        if existing is not None and existing.pending is not None:
            self._touch_entry(existing)
            self._stats.pending_joins += 1
            return await asyncio.shield(existing.pending)

        self._stats.misses += 1
        effective_timeout = normalize_timeout(timeout) if timeout is not None else self._limits.init_timeout_seconds
        pending = self._create_pending_entry(user_id, agent_id, initializer, effective_timeout)
        return await asyncio.shield(pending)

    def get(self, user_id: str, agent_id: str) -> AgentT | None:
        """
        Return an agent only if it is already cached and constructed.

        Never starts a construction and never returns a pending one.
        """
        existing = self._global_cache.get(self._make_key(user_id, agent_id))
        if existing is None or existing.agent is None:
            return None
        self._touch_entry(existing)
        self._stats.hits += 1
        return existing.agent

    def has(self, user_id: str, agent_id: str) -> bool:
        """Check if a key is cached (ready or pending) without touching LRU order."""
        return self._make_key(user_id, agent_id) in self._global_cache

    async def put(self, user_id: str, agent_id: str, agent: AgentT) -> None:
        """
        Store an already constructed agent and enforce limits.

        A different instance previously cached under the key is disposed.
        """
        replaced = self._global_cache.get(self._make_key(user_id, agent_id))
        self._create_resolved_entry(user_id, agent_id, agent)
        evicted = self._evict_over_limits(user_id)

        if replaced is not None and replaced.agent is not agent:
            if replaced.agent is None:
                # Still constructing: dispose its result without blocking the caller
                self._spawn_disposal(replaced, "replaced", exclude=agent)
            else:
                evicted.append((replaced, "replaced"))

        await self._dispose_entries(evicted)

    async def invalidate(self, user_id: str, agent_id: str) -> None:
        """
        Dispose and remove a cached agent.

        A pending construction is awaited (its failure ignored) and the
        agent it produced is disposed. No-op if the key is absent. Never
        raises disposal errors.
        """
        entry = self._global_cache.get(self._make_key(user_id, agent_id))
        if entry is None:
            return

        self._remove_entry(entry)
        self._stats.invalidations += 1
        await self._dispose_entry(entry, "invalidate")

    async def invalidate_user(self, user_id: str) -> int:
        """
        Dispose and remove every cached agent of one user.

        Returns:
            Number of entries removed
        """
        user_map = self._per_user_cache.get(user_id)
        if not user_map:
            return 0

        entries = list(user_map.values())
        for entry in entries:
            self._remove_entry(entry)
        self._stats.invalidations += len(entries)

        await asyncio.gather(*(self._dispose_entry(entry, "user invalidated") for entry in entries))
        logger.debug(f"[AgentCache] Invalidated {len(entries)} agents for user {user_id}")
        return len(entries)

    async def clear(self) -> None:
        """
        Clear the whole cache and dispose all agents.

        Indices are emptied before any disposal starts, so entries inserted
        while disposals run are left untouched.
        """
        entries = list(self._global_cache.values())
        self._global_cache.clear()
        self._per_user_cache.clear()

        background = list(self._background_disposals)

        await asyncio.gather(*(self._dispose_entry(entry, "clear") for entry in entries), *background)
        if entries:
            logger.info(f"[AgentCache] Cleared {len(entries)} cached agents")

    def size(self) -> int:
        """Get current global entry count (ready + pending)."""
        return len(self._global_cache)

    def user_size(self, user_id: str) -> int:
        """Get current entry count for one user."""
        return len(self._per_user_cache.get(user_id, ()))

    def keys(self) -> list[tuple[str, str]]:
        """Snapshot of cached (user_id, agent_id) pairs, least recently used first."""
        return [(entry.user_id, entry.agent_id) for entry in self._global_cache.values()]

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    def get_info(self) -> dict[str, Any]:
        """Get cache information."""
        pending = sum(1 for entry in self._global_cache.values() if entry.state is EntryState.PENDING)
        return {
            "size": self.size(),
            "pending": pending,
            "users": len(self._per_user_cache),
            "limits": self._limits.to_dict(),
            "stats": self._stats.to_dict(),
        }

    # =========================================================================
    # Eviction
    # =========================================================================

    async def enforce_limits(self, user_id: str) -> None:
        """
        Evict least recently used entries until both bounds hold.

        Runs the per-user pass for ``user_id`` first, then the global pass.
        Both index updates happen without yielding, so each loop converges;
        evicted agents are then disposed concurrently and awaited.
        """
        await self._dispose_entries(self._evict_over_limits(user_id))

    def _evict_over_limits(self, user_id: str) -> list[tuple[CacheEntry[AgentT], str]]:
        """Remove LRU entries from both indices until both bounds hold (no suspension)."""
        evicted: list[tuple[CacheEntry[AgentT], str]] = []

        user_map = self._per_user_cache.get(user_id)
        while user_map and self._limits.user_exceeded(len(user_map)):
            oldest = next(iter(user_map.values()))
            self._remove_entry(oldest)
            evicted.append((oldest, "per-user limit reached"))

        while self._global_cache and self._limits.global_exceeded(len(self._global_cache)):
            oldest = next(iter(self._global_cache.values()))
            self._remove_entry(oldest)
            evicted.append((oldest, "global limit reached"))

        self._stats.evictions += len(evicted)
        return evicted

    async def _dispose_entries(self, entries: list[tuple[CacheEntry[AgentT], str]]) -> None:
        if entries:
            await asyncio.gather(*(self._dispose_entry(entry, reason) for entry, reason in entries))

    def _spawn_disposal(self, entry: CacheEntry[AgentT], reason: str, exclude: AgentT | None = None) -> None:
        task = asyncio.create_task(self._dispose_entry(entry, reason, exclude=exclude))
        self._background_disposals.add(task)
        task.add_done_callback(self._background_disposals.discard)

    # =========================================================================
    # Internals
    # =========================================================================

    def _create_pending_entry(
        self,
        user_id: str,
        agent_id: str,
        initializer: AgentInitializer[AgentT],
        timeout: float | None,
    ) -> "asyncio.Task[AgentT]":
        entry: CacheEntry[AgentT] = CacheEntry(user_id=user_id, agent_id=agent_id)
        self._insert_entry(entry)
        # Indexed before the task can run, so concurrent callers join it
        pending = asyncio.create_task(
            self._run_initializer(entry, initializer, timeout),
            name=f"agent-cache-init:{entry.label}",
        )
        entry.pending = pending
        return pending

    async def _run_initializer(
        self,
        entry: CacheEntry[AgentT],
        initializer: AgentInitializer[AgentT],
        timeout: float | None,
    ) -> AgentT:
        self._stats.constructions += 1
        try:
            if timeout is not None:
                try:
                    agent = await asyncio.wait_for(initializer(), timeout)
                except asyncio.TimeoutError as e:
                    raise AgentInitializationTimeoutError(entry.user_id, entry.agent_id, timeout) from e
            else:
                agent = await initializer()
        except BaseException as e:
            # Drop the entry so a subsequent call can retry
            if self._global_cache.get(entry.key) is entry:
                self._remove_entry(entry)
            self._stats.construction_failures += 1
            logger.warning(
                f"[AgentCache] Failed to initialize agent {entry.agent_id} for user {entry.user_id}: {e!r}"
            )
            raise
        else:
            entry.agent = agent
            entry.pending = None
            entry.touch()
            logger.debug(f"[AgentCache] Cached agent {entry.agent_id} for user {entry.user_id}")
            return agent
        finally:
            await self.enforce_limits(entry.user_id)

    def _create_resolved_entry(self, user_id: str, agent_id: str, agent: AgentT) -> CacheEntry[AgentT]:
        entry: CacheEntry[AgentT] = CacheEntry(user_id=user_id, agent_id=agent_id, agent=agent)
        self._insert_entry(entry)
        return entry

    def _insert_entry(self, entry: CacheEntry[AgentT]) -> None:
        """Insert (or replace) an entry at the most recently used end of both indices."""
        self._global_cache.pop(entry.key, None)
        self._global_cache[entry.key] = entry

        user_map = self._per_user_cache.setdefault(entry.user_id, OrderedDict())
        user_map.pop(entry.agent_id, None)
        user_map[entry.agent_id] = entry

    def _touch_entry(self, entry: CacheEntry[AgentT]) -> None:
        """Mark an entry as most recently used in both indices."""
        entry.touch()
        self._global_cache.move_to_end(entry.key)
        self._per_user_cache[entry.user_id].move_to_end(entry.agent_id)

    def _remove_entry(self, entry: CacheEntry[AgentT]) -> None:
        """Remove an entry from both indices, dropping the user's map when empty."""
        if self._global_cache.get(entry.key) is entry:
            del self._global_cache[entry.key]

        user_map = self._per_user_cache.get(entry.user_id)
        if user_map is None:
            return
        if user_map.get(entry.agent_id) is entry:
            del user_map[entry.agent_id]
        if not user_map:
            del self._per_user_cache[entry.user_id]

    async def _dispose_entry(
        self,
        entry: CacheEntry[AgentT],
        reason: str,
        exclude: AgentT | None = None,
    ) -> None:
        """
        Dispose the agent held (or being built) by an entry already removed from the indices.

        Never raises: initializer and dispose() errors are logged.
        """
        try:
            agent = entry.agent
            if agent is None and entry.pending is not None:
                agent = await self._await_pending(entry.pending)
            if agent is None or agent is exclude:
                return

            await agent.dispose()
            self._stats.disposals += 1
            logger.debug(
                f"[AgentCache] Disposed agent {entry.agent_id} for user {entry.user_id} ({reason})"
            )
        except Exception as e:
            self._stats.disposal_failures += 1
            self._logger.warning(
                f"[AgentCache] Error disposing agent {entry.agent_id} for user {entry.user_id} ({reason}): {e}",
                user_id=entry.user_id,
                agent_id=entry.agent_id,
                reason=reason,
                error=repr(e),
            )

    @staticmethod
    async def _await_pending(pending: "asyncio.Task[AgentT]") -> AgentT | None:
        """Wait for a construction to settle; failures yield None."""
        try:
            return await asyncio.shield(pending)
        except asyncio.CancelledError:
            if pending.cancelled():
                return None
            raise
        except Exception:
            return None

    @staticmethod
    def _make_key(user_id: str, agent_id: str) -> tuple[str, str]:
        return (user_id, agent_id)

    def __len__(self) -> int:
        return len(self._global_cache)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, tuple) and len(key) == 2:
            return self._make_key(*key) in self._global_cache
        return False

    def __repr__(self) -> str:
        return f"AgentCacheManager(size={self.size()}, limits={self._limits.to_dict()})"


# Singleton instance
agent_cache_manager: AgentCacheManager[Any] = AgentCacheManager()


def get_agent_cache_manager() -> AgentCacheManager[Any]:
    """Get the process-wide default agent cache manager."""
    return agent_cache_manager
