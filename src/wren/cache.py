"""Controller instance cache with idle eviction.

``InstanceCache`` keeps one controller instance per signature when reuse
is enabled. ``Sweeper`` runs a background thread that drops instances
left idle for longer than a configured lifetime.

Free-threading safety:
    - Every cache operation, including the sweep, takes the same Lock
    - The reuse flag is read and written under that Lock
    - Sweeper serializes schedule/stop with its own Lock; each sweeper
      thread owns a private stop Event, so rescheduling never races a
      thread that is mid-sweep
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("wren.cache")


@dataclass(slots=True)
class _Entry:
    instance: Any
    last_used: float


class InstanceCache:
    """Keyed store of controller instances with last-used timestamps.

    With reuse disabled, ``get`` always misses and ``add`` never inserts,
    so nothing new is ever cached.
    """

    __slots__ = ("_clock", "_entries", "_lock", "_reuse")

    def __init__(self, *, reuse: bool = True, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}
        self._reuse = reuse
        self._clock = clock

    @property
    def reuse(self) -> bool:
        with self._lock:
            return self._reuse

    @reuse.setter
    def reuse(self, value: bool) -> None:
        with self._lock:
            self._reuse = value

    def get(self, key: str) -> Any | None:
        """Return the cached instance for *key*, or ``None``."""
        with self._lock:
            if not self._reuse:
                return None
            entry = self._entries.get(key)
            return entry.instance if entry is not None else None

    def add(self, key: str, instance: Any) -> bool:
        """Insert *instance* unless reuse is off or *key* is present.

        Returns True if the instance was inserted.
        """
        with self._lock:
            if not self._reuse or key in self._entries:
                return False
            self._entries[key] = _Entry(instance, self._clock())
            return True

    def touch(self, key: str) -> None:
        """Mark *key* as used now."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                entry.last_used = self._clock()

    def sweep(self, lifetime: float) -> list[str]:
        """Remove entries idle for longer than *lifetime* seconds.

        Returns the evicted keys. A lifetime of 0 evicts nothing.
        """
        if lifetime <= 0:
            return []
        with self._lock:
            cutoff = self._clock() - lifetime
            expired = [key for key, entry in self._entries.items() if entry.last_used < cutoff]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Evicted %d idle controller(s): %s", len(expired), ", ".join(expired))
        return expired

    def reset(self) -> None:
        """Drop every cached instance."""
        with self._lock:
            self._entries.clear()

    def last_used(self, key: str) -> float | None:
        with self._lock:
            entry = self._entries.get(key)
            return entry.last_used if entry is not None else None

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class Sweeper:
    """Periodic idle eviction for an ``InstanceCache``.

    ``schedule(lifetime)`` starts the task, sweeping every
    ``lifetime / 10`` seconds. Calling it again restarts the task at the
    new interval; ``schedule(0)`` stops it. Threads replaced by a
    reschedule are signalled at once and joined by ``stop()``.
    """

    __slots__ = ("_cache", "_current", "_lock", "_retired")

    def __init__(self, cache: InstanceCache) -> None:
        self._cache = cache
        self._lock = threading.Lock()
        self._current: tuple[threading.Thread, threading.Event] | None = None
        self._retired: list[threading.Thread] = []

    @property
    def running(self) -> bool:
        with self._lock:
            return self._current is not None and self._current[0].is_alive()

    def schedule(self, lifetime: float) -> None:
        """Start, restart, or (with ``0``) stop periodic eviction."""
        with self._lock:
            self._cancel()
            if lifetime <= 0:
                logger.debug("Controller eviction disabled")
                return
            stop = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(lifetime, stop),
                name="wren-sweeper",
                daemon=True,
            )
            self._current = (thread, stop)
            thread.start()
        logger.debug("Controller eviction every %.3fs (lifetime %ss)", lifetime / 10, lifetime)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the task and wait for every thread it started to exit."""
        with self._lock:
            self._cancel()
            threads, self._retired = self._retired, []
        for thread in threads:
            thread.join(timeout)

    def _cancel(self) -> None:
        # Caller holds self._lock
        self._retired = [t for t in self._retired if t.is_alive()]
        if self._current is not None:
            thread, stop = self._current
            stop.set()
            self._retired.append(thread)
            self._current = None

    def _run(self, lifetime: float, stop: threading.Event) -> None:
        interval = lifetime / 10
        while not stop.wait(interval):
            self._cache.sweep(lifetime)
