"""
Compilation cache for compiled forms.

Memoizes `CompiledForm` by fingerprint with a bounded, least-recently-used
eviction policy. Concurrent requests for the same uncached fingerprint are
collapsed into a single compilation (single-flight): the first caller
compiles outside the lock, later callers wait for its result.

All reads and writes of the cache state go through one lock. Compilation
itself never runs while the lock is held.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import Future
from typing import TYPE_CHECKING

from form_compiler.core.config import settings
from form_compiler.core.errors import FormCompilationError
from form_compiler.core.observability import metrics, metrics_enabled
from form_compiler.domain.results import CacheStats

if TYPE_CHECKING:
    from form_compiler.compiler.compiler import CompiledForm

logger = logging.getLogger(__name__)


class CompilationCache:
    """
    Bounded LRU cache of compiled forms with single-flight compilation.

    Each instance is independent, so tests and tenants can hold isolated
    caches. Eviction only drops the cache's reference: validation results
    and visibility maps already returned to callers are unaffected.
    """

    def __init__(self, capacity: int | None = None):
        """
        Initialize the cache.

        Args:
            capacity: Maximum number of compiled forms held (defaults to
                      settings.cache_capacity)
        """
        capacity = settings.cache_capacity if capacity is None else capacity
        if capacity < 1:
            raise ValueError(f"cache capacity must be >= 1, got {capacity}")

        self._capacity = capacity
        self._entries: OrderedDict[str, CompiledForm] = OrderedDict()
        self._in_flight: dict[str, Future[CompiledForm]] = {}
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._shared = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        with self._lock:
            return fingerprint in self._entries

    def get(self, fingerprint: str) -> CompiledForm | None:
        """Return the cached form and mark it recently used, or None."""
        with self._lock:
            compiled = self._entries.get(fingerprint)
            if compiled is not None:
                self._entries.move_to_end(fingerprint)
            return compiled

    def get_or_compile(
        self, fingerprint: str, compile_fn: Callable[[], CompiledForm]
    ) -> CompiledForm:
        """
        Return the compiled form for `fingerprint`, compiling it at most once.

        Args:
            fingerprint: Structural fingerprint of the form definition
            compile_fn: Builds the compiled form on a miss; may raise

        Returns:
            The cached or newly compiled form. Concurrent callers for the
            same fingerprint all receive the same instance.

        Raises:
            Whatever `compile_fn` raises. Callers waiting on the same
            in-flight compile each receive their own `FormCompilationError`
            carrying the same errors. Failures are not cached.
        """
        with self._lock:
            compiled = self._entries.get(fingerprint)
            if compiled is not None:
                self._entries.move_to_end(fingerprint)
                self._hits += 1
                _record_lookup("hit")
                return compiled

            future = self._in_flight.get(fingerprint)
            owner = future is None
            if owner:
                future = Future()
                self._in_flight[fingerprint] = future
                self._misses += 1
            else:
                self._shared += 1

        if not owner:
            _record_lookup("shared")
            logger.debug("Waiting for in-flight compile of %s", fingerprint[:12])
            error = future.exception()
            if error is None:
                return future.result()
            if isinstance(error, FormCompilationError):
                raise FormCompilationError(error.errors, error.message)
            raise error

        _record_lookup("miss")
        try:
            compiled = compile_fn()
        except BaseException as e:
            with self._lock:
                self._in_flight.pop(fingerprint, None)
            future.set_exception(e)
            raise

        with self._lock:
            self._in_flight.pop(fingerprint, None)
            compiled = self._publish(fingerprint, compiled)

        future.set_result(compiled)
        return compiled

    def _publish(self, fingerprint: str, compiled: CompiledForm) -> CompiledForm:
        """Insert under the lock, evicting least-recently-used entries over capacity."""
        existing = self._entries.get(fingerprint)
        if existing is not None:
            self._entries.move_to_end(fingerprint)
            return existing

        self._entries[fingerprint] = compiled
        while len(self._entries) > self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.info("Evicted compiled form %s from cache", evicted[:12])
            if metrics_enabled():
                metrics.form_cache_evictions_total.inc()

        if metrics_enabled():
            metrics.form_cache_entries.set(len(self._entries))
        return compiled

    def clear(self) -> None:
        """
        Drop every cached form.

        Compiles already in flight are not cancelled; they publish their
        result when they finish.
        """
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        if metrics_enabled():
            metrics.form_cache_entries.set(0)
        logger.info("Compilation cache cleared (%d entries dropped)", dropped)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                capacity=self._capacity,
                hits=self._hits,
                misses=self._misses,
                shared=self._shared,
                evictions=self._evictions,
                in_flight=len(self._in_flight),
            )


def _record_lookup(result: str) -> None:
    if metrics_enabled():
        metrics.form_cache_lookups_total.labels(result=result).inc()
