"""Self-refilling buffer of externally sourced random decimals.

``draw()`` always answers synchronously. When the buffer is low a refill is
submitted to an executor and lands in the buffer whenever the source answers;
until then draws use whatever is buffered, or the fallback generator.
"""
from __future__ import annotations
import logging
import sys
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable

from .exceptions import SourceUnavailableError
from .sources import RandomSource, check_batch

logger = logging.getLogger(__name__)

EPSILON = sys.float_info.epsilon
DECIMAL_PLACES = 5
MISSING_CREDENTIAL = "TrueRandom is missing an API key in its settings."


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def clamp_positive(value: float, floor: float = EPSILON) -> float:
    """Replace anything at or below ``floor`` with machine epsilon."""
    return EPSILON if value <= floor else value


@dataclass(frozen=True)
class FillPolicy:
    capacity: int = 10
    refill_threshold: float = 0.5

    def wants_refill(self, size: int) -> bool:
        return size / self.capacity < self.refill_threshold


class SupplyCache:
    """Buffered true-random values with a single-flight refill.

    Args:
        fallback: zero-argument generator used whenever the buffer cannot
            answer (typically the host's original PRNG).
        policy: capacity and refill threshold.
        executor: runs ``RandomSource.fetch``; defaults to a private
            single-worker thread pool.
        alert: called once with a notice the first time no usable
            credential is found.
        clock_ms: wall clock in milliseconds, used for index selection.
    """

    def __init__(self, fallback: Callable[[], float], policy: FillPolicy | None = None,
                 enabled: bool = True, executor: Executor | None = None,
                 alert: Callable[[str], None] | None = None,
                 clock_ms: Callable[[], int] = _now_ms, decimal_places: int = DECIMAL_PLACES):
        self._fallback = fallback
        self.policy = policy or FillPolicy()
        self.enabled = enabled
        self._executor = executor
        self._owns_executor = executor is None
        self._alert = alert
        self._clock_ms = clock_ms
        self.decimal_places = decimal_places
        # values that round to zero at the fetched precision count as zero
        self._zero_floor = 0.5 * 10 ** -decimal_places

        self._lock = threading.Lock()
        self._buf: list[float] = []
        self._source: RandomSource | None = None
        self._pending: Future | None = None
        self._refill_listeners: list[Callable[[list[float]], None]] = []
        self.awaiting_response = False
        self.has_alerted = False
        self.last_value: float | None = None
        self.true_random_count = 0
        self.fallback_count = 0

    # configuration
    def configure(self, capacity: int, refill_threshold: float) -> None:
        self.policy = FillPolicy(capacity, refill_threshold)

    def bind(self, source: RandomSource | None) -> None:
        """Replace the source. An in-flight fetch on the old one still lands."""
        self._source = source
        if source is not None:
            self.refill()

    @property
    def source(self) -> RandomSource | None:
        return self._source

    def set_enabled(self, enabled: bool) -> None:
        self.enabled = bool(enabled)

    def add_refill_listener(self, listener: Callable[[list[float]], None]) -> None:
        self._refill_listeners.append(listener)

    @property
    def buffer(self) -> tuple[float, ...]:
        with self._lock:
            return tuple(self._buf)

    def __len__(self):
        with self._lock:
            return len(self._buf)

    # refill
    def _get_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="truerandom-refill")
        return self._executor

    def refill(self) -> Future | None:
        """Request ``capacity`` new values unless one request is already out.

        Returns the pending future, or None when the request was dropped.
        """
        source = self._source
        if source is None or not self.enabled:
            return None
        with self._lock:
            if self.awaiting_response:
                return None
            self.awaiting_response = True
        count = self.policy.capacity
        try:
            future = self._get_executor().submit(source.fetch, count, self.decimal_places)
        except RuntimeError as e:
            logger.warning("Could not schedule refill: %s", e)
            with self._lock:
                self.awaiting_response = False
            return None
        self._pending = future
        logger.debug("Requested %d numbers from %s", count, source.name)
        future.add_done_callback(lambda f: self._on_fetched(f, count, source))
        return future

    def _on_fetched(self, future: Future, count: int, source: RandomSource) -> None:
        try:
            if future.cancelled():
                logger.debug("Refill from %s cancelled", source.name)
                return
            values = check_batch(future.result(), count)
        except Exception as e:
            logger.warning("%s error: %s", source.name, e)
        else:
            with self._lock:
                self._buf.extend(values)
            logger.debug("New numbers: %s", values)
            for listener in list(self._refill_listeners):
                try:
                    listener(values)
                except Exception:
                    logger.exception("Refill listener %r failed", listener)
        finally:
            with self._lock:
                self.awaiting_response = False
                if self._pending is future:
                    self._pending = None

    def cancel_refill(self) -> bool:
        """Cancel the pending refill if the executor has not started it."""
        future = self._pending
        return future.cancel() if future is not None else False

    # drawing
    def fallback(self) -> float:
        self.fallback_count += 1
        return clamp_positive(self._fallback())

    def require_source(self) -> RandomSource:
        source = self._source
        if source is None:
            raise SourceUnavailableError("no random source bound")
        if not source.has_credential:
            raise SourceUnavailableError(f"{source.name} has no API key")
        return source

    def check_draw(self) -> bool:
        """Whether the buffer can serve this draw.

        Fires the one-time credential alert, and a refill when the buffer is
        empty, as side effects.
        """
        if not self.enabled:
            return False
        try:
            self.require_source()
        except SourceUnavailableError as e:
            if not self.has_alerted:
                self.has_alerted = True
                logger.warning("%s (%s)", MISSING_CREDENTIAL, e)
                if self._alert is not None:
                    try:
                        self._alert(MISSING_CREDENTIAL)
                    except Exception:
                        logger.exception("Alert collaborator failed")
            return False
        with self._lock:
            empty = not self._buf
        if empty:
            self.refill()
            return False
        return True

    def take(self) -> float:
        """Remove the value at ``now_ms % len(buffer)`` and return it."""
        value, low = None, False
        with self._lock:
            if self._buf:
                index = int(self._clock_ms()) % len(self._buf)
                value = self._buf.pop(index)
                low = self.policy.wants_refill(len(self._buf))
        if value is None:
            return self.fallback()
        if low:
            self.refill()
        self.true_random_count += 1
        return clamp_positive(value, self._zero_floor)

    def draw(self) -> float:
        value = self.take() if self.check_draw() else self.fallback()
        self.last_value = value
        return value

    def stats(self) -> dict:
        with self._lock:
            size = len(self._buf)
        return {
            "buffered": size,
            "capacity": self.policy.capacity,
            "refill_threshold": self.policy.refill_threshold,
            "awaiting_response": self.awaiting_response,
            "enabled": self.enabled,
            "source": self._source.name if self._source is not None else None,
            "last_value": self.last_value,
            "true_random_count": self.true_random_count,
            "fallback_count": self.fallback_count,
        }

    def close(self) -> None:
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
