"""Fixed-interval runner for reconciliation ticks."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TickScheduler:
    """Calls *tick* every *interval* seconds, on a background thread or inline.

    Parameters
    ----------
    tick:
        Zero-argument callable, usually ``ReconciliationLoop.tick``.
    interval:
        Seconds to wait between the end of one tick and the start of the next.
    """

    def __init__(self, tick: Callable[[], object], interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._tick = tick
        self._interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._tick_count = 0
        self._count_lock = threading.Lock()

    @property
    def tick_count(self) -> int:
        """Ticks run so far. Safe to read from any thread."""
        with self._count_lock:
            return self._tick_count

    def start(self) -> None:
        """Start ticking on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Tick scheduler already running")
            return

        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run,
            daemon=True,
            name="ReconciliationTicker",
        )
        self._thread.start()
        logger.info("Tick scheduler started (interval: %ss)", self._interval)

    def stop(self, timeout: float = 5.0) -> None:
        """Ask the loop to stop and wait up to *timeout* seconds for it."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=timeout)
        logger.info("Tick scheduler stopped (%d ticks)", self.tick_count)

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self, max_ticks: Optional[int] = None) -> None:
        """Tick until stopped, or until *max_ticks* ticks have run."""
        while not self._stop.is_set():
            try:
                self._tick()
            except Exception:
                logger.exception("Reconciliation tick raised")
            with self._count_lock:
                self._tick_count += 1
                count = self._tick_count

            if max_ticks is not None and count >= max_ticks:
                break
            self._stop.wait(timeout=self._interval)


__all__ = ["TickScheduler"]
