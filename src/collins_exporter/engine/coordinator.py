"""
Scrape coalescing.

Prometheus (or several of them, or a human with curl) can hit the
exporter faster than Collins can page through its inventory. Every
metrics request goes through ScrapeCoordinator.request(), which never
lets more than one fetch run against Collins at a time:

  - a request that arrives while the coordinator is idle starts a fetch;
  - requests that arrive while a fetch is running just wait for it;
  - when the fetch finishes, everyone who waited gets the same
    ScrapeResult object.

A single worker thread owns the fetcher, the counters and the last
result. Callers hand it a Future through a queue and block on it, so
nothing it owns needs a lock.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import Future
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from collins_exporter.collector.errors import CollinsError, ScrapeCrashed
from collins_exporter.collector.fetcher import InventoryFetcher
from collins_exporter.engine.deriver import derive_all
from collins_exporter.metrics import Observation, ScrapeResult

log = logging.getLogger(__name__)

_STOP = object()


class ScrapeCoordinator:

    def __init__(
        self,
        fetcher: InventoryFetcher,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self._fetcher = fetcher
        self._clock = clock
        self._waiters: "queue.Queue" = queue.Queue()

        # Owned by the worker thread only
        self._last_result = ScrapeResult()
        self._scrapes_total = 0
        self._scrape_failures = 0

        # Guards `_closed` so nothing is queued behind the stop marker
        self._lifecycle = threading.Lock()
        self._closed = False

        self._worker = threading.Thread(target=self._loop, name="collins-scrape", daemon=True)
        self._worker.start()

    def request(self, timeout: Optional[float] = None) -> ScrapeResult:
        """Block until a scrape that started no earlier than this call is done.

        `timeout` is the caller's own deadline; the coordinator has none.
        Raises concurrent.futures.TimeoutError when it passes.
        """
        waiter: Future = Future()
        with self._lifecycle:
            if self._closed:
                raise RuntimeError("scrape coordinator is closed")
            self._waiters.put(waiter)
        return waiter.result(timeout=timeout)

    def close(self):
        with self._lifecycle:
            if self._closed:
                return
            self._closed = True
            self._waiters.put(_STOP)
        self._worker.join()
        self._fetcher.close()

    def __enter__(self) -> "ScrapeCoordinator":
        return self

    def __exit__(self, *exc):
        self.close()

    # -- worker side --

    def _loop(self):
        while True:
            item = self._waiters.get()
            if item is _STOP:
                return

            error: Optional[BaseException] = None
            try:
                self._last_result = self._scrape()
            except Exception as e:
                log.exception("Collins scrape crashed")
                error = e

            pending, stop = self._drain([item])
            self._serve(pending, error)
            if stop:
                return

    def _drain(self, pending: List[Future]) -> Tuple[List[Future], bool]:
        """Pick up everyone who queued while the fetch was running."""
        while True:
            try:
                item = self._waiters.get_nowait()
            except queue.Empty:
                return pending, False
            if item is _STOP:
                return pending, True
            pending.append(item)

    def _serve(self, waiters: List[Future], error: Optional[BaseException]):
        for waiter in waiters:
            # False means the caller cancelled its future
            if not waiter.set_running_or_notify_cancel():
                continue
            if error is not None:
                crash = ScrapeCrashed(f"Collins scrape crashed: {error!r}")
                crash.__cause__ = error
                waiter.set_exception(crash)
            else:
                waiter.set_result(self._last_result)

    def _scrape(self) -> ScrapeResult:
        log.debug("Starting Collins scrape...")
        self._scrapes_total += 1
        start = self._clock()

        try:
            assets = self._fetcher.fetch_all()
            observations = tuple(derive_all(assets))
        except CollinsError as e:
            # Never publish metrics built from a partial page sequence
            took = self._clock() - start
            self._scrape_failures += 1
            log.error("Collins scrape failed after %.2fs: %s", took, e)
            return self._result((), False, took, 0)
        except Exception:
            self._scrape_failures += 1
            self._last_result = self._result((), False, self._clock() - start, 0)
            raise

        took = self._clock() - start
        log.info("Collins scrape finished, found %d assets in %.2fs", len(assets), took)
        return self._result(observations, True, took, len(assets))

    def _result(
        self,
        observations: Tuple[Observation, ...],
        success: bool,
        took: float,
        asset_count: int,
    ) -> ScrapeResult:
        return ScrapeResult(
            observations=observations,
            success=success,
            duration_seconds=took,
            timestamp=datetime.now(timezone.utc),
            asset_count=asset_count,
            scrapes_total=self._scrapes_total,
            scrape_failures_total=self._scrape_failures,
        )
