"""
Threaded host for live measurement.

Producers push samples into a bounded queue; a single worker thread drains it
into the aggregator. Every aggregator mutation happens under one lock, readers
use ``snapshot()`` without locking.

Accepting a sample and stopping are serialised by a second lock, so a sample
accepted by ``submit`` is always queued ahead of the stop marker. A worker left
draining by a timed-out ``stop`` is waited for by the next ``stop``, while
``start`` discards its backlog and joins it before the new session begins.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Iterable, Optional

from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .models import AlgorithmMode, Sample, SessionPhase, SessionSnapshot
from .session import SessionAggregator


logger = logging.getLogger(__name__)

_STOP = object()


class SessionHost:
    def __init__(
        self,
        aggregator: SessionAggregator | None = None,
        config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
        queue_size: int = 1024,
    ):
        self.aggregator = aggregator or SessionAggregator(config)
        self._lock = threading.Lock()
        self._submit_lock = threading.Lock()
        self._queue: queue.Queue = queue.Queue(maxsize=queue_size)
        self._worker: Optional[threading.Thread] = None
        self._accepting = False

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def set_mode(self, mode: AlgorithmMode | str) -> bool:
        with self._lock:
            return self.aggregator.set_mode(mode)

    def start(self) -> bool:
        with self._submit_lock:
            if self._accepting:
                logger.warning("Session host already running")
                return False
            if self._worker is not None:
                self._retire_worker()
            self._discard_pending()

            with self._lock:
                # A timed-out stop leaves the previous session measuring
                if self.aggregator.phase is SessionPhase.MEASURING:
                    self.aggregator.stop()
                if not self.aggregator.start():
                    return False
            self._worker = threading.Thread(target=self._drain, name="session-ingest", daemon=True)
            self._worker.start()
            self._accepting = True
        return True

    def submit(self, sample: Sample, timeout: float | None = None) -> bool:
        """Queue a sample; blocks while the queue is full. False once stopped or on timeout."""
        with self._submit_lock:
            if not self._accepting:
                return False
            try:
                self._queue.put(sample, timeout=timeout)
            except queue.Full:
                logger.warning("Sample queue full, dropping %s sample", sample.channel)
                return False
        return True

    def feed(self, samples: Iterable[Sample]) -> int:
        submitted = 0
        for sample in samples:
            if not self.submit(sample):
                break
            submitted += 1
        return submitted

    def stop(self, timeout: float | None = None) -> SessionSnapshot:
        """
        Stop accepting samples, let the worker ingest what was queued and end the session.

        When ``timeout`` expires first, the session keeps measuring in the
        background; call ``stop`` again to wait for it.
        """
        with self._submit_lock:
            worker = self._worker
            if worker is None:
                return self.aggregator.snapshot()
            if self._accepting:
                self._accepting = False
                self._queue.put(_STOP)

        worker.join(timeout)
        if worker.is_alive():
            logger.warning("Worker still draining %d queued samples", self._queue.qsize())
            return self.aggregator.snapshot()

        with self._submit_lock:
            if self._worker is not worker:
                # Already retired by a restart
                return self.aggregator.snapshot()
            self._worker = None
            with self._lock:
                if self.aggregator.phase is SessionPhase.MEASURING:
                    self.aggregator.stop()
        return self.aggregator.snapshot()

    def snapshot(self) -> SessionSnapshot:
        return self.aggregator.snapshot()

    def _discard_pending(self) -> int:
        discarded = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return discarded
            if item is not _STOP:
                discarded += 1

    def _retire_worker(self):
        """Drop the backlog of a worker left running by a timed-out stop and join it."""
        worker = self._worker
        dropped = self._discard_pending()
        self._queue.put(_STOP)
        worker.join()
        self._worker = None
        if dropped:
            logger.warning("Discarded %d samples queued by the previous session", dropped)

    def _drain(self):
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            with self._lock:
                self.aggregator.ingest(item)
