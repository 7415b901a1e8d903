"""Serialized event consumption for a reconciler.

Dispatchers may deliver events from any thread. The loop funnels them, and
policy changes, through one queue consumed by a single worker so that the
reconciler sees them strictly in arrival order.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from autoconf.domain.reconciliation.outcome import ReconcileOutcome

if TYPE_CHECKING:
    from autoconf.domain.model import Policy, TriggerEvent
    from autoconf.domain.reconciliation.reconciler import Reconciler

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PolicyChange:
    policy: Policy


@dataclass(frozen=True, slots=True)
class _Stop:
    pass


type QueueItem = TriggerEvent | PolicyChange | _Stop


class ReconcilerEventLoop:
    """Single-consumer queue in front of a ``Reconciler``."""

    def __init__(self, reconciler: Reconciler) -> None:
        self._reconciler = reconciler
        self._queue: queue.Queue[QueueItem] = queue.Queue()
        self._thread: threading.Thread | None = None
        reconciler.route_events(self.submit)

    @property
    def reconciler(self) -> Reconciler:
        return self._reconciler

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def submit(self, event: TriggerEvent) -> None:
        self._queue.put(event)

    def submit_policy(self, policy: Policy) -> None:
        self._queue.put(PolicyChange(policy))

    def run_pending(self) -> ReconcileOutcome:
        """Process every queued item on the calling thread and return the total."""

        if self.running:
            raise RuntimeError("Event loop is running on its worker thread")
        total = ReconcileOutcome()
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return total
            try:
                if not isinstance(item, _Stop):
                    total = total.merge(self._process(item))
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("Event loop already started")
        self._thread = threading.Thread(target=self._run, name="autoconf-reconciler", daemon=True)
        self._thread.start()

    def wait_idle(self) -> None:
        """Block until every submitted item has been processed."""

        self._queue.join()

    def stop(self, *, timeout: float | None = None) -> None:
        """Process what is queued, then stop the worker thread."""

        if self._thread is None:
            return
        self._queue.put(_Stop())
        self._thread.join(timeout)
        if self._thread.is_alive():
            log.warning("Event loop did not stop within %s seconds", timeout)
            return
        self._thread = None

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if isinstance(item, _Stop):
                    return
                self._process(item)
            finally:
                self._queue.task_done()

    def _process(self, item: TriggerEvent | PolicyChange) -> ReconcileOutcome:
        try:
            if isinstance(item, PolicyChange):
                return self._reconciler.apply_policy(item.policy)
            return self._reconciler.handle(item)
        except Exception:
            log.exception("Failed to process %s", item)
            return ReconcileOutcome()
