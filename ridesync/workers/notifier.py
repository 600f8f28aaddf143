"""
Notification Dispatcher
=======================

Delivers the "your ride has been accepted" alert to a requester.

* ``notify`` only enqueues; a single consumer task drains the queue, so
  alerts are delivered one at a time and in the order they were observed.
* Delivery is at-most-once: there is no retry and no acknowledgment.  A
  sink failure is logged and the alert is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ridesync.domain.ports import Alert, AlertSink

logger = logging.getLogger(__name__)

DEFAULT_ACCEPTED_MESSAGE = "Your ride has been accepted!"


class NotificationDispatcher:
    def __init__(self, sink: AlertSink, message: str = DEFAULT_ACCEPTED_MESSAGE):
        self.sink = sink
        self.message = message
        self.last_alert: Optional[Alert] = None
        self._queue: asyncio.Queue[Alert] = asyncio.Queue()
        self._task: asyncio.Task | None = None

    # ── Public API ────────────────────────────────────────────────────

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
            logger.info("Notification dispatcher started")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Notification dispatcher stopped")

    def notify(self, requester: str) -> Alert:
        """Queue one accepted-ride alert for *requester*."""
        alert = Alert(recipient=requester, message=self.message)
        self._queue.put_nowait(alert)
        logger.info("Ride accepted for %s; alert queued", requester)
        return alert

    async def drain(self) -> None:
        """Wait until every queued alert has been handled."""
        await self._queue.join()

    # ── Internals ─────────────────────────────────────────────────────

    async def _loop(self) -> None:
        while True:
            alert = await self._queue.get()
            try:
                await self.sink.deliver(alert)
                self.last_alert = alert
            except Exception:
                logger.exception("Dropping alert to %s", alert.recipient)
            finally:
                self._queue.task_done()
