"""Expiry sweeper: deletes events whose date has passed.

Runs once when the service starts and then on a fixed interval. Registrations
of a deleted event go with it through the database cascade.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi.concurrency import run_in_threadpool
from sqlmodel import Session

from school_portal.errors import ContentStoreError
from school_portal.models.event import Event
from school_portal.services.content_store import ContentStore, SqlContentStore

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 60 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sweep_expired_events(store: ContentStore, now: Optional[datetime] = None) -> int:
    """Delete every event dated before ``now``; returns how many were deleted.

    A failed read aborts the sweep without deleting anything. A failed delete
    leaves the selected events for the next run. Errors are logged, not raised.
    """
    now = now or _utcnow()

    try:
        expired = store.select(Event, Event.event_date < now)
    except ContentStoreError as e:
        logger.error(f"Error fetching expired events: {e}")
        return 0

    if not expired:
        return 0

    expired_ids = [event.id for event in expired]

    try:
        deleted = store.delete(Event, expired_ids)
    except ContentStoreError as e:
        logger.error(f"Error deleting expired events: {e}")
        return 0

    logger.info(f"Cleaned up {deleted} expired event(s)")
    return deleted


class ExpirySweeper:
    """Background task running sweep_expired_events on a fixed interval.

    Lifecycle:
    1. start() -> sweeps immediately, then every interval_seconds
    2. stop() -> cancels the loop
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.runs = 0
        self._task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def run_once(self) -> int:
        with self.session_factory() as session:
            deleted = sweep_expired_events(SqlContentStore(session), now=self.clock())
        self.runs += 1
        return deleted

    async def start(self):
        """Start the sweep background task"""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info(
            f"Expired event sweeper started (interval: {self.interval_seconds}s)"
        )

    async def stop(self):
        """Stop the sweep background task"""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Expired event sweeper stopped")

    async def _sweep_loop(self):
        while self._running:
            try:
                # Database calls are blocking
                await run_in_threadpool(self.run_once)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in expired event sweep: {e}")
            await asyncio.sleep(self.interval_seconds)
