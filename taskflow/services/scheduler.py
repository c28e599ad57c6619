# taskflow/services/scheduler.py
"""
Startup database connector.

The API starts answering immediately; /api routes return 503 until the
connector has created the schema and seeded reference data. Failed attempts
are retried on an interval job until DB_CONNECT_RETRIES is exhausted.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from taskflow.config.settings import settings
from taskflow.database import DatabaseState, init_database

logger = logging.getLogger(__name__)

CONNECT_JOB_ID = "connect_database"


class DatabaseConnector:
    """Retries database initialisation on an APScheduler interval job"""

    def __init__(
        self,
        state: DatabaseState,
        initialiser: Callable[[], Any] = init_database,
        max_attempts: Optional[int] = None,
        delay_seconds: Optional[int] = None,
    ):
        self.state = state
        self.initialiser = initialiser
        self.max_attempts = max_attempts or settings.DB_CONNECT_RETRIES
        self.delay_seconds = delay_seconds or settings.DB_RETRY_DELAY_SECONDS
        self.scheduler = AsyncIOScheduler()
        self.is_running = False

    def start(self):
        if self.is_running:
            return
        self.scheduler.add_job(
            self.attempt,
            trigger=IntervalTrigger(seconds=self.delay_seconds),
            id=CONNECT_JOB_ID,
            name="Connect Database",
            next_run_time=datetime.now(),
            max_instances=1,
            replace_existing=True,
        )
        self.scheduler.start()
        self.is_running = True
        logger.info("Database connector started (%d attempts, %ss apart)", self.max_attempts, self.delay_seconds)

    def stop(self):
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Database connector stopped")

    def _cancel(self):
        if self.scheduler.get_job(CONNECT_JOB_ID):
            self.scheduler.remove_job(CONNECT_JOB_ID)

    def attempt(self) -> bool:
        """One connection attempt; returns True once the database is ready"""
        if self.state.ready:
            self._cancel()
            return True

        attempt = self.state.record_attempt()
        try:
            self.initialiser()
        except SQLAlchemyError as exc:
            self.state.mark_failed(str(exc))
            logger.error("Database attempt %d/%d failed: %s", attempt, self.max_attempts, exc)
            if attempt >= self.max_attempts:
                logger.critical("Could not connect after %d attempts; check DATABASE_URL", attempt)
                self._cancel()
            return False

        self.state.mark_ready()
        logger.info("Database connected and ready after %d attempt(s)", attempt)
        self._cancel()
        return True

    def status(self) -> Dict[str, Any]:
        return {
            "ready": self.state.ready,
            "attempts": self.state.attempts,
            "max_attempts": self.max_attempts,
            "error": self.state.error or None,
        }
