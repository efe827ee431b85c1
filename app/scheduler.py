#!/usr/bin/env python3

import logging
from typing import Optional
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from config import config
from services import SyncService

logger = logging.getLogger(__name__)

class SyncScheduler:
    """Runs the full Zelty sync on a fixed interval"""

    job_id = 'sync_zelty'

    def __init__(self, sync_service: SyncService, interval_minutes: Optional[int] = None,
                 scheduler: Optional[BackgroundScheduler] = None):
        self.sync_service = sync_service
        self.interval_minutes = interval_minutes or config.sync_interval_minutes
        self.scheduler = scheduler or BackgroundScheduler(timezone=config.timezone)
        self.is_running = False

    def start(self):
        """Start the scheduler with the sync job"""
        if self.is_running:
            logger.warning("Sync scheduler already running")
            return

        self.scheduler.add_job(
            func=self.run_tick,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=self.job_id,
            name=f"Zelty sync (every {self.interval_minutes} minutes)",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        self.is_running = True

        logger.info(f"Sync scheduler started, running every {self.interval_minutes} minutes")

    def stop(self, wait: bool = True):
        """Stop the scheduler"""
        if not self.is_running:
            return

        self.scheduler.shutdown(wait=wait)
        self.is_running = False
        logger.info("Sync scheduler stopped")

    def run_tick(self):
        """
        One scheduled run: restaurants, dishes, then orders.

        Dishes and orders reference restaurant ids, so a failure stops the
        tick; the exception is left to the scheduler, which logs it and
        keeps the next run on schedule.
        """
        logger.info("[Scheduler]: Running scheduled sync zelty...")

        self.sync_service.sync_restaurants()
        self.sync_service.sync_dishes()
        self.sync_service.sync_orders()

        logger.info("[Scheduler]: Scheduled sync zelty completed.")
