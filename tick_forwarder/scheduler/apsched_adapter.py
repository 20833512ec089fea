"""APScheduler wrapper acting as the host polling loop."""

from __future__ import annotations

from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..config import PollConfig
from ..logging_conf import configure_logging

EXPORTER_JOB_ID = "exporter::poll"


class APSchedulerAdapter:
    """Invoke the exporter on a fixed cadence, one invocation at a time."""

    def __init__(self, blocking: bool = False) -> None:
        self.scheduler = BlockingScheduler() if blocking else BackgroundScheduler()
        self.blocking = blocking
        self.logger = configure_logging().bind(component="scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.started = True
            self.logger.info("apscheduler_started", blocking=self.blocking)
            # BlockingScheduler.start() only returns after shutdown
            self.scheduler.start()

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_exporter(self, callback: Callable[[], object], poll: PollConfig) -> None:
        trigger = self._build_trigger(poll)
        self.scheduler.add_job(
            callback,
            trigger=trigger,
            id=EXPORTER_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.logger.info("job_scheduled", job=EXPORTER_JOB_ID, interval_seconds=poll.interval_seconds)

    def remove_exporter(self) -> None:
        try:
            self.scheduler.remove_job(EXPORTER_JOB_ID)
        except Exception:  # noqa: BLE001
            self.logger.warning("job_remove_failed", job=EXPORTER_JOB_ID)

    def _build_trigger(self, poll: PollConfig) -> IntervalTrigger:
        return IntervalTrigger(seconds=poll.interval_seconds)

    def list_jobs(self) -> list[dict]:
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "next_run_time": getattr(job, "next_run_time", None),
                    "trigger": str(job.trigger),
                }
            )
        return jobs


__all__ = ["APSchedulerAdapter", "EXPORTER_JOB_ID"]
