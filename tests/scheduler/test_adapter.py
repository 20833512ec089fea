from __future__ import annotations

from apscheduler.triggers.interval import IntervalTrigger

from tick_forwarder.config import PollConfig
from tick_forwarder.scheduler import EXPORTER_JOB_ID, APSchedulerAdapter


def test_build_interval_trigger() -> None:
    adapter = APSchedulerAdapter()
    trigger = adapter._build_trigger(PollConfig(interval_seconds=0.5))
    assert isinstance(trigger, IntervalTrigger)
    assert trigger.interval.total_seconds() == 0.5


def test_schedule_exporter_never_overlaps() -> None:
    adapter = APSchedulerAdapter()
    calls: list[dict] = []

    class StubScheduler:
        def add_job(self, callback, **kwargs):  # noqa: ANN001
            calls.append({"callback": callback, **kwargs})

        def get_jobs(self):
            return []

        def start(self):
            calls.append({"event": "started"})

        def shutdown(self, wait=False):  # noqa: ARG002
            calls.append({"event": "shutdown"})

        def remove_job(self, job_id):  # noqa: ANN001
            calls.append({"event": "remove", "id": job_id})

    adapter.scheduler = StubScheduler()  # type: ignore[assignment]

    def poll() -> None:
        return None

    adapter.schedule_exporter(poll, PollConfig(interval_seconds=1))
    adapter.start()
    adapter.start()
    adapter.remove_exporter()
    adapter.shutdown()

    job = calls[0]
    assert job["callback"] is poll
    assert job["id"] == EXPORTER_JOB_ID
    assert job["max_instances"] == 1
    assert job["coalesce"] is True
    assert job["replace_existing"] is True
    assert [c.get("event") for c in calls[1:]] == ["started", "remove", "shutdown"]


def test_list_jobs_with_background_scheduler() -> None:
    adapter = APSchedulerAdapter()
    adapter.schedule_exporter(lambda: None, PollConfig(interval_seconds=60))
    jobs = adapter.list_jobs()
    assert [job["id"] for job in jobs] == [EXPORTER_JOB_ID]
    adapter.remove_exporter()
    assert adapter.list_jobs() == []
