"""Scheduling helpers."""

from .apsched_adapter import EXPORTER_JOB_ID, APSchedulerAdapter

__all__ = ["APSchedulerAdapter", "EXPORTER_JOB_ID"]
