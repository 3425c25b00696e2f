"""
Submission Pipeline

Validate -> store the photo -> write the incident -> write its notification ->
recompute KPIs. Validation happens before any write.

If the notification write fails after the incident write succeeded, the
incident row is kept and the failure is raised to the caller.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .errors import MissingAttachment, StorageWriteError
from .metrics import MetricsSnapshot, compute_metrics
from .scenarios import lookup
from .timeutils import to_iso, utc_now

logger = logging.getLogger(__name__)

CLEAR_MESSAGE = "Data cleared. All counters and alerts reset to 0 for this scenario."


@dataclass(frozen=True)
class SubmissionResult:
    scenario: str
    file_path: str
    acknowledgement: str
    metrics: MetricsSnapshot


@dataclass(frozen=True)
class ClearResult:
    scenario: str
    metrics: MetricsSnapshot
    message: str = CLEAR_MESSAGE


class SubmissionPipeline:
    def __init__(self, store, uploads, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.uploads = uploads
        self._clock = clock or utc_now

    async def submit(self, scenario_key: str, upload) -> SubmissionResult:
        scenario = lookup(scenario_key)
        if upload is None or not getattr(upload, "filename", None):
            raise MissingAttachment()

        file_path = await self.uploads.save(upload)
        created_at = to_iso(self._clock())

        await self.store.insert_incident(scenario.storage_target, created_at, file_path)
        await self.store.insert_notification(created_at, scenario.key, scenario.fixed_message)
        logger.info(f"Recorded {scenario.key} incident at {created_at} ({file_path})")

        metrics = await compute_metrics(self.store, scenario.storage_target, now=self._clock())
        return SubmissionResult(
            scenario=scenario.key,
            file_path=file_path,
            acknowledgement=scenario.fixed_message,
            metrics=metrics,
        )

    async def metrics(self, scenario_key: str) -> MetricsSnapshot:
        scenario = lookup(scenario_key)
        return await compute_metrics(self.store, scenario.storage_target, now=self._clock())

    async def clear(self, scenario_key: str, clear_notifications: bool = True) -> ClearResult:
        scenario = lookup(scenario_key)

        deleted = await self.store.delete_all(scenario.storage_target)
        logger.info(f"Cleared {deleted} {scenario.key} incidents")

        if clear_notifications:
            try:
                await self.store.delete_notifications(scenario.key)
            except StorageWriteError as e:
                logger.error(f"Could not clear notifications for {scenario.key}: {e}")

        metrics = await compute_metrics(self.store, scenario.storage_target, now=self._clock())
        return ClearResult(scenario=scenario.key, metrics=metrics)
