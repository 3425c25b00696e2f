from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .scenarios import StorageTarget
from .timeutils import local_day_window


@dataclass(frozen=True)
class MetricsSnapshot:
    total_reports: int
    reports_today: int
    last_report_time: Optional[str]


async def compute_metrics(store, target: StorageTarget, now: Optional[datetime] = None) -> MetricsSnapshot:
    """
    Fresh KPIs for one scenario table, read in a single statement so the
    counts always agree. "Today" is the server's local calendar day up to ``now``.
    """
    total, today, last_report_time = await store.incident_stats(target, local_day_window(now))
    return MetricsSnapshot(
        total_reports=total,
        reports_today=today,
        last_report_time=last_report_time,
    )
