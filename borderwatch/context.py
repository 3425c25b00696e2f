"""
Context Assembler

Builds the bounded ALERTS SNAPSHOT that grounds a chat turn:

    [ALERTS SNAPSHOT]
    Totals: ID=3, Queue=0, Passport=1
    Today: ID=1, Queue=0, Passport=1
    Recent alerts:
    - 2026-10-18T09:15:02.123Z | tempered-id | Alert received: ...
    [END SNAPSHOT]

Totals come from the incident tables and always cover every scenario. Today
counts come from the notification log. The recent list holds at most
RECENT_LIMIT notifications, newest first, scoped to the detected scenario when
there is one.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .detector import detect_scenario
from .scenarios import list_scenarios
from .store import NotificationEntry
from .timeutils import local_day_window

RECENT_LIMIT = 10
MESSAGE_MAX_CHARS = 180
EMPTY_PLACEHOLDER = "(none)"

_WHITESPACE = re.compile(r"\s+")


@dataclass
class ContextSnapshot:
    scenario: Optional[str]
    text: str
    entries: List[NotificationEntry] = field(default_factory=list)


def normalize_message(message: str) -> str:
    return _WHITESPACE.sub(" ", str(message))[:MESSAGE_MAX_CHARS]


def format_entry(entry: NotificationEntry) -> str:
    return f"- {entry.created_at} | {entry.scenario} | {normalize_message(entry.message)}"


def _format_counts(counts: Dict[str, int]) -> str:
    return ", ".join(f"{s.short_label}={counts[s.key]}" for s in list_scenarios())


def render_snapshot(
    totals: Dict[str, int],
    today: Dict[str, int],
    entries: List[NotificationEntry],
) -> str:
    lines = [format_entry(e) for e in entries] or [EMPTY_PLACEHOLDER]
    return "\n".join([
        "[ALERTS SNAPSHOT]",
        f"Totals: {_format_counts(totals)}",
        f"Today: {_format_counts(today)}",
        "Recent alerts:",
        *lines,
        "[END SNAPSHOT]",
    ])


class ContextAssembler:
    def __init__(self, store):
        self._store = store

    async def build_snapshot(self, utterance: Optional[str], now: Optional[datetime] = None) -> ContextSnapshot:
        scenario = detect_scenario(utterance)
        window = local_day_window(now)

        totals = {}
        today = {}
        for s in list_scenarios():
            totals[s.key] = await self._store.count(s.storage_target)
            today[s.key] = await self._store.count_notifications(scenario=s.key, time_range=window)

        entries = await self._store.query_notifications(scenario=scenario, limit=RECENT_LIMIT)

        return ContextSnapshot(
            scenario=scenario,
            text=render_snapshot(totals, today, entries),
            entries=entries,
        )
