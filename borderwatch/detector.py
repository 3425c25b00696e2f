"""
Scenario Detector

Maps a chat utterance to at most one scenario key so the chat context can be
scoped. Domain terms are checked before raw keys, in a fixed priority order;
the first hit wins.
"""
from typing import Optional

from .scenarios import SCENARIOS

KEYWORD_PRIORITY = (
    ("passport", "tempered-passport"),
    ("queue", "immigration-queue"),
    ("id", "tempered-id"),
)


def detect_scenario(text: Optional[str]) -> Optional[str]:
    s = (text or "").lower()
    if not s:
        return None

    for keyword, key in KEYWORD_PRIORITY:
        if keyword in s:
            return key

    for key in SCENARIOS:
        if key in s:
            return key

    return None
