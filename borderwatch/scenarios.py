"""
Scenario registry.

The fixed set of reportable scenarios. This is the only place that knows a
scenario's storage table, display labels and acknowledgement message.
"""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import List

from .errors import UnknownScenario


class StorageTarget(str, Enum):
    TEMPERED_ID = "tempered_id"
    IMMIGRATION_QUEUE = "immigration_queue"
    TEMPERED_PASSPORT = "tempered_passport"


@dataclass(frozen=True)
class Scenario:
    key: str
    storage_target: StorageTarget
    label: str
    short_label: str
    fixed_message: str


SCENARIOS = MappingProxyType({
    "tempered-id": Scenario(
        key="tempered-id",
        storage_target=StorageTarget.TEMPERED_ID,
        label="Tampered ID",
        short_label="ID",
        fixed_message=(
            "Alert received: A tampered ID was reported. Security has been notified. "
            "Please follow verification protocol A."
        ),
    ),
    "immigration-queue": Scenario(
        key="immigration-queue",
        storage_target=StorageTarget.IMMIGRATION_QUEUE,
        label="Immigration Queue Photo",
        short_label="Queue",
        fixed_message=(
            "Update noted: A photo of the immigration queue was received. "
            "Operations will adjust staffing to reduce wait times."
        ),
    ),
    "tempered-passport": Scenario(
        key="tempered-passport",
        storage_target=StorageTarget.TEMPERED_PASSPORT,
        label="Tampered Passport",
        short_label="Passport",
        fixed_message=(
            "Alert received: A tampered passport was reported. "
            "Border control procedure B is now in effect."
        ),
    ),
})


def lookup(key: str) -> Scenario:
    scenario = SCENARIOS.get(key) if isinstance(key, str) else None
    if scenario is None:
        raise UnknownScenario()
    return scenario


def list_scenarios() -> List[Scenario]:
    return list(SCENARIOS.values())
