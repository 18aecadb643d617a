"""Statistic kinds and the filter dimensions each one honors.

Adding a statistic is a data change: a new ``StatKind`` member, one row in
``CAPABILITIES`` and one source row in ``crud.STAT_SOURCES``.
"""
from enum import Enum
from typing import Dict, NamedTuple


class StatKind(str, Enum):
    ELIMINATIONS = "eliminations"
    DAMAGE_DEALT = "damageDealt"
    DAMAGE_RECEIVED = "damageReceived"


class Capability(NamedTuple):
    supports_matches: bool
    supports_weapon_types: bool
    supports_time_range: bool
    supports_distance_range: bool


CAPABILITIES: Dict[StatKind, Capability] = {
    StatKind.ELIMINATIONS: Capability(True, True, True, True),
    StatKind.DAMAGE_DEALT: Capability(True, True, True, True),
    StatKind.DAMAGE_RECEIVED: Capability(True, True, True, True),
}

# stats summed from fractional amounts; rounded when merged into a row
ROUNDED_KINDS = frozenset({StatKind.DAMAGE_DEALT, StatKind.DAMAGE_RECEIVED})
