"""Query filters and the predicate builder."""
import math
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .capabilities import Capability

SECONDS_PER_MINUTE = 60
UNITS_PER_METER = 100


class StatFilters(BaseModel):
    """Query scope: matches, weapon types, time window (minutes), distance window (meters).

    An empty ``selectedMatches`` or ``weaponTypes`` set means no restriction
    on that dimension.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    selected_matches: FrozenSet[str] = Field(default_factory=frozenset, alias="selectedMatches")
    weapon_types: FrozenSet[str] = Field(default_factory=frozenset, alias="weaponTypes")
    time_range: Tuple[float, float] = Field(alias="timeRange")
    distance_range: Tuple[float, float] = Field(alias="distanceRange")

    @model_validator(mode="after")
    def _check_ranges(self) -> "StatFilters":
        for name, (lo, hi) in (("timeRange", self.time_range), ("distanceRange", self.distance_range)):
            if not (math.isfinite(lo) and math.isfinite(hi)):
                raise ValueError(f"{name} bounds must be finite, got [{lo}, {hi}]")
            if lo < 0 or hi < 0:
                raise ValueError(f"{name} bounds must be non-negative, got [{lo}, {hi}]")
            if lo > hi:
                raise ValueError(f"{name} lower bound {lo} exceeds upper bound {hi}")
        return self


@dataclass(frozen=True)
class Predicate:
    """Conjunction of clauses; a ``None`` clause is absent, not "match everything"."""
    match_ids: Optional[FrozenSet[str]] = None
    weapon_types: Optional[FrozenSet[str]] = None
    time_seconds: Optional[Tuple[float, float]] = None
    distance_units: Optional[Tuple[float, float]] = None


def build_predicate(filters: StatFilters, capability: Capability) -> Predicate:
    match_ids = None
    if capability.supports_matches and filters.selected_matches:
        match_ids = filters.selected_matches

    # events with no weapon type never satisfy a weapon clause
    weapon_types = None
    if capability.supports_weapon_types and filters.weapon_types:
        weapon_types = filters.weapon_types

    time_seconds = None
    if capability.supports_time_range:
        lo, hi = filters.time_range
        time_seconds = (lo * SECONDS_PER_MINUTE, hi * SECONDS_PER_MINUTE)

    distance_units = None
    if capability.supports_distance_range:
        lo, hi = filters.distance_range
        distance_units = (lo * UNITS_PER_METER, hi * UNITS_PER_METER)

    return Predicate(
        match_ids=match_ids,
        weapon_types=weapon_types,
        time_seconds=time_seconds,
        distance_units=distance_units,
    )
