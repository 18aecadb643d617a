"""Per-player tournament stats under a filter.

Runs one grouped aggregation per statistic kind concurrently, resolves the
per-match raw keys to canonical players in a single bulk lookup, then sums
every contribution into one row per player.
"""
import asyncio
import logging
import math
import unicodedata
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Collection, Dict, Iterable, List, Mapping, Protocol, Tuple

from .capabilities import CAPABILITIES, ROUNDED_KINDS, StatKind
from .crud import PlayerIdentity
from .filters import Predicate, StatFilters, build_predicate

logger = logging.getLogger(__name__)

Partials = Mapping[StatKind, Mapping[str, float]]


class EventStore(Protocol):
    def aggregate(self, kind: StatKind, predicate: Predicate) -> Mapping[str, float]: ...


class IdentityStore(Protocol):
    def lookup(self, raw_keys: Collection[str]) -> Mapping[str, PlayerIdentity]: ...


@dataclass
class PlayerRow:
    player: str
    epic_id: str
    stats: Dict[StatKind, int] = field(default_factory=lambda: {kind: 0 for kind in CAPABILITIES})

    def to_dict(self) -> dict:
        row = {"player": self.player, "epicId": self.epic_id}
        row.update({kind.value: value for kind, value in self.stats.items()})
        return row


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


async def fetch_partials(filters: StatFilters, events: EventStore) -> Partials:
    """Fan out one aggregation per stat kind; any failure aborts the whole fetch."""
    kinds = list(CAPABILITIES)
    predicates = [build_predicate(filters, CAPABILITIES[kind]) for kind in kinds]
    results = await asyncio.gather(
        *(asyncio.to_thread(events.aggregate, kind, pred) for kind, pred in zip(kinds, predicates))
    )
    for kind, partial in zip(kinds, results):
        logger.debug("partial %s: %d raw keys", kind.value, len(partial))
    return MappingProxyType(dict(zip(kinds, results)))


def raw_keys_of(partials: Partials) -> frozenset:
    keys = set()
    for partial in partials.values():
        keys.update(partial)
    return frozenset(keys)


def merge_partials(
    partials: Iterable[Tuple[StatKind, Mapping[str, float]]],
    identities: Mapping[str, PlayerIdentity],
) -> Dict[str, PlayerRow]:
    """Sum each (kind, raw key, value) into the row of the player the key resolves to.

    Unresolved raw keys contribute nothing. The result does not depend on the
    order of ``partials``.
    """
    rows: Dict[str, PlayerRow] = {}
    for kind, partial in partials:
        for raw_key, value in partial.items():
            identity = identities.get(raw_key)
            if identity is None:
                continue
            row = rows.get(identity.epic_id)
            if row is None:
                row = rows[identity.epic_id] = PlayerRow(player=identity.display_name, epic_id=identity.epic_id)
            if kind in ROUNDED_KINDS:
                row.stats[kind] += round_half_up(value)
            else:
                row.stats[kind] += int(value)
    return rows


def _name_key(name: str) -> str:
    # accent- and case-insensitive, independent of the process locale
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def assemble_rows(rows: Iterable[PlayerRow]) -> List[PlayerRow]:
    """Order rows by display name, ascending.

    Collation approximates a locale compare without depending on the process
    locale: names compare with accents stripped (NFKD) and case folded, then by
    the raw name, then by epic id, so equal inputs always give the same order.
    """
    return sorted(rows, key=lambda r: (_name_key(r.player), r.player, r.epic_id))


async def get_filtered_stats(
    filters: StatFilters,
    events: EventStore,
    identities: IdentityStore,
) -> List[PlayerRow]:
    logger.debug("stats filters: %s", filters)
    partials = await fetch_partials(filters, events)
    keys = raw_keys_of(partials)
    resolved = await asyncio.to_thread(identities.lookup, keys) if keys else {}
    merged = merge_partials(partials.items(), resolved)
    result = assemble_rows(merged.values())
    logger.info(
        "stats: %d raw keys, %d resolved, %d players",
        len(keys), len(resolved), len(result),
    )
    return result
