# backend/fnstats/crud.py
import logging
from types import MappingProxyType
from typing import Callable, Collection, Dict, List, Mapping, NamedTuple, Optional

from sqlalchemy.orm import Session
from sqlalchemy import select, func

from . import models
from .capabilities import StatKind
from .filters import Predicate, StatFilters

logger = logging.getLogger(__name__)


class PlayerIdentity(NamedTuple):
    epic_id: str
    display_name: str


class StatSource(NamedTuple):
    table: type
    key_column: str
    value_column: Optional[str]  # None -> count rows


STAT_SOURCES: Dict[StatKind, StatSource] = {
    StatKind.ELIMINATIONS: StatSource(models.EliminationEvent, "actor_id", None),
    StatKind.DAMAGE_DEALT: StatSource(models.DamageDealtEvent, "actor_id", "amount"),
    StatKind.DAMAGE_RECEIVED: StatSource(models.DamageDealtEvent, "recipient_id", "amount"),
}


def _where(table, predicate: Predicate) -> list:
    clauses = []
    if predicate.match_ids is not None:
        clauses.append(table.match_id.in_(sorted(predicate.match_ids)))
    if predicate.weapon_types is not None:
        clauses.append(table.weapon_type.in_(sorted(predicate.weapon_types)))
    if predicate.time_seconds is not None:
        lo, hi = predicate.time_seconds
        clauses.append(table.game_time_seconds.between(lo, hi))
    if predicate.distance_units is not None:
        lo, hi = predicate.distance_units
        clauses.append(table.distance.between(lo, hi))
    return clauses


def aggregate_stat(db: Session, kind: StatKind, predicate: Predicate) -> Mapping[str, float]:
    """Group one event stream by raw key under ``predicate``; count or sum per key."""
    source = STAT_SOURCES[kind]
    table = source.table
    key = getattr(table, source.key_column)
    if source.value_column is None:
        measure = func.count(table.id)
    else:
        measure = func.sum(getattr(table, source.value_column))

    stmt = (
        select(key, measure)
        .where(*_where(table, predicate))
        .where(key.is_not(None))
        .group_by(key)
    )
    totals = {str(k): float(v or 0.0) for k, v in db.execute(stmt).all()}
    logger.debug("aggregate %s: %d raw keys", kind.value, len(totals))
    return MappingProxyType(totals)


def lookup_identities(db: Session, raw_keys: Collection[str]) -> Mapping[str, PlayerIdentity]:
    """Bulk raw key -> canonical player. Keys without an epic id are left out."""
    if not raw_keys:
        return MappingProxyType({})
    stmt = (
        select(models.MatchPlayer.id, models.MatchPlayer.epic_id, models.MatchPlayer.epic_username)
        .where(models.MatchPlayer.id.in_(sorted(raw_keys)))
        .where(models.MatchPlayer.epic_id.is_not(None))
    )
    found = {
        str(raw): PlayerIdentity(epic_id=epic_id, display_name=name or epic_id)
        for raw, epic_id, name in db.execute(stmt).all()
    }
    return MappingProxyType(found)


class SqlStatsStore:
    """Event store + identity store over a session factory.

    Each call opens its own session so concurrent aggregations never share one.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def aggregate(self, kind: StatKind, predicate: Predicate) -> Mapping[str, float]:
        with self.session_factory() as db:
            return aggregate_stat(db, kind, predicate)

    def lookup(self, raw_keys: Collection[str]) -> Mapping[str, PlayerIdentity]:
        with self.session_factory() as db:
            return lookup_identities(db, raw_keys)


# --- tournament metadata ---
def get_tournament(db: Session, tournament_id: str):
    return db.get(models.EventWindow, tournament_id)

def list_tournaments(db: Session) -> List[dict]:
    rows = (
        db.query(models.EventWindow)
        .order_by(models.EventWindow.discovered_at.desc())
        .all()
    )
    return [
        {
            "id": w.event_window_id,
            "total_matches": w.total_matches,
            "processed_matches": w.processed_matches,
            "start_time": w.start_time,
            "end_time": w.end_time,
        }
        for w in rows
    ]

def list_matches(db: Session, tournament_id: str) -> List[dict]:
    rows = (
        db.query(models.Match.match_id)
        .filter(models.Match.event_window_id == tournament_id)
        .order_by(models.Match.start_time.asc(), models.Match.match_id.asc())
        .all()
    )
    return [{"id": r[0], "label": r[0]} for r in rows]

def list_weapon_types(db: Session, tournament_id: str) -> List[dict]:
    rows = db.execute(
        select(models.Weapon.weapon_type)
        .where(models.Weapon.event_window_id == tournament_id)
        .where(models.Weapon.weapon_type.is_not(None))
        .distinct()
        .order_by(models.Weapon.weapon_type.asc())
    ).all()
    return [{"id": r[0], "label": r[0]} for r in rows]

def list_players(db: Session, match_ids: Collection[str]) -> List[dict]:
    if not match_ids:
        return []
    rows = db.execute(
        select(models.MatchPlayer.epic_id, func.min(models.MatchPlayer.epic_username))
        .where(models.MatchPlayer.match_id.in_(sorted(match_ids)))
        .where(models.MatchPlayer.epic_id.is_not(None))
        .group_by(models.MatchPlayer.epic_id)
    ).all()
    players = [{"epic_id": epic_id, "display_name": name or epic_id} for epic_id, name in rows]
    players.sort(key=lambda p: (p["display_name"].casefold(), p["epic_id"]))
    return players

def default_filters(db: Session, tournament_id: str, distance_range, time_range) -> StatFilters:
    """Everything in the tournament: all its matches and weapon types."""
    return StatFilters(
        selected_matches=frozenset(m["id"] for m in list_matches(db, tournament_id)),
        weapon_types=frozenset(w["id"] for w in list_weapon_types(db, tournament_id)),
        distance_range=distance_range,
        time_range=time_range,
    )
