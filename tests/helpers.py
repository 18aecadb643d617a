# tests/helpers.py

from fnstats import models


def add_player(db, raw_key, match_id, epic_id, name):
    db.add(models.MatchPlayer(id=raw_key, match_id=match_id, epic_id=epic_id, epic_username=name))


def add_elim(db, match_id, actor, weapon="AR", seconds=120.0, distance=5000.0, recipient=None):
    db.add(models.EliminationEvent(
        match_id=match_id, actor_id=actor, recipient_id=recipient,
        weapon_type=weapon, game_time_seconds=seconds, distance=distance,
    ))


def add_damage(db, match_id, actor, recipient, amount, weapon="AR", seconds=120.0, distance=5000.0):
    db.add(models.DamageDealtEvent(
        match_id=match_id, actor_id=actor, recipient_id=recipient, amount=amount,
        weapon_type=weapon, game_time_seconds=seconds, distance=distance,
    ))


class FakeStore:
    """In-memory event + identity store returning canned partials."""

    def __init__(self, partials=None, identities=None, fail_on=None):
        self.partials = partials or {}
        self.identities = identities or {}
        self.fail_on = fail_on
        self.aggregate_calls = []
        self.lookup_calls = []

    def aggregate(self, kind, predicate):
        self.aggregate_calls.append((kind, predicate))
        if kind == self.fail_on:
            raise RuntimeError(f"store down for {kind.value}")
        return dict(self.partials.get(kind, {}))

    def lookup(self, raw_keys):
        self.lookup_calls.append(set(raw_keys))
        return {k: v for k, v in self.identities.items() if k in raw_keys}
