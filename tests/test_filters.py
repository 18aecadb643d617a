import pytest
from pydantic import ValidationError

from fnstats.capabilities import CAPABILITIES, Capability, StatKind
from fnstats.filters import StatFilters, build_predicate

ALL = Capability(True, True, True, True)
NONE = Capability(False, False, False, False)


def make_filters(**overrides):
    payload = {
        "selectedMatches": ["m1"],
        "weaponTypes": ["AR"],
        "timeRange": [0, 30],
        "distanceRange": [0, 400],
    }
    payload.update(overrides)
    return StatFilters.model_validate(payload)


class TestStatFilters:

    def test_parses_json_shape(self):
        f = make_filters(selectedMatches=["m1", "m2", "m1"])
        assert f.selected_matches == frozenset({"m1", "m2"})
        assert f.weapon_types == frozenset({"AR"})
        assert f.time_range == (0, 30)
        assert f.distance_range == (0, 400)

    def test_sets_default_to_empty(self):
        f = StatFilters(time_range=(0, 1), distance_range=(0, 1))
        assert f.selected_matches == frozenset()
        assert f.weapon_types == frozenset()

    def test_frozen(self):
        f = make_filters()
        with pytest.raises(ValidationError):
            f.time_range = (1, 2)

    @pytest.mark.parametrize("field", ["timeRange", "distanceRange"])
    def test_rejects_inverted_range(self, field):
        with pytest.raises(ValidationError, match="exceeds upper bound"):
            make_filters(**{field: [10, 5]})

    @pytest.mark.parametrize("field", ["timeRange", "distanceRange"])
    def test_rejects_negative_bound(self, field):
        with pytest.raises(ValidationError, match="non-negative"):
            make_filters(**{field: [-1, 5]})

    @pytest.mark.parametrize("field", ["timeRange", "distanceRange"])
    @pytest.mark.parametrize("bad", [float("nan"), float("inf")])
    def test_rejects_non_finite_bound(self, field, bad):
        with pytest.raises(ValidationError, match="finite"):
            make_filters(**{field: [0, bad]})
        with pytest.raises(ValidationError, match="finite"):
            make_filters(**{field: [bad, 30]})

    def test_degenerate_range_is_valid(self):
        f = make_filters(distanceRange=[0, 0])
        assert f.distance_range == (0, 0)

    def test_equal_filters_are_equal(self):
        assert make_filters() == make_filters()


class TestBuildPredicate:

    def test_all_clauses_with_unit_conversion(self):
        pred = build_predicate(make_filters(timeRange=[1.5, 20], distanceRange=[5, 250]), ALL)
        assert pred.match_ids == frozenset({"m1"})
        assert pred.weapon_types == frozenset({"AR"})
        assert pred.time_seconds == (90, 1200)
        assert pred.distance_units == (500, 25000)

    def test_empty_sets_omit_clause(self):
        pred = build_predicate(make_filters(selectedMatches=[], weaponTypes=[]), ALL)
        assert pred.match_ids is None
        assert pred.weapon_types is None
        assert pred.time_seconds is not None

    def test_unsupported_dimensions_are_absent(self):
        pred = build_predicate(make_filters(), NONE)
        assert pred.match_ids is None
        assert pred.weapon_types is None
        assert pred.time_seconds is None
        assert pred.distance_units is None

    def test_without_distance_support_any_distance_gives_same_predicate(self):
        cap = Capability(True, True, True, False)
        a = build_predicate(make_filters(distanceRange=[0, 0]), cap)
        b = build_predicate(make_filters(distanceRange=[100, 400]), cap)
        assert a == b
        assert a.distance_units is None

    def test_damage_streams_honor_every_dimension(self):
        for kind in (StatKind.DAMAGE_DEALT, StatKind.DAMAGE_RECEIVED):
            assert CAPABILITIES[kind] == ALL

    def test_every_kind_has_a_capability(self):
        assert set(CAPABILITIES) == set(StatKind)
