import pytest

from mapchat.data.locations import LocationDataset, default_dataset
from mapchat.filters.engine import NO_QUERY_ECHO, ProximityFilterEngine, clamp_radius, execute
from mapchat.models import (
    AnyCombinationQuery,
    Category,
    IncludeExcludeQuery,
    MultiTargetQuery,
    NoQuery,
    RadiusQuery,
    TargetSpec,
)

engine = ProximityFilterEngine()

# Fair Park property and downtown FedEx, about 4.37 miles apart
PAIR_DATASET = LocationDataset.from_records(
    {
        "Property": [{"name": "Fair Park Industrial Center", "coordinates": [-96.7559, 32.7323]}],
        "Carrier": [{"name": "FedEx Office - Downtown", "coordinates": [-96.8066, 32.7791]}],
    }
)

# Points on the prime meridian: 0.01 degrees of latitude is about 0.69 miles.
# A has a carrier close by but no cafe; B has both.
GRID_DATASET = LocationDataset.from_records(
    {
        "Property": [
            {"name": "A", "coordinates": [0.0, 0.0]},
            {"name": "B", "coordinates": [0.0, 0.5]},
        ],
        "Carrier": [
            {"name": "C1", "coordinates": [0.0, 0.01]},
            {"name": "C2", "coordinates": [0.0, 0.52]},
        ],
        "Cafe": [
            {"name": "K1", "coordinates": [0.0, 0.53]},
        ],
    }
)


def names(points):
    return [p.name for p in points]


# ── Radius ────────────────────────────────────────────────────────


def test_radius_filter_keeps_pair_within_radius():
    query = RadiusQuery(source=Category.PROPERTY, target=Category.CARRIER, radius=5)
    result = engine.execute(query, PAIR_DATASET)

    assert names(result.locations) == ["Fair Park Industrial Center"]
    assert len(result.edges) == 1
    edge = result.edges[0]
    assert edge.source == (-96.7559, 32.7323)
    assert edge.target == (-96.8066, 32.7791)
    assert edge.target_category == Category.CARRIER
    assert edge.distance == pytest.approx(4.37, abs=0.05)
    assert names(result.matched_targets) == ["FedEx Office - Downtown"]
    assert result.echo_text == "Properties within 5 miles of FedEx locations"


def test_radius_filter_drops_pair_outside_radius():
    query = RadiusQuery(source=Category.PROPERTY, target=Category.CARRIER, radius=3)
    result = engine.execute(query, PAIR_DATASET)
    assert result.locations == []
    assert result.edges == []


def test_radius_filter_one_edge_per_qualifying_pair():
    query = RadiusQuery(source=Category.CAFE, target=Category.CARRIER, radius=2)
    result = engine.execute(query, GRID_DATASET)
    assert names(result.locations) == ["K1"]
    assert len(result.edges) == 1
    assert result.edges[0].target == (0.0, 0.52)


def test_radius_filter_without_target_returns_all_sources():
    query = RadiusQuery(source=Category.PROPERTY, radius=5)
    result = engine.execute(query, GRID_DATASET)
    assert names(result.locations) == ["A", "B"]
    assert result.edges == []
    assert result.echo_text == "All properties"


def test_radius_filter_is_monotonic_in_radius():
    dataset = default_dataset()
    previous = set()
    for radius in [1, 2, 3, 5, 8, 13]:
        query = RadiusQuery(source=Category.PROPERTY, target=Category.CARRIER, radius=radius)
        kept = set(execute(query, dataset).locations)
        assert previous <= kept
        previous = kept


@pytest.mark.parametrize("radius", [0, -3])
def test_non_positive_radius_is_clamped(radius):
    assert clamp_radius(radius) == 1
    # C1 is about 0.69 miles from A, C2 about 1.38 miles from B
    query = RadiusQuery(source=Category.PROPERTY, target=Category.CARRIER, radius=radius)
    result = engine.execute(query, GRID_DATASET)
    assert names(result.locations) == ["A"]
    assert result.echo_text == "Properties within 1 mile of FedEx locations"


# ── Include / exclude ─────────────────────────────────────────────


def test_include_exclude_filter():
    query = IncludeExcludeQuery(
        primary=Category.PROPERTY,
        include=Category.CARRIER,
        include_radius=2,
        exclude=Category.CAFE,
        exclude_radius=3,
    )
    result = engine.execute(query, GRID_DATASET)

    assert names(result.locations) == ["A"]
    assert len(result.edges) == 1
    assert result.edges[0].target == (0.0, 0.01)

    # B was near C2 but blocked by K1
    assert len(result.diagnostics) == 1
    diagnostic = result.diagnostics[0]
    assert diagnostic.source == (0.0, 0.5)
    assert diagnostic.target == (0.0, 0.53)
    assert diagnostic.target_category == Category.CAFE
    assert diagnostic.distance == pytest.approx(2.07, abs=0.01)


def test_include_exclude_edge_goes_to_nearest_include():
    dataset = LocationDataset.from_records(
        {
            "Property": [{"name": "A", "coordinates": [0.0, 0.0]}],
            "Carrier": [
                {"name": "far", "coordinates": [0.0, 0.02]},
                {"name": "near", "coordinates": [0.0, 0.01]},
            ],
        }
    )
    query = IncludeExcludeQuery(
        primary=Category.PROPERTY,
        include=Category.CARRIER,
        include_radius=5,
        exclude=Category.CAFE,
        exclude_radius=5,
    )
    result = engine.execute(query, dataset)
    assert names(result.locations) == ["A"]
    assert [e.target for e in result.edges] == [(0.0, 0.01)]
    assert names(result.matched_targets) == ["near"]


def test_include_exclude_tie_keeps_first_encountered():
    # East and north neighbours of the origin are exactly equidistant
    east = {"name": "east", "coordinates": [0.01, 0.0]}
    north = {"name": "north", "coordinates": [0.0, 0.01]}
    query = IncludeExcludeQuery(
        primary=Category.PROPERTY,
        include=Category.CARRIER,
        include_radius=5,
        exclude=Category.CAFE,
        exclude_radius=5,
    )
    for carriers, expected in [([east, north], "east"), ([north, east], "north")]:
        dataset = LocationDataset.from_records(
            {
                "Property": [{"name": "A", "coordinates": [0.0, 0.0]}],
                "Carrier": carriers,
            }
        )
        result = engine.execute(query, dataset)
        assert names(result.matched_targets) == [expected]


def test_include_exclude_monotonic_in_radii():
    dataset = default_dataset()

    def kept(include_radius, exclude_radius):
        query = IncludeExcludeQuery(
            primary=Category.PROPERTY,
            include=Category.CARRIER,
            include_radius=include_radius,
            exclude=Category.CAFE,
            exclude_radius=exclude_radius,
        )
        return set(execute(query, dataset).locations)

    assert kept(1, 2) <= kept(3, 2) <= kept(6, 2)
    assert kept(3, 1) >= kept(3, 2) >= kept(3, 4)


# ── Multi-target / any-combination ────────────────────────────────

MULTI_QUERY = MultiTargetQuery(
    primary=Category.PROPERTY,
    targets=[
        TargetSpec(category=Category.CARRIER, radius=2),
        TargetSpec(category=Category.CAFE, radius=3),
    ],
)


def test_multi_target_drops_candidates_failing_a_later_pass():
    result = engine.execute(MULTI_QUERY, GRID_DATASET)

    assert names(result.locations) == ["B"]
    # Only B's edges survive; A's carrier edge is discarded with A
    assert [e.source for e in result.edges] == [(0.0, 0.5), (0.0, 0.5)]
    assert [e.target_category for e in result.edges] == [Category.CARRIER, Category.CAFE]
    assert names(result.matched_targets) == ["C2", "K1"]
    assert result.echo_text == (
        "Properties within 2 miles of FedEx locations and within 3 miles of Starbucks locations"
    )


def test_multi_target_is_order_independent():
    reversed_query = MultiTargetQuery(
        primary=Category.PROPERTY, targets=list(reversed(MULTI_QUERY.targets))
    )
    assert set(engine.execute(reversed_query, GRID_DATASET).locations) == set(
        engine.execute(MULTI_QUERY, GRID_DATASET).locations
    )


def test_multi_target_equals_intersection_of_radius_filters():
    dataset = default_dataset()
    query = MultiTargetQuery(
        primary=Category.PROPERTY,
        targets=[
            TargetSpec(category=Category.CARRIER, radius=3),
            TargetSpec(category=Category.CAFE, radius=4),
        ],
    )
    per_target = [
        set(execute(RadiusQuery(source=Category.PROPERTY, target=t.category, radius=t.radius), dataset).locations)
        for t in query.targets
    ]
    assert set(execute(query, dataset).locations) == per_target[0] & per_target[1]


def test_multi_target_with_missing_category_is_empty():
    dataset = LocationDataset.from_records(
        {
            "Property": [{"name": "A", "coordinates": [0.0, 0.0]}],
            "Carrier": [{"name": "C1", "coordinates": [0.0, 0.01]}],
        }
    )
    result = engine.execute(MULTI_QUERY, dataset)
    assert result.locations == []
    assert result.edges == []


def test_any_combination_runs_conjunctive_filter():
    query = AnyCombinationQuery(
        primary=Category.CAFE,
        targets={Category.CARRIER: 2, Category.PROPERTY: 3},
    )
    result = engine.execute(query, GRID_DATASET)
    assert names(result.locations) == ["K1"]
    assert names(result.matched_targets) == ["C2", "B"]


def test_no_query_is_empty():
    result = engine.execute(NoQuery(), GRID_DATASET)
    assert result.locations == []
    assert result.edges == []
    assert result.echo_text == NO_QUERY_ECHO
