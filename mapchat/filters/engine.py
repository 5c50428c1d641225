import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from mapchat.core.config import settings
from mapchat.data.locations import LocationDataset, default_dataset
from mapchat.geo.distance import point_distance
from mapchat.models import (
    AnyCombinationQuery,
    Category,
    ConnectionEdge,
    IncludeExcludeQuery,
    LocationPoint,
    MultiTargetQuery,
    QueryResult,
    RadiusQuery,
    SpatialQuery,
)

logger = logging.getLogger(__name__)

NO_QUERY_ECHO = "No spatial question recognized"


def clamp_radius(radius: float) -> float:
    return radius if radius > 0 else settings.MIN_RADIUS_MILES


def _edge(source: LocationPoint, target: LocationPoint, distance: float) -> ConnectionEdge:
    return ConnectionEdge(
        source=source.coordinates,
        target=target.coordinates,
        target_category=target.category,
        distance=distance,
    )


def _nearest_within(
    point: LocationPoint, candidates: Iterable[LocationPoint], radius: float
) -> Optional[Tuple[LocationPoint, float]]:
    """Closest candidate within radius; the first one seen wins exact ties."""
    best = None
    for candidate in candidates:
        d = point_distance(point, candidate)
        if d <= radius and (best is None or d < best[1]):
            best = (candidate, d)
    return best


def _distinct(points: Iterable[LocationPoint]) -> List[LocationPoint]:
    seen = set()
    ordered = []
    for point in points:
        if point not in seen:
            seen.add(point)
            ordered.append(point)
    return ordered


class ProximityFilterEngine:
    def execute(self, query: SpatialQuery, dataset: LocationDataset) -> QueryResult:
        if isinstance(query, RadiusQuery):
            return self.radius_filter(query, dataset)
        if isinstance(query, IncludeExcludeQuery):
            return self.include_exclude_filter(query, dataset)
        if isinstance(query, MultiTargetQuery):
            return self.multi_target_filter(query, dataset)
        if isinstance(query, AnyCombinationQuery):
            return self.any_combination_filter(query, dataset)
        return QueryResult(echo_text=describe(query))

    def radius_filter(self, query: RadiusQuery, dataset: LocationDataset) -> QueryResult:
        sources = dataset.get(query.source)
        echo = describe(query)

        if query.target is None:
            return QueryResult(locations=list(sources), echo_text=echo)

        radius = clamp_radius(query.radius)
        targets = dataset.get(query.target)
        locations: List[LocationPoint] = []
        edges: List[ConnectionEdge] = []
        matched: List[LocationPoint] = []

        for source in sources:
            has_nearby_target = False
            for target in targets:
                d = point_distance(source, target)
                if d <= radius:
                    has_nearby_target = True
                    matched.append(target)
                    edges.append(_edge(source, target, d))
            if has_nearby_target:
                locations.append(source)

        if not edges:
            logger.info(f"No connections found within {radius} miles")
        logger.debug(
            f"Radius filter kept {len(locations)}/{len(sources)} {query.source.value} locations"
        )
        return QueryResult(
            locations=locations,
            edges=edges,
            echo_text=echo,
            matched_targets=_distinct(matched),
        )

    def include_exclude_filter(
        self, query: IncludeExcludeQuery, dataset: LocationDataset
    ) -> QueryResult:
        include_radius = clamp_radius(query.include_radius)
        exclude_radius = clamp_radius(query.exclude_radius)
        primaries = dataset.get(query.primary)
        includes = dataset.get(query.include)
        excludes = dataset.get(query.exclude)

        logger.debug(
            f"Include/exclude: {len(primaries)} primary, {len(includes)} include, "
            f"{len(excludes)} exclude locations"
        )

        locations: List[LocationPoint] = []
        edges: List[ConnectionEdge] = []
        diagnostics: List[ConnectionEdge] = []
        matched: List[LocationPoint] = []

        for primary in primaries:
            nearest_include = _nearest_within(primary, includes, include_radius)
            if nearest_include is None:
                continue

            nearest_exclude = _nearest_within(primary, excludes, exclude_radius)
            if nearest_exclude is not None:
                blocker, d = nearest_exclude
                logger.debug(
                    f"{primary.name!r} is near {query.include.value} but {d:.2f} miles "
                    f"from {blocker.name!r}"
                )
                diagnostics.append(_edge(primary, blocker, d))
                continue

            include, d = nearest_include
            locations.append(primary)
            matched.append(include)
            edges.append(_edge(primary, include, d))

        logger.info(f"Found {len(locations)} {query.primary.value} locations that meet all criteria")
        return QueryResult(
            locations=locations,
            edges=edges,
            echo_text=describe(query),
            matched_targets=_distinct(matched),
            diagnostics=diagnostics,
        )

    def multi_target_filter(self, query: MultiTargetQuery, dataset: LocationDataset) -> QueryResult:
        specs = [(t.category, t.radius) for t in query.targets]
        return self._conjunctive_filter(query.primary, specs, dataset, describe(query))

    def any_combination_filter(
        self, query: AnyCombinationQuery, dataset: LocationDataset
    ) -> QueryResult:
        specs = list(query.targets.items())
        return self._conjunctive_filter(query.primary, specs, dataset, describe(query))

    def _conjunctive_filter(
        self,
        primary: Category,
        specs: Sequence[Tuple[Category, float]],
        dataset: LocationDataset,
        echo: str,
    ) -> QueryResult:
        """
        Narrow the primary locations one target category at a time.

        A candidate survives a pass when some location of that category lies
        within the pass radius and gets an edge to the nearest such location.
        The survivors of the last pass are the result; edges recorded for
        candidates that a later pass dropped are discarded.
        """
        candidates = list(dataset.get(primary))
        links: List[Tuple[LocationPoint, LocationPoint, ConnectionEdge]] = []

        logger.debug(f"Starting with {len(candidates)} {primary.value} locations")

        for category, radius in specs:
            radius = clamp_radius(radius)
            targets = dataset.get(category)
            kept: List[LocationPoint] = []
            for candidate in candidates:
                nearest = _nearest_within(candidate, targets, radius)
                if nearest is None:
                    continue
                target, d = nearest
                kept.append(candidate)
                links.append((candidate, target, _edge(candidate, target, d)))
            candidates = kept
            logger.debug(
                f"After filtering for {category.value} within {radius} miles: "
                f"{len(candidates)} locations remain"
            )

        survivors = set(candidates)
        links = [link for link in links if link[0] in survivors]

        return QueryResult(
            locations=candidates,
            edges=[edge for _, _, edge in links],
            echo_text=echo,
            matched_targets=_distinct(target for _, target, _ in links),
        )


def _format_miles(radius: float) -> str:
    value = f"{radius:g}"
    return f"{value} mile" if value == "1" else f"{value} miles"


def _title(label: str) -> str:
    return label[:1].upper() + label[1:]


def describe(query: SpatialQuery) -> str:
    """Plain-language echo of what a query asks for."""
    if isinstance(query, RadiusQuery):
        if query.target is None:
            return f"All {query.source.label}"
        radius = _format_miles(clamp_radius(query.radius))
        return f"{_title(query.source.label)} within {radius} of {query.target.label}"

    if isinstance(query, IncludeExcludeQuery):
        include = _format_miles(clamp_radius(query.include_radius))
        exclude = _format_miles(clamp_radius(query.exclude_radius))
        return (
            f"{_title(query.primary.label)} within {include} of {query.include.label} "
            f"and more than {exclude} from {query.exclude.label}"
        )

    if isinstance(query, MultiTargetQuery):
        specs = [(t.category, t.radius) for t in query.targets]
    elif isinstance(query, AnyCombinationQuery):
        specs = list(query.targets.items())
    else:
        return NO_QUERY_ECHO

    if not specs:
        return f"All {query.primary.label}"
    clauses = [f"within {_format_miles(clamp_radius(r))} of {c.label}" for c, r in specs]
    return f"{_title(query.primary.label)} " + " and ".join(clauses)


engine = ProximityFilterEngine()


def execute(query: SpatialQuery, dataset: Optional[LocationDataset] = None) -> QueryResult:
    return engine.execute(query, dataset if dataset is not None else default_dataset())
