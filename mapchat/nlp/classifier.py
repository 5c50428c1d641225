"""
Rule-based classification of map questions into spatial queries.

Rules run in a fixed priority order and the first one that matches wins:

1. include/exclude  ("near fedex but away from starbucks")
2. multi-target     ("properties within 2 mi of fedex and 3 mi of starbucks")
3. any-combination  (primary taken from "show <category>", the rest targets)
4. simple radius    (earlier category is the source, later one the target)
5. no query

Follow-ups ("what about 8 miles?") are resolved against the conversation
history when one is supplied.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from mapchat.core.config import settings
from mapchat.models import (
    AnyCombinationQuery,
    Category,
    ChatTurn,
    IncludeExcludeQuery,
    MultiTargetQuery,
    NoQuery,
    RadiusQuery,
    SpatialQuery,
    TargetSpec,
)
from mapchat.nlp.vocabulary import (
    ACTION_VERB_PATTERN,
    CONJUNCTION_GAP_PATTERN,
    FAR_CUE_PATTERN,
    FOLLOW_UP_PATTERN,
    FORWARD_BINDING_PATTERN,
    NEAR_CUE_PATTERN,
    RADIUS_PATTERN,
    Mention,
    find_mentions,
    first_radius,
    mentioned_categories,
)

logger = logging.getLogger(__name__)

Span = Tuple[int, int]
HistoryItem = Union[ChatTurn, dict]


class TextScan(NamedTuple):
    """Positions of everything the rules look at in one message."""

    text: str
    mentions: List[Mention]
    radii: List[Optional[float]]  # parallel to mentions
    near_cues: List[Span]
    far_cues: List[Span]
    radius_spans: List[Span]
    verb_ends: List[int]

    @property
    def categories(self) -> List[Category]:
        seen: List[Category] = []
        for mention in self.mentions:
            if mention.category not in seen:
                seen.append(mention.category)
        return seen

    def first_mention(self, category: Category) -> Optional[Mention]:
        for mention in self.mentions:
            if mention.category == category:
                return mention
        return None

    def category_radius(self, category: Category) -> Optional[float]:
        for mention, radius in zip(self.mentions, self.radii):
            if mention.category == category and radius is not None:
                return radius
        return None

    def mention_radius(self, mention: Mention) -> Optional[float]:
        return self.radii[self.mentions.index(mention)]

    def mention_after(self, position: int, exclude: Iterable[Category] = ()) -> Optional[Mention]:
        excluded = set(exclude)
        for mention in self.mentions:
            if mention.start >= position and mention.category not in excluded:
                return mention
        return None

    @property
    def has_proximity(self) -> bool:
        return bool(self.near_cues or self.radius_spans)


def _clamp(radius: float) -> float:
    return radius if radius > 0 else settings.MIN_RADIUS_MILES


def _overlaps(span: Span, others: List[Span]) -> bool:
    return any(span[0] < end and start < span[1] for start, end in others)


def _bind_radii(text: str, mentions: List[Mention]) -> Tuple[List[Optional[float]], List[Span]]:
    """
    Attach each radius phrase to one mention.

    "2 miles of fedex" binds forward to fedex, "fedex within 3 miles" binds
    back to fedex. A mention left without a radius shares its neighbour's
    when only a conjunction separates them ("2 miles of fedex and starbucks").
    """
    radii: List[Optional[float]] = [None] * len(mentions)
    spans: List[Span] = []

    for match in RADIUS_PATTERN.finditer(text):
        spans.append((match.start(), match.end()))
        if not mentions:
            continue
        value = _clamp(float(match.group(1)))

        previous = None
        following = None
        for index, mention in enumerate(mentions):
            if mention.end <= match.start():
                previous = index
            elif mention.start >= match.end() and following is None:
                following = index

        binds_forward = FORWARD_BINDING_PATTERN.match(text, match.end()) is not None
        if binds_forward and following is not None:
            owner = following
        elif previous is not None:
            owner = previous
        else:
            owner = following

        if owner is not None and radii[owner] is None:
            radii[owner] = value

    def joined(left: int, right: int) -> bool:
        gap = text[mentions[left].end : mentions[right].start]
        return CONJUNCTION_GAP_PATTERN.fullmatch(gap) is not None

    for index in range(1, len(mentions)):
        if radii[index] is None and radii[index - 1] is not None and joined(index - 1, index):
            radii[index] = radii[index - 1]
    for index in range(len(mentions) - 2, -1, -1):
        if radii[index] is None and radii[index + 1] is not None and joined(index, index + 1):
            radii[index] = radii[index + 1]

    return radii, spans


def scan_text(text: str) -> TextScan:
    mentions = find_mentions(text)
    radii, radius_spans = _bind_radii(text, mentions)

    far_cues = [(m.start(), m.end()) for m in FAR_CUE_PATTERN.finditer(text)]
    near_cues = [
        (m.start(), m.end())
        for m in NEAR_CUE_PATTERN.finditer(text)
        if not _overlaps((m.start(), m.end()), far_cues)
    ]
    verb_ends = [m.end() for m in ACTION_VERB_PATTERN.finditer(text)]

    return TextScan(
        text=text,
        mentions=mentions,
        radii=radii,
        near_cues=near_cues,
        far_cues=far_cues,
        radius_spans=radius_spans,
        verb_ends=verb_ends,
    )


class QueryClassifier:
    def __init__(self, default_radius: Optional[float] = None):
        self.default_radius = (
            default_radius if default_radius is not None else settings.DEFAULT_RADIUS_MILES
        )

    def classify(self, text: str, history: Optional[List[HistoryItem]] = None) -> SpatialQuery:
        query = self._classify_single(text)

        if history and FOLLOW_UP_PATTERN.match(text) and self._is_incomplete(query):
            previous = self._previous_query(text, history)
            if previous is not None:
                resolved = self._apply_follow_up(previous, text)
                logger.debug(f"Resolved follow-up {text!r} against {previous.kind}: {resolved}")
                return resolved

        return query

    # ── Single turn ───────────────────────────────────────────────

    def _classify_single(self, text: str) -> SpatialQuery:
        if not text or not text.strip():
            return NoQuery()

        scan = scan_text(text.lower())
        if not scan.mentions:
            return NoQuery()

        rules = (
            ("include_exclude", self._match_include_exclude),
            ("multi_target", self._match_multi_target),
            ("any_combination", self._match_any_combination),
            ("radius", self._match_radius),
        )
        for name, rule in rules:
            query = rule(scan)
            if query is not None:
                logger.debug(f"Rule {name} matched {text!r}")
                return query

        logger.debug(f"No spatial intent in {text!r}")
        return NoQuery()

    def _match_include_exclude(self, scan: TextScan) -> Optional[IncludeExcludeQuery]:
        for far_start, far_end in scan.far_cues:
            exclude = scan.mention_after(far_end)
            if exclude is None:
                continue

            for near_start, near_end in scan.near_cues:
                include = scan.mention_after(near_end, exclude=[exclude.category])
                if include is None:
                    continue

                primary = self._remaining_category(scan, {include.category, exclude.category})
                include_radius = scan.mention_radius(include)
                exclude_radius = scan.mention_radius(exclude)
                return IncludeExcludeQuery(
                    primary=primary,
                    include=include.category,
                    include_radius=include_radius or self.default_radius,
                    exclude=exclude.category,
                    exclude_radius=exclude_radius or self.default_radius,
                )
        return None

    def _match_multi_target(self, scan: TextScan) -> Optional[MultiTargetQuery]:
        if self._blocked_by_far_cue(scan):
            return None
        categories = scan.categories
        if Category.PROPERTY not in categories:
            return None

        anchored = self._anchored_category(scan)
        primary_is_property = anchored == Category.PROPERTY or (
            anchored is None and categories[0] == Category.PROPERTY
        )
        others = [c for c in categories if c != Category.PROPERTY]
        if not primary_is_property or len(others) < 2:
            return None

        return MultiTargetQuery(
            primary=Category.PROPERTY,
            targets=[
                TargetSpec(category=c, radius=scan.category_radius(c) or self.default_radius)
                for c in others
            ],
        )

    def _match_any_combination(self, scan: TextScan) -> Optional[AnyCombinationQuery]:
        if self._blocked_by_far_cue(scan):
            return None
        categories = scan.categories
        if len(categories) < 2 or not scan.has_proximity:
            return None
        if self._is_clean_pair(scan):
            return None

        primary = self._anchored_category(scan)
        if primary is None:
            primary = Category.PROPERTY if Category.PROPERTY in categories else categories[0]

        targets: Dict[Category, float] = {}
        for category in categories:
            if category != primary:
                targets[category] = scan.category_radius(category) or self.default_radius
        return AnyCombinationQuery(primary=primary, targets=targets)

    def _match_radius(self, scan: TextScan) -> Optional[RadiusQuery]:
        if self._blocked_by_far_cue(scan):
            return None
        if not (scan.has_proximity or scan.verb_ends):
            return None

        categories = scan.categories
        source = categories[0]
        target = categories[1] if len(categories) > 1 else None

        radius = None
        if target is not None:
            radius = scan.category_radius(target)
        if radius is None:
            radius = scan.category_radius(source)
        if radius is None:
            radius = first_radius(scan.text)
        return RadiusQuery(
            source=source,
            target=target,
            radius=_clamp(radius) if radius is not None else self.default_radius,
        )

    # ── Helpers ───────────────────────────────────────────────────

    @staticmethod
    def _remaining_category(scan: TextScan, used: set) -> Category:
        for category in scan.categories:
            if category not in used:
                return category
        return next(c for c in Category if c not in used)

    @staticmethod
    def _anchored_category(scan: TextScan) -> Optional[Category]:
        """Category named right after an action verb: "show properties ..."."""
        for verb_end in scan.verb_ends:
            mention = scan.mention_after(verb_end)
            if mention is not None:
                return mention.category
        return None

    @staticmethod
    def _is_clean_pair(scan: TextScan) -> bool:
        """Two categories with the proximity wording between them."""
        categories = scan.categories
        if len(categories) != 2:
            return False
        first = scan.first_mention(categories[0])
        second = scan.first_mention(categories[1])
        markers = scan.near_cues + scan.radius_spans
        return any(first.end <= start and end <= second.start for start, end in markers)

    @staticmethod
    def _blocked_by_far_cue(scan: TextScan) -> bool:
        """A far cue pointing at a category that no include rule consumed."""
        return any(scan.mention_after(end) is not None for _, end in scan.far_cues)

    @staticmethod
    def _is_incomplete(query: SpatialQuery) -> bool:
        if isinstance(query, NoQuery):
            return True
        return isinstance(query, RadiusQuery) and query.target is None

    # ── Follow-ups ────────────────────────────────────────────────

    def _previous_query(self, text: str, history: List[HistoryItem]) -> Optional[SpatialQuery]:
        current = text.strip().lower()
        for item in reversed(history):
            turn = item if isinstance(item, ChatTurn) else ChatTurn.model_validate(item)
            if turn.role == "system" or turn.content.strip().lower() == current:
                continue
            query = self._classify_single(turn.content)
            if not isinstance(query, NoQuery):
                return query
        return None

    def _apply_follow_up(self, previous: SpatialQuery, text: str) -> SpatialQuery:
        radius = first_radius(text)
        if radius is not None:
            radius = _clamp(radius)
        new_categories = mentioned_categories(text)

        if isinstance(previous, RadiusQuery):
            target = next((c for c in new_categories if c != previous.source), previous.target)
            return previous.model_copy(
                update={"target": target, "radius": radius or previous.radius}
            )

        if isinstance(previous, IncludeExcludeQuery):
            include = next(
                (c for c in new_categories if c not in (previous.primary, previous.exclude)),
                previous.include,
            )
            return previous.model_copy(
                update={
                    "include": include,
                    "include_radius": radius or previous.include_radius,
                    "exclude_radius": radius or previous.exclude_radius,
                }
            )

        if isinstance(previous, MultiTargetQuery):
            targets = [
                TargetSpec(category=t.category, radius=radius or t.radius)
                for t in previous.targets
            ]
            known = {t.category for t in targets} | {previous.primary}
            for category in new_categories:
                if category not in known:
                    targets.append(TargetSpec(category=category, radius=radius or self.default_radius))
                    known.add(category)
            return previous.model_copy(update={"targets": targets})

        if isinstance(previous, AnyCombinationQuery):
            targets = {c: radius or r for c, r in previous.targets.items()}
            for category in new_categories:
                if category != previous.primary and category not in targets:
                    targets[category] = radius or self.default_radius
            return previous.model_copy(update={"targets": targets})

        return previous


classifier = QueryClassifier()


def classify(text: str, history: Optional[List[HistoryItem]] = None) -> SpatialQuery:
    return classifier.classify(text, history)
