"""
Template-based follow-up questions for the chat panel.

Every suggestion is phrased so that the classifier turns it back into a
spatial query. Randomness comes from an injectable ``random.Random`` so that
tests can seed it.
"""

import logging
import random
from typing import Callable, List, Optional

from mapchat.core.config import settings
from mapchat.models import Category, ChatTurn
from mapchat.nlp.vocabulary import (
    LOCATION_AREAS,
    find_area,
    first_radius,
    mentioned_categories,
)

logger = logging.getLogger(__name__)

PROPERTY_TYPES = [
    "logistics facilities",
    "warehouse complexes",
    "manufacturing facilities",
    "distribution centers",
    "industrial districts",
    "technology parks",
    "logistics hubs",
    "business parks",
    "commercial warehousing",
    "industrial properties",
]

CARRIER_SERVICE_TYPES = [
    "Ship Centers",
    "Office locations",
    "Ground facilities",
    "Express shipping centers",
    "Freight terminals",
    "Business service centers",
    "Package sorting facilities",
    "Package delivery hubs",
]

# Phrases naming one non-property category inside a follow-up question.
CATEGORY_PHRASES = {
    Category.CARRIER: "FedEx Ground facilities",
    Category.CAFE: "Starbucks cafes",
}

GENERIC_QUESTION = "What's the closest FedEx location to Dallas Logistics Hub?"


class SuggestionGenerator:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    def suggest(self, history: Optional[List] = None, count: Optional[int] = None) -> List[str]:
        """
        Up to ``count`` distinct questions: follow-ups derived from recent
        history first, then template samples, then the generic question.
        """
        count = count if count is not None else settings.SUGGESTION_COUNT
        if count <= 0:
            return []
        turns = [t if isinstance(t, ChatTurn) else ChatTurn.model_validate(t) for t in history or []]

        suggestions: List[str] = []

        def offer(question: Optional[str]) -> None:
            if question and question not in suggestions:
                suggestions.append(question)

        if len(turns) > 2:
            offer(self.follow_up(turns))
            offer(self.follow_up(list(reversed(turns))))

        templates = self.templates
        attempts = 0
        # Reserve the last slot for the generic question.
        while len(suggestions) < count - 1 and attempts < count * 5:
            attempts += 1
            offer(self.rng.choice(templates)())

        offer(GENERIC_QUESTION)
        logger.debug(f"Generated {len(suggestions)} suggestions from {len(turns)} turns")
        return suggestions[:count]

    @property
    def templates(self) -> List[Callable[[], str]]:
        return [
            self.property_near_carrier,
            self.carrier_near_property,
            self.property_near_cafe,
            self.include_exclude,
            self.multi_target,
        ]

    # ── Templates ─────────────────────────────────────────────────

    def _area(self) -> str:
        return self.rng.choice(LOCATION_AREAS)

    def _radius(self) -> int:
        return self.rng.randint(1, settings.SUGGESTION_MAX_TEMPLATE_RADIUS)

    def property_near_carrier(self) -> str:
        property_type = self.rng.choice(PROPERTY_TYPES)
        return (
            f"Can you show me {property_type} within {self._radius()} miles "
            f"of FedEx locations in the {self._area()} area?"
        )

    def carrier_near_property(self) -> str:
        service = self.rng.choice(CARRIER_SERVICE_TYPES)
        return (
            f"Which FedEx {service} are within {self._radius()} miles "
            f"of industrial properties in {self._area()}?"
        )

    def property_near_cafe(self) -> str:
        property_type = self.rng.choice(PROPERTY_TYPES)
        return f"Which {property_type} are within {self._radius()} miles of a Starbucks?"

    def include_exclude(self) -> str:
        near = self._radius()
        far = self._radius()
        return (
            f"Show properties within {near} miles of FedEx and "
            f"{far} miles away from Starbucks"
        )

    def multi_target(self) -> str:
        return (
            f"Find properties within {self._radius()} miles of FedEx "
            f"and {self._radius()} miles of Starbucks"
        )

    # ── Follow-ups ────────────────────────────────────────────────

    def follow_up(self, turns: List[ChatTurn]) -> str:
        """Question biased by the area, radius and categories of recent turns."""
        recent = turns[-settings.SUGGESTION_HISTORY_WINDOW :]

        area = None
        radius = None
        categories: List[Category] = []
        for turn in recent:
            content = turn.content
            area = find_area(content) or area
            mentioned_radius = first_radius(content)
            if mentioned_radius is not None:
                radius = int(mentioned_radius)
            for category in mentioned_categories(content):
                if category not in categories:
                    categories.append(category)

        non_property = [c for c in categories if c != Category.PROPERTY]

        if area and non_property:
            # Switch to the other non-property category in the same area.
            last = non_property[-1]
            other = Category.CAFE if last == Category.CARRIER else Category.CARRIER
            new_radius = (
                min(radius + settings.SUGGESTION_RADIUS_STEP, settings.SUGGESTION_RADIUS_CAP)
                if radius
                else 3
            )
            return (
                f"What about distribution centers within {new_radius} miles "
                f"of {CATEGORY_PHRASES[other]} in {area}?"
            )

        if area:
            return f"Are there any FedEx Express shipping centers near properties in the {area} area?"

        if Category.CARRIER in categories and Category.PROPERTY in categories:
            new_radius = min(radius + 1, settings.SUGGESTION_COMPARE_CAP) if radius else 2
            return (
                f"Can you compare with industrial properties within {new_radius} miles "
                f"of FedEx in {self._area()}?"
            )

        if self.rng.random() > 0.5:
            return self.property_near_carrier()
        return self.carrier_near_property()


suggestion_generator = SuggestionGenerator()


def suggest(history: Optional[List] = None, count: Optional[int] = None) -> List[str]:
    return suggestion_generator.suggest(history, count)
