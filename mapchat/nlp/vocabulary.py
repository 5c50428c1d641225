"""Fixed word lists and patterns for recognizing categories, cues and radii."""

import re
from typing import List, NamedTuple, Optional

from mapchat.models import Category

CATEGORY_PATTERNS = {
    Category.PROPERTY: re.compile(
        r"\b(?:propert(?:y|ies)|warehous(?:e|es|ing)|industrial|logistics"
        r"|distribution\s+cent(?:er|re)s?|manufacturing"
        r"|business\s+parks?|technology\s+parks?)\b",
        re.IGNORECASE,
    ),
    Category.CARRIER: re.compile(
        r"\b(?:fed\s*ex|federal\s+express|shipping|express)\b",
        re.IGNORECASE,
    ),
    Category.CAFE: re.compile(
        r"\b(?:starbucks|coffee|caf(?:e|é)s?)\b",
        re.IGNORECASE,
    ),
}

# Radius phrase, e.g. "2 miles", "1.5 mi", "3mile"
RADIUS_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:miles?|mi)\b", re.IGNORECASE)

# A radius followed by one of these reads forward: "2 miles of fedex",
# "4 miles away from starbucks".
FORWARD_BINDING_PATTERN = re.compile(
    r"\s*(?:away\s+|out\s+)?(?:of|from|to)\b", re.IGNORECASE
)

# Gap text that joins two mentions sharing one radius: "fedex and starbucks".
CONJUNCTION_GAP_PATTERN = re.compile(
    r"\s*(?:,|&|and|or|plus)?\s*(?:both\s+)?(?:a\s+|an\s+|the\s+)?",
    re.IGNORECASE,
)

FAR_CUE_PATTERN = re.compile(
    r"\b(?:(?:away|far)\s+from|outside(?:\s+of)?|not\s+(?:near|within|close\s+to)"
    r"|beyond|at\s+least(?:\s+\d+(?:\.\d+)?\s*(?:miles?|mi))?(?:\s+away)?\s+from)\b",
    re.IGNORECASE,
)

NEAR_CUE_PATTERN = re.compile(
    r"\b(?:near(?:by)?|within|close\s+to|next\s+to|around|closest|nearest)\b",
    re.IGNORECASE,
)

ACTION_VERB_PATTERN = re.compile(
    r"\b(?:show|find|locate|display|get|list|search|where)\b", re.IGNORECASE
)

FOLLOW_UP_PATTERN = re.compile(
    r"^\s*(?:what\s+about|how\s+about|and|same\s+for|now|what\s+if)\b",
    re.IGNORECASE,
)

LOCATION_AREAS = [
    "Dallas",
    "North Dallas",
    "South Dallas",
    "Irving",
    "Plano",
    "Richardson",
    "Addison",
    "Garland",
    "Mesquite",
    "Carrollton",
    "Lewisville",
    "Arlington",
    "Grand Prairie",
    "Farmers Branch",
    "Grapevine",
    "Frisco",
    "McKinney",
    "Rockwall",
    "Denton",
]


class Mention(NamedTuple):
    category: Category
    start: int
    end: int


def find_mentions(text: str) -> List[Mention]:
    """All category mentions in text order. Overlaps keep the longer match."""
    found = []
    for category, pattern in CATEGORY_PATTERNS.items():
        for match in pattern.finditer(text):
            found.append(Mention(category, match.start(), match.end()))
    found.sort(key=lambda m: (m.start, -(m.end - m.start)))

    mentions: List[Mention] = []
    for mention in found:
        if mentions and mention.start < mentions[-1].end:
            continue
        mentions.append(mention)
    return mentions


def mentioned_categories(text: str) -> List[Category]:
    """Distinct categories in order of first mention."""
    seen: List[Category] = []
    for mention in find_mentions(text):
        if mention.category not in seen:
            seen.append(mention.category)
    return seen


def first_radius(text: str) -> Optional[float]:
    match = RADIUS_PATTERN.search(text)
    return float(match.group(1)) if match else None


def find_area(text: str) -> Optional[str]:
    """Longest area name contained in text ("North Dallas" over "Dallas")."""
    lowered = text.lower()
    hits = [area for area in LOCATION_AREAS if area.lower() in lowered]
    return max(hits, key=len) if hits else None
