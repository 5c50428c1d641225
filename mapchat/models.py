from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat


class Category(str, Enum):
    PROPERTY = "Property"
    CARRIER = "Carrier"
    CAFE = "Cafe"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS = {
    Category.PROPERTY: "properties",
    Category.CARRIER: "FedEx locations",
    Category.CAFE: "Starbucks locations",
}


class LocationPoint(BaseModel):
    """A named point of one category. Coordinates are (longitude, latitude)."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    coordinates: Tuple[FiniteFloat, FiniteFloat]
    category: Category

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]


# Spatial queries
# Radii are miles. The classifier never emits a non-positive radius; the
# filter engine clamps them for callers that build queries by hand.


class RadiusQuery(BaseModel):
    kind: Literal["radius"] = "radius"
    source: Category
    target: Optional[Category] = None
    radius: float


class IncludeExcludeQuery(BaseModel):
    kind: Literal["include_exclude"] = "include_exclude"
    primary: Category
    include: Category
    include_radius: float
    exclude: Category
    exclude_radius: float


class TargetSpec(BaseModel):
    category: Category
    radius: float


class MultiTargetQuery(BaseModel):
    kind: Literal["multi_target"] = "multi_target"
    primary: Category
    targets: List[TargetSpec]


class AnyCombinationQuery(BaseModel):
    kind: Literal["any_combination"] = "any_combination"
    primary: Category
    # Insertion order is the order categories were mentioned.
    targets: Dict[Category, float]


class NoQuery(BaseModel):
    kind: Literal["none"] = "none"


SpatialQuery = Annotated[
    Union[
        RadiusQuery,
        IncludeExcludeQuery,
        MultiTargetQuery,
        AnyCombinationQuery,
        NoQuery,
    ],
    Field(discriminator="kind"),
]


class ConnectionEdge(BaseModel):
    source: Tuple[float, float]
    target: Tuple[float, float]
    target_category: Category
    distance: float  # miles


class QueryResult(BaseModel):
    locations: List[LocationPoint] = Field(default_factory=list)
    edges: List[ConnectionEdge] = Field(default_factory=list)
    echo_text: str = ""
    # Target locations that justified at least one edge, first-seen order.
    matched_targets: List[LocationPoint] = Field(default_factory=list)
    # Nearest excluding location for candidates rejected by an exclude rule.
    # Not part of the result set.
    diagnostics: List[ConnectionEdge] = Field(default_factory=list)


class ChatTurn(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class MapQueryResponse(BaseModel):
    text: str
    query: SpatialQuery
    result: Optional[QueryResult] = None
    is_spatial: bool
