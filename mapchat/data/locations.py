"""
Location collections for the Dallas map.

The core never reads dataset files. A loading collaborator hands plain
records to ``LocationDataset.from_records``; ``default_dataset`` wraps the
collections shipped with the package.
"""

import logging
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple

from mapchat.models import Category, LocationPoint

logger = logging.getLogger(__name__)


class LocationDataset:
    """Immutable mapping of category to its locations, in load order."""

    def __init__(self, collections: Mapping[Category, Iterable[LocationPoint]]):
        frozen: Dict[Category, Tuple[LocationPoint, ...]] = {}
        for category, points in collections.items():
            frozen[Category(category)] = tuple(points)
        self._collections = MappingProxyType(frozen)

    @classmethod
    def from_records(cls, records: Mapping[str, Iterable[dict]]) -> "LocationDataset":
        """
        Build a dataset from plain dicts keyed by category name.

        Each record needs ``name`` and ``coordinates`` ([lon, lat]); the
        category comes from the key. Raises ValueError on unknown category
        keys and pydantic.ValidationError on malformed rows (missing name,
        non-finite coordinates).
        """
        collections = {}
        for key, rows in records.items():
            category = Category(key)
            collections[category] = [
                LocationPoint.model_validate({**row, "category": category})
                for row in rows
            ]
            logger.debug(f"Loaded {len(collections[category])} {category.value} locations")
        return cls(collections)

    def get(self, category: Category) -> Tuple[LocationPoint, ...]:
        return self._collections.get(category, ())

    @property
    def categories(self) -> Tuple[Category, ...]:
        return tuple(self._collections)

    def __len__(self) -> int:
        return sum(len(points) for points in self._collections.values())


# Built-in collections, coordinates are [longitude, latitude].

PROPERTY_RECORDS = [
    {"name": "Dallas Logistics Hub", "coordinates": [-96.7350, 32.6480], "description": "Master-planned logistics park near I-20 and I-45"},
    {"name": "Southport Logistics Park", "coordinates": [-96.7230, 32.6120], "description": "Cross-dock distribution buildings in Wilmer"},
    {"name": "Fair Park Industrial Center", "coordinates": [-96.7559, 32.7323], "description": "Light industrial warehouse with dock-high doors"},
    {"name": "Design District Warehouse", "coordinates": [-96.8225, 32.7960], "description": "Converted showroom and storage space"},
    {"name": "Trinity Industrial District", "coordinates": [-96.8330, 32.7700], "description": "Multi-tenant industrial buildings along the Trinity"},
    {"name": "Stemmons Freeway Distribution Center", "coordinates": [-96.8650, 32.8260], "description": "Bulk distribution with freeway frontage"},
    {"name": "Brookhollow Business Park", "coordinates": [-96.8450, 32.8100], "description": "Flex office and warehouse campus"},
    {"name": "Northwest Highway Flex Warehouse", "coordinates": [-96.8750, 32.8600], "description": "Small-bay flex industrial"},
    {"name": "Valwood Industrial Park", "coordinates": [-96.9000, 32.9500], "description": "Established industrial park in Farmers Branch"},
    {"name": "Garland Manufacturing Campus", "coordinates": [-96.6400, 32.8950], "description": "Heavy power manufacturing facility"},
    {"name": "Mesquite Distribution Center", "coordinates": [-96.5990, 32.7800], "description": "Regional distribution near I-635"},
    {"name": "Great Southwest Industrial District", "coordinates": [-97.0200, 32.7500], "description": "Large industrial submarket in Grand Prairie"},
    {"name": "Irving Tech Logistics Park", "coordinates": [-96.9800, 32.8600], "description": "Logistics buildings close to DFW Airport"},
    {"name": "Deep Ellum Creative Warehouse", "coordinates": [-96.7800, 32.7840], "description": "Brick warehouse suited to light assembly"},
    {"name": "Richardson Telecom Corridor Facility", "coordinates": [-96.7300, 32.9800], "description": "R&D and light manufacturing building"},
    {"name": "Cedars Industrial Lofts", "coordinates": [-96.7900, 32.7650], "description": "Small-bay industrial south of downtown"},
]

CARRIER_RECORDS = [
    {"name": "FedEx Office Print & Ship Center - Downtown", "coordinates": [-96.8066, 32.7791], "description": "Printing, packing and drop-off"},
    {"name": "FedEx Ship Center - Stemmons", "coordinates": [-96.8600, 32.8200], "description": "Full-service shipping counter"},
    {"name": "FedEx Ground - Lancaster", "coordinates": [-96.7600, 32.5920], "description": "Ground hub serving southern Dallas County"},
    {"name": "FedEx Freight - Grand Prairie", "coordinates": [-97.0000, 32.7400], "description": "LTL freight terminal"},
    {"name": "FedEx Office - Deep Ellum", "coordinates": [-96.7830, 32.7850], "description": "Neighborhood print and ship store"},
    {"name": "FedEx Express - Love Field", "coordinates": [-96.8500, 32.8450], "description": "Express station near the airport"},
    {"name": "FedEx Office - Preston Center", "coordinates": [-96.8040, 32.8650], "description": "Retail shipping and business services"},
    {"name": "FedEx Ship Center - Garland", "coordinates": [-96.6350, 32.9000], "description": "Package drop-off with late pickup"},
    {"name": "FedEx Office - Richardson", "coordinates": [-96.7290, 32.9700], "description": "Business service center"},
    {"name": "FedEx Ground - Mesquite", "coordinates": [-96.6100, 32.7700], "description": "Ground package sorting facility"},
    {"name": "FedEx Office - Irving", "coordinates": [-96.9500, 32.8650], "description": "Print and ship store in Las Colinas"},
    {"name": "FedEx Ship Center - Farmers Branch", "coordinates": [-96.8900, 32.9300], "description": "Shipping counter with freight drop"},
    {"name": "FedEx Express - DFW Airport", "coordinates": [-97.0400, 32.8990], "description": "Express ramp operations"},
    {"name": "FedEx Office - Lakewood", "coordinates": [-96.7500, 32.8140], "description": "Neighborhood print and ship store"},
]

CAFE_RECORDS = [
    {"name": "Starbucks - Downtown Dallas", "coordinates": [-96.7977, 32.7801], "description": "Full-service cafe with outdoor seating"},
    {"name": "Starbucks - Uptown", "coordinates": [-96.8013, 32.7941], "description": "Modern store with mobile ordering"},
    {"name": "Starbucks - Knox Henderson", "coordinates": [-96.7916, 32.8197], "description": "Cozy cafe with drive-thru"},
    {"name": "Starbucks - Deep Ellum", "coordinates": [-96.7843, 32.7853], "description": "Artistic location with local art displays"},
    {"name": "Starbucks - Mockingbird Station", "coordinates": [-96.7725, 32.8373], "description": "Transit-friendly location"},
    {"name": "Starbucks - Park Lane", "coordinates": [-96.7676, 32.8674], "description": "Spacious seating with free WiFi"},
    {"name": "Starbucks - West Village", "coordinates": [-96.8028, 32.8021], "description": "Urban cafe with patio seating"},
    {"name": "Starbucks - Oak Lawn", "coordinates": [-96.8112, 32.8081], "description": "Busy location with meeting spaces"},
    {"name": "Starbucks - Lower Greenville", "coordinates": [-96.7701, 32.8121], "description": "Neighborhood cafe with outdoor tables"},
    {"name": "Starbucks - The Cedars", "coordinates": [-96.7921, 32.7701], "description": "Industrial-style store"},
    {"name": "Starbucks - Bishop Arts", "coordinates": [-96.8291, 32.7477], "description": "Eclectic cafe in arts district"},
    {"name": "Starbucks - Lakewood", "coordinates": [-96.7512, 32.8131], "description": "Community-focused store"},
    {"name": "Starbucks - SMU Campus", "coordinates": [-96.7811, 32.8431], "description": "University location with extended hours"},
    {"name": "Starbucks - North Park Center", "coordinates": [-96.7726, 32.8687], "description": "Mall location with grab-and-go options"},
    {"name": "Starbucks - Casa Linda", "coordinates": [-96.7121, 32.8281], "description": "Relaxed cafe with drive-thru"},
    {"name": "Starbucks - Preston Center", "coordinates": [-96.8037, 32.8657], "description": "Business district location"},
    {"name": "Starbucks - Lovers Lane", "coordinates": [-96.7881, 32.8501], "description": "Neighborhood cafe with regulars"},
    {"name": "Starbucks - Preston & Royal", "coordinates": [-96.8038, 32.8951], "description": "Family-friendly cafe"},
    {"name": "Starbucks - Inwood Village", "coordinates": [-96.8211, 32.8551], "description": "Shopping center location"},
    {"name": "Starbucks - White Rock Lake", "coordinates": [-96.7312, 32.8541], "description": "Scenic view with outdoor seating"},
    {"name": "Starbucks - Skillman & Abrams", "coordinates": [-96.7471, 32.8331], "description": "Drive-thru with digital ordering"},
    {"name": "Starbucks - Galleria Dallas", "coordinates": [-96.8162, 32.9331], "description": "Mall location near ice rink"},
    {"name": "Starbucks - Addison Circle", "coordinates": [-96.8362, 32.9541], "description": "Urban cafe with community tables"},
    {"name": "Starbucks - Valley View", "coordinates": [-96.8362, 32.9411], "description": "Spacious location with meeting areas"},
    {"name": "Starbucks - Beltline & Montfort", "coordinates": [-96.8172, 32.9521], "description": "Convenient location with drive-thru"},
]


@lru_cache(maxsize=1)
def default_dataset() -> LocationDataset:
    return LocationDataset.from_records(
        {
            Category.PROPERTY.value: PROPERTY_RECORDS,
            Category.CARRIER.value: CARRIER_RECORDS,
            Category.CAFE.value: CAFE_RECORDS,
        }
    )
