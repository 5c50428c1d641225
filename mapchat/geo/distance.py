"""Great-circle distance in miles."""

from geopy import units
from geopy.distance import great_circle

from mapchat.core.config import settings
from mapchat.models import LocationPoint

# geopy takes the sphere radius in kilometers and reports miles on request.
_EARTH_RADIUS_KM = units.kilometers(miles=settings.EARTH_RADIUS_MILES)


def distance(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """
    Distance in miles between two (longitude, latitude) points on a sphere of
    radius EARTH_RADIUS_MILES.

    Coordinates must be finite degrees with latitudes in [-90, 90]; geopy
    raises ValueError otherwise.
    """
    return great_circle((lat1, lon1), (lat2, lon2), radius=_EARTH_RADIUS_KM).miles


def point_distance(a: LocationPoint, b: LocationPoint) -> float:
    return distance(a.longitude, a.latitude, b.longitude, b.latitude)
