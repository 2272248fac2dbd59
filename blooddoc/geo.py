"""
Geolocation helpers: city lookup and great-circle radius filtering.
"""
import logging
import math
from collections import namedtuple

from .utils import parse_coordinate

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371


class GeoPoint(namedtuple('GeoPoint', ['lng', 'lat'])):
    """A (longitude, latitude) pair, the order GeoJSON uses."""

    __slots__ = ()

    def to_geojson(self):
        return {"type": "Point", "coordinates": [self.lng, self.lat]}

    @classmethod
    def from_geojson(cls, location):
        if not location or not location.get('coordinates'):
            return None
        lng, lat = location['coordinates'][:2]
        return cls(float(lng), float(lat))

    @classmethod
    def parse(cls, lat, lng):
        return cls(parse_coordinate(lng, 'longitude', 180), parse_coordinate(lat, 'latitude', 90))


def haversine_km(a, b):
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = (math.sin(d_lat / 2) ** 2 +
         math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) *
         math.sin(d_lng / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def within_radius(origin, docs, radius_km, field='location'):
    """Documents whose point lies within radius_km of origin, nearest first."""
    matches = []
    for doc in docs:
        point = GeoPoint.from_geojson(doc.get(field))
        if point is None:
            continue
        distance = haversine_km(origin, point)
        if distance <= radius_km:
            matches.append((distance, doc))
    matches.sort(key=lambda pair: pair[0])
    return [doc for _, doc in matches]


class StaticCityGeocoder:
    """Resolves a handful of supported cities to fixed coordinates."""

    CITY_COORDINATES = {
        'chennai': GeoPoint(80.2707, 13.0827),
        'bengaluru': GeoPoint(77.5946, 12.9716),
        'mumbai': GeoPoint(72.8777, 19.0760),
        'delhi': GeoPoint(77.2167, 28.6448),
        'hyderabad': GeoPoint(78.4867, 17.3850),
    }

    def resolve(self, city):
        if not city:
            return None
        point = self.CITY_COORDINATES.get(city.strip().lower())
        if point is None:
            logger.warning("City %r not found in the city table; skipping geolocation.", city)
        return point

    def cities(self):
        return [name.title() for name in self.CITY_COORDINATES]
