import logging
from collections.abc import Mapping
from config import GPS_CONTAINER_KEYS
from core.models import GeoPoint
from utils.geo import LATITUDE_REFS, LONGITUDE_REFS, dms_to_decimal, is_valid_coordinate, to_number

logger = logging.getLogger(__name__)


def _gps_containers(record: Mapping) -> list[Mapping]:
    """Nested GPS structures present in a record, in lookup order"""
    return [record[key] for key in GPS_CONTAINER_KEYS if isinstance(record.get(key), Mapping)]


def _decimal_pair(data: Mapping) -> tuple[float, float] | None:
    lat = to_number(data.get('latitude'))
    lon = to_number(data.get('longitude'))
    if lat is None or lon is None:
        return None
    return lat, lon


def _dms_pair(data: Mapping) -> tuple[float, float] | None:
    if 'GPSLatitude' not in data or 'GPSLongitude' not in data:
        return None

    lat = dms_to_decimal(data['GPSLatitude'], data.get('GPSLatitudeRef'), LATITUDE_REFS)
    lon = dms_to_decimal(data['GPSLongitude'], data.get('GPSLongitudeRef'), LONGITUDE_REFS)
    if lat is None or lon is None:
        return None
    return lat, lon


class CoordinateStrategy:
    """One way of reading a coordinate pair out of a metadata record"""

    name = 'base'

    def candidates(self, record: Mapping) -> list[tuple[float, float]]:
        raise NotImplementedError


class TopLevelDecimalStrategy(CoordinateStrategy):
    name = 'decimal'

    def candidates(self, record: Mapping) -> list[tuple[float, float]]:
        pair = _decimal_pair(record)
        return [pair] if pair else []


class NestedDecimalStrategy(CoordinateStrategy):
    name = 'nested_decimal'

    def candidates(self, record: Mapping) -> list[tuple[float, float]]:
        return [pair for pair in map(_decimal_pair, _gps_containers(record)) if pair]


class NestedDmsStrategy(CoordinateStrategy):
    name = 'nested_dms'

    def candidates(self, record: Mapping) -> list[tuple[float, float]]:
        return [pair for pair in map(_dms_pair, _gps_containers(record)) if pair]


class TopLevelDmsStrategy(CoordinateStrategy):
    name = 'dms'

    def candidates(self, record: Mapping) -> list[tuple[float, float]]:
        pair = _dms_pair(record)
        return [pair] if pair else []


DEFAULT_STRATEGIES = (
    TopLevelDecimalStrategy(),
    NestedDecimalStrategy(),
    NestedDmsStrategy(),
    TopLevelDmsStrategy(),
)


class CoordinateResolver:
    """Resolve a validated GeoPoint from heterogeneous photo metadata

    Strategies are tried in priority order; the first one producing an in-range
    coordinate wins. Out-of-range values are discarded, never clamped.
    """

    def __init__(self, strategies=DEFAULT_STRATEGIES):
        self.strategies = list(strategies)

    def resolve_with_method(self, record) -> tuple[GeoPoint, str] | None:
        if not isinstance(record, Mapping):
            return None

        for strategy in self.strategies:
            for lat, lon in strategy.candidates(record):
                if is_valid_coordinate(lat, lon):
                    return GeoPoint(latitude=lat, longitude=lon), strategy.name
                logger.debug(f"Discarding out-of-range coordinates from {strategy.name}: lat={lat}, lon={lon}")

        return None

    def resolve(self, record) -> GeoPoint | None:
        resolved = self.resolve_with_method(record)
        return resolved[0] if resolved else None
