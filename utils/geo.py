import math
import numbers
from config import (
    EARTH_RADIUS_METERS,
    MAX_VALID_LATITUDE,
    MAX_VALID_LONGITUDE,
    MIN_VALID_LATITUDE,
    MIN_VALID_LONGITUDE,
)
from geopy.point import Point

LATITUDE_REFS = {'N', 'S'}
LONGITUDE_REFS = {'E', 'W'}


def is_valid_coordinate(lat: float, lon: float) -> bool:
    """Validate coordinate ranges"""
    return MIN_VALID_LATITUDE <= lat <= MAX_VALID_LATITUDE and MIN_VALID_LONGITUDE <= lon <= MAX_VALID_LONGITUDE


def to_number(value) -> float | None:
    """Coerce an EXIF-ish numeric value (int, float, rational, numeric string) to a finite float"""
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, numbers.Real):
        try:
            number = float(value)
        except (ValueError, ZeroDivisionError, OverflowError):
            return None
    elif isinstance(value, (str, bytes)):
        text = value.decode(errors='ignore') if isinstance(value, bytes) else value
        try:
            number = float(text.strip())
        except ValueError:
            return None
    else:
        return None

    return number if math.isfinite(number) else None


def normalize_ref(ref) -> str | None:
    """Normalize a hemisphere reference ('N', b'S\\x00', ' e') to a single upper-case letter"""
    if ref is None:
        return None
    if isinstance(ref, bytes):
        ref = ref.decode(errors='ignore')
    if not isinstance(ref, str):
        return ''
    return ref.strip(' \x00').upper()


def dms_to_decimal(dms, ref=None, allowed_refs: set[str] | None = None) -> float | None:
    """
    Convert a degrees/minutes/seconds triple plus hemisphere reference to decimal degrees

    Args:
        dms: Sequence of exactly three non-negative numeric components (EXIF rationals are unsigned)
        ref: Hemisphere reference letter; missing means N/E
        allowed_refs: Reference letters valid for this axis

    Returns:
        float | None: Decimal degrees, negative for S/W, or None if malformed
    """
    if isinstance(dms, (str, bytes)) or not hasattr(dms, '__len__') or len(dms) != 3:
        return None

    components = [to_number(component) for component in dms]
    if any(component is None or component < 0 for component in components):
        return None

    direction = normalize_ref(ref) or None
    if direction is not None and allowed_refs is not None and direction not in allowed_refs:
        return None

    try:
        return Point.parse_degrees(*components, direction=direction)
    except ValueError:
        return None


def haversine_meters(lat1: float, lon1: float, lat2: float, lon2: float, radius: float = EARTH_RADIUS_METERS) -> float:
    """Great-circle distance between two coordinates using the haversine formula"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    a = min(a, 1.0)  # float drift near antipodes
    return 2 * radius * math.atan2(math.sqrt(a), math.sqrt(1 - a))
