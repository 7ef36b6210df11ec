import logging
import numbers
import re
from collections.abc import Mapping
from config import DATE_FIELD_PRIORITY, DATE_OFFSET_FIELDS, DEFAULT_TIMEZONE
from datetime import UTC, datetime, timedelta, timezone, tzinfo
from dateutil.parser import parse as parse_date

logger = logging.getLogger(__name__)

EXIF_DATETIME_FORMATS = ('%Y:%m:%d %H:%M:%S.%f', '%Y:%m:%d %H:%M:%S')
EPOCH_PATTERN = re.compile(r'^\d{9,11}$')
OFFSET_PATTERN = re.compile(r'^([+-])(\d{2}):?(\d{2})$')
PARTIAL_DATE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def parse_offset(value) -> tzinfo | None:
    """Parse an EXIF offset tag such as '+02:00'"""
    if isinstance(value, bytes):
        value = value.decode(errors='ignore')
    if not isinstance(value, str):
        return None

    match = OFFSET_PATTERN.match(value.strip(' \x00'))
    if not match:
        return None

    sign, hours, minutes = match.groups()
    offset = timedelta(hours=int(hours), minutes=int(minutes))
    return timezone(-offset if sign == '-' else offset)


def parse_timestamp(value, default_tz: tzinfo = DEFAULT_TIMEZONE) -> datetime | None:
    """
    Parse one metadata date value into a timezone-aware datetime

    Accepts datetime objects, EXIF 'YYYY:MM:DD HH:MM:SS' strings, ISO-8601,
    human readable text like 'Jun 1, 2024 at 10:00 AM', epoch seconds and
    Takeout '{timestamp, formatted}' objects.

    Returns:
        datetime | None: Aware datetime, or None if the value is unusable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Mapping):
        return parse_timestamp(value.get('timestamp'), default_tz) or parse_timestamp(value.get('formatted'), default_tz)

    if isinstance(value, bytes):
        value = value.decode(errors='ignore')

    dt = None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, numbers.Real):
        dt = _from_epoch(value)
    elif isinstance(value, str):
        text = value.strip(' \x00')
        if not text:
            return None
        if EPOCH_PATTERN.match(text):
            dt = _from_epoch(int(text))
        else:
            dt = _parse_text(text)

    if dt is None:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=default_tz)
    return dt


def _from_epoch(value) -> datetime | None:
    try:
        return datetime.fromtimestamp(float(value), tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_text(text: str) -> datetime | None:
    for fmt in EXIF_DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    # EXIF dates with a trailing offset, e.g. '2024:06:01 10:00:00+02:00'
    if re.match(r'^\d{4}:\d{2}:\d{2} ', text):
        text = text.replace(':', '-', 2)

    # dateutil fills missing date parts from the default, so partial dates differ between defaults
    try:
        parsed = [parse_date(text, default=default) for default in PARTIAL_DATE_DEFAULTS]
    except (ValueError, OverflowError, TypeError):
        return None

    if parsed[0] != parsed[1]:
        logger.debug(f"Rejecting incomplete date {text!r}")
        return None
    return parsed[0]


class CaptureTimeResolver:
    """Pick the capture instant for a photo, falling back to file modification time"""

    def __init__(self, field_priority: list[str] | None = None, default_tz: tzinfo = DEFAULT_TIMEZONE):
        self.field_priority = field_priority or DATE_FIELD_PRIORITY
        self.default_tz = default_tz

    def resolve_field(self, record: Mapping) -> tuple[datetime, str] | None:
        """Return the first parseable date field and its name"""
        if not isinstance(record, Mapping):
            return None

        for field_name in self.field_priority:
            raw_value = record.get(field_name)
            if raw_value is None:
                continue

            tz_override = parse_offset(record.get(DATE_OFFSET_FIELDS.get(field_name, '')))
            dt = parse_timestamp(raw_value, tz_override or self.default_tz)
            if dt is None:
                logger.debug(f"Skipping unparseable date field {field_name}={raw_value!r}")
                continue
            return dt, field_name

        return None

    def resolve(self, record, fallback_modified_time: datetime) -> datetime:
        resolved = self.resolve_field(record)
        if resolved:
            return resolved[0]

        if fallback_modified_time.tzinfo is None:
            return fallback_modified_time.replace(tzinfo=self.default_tz)
        return fallback_modified_time
