"""
Serverless-style ingestion handler for photo-location records

Accepts either a raw batch of newline-delimited parallel fields
(Username, Lat, Long, "Date Taken") or a single structured record
(username, lat, long, date_taken) and persists valid rows to the store.
"""

import json
import logging
from config import RAW_PHOTOS_TABLE, STRUCTURED_PHOTOS_TABLE
from core.capture_time import parse_timestamp
from datetime import UTC, datetime
from ingest.store import StorageError, TinyDBPhotoStore
from utils.geo import is_valid_coordinate, to_number

logger = logging.getLogger(__name__)

RAW_BATCH_FIELDS = ('Username', 'Lat', 'Long', 'Date Taken')
STRUCTURED_FIELDS = ('username', 'lat', 'long', 'date_taken')


class IngestionValidationError(ValueError):
    """Request rejected before anything was written"""


def response(status_code: int, payload: dict) -> dict:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(payload),
    }


def split_lines(value: str) -> list[str]:
    return [line.strip() for line in value.strip().splitlines()]


def zip_parallel_fields(lats: str, longs: str, dates: str) -> list[tuple[str, str, str]]:
    """Split three newline-delimited fields and zip them by index, failing on unequal lengths"""
    lat_values = split_lines(lats)
    long_values = split_lines(longs)
    date_values = split_lines(dates)

    if not len(lat_values) == len(long_values) == len(date_values):
        raise IngestionValidationError(
            f"Mismatched field lengths: {len(lat_values)} latitudes, {len(long_values)} longitudes, {len(date_values)} dates"
        )

    return list(zip(lat_values, long_values, date_values))


def build_row(username: str, lat, lon, date_taken) -> dict:
    """Validate one record and shape it for storage; raises IngestionValidationError"""
    lat_value = to_number(lat)
    lon_value = to_number(lon)
    if lat_value is None or lon_value is None:
        raise IngestionValidationError(f"Invalid coordinates: lat={lat!r}, long={lon!r}")
    if not is_valid_coordinate(lat_value, lon_value):
        raise IngestionValidationError(f"Coordinates out of range: lat={lat_value}, long={lon_value}")

    captured_at = parse_timestamp(date_taken)
    if captured_at is None:
        raise IngestionValidationError(f"Invalid date: {date_taken!r}")

    return {
        'username': username,
        'lat': lat_value,
        'long': lon_value,
        'date_taken': str(date_taken),
        'captured_at': captured_at.isoformat(),
        'received_at': datetime.now(UTC).isoformat(),
    }


def require_fields(body: dict, fields: tuple[str, ...]) -> None:
    missing = [field for field in fields if body.get(field) in (None, '')]
    if missing:
        raise IngestionValidationError(f"Missing fields: {', '.join(missing)}")


def is_newline_batch(body: dict) -> bool:
    """Lower-case bodies whose values are newline-delimited lists are batches too"""
    return any(isinstance(body.get(field), str) and '\n' in body[field].strip() for field in STRUCTURED_FIELDS[1:])


def ingest_raw_batch(body: dict, store, fields: tuple[str, ...] = RAW_BATCH_FIELDS) -> dict:
    require_fields(body, fields)

    username, lats, longs, dates = (body[field] for field in fields)
    if not all(isinstance(value, str) for value in (lats, longs, dates)):
        raise IngestionValidationError(f"{', '.join(fields[1:])} must be newline-delimited strings")

    rows = []
    errors = []
    for index, (lat, lon, date_taken) in enumerate(zip_parallel_fields(lats, longs, dates)):
        try:
            rows.append(build_row(username, lat, lon, date_taken))
        except IngestionValidationError as e:
            errors.append({'index': index, 'error': str(e)})

    if not rows:
        return response(
            400, {'success': False, 'error': 'No valid records in batch', 'processed': 0, 'failed': len(errors), 'errors': errors}
        )

    store.insert_many(RAW_PHOTOS_TABLE, rows)
    logger.info(f"Ingested {len(rows)} records for {username} ({len(errors)} failed)")

    return response(
        200,
        {
            'success': True,
            'message': f"Received {len(rows)} records",
            'processed': len(rows),
            'failed': len(errors),
            'errors': errors,
        },
    )


def ingest_structured_record(body: dict, store) -> dict:
    require_fields(body, STRUCTURED_FIELDS)

    row = build_row(body['username'], body['lat'], body['long'], body['date_taken'])
    store.insert_many(STRUCTURED_PHOTOS_TABLE, [row])
    logger.info(f"Ingested record for {body['username']}")

    return response(200, {'success': True, 'message': 'Received!', 'processed': 1, 'failed': 0})


def handler(event: dict, store=None) -> dict:
    """Validate an ingestion request and forward it to the store"""
    if store is not None:
        return handle_request(event, store)

    store = TinyDBPhotoStore()
    try:
        return handle_request(event, store)
    finally:
        store.close()


def handle_request(event: dict, store) -> dict:
    method = event.get('httpMethod')
    if method and method.upper() != 'POST':
        return response(405, {'success': False, 'error': f"Method {method} not allowed"})

    if not event.get('body'):
        return response(400, {'success': False, 'error': 'No body provided'})

    try:
        body = json.loads(event['body'])
    except json.JSONDecodeError as e:
        return response(400, {'success': False, 'error': f"Invalid JSON: {e}"})

    if not isinstance(body, dict):
        return response(400, {'success': False, 'error': 'Body must be a JSON object'})

    try:
        if any(field in body for field in RAW_BATCH_FIELDS):
            return ingest_raw_batch(body, store)
        if is_newline_batch(body):
            return ingest_raw_batch(body, store, STRUCTURED_FIELDS)
        return ingest_structured_record(body, store)
    except IngestionValidationError as e:
        logger.warning(f"Rejected ingestion request: {e}")
        return response(400, {'success': False, 'error': str(e)})
    except StorageError as e:
        logger.error(f"Upload error: {e}")
        return response(500, {'success': False, 'error': str(e)})
