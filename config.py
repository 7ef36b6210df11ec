from dateutil import tz
from decouple import Csv, config
from pathlib import Path

# Directory paths
INPUT_DIR = Path(config('INPUT_DIR', default='photos'))
OUTPUT_DIR = Path(config('OUTPUT_DIR', default='results'))

# Temporary directories
TEMP_EXTRACT_DIR = 'temp_photo_extract'

# File names
JOURNEY_FILE = 'journey.json'
JOURNEY_STATS_FILE = 'journey_stats.json'
JOURNEY_SUMMARY_FILE = 'journey_summary.md'
JOURNEY_MAP_FILE = 'journey_map.html'

# Photo discovery
PHOTO_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.heic', '.heif', '.tif', '.tiff', '.webp')
SIDECAR_SUFFIX = '.json'
THUMBNAIL_SIZE = (300, 300)

# Acceptance policy: empty means "the current year"
ACCEPTED_YEARS = config('ACCEPTED_YEARS', default='', cast=Csv(int))
DEFAULT_TIMEZONE = tz.gettz(config('DEFAULT_TIMEZONE', default='UTC')) or tz.UTC

# Geographic constants
EARTH_RADIUS_METERS = 6_371_000
MIN_VALID_LATITUDE = -90.0
MAX_VALID_LATITUDE = 90.0
MIN_VALID_LONGITUDE = -180.0
MAX_VALID_LONGITUDE = 180.0
UNIQUE_LOCATION_PRECISION = 5  # decimal places (~1 m)

# Metadata field priority for capture time, most trusted first
DATE_FIELD_PRIORITY = [
    'DateTimeOriginal',
    'DateTime',
    'CreateDate',
    'DateTimeDigitized',
    'photoTakenTime',
    'creationTime',
]

# EXIF offset tags that qualify a naive date field
DATE_OFFSET_FIELDS = {
    'DateTimeOriginal': 'OffsetTimeOriginal',
    'DateTime': 'OffsetTime',
    'CreateDate': 'OffsetTime',
    'DateTimeDigitized': 'OffsetTimeDigitized',
}

# Nested structures that may carry GPS data, in lookup order
GPS_CONTAINER_KEYS = ['GPS', 'gps', 'GPSInfo', 'geoDataExif', 'geoData']

# Map rendering
MAP_TILES = config('MAP_TILES', default='OpenStreetMap')
MAP_PATH_COLOR = '#007AFF'
MAP_PATH_WEIGHT = 3
MAP_FIT_PADDING = 0.1

# Ingestion store
INGEST_DB_PATH = Path(config('INGEST_DB_PATH', default='data/ingest.json'))
RAW_PHOTOS_TABLE = config('RAW_PHOTOS_TABLE', default='user_photos_raw')
STRUCTURED_PHOTOS_TABLE = config('STRUCTURED_PHOTOS_TABLE', default='user_photos')
