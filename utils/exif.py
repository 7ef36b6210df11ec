import base64
import json
import logging
from config import PHOTO_EXTENSIONS, SIDECAR_SUFFIX, THUMBNAIL_SIZE
from datetime import UTC, datetime
from io import BytesIO
from pathlib import Path
from PIL import ExifTags, Image
from pillow_heif import register_heif_opener

logger = logging.getLogger(__name__)

register_heif_opener()


def find_photo_files(photos_dir: Path) -> list[Path]:
    """Image files in a directory tree, sorted by path for a stable submission order"""
    return sorted(path for path in photos_dir.rglob('*') if path.is_file() and path.suffix.lower() in PHOTO_EXTENSIONS)


def file_modified_time(path: Path) -> datetime:
    """Last-modified time of a file as an aware UTC datetime"""
    return datetime.fromtimestamp(Path(path).stat().st_mtime, tz=UTC)


def sidecar_path(photo_path: Path) -> Path:
    """Google Takeout sidecar location, e.g. IMG_1234.jpg -> IMG_1234.jpg.json"""
    return photo_path.with_name(photo_path.name + SIDECAR_SUFFIX)


def exif_to_record(exif) -> dict:
    """
    Flatten a Pillow Exif object into a metadata record

    Base IFD and Exif IFD tags are keyed by their names at the top level;
    the GPS IFD becomes a nested 'GPS' mapping keyed by GPS tag names.
    """
    record = {ExifTags.TAGS.get(tag_id, tag_id): value for tag_id, value in exif.items()}

    exif_ifd = exif.get_ifd(ExifTags.IFD.Exif)
    record.update({ExifTags.TAGS.get(tag_id, tag_id): value for tag_id, value in exif_ifd.items()})

    gps_ifd = exif.get_ifd(ExifTags.IFD.GPSInfo)
    if gps_ifd:
        record['GPS'] = {ExifTags.GPSTAGS.get(tag_id, tag_id): value for tag_id, value in gps_ifd.items()}

    record.pop('GPSInfo', None)
    return record


class TakeoutSidecarReader:
    """Read Google Takeout photo sidecar JSON into a metadata record"""

    def read(self, json_file: Path) -> dict:
        with open(json_file) as f:
            metadata = json.load(f)

        record = {}

        for key in ('photoTakenTime', 'creationTime'):
            if isinstance(metadata.get(key), dict):
                record[key] = metadata[key]

        # Takeout writes 0.0/0.0 when a photo has no location
        for key in ('geoDataExif', 'geoData'):
            geo_data = metadata.get(key)
            if not isinstance(geo_data, dict):
                continue
            if geo_data.get('latitude') in (None, 0, 0.0) and geo_data.get('longitude') in (None, 0, 0.0):
                continue
            record[key] = {'latitude': geo_data.get('latitude'), 'longitude': geo_data.get('longitude')}

        if metadata.get('title'):
            record['title'] = metadata['title']

        return record


class PhotoMetadataExtractor:
    """Extract a metadata record from a photo file

    Embedded EXIF is read with Pillow. A Takeout sidecar next to the photo
    fills in any keys the embedded metadata does not carry.
    """

    def __init__(self, use_sidecars: bool = True):
        self.use_sidecars = use_sidecars
        self.sidecar_reader = TakeoutSidecarReader()

    def extract(self, photo_path: Path) -> dict:
        photo_path = Path(photo_path)

        with Image.open(photo_path) as img:
            record = exif_to_record(img.getexif())

        if self.use_sidecars:
            companion = sidecar_path(photo_path)
            if companion.exists():
                try:
                    for key, value in self.sidecar_reader.read(companion).items():
                        record.setdefault(key, value)
                except (json.JSONDecodeError, OSError) as e:
                    logger.warning(f"Could not read sidecar {companion}: {e}")

        return record


def encode_thumbnail(photo_path: Path, size: tuple[int, int] = THUMBNAIL_SIZE) -> str | None:
    """Base64 JPEG thumbnail as a data URI, or None if the image cannot be read"""
    try:
        with Image.open(photo_path) as img:
            img.thumbnail(size)
            buffer = BytesIO()
            img.convert('RGB').save(buffer, format='JPEG')
    except (OSError, ValueError) as e:
        logger.warning(f"Could not build thumbnail for {photo_path}: {e}")
        return None

    return f"data:image/jpeg;base64,{base64.b64encode(buffer.getvalue()).decode()}"
