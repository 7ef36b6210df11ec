"""Test data fixtures for journey tests"""

import json
from datetime import UTC, datetime
from pathlib import Path
from PIL import Image

FALLBACK_TIME = datetime(2024, 12, 31, 23, 0, tzinfo=UTC)

# 2024-06-01T10:00:00Z and 2024-03-15T12:00:00Z
JUNE_FIRST_EPOCH = '1717236000'
MARCH_FIFTEENTH_EPOCH = '1710504000'


class SampleRecords:
    """Centralized metadata records in the shapes extractors produce"""

    @staticmethod
    def decimal_record(lat=48.8566, lon=2.3522, date='2024-06-01T10:00:00Z'):
        """Top-level decimal coordinates, as exifr-style extractors emit"""
        return {'latitude': lat, 'longitude': lon, 'DateTimeOriginal': date}

    @staticmethod
    def nested_decimal_record(lat=40.7128, lon=-74.0060, date='2024:07:04 18:30:00'):
        return {'GPS': {'latitude': lat, 'longitude': lon}, 'DateTime': date}

    @staticmethod
    def dms_record(date='2024:03:15 09:00:00'):
        """Nested DMS triples for central Paris"""
        return {
            'GPS': {
                'GPSLatitude': [48, 51, 24],
                'GPSLatitudeRef': 'N',
                'GPSLongitude': [2, 21, 8],
                'GPSLongitudeRef': 'E',
            },
            'DateTimeOriginal': date,
        }

    @staticmethod
    def no_location_record(date='2024:05:01 12:00:00'):
        return {'Make': 'Apple', 'Model': 'iPhone 15', 'DateTimeOriginal': date}

    @staticmethod
    def takeout_sidecar(lat=37.7749, lon=-122.4194, timestamp=JUNE_FIRST_EPOCH, title='IMG_1234.jpg'):
        return {
            'title': title,
            'photoTakenTime': {'timestamp': timestamp, 'formatted': 'Jun 1, 2024, 10:00:00 AM UTC'},
            'creationTime': {'timestamp': timestamp},
            'geoData': {'latitude': lat, 'longitude': lon, 'altitude': 12.0, 'latitudeSpan': 0.0, 'longitudeSpan': 0.0},
        }

    @classmethod
    def create_photo_dir(cls, photos_dir: Path, sidecars: dict[str, dict | None]) -> list[Path]:
        """Write small JPEGs, each with an optional Takeout sidecar"""
        photos_dir.mkdir(parents=True, exist_ok=True)
        paths = []

        for name, sidecar in sidecars.items():
            photo_path = photos_dir / name
            Image.new('RGB', (32, 24), color=(120, 160, 200)).save(photo_path, format='JPEG')
            if sidecar is not None:
                with open(photos_dir / f"{name}.json", 'w') as f:
                    json.dump(sidecar, f)
            paths.append(photo_path)

        return paths
