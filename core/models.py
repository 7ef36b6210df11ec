from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class GeoPoint:
    """A validated latitude/longitude pair in decimal degrees"""

    latitude: float
    longitude: float

    def as_tuple(self) -> tuple[float, float]:
        return self.latitude, self.longitude

    def to_dict(self) -> dict:
        return {'latitude': self.latitude, 'longitude': self.longitude}


@dataclass(frozen=True)
class JourneyPoint:
    """One accepted photo location on the journey"""

    point: GeoPoint
    captured_at: datetime
    source_ref: Any = None

    def to_dict(self) -> dict:
        return {
            **self.point.to_dict(),
            'captured_at': self.captured_at.isoformat(),
            'source': str(self.source_ref) if self.source_ref is not None else None,
        }


@dataclass(frozen=True)
class Journey:
    """Chronologically ordered path of accepted photo locations"""

    points: tuple[JourneyPoint, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, index):
        return self.points[index]

    @property
    def path(self) -> list[GeoPoint]:
        return [journey_point.point for journey_point in self.points]

    def to_dict(self) -> dict:
        return {'total_points': len(self.points), 'points': [p.to_dict() for p in self.points]}


class SkipReason(str, Enum):
    NO_LOCATION = 'no_location'
    OUTSIDE_ACCEPTED_YEARS = 'outside_accepted_years'
    EXTRACTION_FAILED = 'extraction_failed'


@dataclass(frozen=True)
class SkippedItem:
    source_ref: Any
    reason: SkipReason
    detail: str = ''


@dataclass
class BatchOutcome:
    """Result of assembling one upload batch"""

    journey: Journey = field(default_factory=Journey)
    total: int = 0
    skipped: list[SkippedItem] = field(default_factory=list)
    cancelled: bool = False

    @property
    def accepted(self) -> int:
        return len(self.journey)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def is_empty(self) -> bool:
        return self.accepted == 0

    def skipped_by_reason(self) -> dict[str, int]:
        counts = {}
        for item in self.skipped:
            counts[item.reason.value] = counts.get(item.reason.value, 0) + 1
        return counts


@dataclass(frozen=True)
class JourneyStatistics:
    """Aggregate trip statistics derived from a journey"""

    total_photos: int = 0
    total_points: int = 0
    total_distance_km: float = 0.0
    start_date: datetime | None = None
    end_date: datetime | None = None
    duration_days: int = 0
    most_active_period: tuple[str, int] | None = None
    activity_by_month: dict[str, int] = field(default_factory=dict)
    unique_locations: int = 0

    @property
    def distance_km_display(self) -> int:
        """Total distance rounded half-up to whole kilometers"""
        return int(self.total_distance_km + 0.5)

    def to_dict(self) -> dict:
        return {
            'total_photos': self.total_photos,
            'total_points': self.total_points,
            'unique_locations': self.unique_locations,
            'total_distance_km': round(self.total_distance_km, 3),
            'distance_km_display': self.distance_km_display,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'duration_days': self.duration_days,
            'most_active_period': (
                {'label': self.most_active_period[0], 'count': self.most_active_period[1]}
                if self.most_active_period
                else None
            ),
            'activity_by_month': dict(self.activity_by_month),
        }
