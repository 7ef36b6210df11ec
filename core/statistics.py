import calendar
import math
from collections import Counter
from config import EARTH_RADIUS_METERS, UNIQUE_LOCATION_PRECISION
from core.models import Journey, JourneyStatistics
from utils.geo import haversine_meters

SECONDS_PER_DAY = 86_400


class JourneyStatisticsEngine:
    """Derive trip statistics from a journey; pure and recomputable"""

    def __init__(self, earth_radius_meters: float = EARTH_RADIUS_METERS):
        self.earth_radius_meters = earth_radius_meters

    def total_distance_meters(self, journey: Journey) -> float:
        """Sum of great-circle distances between consecutive points"""
        path = journey.path
        return sum(
            haversine_meters(prev.latitude, prev.longitude, curr.latitude, curr.longitude, self.earth_radius_meters)
            for prev, curr in zip(path, path[1:])
        )

    def month_activity(self, journey: Journey) -> dict[str, int]:
        """Point counts per calendar month name, in order of first appearance"""
        return dict(Counter(calendar.month_name[journey_point.captured_at.month] for journey_point in journey))

    def most_active_period(self, activity: dict[str, int]) -> tuple[str, int] | None:
        best = None
        for label, count in activity.items():
            # strict comparison keeps the earliest-created bucket on ties
            if best is None or count > best[1]:
                best = (label, count)
        return best

    def compute(self, journey: Journey) -> JourneyStatistics:
        if not journey:
            return JourneyStatistics()

        captured = [journey_point.captured_at for journey_point in journey]
        start_date = min(captured)
        end_date = max(captured)
        duration_days = math.ceil((end_date - start_date).total_seconds() / SECONDS_PER_DAY)

        activity = self.month_activity(journey)
        unique_locations = {
            (round(p.latitude, UNIQUE_LOCATION_PRECISION), round(p.longitude, UNIQUE_LOCATION_PRECISION)) for p in journey.path
        }

        return JourneyStatistics(
            total_photos=len(journey),
            total_points=len(journey.path),
            total_distance_km=self.total_distance_meters(journey) / 1000,
            start_date=start_date,
            end_date=end_date,
            duration_days=duration_days,
            most_active_period=self.most_active_period(activity),
            activity_by_month=activity,
            unique_locations=len(unique_locations),
        )


def compute_statistics(journey: Journey) -> JourneyStatistics:
    return JourneyStatisticsEngine().compute(journey)
