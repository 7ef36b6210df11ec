import logging
from config import ACCEPTED_YEARS
from core.capture_time import CaptureTimeResolver
from core.coordinates import CoordinateResolver
from core.models import JourneyPoint, SkipReason
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


class AcceptancePolicy:
    """Decide whether a photo's capture year qualifies it for the journey"""

    def __init__(self, accepted_years=None):
        years = accepted_years if accepted_years is not None else ACCEPTED_YEARS
        self.accepted_years = frozenset(years) if years else frozenset({datetime.now(UTC).year})

    def accepts(self, captured_at: datetime) -> bool:
        return captured_at.year in self.accepted_years

    def label(self) -> str:
        """Human label for the accepted period, e.g. '2024' or '2023-2024'"""
        years = sorted(self.accepted_years)
        if len(years) == 1:
            return str(years[0])
        if years == list(range(years[0], years[-1] + 1)):
            return f"{years[0]}-{years[-1]}"
        return ', '.join(str(year) for year in years)


class PhotoRecordBuilder:
    """Turn one photo's raw metadata into a JourneyPoint, or reject it"""

    def __init__(
        self,
        coordinate_resolver: CoordinateResolver | None = None,
        time_resolver: CaptureTimeResolver | None = None,
        policy: AcceptancePolicy | None = None,
    ):
        self.coordinate_resolver = coordinate_resolver or CoordinateResolver()
        self.time_resolver = time_resolver or CaptureTimeResolver()
        self.policy = policy or AcceptancePolicy()

    def evaluate(self, record, fallback_modified_time: datetime, source_ref=None) -> tuple[JourneyPoint | None, SkipReason | None]:
        point = self.coordinate_resolver.resolve(record)
        if point is None:
            return None, SkipReason.NO_LOCATION

        captured_at = self.time_resolver.resolve(record, fallback_modified_time)
        if not self.policy.accepts(captured_at):
            return None, SkipReason.OUTSIDE_ACCEPTED_YEARS

        return JourneyPoint(point=point, captured_at=captured_at, source_ref=source_ref), None

    def build(self, record, fallback_modified_time: datetime, source_ref=None) -> JourneyPoint | None:
        journey_point, _ = self.evaluate(record, fallback_modified_time, source_ref)
        return journey_point
