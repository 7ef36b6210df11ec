from collections.abc import Callable
from core.models import GeoPoint, Journey, JourneyStatistics
from dataclasses import dataclass
from datetime import UTC, datetime


def format_display_date(dt: datetime | None) -> str:
    """M/D/YYYY without zero padding, or 'N/A'"""
    if dt is None:
        return 'N/A'
    return f"{dt.month}/{dt.day}/{dt.year}"


def share_text(stats: JourneyStatistics, period_label: str) -> str:
    return (
        f"My {period_label} Journey: {stats.total_photos} photos from {stats.total_points} locations, "
        f"{stats.distance_km_display}km traveled!"
    )


@dataclass(frozen=True)
class MapMarker:
    """Display payload for one plotted journey point"""

    point: GeoPoint
    label: str
    index: int
    thumbnail: str | None = None
    source: str | None = None


def build_map_markers(journey: Journey, thumbnail_for: Callable | None = None) -> list[MapMarker]:
    """Ordered markers for the map renderer, one per journey point"""
    markers = []
    for index, journey_point in enumerate(journey):
        thumbnail = thumbnail_for(journey_point.source_ref) if thumbnail_for and journey_point.source_ref else None
        markers.append(
            MapMarker(
                point=journey_point.point,
                label=format_display_date(journey_point.captured_at),
                index=index + 1,
                thumbnail=thumbnail,
                source=str(journey_point.source_ref) if journey_point.source_ref is not None else None,
            )
        )
    return markers


class JourneySummaryReport:
    """Generate a human-readable markdown summary of a journey"""

    def __init__(self, period_label: str):
        self.period_label = period_label
        self.report_lines = []

    def generate_header_section(self, stats: JourneyStatistics) -> None:
        generation_date = datetime.now(UTC).strftime('%Y-%m-%d %H:%M:%S UTC')

        self.report_lines.extend(
            [
                f"# My {self.period_label} Journey",
                "",
                f"**Generated:** {generation_date}",
                f"**Journey Period:** {format_display_date(stats.start_date)} to {format_display_date(stats.end_date)}",
                "",
                "## Overview",
                "",
                f"- **Total Photos:** {stats.total_photos}",
                f"- **Locations Visited:** {stats.total_points} ({stats.unique_locations} unique)",
                f"- **Distance Traveled:** {stats.distance_km_display} km",
                f"- **Journey Duration:** {stats.duration_days} days",
            ]
        )

        if stats.most_active_period:
            label, count = stats.most_active_period
            self.report_lines.append(f"- **Most Active Month:** {label} ({count} photos)")

        self.report_lines.extend(["", "> " + share_text(stats, self.period_label), ""])

    def generate_activity_section(self, stats: JourneyStatistics) -> None:
        if not stats.activity_by_month:
            return

        self.report_lines.extend(["## Monthly Activity", "", "```"])

        max_count = max(stats.activity_by_month.values())
        scale_factor = 40 / max_count
        for label, count in stats.activity_by_month.items():
            bar = "#" * max(1, int(count * scale_factor))
            self.report_lines.append(f"{label:<10} {bar} ({count})")

        self.report_lines.extend(["```", ""])

    def generate_path_section(self, journey: Journey) -> None:
        self.report_lines.extend(
            [
                "## Journey Path",
                "",
                "| # | Date | Latitude | Longitude | Photo |",
                "|---|------|----------|-----------|-------|",
            ]
        )

        for index, journey_point in enumerate(journey):
            self.report_lines.append(
                f"| {index + 1} | {format_display_date(journey_point.captured_at)} | "
                f"{journey_point.point.latitude:.6f} | {journey_point.point.longitude:.6f} | {journey_point.source_ref} |"
            )

        self.report_lines.append("")

    def generate(self, journey: Journey, stats: JourneyStatistics) -> str:
        self.report_lines = []
        self.generate_header_section(stats)
        self.generate_activity_section(stats)
        self.generate_path_section(journey)
        return '\n'.join(self.report_lines)
