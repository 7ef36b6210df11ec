import folium
import html
import logging
from config import MAP_FIT_PADDING, MAP_PATH_COLOR, MAP_PATH_WEIGHT, MAP_TILES
from core.models import GeoPoint
from core.summary import MapMarker
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CENTER = (39.8283, -98.5795)
DEFAULT_ZOOM = 4


def padded_bounds(points: list[GeoPoint], ratio: float = MAP_FIT_PADDING) -> list[list[float]]:
    """South-west/north-east bounds around the points, grown by ratio on each side"""
    lats = [p.latitude for p in points]
    lons = [p.longitude for p in points]
    lat_pad = (max(lats) - min(lats)) * ratio
    lon_pad = (max(lons) - min(lons)) * ratio
    return [
        [max(min(lats) - lat_pad, -90.0), max(min(lons) - lon_pad, -180.0)],
        [min(max(lats) + lat_pad, 90.0), min(max(lons) + lon_pad, 180.0)],
    ]


class MapRenderer:
    """Capability the journey is drawn through; implementations own all map state"""

    def plot(self, markers: list[MapMarker]) -> None:
        raise NotImplementedError

    def fit_view(self, points: list[GeoPoint]) -> None:
        raise NotImplementedError


class FoliumMapRenderer(MapRenderer):
    """Render journey markers and path to a standalone Leaflet page"""

    def __init__(self, tiles: str = MAP_TILES):
        self.map = folium.Map(location=DEFAULT_CENTER, zoom_start=DEFAULT_ZOOM, tiles=tiles, control_scale=True)
        self.marker_count = 0

    def _popup_html(self, marker: MapMarker) -> str:
        parts = ['<div style="text-align: center;">']
        if marker.thumbnail:
            parts.append(
                f'<img src="{marker.thumbnail}" style="width: 150px; height: 100px; object-fit: cover; '
                f'border-radius: 4px; margin-bottom: 8px;" />'
            )
        parts.append(f"<div>{html.escape(marker.label)}</div></div>")
        return ''.join(parts)

    def plot(self, markers: list[MapMarker]) -> None:
        for marker in markers:
            folium.Marker(
                location=list(marker.point.as_tuple()),
                popup=folium.Popup(self._popup_html(marker), max_width=200),
                tooltip=f"{marker.index}. {marker.label}",
            ).add_to(self.map)

        if len(markers) > 1:
            folium.PolyLine(
                [list(marker.point.as_tuple()) for marker in markers], color=MAP_PATH_COLOR, weight=MAP_PATH_WEIGHT
            ).add_to(self.map)

        self.marker_count += len(markers)

    def fit_view(self, points: list[GeoPoint]) -> None:
        if not points:
            return
        self.map.fit_bounds(padded_bounds(points))

    def save(self, output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.map.save(str(output_path))
        logger.info(f"Map with {self.marker_count} markers written to {output_path}")
        return output_path
