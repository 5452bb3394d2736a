from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping

if TYPE_CHECKING:
    from .assignment import ZoneDefinition

DEFAULT_FILL_COLOR = "#000000"
ZONE_OPACITY = 0.3
SELECTION_COLOR = "#00FFFF"
SELECTION_OPACITY = 0.5


@dataclass(frozen=True, order=True)
class CellId:
    """Position of a single grid cell, counted from the north-west corner."""

    row: int
    col: int

    @property
    def key(self) -> str:
        return f"{self.row}-{self.col}"

    @classmethod
    def parse(cls, value: str) -> "CellId":
        row, sep, col = str(value).partition("-")
        if not sep:
            raise ValueError(f"Invalid cell identifier: {value!r}")
        return cls(int(row), int(col))

    def neighbors(self) -> Iterator["CellId"]:
        yield CellId(self.row - 1, self.col)
        yield CellId(self.row + 1, self.col)
        yield CellId(self.row, self.col - 1)
        yield CellId(self.row, self.col + 1)


@dataclass(frozen=True)
class GridConfig:
    """Rectangular grid laid over the map, centered on a coordinate."""

    rows: int
    cols: int
    center_lat: float
    center_lng: float
    cell_width: float
    cell_height: float

    @property
    def is_valid(self) -> bool:
        return (
            self.rows > 0
            and self.cols > 0
            and self.cell_width > 0
            and self.cell_height > 0
            and all(
                math.isfinite(value)
                for value in (
                    self.center_lat,
                    self.center_lng,
                    self.cell_width,
                    self.cell_height,
                )
            )
        )

    @property
    def origin(self) -> tuple[float, float]:
        """Return the north-west corner as ``(lat, lng)``."""

        lat = self.center_lat + (self.rows / 2) * self.cell_height
        lng = self.center_lng - (self.cols / 2) * self.cell_width
        return lat, lng

    def contains(self, cell: CellId) -> bool:
        return 0 <= cell.row < self.rows and 0 <= cell.col < self.cols

    def cells(self) -> Iterator[CellId]:
        for row in range(max(self.rows, 0)):
            for col in range(max(self.cols, 0)):
                yield CellId(row, col)

    def as_dict(self) -> dict:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "center_lat": self.center_lat,
            "center_lng": self.center_lng,
            "cell_width": self.cell_width,
            "cell_height": self.cell_height,
        }


@dataclass(frozen=True)
class LayerFeature:
    cell_id: CellId
    polygon: tuple[tuple[float, float], ...]
    fill_color: str
    fill_opacity: float

    def as_geojson(self) -> dict:
        return {
            "type": "Feature",
            "properties": {
                "id": self.cell_id.key,
                "fillColor": self.fill_color,
                "fillOpacity": self.fill_opacity,
            },
            "geometry": {
                "type": "Polygon",
                "coordinates": [[list(vertex) for vertex in self.polygon]],
            },
        }


def cell_polygon(config: GridConfig, cell: CellId) -> tuple[tuple[float, float], ...]:
    """Return the closed ``(lng, lat)`` ring outlining a cell."""

    start_lat, start_lng = config.origin
    lat = start_lat - cell.row * config.cell_height
    lng = start_lng + cell.col * config.cell_width
    return (
        (lng, lat),
        (lng + config.cell_width, lat),
        (lng + config.cell_width, lat - config.cell_height),
        (lng, lat - config.cell_height),
        (lng, lat),
    )


def cell_center(config: GridConfig, cell: CellId) -> tuple[float, float]:
    start_lat, start_lng = config.origin
    lat = start_lat - cell.row * config.cell_height - config.cell_height / 2
    lng = start_lng + cell.col * config.cell_width + config.cell_width / 2
    return lng, lat


def render_layer(
    config: GridConfig,
    zones: Iterable[ZoneDefinition],
    assignments: Mapping[CellId, str | None],
    selection: Iterable[CellId] = (),
) -> list[LayerFeature]:
    """Build one colored feature per grid cell.

    Cells assigned to a known zone take the zone color; selected cells are
    highlighted regardless of their zone.
    """

    if not config.is_valid:
        return []

    zone_colors = {zone.id: zone.color for zone in zones}
    selected = set(selection)
    features: list[LayerFeature] = []
    for cell in config.cells():
        fill_color = DEFAULT_FILL_COLOR
        fill_opacity = 0.0
        zone_id = assignments.get(cell)
        if zone_id and zone_id in zone_colors:
            fill_color = zone_colors[zone_id]
            fill_opacity = ZONE_OPACITY
        if cell in selected:
            fill_color = SELECTION_COLOR
            fill_opacity = SELECTION_OPACITY
        features.append(
            LayerFeature(
                cell_id=cell,
                polygon=cell_polygon(config, cell),
                fill_color=fill_color,
                fill_opacity=fill_opacity,
            )
        )
    return features


def zone_layer(
    config: GridConfig, zones: Iterable[ZoneDefinition]
) -> tuple[list[dict], list[dict]]:
    """Return zone cell polygons and one name label per zone.

    Labels sit at the mean of the zone's cell centers. Cells outside the
    current grid are left out, and a zone with none inside gets no label.
    """

    zone_features: list[dict] = []
    label_features: list[dict] = []
    if not config.is_valid:
        return zone_features, label_features
    for zone in zones:
        cells = sorted(cell for cell in zone.cell_ids if config.contains(cell))
        if not cells:
            continue
        for cell in cells:
            zone_features.append(
                {
                    "type": "Feature",
                    "properties": {"zoneId": zone.id, "color": zone.color},
                    "geometry": {
                        "type": "Polygon",
                        "coordinates": [[list(v) for v in cell_polygon(config, cell)]],
                    },
                }
            )
        centers = [cell_center(config, cell) for cell in cells]
        center_lng = sum(lng for lng, _ in centers) / len(centers)
        center_lat = sum(lat for _, lat in centers) / len(centers)
        label_features.append(
            {
                "type": "Feature",
                "properties": {"zoneId": zone.id, "name": zone.name},
                "geometry": {"type": "Point", "coordinates": [center_lng, center_lat]},
            }
        )
    return zone_features, label_features


def feature_collection(features: Iterable) -> dict:
    return {
        "type": "FeatureCollection",
        "features": [
            feature.as_geojson() if isinstance(feature, LayerFeature) else feature
            for feature in features
        ],
    }
