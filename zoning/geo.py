from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable, Sequence

from .layout import CellId, GridConfig

if TYPE_CHECKING:
    from .assignment import ZoneDefinition

Point = tuple[float, float]  # (lng, lat)


def point_in_polygon(point: Point, ring: Sequence[Sequence[float]]) -> bool:
    """Ray-casting test of ``point`` against a polygon's outer ring."""

    if not ring:
        return False
    x, y = point[0], point[1]
    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i][0], ring[i][1]
        xj, yj = ring[j][0], ring[j][1]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def distance_squared(p1: Point, p2: Point) -> float:
    dx = p1[0] - p2[0]
    dy = p1[1] - p2[1]
    return dx * dx + dy * dy


def cell_for_point(config: GridConfig, point: Point) -> CellId | None:
    """Return the cell containing a ``(lng, lat)`` point, if it is on the grid."""

    lng, lat = point
    if not config.is_valid or not (math.isfinite(lng) and math.isfinite(lat)):
        return None
    start_lat, start_lng = config.origin
    col = math.floor((lng - start_lng) / config.cell_width)
    row = math.floor((start_lat - lat) / config.cell_height)
    cell = CellId(row, col)
    if not config.contains(cell):
        return None
    return cell


def find_zone_for_point(
    point: Point, zones: Iterable[ZoneDefinition], config: GridConfig
) -> ZoneDefinition | None:
    cell = cell_for_point(config, point)
    if cell is None:
        return None
    return next((zone for zone in zones if cell in zone.cell_ids), None)
