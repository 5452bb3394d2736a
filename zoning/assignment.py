from __future__ import annotations

import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Mapping

from .layout import CellId


@dataclass(frozen=True)
class ZoneDefinition:
    """Named, colored region made of grid cells."""

    id: str
    name: str
    color: str
    cell_ids: frozenset[CellId] = field(default_factory=frozenset)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "cellIds": [cell.key for cell in sorted(self.cell_ids)],
        }


class ZoneErrorCode(str, Enum):
    EMPTY_SELECTION = "empty_selection"
    DISCONNECTED_SELECTION = "disconnected_selection"
    CELL_ALREADY_ASSIGNED = "cell_already_assigned"
    INVALID_NAME = "invalid_name"
    ZONE_NOT_FOUND = "zone_not_found"


@dataclass(frozen=True)
class ZoneError:
    code: ZoneErrorCode
    cell: CellId | None = None
    zone_id: str | None = None


@dataclass(frozen=True)
class ZoneResult:
    """Outcome of a zone operation. ``error`` is set when it was rejected."""

    zone: ZoneDefinition | None = None
    updates: dict[CellId, str] = field(default_factory=dict)
    zones: list[ZoneDefinition] | None = None
    assignments: dict[CellId, str | None] | None = None
    error: ZoneError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _default_zone_id() -> str:
    return f"zone-{uuid.uuid4().hex}"


def check_connected(cell_ids: Iterable[CellId]) -> bool:
    """Return True when the cells form one edge-connected region."""

    members = set(cell_ids)
    if len(members) <= 1:
        return True

    start = next(iter(members))
    visited = {start}
    queue = deque([start])
    while queue:
        cell = queue.popleft()
        for neighbor in cell.neighbors():
            if neighbor in members and neighbor not in visited:
                visited.add(neighbor)
                queue.append(neighbor)
    return len(visited) == len(members)


def create_zone(
    name: str,
    color: str,
    selection: Iterable[CellId],
    current_assignments: Mapping[CellId, str | None],
    id_factory: Callable[[], str] | None = None,
) -> ZoneResult:
    """Validate a selection and build the zone it would become.

    Nothing is mutated; the caller merges ``updates`` into its assignment
    state and clears the selection.
    """

    cells = set(selection)
    if not cells:
        return ZoneResult(error=ZoneError(ZoneErrorCode.EMPTY_SELECTION))

    for cell in sorted(cells):
        owner = current_assignments.get(cell)
        if owner is not None:
            return ZoneResult(
                error=ZoneError(ZoneErrorCode.CELL_ALREADY_ASSIGNED, cell=cell, zone_id=owner)
            )

    if not check_connected(cells):
        return ZoneResult(error=ZoneError(ZoneErrorCode.DISCONNECTED_SELECTION))

    cleaned_name = (name or "").strip()
    if not cleaned_name:
        return ZoneResult(error=ZoneError(ZoneErrorCode.INVALID_NAME))

    zone = ZoneDefinition(
        id=(id_factory or _default_zone_id)(),
        name=cleaned_name,
        color=color,
        cell_ids=frozenset(cells),
    )
    return ZoneResult(zone=zone, updates={cell: zone.id for cell in cells})


def delete_zone(
    zone_id: str,
    zones: Iterable[ZoneDefinition],
    assignments: Mapping[CellId, str | None],
) -> ZoneResult:
    zones = list(zones)
    zone = next((candidate for candidate in zones if candidate.id == zone_id), None)
    if zone is None:
        return ZoneResult(error=ZoneError(ZoneErrorCode.ZONE_NOT_FOUND, zone_id=zone_id))

    # Only the cells the zone lists are released, even if other entries
    # still point at its id.
    remaining_assignments = {
        cell: owner for cell, owner in assignments.items() if cell not in zone.cell_ids
    }
    return ZoneResult(
        zone=zone,
        zones=[candidate for candidate in zones if candidate.id != zone_id],
        assignments=remaining_assignments,
    )
