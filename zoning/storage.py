from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from django.db import transaction

from . import conf
from .assignment import ZoneDefinition
from .layout import CellId, GridConfig
from .models import StateBlob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneSnapshot:
    """Everything persisted about the zone map between requests."""

    grid_config: GridConfig
    zones: tuple[ZoneDefinition, ...] = ()
    assignments: dict[CellId, str | None] = field(default_factory=dict)

    def zone(self, zone_id: str) -> ZoneDefinition | None:
        return next((zone for zone in self.zones if zone.id == zone_id), None)

    def with_zone(self, zone: ZoneDefinition, updates: dict[CellId, str]) -> "ZoneSnapshot":
        return replace(
            self,
            zones=self.zones + (zone,),
            assignments={**self.assignments, **updates},
        )

    def to_payload(self) -> dict:
        return {
            "zones": [zone.as_dict() for zone in self.zones],
            "cellAssignments": {
                cell.key: zone_id for cell, zone_id in sorted(self.assignments.items())
            },
            "gridConfig": self.grid_config.as_dict(),
        }

    @classmethod
    def empty(cls, grid_config: GridConfig | None = None) -> "ZoneSnapshot":
        return cls(grid_config=grid_config or conf.default_grid_config())

    @classmethod
    def from_payload(cls, data, default_grid: GridConfig | None = None) -> "ZoneSnapshot":
        """Rebuild a snapshot from stored JSON, dropping anything malformed."""

        default_grid = default_grid or conf.default_grid_config()
        if not isinstance(data, dict):
            if data is not None:
                logger.warning("Discarding zone state of type %s", type(data).__name__)
            return cls(grid_config=default_grid)

        zones = _parse_zones(data.get("zones"))
        assignments = _parse_assignments(data.get("cellAssignments"))
        return cls(
            grid_config=_parse_grid_config(data.get("gridConfig"), default_grid),
            zones=tuple(zones),
            assignments=_reconcile_assignments(zones, assignments),
        )


def _parse_grid_config(raw, default_grid: GridConfig) -> GridConfig:
    if raw is None:
        return default_grid
    try:
        config = GridConfig(
            rows=int(raw["rows"]),
            cols=int(raw["cols"]),
            center_lat=float(raw["center_lat"]),
            center_lng=float(raw["center_lng"]),
            cell_width=float(raw["cell_width"]),
            cell_height=float(raw["cell_height"]),
        )
    except (KeyError, TypeError, ValueError, OverflowError):
        logger.warning("Stored grid configuration is malformed; using defaults.")
        return default_grid
    limit = conf.max_grid_dimension()
    if (
        not config.is_valid
        or config.rows > limit
        or config.cols > limit
        or not -90 <= config.center_lat <= 90
        or not -180 <= config.center_lng <= 180
    ):
        logger.warning("Stored grid configuration %r is degenerate; using defaults.", config)
        return default_grid
    return config


def _parse_zones(raw) -> list[ZoneDefinition]:
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Stored zone list is not a list; ignoring it.")
        return []

    zones: list[ZoneDefinition] = []
    seen_ids = set()
    claimed: set[CellId] = set()
    for item in raw:
        try:
            zone_id = str(item["id"])
            name = str(item["name"]).strip()
            color = str(item["color"])
            cell_ids = frozenset(CellId.parse(value) for value in item["cellIds"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Dropping malformed stored zone %r", item)
            continue
        if not zone_id or not name or not cell_ids or zone_id in seen_ids:
            logger.warning("Dropping invalid stored zone %r", item)
            continue
        if cell_ids & claimed:
            logger.warning("Dropping stored zone %s; its cells overlap another zone", zone_id)
            continue
        seen_ids.add(zone_id)
        claimed |= cell_ids
        zones.append(ZoneDefinition(id=zone_id, name=name, color=color, cell_ids=cell_ids))
    return zones


def _parse_assignments(raw) -> dict[CellId, str | None]:
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("Stored cell assignments are not a mapping; ignoring them.")
        return {}

    assignments: dict[CellId, str | None] = {}
    for key, zone_id in raw.items():
        try:
            cell = CellId.parse(key)
        except ValueError:
            logger.warning("Dropping assignment for malformed cell %r", key)
            continue
        if zone_id is not None and not isinstance(zone_id, str):
            logger.warning("Dropping assignment of cell %s to %r", key, zone_id)
            continue
        assignments[cell] = zone_id
    return assignments


def _reconcile_assignments(
    zones: list[ZoneDefinition], assignments: dict[CellId, str | None]
) -> dict[CellId, str | None]:
    """Make the assignment map agree with the cells each zone lists."""

    owners = {cell: zone.id for zone in zones for cell in zone.cell_ids}
    reconciled: dict[CellId, str | None] = {}
    for cell, zone_id in assignments.items():
        if zone_id is not None and owners.get(cell) != zone_id:
            logger.warning("Releasing cell %s from zone %s, which does not list it", cell.key, zone_id)
            continue
        reconciled[cell] = zone_id
    for cell, zone_id in owners.items():
        if reconciled.get(cell) != zone_id:
            logger.warning("Restoring assignment of cell %s to zone %s", cell.key, zone_id)
            reconciled[cell] = zone_id
    return reconciled


class SessionZoneStore:
    """Keeps the zone snapshot in the visitor's session."""

    def __init__(self, session, key: str | None = None):
        self.session = session
        self.key = key or conf.session_key()

    def load(self) -> ZoneSnapshot:
        return ZoneSnapshot.from_payload(self.session.get(self.key))

    def save(self, snapshot: ZoneSnapshot) -> None:
        self.session[self.key] = snapshot.to_payload()

    def clear(self) -> None:
        self.session.pop(self.key, None)


class DatabaseZoneStore:
    """Keeps the zone snapshot in a shared :class:`StateBlob` row.

    Call ``load`` and ``save`` inside one ``transaction.atomic()`` block so
    the row lock serializes concurrent writers.
    """

    def __init__(self, key: str | None = None):
        self.key = key or conf.state_key()

    def load(self) -> ZoneSnapshot:
        queryset = StateBlob.objects.filter(key=self.key)
        if transaction.get_connection().in_atomic_block:
            queryset = queryset.select_for_update()
        blob = queryset.first()
        return ZoneSnapshot.from_payload(blob.payload if blob else None)

    def save(self, snapshot: ZoneSnapshot) -> None:
        StateBlob.objects.update_or_create(
            key=self.key, defaults={"payload": snapshot.to_payload()}
        )

    def clear(self) -> None:
        StateBlob.objects.filter(key=self.key).delete()


def get_zone_store(request):
    backend = conf.state_backend()
    if backend == conf.STATE_BACKEND_DATABASE:
        return DatabaseZoneStore()
    if backend != conf.STATE_BACKEND_SESSION:
        logger.warning("Unknown zoning state backend %r; using the session.", backend)
    return SessionZoneStore(request.session)
