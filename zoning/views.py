from __future__ import annotations

import json
import logging
from dataclasses import replace

from django.contrib import messages
from django.contrib.admin.views.decorators import staff_member_required
from django.db import transaction
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .assignment import ZoneError, ZoneErrorCode, create_zone, delete_zone
from .forms import GridConfigForm, ZoneForm
from .geo import find_zone_for_point
from .layout import CellId, feature_collection, render_layer, zone_layer
from .storage import ZoneSnapshot, get_zone_store

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    ZoneErrorCode.EMPTY_SELECTION: "Please select at least one cell.",
    ZoneErrorCode.DISCONNECTED_SELECTION: "Selected cells must form a single connected area.",
    ZoneErrorCode.CELL_ALREADY_ASSIGNED: "Cell {cell} already belongs to another zone.",
    ZoneErrorCode.INVALID_NAME: "Enter a name for the zone.",
    ZoneErrorCode.ZONE_NOT_FOUND: "Zone not found.",
}


def _error_payload(error: ZoneError) -> dict:
    cell = error.cell.key if error.cell else None
    return {
        "error": ERROR_MESSAGES[error.code].format(cell=cell),
        "code": error.code.value,
        "cell": cell,
    }


def _first_form_error(form, default_message: str) -> str:
    if not form.errors:
        return default_message
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return default_message


def _json_body(request) -> dict | None:
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


def _coordinate(value) -> int:
    # JSON integers only; bool is an int subclass.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid cell coordinate: {value!r}")
    return value


def _parse_cells(raw, snapshot: ZoneSnapshot) -> tuple[list[CellId], str]:
    """Turn ``[{"row": r, "col": c}, ...]`` into cell ids on the current grid."""

    if raw is None:
        return [], ""
    if not isinstance(raw, list):
        return [], "Cells must be a list."

    config = snapshot.grid_config
    cells: list[CellId] = []
    seen = set()
    for item in raw:
        try:
            cell = CellId(_coordinate(item["row"]), _coordinate(item["col"]))
        except (KeyError, TypeError, ValueError):
            return [], "Invalid cell coordinates."
        if not config.contains(cell):
            return [], f"Selected cell is outside the {config.rows}x{config.cols} grid."
        if cell not in seen:
            seen.add(cell)
            cells.append(cell)
    return cells, ""


def _zone_payload(snapshot: ZoneSnapshot) -> dict:
    zone_features, label_features = zone_layer(snapshot.grid_config, snapshot.zones)
    return {
        "zones": [zone.as_dict() for zone in snapshot.zones],
        "zoneLayer": feature_collection(zone_features),
        "labelLayer": feature_collection(label_features),
    }


def _grid_layer(snapshot: ZoneSnapshot, selection=()) -> dict:
    features = render_layer(
        snapshot.grid_config, snapshot.zones, snapshot.assignments, selection
    )
    return feature_collection(features)


@ensure_csrf_cookie
@require_GET
def index(request):
    snapshot = get_zone_store(request).load()
    context = {
        "grid_config": snapshot.grid_config,
        "zones": snapshot.zones,
        "grid_layer": _grid_layer(snapshot),
        "zone_data": _zone_payload(snapshot),
        "grid_form": GridConfigForm(initial=snapshot.grid_config.as_dict()),
        "zone_form": ZoneForm(),
    }
    return render(request, "zoning/index.html", context)


@require_http_methods(["GET", "POST"])
def grid_layer(request):
    snapshot = get_zone_store(request).load()
    selection: list[CellId] = []
    if request.method == "POST":
        payload = _json_body(request)
        if payload is None:
            return JsonResponse({"error": "Invalid JSON payload."}, status=400)
        selection, error = _parse_cells(payload.get("cells"), snapshot)
        if error:
            return JsonResponse({"error": error}, status=400)
    response = _grid_layer(snapshot, selection)
    response["gridConfig"] = snapshot.grid_config.as_dict()
    return JsonResponse(response)


@require_GET
def zone_list(request):
    snapshot = get_zone_store(request).load()
    return JsonResponse(_zone_payload(snapshot))


@require_POST
def zone_create(request):
    payload = _json_body(request)
    if payload is None:
        return JsonResponse({"error": "Invalid JSON payload."}, status=400)

    form = ZoneForm(
        {"name": payload.get("name") or "", "color": payload.get("color") or ""}
    )
    if not form.is_valid():
        return JsonResponse(
            {"error": _first_form_error(form, "Unable to save zone.")}, status=400
        )

    store = get_zone_store(request)
    with transaction.atomic():
        snapshot = store.load()
        cells, error = _parse_cells(payload.get("cells") or [], snapshot)
        if error:
            return JsonResponse({"error": error}, status=400)

        result = create_zone(
            form.cleaned_data["name"],
            form.cleaned_data["color"],
            cells,
            snapshot.assignments,
        )
        if not result.ok:
            logger.info("Rejected zone creation: %s", result.error.code.value)
            return JsonResponse(_error_payload(result.error), status=400)

        snapshot = snapshot.with_zone(result.zone, result.updates)
        store.save(snapshot)

    logger.info(
        "Created zone %s (%s) with %d cell(s)",
        result.zone.id,
        result.zone.name,
        len(result.zone.cell_ids),
    )
    return JsonResponse(
        {
            "zone": result.zone.as_dict(),
            "message": f"Zone '{result.zone.name}' created.",
            "gridLayer": _grid_layer(snapshot),
            **_zone_payload(snapshot),
        },
        status=201,
    )


@require_POST
def zone_delete(request, zone_id: str):
    store = get_zone_store(request)
    with transaction.atomic():
        snapshot = store.load()
        result = delete_zone(zone_id, snapshot.zones, snapshot.assignments)
        if not result.ok:
            return JsonResponse(_error_payload(result.error), status=404)
        snapshot = replace(
            snapshot, zones=tuple(result.zones), assignments=result.assignments
        )
        store.save(snapshot)

    logger.info("Deleted zone %s (%s)", result.zone.id, result.zone.name)
    return JsonResponse(
        {
            "message": f"Zone '{result.zone.name}' deleted.",
            "gridLayer": _grid_layer(snapshot),
            **_zone_payload(snapshot),
        }
    )


@require_GET
def locate_point(request):
    try:
        lat = float(request.GET["lat"])
        lng = float(request.GET["lng"])
    except (KeyError, ValueError):
        return JsonResponse({"error": "Provide numeric lat and lng parameters."}, status=400)

    snapshot = get_zone_store(request).load()
    zone = find_zone_for_point((lng, lat), snapshot.zones, snapshot.grid_config)
    return JsonResponse({"zone": zone.as_dict() if zone else None})


@staff_member_required
@require_POST
def update_grid(request):
    form = GridConfigForm(request.POST)
    if not form.is_valid():
        messages.error(request, _first_form_error(form, "Unable to update the grid."))
        return redirect("zoning:index")

    store = get_zone_store(request)
    with transaction.atomic():
        snapshot = store.load()
        config = form.grid_config()
        store.save(replace(snapshot, grid_config=config))

    logger.info("Grid reconfigured to %dx%d", config.rows, config.cols)
    messages.success(request, f"Grid updated to {config.rows} x {config.cols} cells.")
    return redirect("zoning:index")
