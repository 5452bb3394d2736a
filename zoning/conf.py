from __future__ import annotations

from django.conf import settings

from .layout import GridConfig

DEFAULT_GRID = {
    "rows": 20,
    "cols": 20,
    "center_lat": -24.7859,
    "center_lng": -65.4117,
    "cell_width": 0.005,
    "cell_height": 0.005,
}

STATE_BACKEND_SESSION = "session"
STATE_BACKEND_DATABASE = "database"


def default_grid_config() -> GridConfig:
    configured = getattr(settings, "ZONING_DEFAULT_GRID", None) or {}
    values = {**DEFAULT_GRID, **configured}
    return GridConfig(
        rows=int(values["rows"]),
        cols=int(values["cols"]),
        center_lat=float(values["center_lat"]),
        center_lng=float(values["center_lng"]),
        cell_width=float(values["cell_width"]),
        cell_height=float(values["cell_height"]),
    )


def state_backend() -> str:
    return getattr(settings, "ZONING_STATE_BACKEND", STATE_BACKEND_SESSION)


def session_key() -> str:
    return getattr(settings, "ZONING_SESSION_KEY", "zoning_state")


def state_key() -> str:
    return getattr(settings, "ZONING_STATE_KEY", "zoning-state")


def max_grid_dimension() -> int:
    return int(getattr(settings, "ZONING_MAX_GRID_DIMENSION", 200))
