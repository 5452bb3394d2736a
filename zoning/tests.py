import json

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse

from .assignment import (
    ZoneDefinition,
    ZoneErrorCode,
    check_connected,
    create_zone,
    delete_zone,
)
from .geo import cell_for_point, distance_squared, find_zone_for_point, point_in_polygon
from .layout import (
    SELECTION_COLOR,
    CellId,
    GridConfig,
    cell_polygon,
    render_layer,
    zone_layer,
)
from .models import StateBlob
from .storage import DatabaseZoneStore, SessionZoneStore, ZoneSnapshot


def grid(rows=3, cols=3):
    return GridConfig(
        rows=rows,
        cols=cols,
        center_lat=0.0,
        center_lng=0.0,
        cell_width=1.0,
        cell_height=1.0,
    )


def cells(*pairs):
    return [CellId(row, col) for row, col in pairs]


class CellIdTests(SimpleTestCase):
    def test_key_round_trips_through_parse(self):
        self.assertEqual(CellId.parse("4-11"), CellId(4, 11))
        self.assertEqual(CellId(4, 11).key, "4-11")

    def test_parse_rejects_malformed_identifiers(self):
        for value in ("", "4", "a-b", "cell-r01c02"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    CellId.parse(value)

    def test_neighbors_are_edge_adjacent_only(self):
        self.assertEqual(
            set(CellId(2, 2).neighbors()),
            set(cells((1, 2), (3, 2), (2, 1), (2, 3))),
        )


class RenderLayerTests(SimpleTestCase):
    def test_one_closed_quadrilateral_per_cell(self):
        features = render_layer(grid(4, 5), [], {}, set())

        self.assertEqual(len(features), 20)
        for feature in features:
            self.assertEqual(len(feature.polygon), 5)
            self.assertEqual(feature.polygon[0], feature.polygon[-1])

    def test_rows_grow_south_and_columns_grow_east(self):
        config = grid(2, 2)

        self.assertEqual(
            cell_polygon(config, CellId(0, 0)),
            ((-1.0, 1.0), (0.0, 1.0), (0.0, 0.0), (-1.0, 0.0), (-1.0, 1.0)),
        )
        self.assertEqual(cell_polygon(config, CellId(1, 1))[0], (0.0, 0.0))

    def test_zone_and_selection_colors(self):
        zone = ZoneDefinition("zone-a", "A", "#ff0000", frozenset(cells((0, 0), (0, 1))))
        assignments = {CellId(0, 0): "zone-a", CellId(0, 1): "zone-a"}

        features = {
            feature.cell_id: feature
            for feature in render_layer(grid(), [zone], assignments, set())
        }
        self.assertEqual(features[CellId(0, 0)].fill_color, "#ff0000")
        self.assertEqual(features[CellId(0, 0)].fill_opacity, 0.3)
        self.assertEqual(features[CellId(0, 1)].fill_opacity, 0.3)
        transparent = [f for f in features.values() if f.fill_opacity == 0]
        self.assertEqual(len(transparent), 7)

        selected = {
            feature.cell_id: feature
            for feature in render_layer(
                grid(), [zone], assignments, {CellId(1, 1), CellId(0, 0)}
            )
        }
        self.assertEqual(selected[CellId(1, 1)].fill_color, SELECTION_COLOR)
        self.assertEqual(selected[CellId(1, 1)].fill_opacity, 0.5)
        self.assertEqual(selected[CellId(0, 0)].fill_color, SELECTION_COLOR)
        self.assertEqual(selected[CellId(0, 1)].fill_color, "#ff0000")

    def test_assignment_to_unknown_zone_stays_transparent(self):
        features = render_layer(grid(), [], {CellId(0, 0): "missing"}, set())

        self.assertEqual(features[0].fill_opacity, 0)

    def test_rendering_is_deterministic(self):
        zone = ZoneDefinition("zone-a", "A", "#ff0000", frozenset(cells((0, 0))))
        args = (grid(), [zone], {CellId(0, 0): "zone-a"}, {CellId(2, 2)})

        self.assertEqual(render_layer(*args), render_layer(*args))

    def test_degenerate_grid_renders_nothing(self):
        self.assertEqual(render_layer(grid(0, 3), [], {}, set()), [])

    def test_geojson_feature_shape(self):
        feature = render_layer(grid(1, 1), [], {}, set())[0].as_geojson()

        self.assertEqual(feature["properties"]["id"], "0-0")
        self.assertEqual(feature["geometry"]["type"], "Polygon")
        self.assertEqual(len(feature["geometry"]["coordinates"][0]), 5)


class ZoneLayerTests(SimpleTestCase):
    def test_label_sits_at_mean_of_cell_centers(self):
        zone = ZoneDefinition("zone-a", "Center", "#00ff00", frozenset(cells((0, 0), (0, 1))))

        polygons, labels = zone_layer(grid(2, 2), [zone])

        self.assertEqual(len(polygons), 2)
        self.assertEqual(labels[0]["properties"]["name"], "Center")
        self.assertEqual(labels[0]["geometry"]["coordinates"], [0.0, 0.5])

    def test_empty_zones_are_skipped(self):
        zone = ZoneDefinition("zone-a", "Empty", "#00ff00", frozenset())

        self.assertEqual(zone_layer(grid(), [zone]), ([], []))

    def test_cells_outside_the_grid_are_not_drawn(self):
        orphaned = ZoneDefinition("zone-a", "Gone", "#00ff00", frozenset(cells((8, 8))))
        partial = ZoneDefinition("zone-b", "Half", "#0000ff", frozenset(cells((1, 1), (1, 5))))

        polygons, labels = zone_layer(grid(2, 2), [orphaned, partial])

        self.assertEqual([p["properties"]["zoneId"] for p in polygons], ["zone-b"])
        self.assertEqual(len(labels), 1)
        self.assertEqual(labels[0]["geometry"]["coordinates"], [0.5, -0.5])


class GeoTests(SimpleTestCase):
    square = [(0, 0), (2, 0), (2, 2), (0, 2), (0, 0)]

    def test_point_in_polygon(self):
        self.assertTrue(point_in_polygon((1, 1), self.square))
        self.assertFalse(point_in_polygon((3, 1), self.square))
        self.assertFalse(point_in_polygon((1, 1), []))

    def test_distance_squared(self):
        self.assertEqual(distance_squared((0, 0), (3, 4)), 25)

    def test_cell_for_point(self):
        config = grid(2, 2)

        self.assertEqual(cell_for_point(config, (-0.5, 0.5)), CellId(0, 0))
        self.assertEqual(cell_for_point(config, (0.5, -0.5)), CellId(1, 1))
        self.assertIsNone(cell_for_point(config, (5.0, 0.0)))
        self.assertIsNone(cell_for_point(config, (float("nan"), 0.0)))

    def test_find_zone_for_point(self):
        zone = ZoneDefinition("zone-a", "A", "#ff0000", frozenset(cells((1, 1))))

        self.assertEqual(find_zone_for_point((0.5, -0.5), [zone], grid(2, 2)), zone)
        self.assertIsNone(find_zone_for_point((-0.5, 0.5), [zone], grid(2, 2)))


class CheckConnectedTests(SimpleTestCase):
    def test_empty_and_single_cell_are_connected(self):
        self.assertTrue(check_connected([]))
        self.assertTrue(check_connected([CellId(3, 3)]))

    def test_block_is_connected(self):
        self.assertTrue(check_connected(cells((0, 0), (0, 1), (1, 0), (1, 1))))

    def test_diagonal_cells_are_not_connected(self):
        self.assertFalse(check_connected(cells((0, 0), (1, 1))))

    def test_order_and_duplicates_do_not_matter(self):
        shape = cells((2, 0), (0, 0), (1, 0), (1, 0), (2, 1))

        self.assertTrue(check_connected(shape))
        self.assertTrue(check_connected(list(reversed(shape))))
        self.assertFalse(check_connected(shape + cells((5, 5), (5, 5))))


class CreateZoneTests(SimpleTestCase):
    def test_creates_zone_and_assignment_updates(self):
        result = create_zone(
            "  Downtown ", "#F44336", cells((0, 0), (0, 1)), {}, id_factory=lambda: "zone-1"
        )

        self.assertTrue(result.ok)
        self.assertEqual(result.zone.name, "Downtown")
        self.assertEqual(result.zone.cell_ids, frozenset(cells((0, 0), (0, 1))))
        self.assertEqual(result.updates, {CellId(0, 0): "zone-1", CellId(0, 1): "zone-1"})

    def test_default_ids_are_unique(self):
        first = create_zone("A", "#000", cells((0, 0)), {})
        second = create_zone("B", "#000", cells((0, 0)), {})

        self.assertNotEqual(first.zone.id, second.zone.id)

    def test_empty_selection(self):
        result = create_zone("A", "#000", [], {})

        self.assertFalse(result.ok)
        self.assertEqual(result.error.code, ZoneErrorCode.EMPTY_SELECTION)

    def test_disconnected_selection_leaves_assignments_unchanged(self):
        assignments = {CellId(9, 9): "zone-x"}

        result = create_zone("A", "#000", cells((0, 0), (5, 5)), assignments)

        self.assertEqual(result.error.code, ZoneErrorCode.DISCONNECTED_SELECTION)
        self.assertEqual(assignments, {CellId(9, 9): "zone-x"})
        self.assertEqual(result.updates, {})

    def test_cell_already_assigned_names_the_cell(self):
        assignments = {CellId(0, 1): "zone-x", CellId(0, 0): None}

        result = create_zone("A", "#000", cells((0, 0), (0, 1), (0, 2)), assignments)

        self.assertEqual(result.error.code, ZoneErrorCode.CELL_ALREADY_ASSIGNED)
        self.assertEqual(result.error.cell, CellId(0, 1))
        self.assertIsNone(result.zone)
        self.assertEqual(assignments, {CellId(0, 1): "zone-x", CellId(0, 0): None})

    def test_blank_name(self):
        result = create_zone("   ", "#000", cells((0, 0)), {})

        self.assertEqual(result.error.code, ZoneErrorCode.INVALID_NAME)


class DeleteZoneTests(SimpleTestCase):
    def test_create_then_delete_restores_assignments(self):
        before = {CellId(5, 5): "zone-other"}
        created = create_zone("A", "#000", cells((0, 0), (1, 0)), before, id_factory=lambda: "zone-a")
        zones = [created.zone]
        after_create = {**before, **created.updates}

        result = delete_zone("zone-a", zones, after_create)

        self.assertTrue(result.ok)
        self.assertEqual(result.zones, [])
        self.assertEqual(result.assignments, before)

    def test_only_cells_listed_by_the_zone_are_released(self):
        zone = ZoneDefinition("zone-a", "A", "#000", frozenset(cells((0, 0))))
        assignments = {CellId(0, 0): "zone-a", CellId(2, 2): "zone-a"}

        result = delete_zone("zone-a", [zone], assignments)

        self.assertEqual(result.assignments, {CellId(2, 2): "zone-a"})
        self.assertEqual(len(assignments), 2)

    def test_unknown_zone(self):
        zone = ZoneDefinition("zone-a", "A", "#000", frozenset(cells((0, 0))))

        result = delete_zone("zone-b", [zone], {CellId(0, 0): "zone-a"})

        self.assertEqual(result.error.code, ZoneErrorCode.ZONE_NOT_FOUND)
        self.assertIsNone(result.zones)


class SnapshotTests(SimpleTestCase):
    def test_payload_round_trip(self):
        zone = ZoneDefinition("zone-a", "A", "#ff0000", frozenset(cells((0, 0), (0, 1))))
        snapshot = ZoneSnapshot.empty(grid()).with_zone(
            zone, {CellId(0, 0): "zone-a", CellId(0, 1): "zone-a", CellId(2, 2): None}
        )

        restored = ZoneSnapshot.from_payload(json.loads(json.dumps(snapshot.to_payload())))

        self.assertEqual(restored, snapshot)

    def test_corrupt_payload_yields_defaults(self):
        default = grid(7, 7)

        with self.assertLogs("zoning.storage", level="WARNING"):
            snapshot = ZoneSnapshot.from_payload("not-a-mapping", default)

        self.assertEqual(snapshot, ZoneSnapshot.empty(default))

    def test_malformed_pieces_are_dropped(self):
        payload = {
            "zones": [
                {"id": "ok", "name": "Good", "color": "#fff", "cellIds": ["0-0"]},
                {"id": "bad", "name": "Bad", "color": "#fff", "cellIds": ["zero"]},
                {"id": "nameless", "name": " ", "color": "#fff", "cellIds": ["1-1"]},
                "garbage",
            ],
            "cellAssignments": {"0-0": "ok", "x-y": "ok", "1-1": 42},
            "gridConfig": {"rows": -1, "cols": 3},
        }

        with self.assertLogs("zoning.storage", level="WARNING"):
            snapshot = ZoneSnapshot.from_payload(payload, grid())

        self.assertEqual([zone.id for zone in snapshot.zones], ["ok"])
        self.assertEqual(snapshot.assignments, {CellId(0, 0): "ok"})
        self.assertEqual(snapshot.grid_config, grid())

    def test_zone_cells_missing_from_assignments_are_restored(self):
        payload = {
            "zones": [{"id": "a", "name": "A", "color": "#fff", "cellIds": ["0-0"]}],
            "cellAssignments": {},
        }

        with self.assertLogs("zoning.storage", level="WARNING"):
            snapshot = ZoneSnapshot.from_payload(payload, grid())

        self.assertEqual(snapshot.assignments, {CellId(0, 0): "a"})
        result = create_zone("B", "#000", cells((0, 0)), snapshot.assignments)
        self.assertEqual(result.error.code, ZoneErrorCode.CELL_ALREADY_ASSIGNED)

    def test_assignments_without_a_listing_zone_are_released(self):
        payload = {
            "zones": [
                {"id": "a", "name": "A", "color": "#fff", "cellIds": ["0-0"]},
                {"id": "a", "name": "Copy", "color": "#fff", "cellIds": ["1-1"]},
            ],
            "cellAssignments": {"0-0": "a", "1-1": "a", "2-2": "gone", "0-1": "a"},
        }

        with self.assertLogs("zoning.storage", level="WARNING"):
            snapshot = ZoneSnapshot.from_payload(payload, grid())

        self.assertEqual([zone.name for zone in snapshot.zones], ["A"])
        self.assertEqual(snapshot.assignments, {CellId(0, 0): "a"})
        self.assertTrue(create_zone("B", "#000", cells((1, 1)), snapshot.assignments).ok)

    def test_overlapping_stored_zone_is_dropped(self):
        payload = {
            "zones": [
                {"id": "a", "name": "A", "color": "#fff", "cellIds": ["0-0", "0-1"]},
                {"id": "b", "name": "B", "color": "#000", "cellIds": ["0-1", "0-2"]},
            ],
            "cellAssignments": {"0-0": "a", "0-1": "b", "0-2": "b"},
        }

        with self.assertLogs("zoning.storage", level="WARNING"):
            snapshot = ZoneSnapshot.from_payload(payload, grid())

        self.assertEqual([zone.id for zone in snapshot.zones], ["a"])
        self.assertEqual(snapshot.assignments, {CellId(0, 0): "a", CellId(0, 1): "a"})

    @override_settings(ZONING_MAX_GRID_DIMENSION=50)
    def test_out_of_range_grid_falls_back_to_default(self):
        base = grid().as_dict()
        for bad in (
            {"rows": 51},
            {"cell_width": float("inf")},
            {"center_lat": float("nan")},
            {"center_lng": 200.0},
            {"rows": float("inf")},
        ):
            with self.subTest(bad=bad):
                with self.assertLogs("zoning.storage", level="WARNING"):
                    snapshot = ZoneSnapshot.from_payload(
                        {"gridConfig": {**base, **bad}}, grid(7, 7)
                    )
                self.assertEqual(snapshot.grid_config, grid(7, 7))

    def test_session_store(self):
        session = {}
        store = SessionZoneStore(session, key="state")
        snapshot = ZoneSnapshot.empty(grid())

        store.save(snapshot)

        self.assertIn("state", session)
        self.assertEqual(store.load(), snapshot)
        store.clear()
        self.assertNotIn("state", session)


class DatabaseZoneStoreTests(TestCase):
    def test_save_and_load(self):
        store = DatabaseZoneStore(key="fleet")
        zone = ZoneDefinition("zone-a", "A", "#ff0000", frozenset(cells((0, 0))))
        snapshot = ZoneSnapshot.empty(grid()).with_zone(zone, {CellId(0, 0): "zone-a"})

        store.save(snapshot)
        store.save(snapshot)

        self.assertEqual(StateBlob.objects.filter(key="fleet").count(), 1)
        self.assertEqual(store.load(), snapshot)

    def test_missing_row_loads_empty_snapshot(self):
        snapshot = DatabaseZoneStore(key="nothing-here").load()

        self.assertEqual(snapshot.zones, ())
        self.assertEqual(snapshot.assignments, {})


SMALL_GRID = {
    "rows": 10,
    "cols": 10,
    "center_lat": 0.0,
    "center_lng": 0.0,
    "cell_width": 1.0,
    "cell_height": 1.0,
}


@override_settings(ZONING_DEFAULT_GRID=SMALL_GRID, ZONING_STATE_BACKEND="session")
class ZoneApiTests(TestCase):
    def post_json(self, name, payload, **kwargs):
        return self.client.post(
            reverse(name, kwargs=kwargs),
            data=json.dumps(payload),
            content_type="application/json",
        )

    def create(self, name, pairs, color="#ff0000"):
        return self.post_json(
            "zoning:zone-create",
            {
                "name": name,
                "color": color,
                "cells": [{"row": row, "col": col} for row, col in pairs],
            },
        )

    def test_index_renders(self):
        response = self.client.get(reverse("zoning:index"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context["grid_layer"]["features"]), 100)

    def test_create_list_and_delete_zone(self):
        response = self.create("Downtown", [(0, 0), (0, 1)])

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        zone_id = payload["zone"]["id"]
        self.assertEqual(payload["zone"]["cellIds"], ["0-0", "0-1"])
        self.assertIn("created", payload["message"])

        listing = self.client.get(reverse("zoning:zone-list")).json()
        self.assertEqual([zone["id"] for zone in listing["zones"]], [zone_id])
        self.assertEqual(len(listing["labelLayer"]["features"]), 1)

        response = self.post_json("zoning:zone-delete", {}, zone_id=zone_id)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["zones"], [])
        state = self.client.session["zoning_state"]
        self.assertEqual(state["cellAssignments"], {})

    def test_disconnected_selection_is_rejected(self):
        response = self.create("Split", [(0, 0), (5, 5)])

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "disconnected_selection")
        self.assertNotIn("zoning_state", self.client.session)

    def test_overlapping_zone_is_rejected(self):
        self.create("First", [(0, 0), (0, 1)])

        response = self.create("Second", [(0, 1), (0, 2)])

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "cell_already_assigned")
        self.assertEqual(response.json()["cell"], "0-1")
        state = self.client.session["zoning_state"]
        self.assertEqual(len(state["zones"]), 1)
        self.assertNotIn("0-2", state["cellAssignments"])

    def test_empty_selection_and_blank_name(self):
        empty = self.create("Nothing", [])
        blank = self.create("  ", [(3, 3)])

        self.assertEqual(empty.json()["code"], "empty_selection")
        self.assertEqual(blank.json()["code"], "invalid_name")

    def test_cells_outside_grid_are_rejected(self):
        response = self.create("Far", [(10, 0)])

        self.assertEqual(response.status_code, 400)
        self.assertIn("outside", response.json()["error"])

    def test_invalid_color_is_rejected(self):
        response = self.create("Red", [(0, 0)], color="red")

        self.assertEqual(response.status_code, 400)

    def test_non_integer_coordinates_are_rejected(self):
        for raw in ('Infinity', '1.9', 'true', '"3"'):
            with self.subTest(raw=raw):
                body = '{"name": "Odd", "color": "#ff0000", "cells": [{"row": %s, "col": 0}]}' % raw
                response = self.client.post(
                    reverse("zoning:zone-create"), data=body, content_type="application/json"
                )
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["error"], "Invalid cell coordinates.")

        response = self.client.post(
            reverse("zoning:grid-layer"),
            data='{"cells": [{"row": -Infinity, "col": 0}]}',
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertNotIn("zoning_state", self.client.session)

    def test_delete_unknown_zone(self):
        response = self.post_json("zoning:zone-delete", {}, zone_id="zone-missing")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "zone_not_found")

    def test_layer_highlights_selection(self):
        self.create("Downtown", [(0, 0)])

        response = self.post_json("zoning:grid-layer", {"cells": [{"row": 1, "col": 1}]})

        features = {
            feature["properties"]["id"]: feature["properties"]
            for feature in response.json()["features"]
        }
        self.assertEqual(features["1-1"]["fillColor"], SELECTION_COLOR)
        self.assertEqual(features["0-0"]["fillColor"], "#ff0000")
        self.assertEqual(features["0-0"]["fillOpacity"], 0.3)

    def test_layer_rejects_invalid_json(self):
        response = self.client.post(
            reverse("zoning:grid-layer"), data="{", content_type="application/json"
        )

        self.assertEqual(response.status_code, 400)

    def test_locate_point(self):
        self.create("Downtown", [(0, 0)])

        hit = self.client.get(reverse("zoning:locate-point"), {"lat": 4.5, "lng": -4.5})
        miss = self.client.get(reverse("zoning:locate-point"), {"lat": 0.5, "lng": 0.5})
        bad = self.client.get(reverse("zoning:locate-point"), {"lat": "north"})

        self.assertEqual(hit.json()["zone"]["name"], "Downtown")
        self.assertIsNone(miss.json()["zone"])
        self.assertEqual(bad.status_code, 400)

    def test_corrupt_session_state_starts_empty(self):
        session = self.client.session
        session["zoning_state"] = {"zones": "nope", "cellAssignments": []}
        session.save()

        with self.assertLogs("zoning.storage", level="WARNING"):
            response = self.client.get(reverse("zoning:zone-list"))

        self.assertEqual(response.json()["zones"], [])


@override_settings(ZONING_DEFAULT_GRID=SMALL_GRID, ZONING_STATE_BACKEND="database")
class DatabaseBackedApiTests(TestCase):
    def test_zone_is_shared_through_the_database(self):
        response = self.client.post(
            reverse("zoning:zone-create"),
            data=json.dumps(
                {"name": "Depot", "color": "#123456", "cells": [{"row": 2, "col": 2}]}
            ),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 201)
        blob = StateBlob.objects.get(key="zoning-state")
        self.assertEqual(blob.payload["cellAssignments"], {"2-2": response.json()["zone"]["id"]})


@override_settings(ZONING_DEFAULT_GRID=SMALL_GRID, ZONING_STATE_BACKEND="session")
class GridSettingsTests(TestCase):
    def setUp(self):
        super().setUp()
        self.grid_data = {
            "rows": 4,
            "cols": 6,
            "center_lat": -24.7859,
            "center_lng": -65.4117,
            "cell_width": 0.01,
            "cell_height": 0.01,
        }

    def test_requires_staff(self):
        response = self.client.post(reverse("zoning:update-grid"), self.grid_data)

        self.assertEqual(response.status_code, 302)
        self.assertNotIn("zoning_state", self.client.session)

    def test_staff_can_resize_grid_and_keep_assignments(self):
        user = get_user_model().objects.create_user(
            username="admin", password="pass1234", is_staff=True
        )
        self.client.force_login(user)
        self.client.post(
            reverse("zoning:zone-create"),
            data=json.dumps(
                {"name": "Edge", "color": "#00ff00", "cells": [{"row": 8, "col": 8}]}
            ),
            content_type="application/json",
        )

        response = self.client.post(reverse("zoning:update-grid"), self.grid_data)

        self.assertRedirects(response, reverse("zoning:index"))
        state = self.client.session["zoning_state"]
        self.assertEqual(state["gridConfig"]["rows"], 4)
        self.assertEqual(state["gridConfig"]["cols"], 6)
        self.assertIn("8-8", state["cellAssignments"])
        layer = self.client.get(reverse("zoning:grid-layer")).json()
        self.assertEqual(len(layer["features"]), 24)
        zones = self.client.get(reverse("zoning:zone-list")).json()
        self.assertEqual(len(zones["zones"]), 1)
        self.assertEqual(zones["zoneLayer"]["features"], [])
        self.assertEqual(zones["labelLayer"]["features"], [])

    def test_invalid_grid_is_rejected(self):
        user = get_user_model().objects.create_user(
            username="admin", password="pass1234", is_staff=True
        )
        self.client.force_login(user)

        response = self.client.post(
            reverse("zoning:update-grid"), {**self.grid_data, "cell_width": 0}
        )

        self.assertRedirects(response, reverse("zoning:index"))
        self.assertNotIn("zoning_state", self.client.session)
