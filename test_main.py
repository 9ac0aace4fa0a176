# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Home Cell Service — API Tests
=============================
Run:  pytest test_main.py -v --cov=churchcells --cov-report=term-missing

Runs against an in-memory SQLite database; the schema is rebuilt before
every test.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEFAULT_DISTRICTS"] = "false"

from unittest.mock import MagicMock, patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from churchcells.core.database import engine, reset_schema  # noqa: E402
from churchcells.core.dependencies import get_hierarchy_service  # noqa: E402
from churchcells.middleware import normalize_path  # noqa: E402
from churchcells.models.domain import DEFAULT_DISTRICTS  # noqa: E402
from main import app  # noqa: E402

client = TestClient(app)
API = "/api/homecells"


@pytest.fixture(autouse=True)
def reset_db():
    reset_schema(engine)
    yield


# ── Helpers ──────────────────────────────────────────────────────────────
def _district(name="Central", **extra):
    r = client.post(f"{API}/districts", json={"name": name, **extra})
    assert r.status_code == 201, r.text
    return r.json()


def _zone(district_id, name="A1", **extra):
    r = client.post(f"{API}/zones", json={"name": name, "district_id": district_id, **extra})
    assert r.status_code == 201, r.text
    return r.json()


def _cell(zone_id, name="Zion", **extra):
    r = client.post(f"{API}/homecells", json={"name": name, "zone_id": zone_id, **extra})
    assert r.status_code == 201, r.text
    return r.json()


def _member(full_name="John Doe", **extra):
    r = client.post("/api/members", json={"full_name": full_name, **extra})
    assert r.status_code == 201, r.text
    return r.json()


def _central_a1_zion():
    d = _district("Central")
    z = _zone(d["id"], "A1")
    c = _cell(z["id"], "Zion")
    return d, z, c


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH & METRICS
# ═══════════════════════════════════════════════════════════════════════════
class TestHealth:
    def test_health_ok(self):
        r = client.get("/health")
        assert r.status_code == 200
        d = r.json()
        assert d["status"] == "ok"
        assert d["service"] == "homecell-service"
        assert d["version"] == "1.0.0"

    def test_readiness_ok(self):
        r = client.get("/health/ready")
        assert r.status_code == 200
        assert r.json()["database"] == "connected"

    def test_readiness_fails_when_db_down(self):
        broken = MagicMock()
        broken.verify_connection.side_effect = Exception("boom")
        with patch("churchcells.controllers.system_controller.get_hierarchy_repo",
                   return_value=broken):
            r = client.get("/health/ready")
        assert r.status_code == 503
        assert "boom" in r.json()["detail"]

    def test_metrics_endpoint(self):
        client.get(f"{API}/districts")
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "homecell_requests_total" in r.text

    def test_request_id_propagated(self):
        r = client.get(f"{API}/districts", headers={"X-Request-ID": "req-42"})
        assert r.headers["X-Request-ID"] == "req-42"

    def test_request_id_generated(self):
        r = client.get(f"{API}/districts")
        assert r.headers.get("X-Request-ID")

    @pytest.mark.parametrize("path,expected", [
        ("/api/homecells/districts/12/zones", "/api/homecells/districts/{param}/zones"),
        ("/api/members/6f1c-uuid", "/api/members/{param}"),
        ("/api/homecells/homecells/3/members/abc", "/api/homecells/homecells/{param}/members/{param}"),
        ("/", "/"),
    ])
    def test_metric_paths_collapse_ids(self, path, expected):
        assert normalize_path(path) == expected


# ═══════════════════════════════════════════════════════════════════════════
# DISTRICTS
# ═══════════════════════════════════════════════════════════════════════════
class TestDistricts:
    def test_create_assigns_code_and_defaults(self):
        d = _district("Central", description="CBD")
        assert d["code"].startswith("DIST-")
        assert d["is_active"] is True
        assert d["description"] == "CBD"

    def test_name_is_trimmed(self):
        assert _district("  Eastlands  ")["name"] == "Eastlands"

    def test_blank_name_400(self):
        r = client.post(f"{API}/districts", json={"name": "   "})
        assert r.status_code == 400
        assert r.json()["detail"] == "District name is required"

    def test_missing_name_400(self):
        assert client.post(f"{API}/districts", json={}).status_code == 400

    def test_list_ordered_by_id(self):
        _district("B")
        _district("A")
        assert [d["name"] for d in client.get(f"{API}/districts").json()] == ["B", "A"]

    def test_get_not_found(self):
        assert client.get(f"{API}/districts/999").status_code == 404

    def test_update_merges_fields(self):
        d = _district("Central", description="old")
        r = client.put(f"{API}/districts/{d['id']}", json={"leader_id": "L-1"})
        assert r.status_code == 200
        assert r.json()["leader_id"] == "L-1"
        assert r.json()["description"] == "old"
        assert r.json()["name"] == "Central"

    def test_update_blank_name_400(self):
        d = _district()
        assert client.put(f"{API}/districts/{d['id']}", json={"name": ""}).status_code == 400

    def test_update_not_found(self):
        assert client.put(f"{API}/districts/999", json={"name": "X"}).status_code == 404

    def test_deactivate(self):
        d = _district()
        r = client.put(f"{API}/districts/{d['id']}", json={"is_active": False})
        assert r.json()["is_active"] is False

    def test_delete(self):
        d = _district()
        r = client.delete(f"{API}/districts/{d['id']}")
        assert r.status_code == 200
        assert r.json() == {"status": "deleted", "district_id": d["id"]}
        assert client.get(f"{API}/districts/{d['id']}").status_code == 404

    def test_delete_not_found(self):
        assert client.delete(f"{API}/districts/999").status_code == 404

    def test_zones_by_district(self):
        d1, d2 = _district("One"), _district("Two")
        _zone(d1["id"], "A1")
        _zone(d2["id"], "B1")
        r = client.get(f"{API}/districts/{d1['id']}/zones")
        assert [z["name"] for z in r.json()] == ["A1"]


# ═══════════════════════════════════════════════════════════════════════════
# ZONES
# ═══════════════════════════════════════════════════════════════════════════
class TestZones:
    def test_create(self):
        d = _district()
        z = _zone(d["id"], "A1")
        assert z["code"].startswith("ZONE-")
        assert z["district_id"] == d["id"]

    def test_missing_district_400(self):
        r = client.post(f"{API}/zones", json={"name": "A1"})
        assert r.status_code == 400

    def test_unknown_district_400(self):
        r = client.post(f"{API}/zones", json={"name": "A1", "district_id": 999})
        assert r.status_code == 400
        assert "does not exist" in r.json()["detail"]

    def test_blank_name_400(self):
        d = _district()
        r = client.post(f"{API}/zones", json={"name": " ", "district_id": d["id"]})
        assert r.json()["detail"] == "Zone name is required"

    def test_update_and_get(self):
        z = _zone(_district()["id"])
        client.put(f"{API}/zones/{z['id']}", json={"name": "A2"})
        assert client.get(f"{API}/zones/{z['id']}").json()["name"] == "A2"

    def test_get_not_found(self):
        assert client.get(f"{API}/zones/999").status_code == 404

    def test_delete_cascades_to_home_cells(self):
        _, z, c = _central_a1_zion()
        r = client.delete(f"{API}/zones/{z['id']}")
        assert r.json() == {"status": "deleted", "zone_id": z["id"]}
        assert client.get(f"{API}/homecells/{c['id']}").status_code == 404

    def test_home_cells_by_zone(self):
        _, z, _ = _central_a1_zion()
        r = client.get(f"{API}/zones/{z['id']}/homecells")
        assert [c["name"] for c in r.json()] == ["Zion"]


# ═══════════════════════════════════════════════════════════════════════════
# HOME CELLS
# ═══════════════════════════════════════════════════════════════════════════
class TestHomeCells:
    def test_create_derives_district_from_zone(self):
        d, z, c = _central_a1_zion()
        assert c["district_id"] == d["id"]
        assert c["zone_id"] == z["id"]
        assert c["code"].startswith("HC-")
        assert c["member_count"] == 0

    def test_client_district_id_is_ignored(self):
        d = _district("Central")
        other = _district("Other")
        z = _zone(d["id"])
        c = _cell(z["id"], "Zion", district_id=other["id"])
        assert c["district_id"] == d["id"]

    def test_missing_zone_400(self):
        r = client.post(f"{API}/homecells", json={"name": "Zion"})
        assert r.status_code == 400

    def test_unknown_zone_400(self):
        r = client.post(f"{API}/homecells", json={"name": "Zion", "zone_id": 999})
        assert r.status_code == 400

    def test_blank_name_400(self):
        z = _zone(_district()["id"])
        r = client.post(f"{API}/homecells", json={"name": "", "zone_id": z["id"]})
        assert r.json()["detail"] == "Home cell name is required"

    def test_duplicate_name_case_insensitive_400(self):
        _, z, _ = _central_a1_zion()
        r = client.post(f"{API}/homecells", json={"name": "zion", "zone_id": z["id"]})
        assert r.status_code == 400
        assert "already exists" in r.json()["detail"]

    def test_meeting_fields_normalised(self):
        z = _zone(_district()["id"])
        c = _cell(z["id"], "Zion", meeting_day="wednesday", meeting_time="18:30:00",
                  meeting_location="Church hall")
        assert c["meeting_day"] == "Wednesday"
        assert c["meeting_time"] == "18:30"
        assert c["meeting_location"] == "Church hall"

    @pytest.mark.parametrize("field,value", [
        ("meeting_day", "Funday"),
        ("meeting_time", "25:00"),
        ("meeting_time", "6pm"),
    ])
    def test_invalid_meeting_fields_400(self, field, value):
        z = _zone(_district()["id"])
        r = client.post(f"{API}/homecells",
                        json={"name": "Zion", "zone_id": z["id"], field: value})
        assert r.status_code == 400

    def test_list_filters(self):
        d1, d2 = _district("One"), _district("Two")
        z1, z2 = _zone(d1["id"], "A1"), _zone(d2["id"], "B1")
        _cell(z1["id"], "Zion")
        _cell(z1["id"], "Bethel")
        _cell(z2["id"], "Zionville")
        assert len(client.get(f"{API}/homecells").json()) == 3
        by_district = client.get(f"{API}/homecells", params={"district_id": d1["id"]}).json()
        assert {c["name"] for c in by_district} == {"Zion", "Bethel"}
        by_zone = client.get(f"{API}/homecells", params={"zone_id": z2["id"]}).json()
        assert [c["name"] for c in by_zone] == ["Zionville"]
        search = client.get(f"{API}/homecells", params={"search": "ZION"}).json()
        assert {c["name"] for c in search} == {"Zion", "Zionville"}

    @pytest.mark.parametrize("term,expected", [
        ("_", ["Grace_Hill"]),
        ("%", ["100% Faith"]),
        ("\\", ["Back\\Slash"]),
        ("e_h", ["Grace_Hill"]),
    ])
    def test_search_matches_wildcard_characters_literally(self, term, expected):
        _, z, _ = _central_a1_zion()
        for name in ("Bethel", "Grace_Hill", "100% Faith", "Back\\Slash"):
            _cell(z["id"], name)
        r = client.get(f"{API}/homecells", params={"search": term})
        assert [c["name"] for c in r.json()] == expected

    def test_list_filters_by_leader(self):
        _, z, _ = _central_a1_zion()
        _cell(z["id"], "Bethel", leader_id="L-7")
        _cell(z["id"], "Shiloh", leader_id="L-8")
        r = client.get(f"{API}/homecells", params={"leader_id": "L-7"})
        assert [c["name"] for c in r.json()] == ["Bethel"]

    def test_rename_rewrites_member_references(self):
        _, _, c = _central_a1_zion()
        m = _member(home_cell="Zion")
        r = client.put(f"{API}/homecells/{c['id']}", json={"name": "New Zion"})
        assert r.status_code == 200
        assert r.json()["member_count"] == 1
        assert client.get(f"/api/members/{m['id']}").json()["home_cell"] == "New Zion"

    def test_rename_to_existing_name_400(self):
        _, z, c = _central_a1_zion()
        _cell(z["id"], "Bethel")
        r = client.put(f"{API}/homecells/{c['id']}", json={"name": "BETHEL"})
        assert r.status_code == 400

    def test_update_not_found(self):
        assert client.put(f"{API}/homecells/999", json={"name": "X"}).status_code == 404

    def test_delete_leaves_member_reference_by_default(self):
        _, _, c = _central_a1_zion()
        m = _member(home_cell="Zion")
        r = client.delete(f"{API}/homecells/{c['id']}")
        assert r.json() == {"status": "deleted", "home_cell_id": c["id"]}
        assert client.get(f"/api/members/{m['id']}").json()["home_cell"] == "Zion"

    def test_delete_with_unassign_members(self):
        _, _, c = _central_a1_zion()
        m = _member(home_cell="Zion")
        client.delete(f"{API}/homecells/{c['id']}", params={"unassign_members": "true"})
        assert client.get(f"/api/members/{m['id']}").json()["home_cell"] is None
        history = client.get(f"{API}/members/{m['id']}/history").json()
        assert history[-1]["action"] == "unassigned"
        assert history[-1]["from_home_cell"] == "Zion"

    def test_delete_not_found(self):
        assert client.delete(f"{API}/homecells/999").status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# CASCADE IMPACT
# ═══════════════════════════════════════════════════════════════════════════
class TestCascade:
    def test_district_impact_then_delete(self):
        d, z, c = _central_a1_zion()
        _member("John Doe", home_cell="Zion")
        r = client.get(f"{API}/districts/{d['id']}/delete-impact")
        assert r.json() == {"zones": 1, "home_cells": 1, "orphaned_members": 1}
        client.delete(f"{API}/districts/{d['id']}")
        assert client.get(f"{API}/zones/{z['id']}").status_code == 404
        assert client.get(f"{API}/homecells/{c['id']}").status_code == 404
        assert client.get(f"{API}/hierarchy/full").json() == []

    def test_central_scenario_leaves_nothing_behind(self):
        d = _district("Central")
        z = _zone(d["id"], "A1")
        zion = _cell(z["id"], "Zion", meeting_day="Wednesday")
        listed = client.get(f"{API}/zones/{z['id']}/homecells").json()
        assert [c["id"] for c in listed] == [zion["id"]]

        assert client.delete(f"{API}/districts/{d['id']}").status_code == 200
        assert client.get(f"{API}/districts/{d['id']}/zones").json() == []
        assert client.get(f"{API}/zones/{z['id']}/homecells").json() == []
        assert client.get(f"{API}/districts/{d['id']}").status_code == 404

    def test_zone_impact(self):
        _, z, _ = _central_a1_zion()
        _cell(z["id"], "Bethel")
        r = client.get(f"{API}/zones/{z['id']}/delete-impact")
        assert r.json() == {"zones": 1, "home_cells": 2, "orphaned_members": 0}

    def test_home_cell_impact(self):
        _, _, c = _central_a1_zion()
        _member("A", home_cell="Zion")
        _member("B", home_cell="Zion")
        r = client.get(f"{API}/homecells/{c['id']}/delete-impact")
        assert r.json() == {"zones": 0, "home_cells": 1, "orphaned_members": 2}

    @pytest.mark.parametrize("path", [
        "/districts/999/delete-impact", "/zones/999/delete-impact", "/homecells/999/delete-impact",
    ])
    def test_impact_not_found(self, path):
        assert client.get(f"{API}{path}").status_code == 404

    def test_sibling_district_untouched(self):
        d, _, _ = _central_a1_zion()
        other = _district("Other")
        oz = _zone(other["id"], "B1")
        oc = _cell(oz["id"], "Bethel")
        client.delete(f"{API}/districts/{d['id']}")
        assert client.get(f"{API}/homecells/{oc['id']}").status_code == 200


# ═══════════════════════════════════════════════════════════════════════════
# FULL HIERARCHY
# ═══════════════════════════════════════════════════════════════════════════
class TestFullHierarchy:
    def test_nested_shape(self):
        d, z, c = _central_a1_zion()
        _member(home_cell="Zion")
        tree = client.get(f"{API}/hierarchy/full").json()
        assert tree[0]["id"] == d["id"]
        assert tree[0]["zones"][0]["id"] == z["id"]
        cell = tree[0]["zones"][0]["homecells"][0]
        assert cell["id"] == c["id"]
        assert cell["member_count"] == 1

    def test_empty_zone_has_empty_cells(self):
        d = _district()
        _zone(d["id"])
        tree = client.get(f"{API}/hierarchy/full").json()
        assert tree[0]["zones"][0]["homecells"] == []


# ═══════════════════════════════════════════════════════════════════════════
# MEMBERS & ASSIGNMENT
# ═══════════════════════════════════════════════════════════════════════════
class TestMembers:
    def test_create_generates_member_number(self):
        m = _member()
        assert m["member_id"].startswith("MBR-")
        assert m["membership_status"] == "Active"
        assert m["home_cell"] is None

    def test_blank_full_name_422(self):
        assert client.post("/api/members", json={"full_name": "  "}).status_code == 422

    def test_unknown_home_cell_400(self):
        r = client.post("/api/members", json={"full_name": "A", "home_cell": "Nowhere"})
        assert r.status_code == 400

    def test_duplicate_member_number_400(self):
        _member("A", member_id="M-1")
        r = client.post("/api/members", json={"full_name": "B", "member_id": "M-1"})
        assert r.status_code == 400

    def test_get_not_found(self):
        assert client.get("/api/members/nope").status_code == 404

    def test_list_unassigned_filter(self):
        _central_a1_zion()
        _member("A", home_cell="Zion")
        _member("B")
        names = [m["full_name"] for m in client.get("/api/members", params={"unassigned": "true"}).json()]
        assert names == ["B"]
        assert len(client.get("/api/members").json()) == 2


class TestAssignment:
    def test_assign_john_doe_to_zion(self):
        _, _, c = _central_a1_zion()
        m = _member("John Doe")
        r = client.post(f"{API}/homecells/{c['id']}/members/{m['id']}")
        assert r.status_code == 200
        assert r.json()["home_cell"] == "Zion"
        members = client.get(f"{API}/homecells/{c['id']}/members").json()
        assert [x["full_name"] for x in members] == ["John Doe"]
        assert client.get(f"{API}/homecells/{c['id']}").json()["member_count"] == 1
        history = client.get(f"{API}/members/{m['id']}/history").json()
        assert history[0]["action"] == "assigned"
        assert history[0]["to_home_cell"] == "Zion"

    def test_assign_again_records_transfer(self):
        _, z, c = _central_a1_zion()
        other = _cell(z["id"], "Bethel")
        m = _member(home_cell="Zion")
        client.post(f"{API}/homecells/{other['id']}/members/{m['id']}", json={"notes": "moved"})
        history = client.get(f"{API}/members/{m['id']}/history").json()
        assert history[-1]["action"] == "transferred"
        assert history[-1]["from_home_cell"] == "Zion"
        assert history[-1]["notes"] == "moved"
        assert client.get(f"{API}/homecells/{c['id']}").json()["member_count"] == 0

    def test_assign_unknown_cell_404(self):
        m = _member()
        assert client.post(f"{API}/homecells/999/members/{m['id']}").status_code == 404

    def test_assign_unknown_member_404(self):
        _, _, c = _central_a1_zion()
        assert client.post(f"{API}/homecells/{c['id']}/members/nope").status_code == 404

    def test_transfer_by_name(self):
        _, z, _ = _central_a1_zion()
        _cell(z["id"], "Bethel")
        m = _member(home_cell="Zion")
        r = client.put(f"{API}/members/{m['id']}/transfer", json={"home_cell_name": "Bethel"})
        assert r.status_code == 200
        assert r.json()["home_cell"] == "Bethel"

    def test_transfer_to_unknown_cell_400(self):
        m = _member()
        r = client.put(f"{API}/members/{m['id']}/transfer", json={"home_cell_name": "Nowhere"})
        assert r.status_code == 400

    def test_transfer_unknown_member_404(self):
        _central_a1_zion()
        r = client.put(f"{API}/members/nope/transfer", json={"home_cell_name": "Zion"})
        assert r.status_code == 404

    def test_unassign(self):
        _central_a1_zion()
        m = _member(home_cell="Zion")
        r = client.delete(f"{API}/members/{m['id']}/assignment")
        assert r.status_code == 200
        assert r.json()["home_cell"] is None
        unassigned = client.get(f"{API}/members/unassigned").json()
        assert [x["id"] for x in unassigned] == [m["id"]]

    def test_unassigned_and_cell_members_partition_directory(self):
        _, z, zion = _central_a1_zion()
        bethel = _cell(z["id"], "Bethel")
        shiloh = _cell(z["id"], "Shiloh")
        _member("A", home_cell="Zion")
        _member("B", home_cell="Zion", membership_status="Inactive")
        _member("C", home_cell="Bethel")
        _member("D")
        moved = _member("E")
        client.post(f"{API}/homecells/{bethel['id']}/members/{moved['id']}")

        total = len(client.get("/api/members").json())
        unassigned = client.get(f"{API}/members/unassigned").json()
        per_cell = [client.get(f"{API}/homecells/{c['id']}/members").json()
                    for c in (zion, bethel, shiloh)]
        assert [len(m) for m in per_cell] == [2, 2, 0]
        assert len(unassigned) + sum(len(m) for m in per_cell) == total == 5
        ids = [x["id"] for x in unassigned] + [x["id"] for m in per_cell for x in m]
        assert len(set(ids)) == total

    def test_active_only_members(self):
        _, _, c = _central_a1_zion()
        _member("A", home_cell="Zion")
        _member("B", home_cell="Zion", membership_status="Inactive")
        r = client.get(f"{API}/homecells/{c['id']}/members", params={"active_only": "true"})
        assert [m["full_name"] for m in r.json()] == ["A"]

    def test_history_unknown_member_404(self):
        assert client.get(f"{API}/members/nope/history").status_code == 404


class TestAutoAssign:
    def test_round_robin_over_zone_cells(self):
        _, z, _ = _central_a1_zion()
        _cell(z["id"], "Bethel")
        for name in ("A", "B", "C"):
            _member(name)
        r = client.post(f"{API}/auto-assign-members", json={"zone_id": z["id"]})
        assert r.status_code == 200
        assert r.json()["assigned_count"] == 3
        cells = {c["name"]: c["member_count"]
                 for c in client.get(f"{API}/zones/{z['id']}/homecells").json()}
        assert cells == {"Zion": 2, "Bethel": 1}
        assert client.get(f"{API}/members/unassigned").json() == []

    def test_missing_zone_id_400(self):
        r = client.post(f"{API}/auto-assign-members", json={})
        assert r.status_code == 400
        assert r.json()["detail"] == "Zone ID is required"

    def test_unknown_zone_404(self):
        assert client.post(f"{API}/auto-assign-members", json={"zone_id": 999}).status_code == 404

    def test_zone_without_cells_400(self):
        z = _zone(_district()["id"])
        _member()
        r = client.post(f"{API}/auto-assign-members", json={"zone_id": z["id"]})
        assert r.status_code == 400
        assert r.json()["detail"] == "No homecells found for this zone"


# ═══════════════════════════════════════════════════════════════════════════
# STATS, SUMMARIES & OVERVIEW
# ═══════════════════════════════════════════════════════════════════════════
class TestStats:
    def test_active_inactive_counts(self):
        _, _, c = _central_a1_zion()
        _member("A", home_cell="Zion", gender="Male")
        _member("B", home_cell="Zion", gender="Female")
        _member("C", home_cell="Zion", gender="Female", membership_status="Inactive")
        s = client.get(f"{API}/homecells/{c['id']}/stats").json()
        assert s["total_members"] == 3
        assert s["active_members"] == 2
        assert s["inactive_members"] == 1
        assert s["male_members"] == 1
        assert s["female_members"] == 2
        assert s["female_percentage"] == 67
        assert s["active_percentage"] == 67

    def test_empty_cell_stats_are_zero(self):
        _, _, c = _central_a1_zion()
        s = client.get(f"{API}/homecells/{c['id']}/stats").json()
        assert s["total_members"] == 0
        assert s["active_percentage"] == 0

    def test_home_cell_summary(self):
        _, _, c = _central_a1_zion()
        _member(home_cell="Zion")
        s = client.get(f"{API}/homecells/{c['id']}/summary").json()
        assert s["home_cell_name"] == "Zion"
        assert s["total_members"] == 1

    def test_district_summary(self):
        d, z, _ = _central_a1_zion()
        _cell(z["id"], "Bethel")
        _member("A", home_cell="Zion")
        _member("B", home_cell="Bethel", membership_status="Inactive")
        s = client.get(f"{API}/districts/{d['id']}/summary").json()
        assert s == {
            "district_id": d["id"], "district_name": "Central", "zones": 1,
            "home_cells": 2, "total_members": 2, "active_members": 1, "inactive_members": 1,
        }

    def test_summary_not_found(self):
        assert client.get(f"{API}/districts/999/summary").status_code == 404
        assert client.get(f"{API}/homecells/999/summary").status_code == 404

    def test_overview_with_no_members(self):
        r = client.get(f"{API}/assignments/overview").json()
        assert r == {"total_members": 0, "assigned": 0, "unassigned": 0, "assignment_rate": 0}

    def test_overview(self):
        _central_a1_zion()
        _member("A", home_cell="Zion")
        _member("B")
        _member("C")
        r = client.get(f"{API}/assignments/overview").json()
        assert r["assigned"] == 1
        assert r["unassigned"] == 2
        assert r["assignment_rate"] == 33


# ═══════════════════════════════════════════════════════════════════════════
# EXPORTS
# ═══════════════════════════════════════════════════════════════════════════
class TestExports:
    def test_home_cell_csv(self):
        _, _, c = _central_a1_zion()
        _member("John Doe", home_cell="Zion", phone="0700")
        r = client.get(f"{API}/homecells/{c['id']}/export", params={"format": "csv"})
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/csv")
        assert 'filename="homecell-Zion-members.csv"' in r.headers["content-disposition"]
        assert "John Doe" in r.text

    def test_home_cell_excel(self):
        _, _, c = _central_a1_zion()
        r = client.get(f"{API}/homecells/{c['id']}/export", params={"format": "excel"})
        assert r.status_code == 200
        assert r.content[:2] == b"PK"
        assert "homecell-Zion.xlsx" in r.headers["content-disposition"]

    def test_home_cell_pdf_default(self):
        _, _, c = _central_a1_zion()
        r = client.get(f"{API}/homecells/{c['id']}/export")
        assert r.status_code == 200
        assert r.content.startswith(b"%PDF")

    def test_bad_format_400(self):
        _, _, c = _central_a1_zion()
        r = client.get(f"{API}/homecells/{c['id']}/export", params={"format": "docx"})
        assert r.status_code == 400

    def test_export_not_found(self):
        assert client.get(f"{API}/homecells/999/export").status_code == 404

    def test_district_csv_lists_zones(self):
        d, _, _ = _central_a1_zion()
        r = client.get(f"{API}/districts/{d['id']}/export", params={"format": "csv"})
        assert r.status_code == 200
        assert "A1" in r.text

    def test_district_pdf(self):
        d, _, _ = _central_a1_zion()
        r = client.get(f"{API}/districts/{d['id']}/export", params={"format": "pdf"})
        assert r.content.startswith(b"%PDF")

    def test_district_excel_not_supported(self):
        d = _district()
        r = client.get(f"{API}/districts/{d['id']}/export", params={"format": "excel"})
        assert r.status_code == 400


# ═══════════════════════════════════════════════════════════════════════════
# SEEDING
# ═══════════════════════════════════════════════════════════════════════════
class TestSeed:
    def test_seed_only_when_empty(self):
        service = get_hierarchy_service()
        assert service.seed_default_districts() == len(DEFAULT_DISTRICTS)
        assert service.seed_default_districts() == 0
        names = [d["name"] for d in client.get(f"{API}/districts").json()]
        assert names[0] == "Nairobi Central"
        assert len(names) == len(DEFAULT_DISTRICTS)
