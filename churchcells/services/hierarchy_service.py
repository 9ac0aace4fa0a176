# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: District → Zone → HomeCell management.
Coordinates repository writes with validation, metrics and logging.
"""

import re
import time
import uuid
from typing import Any, Dict, List, Optional

from churchcells.core.errors import NotFoundError, ValidationError
from churchcells.core.logging import get_logger
from churchcells.metrics import HIERARCHY_MUTATIONS, HIERARCHY_SIZE
from churchcells.models.domain import DEFAULT_DISTRICTS, WEEKDAYS
from churchcells.repositories.hierarchy_repository import HierarchyRepository

logger = get_logger(__name__)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

_DISTRICT_FIELDS = ("name", "description", "leader_id", "is_active")
_HOME_CELL_FIELDS = _DISTRICT_FIELDS + ("meeting_day", "meeting_time", "meeting_location")


def _make_code(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6].upper()}"


def _require_name(name: Optional[str], label: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError(f"{label} name is required")
    return name


def _normalise_meeting_day(day: Optional[str]) -> Optional[str]:
    if day is None or not day.strip():
        return None
    day = day.strip().capitalize()
    if day not in WEEKDAYS:
        raise ValidationError(f"meeting_day must be one of {WEEKDAYS}")
    return day


def _normalise_meeting_time(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    value = value.strip()
    if len(value) == 8 and value.endswith(":00"):
        value = value[:5]  # accept HH:MM:SS from SQL TIME columns
    if not _TIME_RE.match(value):
        raise ValidationError("meeting_time must be HH:MM (24-hour)")
    return value


def _pick(fields: Dict[str, Any], allowed: tuple) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k in allowed}


class HierarchyService:
    """Business logic for the three-level home-cell hierarchy."""

    def __init__(self, repo: HierarchyRepository) -> None:
        self._repo = repo

    # ── Districts ──

    def create_district(self, name: str, description: Optional[str] = None,
                        leader_id: Optional[str] = None) -> Dict[str, Any]:
        name = _require_name(name, "District")
        district = self._repo.create_district({
            "code": _make_code("DIST"), "name": name, "description": description,
            "leader_id": leader_id, "is_active": True,
        })
        HIERARCHY_MUTATIONS.labels(entity="district", action="create").inc()
        self.refresh_gauges()
        logger.info("District created id=%s name=%s", district["id"], name)
        return district

    def get_district(self, district_id: int) -> Dict[str, Any]:
        district = self._repo.get_district(district_id)
        if district is None:
            raise NotFoundError(f"District {district_id} not found")
        return district

    def list_districts(self) -> List[Dict[str, Any]]:
        return self._repo.list_districts()

    def update_district(self, district_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        changes = _pick(fields, _DISTRICT_FIELDS)
        if "name" in changes:
            changes["name"] = _require_name(changes["name"], "District")
        if "is_active" in changes and changes["is_active"] is None:
            del changes["is_active"]
        if not changes:
            return self.get_district(district_id)
        district = self._repo.update_district(district_id, changes)
        if district is None:
            raise NotFoundError(f"District {district_id} not found")
        HIERARCHY_MUTATIONS.labels(entity="district", action="update").inc()
        logger.info("District updated id=%s fields=%s", district_id, sorted(changes))
        return district

    def delete_district(self, district_id: int) -> bool:
        removed = self._repo.delete_district(district_id)
        if removed is None:
            raise NotFoundError(f"District {district_id} not found")
        HIERARCHY_MUTATIONS.labels(entity="district", action="delete").inc()
        self.refresh_gauges()
        logger.info("District deleted id=%s zones_removed=%d home_cells_removed=%d",
                    district_id, removed["zones"], removed["home_cells"])
        return True

    # ── Zones ──

    def create_zone(self, name: str, district_id: Optional[int],
                    description: Optional[str] = None,
                    leader_id: Optional[str] = None) -> Dict[str, Any]:
        name = _require_name(name, "Zone")
        if district_id is None:
            raise ValidationError("district_id is required")
        if self._repo.get_district(district_id) is None:
            raise ValidationError(f"District {district_id} does not exist")
        zone = self._repo.create_zone({
            "code": _make_code("ZONE"), "district_id": district_id, "name": name,
            "description": description, "leader_id": leader_id, "is_active": True,
        })
        HIERARCHY_MUTATIONS.labels(entity="zone", action="create").inc()
        self.refresh_gauges()
        logger.info("Zone created id=%s district=%s name=%s", zone["id"], district_id, name)
        return zone

    def get_zone(self, zone_id: int) -> Dict[str, Any]:
        zone = self._repo.get_zone(zone_id)
        if zone is None:
            raise NotFoundError(f"Zone {zone_id} not found")
        return zone

    def list_zones(self) -> List[Dict[str, Any]]:
        return self._repo.list_zones()

    def list_zones_by_district(self, district_id: int) -> List[Dict[str, Any]]:
        return self._repo.list_zones(district_id=district_id)

    def update_zone(self, zone_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        changes = _pick(fields, _DISTRICT_FIELDS)
        if "name" in changes:
            changes["name"] = _require_name(changes["name"], "Zone")
        if "is_active" in changes and changes["is_active"] is None:
            del changes["is_active"]
        if not changes:
            return self.get_zone(zone_id)
        zone = self._repo.update_zone(zone_id, changes)
        if zone is None:
            raise NotFoundError(f"Zone {zone_id} not found")
        HIERARCHY_MUTATIONS.labels(entity="zone", action="update").inc()
        logger.info("Zone updated id=%s fields=%s", zone_id, sorted(changes))
        return zone

    def delete_zone(self, zone_id: int) -> bool:
        removed = self._repo.delete_zone(zone_id)
        if removed is None:
            raise NotFoundError(f"Zone {zone_id} not found")
        HIERARCHY_MUTATIONS.labels(entity="zone", action="delete").inc()
        self.refresh_gauges()
        logger.info("Zone deleted id=%s home_cells_removed=%d", zone_id, removed["home_cells"])
        return True

    # ── Home cells ──

    def create_home_cell(self, name: str, zone_id: Optional[int],
                         description: Optional[str] = None,
                         leader_id: Optional[str] = None,
                         meeting_day: Optional[str] = None,
                         meeting_time: Optional[str] = None,
                         meeting_location: Optional[str] = None) -> Dict[str, Any]:
        """Create a cell; ``district_id`` is always derived from the zone."""
        name = _require_name(name, "Home cell")
        if zone_id is None:
            raise ValidationError("zone_id is required")
        zone = self._repo.get_zone(zone_id)
        if zone is None:
            raise ValidationError(f"Zone {zone_id} does not exist")
        if self._repo.name_in_use(name):
            raise ValidationError(f"A home cell named '{name}' already exists")
        cell = self._repo.create_home_cell({
            "code": _make_code("HC"),
            "zone_id": zone_id,
            "district_id": zone["district_id"],
            "name": name,
            "description": description,
            "leader_id": leader_id,
            "meeting_day": _normalise_meeting_day(meeting_day),
            "meeting_time": _normalise_meeting_time(meeting_time),
            "meeting_location": meeting_location,
            "is_active": True,
        })
        HIERARCHY_MUTATIONS.labels(entity="home_cell", action="create").inc()
        self.refresh_gauges()
        logger.info("Home cell created id=%s zone=%s district=%s name=%s",
                    cell["id"], zone_id, zone["district_id"], name)
        return cell

    def get_home_cell(self, home_cell_id: int) -> Dict[str, Any]:
        cell = self._repo.get_home_cell(home_cell_id)
        if cell is None:
            raise NotFoundError(f"Home cell {home_cell_id} not found")
        return cell

    def list_home_cells_by_zone(self, zone_id: int) -> List[Dict[str, Any]]:
        return self._repo.list_home_cells(zone_id=zone_id)

    def list_all_home_cells(self, district_id: Optional[int] = None,
                            zone_id: Optional[int] = None,
                            search: Optional[str] = None,
                            leader_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._repo.list_home_cells(district_id=district_id, zone_id=zone_id,
                                          search=(search or "").strip() or None,
                                          leader_id=leader_id or None)

    def update_home_cell(self, home_cell_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        current = self.get_home_cell(home_cell_id)
        changes = _pick(fields, _HOME_CELL_FIELDS)
        if "name" in changes:
            changes["name"] = _require_name(changes["name"], "Home cell")
            if self._repo.name_in_use(changes["name"], exclude_id=home_cell_id):
                raise ValidationError(f"A home cell named '{changes['name']}' already exists")
        if "meeting_day" in changes:
            changes["meeting_day"] = _normalise_meeting_day(changes["meeting_day"])
        if "meeting_time" in changes:
            changes["meeting_time"] = _normalise_meeting_time(changes["meeting_time"])
        if "is_active" in changes and changes["is_active"] is None:
            del changes["is_active"]
        if not changes:
            return current
        cell = self._repo.update_home_cell(home_cell_id, changes, previous_name=current["name"])
        if cell is None:
            raise NotFoundError(f"Home cell {home_cell_id} not found")
        HIERARCHY_MUTATIONS.labels(entity="home_cell", action="update").inc()
        logger.info("Home cell updated id=%s fields=%s", home_cell_id, sorted(changes))
        return cell

    def delete_home_cell(self, home_cell_id: int, unassign_members: bool = False) -> bool:
        cleared = self._repo.delete_home_cell(home_cell_id, unassign_members=unassign_members)
        if cleared is None:
            raise NotFoundError(f"Home cell {home_cell_id} not found")
        HIERARCHY_MUTATIONS.labels(entity="home_cell", action="delete").inc()
        self.refresh_gauges()
        logger.info("Home cell deleted id=%s members_unassigned=%d", home_cell_id, len(cleared))
        return True

    # ── Hierarchy queries ──

    def get_full_hierarchy(self) -> List[Dict[str, Any]]:
        """Districts → zones → home cells, nested, each level ordered by id."""
        cells_by_zone: Dict[int, List[Dict[str, Any]]] = {}
        for cell in self._repo.list_home_cells():
            cells_by_zone.setdefault(cell["zone_id"], []).append(cell)
        zones_by_district: Dict[int, List[Dict[str, Any]]] = {}
        for zone in self._repo.list_zones():
            zone = dict(zone, homecells=cells_by_zone.get(zone["id"], []))
            zones_by_district.setdefault(zone["district_id"], []).append(zone)
        return [
            dict(d, zones=zones_by_district.get(d["id"], []))
            for d in self._repo.list_districts()
        ]

    def delete_impact_district(self, district_id: int) -> Dict[str, int]:
        self.get_district(district_id)
        return self._repo.district_impact(district_id)

    def delete_impact_zone(self, zone_id: int) -> Dict[str, int]:
        self.get_zone(zone_id)
        return self._repo.zone_impact(zone_id)

    def delete_impact_home_cell(self, home_cell_id: int) -> Dict[str, int]:
        self.get_home_cell(home_cell_id)
        return self._repo.home_cell_impact(home_cell_id)

    # ── Seed / gauges ──

    def seed_default_districts(self) -> int:
        """Insert the default districts when none exist yet."""
        if self._repo.list_districts():
            return 0
        for code, name, description in DEFAULT_DISTRICTS:
            self._repo.create_district({
                "code": code, "name": name, "description": description, "is_active": True,
            })
        self.refresh_gauges()
        logger.info("Seeded %d default districts", len(DEFAULT_DISTRICTS))
        return len(DEFAULT_DISTRICTS)

    def refresh_gauges(self) -> None:
        for level, count in self._repo.count_levels().items():
            HIERARCHY_SIZE.labels(level=level).set(count)
