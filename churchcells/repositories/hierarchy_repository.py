# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for districts, zones and home cells. NO business rules here."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, insert, select, text, update
from sqlalchemy.engine import Engine

from churchcells.core.database import (
    districts, homecell_assignments, homecells, members, zones,
)
from churchcells.core.logging import get_logger

logger = get_logger(__name__)


def _like_pattern(term: str) -> str:
    """Lower-cased `%term%` with LIKE wildcards in `term` matched literally."""
    escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _iso(value) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def _district_dict(row) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "code": row["code"],
        "name": row["name"],
        "description": row["description"],
        "leader_id": row["leader_id"],
        "is_active": bool(row["is_active"]),
        "created_at": _iso(row["created_at"]),
        "updated_at": _iso(row["updated_at"]),
    }


def _zone_dict(row) -> Dict[str, Any]:
    data = _district_dict(row)
    data["district_id"] = row["district_id"]
    return data


def _home_cell_dict(row) -> Dict[str, Any]:
    data = _zone_dict(row)
    data.update({
        "zone_id": row["zone_id"],
        "meeting_day": row["meeting_day"],
        "meeting_time": row["meeting_time"],
        "meeting_location": row["meeting_location"],
        "member_count": row["member_count"] or 0,
    })
    return data


def _member_count_column():
    return (
        select(func.count())
        .select_from(members)
        .where(members.c.home_cell == homecells.c.name)
        .scalar_subquery()
        .label("member_count")
    )


class HierarchyRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Districts ──────────────────────────────────────────────────────

    def create_district(self, values: Dict[str, Any]) -> Dict[str, Any]:
        with self._engine.begin() as conn:
            result = conn.execute(insert(districts).values(**values))
            new_id = result.inserted_primary_key[0]
            row = conn.execute(
                select(districts).where(districts.c.id == new_id)
            ).mappings().first()
        return _district_dict(row)

    def get_district(self, district_id: int) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(districts).where(districts.c.id == district_id)
            ).mappings().first()
        return _district_dict(row) if row else None

    def list_districts(self) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(select(districts).order_by(districts.c.id)).mappings().all()
        return [_district_dict(r) for r in rows]

    def update_district(self, district_id: int, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._engine.begin() as conn:
            result = conn.execute(
                update(districts)
                .where(districts.c.id == district_id)
                .values(**fields, updated_at=datetime.now(timezone.utc))
            )
            if result.rowcount == 0:
                return None
            row = conn.execute(
                select(districts).where(districts.c.id == district_id)
            ).mappings().first()
        return _district_dict(row)

    def delete_district(self, district_id: int) -> Optional[Dict[str, int]]:
        """Delete a district with its zones and home cells in one transaction."""
        with self._engine.begin() as conn:
            exists = conn.execute(
                select(districts.c.id).where(districts.c.id == district_id)
            ).first()
            if not exists:
                return None
            zone_ids = [
                r[0] for r in conn.execute(
                    select(zones.c.id).where(zones.c.district_id == district_id)
                )
            ]
            cond = homecells.c.district_id == district_id
            if zone_ids:
                cond = cond | homecells.c.zone_id.in_(zone_ids)
            cells_removed = conn.execute(delete(homecells).where(cond)).rowcount
            zones_removed = conn.execute(
                delete(zones).where(zones.c.district_id == district_id)
            ).rowcount
            conn.execute(delete(districts).where(districts.c.id == district_id))
        return {"zones": zones_removed, "home_cells": cells_removed}

    # ── Zones ──────────────────────────────────────────────────────────

    def create_zone(self, values: Dict[str, Any]) -> Dict[str, Any]:
        with self._engine.begin() as conn:
            result = conn.execute(insert(zones).values(**values))
            new_id = result.inserted_primary_key[0]
            row = conn.execute(select(zones).where(zones.c.id == new_id)).mappings().first()
        return _zone_dict(row)

    def get_zone(self, zone_id: int) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(select(zones).where(zones.c.id == zone_id)).mappings().first()
        return _zone_dict(row) if row else None

    def list_zones(self, district_id: Optional[int] = None) -> List[Dict[str, Any]]:
        query = select(zones).order_by(zones.c.id)
        if district_id is not None:
            query = query.where(zones.c.district_id == district_id)
        with self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [_zone_dict(r) for r in rows]

    def update_zone(self, zone_id: int, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._engine.begin() as conn:
            result = conn.execute(
                update(zones)
                .where(zones.c.id == zone_id)
                .values(**fields, updated_at=datetime.now(timezone.utc))
            )
            if result.rowcount == 0:
                return None
            row = conn.execute(select(zones).where(zones.c.id == zone_id)).mappings().first()
        return _zone_dict(row)

    def delete_zone(self, zone_id: int) -> Optional[Dict[str, int]]:
        with self._engine.begin() as conn:
            exists = conn.execute(select(zones.c.id).where(zones.c.id == zone_id)).first()
            if not exists:
                return None
            cells_removed = conn.execute(
                delete(homecells).where(homecells.c.zone_id == zone_id)
            ).rowcount
            conn.execute(delete(zones).where(zones.c.id == zone_id))
        return {"zones": 1, "home_cells": cells_removed}

    # ── Home cells ─────────────────────────────────────────────────────

    def create_home_cell(self, values: Dict[str, Any]) -> Dict[str, Any]:
        with self._engine.begin() as conn:
            result = conn.execute(insert(homecells).values(**values))
            new_id = result.inserted_primary_key[0]
        return self.get_home_cell(new_id)

    def get_home_cell(self, home_cell_id: int) -> Optional[Dict[str, Any]]:
        query = (
            select(homecells, _member_count_column())
            .where(homecells.c.id == home_cell_id)
        )
        with self._engine.connect() as conn:
            row = conn.execute(query).mappings().first()
        return _home_cell_dict(row) if row else None

    def get_home_cell_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        query = (
            select(homecells, _member_count_column())
            .where(homecells.c.name == name)
            .order_by(homecells.c.id)
        )
        with self._engine.connect() as conn:
            row = conn.execute(query).mappings().first()
        return _home_cell_dict(row) if row else None

    def name_in_use(self, name: str, exclude_id: Optional[int] = None) -> bool:
        query = select(homecells.c.id).where(func.lower(homecells.c.name) == name.lower())
        if exclude_id is not None:
            query = query.where(homecells.c.id != exclude_id)
        with self._engine.connect() as conn:
            return conn.execute(query).first() is not None

    def list_home_cells(self, district_id: Optional[int] = None,
                        zone_id: Optional[int] = None,
                        search: Optional[str] = None,
                        leader_id: Optional[str] = None) -> List[Dict[str, Any]]:
        query = select(homecells, _member_count_column()).order_by(homecells.c.id)
        if district_id is not None:
            query = query.where(homecells.c.district_id == district_id)
        if zone_id is not None:
            query = query.where(homecells.c.zone_id == zone_id)
        if leader_id is not None:
            query = query.where(homecells.c.leader_id == leader_id)
        if search:
            query = query.where(
                func.lower(homecells.c.name).like(_like_pattern(search), escape="\\")
            )
        with self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [_home_cell_dict(r) for r in rows]

    def update_home_cell(self, home_cell_id: int, fields: Dict[str, Any],
                         previous_name: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Merge fields; a rename also rewrites member references in the same transaction."""
        now = datetime.now(timezone.utc)
        with self._engine.begin() as conn:
            result = conn.execute(
                update(homecells)
                .where(homecells.c.id == home_cell_id)
                .values(**fields, updated_at=now)
            )
            if result.rowcount == 0:
                return None
            new_name = fields.get("name")
            if previous_name and new_name and new_name != previous_name:
                moved = conn.execute(
                    update(members)
                    .where(members.c.home_cell == previous_name)
                    .values(home_cell=new_name, updated_at=now)
                ).rowcount
                logger.info("Home cell renamed %r -> %r, %d member references rewritten",
                            previous_name, new_name, moved)
        return self.get_home_cell(home_cell_id)

    def delete_home_cell(self, home_cell_id: int,
                         unassign_members: bool = False) -> Optional[List[str]]:
        """Delete a home cell. Returns ids of members explicitly unassigned (maybe empty)."""
        now = datetime.now(timezone.utc)
        with self._engine.begin() as conn:
            row = conn.execute(
                select(homecells.c.name).where(homecells.c.id == home_cell_id)
            ).first()
            if not row:
                return None
            cleared: List[str] = []
            if unassign_members:
                cleared = [
                    r[0] for r in conn.execute(
                        select(members.c.id).where(members.c.home_cell == row[0])
                    )
                ]
                if cleared:
                    conn.execute(
                        update(members)
                        .where(members.c.id.in_(cleared))
                        .values(home_cell=None, updated_at=now)
                    )
                    conn.execute(insert(homecell_assignments), [
                        {"member_id": mid, "action": "unassigned",
                         "from_home_cell": row[0], "to_home_cell": None,
                         "notes": "Home cell deleted", "created_at": now}
                        for mid in cleared
                    ])
            conn.execute(delete(homecells).where(homecells.c.id == home_cell_id))
        return cleared

    # ── Cascade impact ─────────────────────────────────────────────────

    def district_impact(self, district_id: int) -> Dict[str, int]:
        with self._engine.connect() as conn:
            row = conn.execute(text("""
                SELECT
                    (SELECT COUNT(*) FROM zones WHERE district_id = :id) AS zones,
                    (SELECT COUNT(*) FROM homecells
                        WHERE district_id = :id
                           OR zone_id IN (SELECT id FROM zones WHERE district_id = :id)) AS home_cells,
                    (SELECT COUNT(*) FROM members WHERE home_cell IN (
                        SELECT name FROM homecells
                        WHERE district_id = :id
                           OR zone_id IN (SELECT id FROM zones WHERE district_id = :id))) AS orphaned
            """), {"id": district_id}).mappings().first()
        return {"zones": row["zones"] or 0, "home_cells": row["home_cells"] or 0,
                "orphaned_members": row["orphaned"] or 0}

    def zone_impact(self, zone_id: int) -> Dict[str, int]:
        with self._engine.connect() as conn:
            row = conn.execute(text("""
                SELECT
                    (SELECT COUNT(*) FROM homecells WHERE zone_id = :id) AS home_cells,
                    (SELECT COUNT(*) FROM members WHERE home_cell IN (
                        SELECT name FROM homecells WHERE zone_id = :id)) AS orphaned
            """), {"id": zone_id}).mappings().first()
        return {"zones": 1, "home_cells": row["home_cells"] or 0,
                "orphaned_members": row["orphaned"] or 0}

    def home_cell_impact(self, home_cell_id: int) -> Dict[str, int]:
        with self._engine.connect() as conn:
            orphaned = conn.execute(text("""
                SELECT COUNT(*) FROM members
                WHERE home_cell = (SELECT name FROM homecells WHERE id = :id)
            """), {"id": home_cell_id}).scalar()
        return {"zones": 0, "home_cells": 1, "orphaned_members": orphaned or 0}

    # ── Misc ───────────────────────────────────────────────────────────

    def count_levels(self) -> Dict[str, int]:
        with self._engine.connect() as conn:
            return {
                "districts": conn.execute(select(func.count()).select_from(districts)).scalar() or 0,
                "zones": conn.execute(select(func.count()).select_from(zones)).scalar() or 0,
                "home_cells": conn.execute(select(func.count()).select_from(homecells)).scalar() or 0,
            }

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))
