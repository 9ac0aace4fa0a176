# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for members and their home-cell assignment history."""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, insert, or_, select, update
from sqlalchemy.engine import Engine

from churchcells.core.database import homecell_assignments, members
from churchcells.repositories.hierarchy_repository import _iso


def _member_dict(row) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "member_id": row["member_id"],
        "full_name": row["full_name"],
        "phone": row["phone"],
        "email": row["email"],
        "gender": row["gender"],
        "membership_status": row["membership_status"],
        "home_cell": row["home_cell"],
        "created_at": _iso(row["created_at"]),
        "updated_at": _iso(row["updated_at"]),
    }


def _unassigned_clause():
    return or_(members.c.home_cell.is_(None), members.c.home_cell == "")


class MemberRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def create_member(self, values: Dict[str, Any]) -> Dict[str, Any]:
        with self._engine.begin() as conn:
            conn.execute(insert(members).values(**values))
            row = conn.execute(
                select(members).where(members.c.id == values["id"])
            ).mappings().first()
        return _member_dict(row)

    def set_home_cell(self, member_id: str, home_cell: Optional[str], action: str,
                      notes: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Point a member at ``home_cell`` (None clears) and record the change."""
        now = datetime.now(timezone.utc)
        with self._engine.begin() as conn:
            current = conn.execute(
                select(members.c.home_cell).where(members.c.id == member_id)
            ).first()
            if current is None:
                return None
            conn.execute(
                update(members)
                .where(members.c.id == member_id)
                .values(home_cell=home_cell, updated_at=now)
            )
            conn.execute(insert(homecell_assignments).values(
                member_id=member_id, action=action,
                from_home_cell=current[0] or None, to_home_cell=home_cell,
                notes=notes, created_at=now,
            ))
            row = conn.execute(
                select(members).where(members.c.id == member_id)
            ).mappings().first()
        return _member_dict(row)

    def bulk_assign(self, plan: Iterable[Tuple[str, str]], action: str,
                    notes: Optional[str] = None) -> int:
        """Apply an ordered (member_id, home_cell) plan atomically."""
        now = datetime.now(timezone.utc)
        count = 0
        with self._engine.begin() as conn:
            for member_id, home_cell in plan:
                conn.execute(
                    update(members)
                    .where(members.c.id == member_id)
                    .values(home_cell=home_cell, updated_at=now)
                )
                conn.execute(insert(homecell_assignments).values(
                    member_id=member_id, action=action, from_home_cell=None,
                    to_home_cell=home_cell, notes=notes, created_at=now,
                ))
                count += 1
        return count

    # ── Read ───────────────────────────────────────────────────────────

    def get_member(self, member_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(members).where(members.c.id == member_id)
            ).mappings().first()
        return _member_dict(row) if row else None

    def member_number_exists(self, number: str) -> bool:
        with self._engine.connect() as conn:
            return conn.execute(
                select(members.c.id).where(members.c.member_id == number)
            ).first() is not None

    def list_members(self, unassigned_only: bool = False,
                     home_cells: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        query = select(members).order_by(members.c.full_name, members.c.id)
        if unassigned_only:
            query = query.where(_unassigned_clause())
        if home_cells is not None:
            query = query.where(members.c.home_cell.in_(home_cells))
        with self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
        return [_member_dict(r) for r in rows]

    def count_unassigned(self) -> int:
        with self._engine.connect() as conn:
            return conn.execute(
                select(func.count()).select_from(members).where(_unassigned_clause())
            ).scalar() or 0

    def history(self, member_id: str) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(homecell_assignments)
                .where(homecell_assignments.c.member_id == member_id)
                .order_by(homecell_assignments.c.id)
            ).mappings().all()
        return [
            {"id": r["id"], "action": r["action"],
             "from_home_cell": r["from_home_cell"], "to_home_cell": r["to_home_cell"],
             "notes": r["notes"], "created_at": _iso(r["created_at"])}
            for r in rows
        ]
