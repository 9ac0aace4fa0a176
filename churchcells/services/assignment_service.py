# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Member directory access and home-cell assignment.
Derivations are delegated to the pure assignment engine.
"""

import uuid
from typing import Any, Dict, List, Optional

from churchcells.core.errors import NotFoundError, ValidationError
from churchcells.core.logging import get_logger
from churchcells.metrics import MEMBER_ASSIGNMENTS, UNASSIGNED_MEMBERS
from churchcells.models.domain import ACTIVE_STATUS
from churchcells.repositories.hierarchy_repository import HierarchyRepository
from churchcells.repositories.member_repository import MemberRepository
from churchcells.services import assignment_engine as engine

logger = get_logger(__name__)


class AssignmentService:
    """Assign, transfer and unassign members; derive per-cell views."""

    def __init__(self, member_repo: MemberRepository,
                 hierarchy_repo: HierarchyRepository) -> None:
        self._members = member_repo
        self._hierarchy = hierarchy_repo

    # ── Member directory ──

    def create_member(self, full_name: str, member_id: Optional[str] = None,
                      phone: Optional[str] = None, email: Optional[str] = None,
                      gender: Optional[str] = None,
                      membership_status: str = ACTIVE_STATUS,
                      home_cell: Optional[str] = None) -> Dict[str, Any]:
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationError("full_name is required")
        home_cell = (home_cell or "").strip() or None
        if home_cell and self._hierarchy.get_home_cell_by_name(home_cell) is None:
            raise ValidationError(f"Home cell '{home_cell}' does not exist")
        number = (member_id or "").strip() or f"MBR-{uuid.uuid4().hex[:8].upper()}"
        if self._members.member_number_exists(number):
            raise ValidationError(f"Member number '{number}' is already in use")
        member = self._members.create_member({
            "id": str(uuid.uuid4()),
            "member_id": number,
            "full_name": full_name,
            "phone": phone,
            "email": email,
            "gender": gender,
            "membership_status": membership_status or ACTIVE_STATUS,
            "home_cell": home_cell,
        })
        self.refresh_gauges()
        logger.info("Member created id=%s home_cell=%s", member["id"], home_cell)
        return member

    def get_member(self, member_id: str) -> Dict[str, Any]:
        member = self._members.get_member(member_id)
        if member is None:
            raise NotFoundError(f"Member {member_id} not found")
        return member

    def list_members(self, unassigned_only: bool = False) -> List[Dict[str, Any]]:
        return self._members.list_members(unassigned_only=unassigned_only)

    # ── Commands ──

    def assign_member(self, home_cell_id: int, member_id: str,
                      notes: Optional[str] = None) -> Dict[str, Any]:
        cell = self._hierarchy.get_home_cell(home_cell_id)
        if cell is None:
            raise NotFoundError(f"Home cell {home_cell_id} not found")
        return self._move(member_id, cell["name"], notes)

    def transfer_member(self, member_id: str, home_cell_name: str,
                        notes: Optional[str] = None) -> Dict[str, Any]:
        name = (home_cell_name or "").strip()
        if not name:
            raise ValidationError("home_cell_name is required")
        cell = self._hierarchy.get_home_cell_by_name(name)
        if cell is None:
            raise ValidationError(f"Home cell '{name}' does not exist")
        return self._move(member_id, cell["name"], notes)

    def unassign_member(self, member_id: str, notes: Optional[str] = None) -> Dict[str, Any]:
        current = self.get_member(member_id)
        if not engine.is_assigned(current):
            return current
        member = self._members.set_home_cell(member_id, None, "unassigned", notes)
        MEMBER_ASSIGNMENTS.labels(action="unassigned").inc()
        self.refresh_gauges()
        logger.info("Member unassigned id=%s from=%s", member_id, current["home_cell"])
        return member

    def auto_assign(self, zone_id: Optional[int]) -> Dict[str, Any]:
        """Round-robin every unassigned member over the zone's home cells."""
        if zone_id is None:
            raise ValidationError("Zone ID is required")
        zone = self._hierarchy.get_zone(zone_id)
        if zone is None:
            raise NotFoundError(f"Zone {zone_id} not found")
        cells = self._hierarchy.list_home_cells(zone_id=zone_id)
        if not cells:
            raise ValidationError("No homecells found for this zone")
        plan = engine.round_robin_plan(
            self._members.list_members(unassigned_only=True),
            [c["name"] for c in cells],
        )
        assigned = self._members.bulk_assign(plan, "auto_assigned",
                                             notes=f"Auto-assigned within {zone['name']}")
        MEMBER_ASSIGNMENTS.labels(action="auto_assigned").inc(assigned)
        self.refresh_gauges()
        logger.info("Auto-assigned %d members across %d home cells in zone=%s",
                    assigned, len(cells), zone_id)
        return {
            "message": f"Auto-assigned {assigned} members to homecells in {zone['name']}",
            "assigned_count": assigned,
        }

    # ── Queries ──

    def members_of_cell(self, home_cell_id: int, active_only: bool = False) -> List[Dict[str, Any]]:
        cell = self._hierarchy.get_home_cell(home_cell_id)
        if cell is None:
            raise NotFoundError(f"Home cell {home_cell_id} not found")
        members = self._members.list_members(home_cells=[cell["name"]])
        if active_only:
            return engine.active_members_of(members, cell["name"])
        return engine.members_of(members, cell["name"])

    def unassigned_members(self) -> List[Dict[str, Any]]:
        return engine.unassigned_members(self._members.list_members(unassigned_only=True))

    def cell_stats(self, home_cell_id: int) -> Dict[str, int]:
        return engine.cell_stats(self.members_of_cell(home_cell_id))

    def overview(self) -> Dict[str, int]:
        members = self._members.list_members()
        unassigned = len(engine.unassigned_members(members))
        return {
            "total_members": len(members),
            "assigned": len(members) - unassigned,
            "unassigned": unassigned,
            "assignment_rate": engine.assignment_rate(members),
        }

    def assignment_history(self, member_id: str) -> List[Dict[str, Any]]:
        self.get_member(member_id)
        return self._members.history(member_id)

    def refresh_gauges(self) -> None:
        UNASSIGNED_MEMBERS.set(self._members.count_unassigned())

    # ── Private ──

    def _move(self, member_id: str, target: str, notes: Optional[str]) -> Dict[str, Any]:
        current = self.get_member(member_id)
        if current["home_cell"] == target:
            return current
        action = "transferred" if engine.is_assigned(current) else "assigned"
        member = self._members.set_home_cell(member_id, target, action, notes)
        MEMBER_ASSIGNMENTS.labels(action=action).inc()
        self.refresh_gauges()
        logger.info("Member %s id=%s from=%s to=%s",
                    action, member_id, current["home_cell"], target)
        return member
