# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Hierarchy console — async view-model over HierarchyClient.

Holds UI-only state (tree, expanded keys, search term, active tab, the
assignment dialog, toasts, in-flight flags). Every write goes
client → service → DB and is followed by a re-fetch; every HierarchyError
becomes an error toast instead of propagating.
"""

import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from churchcells.core.errors import HierarchyError, NotFoundError
from churchcells.core.logging import get_logger
from churchcells.models.domain import AssignmentIntent
from churchcells.services import assignment_engine as engine
from churchcells.services.hierarchy_client import HierarchyClient
from churchcells.services.tree_view import (
    ExpandState, ExportTracker, InFlight, build_tree, filter_districts, search_hierarchy,
)

logger = get_logger(__name__)

TABS = ("hierarchy", "members", "unassigned")

# confirm(kind, name, impact) -> bool, sync or async
Confirm = Callable[[str, str, Dict[str, int]], Union[bool, Awaitable[bool]]]


class HierarchyConsole:
    def __init__(self, client: HierarchyClient, confirm: Confirm):
        self._client = client
        self._confirm = confirm
        self.tree: List[Dict[str, Any]] = []
        self.members: List[Dict[str, Any]] = []
        self.expanded: Optional[ExpandState] = None
        self.search_term = ""
        self.active_tab = TABS[0]
        self.dialog: Optional[AssignmentIntent] = None
        self.toasts: List[Dict[str, str]] = []
        self.exports = ExportTracker()
        self.deactivating = InFlight()

    # ── Toasts ──

    def _toast(self, level: str, message: str) -> None:
        self.toasts.append({"level": level, "message": message})

    def _fail(self, message: str) -> None:
        logger.warning("Console action failed: %s", message)
        self._toast("error", message)

    async def _guard(self, action: Callable[[], Awaitable[Any]],
                     success: Optional[str] = None, reload: bool = True) -> Any:
        try:
            result = await action()
        except HierarchyError as exc:
            self._fail(str(exc))
            return None
        if success:
            self._toast("success", success)
        if reload:
            # the write stands even when the re-fetch fails
            await self.refresh()
        return result

    # ── Loading & view state ──

    async def load(self) -> None:
        """Fetch everything and rebuild the tree; keeps the expand state across reloads."""
        districts = await self._client.list_districts()
        zones = await self._client.list_zones()
        home_cells = await self._client.list_home_cells()
        self.members = await self._client.list_members()
        index = engine.AssignmentIndex.from_members(self.members)
        self.tree = build_tree(districts, zones, home_cells, index)
        if self.expanded is None:
            self.expanded = ExpandState.initial(self.tree)

    async def refresh(self) -> bool:
        try:
            await self.load()
        except HierarchyError as exc:
            self._fail(str(exc))
            return False
        return True

    def toggle(self, key: str) -> bool:
        if self.expanded is None:
            self.expanded = ExpandState()
        return self.expanded.toggle(key)

    def set_search(self, term: Optional[str]) -> None:
        self.search_term = (term or "").strip()

    def set_tab(self, tab: str) -> None:
        if tab not in TABS:
            raise ValueError(f"tab must be one of {TABS}")
        self.active_tab = tab

    def visible_districts(self) -> List[Dict[str, Any]]:
        return filter_districts(self.tree, self.search_term)

    def search_results(self) -> List[Dict[str, Any]]:
        return search_hierarchy(self.tree, self.search_term)

    def unassigned(self) -> List[Dict[str, Any]]:
        return engine.unassigned_members(self.members)

    def assignment_rate(self) -> int:
        return engine.assignment_rate(self.members)

    # ── Create / update ──

    async def create_district(self, name: str, description: Optional[str] = None):
        if not (name or "").strip():
            self._fail("District name is required")
            return None
        return await self._guard(
            lambda: self._client.create_district(name.strip(), description),
            success=f"District '{name.strip()}' created",
        )

    async def create_zone(self, name: str, district_id: Optional[int],
                          description: Optional[str] = None):
        if not (name or "").strip():
            self._fail("Zone name is required")
            return None
        if district_id is None:
            self._fail("Select a district for the zone")
            return None
        return await self._guard(
            lambda: self._client.create_zone(name.strip(), district_id, description),
            success=f"Zone '{name.strip()}' created",
        )

    async def create_home_cell(self, name: str, zone_id: Optional[int], **fields):
        if not (name or "").strip():
            self._fail("Home cell name is required")
            return None
        if zone_id is None:
            self._fail("Select a zone for the home cell")
            return None
        return await self._guard(
            lambda: self._client.create_home_cell(name.strip(), zone_id, **fields),
            success=f"Home cell '{name.strip()}' created",
        )

    async def update_district(self, district_id: int, **fields):
        if not self._name_ok(fields, "District"):
            return None
        return await self._guard(lambda: self._client.update_district(district_id, **fields),
                                 success="District updated")

    async def update_zone(self, zone_id: int, **fields):
        if not self._name_ok(fields, "Zone"):
            return None
        return await self._guard(lambda: self._client.update_zone(zone_id, **fields),
                                 success="Zone updated")

    async def update_home_cell(self, home_cell_id: int, **fields):
        if not self._name_ok(fields, "Home cell"):
            return None
        return await self._guard(lambda: self._client.update_home_cell(home_cell_id, **fields),
                                 success="Home cell updated")

    async def deactivate_home_cell(self, home_cell_id: int):
        return await self._guard(
            lambda: self.deactivating.track(
                str(home_cell_id),
                lambda: self._client.update_home_cell(home_cell_id, is_active=False),
            ),
            success="Home cell deactivated",
        )

    def _name_ok(self, fields: Dict[str, Any], label: str) -> bool:
        if "name" in fields:
            if not (fields["name"] or "").strip():
                self._fail(f"{label} name is required")
                return False
            fields["name"] = fields["name"].strip()
        return True

    # ── Deletes (impact → confirm → delete) ──

    async def delete_district(self, district_id: int) -> bool:
        return await self._confirmed_delete(
            "district", district_id,
            self._client.get_district, self._client.district_delete_impact,
            self._client.delete_district,
        )

    async def delete_zone(self, zone_id: int) -> bool:
        return await self._confirmed_delete(
            "zone", zone_id,
            self._client.get_zone, self._client.zone_delete_impact,
            self._client.delete_zone,
        )

    async def delete_home_cell(self, home_cell_id: int, unassign_members: bool = False) -> bool:
        return await self._confirmed_delete(
            "home_cell", home_cell_id,
            self._client.get_home_cell, self._client.home_cell_delete_impact,
            lambda i: self._client.delete_home_cell(i, unassign_members=unassign_members),
        )

    async def _confirmed_delete(self, kind: str, entity_id: int, fetch, impact_of, delete) -> bool:
        try:
            entity = await fetch(entity_id)
            impact = await impact_of(entity_id)
        except HierarchyError as exc:
            self._fail(str(exc))
            return False
        answer = self._confirm(kind, entity["name"], impact)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            logger.info("Delete cancelled kind=%s id=%s", kind, entity_id)
            return False
        done = await self._guard(lambda: delete(entity_id),
                                 success=f"Deleted {kind.replace('_', ' ')} '{entity['name']}'")
        return done is not None

    # ── Assignment dialog ──

    def _member(self, member_id: str) -> Dict[str, Any]:
        for member in self.members:
            if member["id"] == member_id:
                return member
        raise NotFoundError(f"Member {member_id} not loaded")

    def request_assign(self, member_id: str) -> Optional[AssignmentIntent]:
        """Open the dialog; an already-assigned member gets a transfer dialog."""
        try:
            self.dialog = engine.request_assign(self._member(member_id))
        except HierarchyError as exc:
            self._fail(str(exc))
            return None
        return self.dialog

    def request_transfer(self, member_id: str) -> Optional[AssignmentIntent]:
        try:
            self.dialog = engine.request_transfer(self._member(member_id))
        except HierarchyError as exc:
            self._fail(str(exc))
            return None
        return self.dialog

    def cancel_assignment(self) -> None:
        self.dialog = None

    async def submit_assignment(self, home_cell_name: str, notes: Optional[str] = None):
        intent = self.dialog
        if intent is None:
            self._fail("No assignment in progress")
            return None
        target = (home_cell_name or "").strip()
        if not target:
            self._fail("Select a home cell")
            return None
        verb = "Transferred" if intent.kind == "transfer" else "Assigned"
        result = await self._guard(
            lambda: self._client.transfer_member(intent.member_id, target, notes),
            success=f"{verb} {intent.member_name or intent.member_id} to {target}",
        )
        if result is not None:
            self.dialog = None
        return result

    async def unassign(self, member_id: str):
        return await self._guard(lambda: self._client.unassign_member(member_id),
                                 success="Member unassigned")

    async def auto_assign(self, zone_id: Optional[int]):
        if zone_id is None:
            self._fail("Zone ID is required")
            return None
        result = await self._guard(lambda: self._client.auto_assign(zone_id))
        if result is not None:
            self._toast("success", result["message"])
        return result

    # ── Exports ──

    def _home_cell_id(self, name: str) -> int:
        for district in self.tree:
            for zone in district["zones"]:
                for cell in zone["homecells"]:
                    if cell["name"].lower() == name.strip().lower():
                        return cell["id"]
        raise NotFoundError(f"Home cell '{name}' not found")

    async def export_home_cell(self, name: str, fmt: str = "pdf") -> Optional[Tuple[str, bytes]]:
        if not (name or "").strip():
            self._fail("Home cell name is required")
            return None
        try:
            home_cell_id = self._home_cell_id(name)
        except HierarchyError as exc:
            self._fail(str(exc))
            return None
        return await self._guard(
            lambda: self.exports.run(name, fmt,
                                     lambda: self._client.export_home_cell(home_cell_id, fmt)),
            success=f"Exported {name} ({fmt})", reload=False,
        )

    async def export_district(self, district_id: int, fmt: str = "pdf") -> Optional[Tuple[str, bytes]]:
        names = [d["name"] for d in self.tree if d["id"] == district_id]
        if not names:
            self._fail(f"District {district_id} is not loaded")
            return None
        return await self._guard(
            lambda: self.exports.run(names[0], fmt,
                                     lambda: self._client.export_district(district_id, fmt)),
            success=f"Exported {names[0]} ({fmt})", reload=False,
        )
