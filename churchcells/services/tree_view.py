# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Presentation helpers — expand/collapse state, filtering, tree assembly and
in-flight tracking. Pure except for ``InFlight.track``, which awaits the
caller's coroutine.
"""

from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

from churchcells.core.errors import ValidationError
from churchcells.services.assignment_engine import AssignmentIndex

T = TypeVar("T")
Node = Dict[str, Any]


def district_key(district_id: int) -> str:
    return f"d-{district_id}"


def zone_key(zone_id: int) -> str:
    return f"z-{zone_id}"


class ExpandState:
    """Set of expanded node keys (``d-{id}`` / ``z-{id}``)."""

    def __init__(self, keys: Optional[Iterable[str]] = None) -> None:
        self._keys: set[str] = set(keys or ())

    @classmethod
    def initial(cls, districts: List[Node], expand_first: bool = True) -> "ExpandState":
        """Expand the first district only, or nothing — never the whole tree."""
        if expand_first and districts:
            return cls([district_key(districts[0]["id"])])
        return cls()

    def toggle(self, key: str) -> bool:
        """Flip ``key``; returns whether it is now expanded."""
        if key in self._keys:
            self._keys.discard(key)
            return False
        self._keys.add(key)
        return True

    def expand(self, key: str) -> None:
        self._keys.add(key)

    def collapse(self, key: str) -> None:
        self._keys.discard(key)

    def is_expanded(self, key: str) -> bool:
        return key in self._keys

    @property
    def keys(self) -> frozenset:
        return frozenset(self._keys)


def _matches(name: Optional[str], term: str) -> bool:
    return term in (name or "").lower()


def filter_districts(tree: List[Node], term: Optional[str]) -> List[Node]:
    """Case-insensitive substring match on district names; ``tree`` is left untouched."""
    term = (term or "").strip().lower()
    if not term:
        return list(tree)
    return [d for d in tree if _matches(d.get("name"), term)]


def search_hierarchy(tree: List[Node], term: Optional[str]) -> List[Node]:
    """Flattened search across district, zone and home-cell names."""
    term = (term or "").strip().lower()
    if not term:
        return []
    hits: List[Node] = []
    for district in tree:
        if _matches(district.get("name"), term):
            hits.append({"level": "district", "id": district["id"],
                         "name": district["name"], "path": district["name"]})
        for zone in district.get("zones", []):
            zone_path = f"{district['name']} / {zone['name']}"
            if _matches(zone.get("name"), term):
                hits.append({"level": "zone", "id": zone["id"],
                             "name": zone["name"], "path": zone_path})
            for cell in zone.get("homecells", []):
                if _matches(cell.get("name"), term):
                    hits.append({"level": "home_cell", "id": cell["id"], "name": cell["name"],
                                 "path": f"{zone_path} / {cell['name']}"})
    return hits


def build_tree(districts: List[Node], zones: List[Node], home_cells: List[Node],
               index: Optional[AssignmentIndex] = None) -> List[Node]:
    """
    Nest flat district / zone / home-cell lists into one tree.

    Member counts come from ``index`` when given, otherwise from each cell's
    own ``member_count``. Zones and districts carry the sum of their cells.
    Orphan rows whose parent is not in the input are left out.
    """
    cells_by_zone: Dict[int, List[Node]] = {}
    for cell in home_cells:
        count = index.count(cell["name"]) if index is not None else cell.get("member_count", 0)
        cells_by_zone.setdefault(cell["zone_id"], []).append(dict(cell, member_count=count))

    zones_by_district: Dict[int, List[Node]] = {}
    for zone in zones:
        cells = cells_by_zone.get(zone["id"], [])
        zones_by_district.setdefault(zone["district_id"], []).append(dict(
            zone, key=zone_key(zone["id"]), homecells=cells,
            member_count=sum(c["member_count"] for c in cells),
        ))

    tree = []
    for district in districts:
        children = zones_by_district.get(district["id"], [])
        tree.append(dict(
            district, key=district_key(district["id"]), zones=children,
            member_count=sum(z["member_count"] for z in children),
        ))
    return tree


class InFlight:
    """Keys of operations currently running; a key is cleared however its run ends."""

    def __init__(self) -> None:
        self._active: set[str] = set()

    def is_active(self, key: str) -> bool:
        return key in self._active

    async def track(self, key: str, action: Callable[[], Awaitable[T]]) -> T:
        if key in self._active:
            raise ValidationError(f"'{key}' is already in progress")
        self._active.add(key)
        try:
            return await action()
        finally:
            self._active.discard(key)


class ExportTracker(InFlight):
    """Per ``{name}-{format}`` export flags, so a PDF and an Excel export never block each other."""

    @staticmethod
    def key(name: str, fmt: str) -> str:
        return f"{name}-{fmt}"

    def is_exporting(self, name: str, fmt: str) -> bool:
        return self.is_active(self.key(name, fmt))

    async def run(self, name: str, fmt: str, export: Callable[[], Awaitable[T]]) -> T:
        return await self.track(self.key(name, fmt), export)
