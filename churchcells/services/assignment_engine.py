# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Assignment logic — pure derivation over (home cells × members).
Pure functions — no I/O, no metrics, no logging.

Members are plain mappings carrying at least ``id``, ``home_cell`` and
``membership_status`` (``gender`` and ``full_name`` are optional).
"""

from collections import defaultdict
from typing import Any, Iterable, Mapping, Optional, Sequence

from churchcells.core.errors import ValidationError
from churchcells.models.domain import ACTIVE_STATUS, INACTIVE_STATUS, AssignmentIntent

Member = Mapping[str, Any]


def is_assigned(member: Member) -> bool:
    return bool(member.get("home_cell"))


def percentage(part: int, whole: int) -> int:
    """Rounded (half up) percentage; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return int(part * 100 / whole + 0.5)


def members_of(members: Iterable[Member], home_cell_name: str) -> list[Member]:
    return [m for m in members if m.get("home_cell") == home_cell_name]


def active_members_of(members: Iterable[Member], home_cell_name: str) -> list[Member]:
    return [
        m for m in members_of(members, home_cell_name)
        if m.get("membership_status") == ACTIVE_STATUS
    ]


def unassigned_members(members: Iterable[Member]) -> list[Member]:
    return [m for m in members if not is_assigned(m)]


def assignment_rate(members: Sequence[Member]) -> int:
    assigned = sum(1 for m in members if is_assigned(m))
    return percentage(assigned, len(members))


def cell_stats(members: Iterable[Member], home_cell_name: Optional[str] = None) -> dict[str, int]:
    """Headcount breakdown for one cell (or for the given members when name is None)."""
    subset = list(members) if home_cell_name is None else members_of(members, home_cell_name)
    total = len(subset)
    active = sum(1 for m in subset if m.get("membership_status") == ACTIVE_STATUS)
    inactive = sum(1 for m in subset if m.get("membership_status") == INACTIVE_STATUS)
    male = sum(1 for m in subset if m.get("gender") == "Male")
    female = sum(1 for m in subset if m.get("gender") == "Female")
    return {
        "total_members": total,
        "active_members": active,
        "inactive_members": inactive,
        "male_members": male,
        "female_members": female,
        "male_percentage": percentage(male, total),
        "female_percentage": percentage(female, total),
        "active_percentage": percentage(active, total),
    }


def request_assign(member: Member) -> AssignmentIntent:
    """Intent to open the assignment dialog. Already-assigned members get a transfer."""
    current = member.get("home_cell") or None
    return AssignmentIntent(
        kind="transfer" if current else "assign",
        member_id=str(member["id"]),
        member_name=member.get("full_name", ""),
        current_home_cell=current,
    )


def request_transfer(member: Member) -> AssignmentIntent:
    """Intent to move a member; falls back to a plain assign when unassigned."""
    return request_assign(member)


def round_robin_plan(unassigned: Sequence[Member],
                     cell_names: Sequence[str]) -> list[tuple[str, str]]:
    """Spread members across cells in order: m0→c0, m1→c1, ..., wrapping around."""
    if not cell_names:
        raise ValidationError("No home cells available to assign members to")
    return [
        (str(member["id"]), cell_names[i % len(cell_names)])
        for i, member in enumerate(unassigned)
    ]


class AssignmentIndex:
    """
    Explicit cell-name → member-id index, kept current on every
    assign / transfer / unassign / rename / drop instead of trusting a
    stored counter.
    """

    def __init__(self) -> None:
        self._by_cell: dict[str, set[str]] = defaultdict(set)
        self._cell_of: dict[str, Optional[str]] = {}

    @classmethod
    def from_members(cls, members: Iterable[Member]) -> "AssignmentIndex":
        index = cls()
        for m in members:
            index.add_member(str(m["id"]), m.get("home_cell") or None)
        return index

    # ── Mutations ──

    def add_member(self, member_id: str, home_cell: Optional[str] = None) -> None:
        self._cell_of[member_id] = None
        if home_cell:
            self.assign(member_id, home_cell)

    def remove_member(self, member_id: str) -> None:
        self.unassign(member_id)
        self._cell_of.pop(member_id, None)

    def assign(self, member_id: str, home_cell: str) -> Optional[str]:
        """Assign or transfer; returns the previous cell name, if any."""
        previous = self._cell_of.get(member_id)
        if previous:
            self._discard(previous, member_id)
        self._by_cell[home_cell].add(member_id)
        self._cell_of[member_id] = home_cell
        return previous

    def unassign(self, member_id: str) -> Optional[str]:
        previous = self._cell_of.get(member_id)
        if previous:
            self._discard(previous, member_id)
        if member_id in self._cell_of:
            self._cell_of[member_id] = None
        return previous

    def rename_cell(self, old_name: str, new_name: str) -> None:
        moved = self._by_cell.pop(old_name, set())
        if not moved:
            return
        self._by_cell[new_name] |= moved
        for member_id in moved:
            self._cell_of[member_id] = new_name

    def drop_cell(self, name: str) -> set[str]:
        """Forget a cell; its members become unassigned. Returns the orphaned ids."""
        orphaned = self._by_cell.pop(name, set())
        for member_id in orphaned:
            self._cell_of[member_id] = None
        return orphaned

    # ── Queries ──

    def count(self, home_cell: str) -> int:
        return len(self._by_cell.get(home_cell, ()))

    def members(self, home_cell: str) -> set[str]:
        return set(self._by_cell.get(home_cell, ()))

    def cell_of(self, member_id: str) -> Optional[str]:
        return self._cell_of.get(member_id)

    def unassigned(self) -> set[str]:
        return {mid for mid, cell in self._cell_of.items() if not cell}

    def total(self) -> int:
        return len(self._cell_of)

    def assignment_rate(self) -> int:
        return percentage(self.total() - len(self.unassigned()), self.total())

    def _discard(self, home_cell: str, member_id: str) -> None:
        bucket = self._by_cell.get(home_cell)
        if bucket is None:
            return
        bucket.discard(member_id)
        if not bucket:
            del self._by_cell[home_cell]
