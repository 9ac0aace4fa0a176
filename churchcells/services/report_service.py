# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for summaries and report exports."""
import re
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

from churchcells.core.errors import NotFoundError, ValidationError
from churchcells.core.logging import get_logger
from churchcells.metrics import EXPORTS_TOTAL
from churchcells.models.domain import (
    ACTIVE_STATUS, DISTRICT_EXPORT_FORMATS, HOMECELL_EXPORT_FORMATS, INACTIVE_STATUS,
)
from churchcells.repositories.hierarchy_repository import HierarchyRepository
from churchcells.repositories.member_repository import MemberRepository
from churchcells.services import assignment_engine as engine
from churchcells.services import export_adapter

logger = get_logger(__name__)

MEDIA_TYPES = {
    "csv": "text/csv",
    "excel": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pdf": "application/pdf",
}
EXTENSIONS = {"csv": "csv", "excel": "xlsx", "pdf": "pdf"}


def _slug(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9]+", "-", name).strip("-") or "report"


class ReportService:
    def __init__(self, hierarchy_repo: HierarchyRepository, member_repo: MemberRepository):
        self._hierarchy = hierarchy_repo
        self._members = member_repo

    def home_cell_summary(self, home_cell_id: int) -> Dict[str, Any]:
        report = self._home_cell_report(home_cell_id)
        cell = report["home_cell"]
        return {"home_cell_id": cell["id"], "home_cell_name": cell["name"], **report["stats"]}

    def district_summary(self, district_id: int) -> Dict[str, Any]:
        district = self._hierarchy.get_district(district_id)
        if district is None:
            raise NotFoundError(f"District {district_id} not found")
        zones = self._hierarchy.list_zones(district_id=district_id)
        cells = self._hierarchy.list_home_cells(district_id=district_id)
        members = self._members.list_members(home_cells=[c["name"] for c in cells]) if cells else []
        return {
            "district_id": district["id"],
            "district_name": district["name"],
            "zones": len(zones),
            "home_cells": len(cells),
            "total_members": len(members),
            "active_members": sum(1 for m in members if m["membership_status"] == ACTIVE_STATUS),
            "inactive_members": sum(1 for m in members if m["membership_status"] == INACTIVE_STATUS),
        }

    def export_home_cell(self, home_cell_id: int, fmt: str) -> Tuple[str, str, bytes]:
        """Return (filename, media_type, content) for a cell's member report."""
        fmt = (fmt or "pdf").lower()
        if fmt not in HOMECELL_EXPORT_FORMATS:
            raise ValidationError(f"format must be one of {HOMECELL_EXPORT_FORMATS}")
        report = self._home_cell_report(home_cell_id)
        renderer = {
            "csv": export_adapter.render_home_cell_csv,
            "excel": export_adapter.render_home_cell_excel,
            "pdf": export_adapter.render_home_cell_pdf,
        }[fmt]
        content = renderer(report)
        EXPORTS_TOTAL.labels(entity="home_cell", format=fmt).inc()
        name = report["home_cell"]["name"]
        suffix = "-members" if fmt == "csv" else ""
        logger.info("Home cell exported id=%s format=%s members=%d bytes=%d",
                    home_cell_id, fmt, len(report["members"]), len(content))
        return f"homecell-{_slug(name)}{suffix}.{EXTENSIONS[fmt]}", MEDIA_TYPES[fmt], content

    def export_district(self, district_id: int, fmt: str) -> Tuple[str, str, bytes]:
        fmt = (fmt or "pdf").lower()
        if fmt not in DISTRICT_EXPORT_FORMATS:
            raise ValidationError(f"format must be one of {DISTRICT_EXPORT_FORMATS}")
        district = self._hierarchy.get_district(district_id)
        if district is None:
            raise NotFoundError(f"District {district_id} not found")
        cells = self._hierarchy.list_home_cells(district_id=district_id)
        zones = [
            dict(z, home_cells=sum(1 for c in cells if c["zone_id"] == z["id"]),
                 status="Active" if z["is_active"] else "Inactive")
            for z in self._hierarchy.list_zones(district_id=district_id)
        ]
        report = {"district": district, "zones": zones,
                  "generated_at": datetime.now(timezone.utc).isoformat()}
        if fmt == "csv":
            content = export_adapter.render_district_csv(report)
        else:
            content = export_adapter.render_district_pdf(report)
        EXPORTS_TOTAL.labels(entity="district", format=fmt).inc()
        logger.info("District exported id=%s format=%s zones=%d", district_id, fmt, len(zones))
        suffix = "-zones" if fmt == "csv" else ""
        return (f"district-{_slug(district['name'])}{suffix}.{EXTENSIONS[fmt]}",
                MEDIA_TYPES[fmt], content)

    def _home_cell_report(self, home_cell_id: int) -> Dict[str, Any]:
        cell = self._hierarchy.get_home_cell(home_cell_id)
        if cell is None:
            raise NotFoundError(f"Home cell {home_cell_id} not found")
        members = engine.members_of(
            self._members.list_members(home_cells=[cell["name"]]), cell["name"]
        )
        return {
            "home_cell": cell,
            "zone": self._hierarchy.get_zone(cell["zone_id"]),
            "district": self._hierarchy.get_district(cell["district_id"]),
            "members": members,
            "stats": engine.cell_stats(members),
            "generated_at": datetime.now(timezone.utc).isoformat(),
        }
