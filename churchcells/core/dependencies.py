# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire repositories and services.
"""

from churchcells.core.database import engine
from churchcells.repositories.hierarchy_repository import HierarchyRepository
from churchcells.repositories.member_repository import MemberRepository
from churchcells.services.assignment_service import AssignmentService
from churchcells.services.hierarchy_service import HierarchyService
from churchcells.services.report_service import ReportService

# ── Singleton repositories (share the engine's pool) ──
_hierarchy_repo = HierarchyRepository(engine)
_member_repo = MemberRepository(engine)

# ── Services (with injected dependencies) ──
_hierarchy_service = HierarchyService(_hierarchy_repo)
_assignment_service = AssignmentService(_member_repo, _hierarchy_repo)
_report_service = ReportService(_hierarchy_repo, _member_repo)


# ── FastAPI dependency functions ──
def get_hierarchy_repo() -> HierarchyRepository:
    return _hierarchy_repo


def get_hierarchy_service() -> HierarchyService:
    return _hierarchy_service


def get_assignment_service() -> AssignmentService:
    return _assignment_service


def get_report_service() -> ReportService:
    return _report_service
