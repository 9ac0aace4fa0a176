# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package — re-exports the data-access classes."""
from churchcells.repositories.hierarchy_repository import HierarchyRepository
from churchcells.repositories.member_repository import MemberRepository

__all__ = ["HierarchyRepository", "MemberRepository"]
