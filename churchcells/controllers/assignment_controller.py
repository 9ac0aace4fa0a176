# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Full hierarchy, auto-assignment, transfers and assignment history."""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from churchcells.core.dependencies import get_assignment_service, get_hierarchy_service
from churchcells.core.errors import NotFoundError, ValidationError
from churchcells.schemas import (
    AssignmentOverview, AssignRequest, AutoAssignRequest, MemberOut, TransferRequest,
)
from churchcells.services.assignment_service import AssignmentService
from churchcells.services.hierarchy_service import HierarchyService

router = APIRouter(prefix="/api/homecells", tags=["Assignments"])


@router.get("/hierarchy/full")
def full_hierarchy(service: HierarchyService = Depends(get_hierarchy_service)) -> List[Dict[str, Any]]:
    return service.get_full_hierarchy()


@router.post("/auto-assign-members")
def auto_assign_members(body: AutoAssignRequest,
                        service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.auto_assign(body.zone_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/assignments/overview", response_model=AssignmentOverview)
def assignment_overview(service: AssignmentService = Depends(get_assignment_service)):
    return service.overview()


@router.get("/members/unassigned", response_model=List[MemberOut])
def unassigned_members(service: AssignmentService = Depends(get_assignment_service)):
    return service.unassigned_members()


@router.put("/members/{member_id}/transfer", response_model=MemberOut)
def transfer_member(member_id: str, body: TransferRequest,
                    service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.transfer_member(member_id, body.home_cell_name, notes=body.notes)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/members/{member_id}/assignment", response_model=MemberOut)
def unassign_member(member_id: str,
                    body: Optional[AssignRequest] = Body(None),
                    service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.unassign_member(member_id, notes=body.notes if body else None)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/members/{member_id}/history")
def assignment_history(member_id: str,
                       service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.assignment_history(member_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
