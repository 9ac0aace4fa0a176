# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Home cell CRUD, membership, stats, summaries and exports."""
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from starlette.responses import Response

from churchcells.core.dependencies import (
    get_assignment_service, get_hierarchy_service, get_report_service,
)
from churchcells.core.errors import NotFoundError, ValidationError
from churchcells.schemas import (
    AssignRequest, DeleteImpact, HomeCellCreate, HomeCellOut, HomeCellStats,
    HomeCellSummary, HomeCellUpdate, MemberOut,
)
from churchcells.services.assignment_service import AssignmentService
from churchcells.services.hierarchy_service import HierarchyService
from churchcells.services.report_service import ReportService

router = APIRouter(prefix="/api/homecells", tags=["Home Cells"])


@router.get("/homecells", response_model=List[HomeCellOut])
def list_home_cells(
    district_id: Optional[int] = Query(None),
    zone_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, max_length=255),
    leader_id: Optional[str] = Query(None, max_length=64),
    service: HierarchyService = Depends(get_hierarchy_service),
):
    return service.list_all_home_cells(district_id=district_id, zone_id=zone_id,
                                        search=search, leader_id=leader_id)


@router.post("/homecells", status_code=201, response_model=HomeCellOut)
def create_home_cell(body: HomeCellCreate,
                     service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.create_home_cell(
            body.name, body.zone_id,
            description=body.description,
            leader_id=body.leader_id,
            meeting_day=body.meeting_day,
            meeting_time=body.meeting_time,
            meeting_location=body.meeting_location,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/homecells/{home_cell_id}", response_model=HomeCellOut)
def get_home_cell(home_cell_id: int,
                  service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.get_home_cell(home_cell_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.put("/homecells/{home_cell_id}", response_model=HomeCellOut)
def update_home_cell(home_cell_id: int, body: HomeCellUpdate,
                     service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.update_home_cell(home_cell_id, body.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/homecells/{home_cell_id}")
def delete_home_cell(home_cell_id: int,
                     unassign_members: bool = Query(False),
                     service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        service.delete_home_cell(home_cell_id, unassign_members=unassign_members)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"status": "deleted", "home_cell_id": home_cell_id}


@router.get("/homecells/{home_cell_id}/members", response_model=List[MemberOut])
def list_home_cell_members(home_cell_id: int,
                           active_only: bool = Query(False),
                           service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.members_of_cell(home_cell_id, active_only=active_only)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/homecells/{home_cell_id}/members/{member_id}", response_model=MemberOut)
def assign_member(home_cell_id: int, member_id: str,
                  body: Optional[AssignRequest] = Body(None),
                  service: AssignmentService = Depends(get_assignment_service)):
    """Place a member in this home cell, recording a transfer if they had one."""
    try:
        return service.assign_member(home_cell_id, member_id,
                                     notes=body.notes if body else None)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/homecells/{home_cell_id}/stats", response_model=HomeCellStats)
def home_cell_stats(home_cell_id: int,
                    service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.cell_stats(home_cell_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/homecells/{home_cell_id}/summary", response_model=HomeCellSummary)
def home_cell_summary(home_cell_id: int,
                      reports: ReportService = Depends(get_report_service)):
    try:
        return reports.home_cell_summary(home_cell_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/homecells/{home_cell_id}/delete-impact", response_model=DeleteImpact)
def home_cell_delete_impact(home_cell_id: int,
                            service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.delete_impact_home_cell(home_cell_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/homecells/{home_cell_id}/export")
def export_home_cell(home_cell_id: int, format: str = Query(default="pdf"),
                     reports: ReportService = Depends(get_report_service)):
    try:
        filename, media_type, content = reports.export_home_cell(home_cell_id, format)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return Response(content=content, media_type=media_type,
                    headers={"Content-Disposition": f'attachment; filename="{filename}"'})
