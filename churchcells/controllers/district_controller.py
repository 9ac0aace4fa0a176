# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: District CRUD, zones-by-district, summaries, cascade impact, export."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.responses import Response

from churchcells.core.dependencies import get_hierarchy_service, get_report_service
from churchcells.core.errors import NotFoundError, ValidationError
from churchcells.schemas import (
    DeleteImpact, DistrictCreate, DistrictOut, DistrictSummary, DistrictUpdate, ZoneOut,
)
from churchcells.services.hierarchy_service import HierarchyService
from churchcells.services.report_service import ReportService

router = APIRouter(prefix="/api/homecells", tags=["Districts"])


@router.get("/districts", response_model=List[DistrictOut])
def list_districts(service: HierarchyService = Depends(get_hierarchy_service)):
    return service.list_districts()


@router.post("/districts", status_code=201, response_model=DistrictOut)
def create_district(body: DistrictCreate,
                    service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.create_district(body.name, body.description, body.leader_id)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/districts/{district_id}", response_model=DistrictOut)
def get_district(district_id: int,
                 service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.get_district(district_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.put("/districts/{district_id}", response_model=DistrictOut)
def update_district(district_id: int, body: DistrictUpdate,
                    service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.update_district(district_id, body.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/districts/{district_id}")
def delete_district(district_id: int,
                    service: HierarchyService = Depends(get_hierarchy_service)):
    """Delete a district together with its zones and home cells."""
    try:
        service.delete_district(district_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"status": "deleted", "district_id": district_id}


@router.get("/districts/{district_id}/zones", response_model=List[ZoneOut])
def list_zones_by_district(district_id: int,
                           service: HierarchyService = Depends(get_hierarchy_service)):
    return service.list_zones_by_district(district_id)


@router.get("/districts/{district_id}/delete-impact", response_model=DeleteImpact)
def district_delete_impact(district_id: int,
                           service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.delete_impact_district(district_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/districts/{district_id}/summary", response_model=DistrictSummary)
def district_summary(district_id: int,
                     reports: ReportService = Depends(get_report_service)):
    try:
        return reports.district_summary(district_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/districts/{district_id}/export")
def export_district(district_id: int, format: str = Query(default="pdf"),
                    reports: ReportService = Depends(get_report_service)):
    try:
        filename, media_type, content = reports.export_district(district_id, format)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return Response(content=content, media_type=media_type,
                    headers={"Content-Disposition": f'attachment; filename="{filename}"'})
