# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Zone CRUD, home-cells-by-zone, cascade impact."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from churchcells.core.dependencies import get_hierarchy_service
from churchcells.core.errors import NotFoundError, ValidationError
from churchcells.schemas import DeleteImpact, HomeCellOut, ZoneCreate, ZoneOut, ZoneUpdate
from churchcells.services.hierarchy_service import HierarchyService

router = APIRouter(prefix="/api/homecells", tags=["Zones"])


@router.get("/zones", response_model=List[ZoneOut])
def list_zones(service: HierarchyService = Depends(get_hierarchy_service)):
    return service.list_zones()


@router.post("/zones", status_code=201, response_model=ZoneOut)
def create_zone(body: ZoneCreate,
                service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.create_zone(body.name, body.district_id,
                                   body.description, body.leader_id)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/zones/{zone_id}", response_model=ZoneOut)
def get_zone(zone_id: int, service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.get_zone(zone_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.put("/zones/{zone_id}", response_model=ZoneOut)
def update_zone(zone_id: int, body: ZoneUpdate,
                service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.update_zone(zone_id, body.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/zones/{zone_id}")
def delete_zone(zone_id: int, service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        service.delete_zone(zone_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"status": "deleted", "zone_id": zone_id}


@router.get("/zones/{zone_id}/homecells", response_model=List[HomeCellOut])
def list_home_cells_by_zone(zone_id: int,
                            service: HierarchyService = Depends(get_hierarchy_service)):
    return service.list_home_cells_by_zone(zone_id)


@router.get("/zones/{zone_id}/delete-impact", response_model=DeleteImpact)
def zone_delete_impact(zone_id: int,
                       service: HierarchyService = Depends(get_hierarchy_service)):
    try:
        return service.delete_impact_zone(zone_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
