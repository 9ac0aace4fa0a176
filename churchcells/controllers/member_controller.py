# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Member directory — the minimal record set the assignment flows need."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from churchcells.core.dependencies import get_assignment_service
from churchcells.core.errors import NotFoundError, ValidationError
from churchcells.schemas import MemberCreate, MemberOut
from churchcells.services.assignment_service import AssignmentService

router = APIRouter(prefix="/api/members", tags=["Members"])


@router.get("", response_model=List[MemberOut])
def list_members(unassigned: bool = Query(False),
                 service: AssignmentService = Depends(get_assignment_service)):
    return service.list_members(unassigned_only=unassigned)


@router.post("", status_code=201, response_model=MemberOut)
def create_member(body: MemberCreate,
                  service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.create_member(**body.model_dump())
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/{member_id}", response_model=MemberOut)
def get_member(member_id: str, service: AssignmentService = Depends(get_assignment_service)):
    try:
        return service.get_member(member_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
