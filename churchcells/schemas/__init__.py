# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas — used ONLY at the HTTP boundary."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class _NamedModel(BaseModel):
    """Strips the ``name`` field; emptiness is checked by the service layer."""

    @field_validator("name", check_fields=False)
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if isinstance(v, str) else v


# ── Districts ──

class DistrictCreate(_NamedModel):
    name: str = Field(default="", max_length=255)
    description: Optional[str] = None
    leader_id: Optional[str] = Field(None, max_length=64)


class DistrictUpdate(_NamedModel):
    """Partial update — only fields present in the body are merged."""
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    leader_id: Optional[str] = Field(None, max_length=64)
    is_active: Optional[bool] = None


class DistrictOut(BaseModel):
    id: int
    code: str
    name: str
    description: Optional[str] = None
    leader_id: Optional[str] = None
    is_active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ── Zones ──

class ZoneCreate(_NamedModel):
    name: str = Field(default="", max_length=255)
    district_id: Optional[int] = None
    description: Optional[str] = None
    leader_id: Optional[str] = Field(None, max_length=64)


class ZoneUpdate(_NamedModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    leader_id: Optional[str] = Field(None, max_length=64)
    is_active: Optional[bool] = None


class ZoneOut(BaseModel):
    id: int
    code: str
    district_id: int
    name: str
    description: Optional[str] = None
    leader_id: Optional[str] = None
    is_active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# ── Home cells ──

class HomeCellCreate(_NamedModel):
    name: str = Field(default="", max_length=255)
    zone_id: Optional[int] = None
    # Accepted for compatibility with older clients; always re-derived from the zone.
    district_id: Optional[int] = None
    description: Optional[str] = None
    leader_id: Optional[str] = Field(None, max_length=64)
    meeting_day: Optional[str] = None
    meeting_time: Optional[str] = None
    meeting_location: Optional[str] = Field(None, max_length=255)


class HomeCellUpdate(_NamedModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    leader_id: Optional[str] = Field(None, max_length=64)
    meeting_day: Optional[str] = None
    meeting_time: Optional[str] = None
    meeting_location: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None


class HomeCellOut(BaseModel):
    id: int
    code: str
    zone_id: int
    district_id: int
    name: str
    description: Optional[str] = None
    leader_id: Optional[str] = None
    meeting_day: Optional[str] = None
    meeting_time: Optional[str] = None
    meeting_location: Optional[str] = None
    is_active: bool
    member_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DeleteImpact(BaseModel):
    zones: int
    home_cells: int
    orphaned_members: int


# ── Members & assignment ──

class MemberCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    member_id: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    gender: Optional[str] = Field(None, max_length=20)
    membership_status: str = Field(default="Active", max_length=30)
    home_cell: Optional[str] = Field(None, max_length=255)

    @field_validator("full_name")
    @classmethod
    def normalise_full_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full_name cannot be blank")
        return v


class MemberOut(BaseModel):
    id: str
    member_id: str
    full_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    membership_status: str
    home_cell: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AssignRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class TransferRequest(BaseModel):
    home_cell_name: str = Field(..., min_length=1, max_length=255)
    notes: Optional[str] = Field(None, max_length=2000)


class AutoAssignRequest(BaseModel):
    zone_id: Optional[int] = None


class AssignmentOverview(BaseModel):
    total_members: int
    assigned: int
    unassigned: int
    assignment_rate: int


class HomeCellStats(BaseModel):
    total_members: int
    active_members: int
    inactive_members: int
    male_members: int
    female_members: int
    male_percentage: int
    female_percentage: int
    active_percentage: int


class HomeCellSummary(HomeCellStats):
    home_cell_id: int
    home_cell_name: str


class DistrictSummary(BaseModel):
    district_id: int
    district_name: str
    zones: int
    home_cells: int
    total_members: int
    active_members: int
    inactive_members: int


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None

