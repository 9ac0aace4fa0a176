# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Hierarchy client — async HTTP access to a running home-cell service.
No retries; every failure surfaces as a HierarchyError subclass.
"""

from typing import Any, Dict, List, Optional, Tuple

import httpx

from churchcells.core.config import settings
from churchcells.core.errors import NetworkError, NotFoundError, ValidationError
from churchcells.core.logging import get_logger

logger = get_logger(__name__)

PREFIX = "/api/homecells"


def _detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list):
        # FastAPI request-validation errors
        return "; ".join(str(d.get("msg", d)) for d in detail)
    return str(detail or body)


def build_http_client(base_url: Optional[str] = None,
                      timeout: Optional[float] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url or settings.API_BASE_URL,
                             timeout=timeout or settings.API_TIMEOUT)


class HierarchyClient:
    def __init__(self, http_client: httpx.AsyncClient):
        self._client = http_client

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("Request failed method=%s path=%s: %s", method, path, exc)
            raise NetworkError(f"Could not reach home-cell service: {exc}") from exc
        if resp.status_code == 404:
            raise NotFoundError(_detail(resp))
        if resp.status_code in (400, 422):
            raise ValidationError(_detail(resp))
        if resp.status_code >= 400:
            raise NetworkError(_detail(resp), status_code=resp.status_code)
        return resp

    async def _json(self, method: str, path: str, **kwargs) -> Any:
        return (await self._send(method, path, **kwargs)).json()

    # ── Districts ──

    async def list_districts(self) -> List[Dict[str, Any]]:
        return await self._json("GET", f"{PREFIX}/districts")

    async def get_district(self, district_id: int) -> Dict[str, Any]:
        return await self._json("GET", f"{PREFIX}/districts/{district_id}")

    async def create_district(self, name: str, description: Optional[str] = None,
                              leader_id: Optional[str] = None) -> Dict[str, Any]:
        return await self._json("POST", f"{PREFIX}/districts", json={
            "name": name, "description": description, "leader_id": leader_id,
        })

    async def update_district(self, district_id: int, **fields) -> Dict[str, Any]:
        return await self._json("PUT", f"{PREFIX}/districts/{district_id}", json=fields)

    async def delete_district(self, district_id: int) -> Dict[str, Any]:
        return await self._json("DELETE", f"{PREFIX}/districts/{district_id}")

    async def list_zones_by_district(self, district_id: int) -> List[Dict[str, Any]]:
        return await self._json("GET", f"{PREFIX}/districts/{district_id}/zones")

    async def district_summary(self, district_id: int) -> Dict[str, Any]:
        return await self._json("GET", f"{PREFIX}/districts/{district_id}/summary")

    async def district_delete_impact(self, district_id: int) -> Dict[str, int]:
        return await self._json("GET", f"{PREFIX}/districts/{district_id}/delete-impact")

    async def export_district(self, district_id: int, fmt: str = "pdf") -> Tuple[str, bytes]:
        resp = await self._send("GET", f"{PREFIX}/districts/{district_id}/export",
                                params={"format": fmt})
        return _filename(resp), resp.content

    # ── Zones ──

    async def list_zones(self) -> List[Dict[str, Any]]:
        return await self._json("GET", f"{PREFIX}/zones")

    async def get_zone(self, zone_id: int) -> Dict[str, Any]:
        return await self._json("GET", f"{PREFIX}/zones/{zone_id}")

    async def create_zone(self, name: str, district_id: Optional[int],
                          description: Optional[str] = None,
                          leader_id: Optional[str] = None) -> Dict[str, Any]:
        return await self._json("POST", f"{PREFIX}/zones", json={
            "name": name, "district_id": district_id,
            "description": description, "leader_id": leader_id,
        })

    async def update_zone(self, zone_id: int, **fields) -> Dict[str, Any]:
        return await self._json("PUT", f"{PREFIX}/zones/{zone_id}", json=fields)

    async def delete_zone(self, zone_id: int) -> Dict[str, Any]:
        return await self._json("DELETE", f"{PREFIX}/zones/{zone_id}")

    async def list_home_cells_by_zone(self, zone_id: int) -> List[Dict[str, Any]]:
        return await self._json("GET", f"{PREFIX}/zones/{zone_id}/homecells")

    async def zone_delete_impact(self, zone_id: int) -> Dict[str, int]:
        return await self._json("GET", f"{PREFIX}/zones/{zone_id}/delete-impact")

    # ── Home cells ──

    async def list_home_cells(self, district_id: Optional[int] = None,
                              zone_id: Optional[int] = None,
                              search: Optional[str] = None,
                              leader_id: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {k: v for k, v in (("district_id", district_id), ("zone_id", zone_id),
                                    ("search", search), ("leader_id", leader_id))
                  if v is not None}
        return await self._json("GET", f"{PREFIX}/homecells", params=params)

    async def get_home_cell(self, home_cell_id: int) -> Dict[str, Any]:
        return await self._json("GET", f"{PREFIX}/homecells/{home_cell_id}")

    async def create_home_cell(self, name: str, zone_id: Optional[int], **fields) -> Dict[str, Any]:
        return await self._json("POST", f"{PREFIX}/homecells",
                                json={"name": name, "zone_id": zone_id, **fields})

    async def update_home_cell(self, home_cell_id: int, **fields) -> Dict[str, Any]:
        return await self._json("PUT", f"{PREFIX}/homecells/{home_cell_id}", json=fields)

    async def delete_home_cell(self, home_cell_id: int,
                               unassign_members: bool = False) -> Dict[str, Any]:
        return await self._json("DELETE", f"{PREFIX}/homecells/{home_cell_id}",
                                params={"unassign_members": str(unassign_members).lower()})

    async def home_cell_members(self, home_cell_id: int,
                                active_only: bool = False) -> List[Dict[str, Any]]:
        return await self._json("GET", f"{PREFIX}/homecells/{home_cell_id}/members",
                                params={"active_only": str(active_only).lower()})

    async def assign_member(self, home_cell_id: int, member_id: str,
                            notes: Optional[str] = None) -> Dict[str, Any]:
        return await self._json("POST", f"{PREFIX}/homecells/{home_cell_id}/members/{member_id}",
                                json={"notes": notes})

    async def home_cell_stats(self, home_cell_id: int) -> Dict[str, int]:
        return await self._json("GET", f"{PREFIX}/homecells/{home_cell_id}/stats")

    async def home_cell_summary(self, home_cell_id: int) -> Dict[str, Any]:
        return await self._json("GET", f"{PREFIX}/homecells/{home_cell_id}/summary")

    async def home_cell_delete_impact(self, home_cell_id: int) -> Dict[str, int]:
        return await self._json("GET", f"{PREFIX}/homecells/{home_cell_id}/delete-impact")

    async def export_home_cell(self, home_cell_id: int, fmt: str = "pdf") -> Tuple[str, bytes]:
        resp = await self._send("GET", f"{PREFIX}/homecells/{home_cell_id}/export",
                                params={"format": fmt})
        return _filename(resp), resp.content

    # ── Hierarchy & assignment ──

    async def full_hierarchy(self) -> List[Dict[str, Any]]:
        return await self._json("GET", f"{PREFIX}/hierarchy/full")

    async def auto_assign(self, zone_id: Optional[int]) -> Dict[str, Any]:
        return await self._json("POST", f"{PREFIX}/auto-assign-members", json={"zone_id": zone_id})

    async def assignment_overview(self) -> Dict[str, int]:
        return await self._json("GET", f"{PREFIX}/assignments/overview")

    async def unassigned_members(self) -> List[Dict[str, Any]]:
        return await self._json("GET", f"{PREFIX}/members/unassigned")

    async def transfer_member(self, member_id: str, home_cell_name: str,
                              notes: Optional[str] = None) -> Dict[str, Any]:
        return await self._json("PUT", f"{PREFIX}/members/{member_id}/transfer",
                                json={"home_cell_name": home_cell_name, "notes": notes})

    async def unassign_member(self, member_id: str) -> Dict[str, Any]:
        return await self._json("DELETE", f"{PREFIX}/members/{member_id}/assignment")

    async def assignment_history(self, member_id: str) -> List[Dict[str, Any]]:
        return await self._json("GET", f"{PREFIX}/members/{member_id}/history")

    # ── Member directory ──

    async def list_members(self, unassigned: bool = False) -> List[Dict[str, Any]]:
        return await self._json("GET", "/api/members",
                                params={"unassigned": str(unassigned).lower()})

    async def get_member(self, member_id: str) -> Dict[str, Any]:
        return await self._json("GET", f"/api/members/{member_id}")

    async def create_member(self, full_name: str, **fields) -> Dict[str, Any]:
        return await self._json("POST", "/api/members", json={"full_name": full_name, **fields})


def _filename(resp: httpx.Response) -> str:
    disposition = resp.headers.get("content-disposition", "")
    marker = "filename="
    if marker not in disposition:
        return "export"
    return disposition.split(marker, 1)[1].strip().strip('"')
