"""
KPI routes: individual and department KPIs, progress updates and the
department-to-individual hierarchy.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from goalforge.record_store import RecordStore, get_store
from goalforge.routes.common import get_current_account, http_error, ok
from goalforge.schemas import KPI, KPILevel, KPIType
from goalforge.services.kpi_service import KPIService, describe, sort_kpis

router = APIRouter(prefix="/api/v1/kpis", tags=["KPIs"])


class KPICreate(BaseModel):
    name: str
    description: Optional[str] = None
    kpi_type: KPIType = "numeric"
    target_value: float
    current_value: float = 0.0
    weight: float = 1.0
    level: KPILevel = "individual"
    linked_goal_ids: list[str] = []
    notes: Optional[str] = None


class KPIUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    kpi_type: Optional[KPIType] = None
    target_value: Optional[float] = None
    current_value: Optional[float] = None
    weight: Optional[float] = None
    level: Optional[KPILevel] = None
    linked_goal_ids: Optional[list[str]] = None
    notes: Optional[str] = None


class ProgressUpdate(BaseModel):
    current_value: float
    notes: Optional[str] = None


class ChildLinks(BaseModel):
    child_ids: list[str]


@router.get("")
async def list_kpis(
    sort: str = "name",
    level: Optional[str] = None,
    user=Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    try:
        kpis = KPIService.get_visible(store, user)
        if level:
            kpis = [k for k in kpis if k.level == level]
        return [describe(k) for k in sort_kpis(kpis, sort)]
    except Exception as e:
        raise http_error(e)


@router.post("")
async def create_kpi(body: KPICreate, user=Depends(get_current_account), store: RecordStore = Depends(get_store)):
    try:
        kpi = KPIService.create(store, user, KPI(user_id=user.id, **body.model_dump()))
        return ok(describe(kpi))
    except Exception as e:
        raise http_error(e)


@router.get("/{kpi_id}")
async def get_kpi(kpi_id: str, user=Depends(get_current_account), store: RecordStore = Depends(get_store)):
    try:
        kpi = KPIService.get_visible_by_id(store, user, kpi_id)
        parent = KPIService.resolve_parent(store, kpi)
        return {**describe(kpi), "parent": describe(parent) if parent else None}
    except Exception as e:
        raise http_error(e)


@router.put("/{kpi_id}")
async def update_kpi(
    kpi_id: str,
    body: KPIUpdate,
    user=Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    try:
        kpi = KPIService.update(store, user, kpi_id, body.model_dump(exclude_unset=True))
        return ok(describe(kpi))
    except Exception as e:
        raise http_error(e)


@router.post("/{kpi_id}/progress")
async def record_kpi_progress(
    kpi_id: str,
    body: ProgressUpdate,
    user=Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    try:
        kpi = KPIService.record_progress(store, user, kpi_id, body.current_value, body.notes)
        return ok(describe(kpi))
    except Exception as e:
        raise http_error(e)


@router.put("/{kpi_id}/children")
async def link_kpi_children(
    kpi_id: str,
    body: ChildLinks,
    user=Depends(get_current_account),
    store: RecordStore = Depends(get_store),
):
    """Replace the individual KPIs rolled up under a department KPI."""
    try:
        children = KPIService.link_children(store, user, kpi_id, body.child_ids)
        return ok([describe(c) for c in children])
    except Exception as e:
        raise http_error(e)


@router.get("/{kpi_id}/rollup")
async def kpi_rollup(kpi_id: str, user=Depends(get_current_account), store: RecordStore = Depends(get_store)):
    try:
        return ok(KPIService.rollup(store, user, kpi_id))
    except Exception as e:
        raise http_error(e)


@router.delete("/{kpi_id}")
async def delete_kpi(kpi_id: str, user=Depends(get_current_account), store: RecordStore = Depends(get_store)):
    try:
        KPIService.delete(store, user, kpi_id)
        return ok()
    except Exception as e:
        raise http_error(e)
