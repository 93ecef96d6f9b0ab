from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from spontis.db.session import get_db
from spontis.schemas.pricing import PricingSetCreate, PricingSetOut
from spontis.services import pricing_sets as store
from spontis.api.quotes import drop_cached_quotes
from spontis.core.security import require_admin
from spontis.core.audit_decorator import audit_log
from spontis.core.auth_utils import check_not_found
from spontis.core.enums import AuditAction
from spontis.core.response_builders import build_pricing_set_response, build_pricing_set_response_list

router = APIRouter(prefix="/admin/pricing", tags=["admin", "pricing"])


@router.get("/", response_model=List[PricingSetOut])
async def list_pricing_sets(
    active: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    pricing_sets = await store.list_pricing_sets(db, active_only=active)
    return build_pricing_set_response_list(pricing_sets)


@router.post("/", response_model=PricingSetOut)
@audit_log(AuditAction.CREATE_PRICING_SET)
async def create_pricing_set(
    payload: PricingSetCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    pricing_set = await store.create_pricing_set(db, payload, created_by=current_user.id)
    return build_pricing_set_response(pricing_set)


@router.get("/{pricing_set_id}", response_model=PricingSetOut)
async def get_pricing_set(
    pricing_set_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    pricing_set = await store.get_pricing_set(db, pricing_set_id)
    check_not_found(pricing_set, "Pricing set", pricing_set_id)
    return build_pricing_set_response(pricing_set)


@router.delete("/{pricing_set_id}")
@audit_log(AuditAction.DELETE_PRICING_SET)
async def delete_pricing_set(
    pricing_set_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    deleted = await store.delete_pricing_set(db, pricing_set_id)
    check_not_found(deleted, "Pricing set", pricing_set_id)
    await drop_cached_quotes(pricing_set_id)
    return {"deleted": True}


@router.patch("/{pricing_set_id}/activate", response_model=PricingSetOut)
@audit_log(AuditAction.ACTIVATE_PRICING_SET)
async def activate_pricing_set(
    pricing_set_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    pricing_set = await store.activate_pricing_set(db, pricing_set_id)
    check_not_found(pricing_set, "Pricing set", pricing_set_id)
    return build_pricing_set_response(pricing_set)
