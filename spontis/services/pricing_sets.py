"""Pricing set persistence: named rate grids, at most one of them active."""
import logging
from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from spontis.models.base import utcnow
from spontis.models.pricing_set import PricingSet
from spontis.schemas.pricing import PricingSetCreate

logger = logging.getLogger(__name__)


async def list_pricing_sets(db: AsyncSession, active_only: bool = False) -> List[PricingSet]:
    q = select(PricingSet).order_by(PricingSet.created_at.desc(), PricingSet.id.desc())
    if active_only:
        q = q.where(PricingSet.is_active.is_(True))
    res = await db.execute(q)
    return list(res.scalars().all())


async def get_pricing_set(db: AsyncSession, pricing_set_id: int) -> Optional[PricingSet]:
    res = await db.execute(select(PricingSet).where(PricingSet.id == pricing_set_id))
    return res.scalars().first()


async def get_active_pricing_set(db: AsyncSession) -> Optional[PricingSet]:
    res = await db.execute(
        select(PricingSet)
        .where(PricingSet.is_active.is_(True))
        .order_by(PricingSet.activated_at.desc())
    )
    return res.scalars().first()


async def create_pricing_set(db: AsyncSession, payload: PricingSetCreate, created_by: str) -> PricingSet:
    pricing_set = PricingSet(
        name=payload.name,
        variables=payload.variables.model_dump(),
        supplements=[s.model_dump() for s in payload.supplements],
        is_active=False,
        created_by=created_by,
    )
    db.add(pricing_set)
    await db.commit()
    await db.refresh(pricing_set)
    logger.info(f"Pricing set {pricing_set.id} '{pricing_set.name}' created by {created_by}")
    return pricing_set


async def activate_pricing_set(db: AsyncSession, pricing_set_id: int) -> Optional[PricingSet]:
    pricing_set = await get_pricing_set(db, pricing_set_id)
    if pricing_set is None:
        return None

    # both updates commit together so readers never see two active sets
    await db.execute(
        update(PricingSet)
        .where(PricingSet.id != pricing_set_id)
        .values(is_active=False)
    )
    pricing_set.is_active = True
    pricing_set.activated_at = utcnow()
    db.add(pricing_set)
    await db.commit()
    await db.refresh(pricing_set)
    logger.info(f"Pricing set {pricing_set_id} is now active")
    return pricing_set


async def delete_pricing_set(db: AsyncSession, pricing_set_id: int) -> bool:
    pricing_set = await get_pricing_set(db, pricing_set_id)
    if pricing_set is None:
        return False
    if pricing_set.is_active:
        logger.warning(f"Deleting active pricing set {pricing_set_id}, mandate creation is blocked until another is activated")
    await db.delete(pricing_set)
    await db.commit()
    return True
