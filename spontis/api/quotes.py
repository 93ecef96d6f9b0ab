"""Quote endpoint with Redis caching"""
import json
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from spontis.db.session import get_db
from spontis.schemas.quote import QuoteRequest, QuoteResponse
from spontis.services.pricing import calculate_quote
from spontis.services.pricing_sets import get_active_pricing_set, get_pricing_set
from spontis.core.security import get_current_user
from spontis.core.rate_limit import check_rate_limit
from spontis.core.redis import get_redis
from spontis.core.config import settings
from spontis.core.enums import QuoteSource
from spontis.core.auth_utils import check_not_found
from spontis.core.metrics import quotes_computed, quote_cache_hits, quote_cache_misses
from spontis.utils.hashing import quote_cache_key, quote_cache_key_prefix

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


async def drop_cached_quotes(pricing_set_id: int) -> int:
    """Forget every cached quote of a pricing set; returns how many were dropped."""
    redis = get_redis()
    if redis is None:
        return 0
    try:
        keys = [k async for k in redis.scan_iter(match=quote_cache_key_prefix(pricing_set_id) + "*")]
        if keys:
            await redis.delete(*keys)
    except Exception as e:
        logger.warning(f"Cache invalidation failed for pricing set {pricing_set_id}: {e}")
        return 0
    return len(keys)


@router.post("/calc", response_model=QuoteResponse)
async def calc_quote(
    req: QuoteRequest,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(current_user.id)

    if req.pricing_set_id is not None:
        pricing_set = await get_pricing_set(db, req.pricing_set_id)
        check_not_found(pricing_set, "Pricing set", req.pricing_set_id)
    else:
        pricing_set = await get_active_pricing_set(db)
        check_not_found(pricing_set, "Active pricing set")

    cache_key = quote_cache_key(req.model_dump(exclude={"pricing_set_id"}), pricing_set.id)
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(cache_key)
            if cached:
                quote_cache_hits.inc()
                return QuoteResponse.model_validate(json.loads(cached))
            quote_cache_misses.inc()
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")

    breakdown = calculate_quote(
        req.distance_km,
        req.surface_m2,
        pricing_set.variables or {},
        pricing_set.supplements or [],
        extras_chf=req.extras_chf,
        min_charge_ht=req.min_charge_ht,
    )
    quotes_computed.labels(source=str(QuoteSource.API)).inc()
    result = QuoteResponse(
        pricing_set_id=pricing_set.id,
        currency=settings.DEFAULT_CURRENCY,
        breakdown=breakdown,
    )

    if redis is not None:
        try:
            await redis.set(
                cache_key,
                result.model_dump_json(),
                ex=settings.QUOTE_CACHE_TTL
            )
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return result
