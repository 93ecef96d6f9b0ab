import logging
from typing import Optional
from sqlalchemy.future import select
from spontis.db.session import AsyncSessionLocal
from spontis.core.enums import QuoteSource
from spontis.core.metrics import quotes_computed
from spontis.models.mandat import Mandat
from spontis.schemas.quote import QuoteBreakdown
from spontis.services.distance import DistanceLookupError, DistanceResult, format_coordinates, get_distance_client
from spontis.services.mandat_pricing import price_mandat
from spontis.services.pricing_sets import get_active_pricing_set

logger = logging.getLogger(__name__)


async def requote_mandat_async(mandat_id: int) -> Optional[QuoteBreakdown]:
    """Redo the distance lookup and reprice a mandate with the active set.

    A failed lookup keeps the distance already stored on the mandate.
    Database and unexpected errors propagate so the Celery task retries.
    """
    async with AsyncSessionLocal() as db:
        res = await db.execute(select(Mandat).where(Mandat.id == mandat_id))
        mandat = res.scalars().first()
        if not mandat:
            logger.warning(f"Requote skipped: mandat {mandat_id} not found")
            return None

        pricing_set = await get_active_pricing_set(db)
        if pricing_set is None:
            logger.warning(f"Requote skipped for mandat {mandat_id}: no active pricing set")
            return None

        distance = None
        if None not in (mandat.depart_lat, mandat.depart_lng, mandat.arrivee_lat, mandat.arrivee_lng):
            try:
                distance = await get_distance_client().distance(
                    format_coordinates(mandat.depart_lat, mandat.depart_lng),
                    format_coordinates(mandat.arrivee_lat, mandat.arrivee_lng),
                )
            except DistanceLookupError as e:
                logger.warning(f"Requote of mandat {mandat_id}: distance lookup failed: {e}")

        if distance is None and mandat.distance_km is not None:
            distance = DistanceResult(mandat.distance_km, mandat.duree_estimee_min or 0)

        old_ttc = mandat.prix_estime_ttc
        quote = price_mandat(mandat, pricing_set, distance)
        quotes_computed.labels(source=str(QuoteSource.REQUOTE)).inc()
        db.add(mandat)
        await db.commit()

        if old_ttc != quote.estimate_ttc:
            logger.info(f"Mandat {mandat_id} requoted: ttc {old_ttc} -> {quote.estimate_ttc}")
        return quote
