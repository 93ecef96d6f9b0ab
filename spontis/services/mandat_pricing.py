import logging
from typing import Optional

from spontis.core.config import settings
from spontis.core.enums import SupplementType
from spontis.models.mandat import Mandat
from spontis.models.pricing_set import PricingSet
from spontis.schemas.quote import QuoteBreakdown
from spontis.services.distance import DistanceResult
from spontis.services.pricing import calculate_quote, find_crane_supplement

logger = logging.getLogger(__name__)


def apply_pricing_snapshot(
    mandat: Mandat,
    pricing_set: PricingSet,
    distance: Optional[DistanceResult],
    quote: QuoteBreakdown,
) -> Mandat:
    variables = pricing_set.variables or {}
    supplements = list(pricing_set.supplements or [])

    mandat.pricing_set_id = pricing_set.id
    mandat.tarif_km_base_chf = variables.get("tarif_km_base_chf")
    mandat.maj_carburant_pct = variables.get("maj_carburant_pct")
    mandat.maj_embouteillage_pct = variables.get("maj_embouteillage_pct")
    mandat.tva_rate_pct = variables.get("tva_rate_pct")
    mandat.autre_supp = supplements

    # the display columns take the first crane line whatever its type
    grue = find_crane_supplement(supplements)
    is_pct = grue is not None and grue.get("type") == SupplementType.PCT.value
    mandat.surcharge_grue_pct = grue.get("montant") if grue is not None and is_pct else None
    mandat.surcharge_grue_chf = grue.get("montant") if grue is not None and not is_pct else None

    mandat.distance_km = distance.distance_km if distance else None
    mandat.duree_estimee_min = distance.duration_min if distance else None

    mandat.prix_base_ht = quote.base_ht
    mandat.prix_estime_ht = quote.estimate_ht
    mandat.prix_estime_ttc = quote.estimate_ttc
    mandat.monnaie = settings.DEFAULT_CURRENCY
    return mandat


def price_mandat(
    mandat: Mandat,
    pricing_set: PricingSet,
    distance: Optional[DistanceResult],
) -> QuoteBreakdown:
    """Quote the mandate against ``pricing_set`` and store the snapshot on it.

    Without a distance the quote is computed on 0 km, which leaves only
    fixed supplements; the requote job fixes it once the lookup succeeds.
    """
    quote = calculate_quote(
        distance.distance_km if distance else 0.0,
        mandat.surface_m2 or 0.0,
        pricing_set.variables or {},
        pricing_set.supplements or [],
    )
    apply_pricing_snapshot(mandat, pricing_set, distance, quote)
    logger.info(
        f"Mandat {mandat.id or 'new'} priced with set {pricing_set.id}: "
        f"ht={quote.estimate_ht} ttc={quote.estimate_ttc}"
    )
    return quote
