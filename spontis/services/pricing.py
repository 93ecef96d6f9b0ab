"""Quote calculation for transport mandates.

The pipeline turns a road distance, a footprint surface, the four rate
variables of a pricing set and its supplements into a tax-inclusive
estimate:

    base_ht        = distance_km * surface_m2 * tarif_km_base_chf
    pct_multiplier = 1 + (carburant + embouteillage + sum(pct supplements)) / 100
    after_pct      = base_ht * pct_multiplier
    after_fixed    = after_pct + sum(fixed supplements) + crane_fix + extras_chf
    after_crane    = after_fixed * (1 + crane_pct / 100)
    estimate_ht    = max(after_crane, min_charge_ht)
    estimate_ttc   = round2(estimate_ht * (1 + tva_rate_pct / 100))

The first "grue" (crane) supplement of each type is applied a second
time on top of the regular aggregates. Persisted mandate prices rely on
that, so it is kept as is.

``calculate_quote`` does no I/O and never raises: missing or malformed
numbers become NaN and propagate. ``calculate_quote_strict`` is the
validating entry point for callers that want an error instead.
"""
import logging
import math
from collections.abc import Mapping
from typing import Any, Iterable, Optional

from spontis.core.enums import SupplementType
from spontis.schemas.quote import QuoteBreakdown

logger = logging.getLogger(__name__)

CRANE_TOKEN = "grue"
VARIABLE_NAMES = (
    "tarif_km_base_chf",
    "maj_carburant_pct",
    "maj_embouteillage_pct",
    "tva_rate_pct",
)


class QuoteInputError(ValueError):
    pass


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _is_pct(supplement: Any) -> bool:
    return str(_field(supplement, "type")) == SupplementType.PCT.value


def _is_crane(supplement: Any) -> bool:
    return CRANE_TOKEN in str(_field(supplement, "nom") or "").lower()


def round2(value: float) -> float:
    """Round to cents, ties toward +infinity (same as JS Math.round).

    Values too large to scale to cents come back unchanged.
    """
    scaled = value * 100
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled + 0.5) / 100


def find_crane_supplement(supplements: Iterable[Any], pct: Optional[bool] = None) -> Optional[Any]:
    """First supplement whose name contains "grue".

    ``pct`` narrows the lookup to percentage (True) or fixed (False)
    supplements; None matches either type.
    """
    for s in supplements:
        if not _is_crane(s):
            continue
        if pct is None or _is_pct(s) == pct:
            return s
    return None


def calculate_quote(
    distance_km: float,
    surface_m2: float,
    variables: Any,
    supplements: Iterable[Any],
    extras_chf: float = 0.0,
    min_charge_ht: Optional[float] = None,
) -> QuoteBreakdown:
    supplements = list(supplements or [])
    distance_km = _number(distance_km)
    surface_m2 = _number(surface_m2)
    extras_chf = _number(extras_chf)

    tarif_km = _number(_field(variables, "tarif_km_base_chf"))
    carburant = _number(_field(variables, "maj_carburant_pct"))
    embouteillage = _number(_field(variables, "maj_embouteillage_pct"))
    tva_rate = _number(_field(variables, "tva_rate_pct"))

    pct_sum = sum((_number(_field(s, "montant")) for s in supplements if _is_pct(s)), 0.0)
    fix_sum = sum((_number(_field(s, "montant")) for s in supplements if not _is_pct(s)), 0.0)

    crane_pct_item = find_crane_supplement(supplements, pct=True)
    crane_fix_item = find_crane_supplement(supplements, pct=False)
    crane_pct = _number(_field(crane_pct_item, "montant")) if crane_pct_item is not None else 0.0
    crane_fix = _number(_field(crane_fix_item, "montant")) if crane_fix_item is not None else 0.0

    base_ht = distance_km * surface_m2 * tarif_km
    logger.debug(f"[Quote] base_ht distance_km={distance_km} surface_m2={surface_m2} tarif_km={tarif_km} -> {base_ht}")

    pct_multiplier = 1 + (carburant + embouteillage + pct_sum) / 100
    logger.debug(f"[Quote] pct_multiplier {pct_multiplier}")

    after_pct = base_ht * pct_multiplier
    logger.debug(f"[Quote] after_pct {after_pct}")

    after_fixed = after_pct + fix_sum + crane_fix + extras_chf
    logger.debug(f"[Quote] after_fixed {after_fixed}")

    after_crane_pct = after_fixed * (1 + crane_pct / 100)
    logger.debug(f"[Quote] after_crane_pct {after_crane_pct}")

    floor_ht = _number(min_charge_ht) if min_charge_ht is not None else 0.0
    # a NaN floor must win, max() would keep its first argument
    estimate_ht = floor_ht if math.isnan(floor_ht) else max(after_crane_pct, floor_ht)
    logger.debug(f"[Quote] estimate_ht {estimate_ht}")

    estimate_ttc = round2(estimate_ht * (1 + tva_rate / 100))
    logger.debug(f"[Quote] estimate_ttc {estimate_ttc}")

    return QuoteBreakdown(
        base_ht=base_ht,
        pct_sum=pct_sum,
        fix_sum=fix_sum,
        crane_pct=crane_pct,
        crane_fix=crane_fix,
        pct_multiplier=pct_multiplier,
        after_pct=after_pct,
        after_fixed=after_fixed,
        after_crane_pct=after_crane_pct,
        estimate_ht=estimate_ht,
        estimate_ttc=estimate_ttc,
    )


def _check_amount(name: str, value: Any) -> None:
    number = _number(value)
    if not math.isfinite(number):
        raise QuoteInputError(f"{name} must be a finite number, got {value!r}")
    if number < 0:
        raise QuoteInputError(f"{name} must not be negative, got {value!r}")


def validate_quote_inputs(
    distance_km: float,
    surface_m2: float,
    variables: Any,
    supplements: Iterable[Any],
    extras_chf: float = 0.0,
    min_charge_ht: Optional[float] = None,
) -> None:
    _check_amount("distance_km", distance_km)
    _check_amount("surface_m2", surface_m2)
    _check_amount("extras_chf", extras_chf)
    if min_charge_ht is not None:
        _check_amount("min_charge_ht", min_charge_ht)

    if variables is None:
        raise QuoteInputError("pricing variables are required")
    for name in VARIABLE_NAMES:
        value = _field(variables, name)
        if value is None:
            raise QuoteInputError(f"pricing variable {name} is missing")
        if not math.isfinite(_number(value)):
            raise QuoteInputError(f"pricing variable {name} must be a finite number, got {value!r}")

    for index, s in enumerate(supplements or []):
        if not str(_field(s, "nom") or "").strip():
            raise QuoteInputError(f"supplement #{index} has an empty name")
        if not math.isfinite(_number(_field(s, "montant"))):
            raise QuoteInputError(f"supplement {_field(s, 'nom')!r} has a non-numeric amount")


def calculate_quote_strict(
    distance_km: float,
    surface_m2: float,
    variables: Any,
    supplements: Iterable[Any],
    extras_chf: float = 0.0,
    min_charge_ht: Optional[float] = None,
) -> QuoteBreakdown:
    supplements = list(supplements or [])
    validate_quote_inputs(distance_km, surface_m2, variables, supplements, extras_chf, min_charge_ht)
    return calculate_quote(distance_km, surface_m2, variables, supplements, extras_chf, min_charge_ht)
