from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class QuoteRequest(BaseModel):
    distance_km: float = Field(ge=0, allow_inf_nan=False)
    surface_m2: float = Field(ge=0, allow_inf_nan=False)
    extras_chf: float = Field(0.0, ge=0, allow_inf_nan=False)
    min_charge_ht: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    pricing_set_id: Optional[int] = None


class QuoteBreakdown(BaseModel):
    """Every intermediate amount of one quote, in computation order.

    Only ``estimate_ttc`` is rounded; everything else keeps full float
    precision.
    """

    model_config = ConfigDict(frozen=True)

    base_ht: float
    pct_sum: float
    fix_sum: float
    crane_pct: float
    crane_fix: float
    pct_multiplier: float
    after_pct: float
    after_fixed: float
    after_crane_pct: float
    estimate_ht: float
    estimate_ttc: float


class QuoteResponse(BaseModel):
    pricing_set_id: int
    currency: str
    breakdown: QuoteBreakdown
