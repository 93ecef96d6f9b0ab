from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from spontis.core.enums import SupplementType


class PricingVariables(BaseModel):
    tarif_km_base_chf: float = Field(allow_inf_nan=False)
    maj_carburant_pct: float = Field(allow_inf_nan=False)
    maj_embouteillage_pct: float = Field(allow_inf_nan=False)
    tva_rate_pct: float = Field(allow_inf_nan=False)


class Supplement(BaseModel):
    nom: str = Field(min_length=1)
    # anything other than "pct" is billed as a flat amount ("fix", legacy "fixe")
    type: str = SupplementType.FIX.value
    montant: float = Field(allow_inf_nan=False)


class PricingSetCreate(BaseModel):
    name: str = Field(min_length=1)
    variables: PricingVariables
    supplements: List[Supplement] = []


class PricingSetSummary(BaseModel):
    id: int
    name: str
    is_active: bool
    created_at: datetime


class PricingSetOut(BaseModel):
    id: int
    name: str
    is_active: bool
    variables: dict
    supplements: list
    created_by: Optional[str] = None
    activated_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
