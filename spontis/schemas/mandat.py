from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from spontis.core.enums import MandatStatus


class AddressIn(BaseModel):
    adresse: str
    lat: Optional[float] = None
    lng: Optional[float] = None

    @field_validator("adresse")
    @classmethod
    def adresse_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("address is required")
        return v


class MandatCreate(BaseModel):
    nom: str
    description: str
    images: List[str] = []

    depart_adresse: AddressIn
    depart_contact: Optional[str] = None
    arrivee_adresse: AddressIn
    arrivee_contact: Optional[str] = None

    enlevement_souhaite_debut_at: datetime
    enlevement_souhaite_fin_at: datetime

    type_marchandise: Optional[str] = None
    poids_total_kg: Optional[float] = Field(None, ge=0)
    volume_total_m3: Optional[float] = Field(None, ge=0)
    surface_m2: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    nombre_colis: Optional[int] = Field(None, ge=0)
    type_vehicule: Optional[str] = None
    moyen_chargement: Optional[str] = None

    @field_validator("nom", "description")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field is required")
        return v


class MandatOut(BaseModel):
    id: int
    created_by: str
    status: MandatStatus
    nom: str
    description: str
    images: list = []

    depart_adresse: str
    depart_lat: Optional[float] = None
    depart_lng: Optional[float] = None
    arrivee_adresse: str
    arrivee_lat: Optional[float] = None
    arrivee_lng: Optional[float] = None

    enlevement_souhaite_debut_at: datetime
    enlevement_souhaite_fin_at: datetime

    surface_m2: Optional[float] = None

    pricing_set_id: Optional[int] = None
    tarif_km_base_chf: Optional[float] = None
    maj_carburant_pct: Optional[float] = None
    maj_embouteillage_pct: Optional[float] = None
    tva_rate_pct: Optional[float] = None
    autre_supp: Optional[list] = None
    surcharge_grue_pct: Optional[float] = None
    surcharge_grue_chf: Optional[float] = None
    distance_km: Optional[float] = None
    duree_estimee_min: Optional[int] = None
    prix_base_ht: Optional[float] = None
    prix_estime_ht: Optional[float] = None
    prix_estime_ttc: Optional[float] = None
    monnaie: str

    created_at: datetime
    updated_at: Optional[datetime] = None
