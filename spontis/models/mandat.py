from sqlalchemy import Column, String, Float, Integer, Text, DateTime, ForeignKey, Enum, JSON
from spontis.models.base import BaseModel
from spontis.models.pricing_set import PricingSet  # noqa: F401 registers pricing_sets for the FK
from spontis.core.enums import MandatStatus


class Mandat(BaseModel):
    __tablename__ = "mandats"

    created_by = Column(String(64), nullable=False, index=True)
    status = Column(Enum(MandatStatus), default=MandatStatus.PENDING, nullable=False)

    nom = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    images = Column(JSON, nullable=False, default=list)

    depart_adresse = Column(String(255), nullable=False)
    depart_lat = Column(Float)
    depart_lng = Column(Float)
    depart_contact = Column(String(255))
    arrivee_adresse = Column(String(255), nullable=False)
    arrivee_lat = Column(Float)
    arrivee_lng = Column(Float)
    arrivee_contact = Column(String(255))

    enlevement_souhaite_debut_at = Column(DateTime(timezone=True), nullable=False)
    enlevement_souhaite_fin_at = Column(DateTime(timezone=True), nullable=False)

    type_marchandise = Column(String(120))
    poids_total_kg = Column(Float)
    volume_total_m3 = Column(Float)
    surface_m2 = Column(Float)
    nombre_colis = Column(Integer)
    type_vehicule = Column(String(80))
    moyen_chargement = Column(String(80))

    # Pricing snapshot taken when the mandate was (re)quoted
    pricing_set_id = Column(ForeignKey("pricing_sets.id", ondelete="SET NULL"), nullable=True)
    tarif_km_base_chf = Column(Float)
    maj_carburant_pct = Column(Float)
    maj_embouteillage_pct = Column(Float)
    tva_rate_pct = Column(Float)
    autre_supp = Column(JSON)
    surcharge_grue_pct = Column(Float)
    surcharge_grue_chf = Column(Float)
    distance_km = Column(Float)
    duree_estimee_min = Column(Integer)
    prix_base_ht = Column(Float)
    prix_estime_ht = Column(Float)
    prix_estime_ttc = Column(Float)
    monnaie = Column(String(3), nullable=False, default="CHF")
