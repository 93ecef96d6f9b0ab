from sqlalchemy import Column, String, Boolean, DateTime, JSON
from spontis.models.base import BaseModel


class PricingSet(BaseModel):
    __tablename__ = "pricing_sets"

    name = Column(String(120), nullable=False)
    is_active = Column(Boolean, default=False, nullable=False, index=True)

    variables = Column(JSON, nullable=False)
    supplements = Column(JSON, nullable=False, default=list)

    created_by = Column(String(64), nullable=True)
    activated_at = Column(DateTime(timezone=True), nullable=True)
