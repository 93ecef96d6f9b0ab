from sqlalchemy import Column, String
from spontis.models.base import BaseModel

class Audit(BaseModel):
    __tablename__ = "audits"

    # identity-provider user id, users live outside this service
    user_id = Column(String(64), nullable=False, index=True)

    endpoint = Column(String(255), nullable=False)
    payload_hash = Column(String(128), nullable=False)
