from pydantic import BaseModel


class DistanceOut(BaseModel):
    origins: str
    destinations: str
    distance_km: float
    duree_min: int
