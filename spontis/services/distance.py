"""Google Maps web-service client: distance matrix and place lookups."""
import logging
import math
from dataclasses import dataclass
from typing import Optional

import httpx

from spontis.core.config import settings
from spontis.core.metrics import distance_lookups

logger = logging.getLogger(__name__)


class DistanceLookupError(Exception):
    pass


@dataclass(frozen=True)
class DistanceResult:
    distance_km: float
    duration_min: int


def format_coordinates(lat: float, lng: float) -> str:
    return f"{lat},{lng}"


class DistanceMatrixClient:

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api",
        timeout: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "DistanceMatrixClient":
        return cls(
            api_key=settings.GOOGLE_MAPS_API_KEY,
            base_url=settings.GOOGLE_MAPS_BASE_URL,
            timeout=settings.MAPS_TIMEOUT,
        )

    async def _get(self, path: str, params: dict) -> dict:
        if not self.api_key:
            raise DistanceLookupError("Google Maps API key missing")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}/{path}",
                    params={**params, "key": self.api_key},
                )
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            raise DistanceLookupError(f"Google Maps timeout on {path}") from e
        except httpx.HTTPStatusError as e:
            raise DistanceLookupError(f"Google Maps returned HTTP {e.response.status_code} on {path}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise DistanceLookupError(f"Google Maps request failed on {path}: {e}") from e

    async def distance(self, origins: str, destinations: str) -> DistanceResult:
        """Driving distance between two points ("lat,lng" or an address)."""
        try:
            data = await self._get(
                "distancematrix/json",
                {"units": "metric", "mode": "driving", "origins": origins, "destinations": destinations},
            )
            result = parse_distance_matrix(data)
        except DistanceLookupError:
            distance_lookups.labels(status="error").inc()
            raise
        distance_lookups.labels(status="ok").inc()
        return result

    async def autocomplete(self, text: str) -> dict:
        data = await self._get(
            "place/autocomplete/json",
            {"input": text, "components": "country:ch", "language": "fr", "types": "address"},
        )
        logger.debug(
            f"Autocomplete input={text!r} status={data.get('status')} "
            f"predictions={len(data.get('predictions') or [])}"
        )
        return data

    async def place_details(self, place_id: str) -> dict:
        return await self._get(
            "place/details/json",
            {"place_id": place_id, "fields": "formatted_address,geometry,address_components", "language": "fr"},
        )


def parse_distance_matrix(data: dict) -> DistanceResult:
    if data.get("status") != "OK":
        raise DistanceLookupError(f"Distance matrix status {data.get('status')}")
    try:
        element = data["rows"][0]["elements"][0]
    except (KeyError, IndexError, TypeError) as e:
        raise DistanceLookupError("Distance matrix response has no element") from e
    if element.get("status") != "OK":
        raise DistanceLookupError(f"Distance matrix element status {element.get('status')}")

    return DistanceResult(
        distance_km=element["distance"]["value"] / 1000,
        duration_min=math.floor(element["duration"]["value"] / 60 + 0.5),
    )


def get_distance_client() -> DistanceMatrixClient:
    return DistanceMatrixClient.from_settings()
