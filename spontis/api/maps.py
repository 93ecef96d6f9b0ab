import logging
from fastapi import APIRouter, Depends, HTTPException, Query

from spontis.schemas.maps import DistanceOut
from spontis.core.security import get_current_user
from spontis.services.distance import DistanceMatrixClient, DistanceLookupError, get_distance_client

logger = logging.getLogger(__name__)
router = APIRouter(tags=["maps"])


@router.get("/maps/distance", response_model=DistanceOut)
async def distance(
    origins: str = Query(..., min_length=1),
    destinations: str = Query(..., min_length=1),
    current_user=Depends(get_current_user),
    client: DistanceMatrixClient = Depends(get_distance_client)
):
    try:
        result = await client.distance(origins, destinations)
    except DistanceLookupError as e:
        logger.error(f"Distance lookup failed for {origins} -> {destinations}: {e}")
        raise HTTPException(status_code=502, detail="Distance lookup failed")
    return DistanceOut(
        origins=origins,
        destinations=destinations,
        distance_km=result.distance_km,
        duree_min=result.duration_min,
    )


@router.get("/places/autocomplete")
async def places_autocomplete(
    input: str = Query(..., min_length=1),
    current_user=Depends(get_current_user),
    client: DistanceMatrixClient = Depends(get_distance_client)
):
    try:
        return await client.autocomplete(input)
    except DistanceLookupError as e:
        logger.error(f"Autocomplete failed for {input!r}: {e}")
        raise HTTPException(status_code=502, detail="Address suggestions unavailable")


@router.get("/places/details")
async def places_details(
    place_id: str = Query(..., min_length=1),
    current_user=Depends(get_current_user),
    client: DistanceMatrixClient = Depends(get_distance_client)
):
    try:
        return await client.place_details(place_id)
    except DistanceLookupError as e:
        logger.error(f"Place details failed for {place_id}: {e}")
        raise HTTPException(status_code=502, detail="Place details unavailable")
