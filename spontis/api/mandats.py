import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, List

from spontis.db.session import get_db
from spontis.models.mandat import Mandat
from spontis.schemas.mandat import MandatCreate, MandatOut
from spontis.core.security import get_current_user, require_admin
from spontis.core.audit_decorator import audit_log
from spontis.core.rate_limit import check_rate_limit
from spontis.core.auth_utils import check_ownership, check_not_found, filter_by_owner
from spontis.core.response_builders import build_mandat_response, build_mandat_response_list
from spontis.core.enums import AuditAction, MandatStatus, QuoteSource
from spontis.core.metrics import quotes_computed
from spontis.services.distance import DistanceMatrixClient, DistanceLookupError, format_coordinates, get_distance_client
from spontis.services.mandat_pricing import price_mandat
from spontis.services.pricing_sets import get_active_pricing_set
from spontis.services.tasks import requote_mandat
from spontis.utils.idempotency import get_idempotent, set_idempotent

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/mandats", tags=["mandats"])


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@router.post("/", response_model=MandatOut)
@audit_log(AuditAction.CREATE_MANDAT)
async def create_mandat(
    payload: MandatCreate,
    idempotency_key: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
    distance_client: DistanceMatrixClient = Depends(get_distance_client)
):
    await check_rate_limit(current_user.id)

    prev = await get_idempotent(current_user.id, idempotency_key)
    if prev:
        return prev

    debut = _as_utc(payload.enlevement_souhaite_debut_at)
    fin = _as_utc(payload.enlevement_souhaite_fin_at)
    if debut <= datetime.now(timezone.utc):
        raise HTTPException(status_code=400, detail="Pickup start must be in the future")
    if fin <= debut:
        raise HTTPException(status_code=400, detail="Pickup end must be after pickup start")

    pricing_set = await get_active_pricing_set(db)
    if pricing_set is None:
        logger.error("Mandat creation refused: no active pricing set")
        raise HTTPException(status_code=500, detail="No active pricing set. Contact the administrator.")

    depart, arrivee = payload.depart_adresse, payload.arrivee_adresse
    distance = None
    if None not in (depart.lat, depart.lng, arrivee.lat, arrivee.lng):
        try:
            distance = await distance_client.distance(
                format_coordinates(depart.lat, depart.lng),
                format_coordinates(arrivee.lat, arrivee.lng),
            )
        except DistanceLookupError as e:
            logger.warning(f"Distance lookup failed, quoting on 0 km: {e}")

    mandat = Mandat(
        created_by=current_user.id,
        status=MandatStatus.PENDING,
        nom=payload.nom,
        description=payload.description,
        images=payload.images,
        depart_adresse=depart.adresse,
        depart_lat=depart.lat,
        depart_lng=depart.lng,
        depart_contact=payload.depart_contact,
        arrivee_adresse=arrivee.adresse,
        arrivee_lat=arrivee.lat,
        arrivee_lng=arrivee.lng,
        arrivee_contact=payload.arrivee_contact,
        enlevement_souhaite_debut_at=debut,
        enlevement_souhaite_fin_at=fin,
        type_marchandise=payload.type_marchandise,
        poids_total_kg=payload.poids_total_kg,
        volume_total_m3=payload.volume_total_m3,
        surface_m2=payload.surface_m2,
        nombre_colis=payload.nombre_colis,
        type_vehicule=payload.type_vehicule,
        moyen_chargement=payload.moyen_chargement,
    )
    price_mandat(mandat, pricing_set, distance)
    quotes_computed.labels(source=str(QuoteSource.MANDAT)).inc()

    db.add(mandat)
    await db.commit()
    await db.refresh(mandat)
    logger.info(f"Mandat {mandat.id} created by {current_user.id}")

    out = build_mandat_response(mandat)
    await set_idempotent(current_user.id, idempotency_key, out.model_dump(mode="json"))
    return out


@router.get("/", response_model=List[MandatOut])
async def list_mandats(
    status: Optional[MandatStatus] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    q = select(Mandat).order_by(Mandat.created_at.desc(), Mandat.id.desc())
    q = filter_by_owner(q, Mandat, current_user)

    if status:
        q = q.where(Mandat.status == status)

    q = q.limit(limit).offset(offset)
    res = await db.execute(q)
    mandats = res.scalars().all()

    return build_mandat_response_list(mandats)


@router.get("/{mandat_id}", response_model=MandatOut)
async def get_mandat(
    mandat_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    res = await db.execute(select(Mandat).where(Mandat.id == mandat_id))
    mandat = res.scalars().first()
    check_not_found(mandat, "Mandat", mandat_id)
    check_ownership(mandat, current_user, "Mandat")

    return build_mandat_response(mandat)


@router.post("/{mandat_id}/requote")
@audit_log(AuditAction.REQUOTE_MANDAT)
async def requote(
    mandat_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    res = await db.execute(select(Mandat).where(Mandat.id == mandat_id))
    mandat = res.scalars().first()
    check_not_found(mandat, "Mandat", mandat_id)

    requote_mandat.delay(mandat_id)

    return {"status": "queued"}
