from spontis.models.mandat import Mandat
from spontis.models.pricing_set import PricingSet
from spontis.schemas.mandat import MandatOut
from spontis.schemas.pricing import PricingSetOut


def build_pricing_set_response(pricing_set: PricingSet) -> PricingSetOut:
    return PricingSetOut(
        id=pricing_set.id,
        name=pricing_set.name,
        is_active=pricing_set.is_active,
        variables=pricing_set.variables or {},
        supplements=pricing_set.supplements or [],
        created_by=pricing_set.created_by,
        activated_at=pricing_set.activated_at,
        created_at=pricing_set.created_at,
        updated_at=pricing_set.updated_at,
    )


def build_mandat_response(mandat: Mandat) -> MandatOut:
    return MandatOut.model_validate(mandat, from_attributes=True)


def build_pricing_set_response_list(pricing_sets: list) -> list:
    return [build_pricing_set_response(p) for p in pricing_sets]


def build_mandat_response_list(mandats: list) -> list:
    return [build_mandat_response(m) for m in mandats]
