import pytest
from sqlalchemy.future import select

from spontis.core.enums import AuditAction
from spontis.models.audit import Audit
from spontis.utils.hashing import payload_hash


async def _audits(db_session):
    res = await db_session.execute(select(Audit).order_by(Audit.id))
    return res.scalars().all()


class TestAuditLogging:

    @pytest.mark.asyncio
    async def test_audit_action_values(self):
        assert str(AuditAction.CREATE_PRICING_SET) == "create_pricing_set"
        assert str(AuditAction.ACTIVATE_PRICING_SET) == "activate_pricing_set"
        assert str(AuditAction.REQUOTE_MANDAT) == "requote_mandat"

    @pytest.mark.asyncio
    async def test_pricing_set_lifecycle_is_audited(self, test_client, db_session, admin_headers, create_pricing_set_factory):
        pricing_set = await create_pricing_set_factory()
        await test_client.delete(f"/admin/pricing/{pricing_set['id']}", headers=admin_headers)

        audits = await _audits(db_session)
        assert [a.endpoint for a in audits] == [
            "create_pricing_set",
            "activate_pricing_set",
            "delete_pricing_set",
        ]
        assert {a.user_id for a in audits} == {"admin-1"}
        assert audits[1].payload_hash == payload_hash({"id": pricing_set["id"]})

    @pytest.mark.asyncio
    async def test_mandat_creation_is_audited(self, test_client, db_session, user_headers, mandat_payload,
                                              create_pricing_set_factory, distance_client):
        await create_pricing_set_factory()
        await test_client.post("/mandats/", json=mandat_payload, headers=user_headers)

        audits = await _audits(db_session)
        mandat_audits = [a for a in audits if a.endpoint == "create_mandat"]
        assert len(mandat_audits) == 1
        assert mandat_audits[0].user_id == "user-1"
        assert len(mandat_audits[0].payload_hash) == 64

    @pytest.mark.asyncio
    async def test_rejected_request_not_audited(self, test_client, db_session, user_headers, pricing_payload):
        response = await test_client.post("/admin/pricing/", json=pricing_payload, headers=user_headers)
        assert response.status_code == 403

        assert await _audits(db_session) == []

    @pytest.mark.asyncio
    async def test_reads_not_audited(self, test_client, db_session, admin_headers, create_pricing_set_factory):
        pricing_set = await create_pricing_set_factory(activate=False)
        await test_client.get("/admin/pricing/", headers=admin_headers)
        await test_client.get(f"/admin/pricing/{pricing_set['id']}", headers=admin_headers)

        assert [a.endpoint for a in await _audits(db_session)] == ["create_pricing_set"]
