"""
Webhook receiver: signature check, event dispatch and the ack/retry contract.
"""
import pytest
from sqlalchemy import func, select

from digitalhub.models.catalog import UserSubscription
from digitalhub.models.ledger import Sale, WithdrawalRequest
from digitalhub.services import commission_service
from digitalhub.services.wallet_service import get_wallet
from digitalhub.services.withdrawal_service import BankDetails, admin_decide, request_withdrawal

WEBHOOK_URL = "/api/paystack-webhook"


def charge_success(reference, amount, metadata, email="buyer@example.com"):
    return {
        "event": "charge.success",
        "data": {
            "reference": reference,
            "amount": amount,
            "status": "success",
            "customer": {"email": email},
            "metadata": metadata,
        },
    }


async def wallet_balance(database, user_id):
    async with database.sessionmaker() as s:
        wallet = await get_wallet(s, user_id)
        return wallet.balance_minor if wallet else 0


async def row_count(database, model):
    async with database.sessionmaker() as s:
        result = await s.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def load_withdrawal(database, withdrawal_id):
    async with database.sessionmaker() as s:
        return await s.get(WithdrawalRequest, withdrawal_id)


async def approved_withdrawal(database, seed, gateway, amount_minor=150_000):
    user = await seed.user(balance_minor=200_000)
    admin = await seed.user(is_admin=True)
    bank = BankDetails("Access Bank", "0123456789", "ADA OBI", "044")
    async with database.sessionmaker() as s:
        withdrawal = await request_withdrawal(s, user.id, amount_minor, bank)
        result = await admin_decide(s, gateway, withdrawal.id, "approve", None, admin)
    return user, withdrawal.id, result["reference"]


class TestSignature:
    @pytest.mark.asyncio
    async def test_missing_signature_is_rejected(self, client):
        response = await client.post(WEBHOOK_URL, json={"event": "charge.success", "data": {}})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid signature"}

    @pytest.mark.asyncio
    async def test_wrong_secret_is_rejected(self, client, signed_webhook):
        body, headers = signed_webhook({"event": "transfer.success"}, secret="sk_test_other")

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_signature_covers_raw_body(self, client, signed_webhook):
        body, headers = signed_webhook({"event": "customeridentification.success", "data": {}})
        tampered = body.replace(b"customeridentification", b"customeridentificatioN")

        response = await client.post(WEBHOOK_URL, content=tampered, headers=headers)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_verification_can_be_disabled(self, client, settings):
        settings.paystack_verify_webhooks = False

        response = await client.post(
            WEBHOOK_URL, json={"event": "subscription.create", "data": {}}
        )

        assert response.status_code == 200
        assert response.json() == {"received": True, "handled": None}

    @pytest.mark.asyncio
    async def test_invalid_json_is_bad_request(self, client, signed_webhook):
        body, headers = signed_webhook(b"{not json")

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_object_payload_is_bad_request(self, client, signed_webhook):
        body, headers = signed_webhook([1, 2, 3])

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 400


class TestChargeSuccess:
    @pytest.mark.asyncio
    async def test_product_purchase_settles_once(self, client, database, seed, signed_webhook):
        seller = await seed.user()
        product = await seed.product()
        body, headers = signed_webhook(
            charge_success(
                "ps_ref_100",
                1_000_000,
                {"type": "product_purchase", "product_id": product.id, "user_id": seller.id},
            )
        )

        first = await client.post(WEBHOOK_URL, content=body, headers=headers)
        second = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert first.status_code == 200
        assert first.json() == {
            "received": True,
            "handled": "product_purchase",
            "status": "settled",
        }
        assert second.status_code == 200
        assert second.json()["status"] == "duplicate"

        assert await row_count(database, Sale) == 1
        assert await wallet_balance(database, seller.id) == 200_000

    @pytest.mark.asyncio
    async def test_metadata_sent_as_json_string(self, client, database, seed, signed_webhook):
        seller = await seed.user()
        product = await seed.product()
        metadata = '{"type": "product_purchase", "product_id": %d, "user_id": "%d"}' % (
            product.id,
            seller.id,
        )
        body, headers = signed_webhook(charge_success("ps_ref_101", 1_000_000, metadata))

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 200
        assert response.json()["status"] == "settled"
        assert await wallet_balance(database, seller.id) == 200_000

    @pytest.mark.asyncio
    async def test_subscription_purchase_activates_plan(
        self, client, database, seed, signed_webhook
    ):
        referrer = await seed.user(referral_code="WEBREF01")
        user = await seed.user(referred_by_code="WEBREF01")
        plan = await seed.plan("Monthly", price_minor=250_000, duration_months=1, rate="0.30")
        body, headers = signed_webhook(
            charge_success(
                "ps_sub_200",
                250_000,
                {"type": "subscription", "plan_id": plan.id, "user_id": user.id},
            )
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"received": True, "handled": "subscription", "status": "settled"}
        assert await row_count(database, UserSubscription) == 1
        assert await wallet_balance(database, referrer.id) == 62_500

        async with database.sessionmaker() as s:
            assert await commission_service.get_commission_rate(s, user.id) == plan.commission_rate

    @pytest.mark.asyncio
    async def test_underpaid_subscription_is_acknowledged_without_upgrade(
        self, client, database, seed, signed_webhook
    ):
        user = await seed.user()
        plan = await seed.plan("Lifetime", price_minor=1_000_000, duration_months=1200, rate="0.50")
        body, headers = signed_webhook(
            charge_success(
                "ps_sub_201",
                100,
                {"type": "subscription", "plan_id": plan.id, "user_id": user.id},
            )
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 200
        assert response.json()["received"] is True
        assert "below the Lifetime price" in response.json()["ignored"]
        assert await row_count(database, UserSubscription) == 0
        assert await row_count(database, Sale) == 0

        async with database.sessionmaker() as s:
            rate = await commission_service.get_commission_rate(s, user.id)
        assert rate == commission_service.DEFAULT_COMMISSION_RATE

    @pytest.mark.asyncio
    async def test_unknown_product_is_acknowledged(self, client, database, seed, signed_webhook):
        seller = await seed.user()
        body, headers = signed_webhook(
            charge_success(
                "ps_ref_102",
                1_000_000,
                {"type": "product_purchase", "product_id": 4242, "user_id": seller.id},
            )
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 200
        assert response.json()["received"] is True
        assert "ignored" in response.json()
        assert await row_count(database, Sale) == 0

    @pytest.mark.asyncio
    async def test_missing_metadata_field_is_acknowledged(self, client, seed, signed_webhook):
        product = await seed.product()
        body, headers = signed_webhook(
            charge_success("ps_ref_103", 1_000_000, {"type": "product_purchase", "product_id": product.id})
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 200
        assert response.json()["ignored"] == "Webhook field user_id is missing or invalid"

    @pytest.mark.asyncio
    async def test_other_charge_types_are_ignored(self, client, database, signed_webhook):
        body, headers = signed_webhook(charge_success("ps_ref_104", 5_000, {"type": "donation"}))

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"received": True, "handled": None}
        assert await row_count(database, Sale) == 0

    @pytest.mark.asyncio
    async def test_unexpected_error_asks_paystack_to_retry(
        self, client, seed, signed_webhook, monkeypatch
    ):
        seller = await seed.user()
        product = await seed.product()

        async def explode(db, event):
            raise RuntimeError("database went away")

        monkeypatch.setattr(commission_service, "settle_product_sale", explode)
        body, headers = signed_webhook(
            charge_success(
                "ps_ref_105",
                1_000_000,
                {"type": "product_purchase", "product_id": product.id, "user_id": seller.id},
            )
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 500
        assert response.json() == {"error": "Webhook processing failed"}


class TestTransferEvents:
    @pytest.mark.asyncio
    async def test_transfer_success_debits_wallet_once(
        self, client, database, seed, gateway, signed_webhook
    ):
        user, withdrawal_id, reference = await approved_withdrawal(database, seed, gateway)
        body, headers = signed_webhook({"event": "transfer.success", "data": {"reference": reference}})

        first = await client.post(WEBHOOK_URL, content=body, headers=headers)
        second = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert first.json() == {"received": True, "handled": "transfer.success", "changed": True}
        assert second.json() == {"received": True, "handled": "transfer.success", "changed": False}
        assert (await load_withdrawal(database, withdrawal_id)).status == "completed"
        assert await wallet_balance(database, user.id) == 50_000

    @pytest.mark.asyncio
    async def test_success_delivered_before_approval_returns(
        self, client, database, seed, gateway, signed_webhook, monkeypatch
    ):
        send_transfer = gateway.initiate_transfer
        deliveries = []

        async def transfer_with_instant_webhook(**kwargs):
            response = await send_transfer(**kwargs)
            body, headers = signed_webhook(
                {"event": "transfer.success", "data": {"reference": kwargs["reference"]}}
            )
            deliveries.append(await client.post(WEBHOOK_URL, content=body, headers=headers))
            return response

        monkeypatch.setattr(gateway, "initiate_transfer", transfer_with_instant_webhook)

        user, withdrawal_id, reference = await approved_withdrawal(database, seed, gateway)

        assert len(deliveries) == 1
        assert deliveries[0].status_code == 200
        assert deliveries[0].json() == {
            "received": True,
            "handled": "transfer.success",
            "changed": True,
        }
        withdrawal = await load_withdrawal(database, withdrawal_id)
        assert withdrawal.status == "completed"
        assert withdrawal.reference == reference
        assert await wallet_balance(database, user.id) == 50_000

    @pytest.mark.asyncio
    async def test_transfer_failed_keeps_balance(
        self, client, database, seed, gateway, signed_webhook
    ):
        user, withdrawal_id, reference = await approved_withdrawal(database, seed, gateway)
        body, headers = signed_webhook({"event": "transfer.failed", "data": {"reference": reference}})

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 200
        assert response.json()["changed"] is True
        withdrawal = await load_withdrawal(database, withdrawal_id)
        assert withdrawal.status == "failed"
        assert withdrawal.admin_notes == "Transfer failed - balance refunded"
        assert await wallet_balance(database, user.id) == 200_000

    @pytest.mark.asyncio
    async def test_transfer_reversed_marks_failed(
        self, client, database, seed, gateway, signed_webhook
    ):
        user, withdrawal_id, reference = await approved_withdrawal(database, seed, gateway)
        body, headers = signed_webhook(
            {"event": "transfer.reversed", "data": {"reference": reference}}
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.json()["handled"] == "transfer.reversed"
        assert (await load_withdrawal(database, withdrawal_id)).status == "failed"
        assert await wallet_balance(database, user.id) == 200_000

    @pytest.mark.asyncio
    async def test_unknown_transfer_reference_is_acknowledged(self, client, signed_webhook):
        body, headers = signed_webhook(
            {"event": "transfer.success", "data": {"reference": "withdrawal_1_unknown"}}
        )

        response = await client.post(WEBHOOK_URL, content=body, headers=headers)

        assert response.status_code == 200
        assert response.json()["received"] is True
        assert "ignored" in response.json()
