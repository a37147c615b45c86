"""
PaystackClient against an in-process transport.
"""
import hashlib
import hmac
import json

import httpx
import pytest

from digitalhub.services.paystack_service import (
    PaystackClient,
    PaystackError,
    transaction_metadata,
)

SECRET = "sk_test_client"


def client_for(handler, secret=SECRET):
    return PaystackClient(
        secret_key=secret,
        base_url="https://api.paystack.test",
        transport=httpx.MockTransport(handler),
    )


def ok(data):
    return httpx.Response(200, json={"status": True, "message": "OK", "data": data})


@pytest.mark.asyncio
async def test_list_banks_keeps_active_nigerian_banks():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["auth"] = request.headers["Authorization"]
        return ok(
            [
                {"name": "Access Bank", "code": "044", "slug": "access-bank", "country": "Nigeria", "active": True},
                {"name": "Old Bank", "code": "999", "slug": "old-bank", "country": "Nigeria", "active": False},
                {"name": "Ghana Bank", "code": "GH1", "slug": "ghana-bank", "country": "Ghana", "active": True},
            ]
        )

    banks = await client_for(handler).list_banks()

    assert banks == [{"name": "Access Bank", "code": "044", "slug": "access-bank"}]
    assert seen["url"].path == "/bank"
    assert seen["url"].params["country"] == "nigeria"
    assert seen["auth"] == f"Bearer {SECRET}"


@pytest.mark.asyncio
async def test_resolve_account():
    def handler(request):
        assert request.url.path == "/bank/resolve"
        assert request.url.params["account_number"] == "0123456789"
        assert request.url.params["bank_code"] == "058"
        return ok({"account_number": "0123456789", "account_name": "ADA OBI", "bank_id": 9})

    account = await client_for(handler).resolve_account("0123456789", "058")

    assert account == {"account_name": "ADA OBI", "account_number": "0123456789"}


@pytest.mark.asyncio
async def test_create_recipient_and_transfer_payloads():
    bodies = []

    def handler(request):
        body = json.loads(request.content)
        bodies.append((request.url.path, body))
        if request.url.path == "/transferrecipient":
            return ok({"recipient_code": "RCP_abc123"})
        return ok({"reference": body["reference"], "status": "pending", "transfer_code": "TRF_1"})

    client = client_for(handler)
    recipient = await client.create_transfer_recipient("ADA OBI", "0123456789", "044")
    transfer = await client.initiate_transfer(145_000, recipient, "withdrawal_1_abc", "payout")

    assert recipient == "RCP_abc123"
    assert transfer["status"] == "pending"
    assert bodies[0] == (
        "/transferrecipient",
        {
            "type": "nuban",
            "name": "ADA OBI",
            "account_number": "0123456789",
            "bank_code": "044",
            "currency": "NGN",
        },
    )
    assert bodies[1] == (
        "/transfer",
        {
            "source": "balance",
            "amount": 145_000,
            "recipient": "RCP_abc123",
            "reference": "withdrawal_1_abc",
            "reason": "payout",
        },
    )


@pytest.mark.asyncio
async def test_verify_transaction():
    def handler(request):
        assert request.url.path == "/transaction/verify/ps_ref_1"
        return ok({"status": "success", "amount": 500_000, "reference": "ps_ref_1"})

    data = await client_for(handler).verify_transaction("ps_ref_1")

    assert data["amount"] == 500_000


@pytest.mark.asyncio
async def test_error_status_uses_paystack_message():
    def handler(request):
        return httpx.Response(400, json={"status": False, "message": "Account number is invalid"})

    with pytest.raises(PaystackError, match="Account number is invalid"):
        await client_for(handler).resolve_account("000", "044")


@pytest.mark.asyncio
async def test_status_false_in_success_response():
    def handler(request):
        return httpx.Response(200, json={"status": False, "message": "Transfer limit exceeded"})

    with pytest.raises(PaystackError, match="Transfer limit exceeded"):
        await client_for(handler).initiate_transfer(1, "RCP", "ref", "reason")


@pytest.mark.asyncio
async def test_missing_recipient_code():
    with pytest.raises(PaystackError):
        await client_for(lambda request: ok({})).create_transfer_recipient("A", "1", "044")


@pytest.mark.asyncio
async def test_connection_and_timeout_errors():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(PaystackError, match="Failed to connect"):
        await client_for(refuse).list_banks()
    with pytest.raises(PaystackError, match="Timeout"):
        await client_for(slow).list_banks()


@pytest.mark.asyncio
async def test_invalid_json_response():
    def handler(request):
        return httpx.Response(200, content=b"<html>maintenance</html>")

    with pytest.raises(PaystackError, match="Invalid JSON"):
        await client_for(handler).list_banks()


@pytest.mark.asyncio
async def test_missing_secret_key_never_calls_out():
    calls = []

    def handler(request):
        calls.append(request)
        return ok([])

    with pytest.raises(PaystackError, match="not configured"):
        await client_for(handler, secret="").list_banks()
    assert calls == []


def test_verify_signature():
    client = PaystackClient(secret_key=SECRET)
    body = b'{"event":"charge.success"}'
    signature = hmac.new(SECRET.encode(), body, hashlib.sha512).hexdigest()

    assert client.verify_signature(body, signature)
    assert client.verify_signature(body, signature.upper())
    assert not client.verify_signature(body + b" ", signature)
    assert not client.verify_signature(body, None)
    assert not client.verify_signature(body, "deadbeef")
    assert not PaystackClient(secret_key="").verify_signature(body, signature)


def test_transaction_metadata_variants():
    assert transaction_metadata({"metadata": {"type": "subscription"}}) == {"type": "subscription"}
    assert transaction_metadata({"metadata": '{"type": "product_purchase"}'}) == {
        "type": "product_purchase"
    }
    assert transaction_metadata({"metadata": "not json"}) == {}
    assert transaction_metadata({"metadata": None}) == {}
    assert transaction_metadata({}) == {}
    assert transaction_metadata({"metadata": "[1, 2]"}) == {}
