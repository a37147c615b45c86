"""
Shared fixtures: a fresh SQLite database per test, the app wired to it, and
a fake Paystack gateway that records every call instead of hitting the network.
"""
import hashlib
import hmac
import json
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from digitalhub.core.config import Settings
from digitalhub.core.security import create_access_token, hash_password
from digitalhub.db import Database
from digitalhub.dependencies import get_gateway
from digitalhub.main import create_app
from digitalhub.models.catalog import Product, SubscriptionPlan, UserSubscription
from digitalhub.models.ledger import Wallet
from digitalhub.models.user import Profile, User
from digitalhub.services.paystack_service import PaystackClient, PaystackError

TEST_JWT_SECRET = "test-jwt-secret"
TEST_PAYSTACK_SECRET = "sk_test_0123456789abcdef"
ADMIN_EMAIL = "admin@olamcohub.com"
TEST_PASSWORD = "secret123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


class FakeGateway(PaystackClient):
    """PaystackClient with the network calls replaced by in-memory records."""

    def __init__(self):
        super().__init__(secret_key=TEST_PAYSTACK_SECRET)
        self.recipients = []
        self.transfers = []
        self.transactions = {}
        self.fail_recipient = None
        self.fail_transfer = None
        self.banks = [
            {"name": "Access Bank", "code": "044", "slug": "access-bank"},
            {"name": "Guaranty Trust Bank", "code": "058", "slug": "guaranty-trust-bank"},
        ]

    async def list_banks(self):
        return self.banks

    async def resolve_account(self, account_number, bank_code):
        return {"account_name": "ADA OBI", "account_number": account_number}

    async def create_transfer_recipient(self, name, account_number, bank_code):
        if self.fail_recipient:
            raise PaystackError(self.fail_recipient)
        self.recipients.append(
            {"name": name, "account_number": account_number, "bank_code": bank_code}
        )
        return f"RCP_{len(self.recipients)}"

    async def initiate_transfer(self, amount_minor, recipient_code, reference, reason):
        if self.fail_transfer:
            raise PaystackError(self.fail_transfer)
        transfer = {
            "amount_minor": amount_minor,
            "recipient_code": recipient_code,
            "reference": reference,
            "reason": reason,
        }
        self.transfers.append(transfer)
        return {"reference": reference, "status": "pending"}

    async def verify_transaction(self, reference):
        if reference not in self.transactions:
            raise PaystackError("Transaction reference not found")
        return self.transactions[reference]


class Seeder:
    """Writes fixture rows through its own sessions."""

    def __init__(self, database: Database):
        self.database = database
        self._users = 0

    async def user(
        self,
        email=None,
        *,
        full_name="Test User",
        referral_code=None,
        referred_by_code=None,
        is_admin=False,
        balance_minor=0,
        bank=True,
    ) -> User:
        self._users += 1
        email = email or f"user{self._users}@example.com"
        async with self.database.sessionmaker() as session:
            user = User(email=email, password_hash=TEST_PASSWORD_HASH)
            session.add(user)
            await session.flush()
            session.add(
                Profile(
                    user_id=user.id,
                    email=email,
                    full_name=full_name,
                    referral_code=referral_code or f"REF{user.id:05d}",
                    referred_by_code=referred_by_code,
                    is_admin=is_admin,
                    bank_name="Access Bank" if bank else None,
                    account_number="0123456789" if bank else None,
                    account_name="ADA OBI" if bank else None,
                    bank_code="044" if bank else None,
                )
            )
            session.add(
                Wallet(
                    user_id=user.id,
                    balance_minor=balance_minor,
                    total_earned_minor=balance_minor,
                    total_withdrawn_minor=0,
                )
            )
            await session.commit()
            return user

    async def product(self, *, title="Digital Marketing Guide", price_minor=1_000_000, **fields):
        async with self.database.sessionmaker() as session:
            product = Product(title=title, price_minor=price_minor, **fields)
            session.add(product)
            await session.commit()
            return product

    async def plan(self, name="Monthly", *, price_minor=250_000, duration_months=1, rate="0.30"):
        async with self.database.sessionmaker() as session:
            plan = SubscriptionPlan(
                name=name,
                price_minor=price_minor,
                duration_months=duration_months,
                commission_rate=Decimal(rate),
            )
            session.add(plan)
            await session.commit()
            return plan

    async def subscription(self, user_id, plan_id, *, months=1):
        from digitalhub.db import utcnow
        from digitalhub.services.commission_service import add_months

        async with self.database.sessionmaker() as session:
            now = utcnow()
            subscription = UserSubscription(
                user_id=user_id,
                plan_id=plan_id,
                status="active",
                start_date=now,
                end_date=add_months(now, months),
            )
            session.add(subscription)
            await session.commit()
            return subscription


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret=TEST_JWT_SECRET,
        environment="test",
        log_level="WARNING",
        paystack_secret_key=TEST_PAYSTACK_SECRET,
        admin_emails=[ADMIN_EMAIL],
        app_base_url="https://hub.example.com",
    )


@pytest_asyncio.fixture
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'hub_tests.db'}")
    await database.create_all()
    try:
        yield database
    finally:
        await database.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.sessionmaker() as session:
        yield session


@pytest.fixture
def seed(database):
    return Seeder(database)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def app(settings, database, gateway):
    app = create_app(settings, database=database)
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(settings):
    def build(user):
        token = create_access_token(settings, user_id=user.id, email=user.email)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def signed_webhook():
    """Serialize a webhook payload and sign it the way Paystack does."""

    def build(payload, secret=TEST_PAYSTACK_SECRET):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        signature = hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()
        return body, {"x-paystack-signature": signature, "content-type": "application/json"}

    return build
