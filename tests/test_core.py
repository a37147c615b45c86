"""
Settings, token helpers, logging middleware and the health endpoint.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import jwt
import pytest

from digitalhub import __version__
from digitalhub.core.config import Settings, normalize_database_url
from digitalhub.core.errors import AuthError
from digitalhub.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from digitalhub.services.referrals import generate_referral_code, resolve_referrer
from digitalhub.services.wallet_service import apply_rate, major_to_minor, minor_to_major


class TestSettings:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgres://hub:pw@db:5432/hub")
        monkeypatch.setenv("JWT_SECRET", "s3cret")
        monkeypatch.setenv("ADMIN_EMAILS", "Boss@Olamco.com, ops@olamco.com ,")
        monkeypatch.setenv("PAYSTACK_VERIFY_WEBHOOKS", "false")
        monkeypatch.setenv("RECORD_SUBSCRIPTION_REFERRAL_COMMISSIONS", "1")
        monkeypatch.setenv("JWT_EXPIRE_MINUTES", "30")

        settings = Settings.from_env()

        assert settings.database_url == "postgresql+asyncpg://hub:pw@db:5432/hub"
        assert settings.admin_emails == ["boss@olamco.com", "ops@olamco.com"]
        assert settings.is_admin_email(" BOSS@olamco.com")
        assert not settings.is_admin_email("someone@olamco.com")
        assert settings.paystack_verify_webhooks is False
        assert settings.record_subscription_referral_commissions is True
        assert settings.jwt_expire_minutes == 30

    def test_required_variables(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("JWT_SECRET", "s3cret")
        with pytest.raises(ValueError, match="DATABASE_URL"):
            Settings.from_env()

        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite://")
        monkeypatch.delenv("JWT_SECRET", raising=False)
        with pytest.raises(ValueError, match="JWT_SECRET"):
            Settings.from_env()

    def test_normalize_database_url(self):
        assert normalize_database_url("postgresql://u@h/d") == "postgresql+asyncpg://u@h/d"
        assert normalize_database_url("postgresql+asyncpg://u@h/d") == "postgresql+asyncpg://u@h/d"
        assert normalize_database_url("sqlite+aiosqlite:///hub.db") == "sqlite+aiosqlite:///hub.db"


class TestSecurity:
    def test_password_round_trip(self):
        hashed = hash_password("secret123")

        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("secret124", hashed)
        assert not verify_password("secret123", "")
        assert not verify_password("secret123", "not-a-bcrypt-hash")

    def test_token_claims(self, settings):
        token = create_access_token(settings, user_id=42, email="ada@example.com")

        payload = decode_access_token(settings, token)

        assert payload["sub"] == "42"
        assert payload["email"] == "ada@example.com"

    def test_expired_token(self, settings):
        token = jwt.encode(
            {"sub": "42", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            settings.jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(AuthError, match="Token expired"):
            decode_access_token(settings, token)

    def test_token_signed_with_other_secret(self, settings):
        token = jwt.encode({"sub": "42"}, "another-secret", algorithm="HS256")
        with pytest.raises(AuthError, match="Invalid token"):
            decode_access_token(settings, token)

    def test_token_without_subject(self, settings):
        token = jwt.encode({"email": "ada@example.com"}, settings.jwt_secret, algorithm="HS256")
        with pytest.raises(AuthError, match="Invalid token"):
            decode_access_token(settings, token)


class TestMoney:
    def test_apply_rate_rounds_half_up(self):
        assert apply_rate(1_000_000, Decimal("0.20")) == 200_000
        assert apply_rate(333, "0.20") == 67
        assert apply_rate(250, "0.15") == 38
        assert apply_rate(0, "0.50") == 0

    def test_conversions(self):
        assert minor_to_major(145_000) == 1_450.0
        assert minor_to_major(None) == 0.0
        assert major_to_minor("1000.005") == 100_001
        assert major_to_minor(2500) == 250_000


class TestReferralCodes:
    def test_generated_code_shape(self):
        code = generate_referral_code()
        assert len(code) == 8
        assert code == code.upper()
        int(code, 16)

    @pytest.mark.asyncio
    async def test_resolve_referrer(self, session, seed):
        referrer = await seed.user(referral_code="ABCDEF12")

        found = await resolve_referrer(session, "abcdef12", exclude_user_id=999)
        assert found.user_id == referrer.id
        assert await resolve_referrer(session, "ABCDEF12", exclude_user_id=referrer.id) is None
        assert await resolve_referrer(session, "ZZZZZZZZ", exclude_user_id=999) is None
        assert await resolve_referrer(session, None, exclude_user_id=999) is None


class TestApp:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}

    @pytest.mark.asyncio
    async def test_request_id_header(self, client):
        first = await client.get("/health")
        second = await client.get("/health")

        assert len(first.headers["X-Request-ID"]) == 8
        assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/api/does-not-exist")
        assert response.status_code == 404
