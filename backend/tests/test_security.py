"""
ReportDesk Backend — Password Hashing, Token & Config Tests
=============================================================
"""

from datetime import timedelta

import pytest
from jose import jwt

from reportdesk.config import DEFAULT_JWT_SECRET, Settings, settings
from reportdesk.exceptions import UnauthorizedError
from reportdesk.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_dummy_password,
    verify_password,
)


class TestPasswordHashing:

    def test_hash_is_salted_and_verifiable(self):
        first = hash_password("secret1")
        second = hash_password("secret1")

        assert first != second
        assert first != "secret1"
        assert verify_password("secret1", first)
        assert verify_password("secret1", second)

    def test_wrong_password(self):
        assert not verify_password("secret2", hash_password("secret1"))

    def test_malformed_stored_hash_is_rejected(self):
        assert verify_password("secret1", "not-a-bcrypt-hash") is False

    def test_overlong_input_is_a_mismatch_not_an_error(self):
        assert verify_password("a" * 80, hash_password("secret1")) is False

    def test_dummy_check_never_matches(self):
        assert verify_dummy_password("reportdesk-dummy-password") is False
        assert verify_dummy_password("anything") is False


class TestAccessTokens:

    def test_round_trip(self):
        claims = decode_access_token(create_access_token(42, "admin"))

        assert claims["sub"] == "42"
        assert claims["role"] == "admin"
        assert claims["exp"] > claims["iat"]

    def test_default_lifetime_is_seven_days(self):
        claims = decode_access_token(create_access_token(1, "user"))
        assert claims["exp"] - claims["iat"] == int(timedelta(days=7).total_seconds())

    def test_expired(self):
        token = create_access_token(1, "user", expires_delta=timedelta(seconds=-1))

        with pytest.raises(UnauthorizedError, match="expired"):
            decode_access_token(token)

    def test_signed_with_another_secret(self):
        token = jwt.encode({"sub": "1", "role": "admin"}, "some-other-secret", algorithm="HS256")

        with pytest.raises(UnauthorizedError, match="Invalid token"):
            decode_access_token(token)


class TestSettings:

    def test_cors_origins_list(self):
        configured = Settings(_env_file=None, cors_origins="https://a.example, https://b.example")
        assert configured.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_production_rejects_defaults(self):
        production = Settings(
            _env_file=None,
            environment="production",
            jwt_secret=DEFAULT_JWT_SECRET,
            cors_origins="*",
        )

        with pytest.raises(ValueError) as exc_info:
            production.validate_required_for_production()
        assert "JWT_SECRET" in str(exc_info.value)
        assert "CORS_ORIGINS" in str(exc_info.value)

    def test_production_accepts_explicit_values(self):
        production = Settings(
            _env_file=None,
            environment="production",
            jwt_secret="a-long-random-production-secret",
            cors_origins="https://reports.example",
        )
        production.validate_required_for_production()

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, environment="staging")

    def test_test_environment_is_active(self):
        assert settings.environment == "test"
        assert not settings.is_development
