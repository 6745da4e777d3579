"""Unit tests for admin password checks and JWT handling."""

from datetime import timedelta

import jwt
import pytest

from revops_maturity.core.auth import (
    ADMIN_ROLE,
    check_admin_password,
    create_admin_token,
    decode_admin_token,
)
from revops_maturity.errors import UnauthorizedError
from revops_maturity.settings import Settings


@pytest.fixture()
def settings() -> Settings:
    """Settings with a known secret and password."""
    return Settings(jwt_secret="unit-secret", admin_password="s3cret", _env_file=None)


class TestCheckAdminPassword:
    """Password comparison."""

    def test_correct_password(self, settings: Settings) -> None:
        assert check_admin_password("s3cret", settings) is True

    @pytest.mark.parametrize("password", ["wrong", "", None, "s3cret "])
    def test_rejected_passwords(self, settings: Settings, password: str | None) -> None:
        assert check_admin_password(password, settings) is False


class TestAdminTokens:
    """Token issuance and validation."""

    def test_round_trip(self, settings: Settings) -> None:
        """A freshly issued token decodes with the admin role and a 24 h lifetime."""
        claims = decode_admin_token(create_admin_token(settings), settings)
        assert claims["role"] == ADMIN_ROLE
        assert claims["exp"] - claims["iat"] == 24 * 3600

    def test_expired_token(self, settings: Settings) -> None:
        """Expired tokens are rejected."""
        token = create_admin_token(settings, expires_delta=timedelta(seconds=-1))
        with pytest.raises(UnauthorizedError):
            decode_admin_token(token, settings)

    def test_wrong_secret(self, settings: Settings) -> None:
        """Tokens signed with another secret are rejected."""
        other = settings.model_copy(update={"jwt_secret": "another-secret"})
        with pytest.raises(UnauthorizedError):
            decode_admin_token(create_admin_token(other), settings)

    def test_wrong_role(self, settings: Settings) -> None:
        """A valid signature without the admin role is rejected."""
        token = jwt.encode({"role": "viewer"}, settings.jwt_secret, algorithm="HS256")
        with pytest.raises(UnauthorizedError):
            decode_admin_token(token, settings)

    def test_garbage_token(self, settings: Settings) -> None:
        """Malformed tokens are rejected."""
        with pytest.raises(UnauthorizedError):
            decode_admin_token("not-a-jwt", settings)
