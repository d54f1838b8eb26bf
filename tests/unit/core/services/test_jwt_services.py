import base64
import json
import time

import pytest

from src.userauth.core.exceptions import TokenSigningError, TokenVerificationError
from src.userauth.core.services import JwtGeneratorService, JwtVerificationService
from src.userauth.core.services.jwt import preview_jwt
from src.userauth.runtime.config.config_data import ConfigData, JWTConfig
from src.userauth.runtime.context import get_config, with_context


def _b64(data: dict) -> str:
    raw = json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


class TestJwtGeneration:
    def test_access_token_roundtrip(
        self,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        """Should generate and verify an access token."""
        token = jwt_generate_service.generate_access_token("user-123", "a@x.com")

        claims = jwt_verify_service.verify_access_token(token)

        assert claims.subject == "user-123"
        assert claims.email == "a@x.com"
        assert claims.token_type == "access"
        assert claims.issuer == get_config().jwt.issuer
        assert claims.jti is not None
        assert claims.expires_at - claims.issued_at == get_config().jwt.access_token_expires_in

    def test_refresh_token_carries_only_user_id(
        self,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        token = jwt_generate_service.generate_refresh_token("user-123")

        claims = jwt_verify_service.verify_refresh_token(token)

        assert claims.subject == "user-123"
        assert claims.token_type == "refresh"
        assert claims.email is None
        assert claims.custom_claims == {}

    def test_tokens_are_unique(self, jwt_generate_service: JwtGeneratorService):
        first = jwt_generate_service.generate_refresh_token("user-123")
        second = jwt_generate_service.generate_refresh_token("user-123")

        assert first != second

    def test_custom_claims_cannot_override_registered(
        self,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        token = jwt_generate_service.generate_access_token(
            "user-123", role="admin", sub="someone-else"
        )

        claims = jwt_verify_service.verify_access_token(token)

        assert claims.subject == "user-123"
        assert claims.custom_claims == {"role": "admin"}

    def test_missing_secret_fails(self, jwt_generate_service: JwtGeneratorService):
        with with_context(ConfigData(jwt=JWTConfig(access_token_secret=None))):
            with pytest.raises(TokenSigningError):
                jwt_generate_service.generate_access_token("user-123")

    def test_disallowed_algorithm_fails(self, jwt_generate_service: JwtGeneratorService):
        override = ConfigData(jwt=JWTConfig(allowed_algorithms=["HS512"]))
        with with_context(override):
            with pytest.raises(TokenSigningError):
                jwt_generate_service.generate_access_token("user-123")


class TestJwtVerification:
    def test_access_token_is_not_a_refresh_token(
        self,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        access = jwt_generate_service.generate_access_token("user-123")

        with pytest.raises(TokenVerificationError):
            jwt_verify_service.verify_refresh_token(access)

    def test_refresh_token_is_not_an_access_token(
        self,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        refresh = jwt_generate_service.generate_refresh_token("user-123")

        with pytest.raises(TokenVerificationError):
            jwt_verify_service.verify_access_token(refresh)

    def test_wrong_secret_rejected(
        self,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        token = jwt_generate_service.generate_access_token(
            "user-123", secret="another-secret-0123456789abcdef0123456789"
        )

        with pytest.raises(TokenVerificationError):
            jwt_verify_service.verify_access_token(token)

    def test_tampered_payload_rejected(
        self,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        token = jwt_generate_service.generate_access_token("user-123")
        header, _, signature = token.split(".")
        claims = preview_jwt(token).claims
        forged = ".".join([header, _b64({**claims, "sub": "user-456"}), signature])

        with pytest.raises(TokenVerificationError):
            jwt_verify_service.verify_access_token(forged)

    def test_unsigned_token_rejected(self, jwt_verify_service: JwtVerificationService):
        now = int(time.time())
        token = ".".join(
            [
                _b64({"alg": "none", "typ": "JWT"}),
                _b64({"sub": "user-123", "token_type": "access", "exp": now + 60}),
                "sig",
            ]
        )

        with pytest.raises(TokenVerificationError):
            jwt_verify_service.verify_access_token(token)

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b", "a.b.c.d", "a b.c.d"])
    def test_malformed_tokens_rejected(
        self, jwt_verify_service: JwtVerificationService, token: str
    ):
        with pytest.raises(TokenVerificationError):
            jwt_verify_service.verify_access_token(token)

    def test_foreign_issuer_rejected(
        self,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        with with_context(ConfigData(jwt=JWTConfig(issuer="someone-else"))):
            token = jwt_generate_service.generate_access_token("user-123")

        with pytest.raises(TokenVerificationError):
            jwt_verify_service.verify_access_token(token)

    def test_expired_token_rejected(
        self,
        monkeypatch: pytest.MonkeyPatch,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        token = jwt_generate_service.generate_access_token("user-123")
        jwt_config = get_config().jwt
        later = time.time() + jwt_config.access_token_expires_in + jwt_config.clock_skew + 5
        monkeypatch.setattr(time, "time", lambda: later)

        with pytest.raises(TokenVerificationError):
            jwt_verify_service.verify_access_token(token)

    def test_rejected_one_second_after_expiry(
        self,
        monkeypatch: pytest.MonkeyPatch,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        """With no configured skew a token stops verifying as soon as exp passes."""
        token = jwt_generate_service.generate_access_token("user-123")
        later = time.time() + get_config().jwt.access_token_expires_in + 1
        monkeypatch.setattr(time, "time", lambda: later)

        with pytest.raises(TokenVerificationError):
            jwt_verify_service.verify_access_token(token)

    def test_token_valid_within_configured_clock_skew(
        self,
        monkeypatch: pytest.MonkeyPatch,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        token = jwt_generate_service.generate_access_token("user-123")
        later = time.time() + get_config().jwt.access_token_expires_in + 10
        monkeypatch.setattr(time, "time", lambda: later)

        with with_context(ConfigData(jwt=JWTConfig(clock_skew=30))):
            assert jwt_verify_service.verify_access_token(token).subject == "user-123"

    def test_missing_secret_is_a_configuration_error(
        self,
        jwt_generate_service: JwtGeneratorService,
        jwt_verify_service: JwtVerificationService,
    ):
        token = jwt_generate_service.generate_refresh_token("user-123")

        with with_context(ConfigData(jwt=JWTConfig(refresh_token_secret=None))):
            with pytest.raises(TokenSigningError):
                jwt_verify_service.verify_refresh_token(token)
