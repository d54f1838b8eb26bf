"""JWT verification service."""

import time

from authlib.jose import JoseError, jwt
from loguru import logger

from src.userauth.core.exceptions import TokenSigningError, TokenVerificationError
from src.userauth.core.models.token import TokenClaims, TokenType
from src.userauth.core.services.jwt.jwt_utils import (
    JwtPreview,
    create_token_claims,
    preview_jwt,
)
from src.userauth.runtime.context import get_config


class JwtVerificationService:
    def verify_jwt(
        self,
        token: str,
        *,
        key: str,
        expected_type: TokenType | None = None,
        expected_issuer: str | None = None,
        preview: JwtPreview | None = None,
    ) -> TokenClaims:
        """Verify signature, registered claims and token type.

        Raises:
            TokenVerificationError: token is malformed, forged, expired or of the
                wrong type
        """
        cfg = get_config()
        pv = preview or preview_jwt(token)

        # alg allowlist
        if pv.alg not in cfg.jwt.allowed_algorithms:
            raise TokenVerificationError("Disallowed JWT algorithm")

        # reject early so an access token never passes as a refresh token
        if expected_type and pv.token_type != expected_type:
            raise TokenVerificationError(f"Expected a {expected_type} token")

        claims_options = {
            "iss": {"essential": True, "value": expected_issuer or cfg.jwt.issuer},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }

        # verify signature + registered claims
        try:
            claims = jwt.decode(token, key, claims_options=claims_options)
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug("JWT rejected: {}", exc)
            raise TokenVerificationError(f"JWT error: {exc}") from exc

        # extra temporal sanity
        now = int(time.time())
        for k, check in (
            ("exp", lambda v: now > int(v) + cfg.jwt.clock_skew),
            ("nbf", lambda v: now < int(v) - cfg.jwt.clock_skew),
            ("iat", lambda v: int(v) > now + cfg.jwt.clock_skew),
        ):
            v = claims.get(k)
            if v is not None and check(v):
                raise TokenVerificationError(f"Invalid {k} with skew")

        if not claims.get("sub"):
            raise TokenVerificationError("Missing sub claim")

        if expected_type and claims.get("token_type") != expected_type:
            raise TokenVerificationError(f"Expected a {expected_type} token")

        return create_token_claims(token=token, claims=dict(claims))

    def verify_access_token(self, token: str) -> TokenClaims:
        """Verify an access token with the configured access secret.

        Raises:
            TokenSigningError: access secret is not configured
            TokenVerificationError: token is not a valid access token
        """
        secret = get_config().jwt.access_token_secret
        if not secret:
            raise TokenSigningError("Access token secret not configured")
        return self.verify_jwt(token, key=secret, expected_type="access")

    def verify_refresh_token(self, token: str) -> TokenClaims:
        """Verify a refresh token with the configured refresh secret."""
        secret = get_config().jwt.refresh_token_secret
        if not secret:
            raise TokenSigningError("Refresh token secret not configured")
        return self.verify_jwt(token, key=secret, expected_type="refresh")
