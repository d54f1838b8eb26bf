import time
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from loguru import logger

from src.userauth.core.exceptions import TokenSigningError
from src.userauth.core.models.token import TokenType
from src.userauth.runtime.context import get_config

# Claims the generator owns; callers cannot override them through `claims`.
_RESERVED_CLAIMS = frozenset({"iss", "sub", "exp", "iat", "nbf", "jti", "token_type"})


class JwtGeneratorService:
    """Service for generating signed access and refresh tokens."""

    def generate_jwt(
        self,
        subject: str,
        token_type: TokenType,
        secret: str | None,
        expires_in_seconds: int,
        claims: dict[str, Any] | None = None,
    ) -> str:
        """Generate a signed JWT using authlib.

        Args:
            subject: Subject (sub) claim - the user ID
            token_type: "access" or "refresh", stored in the token_type claim
            secret: HMAC signing secret
            expires_in_seconds: Token lifetime in seconds
            claims: Additional claims to include in the token

        Every token carries a random jti, so two tokens issued in the same
        second for the same user still differ.

        Returns:
            Signed JWT token string

        Raises:
            TokenSigningError: If configuration is missing or invalid
        """
        config = get_config()
        algorithm = config.jwt.algorithm

        if not secret:
            raise TokenSigningError(f"{token_type} token signing secret not configured")

        if algorithm not in config.jwt.allowed_algorithms:
            logger.debug(
                "Attempted to use disallowed algorithm: {}, only {} are allowed",
                algorithm,
                config.jwt.allowed_algorithms,
            )
            raise TokenSigningError(f"Algorithm {algorithm} not allowed")

        now = int(time.time())
        payload = {
            "iss": config.jwt.issuer,
            "sub": subject,
            "token_type": token_type,
            "iat": now,
            "nbf": now,
            "exp": now + expires_in_seconds,
            "jti": generate_token(16),
        }

        if claims:
            payload.update(
                {k: v for k, v in claims.items() if k not in _RESERVED_CLAIMS}
            )

        try:
            header = {"alg": algorithm, "typ": "JWT"}
            token = jwt.encode(header, payload, secret)
            # authlib returns bytes
            return token.decode() if isinstance(token, bytes) else token
        except JoseError as e:
            raise TokenSigningError(f"JWT encoding failed: {e}") from e
        except Exception as e:
            raise TokenSigningError(f"Failed to generate JWT: {e}") from e

    def generate_access_token(
        self,
        user_id: str,
        email: str | None = None,
        expires_in_seconds: int | None = None,
        secret: str | None = None,
        **extra_claims,
    ) -> str:
        """Generate a short-lived access token for a user.

        Example:
            token = generate_access_token(user_id="6f1c...", email="ann@x.com")
        """
        config = get_config()
        claims = dict(extra_claims)
        if email:
            claims["email"] = email

        return self.generate_jwt(
            subject=user_id,
            token_type="access",
            secret=secret or config.jwt.access_token_secret,
            expires_in_seconds=expires_in_seconds or config.jwt.access_token_expires_in,
            claims=claims,
        )

    def generate_refresh_token(
        self,
        user_id: str,
        expires_in_seconds: int | None = None,
        secret: str | None = None,
    ) -> str:
        """Generate a refresh token carrying only the user id."""
        config = get_config()
        return self.generate_jwt(
            subject=user_id,
            token_type="refresh",
            secret=secret or config.jwt.refresh_token_secret,
            expires_in_seconds=expires_in_seconds or config.jwt.refresh_token_expires_in,
        )
