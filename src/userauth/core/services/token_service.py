"""Access/refresh token issuance, authentication, rotation and logout.

Refresh tokens are stored on the user record; only the most recently issued
one is accepted. Two concurrent refreshes with the same token race at the
store and the last write wins, so both callers may briefly hold a token
that looked valid when issued. No locking beyond the store's atomic
single-record update is attempted.
"""

from loguru import logger

from src.userauth.core.exceptions import StoreError, TokenSigningError, TokenVerificationError
from src.userauth.core.models.token import TokenPair
from src.userauth.core.result import Err, Ok, Result, internal, unauthorized
from src.userauth.core.security import tokens_match
from src.userauth.core.services.credential_service import CredentialService
from src.userauth.core.services.jwt.jwt_gen import JwtGeneratorService
from src.userauth.core.services.jwt.jwt_verify import JwtVerificationService
from src.userauth.entities.user import User


class TokenService:
    def __init__(
        self,
        credentials: CredentialService,
        jwt_generator: JwtGeneratorService | None = None,
        jwt_verifier: JwtVerificationService | None = None,
    ):
        self._credentials = credentials
        self._store = credentials.store
        self._jwt_generator = jwt_generator or JwtGeneratorService()
        self._jwt_verifier = jwt_verifier or JwtVerificationService()

    def issue_token_pair(self, user: User) -> Result[TokenPair]:
        """Sign a new access/refresh pair and store the refresh token.

        The stored refresh token is replaced, which invalidates any earlier one.
        """
        try:
            pair = TokenPair(
                access_token=self._jwt_generator.generate_access_token(user.id, user.email),
                refresh_token=self._jwt_generator.generate_refresh_token(user.id),
            )
        except TokenSigningError as e:
            logger.error("Token signing failed: {}", e)
            return internal()

        try:
            updated = self._store.update_fields(user.id, {"refresh_token": pair.refresh_token})
        except StoreError as e:
            logger.error("Failed to store refresh token for user {}: {}", user.id, e)
            return internal()

        if updated is None:
            # deleted between lookup and issuance
            return unauthorized()
        return Ok(pair)

    def login(self, email: str | None, password: str | None) -> Result[TokenPair]:
        result = self._credentials.check_credentials(email, password)
        if isinstance(result, Err):
            return result
        user = result.value
        issued = self.issue_token_pair(user)
        if isinstance(issued, Ok):
            logger.info("User {} logged in", user.id)
        return issued

    def authenticate(self, access_token: str | None) -> Result[User]:
        """Resolve an access token to the current user record.

        Missing, malformed, forged or expired tokens and tokens for users that
        no longer exist all fail with Unauthorized.
        """
        if not access_token:
            return unauthorized()

        try:
            claims = self._jwt_verifier.verify_access_token(access_token)
        except TokenVerificationError as e:
            logger.debug("Access token rejected: {}", e)
            return unauthorized()
        except TokenSigningError as e:
            logger.error("Access token verification misconfigured: {}", e)
            return internal()

        try:
            user = self._store.get(claims.subject)
        except StoreError as e:
            logger.error("User lookup failed during authentication: {}", e)
            return internal()

        if user is None:
            return unauthorized()
        return Ok(user)

    def refresh(self, refresh_token: str | None) -> Result[TokenPair]:
        """Rotate a valid, current refresh token into a new token pair.

        The presented token must verify, resolve to an existing user and
        exactly match the token stored on that user. Anything else means the
        session expired or was rotated and the caller must log in again.
        """
        if not refresh_token:
            return unauthorized("Refresh token is required")

        try:
            claims = self._jwt_verifier.verify_refresh_token(refresh_token)
        except TokenVerificationError as e:
            logger.debug("Refresh token rejected: {}", e)
            return unauthorized("Invalid or expired refresh token")
        except TokenSigningError as e:
            logger.error("Refresh token verification misconfigured: {}", e)
            return internal()

        try:
            user = self._store.get(claims.subject)
        except StoreError as e:
            logger.error("User lookup failed during refresh: {}", e)
            return internal()

        if user is None:
            return unauthorized("Invalid or expired refresh token")
        if not tokens_match(refresh_token, user.refresh_token):
            logger.info("Superseded refresh token presented for user {}", user.id)
            return unauthorized("Refresh token is expired or has been used")

        return self.issue_token_pair(user)

    def logout(self, user_id: str) -> Result[None]:
        """Clear the stored refresh token.

        Outstanding access tokens stay valid until their own expiry.
        """
        try:
            updated = self._store.update_fields(user_id, {"refresh_token": None})
        except StoreError as e:
            logger.error("Failed to clear refresh token for user {}: {}", user_id, e)
            return internal()

        if updated is None:
            return unauthorized()
        logger.info("User {} logged out", user_id)
        return Ok(None)
