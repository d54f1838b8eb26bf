"""Email and phone verification tokens.

Each channel holds at most one outstanding token per user. Issuing again
replaces the previous token; consuming it marks the channel verified and
clears the token.
"""

from loguru import logger

from src.userauth.core.exceptions import StoreError
from src.userauth.core.models.accounts import UserProfile
from src.userauth.core.result import Ok, Result, bad_request, internal, unauthorized
from src.userauth.core.security import generate_hex_token
from src.userauth.core.storage.user_store import UserStore
from src.userauth.entities.user import normalize_email, normalize_phone
from src.userauth.runtime.context import get_config


class VerificationService:
    def __init__(self, store: UserStore):
        self._store = store

    def _issue(self, field: str, value: str, token_field: str, nbytes: int) -> Result[str]:
        try:
            user = self._store.find_one(**{field: value})
            if user is None:
                return unauthorized(f"No user with this {field}")
            token = generate_hex_token(nbytes)
            updated = self._store.update_fields(user.id, {token_field: token})
        except StoreError as e:
            logger.error("Failed to issue {} verification token: {}", field, e)
            return internal()

        if updated is None:
            return unauthorized(f"No user with this {field}")

        # Delivery (email/SMS) is handled by an external sender.
        logger.info("Issued {} verification token for user {}", field, user.id)
        return Ok(token)

    def _consume(self, token: str, token_field: str, flag_field: str) -> Result[UserProfile]:
        try:
            user = self._store.find_one(**{token_field: token})
            if user is None:
                return unauthorized("Invalid verification token")
            updated = self._store.update_fields(user.id, {flag_field: True, token_field: None})
        except StoreError as e:
            logger.error("Failed to consume verification token: {}", e)
            return internal()

        if updated is None:
            return unauthorized("Invalid verification token")
        logger.info("User {} verified {}", user.id, flag_field)
        return Ok(UserProfile.from_user(updated))

    def issue_email_verification(self, email: str | None) -> Result[str]:
        """Generate and store a fresh email verification token.

        Returns:
            Ok(token) for the delivery collaborator; BadRequest for a blank
            email; Unauthorized when no user has this email.
        """
        if not email or not email.strip():
            return bad_request("Email is required", [{"field": "email", "message": "email is required"}])
        return self._issue(
            "email",
            normalize_email(email),
            "email_verification_token",
            get_config().verification.email_token_bytes,
        )

    def issue_phone_verification(self, phone: str | None) -> Result[str]:
        if not phone or not phone.strip():
            return bad_request("Phone is required", [{"field": "phone", "message": "phone is required"}])
        return self._issue(
            "phone",
            normalize_phone(phone),
            "phone_verification_token",
            get_config().verification.phone_token_bytes,
        )

    def consume_email_verification(self, token: str | None) -> Result[UserProfile]:
        """Mark the email of the user holding this token as verified."""
        if not token or not token.strip():
            return bad_request("Token is required", [{"field": "token", "message": "token is required"}])
        return self._consume(token.strip(), "email_verification_token", "email_verified")

    def consume_phone_verification(self, token: str | None) -> Result[UserProfile]:
        if not token or not token.strip():
            return bad_request("Token is required", [{"field": "token", "message": "token is required"}])
        return self._consume(token.strip(), "phone_verification_token", "phone_verified")
