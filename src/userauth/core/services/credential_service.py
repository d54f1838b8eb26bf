"""Credential store: user records and the password-hashing contract."""

from typing import Any

from loguru import logger

from src.userauth.core.exceptions import DuplicateKeyError, StoreError
from src.userauth.core.models.accounts import (
    ChangePasswordRequest,
    ProfileUpdate,
    RegisterRequest,
    UserProfile,
)
from src.userauth.core.result import (
    Err,
    Ok,
    Result,
    bad_request,
    conflict,
    internal,
    not_found,
    unauthorized,
)
from src.userauth.core.security import generate_hex_token
from src.userauth.core.services.password_service import BCRYPT_MAX_BYTES, PasswordHasher
from src.userauth.core.storage.user_store import UserStore
from src.userauth.entities.user import User, normalize_email, normalize_phone
from src.userauth.runtime.context import get_config

REQUIRED_REGISTRATION_FIELDS = {
    "first_name": "firstName",
    "email": "email",
    "password": "password",
    "confirm_password": "confirmPassword",
    "phone": "phone",
}

PROFILE_FIELDS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "email": "email",
    "phone": "phone",
}


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _missing_fields(values: dict[str, Any], required: dict[str, str]) -> list[dict]:
    return [
        {"field": wire_name, "message": f"{wire_name} is required"}
        for name, wire_name in required.items()
        if _is_blank(values.get(name))
    ]


def _conflict_errors(fields: dict[str, Any]) -> list[dict]:
    return [
        {"field": name, "value": value, "message": f"{name} is already in use"}
        for name, value in sorted(fields.items())
    ]


def _password_length_error(field: str) -> Err:
    return bad_request(
        "Password is too long",
        [{"field": field, "message": f"must be at most {BCRYPT_MAX_BYTES} bytes"}],
    )


def _store_failure(operation: str, exc: StoreError) -> Err:
    logger.error("User store failure during {}: {}", operation, exc)
    return internal()


class CredentialService:
    """Owns user records and the rules for deriving and checking passwords."""

    def __init__(self, store: UserStore, hasher: PasswordHasher | None = None):
        self._store = store
        self._hasher = hasher or PasswordHasher()

    @property
    def store(self) -> UserStore:
        return self._store

    def register(self, request: RegisterRequest) -> Result[UserProfile]:
        """Create a new user from a registration request.

        The password is hashed before the record is persisted and initial
        email and phone verification tokens are generated.

        Returns:
            Ok(UserProfile) on success; BadRequest for missing fields or a
            confirmation mismatch; Conflict when email or phone is taken.
        """
        errors = _missing_fields(request.model_dump(), REQUIRED_REGISTRATION_FIELDS)
        if errors:
            return bad_request("Missing required fields", errors)

        if request.password != request.confirm_password:
            return bad_request(
                "Passwords do not match",
                [{"field": "confirmPassword", "message": "must match password"}],
            )
        if not self._hasher.is_acceptable(request.password):
            return _password_length_error("password")

        email = normalize_email(request.email)
        phone = normalize_phone(request.phone)

        try:
            existing = self._store.find_any([{"email": email}, {"phone": phone}])
        except StoreError as e:
            return _store_failure("registration lookup", e)

        if existing is not None:
            taken = {}
            if existing.email == email:
                taken["email"] = email
            if existing.phone == phone:
                taken["phone"] = phone
            return conflict("User with email or phone already exists", _conflict_errors(taken))

        verification = get_config().verification
        user = User(
            email=email,
            phone=phone,
            first_name=request.first_name,
            last_name=None if _is_blank(request.last_name) else request.last_name,
            password_hash=self._hasher.hash(request.password),
            email_verification_token=generate_hex_token(verification.email_token_bytes),
            phone_verification_token=generate_hex_token(verification.phone_token_bytes),
        )

        try:
            created = self._store.create(user)
        except DuplicateKeyError as e:
            # lost a race against a concurrent registration
            return conflict("User with email or phone already exists", _conflict_errors(e.fields))
        except StoreError as e:
            return _store_failure("registration", e)

        logger.info("Registered user {}", created.id)
        return Ok(UserProfile.from_user(created))

    def verify_password(self, user: User, plaintext: str) -> bool:
        """Constant-time check of a plaintext password against the stored hash."""
        return self._hasher.verify(plaintext, user.password_hash)

    def set_password(self, user_id: str, plaintext: str) -> Result[None]:
        """Recompute and replace the password hash, touching no other field."""
        if _is_blank(plaintext):
            return bad_request(
                "Password is required", [{"field": "password", "message": "password is required"}]
            )
        if not self._hasher.is_acceptable(plaintext):
            return _password_length_error("password")

        try:
            updated = self._store.update_fields(
                user_id, {"password_hash": self._hasher.hash(plaintext)}
            )
        except StoreError as e:
            return _store_failure("password update", e)

        if updated is None:
            return not_found("User not found")
        logger.info("Password updated for user {}", user_id)
        return Ok(None)

    def check_credentials(self, email: str | None, password: str | None) -> Result[User]:
        """Resolve a user by email and check the password.

        Unknown email is NotFound; a wrong password is Unauthorized.
        """
        errors = _missing_fields(
            {"email": email, "password": password}, {"email": "email", "password": "password"}
        )
        if errors:
            return bad_request("Email and password are required", errors)

        try:
            user = self._store.find_one(email=normalize_email(email))
        except StoreError as e:
            return _store_failure("login lookup", e)

        if user is None:
            return not_found("User not found")
        if not self.verify_password(user, password):
            logger.info("Rejected login for user {}: wrong password", user.id)
            return unauthorized("Invalid credentials")
        return Ok(user)

    def change_password(self, user_id: str, request: ChangePasswordRequest) -> Result[None]:
        """Change a password after checking the current one.

        Error detail names fields only and never echoes a password value.
        """
        errors = _missing_fields(
            request.model_dump(),
            {
                "old_password": "oldPassword",
                "new_password": "newPassword",
                "confirm_password": "confirmPassword",
            },
        )
        if errors:
            return bad_request("Missing required fields", errors)
        if request.new_password != request.confirm_password:
            return bad_request(
                "Passwords do not match",
                [{"field": "confirmPassword", "message": "must match newPassword"}],
            )
        if not self._hasher.is_acceptable(request.new_password):
            return _password_length_error("newPassword")

        try:
            user = self._store.get(user_id)
        except StoreError as e:
            return _store_failure("password change lookup", e)
        if user is None:
            return not_found("User not found")

        if not self.verify_password(user, request.old_password):
            return unauthorized("Old password is incorrect")

        return self.set_password(user_id, request.new_password)

    def get_profile(self, user_id: str) -> Result[UserProfile]:
        try:
            user = self._store.get(user_id)
        except StoreError as e:
            return _store_failure("profile lookup", e)
        if user is None:
            return not_found("User not found")
        return Ok(UserProfile.from_user(user))

    def update_profile(self, user_id: str, patch: ProfileUpdate) -> Result[UserProfile]:
        """Apply a partial update to name, email and phone.

        Changed email or phone values are checked against every other record.
        """
        fields = patch.model_dump(exclude_unset=True)
        fields = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
        if not fields:
            return bad_request("No profile fields to update")

        blank = [
            {"field": PROFILE_FIELDS[k], "message": f"{PROFILE_FIELDS[k]} must not be blank"}
            for k, v in fields.items()
            if k != "last_name" and _is_blank(v)
        ]
        if blank:
            return bad_request("Invalid profile fields", blank)
        if "last_name" in fields and _is_blank(fields["last_name"]):
            fields["last_name"] = None

        if "email" in fields:
            fields["email"] = normalize_email(fields["email"])
        if "phone" in fields:
            fields["phone"] = normalize_phone(fields["phone"])

        try:
            # one lookup per field: the caller may already own one of the values
            taken = {}
            for name in ("email", "phone"):
                if name not in fields:
                    continue
                owner = self._store.find_one(**{name: fields[name]})
                if owner is not None and owner.id != user_id:
                    taken[name] = fields[name]
            if taken:
                return conflict("Email or phone already in use", _conflict_errors(taken))

            updated = self._store.update_fields(user_id, fields)
        except DuplicateKeyError as e:
            return conflict("Email or phone already in use", _conflict_errors(e.fields))
        except StoreError as e:
            return _store_failure("profile update", e)

        if updated is None:
            return not_found("User not found")
        logger.info("Updated profile fields {} for user {}", sorted(fields), user_id)
        return Ok(UserProfile.from_user(updated))

    def delete(self, user_id: str) -> Result[None]:
        """Hard-delete a user record."""
        try:
            deleted = self._store.delete(user_id)
        except StoreError as e:
            return _store_failure("user deletion", e)
        if not deleted:
            return not_found("User not found")
        logger.info("Deleted user {}", user_id)
        return Ok(None)
