"""Password hashing with bcrypt."""

import bcrypt

from src.userauth.runtime.context import get_config

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted one-way password hashing.

    The work factor comes from ``password.bcrypt_rounds`` unless given
    explicitly.
    """

    def __init__(self, rounds: int | None = None):
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds or get_config().password.bcrypt_rounds

    @staticmethod
    def is_acceptable(plaintext: str) -> bool:
        """Whether bcrypt can hash this password without truncating it."""
        return 0 < len(plaintext.encode("utf-8")) <= BCRYPT_MAX_BYTES

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh salt.

        Raises:
            ValueError: empty password or longer than 72 bytes
        """
        if not self.is_acceptable(plaintext):
            raise ValueError(f"Password must be 1 to {BCRYPT_MAX_BYTES} bytes long")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Check a password against a stored hash (constant time)."""
        if not plaintext or not hashed or not self.is_acceptable(plaintext):
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # malformed stored hash
            return False
