"""Security utilities: random token generation and constant-time comparison."""

import hmac
import secrets


def generate_hex_token(nbytes: int) -> str:
    """Generate a cryptographically secure random token.

    Args:
        nbytes: Number of random bytes to generate

    Returns:
        Hex encoded token (two characters per byte)
    """
    if nbytes < 1:
        raise ValueError("nbytes must be positive")
    return secrets.token_hex(nbytes)


def tokens_match(presented: str | None, stored: str | None) -> bool:
    """Constant-time comparison of a presented token against the stored value.

    An absent value on either side never matches.
    """
    if not presented or not stored:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), stored.encode("utf-8"))
