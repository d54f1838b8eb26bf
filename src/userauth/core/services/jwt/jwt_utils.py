import base64
import json
import time
from dataclasses import dataclass
from typing import Any, Final

from src.userauth.core.exceptions import TokenVerificationError
from src.userauth.core.models.token import TokenClaims

# ---------------- tunables ----------------
MAX_JWT_CHARS: Final = 4096
MAX_SEGMENT_CHARS: Final = 4096
MAX_HEADER_BYTES: Final = 8 * 1024
MAX_PAYLOAD_BYTES: Final = 64 * 1024
_ALLOWED: Final = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_."
)  # no '='

# Registered claims mapped onto dedicated TokenClaims fields.
REGISTERED_CLAIMS: Final = frozenset(
    {"iss", "sub", "aud", "exp", "iat", "nbf", "jti", "token_type", "email"}
)


# --------------- one-pass prefilter ---------------
def _prefilter_compact_jwt(token: str) -> tuple[str, str, str]:
    if not token or len(token) > MAX_JWT_CHARS:
        raise TokenVerificationError("Invalid JWT size")
    first = second = -1
    for i, ch in enumerate(token):
        if ch not in _ALLOWED:
            raise TokenVerificationError("Invalid JWT characters")
        if ch == ".":
            if first < 0:
                first = i
            elif second < 0:
                second = i
            else:  # third dot
                raise TokenVerificationError("Invalid JWT format")
    # exactly two dots and non-empty segments
    if first <= 0 or second - first <= 1 or second >= len(token) - 1:
        raise TokenVerificationError("Invalid JWT format")
    h, p, s = token[:first], token[first + 1 : second], token[second + 1 :]
    if (
        len(h) > MAX_SEGMENT_CHARS
        or len(p) > MAX_SEGMENT_CHARS
        or len(s) > MAX_SEGMENT_CHARS
    ):
        raise TokenVerificationError("Invalid JWT segment size")
    return h, p, s


def _b64url_decode_unpadded(seg: str, what: str, max_bytes: int) -> bytes:
    pad = (-len(seg)) % 4
    try:
        raw = base64.urlsafe_b64decode((seg + "=" * pad).encode("ascii"))
    except Exception as e:
        raise TokenVerificationError(f"Invalid base64url in {what}") from e
    if len(raw) > max_bytes:
        raise TokenVerificationError(f"{what} too large")
    return raw


def _decode_json_object(raw: bytes, what: str) -> dict[str, Any]:
    try:
        obj = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise TokenVerificationError(f"Non-UTF8 {what}") from e
    except json.JSONDecodeError as e:
        raise TokenVerificationError(f"Invalid JSON in {what}") from e
    if not isinstance(obj, dict):
        raise TokenVerificationError(f"{what} must be a JSON object")
    return obj


@dataclass(frozen=True)
class JwtPreview:
    header: dict[str, Any]
    claims: dict[str, Any]
    alg: str | None
    token_type: str | None


def preview_jwt(token: str) -> JwtPreview:
    """Split and decode header+payload exactly once, without verifying."""
    h_seg, p_seg, _ = _prefilter_compact_jwt(token)
    h_raw = _b64url_decode_unpadded(h_seg, "JWT header", MAX_HEADER_BYTES)
    p_raw = _b64url_decode_unpadded(p_seg, "JWT payload", MAX_PAYLOAD_BYTES)
    header = _decode_json_object(h_raw, "JWT header")
    claims = _decode_json_object(p_raw, "JWT payload")
    token_type = claims.get("token_type")

    return JwtPreview(
        header=header,
        claims=claims,
        alg=header.get("alg"),
        token_type=token_type if isinstance(token_type, str) else None,
    )


def create_token_claims(token: str, claims: dict[str, Any]) -> TokenClaims:
    """Create TokenClaims instance from verified JWT claims.

    Args:
        token: The raw JWT token
        claims: Verified JWT claims

    Returns:
        TokenClaims instance with parsed claims
    """
    now = int(time.time())

    return TokenClaims(
        raw_token=token,
        token_type=claims.get("token_type", "access"),
        issuer=claims.get("iss", ""),
        subject=str(claims.get("sub", "")),
        expires_at=claims.get("exp", now),
        issued_at=claims.get("iat", now),
        not_before=claims.get("nbf"),
        jti=claims.get("jti"),
        email=claims.get("email"),
        custom_claims={k: v for k, v in claims.items() if k not in REGISTERED_CLAIMS},
    )
