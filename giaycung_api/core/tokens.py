"""
HS256 admin tokens (JWT via PyJWT).

`exp` may be given in epoch seconds or epoch milliseconds; values below
10**12 are read as seconds. PyJWT's own exp check assumes seconds, so it is
disabled and expiry is checked here instead.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import jwt

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ADMIN_ROLE = "admin"

# Below this an `exp` is treated as epoch seconds, otherwise epoch milliseconds.
EXP_MS_THRESHOLD = 10**12


@dataclass(frozen=True)
class TokenCheck:
    valid: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    reason: str = ""


def _now_ms() -> int:
    return int(time.time() * 1000)


def normalize_exp_ms(exp: Any) -> Optional[int]:
    """Return `exp` as epoch milliseconds, or None if it is not numeric."""
    if isinstance(exp, bool):
        return None
    try:
        value = float(exp)
    except (TypeError, ValueError):
        return None
    if value != value:
        return None
    if value < EXP_MS_THRESHOLD:
        value *= 1000
    return int(value)


def sign_token(payload: Dict[str, Any], secret: str) -> str:
    """Sign `payload` with HMAC-SHA256 and return header.payload.signature."""
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: str, now_ms: Optional[int] = None) -> TokenCheck:
    """
    Verify a token produced by sign_token. Fails closed on any malformed input.

    Returns:
        TokenCheck(valid=True, payload=...) when the signature matches, `exp`
        (if present) is in the future and `role` (if present) is "admin".
    """
    token = (token or "").strip()
    if not token:
        return TokenCheck(False, reason="malformed")

    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM], options={"verify_exp": False})
    except jwt.InvalidSignatureError:
        return TokenCheck(False, reason="bad signature")
    except jwt.InvalidAlgorithmError:
        return TokenCheck(False, reason="unsupported alg")
    except jwt.DecodeError:
        return TokenCheck(False, reason="malformed")
    except jwt.PyJWTError as e:
        return TokenCheck(False, reason=f"invalid: {e}")

    if "exp" in payload:
        exp_ms = normalize_exp_ms(payload.get("exp"))
        current = _now_ms() if now_ms is None else now_ms
        if exp_ms is None or exp_ms <= current:
            return TokenCheck(False, payload, reason="expired")

    if "role" in payload and payload.get("role") != ADMIN_ROLE:
        return TokenCheck(False, payload, reason="role")

    return TokenCheck(True, payload)


def issue_admin_token(email: str, secret: str, ttl_seconds: int) -> str:
    """Token handed out by the login endpoint; `exp` is in milliseconds."""
    payload = {
        "email": email,
        "role": ADMIN_ROLE,
        "exp": _now_ms() + ttl_seconds * 1000,
    }
    logger.info("Issued admin token for %s (ttl=%ss)", email, ttl_seconds)
    return sign_token(payload, secret)
