"""
Admin guard: decides whether a request may perform a write.
"""
from __future__ import annotations

import hmac
import logging
import re
from typing import Mapping, Optional

from ..settings import Settings
from .errors import Unauthorized
from .tokens import verify_token

logger = logging.getLogger(__name__)

_BEARER = re.compile(r"^Bearer\s+", re.IGNORECASE)


def credential_from_headers(headers: Mapping[str, str]) -> str:
    """
    X-Admin-Token wins; otherwise Authorization with the Bearer prefix stripped.
    `headers` is expected to be case-insensitive (Starlette Headers).
    """
    token = (headers.get("x-admin-token") or "").strip()
    if token:
        return token
    auth = (headers.get("authorization") or "").strip()
    return _BEARER.sub("", auth).strip()


class AdminGuard:
    def __init__(self, settings: Settings) -> None:
        self.secret = settings.resolved_admin_secret()

    @property
    def is_open(self) -> bool:
        return not self.secret

    def authorize_credential(self, credential: Optional[str]) -> bool:
        if self.is_open:
            return True
        credential = (credential or "").strip()
        if not credential:
            return False
        # legacy static shared-secret mode
        if hmac.compare_digest(credential.encode("utf-8"), self.secret.encode("utf-8")):
            return True
        check = verify_token(credential, self.secret)
        if not check.valid:
            logger.info("Admin token rejected: %s", check.reason)
        return check.valid

    def authorize(self, headers: Mapping[str, str]) -> bool:
        return self.authorize_credential(credential_from_headers(headers))

    def ensure(self, headers: Mapping[str, str]) -> None:
        """Raise Unauthorized unless authorize(headers) passes."""
        if not self.authorize(headers):
            raise Unauthorized()
