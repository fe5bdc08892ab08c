# giaycung_api/routers/auth.py
from __future__ import annotations

import hmac
import logging
import time

from fastapi import APIRouter

from ..core.errors import ServerError, Unauthorized
from ..core.tokens import ADMIN_ROLE, issue_admin_token
from ..deps import SettingsDep
from ..schemas import LoginRequest, LoginUser

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


@router.post("/login")
async def login(body: LoginRequest, settings: SettingsDep):
    """
    Exchange the admin email/password for a signed token
    ({email, role: "admin", exp: now_ms + ttl}).
    """
    admin_email = settings.admin_email.strip()
    admin_password = settings.admin_password
    if not admin_email or not admin_password:
        raise ServerError("Missing ADMIN_EMAIL / ADMIN_PASSWORD")

    email = body.email.strip()
    if not (_same(email.lower(), admin_email.lower()) and _same(body.password, admin_password)):
        logger.warning("Failed admin login for %s", email)
        raise Unauthorized("Invalid email or password")

    secret = settings.resolved_admin_secret()
    if not secret:
        raise ServerError("Missing ADMIN_TOKEN_SECRET")

    token = issue_admin_token(email, secret, settings.admin_token_ttl_seconds)
    return {"ok": True, "token": token, "user": LoginUser(email=email, role=ADMIN_ROLE).model_dump()}


@router.get("/ping")
async def ping():
    return {
        "ok": True,
        "message": "pong",
        "time": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
    }
