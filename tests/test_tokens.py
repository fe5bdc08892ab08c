"""
Tests for the HS256 admin token codec.

Run with: pytest tests/test_tokens.py -v
"""
import base64
import json

import jwt
import pytest

from giaycung_api.core import tokens
from giaycung_api.core.tokens import issue_admin_token, normalize_exp_ms, sign_token, verify_token

SECRET = "s1"
NOW_MS = 1_750_000_000_000


def _segment(obj) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()


class TestSignToken:
    """Tests for sign_token output shape."""

    def test_three_base64url_parts(self):
        token = sign_token({"exp": NOW_MS + 1000}, SECRET)
        parts = token.split(".")
        assert len(parts) == 3
        assert all(parts)
        assert "=" not in token

    def test_header_is_hs256_jwt(self):
        header_seg = sign_token({}, SECRET).split(".")[0]
        padded = header_seg + "=" * (-len(header_seg) % 4)
        assert json.loads(base64.urlsafe_b64decode(padded)) == {"alg": "HS256", "typ": "JWT"}


class TestVerifyToken:
    """Tests for verify_token fail-closed behaviour."""

    def test_round_trip_returns_payload(self):
        token = sign_token({"exp": NOW_MS + 1000, "role": "admin", "email": "a@b.c"}, SECRET)
        check = verify_token(token, SECRET, now_ms=NOW_MS)
        assert check.valid
        assert check.payload["email"] == "a@b.c"

    def test_lifecycle_valid_then_expired(self, monkeypatch):
        """exp = now + 1000ms is valid now and invalid once the clock passes it."""
        monkeypatch.setattr(tokens, "_now_ms", lambda: NOW_MS)
        token = sign_token({"exp": NOW_MS + 1000}, SECRET)
        assert verify_token(token, SECRET).valid

        monkeypatch.setattr(tokens, "_now_ms", lambda: NOW_MS + 1500)
        check = verify_token(token, SECRET)
        assert not check.valid
        assert check.reason == "expired"

    def test_wrong_secret_rejected(self):
        token = sign_token({"exp": NOW_MS + 60_000}, "S1")
        assert verify_token(token, "S1", now_ms=NOW_MS).valid
        assert not verify_token(token, "S2", now_ms=NOW_MS).valid

    def test_exp_in_seconds_accepted(self):
        token = sign_token({"exp": NOW_MS // 1000 + 60}, SECRET)
        assert verify_token(token, SECRET, now_ms=NOW_MS).valid

    def test_exp_in_seconds_expired(self):
        token = sign_token({"exp": NOW_MS // 1000 - 1}, SECRET)
        assert not verify_token(token, SECRET, now_ms=NOW_MS).valid

    def test_no_exp_is_valid(self):
        assert verify_token(sign_token({"role": "admin"}, SECRET), SECRET, now_ms=NOW_MS).valid

    def test_non_admin_role_rejected(self):
        token = sign_token({"exp": NOW_MS + 1000, "role": "staff"}, SECRET)
        check = verify_token(token, SECRET, now_ms=NOW_MS)
        assert not check.valid
        assert check.reason == "role"

    def test_other_alg_rejected(self):
        header = _segment({"alg": "none", "typ": "JWT"})
        body = _segment({"exp": NOW_MS + 1000})
        good_sig = sign_token({"exp": NOW_MS + 1000}, SECRET).split(".")[2]
        assert not verify_token(f"{header}.{body}.{good_sig}", SECRET, now_ms=NOW_MS).valid

    def test_tampered_payload_rejected(self):
        token = sign_token({"exp": NOW_MS + 1000, "role": "admin"}, SECRET)
        header, _, sig = token.split(".")
        forged = _segment({"exp": NOW_MS + 10**9, "role": "admin"})
        assert not verify_token(f"{header}.{forged}.{sig}", SECRET, now_ms=NOW_MS).valid

    @pytest.mark.parametrize(
        "token",
        ["", "abc", "a.b", "a..c", "a.b.c.d", "!!!.???.***", "e30.bm90LWpzb24.c2ln"],
    )
    def test_malformed_tokens_fail_closed(self, token):
        assert not verify_token(token, SECRET, now_ms=NOW_MS).valid


class TestExpNormalization:
    def test_seconds_scaled_to_ms(self):
        assert normalize_exp_ms(1_700_000_000) == 1_700_000_000_000

    def test_ms_kept(self):
        assert normalize_exp_ms(1_700_000_000_000) == 1_700_000_000_000

    def test_non_numeric(self):
        assert normalize_exp_ms("soon") is None
        assert normalize_exp_ms(True) is None


def test_issue_admin_token_uses_ms_exp(monkeypatch):
    monkeypatch.setattr(tokens, "_now_ms", lambda: NOW_MS)
    token = issue_admin_token("admin@giaycung.vn", SECRET, ttl_seconds=60)
    check = verify_token(token, SECRET)
    assert check.valid
    assert check.payload == {"email": "admin@giaycung.vn", "role": "admin", "exp": NOW_MS + 60_000}


class TestJwtInterop:
    """Tokens are plain HS256 JWTs, readable by any JWT library."""

    def test_decodes_with_pyjwt(self):
        token = sign_token({"email": "a@b.c", "role": "admin"}, SECRET)
        assert jwt.decode(token, SECRET, algorithms=["HS256"]) == {"email": "a@b.c", "role": "admin"}

    def test_accepts_token_signed_elsewhere(self):
        token = jwt.encode({"role": "admin", "exp": NOW_MS + 1000}, SECRET, algorithm="HS256")
        assert verify_token(token, SECRET, now_ms=NOW_MS).valid

    def test_bad_signature_reason(self):
        token = jwt.encode({"role": "admin"}, "other", algorithm="HS256")
        assert verify_token(token, SECRET, now_ms=NOW_MS).reason == "bad signature"

    def test_hs512_rejected(self):
        token = jwt.encode({"role": "admin"}, SECRET, algorithm="HS512")
        check = verify_token(token, SECRET, now_ms=NOW_MS)
        assert not check.valid
        assert check.reason == "unsupported alg"
