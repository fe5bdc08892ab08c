# giaycung_api/settings.py
from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage settings
    # "sheets" talks to Google Sheets; "memory" keeps every table in-process
    storage_backend: str = "sheets"
    google_sheets_id: str = Field(
        default="",
        validation_alias=AliasChoices("google_sheets_id", "GOOGLE_SHEETS_ID", "SPREADSHEET_ID"),
    )

    # Service account: path / inline JSON, base64 JSON, or the email + key pair
    google_sa_json: str = ""
    google_sa_json_base64: str = ""
    google_client_email: str = ""
    google_private_key: str = ""

    # 1 = a failed Sheets call surfaces immediately (no retry)
    sheets_retry_attempts: int = 1

    # Shoe items under a service order: "table" (service_order_shoes tab)
    # or "cell" (legacy JSON array in service_orders.shoesJson)
    shoes_storage: str = "table"

    # ===== Admin auth =====
    # Empty secret = open mode, every write is allowed.
    # Surrounding whitespace is stripped from both the secret and the presented
    # credential, so " s3cret " and "s3cret" are the same secret.
    admin_token_secret: str = Field(
        default="",
        validation_alias=AliasChoices("admin_token_secret", "ADMIN_TOKEN_SECRET", "ADMIN_TOKEN"),
    )
    admin_email: str = ""
    admin_password: str = ""
    admin_token_ttl_seconds: int = 60 * 60 * 24

    # CORS settings
    allowed_origins: str = "https://giay-cung4.vercel.app,http://localhost:3000,http://localhost:5173"

    log_level: str = "INFO"

    model_config = ConfigDict(
        env_file=str(Path(__file__).resolve().parent.parent / ".env"),
        extra="ignore",
    )

    @property
    def open_admin(self) -> bool:
        """True when no admin secret is configured (writes are not guarded)."""
        return not self.admin_token_secret.strip()

    def resolved_admin_secret(self) -> str:
        return self.admin_token_secret.strip()

    def google_credentials_info(self) -> Optional[Dict[str, Any]]:
        """
        Return service-account info as a dict, or None when only a file path
        is configured (see google_credentials_file).

        Resolution order:
          1) GOOGLE_SA_JSON_BASE64
          2) GOOGLE_SA_JSON when it holds inline JSON
          3) GOOGLE_CLIENT_EMAIL + GOOGLE_PRIVATE_KEY
        """
        if self.google_sa_json_base64:
            decoded = base64.b64decode(self.google_sa_json_base64)
            return json.loads(decoded.decode("utf-8"))

        raw = self.google_sa_json.strip()
        if raw.startswith("{"):
            return json.loads(raw)

        if self.google_client_email and self.google_private_key:
            return {
                "type": "service_account",
                "client_email": self.google_client_email.strip(),
                # Vercel-style env values keep the newlines escaped
                "private_key": self.google_private_key.replace("\\n", "\n"),
                "token_uri": "https://oauth2.googleapis.com/token",
            }
        return None

    def google_credentials_file(self) -> str:
        raw = self.google_sa_json.strip()
        if raw and not raw.startswith("{"):
            return raw
        return ""

    def get_origins_list(self) -> List[str]:
        """Parse comma-separated origins into a list."""
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


_settings_instance = None


def get_settings() -> Settings:
    """Singleton pattern for settings."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
