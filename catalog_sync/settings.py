"""
Environment-driven configuration for the catalog service.
"""
import os
from typing import Optional

from .errors import ConfigurationMissing


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if raw in ("true", "1", "yes"):
        return True
    if raw in ("false", "0", "no"):
        return False
    return default


class Settings:
    """Configuration loaded from environment variables."""

    # ---------------- Content store ----------------

    @property
    def CONTENTFUL_SPACE_ID(self) -> Optional[str]:
        return os.getenv("CONTENTFUL_SPACE_ID")

    @property
    def CONTENTFUL_ACCESS_TOKEN(self) -> Optional[str]:
        return os.getenv("CONTENTFUL_ACCESS_TOKEN")

    @property
    def CONTENTFUL_ENVIRONMENT(self) -> str:
        return os.getenv("CONTENTFUL_ENVIRONMENT") or "master"

    @property
    def CONTENTFUL_CONTENT_TYPE(self) -> str:
        return os.getenv("CONTENTFUL_CONTENT_TYPE") or "product"

    @property
    def CONTENTFUL_TIMEOUT(self) -> float:
        return float(os.getenv("CONTENTFUL_TIMEOUT", "10"))

    @property
    def REVALIDATE_SECRET(self) -> Optional[str]:
        # Support both old and new variable names
        return os.getenv("CONTENTFUL_REVALIDATE_SECRET") or os.getenv("REVALIDATE_SECRET")

    # ---------------- Spreadsheet store ----------------

    @property
    def SPREADSHEET_ID(self) -> Optional[str]:
        # Support both old and new variable names
        return os.getenv("SPREADSHEET_ID") or os.getenv("GSHEET_SPREADSHEET_ID")

    @property
    def CREDENTIALS_JSON(self) -> Optional[str]:
        return os.getenv("GSHEET_CREDENTIALS_JSON") or os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON")

    @property
    def GOOGLE_APPLICATION_CREDENTIALS(self) -> Optional[str]:
        return os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

    @property
    def GOOGLE_PRIVATE_KEY(self) -> Optional[str]:
        return os.getenv("GOOGLE_PRIVATE_KEY")

    @property
    def GOOGLE_SERVICE_ACCOUNT_EMAIL(self) -> Optional[str]:
        return os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL") or os.getenv("GOOGLE_CLIENT_EMAIL")

    @property
    def SHEETS_TIMEOUT(self) -> Optional[float]:
        raw = os.getenv("SHEETS_TIMEOUT")
        return float(raw) if raw else None

    # ---------------- Service ----------------

    @property
    def CACHE_SERVE_STALE(self) -> bool:
        return _env_bool("CACHE_SERVE_STALE")

    @property
    def PORT(self) -> int:
        return int(os.getenv("PORT", "8080"))

    # ---------------- Validation ----------------

    def validate_content(self) -> None:
        """Validate settings required by the content store adapter."""
        if not self.CONTENTFUL_SPACE_ID:
            raise ConfigurationMissing("CONTENTFUL_SPACE_ID")
        if not self.CONTENTFUL_ACCESS_TOKEN:
            raise ConfigurationMissing("CONTENTFUL_ACCESS_TOKEN")

    def validate_inventory(self) -> None:
        """Validate settings required by the spreadsheet adapter."""
        if not self.SPREADSHEET_ID:
            raise ConfigurationMissing("SPREADSHEET_ID")
        has_json_creds = bool(self.CREDENTIALS_JSON)
        has_file_creds = bool(self.GOOGLE_APPLICATION_CREDENTIALS)
        has_individual_creds = bool(self.GOOGLE_PRIVATE_KEY and self.GOOGLE_SERVICE_ACCOUNT_EMAIL)
        if not (has_json_creds or has_file_creds or has_individual_creds):
            raise ConfigurationMissing(
                "GSHEET_CREDENTIALS_JSON, GOOGLE_APPLICATION_CREDENTIALS or "
                "GOOGLE_PRIVATE_KEY + GOOGLE_SERVICE_ACCOUNT_EMAIL"
            )

    def revalidate_secret(self) -> str:
        secret = self.REVALIDATE_SECRET
        if not secret:
            raise ConfigurationMissing("CONTENTFUL_REVALIDATE_SECRET")
        return secret


settings = Settings()
