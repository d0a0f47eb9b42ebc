import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    debug: bool = True
    cors_origins: list[str] = ["*"]

    ENVIRONMENT: str = "Production"

    # File backend
    guests_db_path: Path = Path("data/guests.json")
    guests_seed_path: Path = Path("data/guests.json")
    # Read-only deploy targets keep the working copy in the temp directory
    VERCEL: bool = False

    # Spreadsheet backend - selected whenever a sheet id is configured
    google_sheet_id: str = ""
    google_sheet_tab: str = "Guests"
    google_service_account_json: str = ""
    google_client_email: str = ""
    google_private_key: str = ""
    google_application_credentials: str = ""
    google_local_credentials_path: Path = Path(".secrets/google-service-account.json")

    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.0
    SENTRY_PROFILES_SAMPLE_RATE: float = 0.0

    @property
    def guest_backend(self) -> str:
        return "sheets" if self.google_sheet_id.strip() else "file"

    @property
    def guests_document_path(self) -> Path:
        if self.VERCEL:
            return Path(tempfile.gettempdir()) / "guests.json"
        return self.guests_db_path


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
