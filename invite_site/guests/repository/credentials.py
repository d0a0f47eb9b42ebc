"""Service account credentials for the spreadsheet backend."""

import json
import logging
from pathlib import Path
from typing import Any

from google.oauth2 import service_account

from invite_site.config.settings import Settings
from invite_site.guests.errors import ConfigurationError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def _read_key_file(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read service account file {path}: {e}") from e


def load_service_account_info(settings: Settings) -> dict[str, Any]:
    """
    Collect service account info from whichever form is configured.

    Checked in order: inline JSON, client email plus private key, key file
    path, then the local development key file. Only the last may be absent.
    """
    if settings.google_service_account_json.strip():
        try:
            info = json.loads(settings.google_service_account_json)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"GOOGLE_SERVICE_ACCOUNT_JSON is not valid JSON: {e}") from e
        logger.debug("Using inline service account JSON")
        return info

    if settings.google_client_email.strip() and settings.google_private_key.strip():
        logger.debug("Using service account email and private key")
        return {
            "type": "service_account",
            "client_email": settings.google_client_email.strip(),
            # Keys pasted into env files usually carry literal \n sequences
            "private_key": settings.google_private_key.replace("\\n", "\n"),
            "token_uri": TOKEN_URI,
        }

    if settings.google_application_credentials.strip():
        logger.debug("Using service account key file")
        return _read_key_file(Path(settings.google_application_credentials.strip()))

    if settings.google_local_credentials_path.is_file():
        logger.debug(f"Using local service account file {settings.google_local_credentials_path}")
        return _read_key_file(settings.google_local_credentials_path)

    raise ConfigurationError("Missing Google service account credentials for the guest sheet")


def get_credentials(settings: Settings) -> service_account.Credentials:
    info = load_service_account_info(settings)
    try:
        return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    except (KeyError, ValueError) as e:
        raise ConfigurationError(f"Invalid service account credentials: {e}") from e
