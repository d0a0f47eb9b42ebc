import logging
from functools import partial

from invite_site.config.settings import Settings
from invite_site.guests.repository.base import GuestStore
from invite_site.guests.repository.credentials import get_credentials
from invite_site.guests.repository.json_store import JsonFileGuestStore
from invite_site.guests.repository.sheets_client import GoogleSheetsClient, SheetsClient
from invite_site.guests.repository.sheets_store import HEADERS, SheetsGuestStore

logger = logging.getLogger(__name__)


def build_guest_store(settings: Settings) -> GuestStore:
    """Pick the backend once: a configured sheet id selects the spreadsheet, else the JSON file."""
    if settings.guest_backend == "sheets":
        logger.info(f"Using spreadsheet guest store ({settings.google_sheet_id}, tab {settings.google_sheet_tab!r})")
        client = GoogleSheetsClient(
            spreadsheet_id=settings.google_sheet_id.strip(),
            tab=settings.google_sheet_tab,
            credentials_factory=partial(get_credentials, settings),
        )
        return SheetsGuestStore(client)

    logger.info(f"Using JSON file guest store at {settings.guests_document_path}")
    return JsonFileGuestStore(settings.guests_document_path, seed_path=settings.guests_seed_path)


__all__ = [
    "HEADERS",
    "GuestStore",
    "JsonFileGuestStore",
    "SheetsClient",
    "SheetsGuestStore",
    "build_guest_store",
]
