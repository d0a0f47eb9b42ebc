"""Row-level access to one tab of a Google spreadsheet."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from invite_site.guests.errors import BackendError

logger = logging.getLogger(__name__)


class SheetsClient(ABC):
    """The row operations the spreadsheet store needs. Row numbers are 1-based."""

    @abstractmethod
    async def read_rows(self) -> list[list[str]]:
        raise NotImplementedError

    @abstractmethod
    async def append_row(self, values: Sequence[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def update_row(self, row_number: int, values: Sequence[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def insert_row(self, row_number: int, values: Sequence[str]) -> None:
        """Insert a row at ``row_number``, shifting that row and the rest down."""
        raise NotImplementedError

    @abstractmethod
    async def delete_row(self, row_number: int) -> None:
        """Delete one row, shifting the rows below it up."""
        raise NotImplementedError


class GoogleSheetsClient(SheetsClient):
    """Sheets API v4 client. Credentials are resolved on first use."""

    def __init__(self, spreadsheet_id: str, tab: str, credentials_factory: Callable) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.tab = tab
        self._credentials_factory = credentials_factory
        self._service = None
        self._tab_sheet_id: int | None = None

    def _get_service(self):
        if self._service is None:
            credentials = self._credentials_factory()
            self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
            logger.info(f"Connected to spreadsheet {self.spreadsheet_id}, tab {self.tab!r}")
        return self._service

    def _range(self, cell: str = "") -> str:
        quoted = "'" + self.tab.replace("'", "''") + "'"
        return f"{quoted}!{cell}" if cell else quoted

    async def _call(self, build_request: Callable):
        def _execute():
            return build_request(self._get_service()).execute()

        try:
            return await asyncio.to_thread(_execute)
        except HttpError as e:
            raise BackendError(f"Google Sheets request failed: {e}") from e
        except (GoogleAuthError, OSError) as e:
            raise BackendError(f"Could not reach Google Sheets: {e}") from e

    async def _get_tab_sheet_id(self) -> int:
        if self._tab_sheet_id is None:
            spreadsheet = await self._call(
                lambda service: service.spreadsheets().get(
                    spreadsheetId=self.spreadsheet_id, fields="sheets.properties"
                )
            )
            for sheet in spreadsheet.get("sheets", []):
                properties = sheet.get("properties", {})
                if properties.get("title") == self.tab:
                    self._tab_sheet_id = properties["sheetId"]
                    break
            else:
                raise BackendError(f"Tab {self.tab!r} not found in spreadsheet {self.spreadsheet_id}")
        return self._tab_sheet_id

    async def _change_dimension(self, request: dict) -> None:
        await self._call(
            lambda service: service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id, body={"requests": [request]}
            )
        )

    async def read_rows(self) -> list[list[str]]:
        result = await self._call(
            lambda service: service.spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(),
                valueRenderOption="FORMATTED_VALUE",
            )
        )
        return [[str(cell) for cell in row] for row in result.get("values", [])]

    async def append_row(self, values: Sequence[str]) -> None:
        await self._call(
            lambda service: service.spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=self._range("A1"),
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(values)]},
            )
        )

    async def update_row(self, row_number: int, values: Sequence[str]) -> None:
        await self._call(
            lambda service: service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(f"A{row_number}"),
                valueInputOption="RAW",
                body={"values": [list(values)]},
            )
        )

    async def insert_row(self, row_number: int, values: Sequence[str]) -> None:
        sheet_id = await self._get_tab_sheet_id()
        await self._change_dimension(
            {
                "insertDimension": {
                    "range": {
                        "sheetId": sheet_id,
                        "dimension": "ROWS",
                        "startIndex": row_number - 1,
                        "endIndex": row_number,
                    },
                    "inheritFromBefore": False,
                }
            }
        )
        await self.update_row(row_number, values)

    async def delete_row(self, row_number: int) -> None:
        sheet_id = await self._get_tab_sheet_id()
        await self._change_dimension(
            {
                "deleteDimension": {
                    "range": {
                        "sheetId": sheet_id,
                        "dimension": "ROWS",
                        "startIndex": row_number - 1,
                        "endIndex": row_number,
                    }
                }
            }
        )
