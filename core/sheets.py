"""Spreadsheet access behind a small capability interface.

The locator and formula emitter only need to read display strings and write
values or formulas, so both talk to :class:`Sheet`. ``InMemoryWorkbook`` backs
tests and local runs; ``GoogleSheetsWorkbook`` talks to the Sheets API v4.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.grid import a1_range, parse_cell, parse_range, quote_sheet_name

logger = logging.getLogger(__name__)

Values = List[List[str]]

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def _display(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _pad(values: List[List[Any]], n_rows: int, n_cols: int) -> Values:
    out: Values = []
    for r in range(n_rows):
        row = values[r] if r < len(values) else []
        out.append([_display(row[c]) if c < len(row) else "" for c in range(n_cols)])
    return out


class Sheet(ABC):
    """Minimal read/write surface over one worksheet. Rows and columns are 1-based."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def get_display_values(self, row: int, col: int, n_rows: int, n_cols: int) -> Values:
        """Return an ``n_rows`` x ``n_cols`` grid of display strings, padded with ``""``."""
        pass

    @abstractmethod
    def set_value(self, a1: str, value: Any) -> None:
        pass

    @abstractmethod
    def set_values(self, row: int, col: int, values: List[List[Any]]) -> None:
        pass

    @abstractmethod
    def set_formula(self, a1: str, formula: str) -> None:
        pass

    @abstractmethod
    def clear_content(self, row: int, col: int, n_rows: int, n_cols: int) -> None:
        pass

    def get_display_value(self, row: int, col: int) -> str:
        return self.get_display_values(row, col, 1, 1)[0][0]

    def read_range(self, range_a1: str) -> Values:
        r1, c1, r2, c2 = parse_range(range_a1)
        return self.get_display_values(r1, c1, r2 - r1 + 1, c2 - c1 + 1)


class Workbook(ABC):
    @abstractmethod
    def get_sheet(self, name: str) -> Optional[Sheet]:
        pass

    @abstractmethod
    def insert_sheet(self, name: str) -> Sheet:
        pass


# ---------------- In-memory ----------------
class InMemorySheet(Sheet):
    def __init__(self, name: str, values: Optional[List[List[Any]]] = None):
        self._name = name
        self.cells: Dict[Tuple[int, int], str] = {}
        self.formulas: Dict[Tuple[int, int], str] = {}
        self.display_overrides: Dict[Tuple[int, int], str] = {}
        if values:
            self.set_values(1, 1, values)

    @property
    def name(self) -> str:
        return self._name

    def get_display_values(self, row: int, col: int, n_rows: int, n_cols: int) -> Values:
        out: Values = []
        for r in range(row, row + n_rows):
            out.append([self._display_at(r, c) for c in range(col, col + n_cols)])
        return out

    def _display_at(self, row: int, col: int) -> str:
        key = (row, col)
        if key in self.display_overrides:
            return self.display_overrides[key]
        if key in self.formulas:
            return self.formulas[key]
        return self.cells.get(key, "")

    def set_value(self, a1: str, value: Any) -> None:
        row, col = parse_cell(a1)
        self._put(row, col, value)

    def set_values(self, row: int, col: int, values: List[List[Any]]) -> None:
        for i, line in enumerate(values):
            for j, value in enumerate(line):
                self._put(row + i, col + j, value)

    def set_formula(self, a1: str, formula: str) -> None:
        key = parse_cell(a1)
        self.cells.pop(key, None)
        self.display_overrides.pop(key, None)
        self.formulas[key] = formula

    def clear_content(self, row: int, col: int, n_rows: int, n_cols: int) -> None:
        for r in range(row, row + n_rows):
            for c in range(col, col + n_cols):
                self.cells.pop((r, c), None)
                self.formulas.pop((r, c), None)
                self.display_overrides.pop((r, c), None)

    def formula_at(self, a1: str) -> Optional[str]:
        return self.formulas.get(parse_cell(a1))

    def value_at(self, a1: str) -> str:
        row, col = parse_cell(a1)
        return self._display_at(row, col)

    def _put(self, row: int, col: int, value: Any) -> None:
        key = (row, col)
        self.formulas.pop(key, None)
        self.display_overrides.pop(key, None)
        text = _display(value)
        if text == "":
            self.cells.pop(key, None)
        else:
            self.cells[key] = text


class InMemoryWorkbook(Workbook):
    def __init__(self, sheets: Optional[Dict[str, List[List[Any]]]] = None):
        self.sheets: Dict[str, InMemorySheet] = {}
        for name, values in (sheets or {}).items():
            self.sheets[name] = InMemorySheet(name, values)

    def get_sheet(self, name: str) -> Optional[InMemorySheet]:
        return self.sheets.get(name)

    def insert_sheet(self, name: str) -> InMemorySheet:
        if name in self.sheets:
            raise ValueError(f"Sheet '{name}' already exists")
        sheet = InMemorySheet(name)
        self.sheets[name] = sheet
        return sheet


# ---------------- Google Sheets ----------------
class GoogleSheetsSheet(Sheet):
    """One worksheet of a Google Spreadsheet, accessed through the Sheets API v4."""

    def __init__(self, workbook: "GoogleSheetsWorkbook", title: str):
        self.workbook = workbook
        self.spreadsheet_id = workbook.spreadsheet_id
        self.title = title

    @property
    def name(self) -> str:
        return self.title

    @property
    def service(self) -> Any:
        return self.workbook.service

    def _range(self, cells: str) -> str:
        return f"{quote_sheet_name(self.title)}!{cells}"

    def get_display_values(self, row: int, col: int, n_rows: int, n_cols: int) -> Values:
        response = (
            self.service.spreadsheets()
            .values()
            .get(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(a1_range(row, col, row + n_rows - 1, col + n_cols - 1)),
                majorDimension="ROWS",
                valueRenderOption="FORMATTED_VALUE",
            )
            .execute()
        )
        return _pad(response.get("values", []), n_rows, n_cols)

    def set_value(self, a1: str, value: Any) -> None:
        self._update(a1, [[value]])

    def set_values(self, row: int, col: int, values: List[List[Any]]) -> None:
        if not values:
            return
        width = max(len(r) for r in values)
        self._update(a1_range(row, col, row + len(values) - 1, col + width - 1), values)

    def set_formula(self, a1: str, formula: str) -> None:
        # USER_ENTERED makes the API parse a leading "=" as a formula
        self._update(a1, [[formula]])

    def clear_content(self, row: int, col: int, n_rows: int, n_cols: int) -> None:
        self.service.spreadsheets().values().clear(
            spreadsheetId=self.spreadsheet_id,
            range=self._range(a1_range(row, col, row + n_rows - 1, col + n_cols - 1)),
            body={},
        ).execute()

    def _update(self, cells: str, values: List[List[Any]]) -> None:
        self.service.spreadsheets().values().update(
            spreadsheetId=self.spreadsheet_id,
            range=self._range(cells),
            valueInputOption="USER_ENTERED",
            body={"values": values},
        ).execute()


class GoogleSheetsWorkbook(Workbook):
    """Spreadsheet handle shared by the relay's request and trigger threads.

    The discovery client sits on an ``httplib2.Http`` that must not be used
    from two threads at once, so each thread builds its own service through
    ``service_factory``.
    """

    def __init__(self, spreadsheet_id: str, service_factory: Callable[[], Any]):
        self.spreadsheet_id = spreadsheet_id
        self.service_factory = service_factory
        self._local = threading.local()

    @property
    def service(self) -> Any:
        service = getattr(self._local, "service", None)
        if service is None:
            service = self.service_factory()
            self._local.service = service
            logger.debug("Built Sheets service for thread %s", threading.current_thread().name)
        return service

    def _titles(self) -> List[str]:
        spreadsheet = self.service.spreadsheets().get(spreadsheetId=self.spreadsheet_id).execute()
        return [s["properties"]["title"] for s in spreadsheet.get("sheets", [])]

    def get_sheet(self, name: str) -> Optional[GoogleSheetsSheet]:
        if name not in self._titles():
            return None
        return GoogleSheetsSheet(self, name)

    def insert_sheet(self, name: str) -> GoogleSheetsSheet:
        body = {"requests": [{"addSheet": {"properties": {"title": name}}}]}
        self.service.spreadsheets().batchUpdate(spreadsheetId=self.spreadsheet_id, body=body).execute()
        logger.info("Created sheet %s in spreadsheet %s", name, self.spreadsheet_id)
        return GoogleSheetsSheet(self, name)


def load_credentials(service_account_file: Optional[str] = None) -> Any:
    if service_account_file:
        from google.oauth2.service_account import Credentials

        return Credentials.from_service_account_file(service_account_file, scopes=SCOPES)

    from google.auth import default

    credentials, _ = default(scopes=SCOPES)
    return credentials


def build_sheets_service(credentials: Any) -> Any:
    from googleapiclient.discovery import build

    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


def open_google_workbook(spreadsheet_id: str, service_account_file: Optional[str] = None) -> GoogleSheetsWorkbook:
    if not spreadsheet_id:
        raise ValueError("Missing spreadsheet id (set BONOS_SPREADSHEET_ID)")
    credentials = load_credentials(service_account_file)
    return GoogleSheetsWorkbook(spreadsheet_id, lambda: build_sheets_service(credentials))
