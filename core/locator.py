"""Table auto-detection over the dashboard sheet.

Tables are found either under a title cell (``"Reporte TKC"``) or, when the
title is unreliable, by their header row alone. Header cells are matched by
normalized substring containment, so a pivot header such as
``"SUM of IMPORTE"`` satisfies both ``"sum"`` and ``"importe"``.

All positions in this module are 0-based on the scan window except
:class:`TableBounds`, which uses sheet (1-based) coordinates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import pandas as pd

from core.config import AppConfig, ScanLimits
from core.grid import a1_range, normalize_text
from core.sheets import Sheet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanWindow:
    values: pd.DataFrame
    normalized: pd.DataFrame

    @classmethod
    def from_values(cls, values: Sequence[Sequence[object]]) -> "ScanWindow":
        raw = pd.DataFrame([list(r) for r in values]).fillna("").astype(str)
        return cls(values=raw, normalized=raw.map(normalize_text))

    @property
    def n_rows(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_cols(self) -> int:
        return int(self.values.shape[1])


@dataclass(frozen=True)
class Anchor:
    row: int
    col: int


@dataclass(frozen=True)
class HeaderMatch:
    row: int
    col: int


@dataclass(frozen=True)
class TableBounds:
    header_row: int
    header_col: int
    last_row: int
    last_col: int

    found = True

    @property
    def a1(self) -> str:
        return a1_range(self.header_row, self.header_col, self.last_row, self.last_col)

    @property
    def width(self) -> int:
        return self.last_col - self.header_col + 1

    @property
    def data_rows(self) -> int:
        return self.last_row - self.header_row


@dataclass(frozen=True)
class NotFound:
    reason: str

    found = False


LocateResult = Union[TableBounds, NotFound]


@dataclass(frozen=True)
class TableSpec:
    key: str
    title: Optional[str]
    headers: tuple
    width: int
    top_left: str


def width_for_headers(headers: Sequence[str]) -> int:
    if len(headers) >= 4:
        return 4
    if len(headers) >= 3:
        return 3
    return 2


def read_scan_window(sheet: Sheet, max_rows: int = 400, max_cols: int = 40) -> ScanWindow:
    return ScanWindow.from_values(sheet.get_display_values(1, 1, max_rows, max_cols))


def find_cell_by_text(window: ScanWindow, needle: str) -> Optional[Anchor]:
    n = normalize_text(needle)
    hits = window.normalized.eq(n).to_numpy()
    for r in range(window.n_rows):
        for c in range(window.n_cols):
            if hits[r, c]:
                return Anchor(r, c)
    return None


def _row_has_headers(cells: List[str], wanted: List[str]) -> bool:
    return all(any(w in cell for cell in cells) for w in wanted)


def _first_col_containing(cells: List[str], needle: str, offset: int) -> int:
    for i, cell in enumerate(cells):
        if needle in cell:
            return offset + i
    return offset


def _search_rows(window: ScanWindow, headers: Sequence[str], rows: range, c0: int, c1: int) -> Optional[HeaderMatch]:
    wanted = [normalize_text(h) for h in headers]
    if not wanted:
        return None
    for r in rows:
        cells = window.normalized.iloc[r, c0 : c1 + 1].tolist()
        if _row_has_headers(cells, wanted):
            return HeaderMatch(r, _first_col_containing(cells, wanted[0], c0))
    return None


def find_header_row_near(
    window: ScanWindow,
    anchor: Anchor,
    headers: Sequence[str],
    row_window: int = 15,
    col_window: int = 25,
) -> Optional[HeaderMatch]:
    if window.n_rows == 0 or window.n_cols == 0:
        return None
    start_r = max(0, anchor.row)
    end_r = min(window.n_rows - 1, anchor.row + row_window)
    start_c = max(0, anchor.col)
    end_c = min(window.n_cols - 1, anchor.col + col_window)
    return _search_rows(window, headers, range(start_r, end_r + 1), start_c, end_c)


def find_header_row(window: ScanWindow, headers: Sequence[str]) -> Optional[HeaderMatch]:
    if window.n_rows == 0 or window.n_cols == 0:
        return None
    return _search_rows(window, headers, range(window.n_rows), 0, window.n_cols - 1)


def walk_table_bottom(key_values: Sequence[object], header_row: int, max_down: int) -> int:
    """Return the last data row below ``header_row``.

    ``key_values[i]`` is the key-column display value of row ``header_row + 1 + i``.
    The walk stops at the first blank key or after ``max_down`` rows.
    """
    last_row = header_row
    for i, value in enumerate(key_values[:max_down]):
        if normalize_text(value) == "":
            break
        last_row = header_row + 1 + i
    return last_row


def detect_table_bounds(sheet: Sheet, header_row: int, header_col: int, width: int, max_down: int = 300) -> TableBounds:
    """``header_row``/``header_col`` are 1-based sheet coordinates."""
    column = sheet.get_display_values(header_row + 1, header_col, max_down, 1)
    last_row = walk_table_bottom([r[0] if r else "" for r in column], header_row, max_down)
    return TableBounds(header_row, header_col, last_row, header_col + width - 1)


class TableLocator:
    def __init__(self, sheet: Sheet, config: Optional[AppConfig] = None, window: Optional[ScanWindow] = None):
        self.sheet = sheet
        self.limits: ScanLimits = (config or AppConfig()).scan
        self._window = window

    @property
    def window(self) -> ScanWindow:
        if self._window is None:
            self._window = read_scan_window(self.sheet, self.limits.max_rows, self.limits.max_cols)
        return self._window

    def locate(self, spec: TableSpec) -> LocateResult:
        if spec.title:
            anchor = find_cell_by_text(self.window, spec.title)
            if anchor is None:
                return NotFound(f"title '{spec.title}' not found")
            match = find_header_row_near(
                self.window,
                anchor,
                spec.headers,
                self.limits.title_row_window,
                self.limits.title_col_window,
            )
        else:
            match = find_header_row(self.window, spec.headers)
        if match is None:
            return NotFound(f"headers {list(spec.headers)} not found")
        bounds = detect_table_bounds(self.sheet, match.row + 1, match.col + 1, spec.width, self.limits.max_down)
        logger.debug("Located %s at %s", spec.key, bounds.a1)
        return bounds
