from __future__ import annotations

import re
import unicodedata
from typing import Tuple


_COMBINING = re.compile("[\u0300-\u036f]")
_CELL_RE = re.compile(r"^\$?([A-Za-z]+)\$?(\d+)$")


def normalize_text(value: object) -> str:
    """Lowercase, strip accents and surrounding whitespace."""
    if value is None:
        return ""
    s = unicodedata.normalize("NFD", str(value).lower())
    return _COMBINING.sub("", s).strip()


def column_to_letter(col: int) -> str:
    if col < 1:
        raise ValueError(f"Column index must be >= 1, got {col}")
    out = ""
    while col > 0:
        rem = (col - 1) % 26
        out = chr(65 + rem) + out
        col = (col - 1) // 26
    return out


def letter_to_column(letters: str) -> int:
    letters = letters.strip().upper()
    if not letters or not letters.isalpha():
        raise ValueError(f"Invalid column letters: {letters!r}")
    col = 0
    for ch in letters:
        col = col * 26 + (ord(ch) - 64)
    return col


def a1_range(r1: int, c1: int, r2: int, c2: int) -> str:
    return f"{column_to_letter(c1)}{r1}:{column_to_letter(c2)}{r2}"


def parse_cell(a1: str) -> Tuple[int, int]:
    """Return the 1-based (row, col) of a single-cell reference like ``C1``."""
    if "!" in a1:
        a1 = a1.split("!", 1)[1]
    match = _CELL_RE.match(a1.strip())
    if not match:
        raise ValueError(f"Invalid A1 cell reference: {a1!r}")
    return int(match.group(2)), letter_to_column(match.group(1))


def parse_range(a1: str) -> Tuple[int, int, int, int]:
    """Return (r1, c1, r2, c2) for ``D5:F30``; a single cell spans itself."""
    if "!" in a1:
        a1 = a1.split("!", 1)[1]
    parts = a1.split(":")
    if len(parts) == 1:
        r, c = parse_cell(parts[0])
        return r, c, r, c
    if len(parts) != 2:
        raise ValueError(f"Invalid A1 range: {a1!r}")
    r1, c1 = parse_cell(parts[0])
    r2, c2 = parse_cell(parts[1])
    return min(r1, r2), min(c1, c2), max(r1, r2), max(c1, c2)


def split_sheet_range(range_spec: str) -> Tuple[str, str]:
    """Split ``'API'!A1:B5`` into (``API``, ``A1:B5``)."""
    if "!" not in range_spec:
        raise ValueError(f"Range {range_spec!r} must follow the 'Sheet!A1:B5' format")
    sheet, cells = range_spec.rsplit("!", 1)
    sheet = sheet.strip()
    if len(sheet) >= 2 and sheet[0] == sheet[-1] == "'":
        sheet = sheet[1:-1].replace("''", "'")
    return sheet, cells


def offset_column(a1: str, n: int) -> str:
    _, col = parse_cell(a1)
    return column_to_letter(col + n)


def quote_sheet_name(name: str) -> str:
    return "'" + name.replace("'", "''") + "'"
