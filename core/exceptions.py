"""Custom exceptions for the bonos dashboard"""

from __future__ import annotations

from typing import Optional


class BonosError(Exception):
    """Base exception for all dashboard errors"""


class SheetNotFoundError(BonosError):
    """A required sheet is missing from the workbook"""

    def __init__(self, sheet_name: str):
        super().__init__(f"No existe la hoja '{sheet_name}'.")
        self.sheet_name = sheet_name


class RelayError(BonosError):
    """Transport or application error talking to the relay"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
