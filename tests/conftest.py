from __future__ import annotations

from typing import Dict

import pytest

from core.builder import ApiBuilder
from core.config import SHEET_API, SHEET_DASH
from core.sheets import InMemorySheet, InMemoryWorkbook


DASHBOARD_CELLS: Dict[str, str] = {
    "A1": "Dashboard Bonos",
    # Reporte TKC -> B4:C8
    "B3": "Reporte TKC",
    "B4": "ESTADO",
    "C4": "Cantidad",
    "B5": "Cancelada",
    "C5": "3",
    "B6": "En distribución",
    "C6": "10",
    "B7": "Entregada",
    "C7": "25",
    "B8": "Lista para distribuir",
    "C8": "4",
    # Reporte Flotas -> F4:G7
    "F3": "Reporte Flotas",
    "F4": "Estado",
    "G4": "Cantidad",
    "F5": "Confirmada",
    "G5": "7",
    "F6": "Ordenado Desp. y Distrib.",
    "G6": "2",
    "F7": "Grand Total",
    "G7": "9",
    # Órdenes sin asignar -> B13:D15
    "B12": "Órdenes sin asignar",
    "B13": "Distribuidor",
    "C13": "Estado",
    "D13": "Cantidad",
    "B14": "Norte",
    "C14": "Pendiente",
    "D14": "5",
    "B15": "Sur",
    "C15": "Pendiente",
    "D15": "2",
    # Órdenes pendientes en flota -> F14:I17
    "F12": "Órdenes pendientes en flota",
    "F14": "Distribuidor",
    "G14": "Fecha",
    "H14": "Id Orden",
    "I14": "Cantidad",
    "F15": "Norte",
    "G15": "2024-05-01",
    "H15": "A-100",
    "I15": "3",
    "F16": "Norte",
    "G16": "2024-05-02",
    "H16": "A-101",
    "I16": "1",
    "F17": "Sur",
    "G17": "2024-05-02",
    "H17": "B-200",
    "I17": "6",
    # Plan $ -> B21:C24
    "B20": "Plan $",
    "B21": "DISTRIBUIDOR",
    "C21": "SUM of IMPORTE",
    "B22": "Norte",
    "C22": "$1,200.00",
    "B23": "Sur",
    "C23": "$800.50",
    "B24": "Grand Total",
    "C24": "$2,000.50",
    # $ a preparar (headers only) -> F21:I23
    "F20": "$ a preparar",
    "F21": "Fecha",
    "G21": "Distribuidor",
    "H21": "$ Min",
    "I21": "$ Max",
    "F22": "2024-05-03",
    "G22": "Norte",
    "H22": "100",
    "I22": "150",
    "F23": "2024-05-03",
    "G23": "Sur",
    "H23": "80",
    "I23": "120",
}


def make_sheet(name: str, cells: Dict[str, str]) -> InMemorySheet:
    sheet = InMemorySheet(name)
    for a1, value in cells.items():
        sheet.set_value(a1, value)
    return sheet


@pytest.fixture
def dash_sheet() -> InMemorySheet:
    return make_sheet(SHEET_DASH, DASHBOARD_CELLS)


@pytest.fixture
def workbook(dash_sheet: InMemorySheet) -> InMemoryWorkbook:
    wb = InMemoryWorkbook()
    wb.sheets[SHEET_DASH] = dash_sheet
    return wb


@pytest.fixture
def builder(workbook: InMemoryWorkbook) -> ApiBuilder:
    return ApiBuilder(workbook)


@pytest.fixture
def api_sheet(builder: ApiBuilder, workbook: InMemoryWorkbook) -> InMemorySheet:
    builder.setup_api()
    return workbook.sheets[SHEET_API]
