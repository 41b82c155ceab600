from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Tuple, Union

from core.config import KPI_KEYS, ApiLayout
from core.grid import a1_range, column_to_letter, letter_to_column, parse_cell, parse_range, quote_sheet_name
from core.locator import TableBounds
from core.sheets import Sheet

logger = logging.getLogger(__name__)

# (KPI key, status label in the support table)
TKC_LOOKUPS: Tuple[Tuple[str, str], ...] = (
    ("tkc_cancelada", "Cancelada"),
    ("tkc_en_distribucion", "En distribución"),
    ("tkc_entregada", "Entregada"),
    ("tkc_lista_distribuir", "Lista para distribuir"),
)
FLOTA_LOOKUPS: Tuple[Tuple[str, str], ...] = (
    ("flota_confirmada", "Confirmada"),
    ("flota_ordenado_desp_distrib", "Ordenado Desp. y Distrib."),
    ("flota_total", "Grand Total"),
)

BLOCK_HEADERS: Dict[str, Tuple[str, ...]] = {
    "sin_asignar": ("Distribuidor", "Estado", "Cantidad"),
    "pendientes": ("Distribuidor", "Fecha", "Id Orden", "Cantidad"),
    "plan": ("Distribuidor", "Importe"),
    "preparar": ("Fecha", "Distribuidor", "$ Min", "$ Max"),
    "tkc_support": ("ESTADO", "Cantidad"),
    "flota_support": ("ESTADO", "Cantidad"),
}


def _clip(source: Union[TableBounds, str], width: int) -> str:
    if isinstance(source, TableBounds):
        r1, c1, r2, c2 = source.header_row, source.header_col, source.last_row, source.last_col
    else:
        r1, c1, r2, c2 = parse_range(source)
    c2 = min(c2, c1 + width - 1) if width > 0 else c2
    return a1_range(r1, c1, r2, c2)


def table_import_formula(source_sheet: str, source: Union[TableBounds, str], width: int) -> str:
    """Live import of a source rectangle, dropping rows with a blank first column."""
    ref = f"{quote_sheet_name(source_sheet)}!{_clip(source, width)}"
    return f'=LET(t,INDIRECT("{ref}"),FILTER(t, INDEX(t,,1)<>"" ))'


def write_table_import(api: Sheet, top_left: str, source_sheet: str, source: Union[TableBounds, str], width: int) -> str:
    formula = table_import_formula(source_sheet, source, width)
    api.set_formula(top_left, formula)
    return formula


def _lookup(label: str, key_col: str, value_col: str, last_row: int) -> str:
    return f'=IFERROR(XLOOKUP("{label}",${key_col}$2:${key_col}${last_row},${value_col}$2:${value_col}${last_row}),0)'


def _sum(col: str) -> str:
    return f"=IFERROR(SUM(${col}$2:${col}),0)"


def _col(top_left: str, offset: int = 0) -> str:
    _, c = parse_cell(top_left)
    return column_to_letter(c + offset)


def kpi_key_formulas(layout: ApiLayout = ApiLayout()) -> Dict[str, str]:
    """KPI key -> formula, with every column taken from the layout."""
    formulas: Dict[str, str] = {"updated_at": "=NOW()"}

    tkc_key, tkc_val = _col(layout.tkc_support), _col(layout.tkc_support, 1)
    for key, label in TKC_LOOKUPS:
        formulas[key] = _lookup(label, tkc_key, tkc_val, layout.support_last_row)

    flota_key, flota_val = _col(layout.flota_support), _col(layout.flota_support, 1)
    for key, label in FLOTA_LOOKUPS:
        formulas[key] = _lookup(label, flota_key, flota_val, layout.support_last_row)

    formulas["sin_asignar_total"] = _sum(_col(layout.sin_asignar, 2))
    formulas["pendientes_flota_total"] = _sum(_col(layout.pendientes, 3))
    formulas["plan_total"] = _sum(_col(layout.plan, 1))
    formulas["preparar_total_min"] = _sum(_col(layout.preparar, 2))
    formulas["preparar_total_max"] = _sum(_col(layout.preparar, 3))
    return formulas


def kpi_formulas(layout: ApiLayout = ApiLayout(), kpi_keys: Iterable[str] = KPI_KEYS) -> Dict[str, str]:
    """Cell -> formula for the KPI value column.

    Key ``i`` sits on row ``i + 2``; keys without a known formula get no cell.
    """
    by_key = kpi_key_formulas(layout)
    formulas: Dict[str, str] = {}
    for i, key in enumerate(kpi_keys):
        if key in by_key:
            formulas[f"{layout.kpi_value_col}{i + 2}"] = by_key[key]
    return formulas


def write_kpi_formulas(api: Sheet, layout: ApiLayout = ApiLayout(), kpi_keys: Iterable[str] = KPI_KEYS) -> Dict[str, str]:
    formulas = kpi_formulas(layout, kpi_keys)
    for cell, formula in formulas.items():
        api.set_formula(cell, formula)
    return formulas


def build_kpi_area(api: Sheet, kpi_keys: Iterable[str], layout: ApiLayout = ApiLayout()) -> None:
    keys: List[List[str]] = [[k] for k in kpi_keys]
    api.set_value(f"{layout.kpi_key_col}1", "A (Key)")
    api.set_value(f"{layout.kpi_value_col}1", "B (Value)")
    if not keys:
        return
    api.set_values(2, letter_to_column(layout.kpi_key_col), keys)
    api.clear_content(2, letter_to_column(layout.kpi_value_col), len(keys), 1)


def block_top_lefts(layout: ApiLayout) -> Dict[str, str]:
    return {
        "sin_asignar": layout.sin_asignar,
        "pendientes": layout.pendientes,
        "plan": layout.plan,
        "preparar": layout.preparar,
        "tkc_support": layout.tkc_support,
        "flota_support": layout.flota_support,
    }


def build_api_headers(api: Sheet, layout: ApiLayout = ApiLayout()) -> None:
    for block, top_left in block_top_lefts(layout).items():
        row, col = parse_cell(top_left)
        api.set_values(row, col, [list(BLOCK_HEADERS[block])])
    logger.debug("Wrote API block headers")
