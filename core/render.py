"""Turn relay value grids into KPI tiles and HTML tables.

Every grid is a list of rows of display strings with the header row first.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

PLACEHOLDER = "—"
_NON_NUMERIC = re.compile(r"[^0-9.\-]")

Grid = Sequence[Sequence[Any]]


def escape_html(value: Any) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def money(value: Any) -> str:
    """Format as whole US dollars, e.g. ``"1234.5" -> "$1,235"``.

    Text that strips down to nothing (``""``, ``"n/a"``) counts as zero; text that fails to parse
    after stripping (``"1.2.3"``, ``"-"``) is returned unchanged.
    """
    text = "" if value is None else str(value)
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        number = float(cleaned) if cleaned else 0.0
    except ValueError:
        return text
    rounded = round_half_up(number, 0)
    if rounded is None:
        return text
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.0f}"


def passthrough(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass(frozen=True)
class KpiDef:
    key: str
    label: str
    fmt: Callable[[Any], str] = passthrough


KPI_TILES: Tuple[KpiDef, ...] = (
    KpiDef("tkc_entregada", "TKC Entregadas"),
    KpiDef("tkc_en_distribucion", "TKC En distribución"),
    KpiDef("sin_asignar_total", "Sin asignar"),
    KpiDef("pendientes_flota_total", "Pendientes flota"),
    KpiDef("plan_total", "Plan $", money),
    KpiDef("preparar_total_max", "$ a preparar MAX", money),
)

TABLE_TITLES: Dict[str, str] = {
    "sin_asignar": "Órdenes sin asignar",
    "pendientes_flota": "Órdenes pendientes en flota",
    "plan": "Plan $",
    "preparar": "$ a preparar",
}


@dataclass(frozen=True)
class KpiTile:
    key: str
    label: str
    value: str


@dataclass(frozen=True)
class TableView:
    columns: List[str]
    rows: List[List[str]]


@dataclass(frozen=True)
class DashboardView:
    kpis: List[KpiTile]
    updated_at: str
    tables: Dict[str, TableView] = field(default_factory=dict)


def kpi_map(values: Grid) -> Dict[str, Any]:
    """Key -> value from every row after the header; a repeated key keeps the last value."""
    out: Dict[str, Any] = {}
    for row in list(values)[1:]:
        if not row:
            continue
        key = row[0]
        if key is None or str(key).strip() == "":
            continue
        out[str(key).strip()] = row[1] if len(row) > 1 else None
    return out


def build_kpi_tiles(values: Grid, tiles: Sequence[KpiDef] = KPI_TILES) -> Tuple[List[KpiTile], str]:
    mapping = kpi_map(values)
    out: List[KpiTile] = []
    for kpi in tiles:
        raw = mapping.get(kpi.key)
        shown = PLACEHOLDER if raw is None else kpi.fmt(raw)
        out.append(KpiTile(kpi.key, kpi.label, shown))
    updated = mapping.get("updated_at")
    return out, PLACEHOLDER if updated is None else str(updated)


def _is_blank_row(row: Sequence[Any]) -> bool:
    return not any(str("" if v is None else v).strip() for v in row)


def table_rows(values: Grid) -> TableView:
    values = list(values or [])
    if not values:
        return TableView([], [])
    columns = [passthrough(c) for c in (values[0] or [])]
    rows = [[passthrough(v) for v in r] for r in values[1:] if r and not _is_blank_row(r)]
    return TableView(columns, rows)


def table_frame(values: Grid) -> pd.DataFrame:
    view = table_rows(values)
    if not view.columns:
        return pd.DataFrame()
    width = len(view.columns)
    rows = [(r + [""] * width)[:width] for r in view.rows]
    return pd.DataFrame(rows, columns=view.columns)


def render_kpi_grid(tiles: Sequence[KpiTile]) -> str:
    return "".join(
        f'<div class="kpi"><div class="k">{escape_html(t.label)}</div>'
        f'<div class="v">{escape_html(t.value)}</div></div>'
        for t in tiles
    )


def render_table_view(view: TableView) -> str:
    if not view.columns and not view.rows:
        return ""
    thead = "<thead><tr>" + "".join(f"<th>{escape_html(c)}</th>" for c in view.columns) + "</tr></thead>"
    body = "".join("<tr>" + "".join(f"<td>{escape_html(v)}</td>" for v in r) + "</tr>" for r in view.rows)
    return f"{thead}<tbody>{body}</tbody>"


def render_table(values: Grid) -> str:
    return render_table_view(table_rows(values))


def build_view(kpi: Grid, tables: Dict[str, Grid]) -> DashboardView:
    tiles, updated = build_kpi_tiles(kpi)
    return DashboardView(tiles, updated, {name: table_rows(grid) for name, grid in tables.items()})


def render_dashboard(view: DashboardView, titles: Optional[Dict[str, str]] = None) -> str:
    titles = titles or TABLE_TITLES
    sections = [
        f'<section class="card"><h3>{escape_html(titles.get(name, name))}</h3>'
        f'<table id="{escape_html(name)}">{render_table_view(table)}</table></section>'
        for name, table in view.tables.items()
    ]
    return (
        f'<div class="kpi-grid">{render_kpi_grid(view.kpis)}</div>'
        f'<div class="last-update">Actualización: {escape_html(view.updated_at)}</div>'
        + "".join(sections)
    )
