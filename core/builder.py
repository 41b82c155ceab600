from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from core.config import ApiLayout, AppConfig
from core.exceptions import SheetNotFoundError
from core.formulas import build_api_headers, build_kpi_area, write_kpi_formulas, write_table_import
from core.grid import split_sheet_range
from core.locator import TableLocator, TableSpec
from core.sheets import Sheet, Workbook

logger = logging.getLogger(__name__)


def table_specs(layout: ApiLayout) -> Tuple[TableSpec, ...]:
    return (
        TableSpec("tkc", "reporte tkc", ("estado", "cantidad"), 2, layout.tkc_support),
        TableSpec("flota", "reporte flotas", ("estado", "cantidad"), 2, layout.flota_support),
        TableSpec("sin_asignar", "ordenes sin asignar", ("distribuidor", "estado", "cantidad"), 3, layout.sin_asignar),
        TableSpec(
            "pendientes",
            "ordenes pendientes en flota",
            ("distribuidor", "fecha", "id", "cantidad"),
            4,
            layout.pendientes,
        ),
        # pivot header reads "SUM of IMPORTE"; only distribuidor + amount are imported
        TableSpec("plan", "plan $", ("distribuidor", "sum", "importe"), 2, layout.plan),
        # the "$ a preparar" title changes often, so match on headers only
        TableSpec("preparar", None, ("fecha", "distribuidor", "min", "max"), 4, layout.preparar),
    )


@dataclass(frozen=True)
class ActionResult:
    status: str
    message: str
    values: Optional[List[List[str]]] = None

    @classmethod
    def success(cls, message: str, values: Optional[List[List[str]]] = None) -> "ActionResult":
        return cls("success", message, values)

    @classmethod
    def error(cls, message: str) -> "ActionResult":
        return cls("error", message)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"status": self.status, "message": self.message}
        if self.values is not None:
            out["values"] = self.values
        return out


@dataclass(frozen=True)
class LinkResult:
    key: str
    linked: bool
    source: Optional[str] = None
    target: Optional[str] = None
    formula: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class ApiBuilder:
    workbook: Workbook
    config: AppConfig = field(default_factory=AppConfig)

    def _dash(self) -> Optional[Sheet]:
        return self.workbook.get_sheet(self.config.dash_sheet)

    def _api(self) -> Optional[Sheet]:
        return self.workbook.get_sheet(self.config.api_sheet)

    def setup_api(self) -> ActionResult:
        dash = self._dash()
        if dash is None:
            raise SheetNotFoundError(self.config.dash_sheet)
        api = self._api()
        if api is None:
            api = self.workbook.insert_sheet(self.config.api_sheet)

        build_kpi_area(api, self.config.kpi_keys, self.config.layout)
        build_api_headers(api, self.config.layout)
        self.link_blocks(dash, api)
        write_kpi_formulas(api, self.config.layout, self.config.kpi_keys)
        return ActionResult.success("API creada y enlazada al dashboard.")

    def refresh_api(self) -> ActionResult:
        dash = self._dash()
        api = self._api()
        if dash is None or api is None:
            return ActionResult.error("Faltan hojas. Ejecuta setup_api primero.")

        self.link_blocks(dash, api)
        write_kpi_formulas(api, self.config.layout, self.config.kpi_keys)
        return ActionResult.success("API refrescada.")

    def link_blocks(self, dash: Sheet, api: Sheet) -> List[LinkResult]:
        locator = TableLocator(dash, self.config)
        results: List[LinkResult] = []
        for spec in table_specs(self.config.layout):
            located = locator.locate(spec)
            if not located.found:
                logger.warning("Table %s skipped: %s", spec.key, located.reason)
                results.append(LinkResult(spec.key, False, target=spec.top_left, reason=located.reason))
                continue
            formula = write_table_import(api, spec.top_left, dash.name, located, spec.width)
            logger.info("Linked %s: %s -> %s!%s", spec.key, located.a1, api.name, spec.top_left)
            results.append(LinkResult(spec.key, True, source=located.a1, target=spec.top_left, formula=formula))
        return results

    def get_api(self, range_a1: str) -> ActionResult:
        if not range_a1:
            return ActionResult.error("Falta el parámetro 'range'.")
        sheet_name, cells = split_sheet_range(range_a1) if "!" in range_a1 else (self.config.api_sheet, range_a1)
        if sheet_name != self.config.api_sheet:
            return ActionResult.error(f"Solo se permite leer la hoja '{self.config.api_sheet}'.")
        api = self._api()
        if api is None:
            return ActionResult.error("Faltan hojas. Ejecuta setup_api primero.")
        return ActionResult.success("OK", _trim_blank_tail(api.read_range(cells)))


def _trim_blank_tail(values: List[List[str]]) -> List[List[str]]:
    end = len(values)
    while end > 0 and not any(str(v).strip() for v in values[end - 1]):
        end -= 1
    return values[:end]
