from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


SHEET_DASH = "01 DashBoard"
SHEET_API = "API"

KPI_KEYS: Tuple[str, ...] = (
    "updated_at",
    "tkc_cancelada",
    "tkc_en_distribucion",
    "tkc_entregada",
    "tkc_lista_distribuir",
    "flota_confirmada",
    "flota_ordenado_desp_distrib",
    "flota_total",
    "sin_asignar_total",
    "pendientes_flota_total",
    "plan_total",
    "preparar_total_min",
    "preparar_total_max",
)


@dataclass(frozen=True)
class ApiLayout:
    # KPI key/value block lives in A:B, keys from row 2
    kpi_key_col: str = "A"
    kpi_value_col: str = "B"
    sin_asignar: str = "C1"  # C:E
    pendientes: str = "H1"  # H:K
    plan: str = "M1"  # M:N
    preparar: str = "O1"  # O:R
    tkc_support: str = "V1"  # V:W
    flota_support: str = "Y1"  # Y:Z
    support_last_row: int = 50


@dataclass(frozen=True)
class DashboardRanges:
    kpi: str = "API!A1:B20"
    sin_asignar: str = "API!C1:E200"
    pendientes_flota: str = "API!H1:K500"
    plan: str = "API!M1:N200"
    preparar: str = "API!O1:R500"

    def as_dict(self) -> Dict[str, str]:
        return {
            "kpi": self.kpi,
            "sin_asignar": self.sin_asignar,
            "pendientes_flota": self.pendientes_flota,
            "plan": self.plan,
            "preparar": self.preparar,
        }


@dataclass(frozen=True)
class ScanLimits:
    max_rows: int = 400
    max_cols: int = 40
    title_row_window: int = 15
    title_col_window: int = 25
    max_down: int = 300


@dataclass(frozen=True)
class AppConfig:
    spreadsheet_id: str = ""
    webapp_url: str = ""
    service_account_file: Optional[str] = None
    dash_sheet: str = SHEET_DASH
    api_sheet: str = SHEET_API
    kpi_keys: Tuple[str, ...] = KPI_KEYS
    layout: ApiLayout = field(default_factory=ApiLayout)
    ranges: DashboardRanges = field(default_factory=DashboardRanges)
    scan: ScanLimits = field(default_factory=ScanLimits)
    default_trigger_minutes: int = 5
    request_timeout: float = 30.0


def _as_int(value: object, default: int, *, minimum: int = 1) -> int:
    try:
        out = int(value)  # type: ignore[arg-type]
    except Exception:
        return default
    return max(minimum, out)


def _as_float(value: object, default: float) -> float:
    try:
        out = float(value)  # type: ignore[arg-type]
    except Exception:
        return default
    return out if out > 0 else default


def load_config(raw: Optional[dict] = None) -> AppConfig:
    raw = raw or {}
    defaults = AppConfig()

    s = raw.get("scan") or {}
    scan = ScanLimits(
        max_rows=_as_int(s.get("max_rows"), defaults.scan.max_rows),
        max_cols=_as_int(s.get("max_cols"), defaults.scan.max_cols),
        title_row_window=_as_int(s.get("title_row_window"), defaults.scan.title_row_window, minimum=0),
        title_col_window=_as_int(s.get("title_col_window"), defaults.scan.title_col_window, minimum=0),
        max_down=_as_int(s.get("max_down"), defaults.scan.max_down),
    )

    r = raw.get("ranges") or {}
    ranges = DashboardRanges(**{k: str(v) for k, v in r.items() if k in DashboardRanges.__dataclass_fields__ and v})

    service_account_file = (raw.get("service_account_file") or "").strip() or None
    kpi_keys: List[str] = [str(k).strip() for k in (raw.get("kpi_keys") or KPI_KEYS) if str(k).strip()]

    return AppConfig(
        spreadsheet_id=(raw.get("spreadsheet_id") or "").strip(),
        webapp_url=(raw.get("webapp_url") or "").strip(),
        service_account_file=service_account_file,
        dash_sheet=(raw.get("dash_sheet") or SHEET_DASH),
        api_sheet=(raw.get("api_sheet") or SHEET_API),
        kpi_keys=tuple(kpi_keys),
        ranges=ranges,
        scan=scan,
        default_trigger_minutes=_as_int(raw.get("default_trigger_minutes"), defaults.default_trigger_minutes),
        request_timeout=_as_float(raw.get("request_timeout"), defaults.request_timeout),
    )


def config_from_env() -> AppConfig:
    env = os.environ
    return load_config(
        {
            "spreadsheet_id": env.get("BONOS_SPREADSHEET_ID", ""),
            "webapp_url": env.get("BONOS_WEBAPP_URL", ""),
            "service_account_file": env.get("BONOS_SERVICE_ACCOUNT_FILE", ""),
            "scan": {
                "max_rows": env.get("BONOS_SCAN_ROWS"),
                "max_cols": env.get("BONOS_SCAN_COLS"),
            },
        }
    )
