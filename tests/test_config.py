from __future__ import annotations

from core.config import AppConfig, DashboardRanges, KPI_KEYS, config_from_env, load_config


def test_defaults():
    config = load_config()
    assert config == AppConfig()
    assert config.dash_sheet == "01 DashBoard"
    assert config.api_sheet == "API"
    assert config.kpi_keys == KPI_KEYS
    assert config.scan.max_rows == 400 and config.scan.max_cols == 40
    assert config.ranges.preparar == "API!O1:R500"


def test_load_config_normalizes_bad_values():
    config = load_config(
        {
            "spreadsheet_id": "  abc123 ",
            "service_account_file": "   ",
            "scan": {"max_rows": "oops", "max_cols": -4, "title_row_window": "0"},
            "ranges": {"plan": "API!M1:N50", "unknown": "x", "kpi": ""},
            "default_trigger_minutes": 0,
            "request_timeout": "-1",
        }
    )
    assert config.spreadsheet_id == "abc123"
    assert config.service_account_file is None
    assert config.scan.max_rows == 400
    assert config.scan.max_cols == 1
    assert config.scan.title_row_window == 0
    assert config.ranges.plan == "API!M1:N50"
    assert config.ranges.kpi == DashboardRanges().kpi
    assert config.default_trigger_minutes == 1
    assert config.request_timeout == 30.0


def test_ranges_as_dict_covers_every_block():
    assert list(DashboardRanges().as_dict()) == ["kpi", "sin_asignar", "pendientes_flota", "plan", "preparar"]


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("BONOS_SPREADSHEET_ID", "sheet-1")
    monkeypatch.setenv("BONOS_WEBAPP_URL", "https://relay.example/exec")
    monkeypatch.setenv("BONOS_SCAN_ROWS", "120")
    monkeypatch.delenv("BONOS_SERVICE_ACCOUNT_FILE", raising=False)
    monkeypatch.delenv("BONOS_SCAN_COLS", raising=False)

    config = config_from_env()
    assert config.spreadsheet_id == "sheet-1"
    assert config.webapp_url == "https://relay.example/exec"
    assert config.scan.max_rows == 120
    assert config.scan.max_cols == 40
    assert config.service_account_file is None
