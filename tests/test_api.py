from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api import main
from core.builder import ApiBuilder
from core.relay import RelayService
from core.triggers import RefreshScheduler


@pytest.fixture
def relay(workbook):
    service = RelayService(ApiBuilder(workbook), RefreshScheduler(lambda: None, seconds_per_minute=0.01))
    yield service
    service.scheduler.remove()


@pytest.fixture
def client(relay, monkeypatch):
    monkeypatch.setattr(main, "get_relay", lambda: relay)
    return TestClient(main.app)


def test_health(client):
    assert client.get("/health").json() == {"status": "success", "message": "ok"}


def test_get_setup_then_read(client):
    res = client.get("/exec", params={"action": "setup_api"})
    assert res.status_code == 200
    assert res.json() == {"status": "success", "message": "API creada y enlazada al dashboard."}

    res = client.get("/exec", params={"action": "get_api", "range": "API!A1:B3"})
    body = res.json()
    assert body["status"] == "success"
    assert body["values"][0] == ["A (Key)", "B (Value)"]
    assert body["values"][1] == ["updated_at", "=NOW()"]


def test_get_refresh_before_setup_reports_missing_sheet(client):
    body = client.get("/exec", params={"action": "refresh_api"}).json()
    assert body == {"status": "error", "message": "Faltan hojas. Ejecuta setup_api primero."}


def test_get_unknown_action(client):
    body = client.get("/exec", params={"action": "drop_everything"}).json()
    assert body == {"status": "error", "message": "Acción 'drop_everything' no válida."}


def test_get_without_action(client):
    assert client.get("/exec").json()["message"] == "Acción '' no válida."


def test_post_unknown_action(client):
    body = client.post("/exec", json={"action": "nope"}).json()
    assert body == {"status": "error", "message": "Acción POST 'nope' no válida."}


def test_post_install_and_remove_triggers(client, relay):
    body = client.post("/exec", json={"action": "install_triggers", "minutes": 10}).json()
    assert body == {"status": "success", "message": "Trigger instalado cada 10 min."}
    assert relay.scheduler.active

    body = client.post("/exec", json={"action": "remove_triggers"}).json()
    assert body == {"status": "success", "message": "Triggers eliminados."}
    assert not relay.scheduler.active


def test_post_invalid_json(client):
    res = client.post("/exec", content=b"{not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 200
    assert res.json()["status"] == "error"


def test_post_non_object_body(client):
    body = client.post("/exec", json=["setup_api"]).json()
    assert body == {"status": "error", "message": "El cuerpo debe ser un objeto JSON."}


def test_setup_without_dashboard_is_reported(monkeypatch):
    from core.sheets import InMemoryWorkbook

    relay = RelayService(ApiBuilder(InMemoryWorkbook()))
    monkeypatch.setattr(main, "get_relay", lambda: relay)
    body = TestClient(main.app).get("/exec", params={"action": "setup_api"}).json()
    assert body == {"status": "error", "message": "No existe la hoja '01 DashBoard'."}


@pytest.mark.parametrize("minutes", ["abc", "", 0])
def test_post_non_numeric_minutes_uses_default(client, minutes):
    body = client.post("/exec", json={"action": "install_triggers", "minutes": minutes}).json()
    assert body == {"status": "success", "message": "Trigger instalado cada 5 min."}


def test_get_non_numeric_minutes_uses_default(client):
    body = client.get("/exec", params={"action": "install_triggers", "minutes": "abc"}).json()
    assert body == {"status": "success", "message": "Trigger instalado cada 5 min."}
