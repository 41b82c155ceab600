from __future__ import annotations

import threading
from typing import Any, Dict, List

import pytest

from core.sheets import GoogleSheetsWorkbook, InMemoryWorkbook


class FakeRequest:
    def __init__(self, service: "FakeSheetsService", kind: str, kwargs: Dict[str, Any]):
        self.service = service
        self.kind = kind
        self.kwargs = kwargs

    def execute(self) -> Dict[str, Any]:
        self.service.record()
        if self.kind == "meta":
            return {"sheets": [{"properties": {"title": "API"}}]}
        if self.kind == "get":
            return {"values": [["updated_at", "19/10/2026"]]}
        self.service.writes.append(self.kwargs)
        return {}


class FakeValues:
    def __init__(self, service: "FakeSheetsService"):
        self.service = service

    def get(self, **kwargs: Any) -> FakeRequest:
        return FakeRequest(self.service, "get", kwargs)

    def update(self, **kwargs: Any) -> FakeRequest:
        return FakeRequest(self.service, "update", kwargs)

    def clear(self, **kwargs: Any) -> FakeRequest:
        return FakeRequest(self.service, "clear", kwargs)


class FakeSpreadsheets:
    def __init__(self, service: "FakeSheetsService"):
        self.service = service

    def get(self, **kwargs: Any) -> FakeRequest:
        return FakeRequest(self.service, "meta", kwargs)

    def values(self) -> FakeValues:
        return FakeValues(self.service)

    def batchUpdate(self, **kwargs: Any) -> FakeRequest:
        return FakeRequest(self.service, "batch", kwargs)


class FakeSheetsService:
    def __init__(self):
        self.threads: set = set()
        self.writes: List[Dict[str, Any]] = []

    def record(self) -> None:
        self.threads.add(threading.get_ident())

    def spreadsheets(self) -> FakeSpreadsheets:
        return FakeSpreadsheets(self)


@pytest.fixture
def services() -> List[FakeSheetsService]:
    return []


@pytest.fixture
def google_workbook(services) -> GoogleSheetsWorkbook:
    def factory() -> FakeSheetsService:
        service = FakeSheetsService()
        services.append(service)
        return service

    return GoogleSheetsWorkbook("sheet-1", factory)


def test_each_thread_gets_its_own_service(google_workbook, services):
    n_threads = 5
    barrier = threading.Barrier(n_threads)
    results: List[Any] = []
    errors: List[BaseException] = []

    def worker():
        try:
            barrier.wait(timeout=5)
            sheet = google_workbook.get_sheet("API")
            results.append(sheet.read_range("A1:B2"))
        except BaseException as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert errors == []
    assert len(results) == n_threads
    assert len(services) == n_threads
    assert all(len(s.threads) == 1 for s in services)
    assert len({tid for s in services for tid in s.threads}) == n_threads


def test_service_is_reused_within_a_thread(google_workbook, services):
    sheet = google_workbook.get_sheet("API")
    sheet.get_display_values(1, 1, 2, 2)
    sheet.set_formula("B2", "=NOW()")
    assert len(services) == 1
    assert services[0].writes[-1]["valueInputOption"] == "USER_ENTERED"
    assert services[0].writes[-1]["range"] == "'API'!B2"


def test_google_reads_are_padded(google_workbook):
    values = google_workbook.get_sheet("API").get_display_values(1, 1, 2, 3)
    assert values == [["updated_at", "19/10/2026", ""], ["", "", ""]]


def test_missing_google_sheet_is_none(google_workbook):
    assert google_workbook.get_sheet("01 DashBoard") is None


def test_in_memory_insert_rejects_duplicates():
    wb = InMemoryWorkbook({"API": [["a"]]})
    with pytest.raises(ValueError):
        wb.insert_sheet("API")
    assert wb.get_sheet("API").get_display_value(1, 1) == "a"
