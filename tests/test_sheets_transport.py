import logging
import re
import threading
import types

import pytest
from gspread.exceptions import WorksheetNotFound

from classcal.config import CLASSES_HEADERS
from classcal.errors import TransportError
from classcal.models.classes import ClassEntry
from classcal.repositories.classes_repo import ScheduleStore
from classcal.services.sheets_transport import (
    SheetsTransport,
    ensure_headers,
    get_or_create_worksheet,
)


class FakeWorksheet:
    title = "Classes"

    def __init__(self, rows=None):
        self.rows = [list(CLASSES_HEADERS)] + [list(r) for r in (rows or [])]

    def row_values(self, n):
        return list(self.rows[n - 1]) if len(self.rows) >= n else []

    def get_all_records(self, numericise_ignore=None):
        header = self.rows[0]
        return [dict(zip(header, r)) for r in self.rows[1:]]

    def find(self, query, in_column=None):
        for i, r in enumerate(self.rows, start=1):
            if r and r[0] == query:
                return types.SimpleNamespace(row=i, col=1)
        return None

    def append_row(self, row, value_input_option=None):
        self.rows.append(list(row))

    def update(self, range_name=None, values=None, value_input_option=None):
        n = int(re.match(r"A(\d+)", range_name).group(1))
        while len(self.rows) < n:
            self.rows.append([])
        self.rows[n - 1] = list(values[0])

    def delete_rows(self, n):
        del self.rows[n - 1]


class FailingWorksheet(FakeWorksheet):
    def get_all_records(self, numericise_ignore=None):
        raise WorksheetNotFound("Classes")


def _entry(**overrides):
    base = dict(
        date="2024-07-01",
        start_time="14:00",
        end_time="15:00",
        class_name="Yoga",
        instructor="Sam",
        description="",
    )
    base.update(overrides)
    return ClassEntry(**base)


def test_snapshot_skips_rows_without_id():
    ws = FakeWorksheet(
        [
            ["k1", "2024-07-01", "9:00", "10:00", "Yoga", "Sam", ""],
            ["", "2024-07-01", "11:00", "12:00", "Orphan", "?", ""],
        ]
    )
    data = SheetsTransport(ws).snapshot()
    assert list(data) == ["k1"]
    assert data["k1"]["startTime"] == "9:00"
    assert "id" not in data["k1"]


def test_store_over_sheets_round_trip():
    ws = FakeWorksheet()
    store = ScheduleStore(SheetsTransport(ws))

    class_id = store.create(_entry())
    assert ws.rows[1][0] == class_id

    (rec,) = store.list()
    assert rec.entry == _entry()

    result = store.update(class_id, _entry(class_name="Pilates", description="new"))
    assert result.applied
    assert ws.rows[1] == [class_id, "2024-07-01", "14:00", "15:00", "Pilates", "Sam", "new"]

    assert store.update("x", _entry()).applied is False
    assert len(ws.rows) == 2

    assert store.remove(class_id).applied
    assert store.remove(class_id).applied is False
    assert ws.rows == [CLASSES_HEADERS]


def test_header_row_is_never_treated_as_a_record():
    ws = FakeWorksheet()
    assert SheetsTransport(ws).exists("id") is False


def test_sheet_errors_become_transport_errors():
    with pytest.raises(TransportError):
        SheetsTransport(FailingWorksheet()).snapshot()


def test_listen_sends_initial_snapshot_then_polls_changes():
    ws = FakeWorksheet([["k1", "2024-07-01", "9:00", "10:00", "Yoga", "Sam", ""]])
    transport = SheetsTransport(ws, poll_seconds=0.01)
    seen = []
    changed = threading.Event()

    def on_change(data):
        seen.append(data)
        if len(seen) > 1:
            changed.set()

    listener = transport.listen(on_change)
    try:
        assert list(seen[0]) == ["k1"]
        ws.append_row(["k2", "2024-07-02", "9:00", "10:00", "Spin", "Lee", ""])
        assert changed.wait(timeout=5)
    finally:
        listener.close()

    assert set(seen[-1]) == {"k1", "k2"}


def test_poll_failures_are_logged_not_raised():
    ws = FakeWorksheet()
    transport = SheetsTransport(ws, poll_seconds=0.01)
    listener = transport.listen(lambda data: None)
    logged = threading.Event()

    class _Flag(logging.Handler):
        def emit(self, record):
            if "will retry" in record.getMessage():
                logged.set()

    handler = _Flag()
    logging.getLogger("classcal.services.sheets_transport").addHandler(handler)
    try:
        ws.get_all_records = FailingWorksheet.get_all_records.__get__(ws)
        assert logged.wait(timeout=5)
    finally:
        listener.close()
        logging.getLogger("classcal.services.sheets_transport").removeHandler(handler)


def test_get_or_create_worksheet_creates_missing_tab():
    created = []

    class FakeSpreadsheet:
        def worksheet(self, name):
            raise WorksheetNotFound(name)

        def add_worksheet(self, title, rows, cols):
            created.append((title, cols))
            return FakeWorksheet()

    ws = get_or_create_worksheet(FakeSpreadsheet(), "Classes")

    assert isinstance(ws, FakeWorksheet)
    assert created == [("Classes", len(CLASSES_HEADERS))]


def test_get_or_create_worksheet_reuses_existing_tab():
    existing = FakeWorksheet()

    class FakeSpreadsheet:
        def worksheet(self, name):
            return existing

        def add_worksheet(self, title, rows, cols):
            raise AssertionError("tab already exists")

    assert get_or_create_worksheet(FakeSpreadsheet(), "Classes") is existing


def test_ensure_headers_rewrites_wrong_header():
    ws = FakeWorksheet()
    ws.rows[0] = ["class_id", "class_name"]
    ensure_headers(ws, CLASSES_HEADERS)
    assert ws.rows[0] == CLASSES_HEADERS
