import logging
import threading
import uuid
from typing import Callable, Dict

import requests
from gspread.exceptions import GSpreadException, WorksheetNotFound

from classcal.config import CLASSES_HEADERS, PAYLOAD_FIELDS, SHEETS_POLL_SECONDS
from classcal.errors import TransportError

_LOG = logging.getLogger(__name__)

_SHEET_ERRORS = (GSpreadException, requests.RequestException)


# -----------------------------
# Sheet helpers for Classes
# -----------------------------
def get_or_create_worksheet(sh, tab_name: str):
    try:
        return sh.worksheet(tab_name)  # this triggers metadata read (expensive)
    except WorksheetNotFound:
        return sh.add_worksheet(title=tab_name, rows=1000, cols=len(CLASSES_HEADERS))


def ensure_headers(ws, headers):
    first = ws.row_values(1)
    if first != headers:
        ws.update(range_name="A1", values=[headers])


def _last_column() -> str:
    return chr(ord("A") + len(CLASSES_HEADERS) - 1)


class _PollingListener:
    def __init__(self, transport: "SheetsTransport", callback, interval: float, initial: dict):
        self._transport = transport
        self._callback = callback
        self._interval = interval
        self._last = initial
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="sheets-poll", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                current = self._transport.snapshot()
            except TransportError as e:
                _LOG.warning("Polling %s failed, will retry: %s", self._transport.tab_name, e)
                continue
            if current != self._last and not self._stop.is_set():
                self._last = current
                self._callback(current)

    def close(self) -> None:
        self._stop.set()


class SheetsTransport:
    """
    Keeps the class collection on one worksheet: the id column holds the key,
    the remaining columns the wire fields. Sheets has no push channel, so
    listeners poll.
    """

    def __init__(self, ws, poll_seconds: float = SHEETS_POLL_SECONDS):
        self._ws = ws
        self._poll_seconds = poll_seconds
        self.tab_name = getattr(ws, "title", "?")

    def snapshot(self) -> Dict[str, dict]:
        try:
            rows = self._ws.get_all_records(numericise_ignore=["all"])
        except _SHEET_ERRORS as e:
            raise TransportError(f"Could not read sheet {self.tab_name}: {e}") from e

        out = {}
        for r in rows:
            key = str(r.get("id", "")).strip()
            if not key:
                continue
            out[key] = {f: str(r.get(f, "")) for f in PAYLOAD_FIELDS}
        return out

    def _row_of(self, key: str) -> int | None:
        cell = self._ws.find(key, in_column=1)
        if cell is None or cell.row == 1:
            return None
        return cell.row

    def insert(self, body: dict) -> str:
        key = uuid.uuid4().hex
        row = [key] + [body.get(f, "") for f in PAYLOAD_FIELDS]
        try:
            self._ws.append_row(row, value_input_option="RAW")
        except _SHEET_ERRORS as e:
            raise TransportError(f"Could not append to sheet {self.tab_name}: {e}") from e
        return key

    def exists(self, key: str) -> bool:
        try:
            return self._row_of(key) is not None
        except _SHEET_ERRORS as e:
            raise TransportError(f"Could not search sheet {self.tab_name}: {e}") from e

    def replace(self, key: str, body: dict) -> None:
        row = [key] + [body.get(f, "") for f in PAYLOAD_FIELDS]
        try:
            n = self._row_of(key)
            if n is None:
                self._ws.append_row(row, value_input_option="RAW")
            else:
                self._ws.update(
                    range_name=f"A{n}:{_last_column()}{n}",
                    values=[row],
                    value_input_option="RAW",
                )
        except _SHEET_ERRORS as e:
            raise TransportError(f"Could not write {key} on sheet {self.tab_name}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            n = self._row_of(key)
            if n is not None:
                self._ws.delete_rows(n)
        except _SHEET_ERRORS as e:
            raise TransportError(f"Could not delete {key} on sheet {self.tab_name}: {e}") from e

    def listen(self, callback: Callable[[dict], None]) -> _PollingListener:
        initial = self.snapshot()
        callback(initial)
        return _PollingListener(self, callback, self._poll_seconds, initial)
