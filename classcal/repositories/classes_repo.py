"""Schedule store: the class collection as a list of :class:`ClassRecord`.

The store wraps a transport (Firebase, Google Sheets or in-memory) and owns
the create/read/update/delete semantics.  Every transport failure comes back
as :class:`FetchError` or :class:`WriteError`; nothing is retried here.

Concurrent writes are independent requests and the last one to reach the
backing store wins.  The existence check done by ``update``/``remove`` is a
separate read, so a record deleted between that read and the write can be
recreated by ``update``.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Mapping, Optional

from classcal.errors import FetchError, TransportError, WriteError
from classcal.models.classes import ClassEntry, ClassRecord, WriteResult
from classcal.utils.payload import size_in_kb

_LOG = logging.getLogger(__name__)

OnChange = Callable[[List[ClassRecord]], None]


def expand_snapshot(data: Optional[Mapping[str, dict]]) -> List[ClassRecord]:
    """Turn a ``key -> body`` mapping into records, keeping key order."""
    return [ClassRecord.from_payload(key, body) for key, body in (data or {}).items()]


class Subscription:
    """Handle for one subscriber. Call :meth:`cancel` when done observing."""

    def __init__(self, on_change: OnChange):
        self._on_change = on_change
        self._active = True
        self._handle = None
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def _deliver(self, data: Mapping[str, dict]) -> None:
        if not self._active:
            return
        records = expand_snapshot(data)
        _LOG.debug("Snapshot received: %d classes, %s KB", len(records), size_in_kb(data))
        try:
            self._on_change(records)
        except Exception:
            _LOG.exception("Schedule subscriber raised; listener stays open")

    def _attach(self, handle) -> None:
        with self._lock:
            if self._active:
                self._handle = handle
                return
        handle.close()

    def cancel(self) -> None:
        with self._lock:
            self._active = False
            handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.cancel()


class ScheduleStore:
    def __init__(self, transport):
        self._transport = transport

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list(self) -> List[ClassRecord]:
        try:
            data: Dict[str, dict] = self._transport.snapshot()
        except TransportError as e:
            _LOG.error("Error fetching classes: %s", e)
            raise FetchError("Failed to fetch classes.") from e
        _LOG.debug("Fetched classes: %s KB", size_in_kb(data))
        return expand_snapshot(data)

    def subscribe(self, on_change: OnChange) -> Subscription:
        """
        Call ``on_change`` with the full record list now and after every
        change of the collection. Each call gets its own listener.
        """
        sub = Subscription(on_change)
        try:
            handle = self._transport.listen(sub._deliver)
        except TransportError as e:
            sub.cancel()
            _LOG.error("Error subscribing to classes: %s", e)
            raise FetchError("Failed to subscribe to classes.") from e
        sub._attach(handle)
        return sub

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def create(self, entry: ClassEntry) -> str:
        body = entry.to_payload()
        _LOG.debug("Adding class: %s KB", size_in_kb(body))
        try:
            key = self._transport.insert(body)
        except TransportError as e:
            _LOG.error("Error adding class: %s", e)
            raise WriteError("Failed to add class.") from e
        _LOG.info("Class added: %s", key)
        return key

    def update(self, class_id: str, entry: ClassEntry) -> WriteResult:
        body = entry.to_payload()
        try:
            if not self._transport.exists(class_id):
                _LOG.warning("Update skipped, no class with id %s", class_id)
                return WriteResult(id=class_id, applied=False)
            self._transport.replace(class_id, body)
        except TransportError as e:
            _LOG.error("Error updating class %s: %s", class_id, e)
            raise WriteError("Failed to update class.") from e
        _LOG.info("Class updated: %s (%s KB)", class_id, size_in_kb(body))
        return WriteResult(id=class_id, applied=True)

    def remove(self, class_id: str) -> WriteResult:
        try:
            if not self._transport.exists(class_id):
                _LOG.info("Delete skipped, no class with id %s", class_id)
                return WriteResult(id=class_id, applied=False)
            self._transport.delete(class_id)
        except TransportError as e:
            _LOG.error("Error deleting class %s: %s", class_id, e)
            raise WriteError("Failed to delete class.") from e
        _LOG.info("Class deleted: %s", class_id)
        return WriteResult(id=class_id, applied=True)
