"""Live class feed shared by every Streamlit session of the process."""

import logging
import threading
from datetime import datetime
from typing import List, Optional

import pytz
import streamlit as st

from classcal.models.classes import ClassRecord
from classcal.repositories.classes_repo import ScheduleStore, Subscription

_LOG = logging.getLogger(__name__)


class SnapshotFeed:
    """Keeps the latest pushed record list; close() releases the listener."""

    def __init__(self, store: ScheduleStore):
        self._store = store
        self._lock = threading.Lock()
        self._records: List[ClassRecord] = []
        self._updated_at: Optional[datetime] = None
        self._subscription: Subscription = store.subscribe(self._on_change)

    def _on_change(self, records: List[ClassRecord]) -> None:
        with self._lock:
            self._records = list(records)
            self._updated_at = datetime.now(pytz.UTC)

    @property
    def records(self) -> List[ClassRecord]:
        with self._lock:
            return list(self._records)

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._updated_at

    @property
    def active(self) -> bool:
        return self._subscription.active

    def close(self) -> None:
        self._subscription.cancel()


@st.cache_resource
def _cached_feed(store_id: int, _store: ScheduleStore) -> SnapshotFeed:
    _LOG.info("Opening shared schedule feed")
    return SnapshotFeed(_store)


def get_shared_feed(store: ScheduleStore) -> SnapshotFeed:
    """
    One listener per process: sessions only read feed.records, so an ended
    browser session leaves nothing open. A cancelled feed is replaced.
    """
    feed = _cached_feed(id(store), store)
    if not feed.active:
        _cached_feed.clear()
        feed = _cached_feed(id(store), store)
    return feed
