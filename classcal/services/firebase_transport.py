"""Firebase Realtime Database transport for the ``classes`` collection.

The collection lives at a single database path; each class is a child keyed
by a Firebase push id.  Reads return the whole ``key -> body`` mapping, and
listeners receive the whole mapping too: the incremental ``put``/``patch``
events Firebase streams are folded into a local mirror first.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Callable, Dict, List

from firebase_admin import db
from firebase_admin.exceptions import FirebaseError

from classcal.errors import TransportError

_LOG = logging.getLogger(__name__)


def _segments(path: str) -> List[str]:
    return [p for p in (path or "").split("/") if p]


def _as_collection(value: Any) -> Dict[str, dict]:
    return dict(value) if isinstance(value, dict) else {}


def _put(mirror: Dict[str, dict], segments: List[str], value: Any) -> Dict[str, dict]:
    if not segments:
        return _as_collection(copy.deepcopy(value))

    node: Dict[str, Any] = mirror
    for seg in segments[:-1]:
        child = node.get(seg)
        if not isinstance(child, dict):
            if value is None:
                return mirror
            child = {}
            node[seg] = child
        node = child

    if value is None:
        node.pop(segments[-1], None)
    else:
        node[segments[-1]] = copy.deepcopy(value)
    return mirror


def apply_event(mirror: Dict[str, dict], event_type: str, path: str, data: Any) -> Dict[str, dict]:
    """Fold one listener event into ``mirror`` and return the new mirror."""
    segments = _segments(path)
    if event_type == "put":
        return _put(mirror, segments, data)
    if event_type == "patch":
        for child, value in (data or {}).items():
            mirror = _put(mirror, segments + _segments(child), value)
        return mirror
    _LOG.debug("Ignoring listener event %r at %s", event_type, path)
    return mirror


class _FirebaseListener:
    def __init__(self, callback: Callable[[dict], None]):
        self._callback = callback
        self._mirror: Dict[str, dict] = {}
        self._lock = threading.Lock()
        self.registration = None

    def on_event(self, event) -> None:
        with self._lock:
            self._mirror = apply_event(self._mirror, event.event_type, event.path, event.data)
            current = copy.deepcopy(self._mirror)
        self._callback(current)

    def close(self) -> None:
        if self.registration is not None:
            self.registration.close()
            self.registration = None


class FirebaseTransport:
    def __init__(self, ref: db.Reference):
        self._ref = ref

    def snapshot(self) -> Dict[str, dict]:
        try:
            return _as_collection(self._ref.get())
        except (FirebaseError, ValueError) as e:
            raise TransportError(f"Could not read {self._ref.path}: {e}") from e

    def insert(self, body: dict) -> str:
        try:
            return self._ref.push(body).key
        except (FirebaseError, ValueError) as e:
            raise TransportError(f"Could not insert into {self._ref.path}: {e}") from e

    def _child(self, key: str):
        # Keys Firebase cannot hold ("", ".", "#", "$", "[", "]") never name a record
        try:
            return self._ref.child(key)
        except ValueError:
            _LOG.debug("Not a valid key under %s: %r", self._ref.path, key)
            return None

    def exists(self, key: str) -> bool:
        child = self._child(key)
        if child is None:
            return False
        try:
            return child.get(shallow=True) is not None
        except (FirebaseError, ValueError) as e:
            raise TransportError(f"Could not read {self._ref.path}/{key}: {e}") from e

    def replace(self, key: str, body: dict) -> None:
        try:
            self._ref.child(key).set(body)
        except (FirebaseError, ValueError) as e:
            raise TransportError(f"Could not write {self._ref.path}/{key}: {e}") from e

    def delete(self, key: str) -> None:
        child = self._child(key)
        if child is None:
            return
        try:
            child.delete()
        except (FirebaseError, ValueError) as e:
            raise TransportError(f"Could not delete {self._ref.path}/{key}: {e}") from e

    def listen(self, callback: Callable[[dict], None]) -> _FirebaseListener:
        listener = _FirebaseListener(callback)
        try:
            listener.registration = self._ref.listen(listener.on_event)
        except (FirebaseError, ValueError) as e:
            raise TransportError(f"Could not listen to {self._ref.path}: {e}") from e
        return listener
