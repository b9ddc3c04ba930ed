import copy
import threading
import uuid
from typing import Callable, Dict


class _MemoryListener:
    def __init__(self, transport: "MemoryTransport", callback: Callable[[dict], None]):
        self._transport = transport
        self.callback = callback

    def close(self) -> None:
        self._transport._drop_listener(self)


class MemoryTransport:
    """
    In-process keyed-record store with the same surface as the remote ones.
    Listeners are notified synchronously on the writer's thread.
    """

    def __init__(self, initial: Dict[str, dict] | None = None):
        self._data: Dict[str, dict] = copy.deepcopy(initial or {})
        self._listeners: list[_MemoryListener] = []
        self._lock = threading.RLock()

    def snapshot(self) -> Dict[str, dict]:
        with self._lock:
            return copy.deepcopy(self._data)

    def insert(self, body: dict) -> str:
        key = uuid.uuid4().hex
        with self._lock:
            self._data[key] = dict(body)
        self._notify()
        return key

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def replace(self, key: str, body: dict) -> None:
        with self._lock:
            self._data[key] = dict(body)
        self._notify()

    def delete(self, key: str) -> None:
        with self._lock:
            removed = self._data.pop(key, None)
        if removed is not None:
            self._notify()

    def listen(self, callback: Callable[[dict], None]) -> _MemoryListener:
        listener = _MemoryListener(self, callback)
        with self._lock:
            self._listeners.append(listener)
        callback(self.snapshot())
        return listener

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _drop_listener(self, listener: _MemoryListener) -> None:
        with self._lock:
            self._listeners = [l for l in self._listeners if l is not listener]

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener.callback(self.snapshot())
