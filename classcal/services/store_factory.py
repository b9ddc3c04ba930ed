from datetime import date, datetime

import pytz
import streamlit as st

from classcal.config import BACKENDS, DEFAULT_BACKEND, DEFAULT_TIMEZONE
from classcal.repositories.classes_repo import ScheduleStore
from classcal.services.memory_transport import MemoryTransport


def selected_backend() -> str:
    backend = str(st.secrets.get("SCHEDULE_BACKEND", DEFAULT_BACKEND)).strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown SCHEDULE_BACKEND {backend!r}; expected one of {BACKENDS}")
    return backend


def build_transport(backend: str):
    if backend == "firebase":
        from classcal.services.firebase_client import get_classes_reference
        from classcal.services.firebase_transport import FirebaseTransport

        return FirebaseTransport(get_classes_reference())
    if backend == "sheets":
        from classcal.services.gsheets_client import get_classes_worksheet
        from classcal.services.sheets_transport import SheetsTransport

        return SheetsTransport(get_classes_worksheet())
    return MemoryTransport()


@st.cache_resource
def get_schedule_store() -> ScheduleStore:
    return ScheduleStore(build_transport(selected_backend()))


def today_local() -> date:
    tz = pytz.timezone(str(st.secrets.get("TIMEZONE", DEFAULT_TIMEZONE)))
    return datetime.now(tz).date()
