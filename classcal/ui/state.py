# classcal/ui/state.py
from datetime import date, timedelta
from typing import Optional

import streamlit as st

# Centralize keys to avoid typos across files
KEY_WEEK_OFFSET = "week_offset"
KEY_SELECTED_DATE = "selected_date"
KEY_EDIT_WEEK_OFFSET = "edit_week_offset"
KEY_EDIT_CLASSES = "edit_classes_cache"
KEY_EDIT_CACHE_READY = "edit_classes_cache_ready"
KEY_PENDING_DELETE = "pending_delete_id"
KEY_FLASH = "_flash"

FORM_FIELDS = ["class_name", "instructor", "start_time", "end_time", "description"]


def init_state_if_missing(today: date) -> None:
    """Call at the top of the page before rendering widgets."""
    st.session_state.setdefault(KEY_WEEK_OFFSET, 0)
    st.session_state.setdefault(KEY_EDIT_WEEK_OFFSET, 0)
    st.session_state.setdefault(KEY_SELECTED_DATE, today)
    st.session_state.setdefault(KEY_PENDING_DELETE, None)


def shift_week(delta: int) -> None:
    # Keep the selected weekday when swiping to another week
    st.session_state[KEY_WEEK_OFFSET] += delta
    st.session_state[KEY_SELECTED_DATE] = st.session_state[KEY_SELECTED_DATE] + timedelta(weeks=delta)


def select_date(d: date) -> None:
    st.session_state[KEY_SELECTED_DATE] = d


def shift_edit_week(delta: int) -> None:
    st.session_state[KEY_EDIT_WEEK_OFFSET] += delta
    st.session_state[KEY_EDIT_CACHE_READY] = False


def form_key(prefix: str, field: str) -> str:
    return f"{prefix}_{field}"


def clear_form(prefix: str) -> None:
    for f in FORM_FIELDS:
        st.session_state.pop(form_key(prefix, f), None)


def ask_delete(class_id: str) -> None:
    st.session_state[KEY_PENDING_DELETE] = class_id


def cancel_delete() -> None:
    st.session_state[KEY_PENDING_DELETE] = None


def mark_edit_cache_dirty() -> None:
    st.session_state[KEY_EDIT_CACHE_READY] = False


def flash(kind: str, message: str) -> None:
    """Queue a one-shot message shown on the next run."""
    st.session_state[KEY_FLASH] = (kind, message)


def pop_flash() -> Optional[tuple[str, str]]:
    return st.session_state.pop(KEY_FLASH, None)
