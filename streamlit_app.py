import logging
from datetime import date

import streamlit as st

from classcal.errors import FetchError, WriteError
from classcal.models.classes import ClassEntry, ClassRecord, validate_entry
from classcal.repositories.classes_repo import ScheduleStore
from classcal.repositories.schedule_queries import (
    classes_on_date,
    week_dates,
    week_schedule,
    week_start,
    week_table_df,
)
from classcal.services.store_factory import get_schedule_store, today_local
from classcal.ui.feed import get_shared_feed
from classcal.ui.state import (
    KEY_EDIT_CACHE_READY,
    KEY_EDIT_CLASSES,
    KEY_EDIT_WEEK_OFFSET,
    KEY_PENDING_DELETE,
    KEY_SELECTED_DATE,
    KEY_WEEK_OFFSET,
    ask_delete,
    cancel_delete,
    clear_form,
    flash,
    form_key,
    init_state_if_missing,
    mark_edit_cache_dirty,
    pop_flash,
    select_date,
    shift_edit_week,
    shift_week,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
_LOG = logging.getLogger("classcal.app")

st.set_page_config(page_title="Class Schedule", layout="wide")


# -----------------------------
# Login
# -----------------------------
def require_password():
    if st.session_state.get("authenticated"):
        return

    with st.form("login"):
        pw = st.text_input("Password", type="password")
        ok = st.form_submit_button("Login")

    if not ok:
        st.stop()

    if pw == st.secrets["APP_PASSWORD"]:
        st.session_state["authenticated"] = True
        st.rerun()
    else:
        st.error("Incorrect password")
        st.stop()

require_password()


# -----------------------------
# Helpers
# -----------------------------
def refresh_edit_cache(store: ScheduleStore) -> None:
    try:
        st.session_state[KEY_EDIT_CLASSES] = store.list()
        st.session_state[KEY_EDIT_CACHE_READY] = True
    except FetchError:
        st.session_state.setdefault(KEY_EDIT_CLASSES, [])
        st.error("Failed to fetch classes.")

def render_class_card(cls: ClassRecord) -> None:
    with st.container(border=True):
        left, right = st.columns([3, 1])
        left.markdown(f"**{cls.class_name}**")
        right.caption(f"{cls.start_time} - {cls.end_time}")
        st.caption(f"with {cls.instructor}")
        if cls.description:
            st.write(cls.description)

def class_form_fields(prefix: str, initial: ClassRecord | None = None) -> dict:
    """Render the shared class inputs and return their current values."""
    values = {}
    labels = {
        "class_name": "Class Name",
        "instructor": "Instructor",
        "start_time": "Start Time (e.g. 10:00)",
        "end_time": "End Time (e.g. 11:00)",
    }
    for field, label in labels.items():
        values[field] = st.text_input(
            label,
            value=getattr(initial, field) if initial else "",
            key=form_key(prefix, field),
        )
    values["description"] = st.text_area(
        "Description",
        value=initial.description if initial else "",
        key=form_key(prefix, "description"),
        height=80,
    )
    return values

def show_validation(errors: list[str]) -> bool:
    for e in errors:
        st.error(e)
    return not errors


store = get_schedule_store()
today = today_local()
init_state_if_missing(today)

msg = pop_flash()
if msg:
    kind, text = msg
    getattr(st, kind, st.info)(text)


# -----------------------------
# Streamlit UI
# -----------------------------
tab_schedule, tab_edit = st.tabs(["Schedule", "Edit Schedule"])

with tab_schedule:
    st.header("Class Schedule")

    try:
        feed = get_shared_feed(store)
        records = feed.records
    except FetchError:
        st.error("Failed to fetch classes.")
        records = []

    start = week_start(today, st.session_state[KEY_WEEK_OFFSET])

    nav_prev, strip, nav_next = st.columns([1, 14, 1])
    with nav_prev:
        st.button("‹", on_click=shift_week, args=(-1,), key="week_prev")
    with nav_next:
        st.button("›", on_click=shift_week, args=(1,), key="week_next")
    with strip:
        day_cols = st.columns(7)
        for col, d in zip(day_cols, week_dates(start)):
            is_active = d == st.session_state[KEY_SELECTED_DATE]
            col.button(
                f"{d.strftime('%a')}\n\n{d.day}",
                on_click=select_date,
                args=(d,),
                key=f"day_{d.isoformat()}",
                type="primary" if is_active else "secondary",
                width="stretch",
            )

    selected: date = st.session_state[KEY_SELECTED_DATE]
    st.subheader(selected.strftime("%a %b %d %Y"))

    day_classes = classes_on_date(records, selected.isoformat())
    if day_classes:
        for cls in day_classes:
            render_class_card(cls)
    else:
        st.info("No classes available for this day.")

    st.button("Refresh", key="schedule_refresh")


with tab_edit:
    edit_start = week_start(today, st.session_state[KEY_EDIT_WEEK_OFFSET])

    c_prev, c_label, c_next = st.columns([1, 6, 1])
    with c_prev:
        st.button("‹", on_click=shift_edit_week, args=(-1,), key="edit_week_prev")
    with c_label:
        st.subheader(f"Week of {edit_start.strftime('%b')} {edit_start.day}")
    with c_next:
        st.button("›", on_click=shift_edit_week, args=(1,), key="edit_week_next")

    # Re-fetch after every mutation or week change
    if not st.session_state.get(KEY_EDIT_CACHE_READY):
        refresh_edit_cache(store)
    all_classes = st.session_state.get(KEY_EDIT_CLASSES, [])

    st.dataframe(week_table_df(all_classes, edit_start), width="stretch", hide_index=True)

    for iso, day_list in week_schedule(all_classes, edit_start).items():
        d = date.fromisoformat(iso)
        with st.expander(f"{d.strftime('%A, %b')} {d.day} ({len(day_list)})"):
            for cls in day_list:
                st.markdown(f"**{cls.class_name}** {cls.start_time} - {cls.end_time} · {cls.instructor}")

                if st.session_state[KEY_PENDING_DELETE] == cls.id:
                    st.warning(f'Are you sure you want to delete "{cls.class_name}"?')
                    b_cancel, b_delete, _ = st.columns([1, 1, 6])
                    b_cancel.button("Cancel", on_click=cancel_delete, key=f"cancel_del_{cls.id}")
                    if b_delete.button("Delete", type="primary", key=f"confirm_del_{cls.id}"):
                        try:
                            result = store.remove(cls.id)
                        except WriteError:
                            st.error("Failed to delete class.")
                        else:
                            cancel_delete()
                            mark_edit_cache_dirty()
                            if result.applied:
                                flash("success", "Class deleted successfully.")
                            else:
                                flash("warning", "That class was already gone.")
                            st.rerun()

                with st.form(f"edit_{cls.id}"):
                    prefix = f"edit_{cls.id}"
                    values = class_form_fields(prefix, initial=cls)
                    save_col, del_col, _ = st.columns([1, 1, 6])
                    save = save_col.form_submit_button("Save", type="primary")
                    delete = del_col.form_submit_button("Delete")

                if delete:
                    ask_delete(cls.id)
                    st.rerun()

                if save:
                    # The date is kept from the existing record
                    entry = ClassEntry(date=cls.date, **{k: v.strip() for k, v in values.items()})
                    if show_validation(validate_entry(entry)):
                        try:
                            result = store.update(cls.id, entry)
                        except WriteError:
                            st.error("Failed to update class.")
                        else:
                            clear_form(prefix)
                            mark_edit_cache_dirty()
                            if result.applied:
                                flash("success", "Class updated successfully!")
                            else:
                                flash("warning", "That class no longer exists; nothing was saved.")
                            st.rerun()

                st.divider()

            add_prefix = f"add_{iso}"
            with st.form(add_prefix, clear_on_submit=False):
                st.markdown(f"**Add Class for {d.strftime('%A, %b')} {d.day}**")
                values = class_form_fields(add_prefix)
                add = st.form_submit_button("Save")

            if add:
                entry = ClassEntry.create(day=d, **values)
                if show_validation(validate_entry(entry)):
                    try:
                        new_id = store.create(entry)
                    except WriteError:
                        st.error("Failed to add class.")
                    else:
                        _LOG.info("Added %s on %s", new_id, iso)
                        clear_form(add_prefix)
                        mark_edit_cache_dirty()
                        flash("success", "Class added successfully!")
                        st.rerun()
