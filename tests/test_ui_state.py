import types
from datetime import date

from classcal.ui import state


def _patch_st(monkeypatch):
    mock_st = types.SimpleNamespace(session_state={})
    monkeypatch.setattr(state, "st", mock_st)
    return mock_st


def test_init_state_if_missing_keeps_existing_values(monkeypatch):
    mock_st = _patch_st(monkeypatch)
    mock_st.session_state[state.KEY_WEEK_OFFSET] = 3

    state.init_state_if_missing(date(2024, 6, 5))

    assert mock_st.session_state[state.KEY_WEEK_OFFSET] == 3
    assert mock_st.session_state[state.KEY_EDIT_WEEK_OFFSET] == 0
    assert mock_st.session_state[state.KEY_SELECTED_DATE] == date(2024, 6, 5)
    assert mock_st.session_state[state.KEY_PENDING_DELETE] is None


def test_shift_week_moves_selected_day_along(monkeypatch):
    mock_st = _patch_st(monkeypatch)
    state.init_state_if_missing(date(2024, 6, 5))

    state.shift_week(1)
    assert mock_st.session_state[state.KEY_WEEK_OFFSET] == 1
    assert mock_st.session_state[state.KEY_SELECTED_DATE] == date(2024, 6, 12)

    state.shift_week(-2)
    assert mock_st.session_state[state.KEY_WEEK_OFFSET] == -1
    assert mock_st.session_state[state.KEY_SELECTED_DATE] == date(2024, 5, 29)


def test_shift_edit_week_invalidates_cache(monkeypatch):
    mock_st = _patch_st(monkeypatch)
    state.init_state_if_missing(date(2024, 6, 5))
    mock_st.session_state[state.KEY_EDIT_CACHE_READY] = True

    state.shift_edit_week(-1)

    assert mock_st.session_state[state.KEY_EDIT_WEEK_OFFSET] == -1
    assert mock_st.session_state[state.KEY_EDIT_CACHE_READY] is False


def test_clear_form_drops_only_that_prefix(monkeypatch):
    mock_st = _patch_st(monkeypatch)
    mock_st.session_state.update(
        {
            state.form_key("add_2024-06-03", "class_name"): "Yoga",
            state.form_key("add_2024-06-03", "start_time"): "9:00",
            state.form_key("add_2024-06-04", "class_name"): "Spin",
        }
    )

    state.clear_form("add_2024-06-03")

    assert mock_st.session_state == {"add_2024-06-04_class_name": "Spin"}


def test_delete_confirmation_flow(monkeypatch):
    mock_st = _patch_st(monkeypatch)
    state.ask_delete("abc")
    assert mock_st.session_state[state.KEY_PENDING_DELETE] == "abc"
    state.cancel_delete()
    assert mock_st.session_state[state.KEY_PENDING_DELETE] is None


def test_flash_is_one_shot(monkeypatch):
    _patch_st(monkeypatch)
    state.flash("success", "Class added successfully!")
    assert state.pop_flash() == ("success", "Class added successfully!")
    assert state.pop_flash() is None
