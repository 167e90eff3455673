import logging

from utils.state import AppState


def test_active_user_defaults_to_none():
    assert AppState.get_active_user_id() is None
    assert AppState.get_active_user_name() is None


def test_set_active_user():
    AppState.set_active_user("u7", "Inspector Lee")
    assert AppState.get_active_user_id() == "u7"
    assert AppState.get_active_user_name() == "Inspector Lee"


def test_clear_resets_user():
    AppState.set_active_user("u7", "Inspector Lee")
    AppState.clear()
    assert AppState.get_active_user_id() is None
    assert AppState.get_active_user_name() is None


def test_set_active_user_logs_previous_user(caplog):
    AppState.set_active_user("u1", "陳大文")
    with caplog.at_level(logging.DEBUG, logger="utils.state"):
        AppState.set_active_user("u2", "黃偉文")
    assert "set_active_user(u2, 黃偉文) (from u1)" in caplog.text
