from pathlib import Path

import pytest
import streamlit as st
from streamlit.testing.v1 import AppTest

APP_PATH = str(Path(__file__).resolve().parent.parent / "streamlit_app.py")


@pytest.fixture
def app(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'attendance.db'}")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.delenv("API_KEY", raising=False)
    st.cache_resource.clear()
    yield AppTest.from_file(APP_PATH, default_timeout=30)
    st.cache_resource.clear()


def test_starts_on_dashboard(app):
    app.run()

    assert not app.exception
    assert app.title[0].value == "Campus Dashboard"
    assert any("GEMINI_API_KEY" in w.value for w in app.sidebar.warning)


def test_sidebar_navigation(app):
    app.run()
    app.sidebar.radio[0].set_value("STUDENTS").run()

    assert not app.exception
    assert app.title[0].value == "Student Directory"


def test_quick_action_syncs_sidebar(app):
    app.run()
    next(b for b in app.button if b.label == "➕ Add Student").click().run()

    assert not app.exception
    assert app.title[0].value == "Student Directory"
    assert app.sidebar.radio[0].value == "STUDENTS"


def test_logs_screen_empty(app):
    app.run()
    app.sidebar.radio[0].set_value("LOGS").run()

    assert not app.exception
    assert app.title[0].value == "Attendance History"
    assert any("No attendance records" in i.value for i in app.info)
