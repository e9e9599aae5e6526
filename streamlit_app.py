import streamlit as st

from attendance_app.capture import CaptureController
from attendance_app.config import get_settings
from attendance_app.face_engine.recognizer import GeminiRecognizer
from attendance_app.router import View, ViewRouter
from attendance_app.state import AttendanceState
from attendance_app.storage import SqlSlotStore
from attendance_app.ui import dashboard, logs, recognition, sidebar, students
from attendance_app.utils.logger import setup_logging


# -----------------------------
# Shared state (one per process)
# -----------------------------
@st.cache_resource(show_spinner="Loading attendance data...")
def get_state() -> AttendanceState:
    settings = get_settings()
    store = SqlSlotStore(settings.database_url, max_slot_bytes=settings.max_slot_bytes)
    recognizer = GeminiRecognizer(settings.api_key, model=settings.model, timeout=settings.timeout)
    state = AttendanceState(store, recognizer)
    state.load_initial_state()
    return state


def get_session(state: AttendanceState):
    """Per-browser-session router and capture controller."""
    if "router" not in st.session_state:
        st.session_state.router = ViewRouter()
    if "capture" not in st.session_state:
        st.session_state.capture = CaptureController(state)
    return st.session_state.router, st.session_state.capture


# -----------------------------
# Streamlit UI
# -----------------------------
def main():
    st.set_page_config(page_title="Smart Attendance", page_icon="📸", layout="wide")

    settings = get_settings()
    setup_logging(settings.log_dir, settings.log_level)

    state = get_state()
    router, capture = get_session(state)

    sidebar.render(router, state, settings)

    view = router.active
    st.title(view.title)
    st.caption(view.subtitle)

    if view == View.DASHBOARD:
        dashboard.render(state, router)
    elif view == View.RECOGNITION:
        recognition.render(state, capture)
    elif view == View.STUDENTS:
        students.render(state)
    elif view == View.LOGS:
        logs.render(state)


if __name__ == "__main__":
    main()
