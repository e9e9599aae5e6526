import streamlit as st

from attendance_app.config import Settings
from attendance_app.router import View, ViewRouter
from attendance_app.state import AttendanceState

NAV_KEY = "nav_view"


def navigate(router: ViewRouter, view: View):
    """Callback for quick-action buttons: moves the router and keeps the sidebar radio in sync."""
    router.navigate(view)
    st.session_state[NAV_KEY] = router.active.value


def _on_nav_change(router: ViewRouter):
    router.navigate(st.session_state[NAV_KEY])


def render(router: ViewRouter, state: AttendanceState, settings: Settings):
    if NAV_KEY not in st.session_state:
        st.session_state[NAV_KEY] = router.active.value

    with st.sidebar:
        st.header("📸 Smart Attendance")
        st.radio(
            "Navigate",
            options=[v.value for v in View],
            format_func=lambda value: View(value).label,
            key=NAV_KEY,
            on_change=_on_nav_change,
            args=(router,),
        )

        st.divider()
        st.caption("🟢 System Online")
        if not settings.recognition_enabled:
            st.warning("⚠️ No GEMINI_API_KEY configured. Face recognition is unavailable.")
        for slot, error in state.persist_errors.items():
            if error:
                st.warning(f"💾 {slot}: {error}")
