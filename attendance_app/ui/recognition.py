import streamlit as st

from attendance_app.capture import CaptureController
from attendance_app.schemas import Matched
from attendance_app.state import AttendanceState
from attendance_app.utils.image_utils import InvalidImageError, to_data_url


def _show_result(capture: CaptureController):
    result = capture.last_result
    if result is None:
        st.info("Waiting for a capture.")
        return

    if result.success:
        st.success(f"✅ {result.message}")
        st.caption(f"Marked at {result.record.timestamp.astimezone().strftime('%H:%M:%S')}")
    elif isinstance(result.outcome, Matched):
        st.error(f"⛔ {result.message}")
    else:
        st.error("⛔ Unknown person")
        st.caption(result.message)
    st.button("Clear", on_click=capture.reset)


def render(state: AttendanceState, capture: CaptureController):
    if not state.students:
        st.warning("No students registered yet. Enroll students before scanning.")

    left, right = st.columns([2, 1])

    # The camera widget only exists inside the session, so leaving this
    # screen releases the device and invalidates any pending result.
    with capture.session():
        with left:
            frame = st.camera_input("Capture Face", key="recognition_camera", disabled=capture.busy)
            identify = st.button(
                "🔍 Identify Student",
                type="primary",
                disabled=frame is None or capture.busy or not state.students,
            )

        if identify and frame is not None:
            try:
                image = to_data_url(frame.getvalue())
            except InvalidImageError:
                st.error("Could not read the captured frame. Please try again.")
            else:
                with st.spinner("Analyzing face..."):
                    result = capture.capture(image)
                if result is not None and result.success:
                    st.balloons()

    with right:
        st.subheader("Last Result")
        _show_result(capture)
