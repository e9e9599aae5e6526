import streamlit as st

from attendance_app.reports import search_students
from attendance_app.schemas import Student
from attendance_app.state import AttendanceState, EnrollmentError
from attendance_app.utils.image_utils import InvalidImageError, decode_data_url, to_data_url
from attendance_app.utils.logger import get_logger

logger = get_logger("ui.students")

GRID_COLUMNS = 3


def _delete(state: AttendanceState, student_id: str):
    state.delete_student(student_id)


def _enroll_form(state: AttendanceState):
    use_camera = st.toggle("Take the photo with the camera", key="enroll_use_camera")

    with st.form("enroll_student", clear_on_submit=True):
        name = st.text_input("Full Name")
        roll_number = st.text_input("Roll Number")
        department = st.text_input("Department", placeholder="General")
        if use_camera:
            photo = st.camera_input("Reference Photo")
        else:
            photo = st.file_uploader("Reference Photo", type=["jpg", "jpeg", "png"])
        submitted = st.form_submit_button("Enroll Student", type="primary")

    if not submitted:
        return

    photo_url = ""
    if photo is not None:
        try:
            photo_url = to_data_url(photo.getvalue())
        except InvalidImageError as e:
            logger.warning(f"Rejected enrollment photo: {e}")
            st.error("Error reading the image. Please try another photo.")
            return

    try:
        student = state.add_student({
            "name": name,
            "roll_number": roll_number,
            "department": department,
            "photo_url": photo_url,
        })
    except EnrollmentError as e:
        st.error(str(e))
        return
    st.success(f"✅ Enrolled {student.name} ({student.roll_number})")


def _student_card(state: AttendanceState, student: Student):
    with st.container(border=True):
        try:
            st.image(decode_data_url(student.photo_url), width="stretch")
        except InvalidImageError:
            st.caption("No preview available")
        st.markdown(f"**{student.name}**")
        st.caption(f"Roll: {student.roll_number} · {student.department_label}")
        st.button("🗑️ Delete", key=f"delete_{student.id}", on_click=_delete, args=(state, student.id))


def render(state: AttendanceState):
    query = st.text_input("Search students...", key="student_search", placeholder="Name, roll number or department")

    with st.expander("➕ Add Student", expanded=not state.students):
        _enroll_form(state)

    students = search_students(state.students, query)
    if not students:
        st.info("No students found." if state.students else "No students enrolled yet.")
        return

    columns = st.columns(GRID_COLUMNS)
    for idx, student in enumerate(students):
        with columns[idx % GRID_COLUMNS]:
            _student_card(state, student)
