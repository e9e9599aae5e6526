import streamlit as st

from attendance_app.reports import records_to_csv, search_records
from attendance_app.state import AttendanceState


def _clear(state: AttendanceState):
    removed = state.clear_records()
    st.session_state["confirm_clear"] = False
    st.toast(f"Removed {removed} records", icon="🗑️")


def render(state: AttendanceState):
    query = st.text_input("Search logs", key="log_search", placeholder="Student name or id")
    records = search_records(state.records, query)

    st.download_button(
        "📥 Export to CSV",
        records_to_csv(records),
        file_name="attendance_records.csv",
        mime="text/csv",
        disabled=not records,
    )

    if not records:
        st.info("No attendance records found yet.")
    else:
        # Records of deleted students still show with the name they were logged under
        enrolled = {s.id for s in state.students}
        rows = []
        for r in records:
            ts = r.timestamp.astimezone()
            rows.append({
                "Student": r.student_name,
                "Date": ts.strftime("%b %d, %Y"),
                "Time": ts.strftime("%H:%M:%S"),
                "Status": r.status.value,
                "Enrolled": "yes" if r.student_id in enrolled else "removed",
                "ID": f"#{r.id.upper()}",
            })
        st.dataframe(rows, hide_index=True, width="stretch")
    st.caption(f"Showing {len(records)} entries")

    with st.expander("Clear history"):
        confirm = st.checkbox("I understand this deletes every attendance record", key="confirm_clear")
        st.button("🗑️ Clear all records", disabled=not confirm or not state.records, on_click=_clear, args=(state,))
