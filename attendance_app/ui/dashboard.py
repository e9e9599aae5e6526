from datetime import datetime, timezone

import streamlit as st

from attendance_app.reports import dashboard_stats, local_date, recent_records, weekly_trend
from attendance_app.router import View, ViewRouter
from attendance_app.state import AttendanceState
from attendance_app.ui.sidebar import navigate


def render(state: AttendanceState, router: ViewRouter):
    now = datetime.now(timezone.utc)
    stats = dashboard_stats(state.students, state.records, now)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total Students", stats.total_students)
    c2.metric("Present Today", stats.present_today)
    c3.metric("Attendance Rate", f"{stats.attendance_rate:.0%}")
    c4.metric("Students Seen Today", stats.unique_present_today)

    left, right = st.columns([2, 1])

    with left:
        st.subheader("Weekly Attendance Trend")
        trend = weekly_trend(state.records, local_date(now))
        st.bar_chart(
            {"day": [day.strftime("%m-%d") for day, _ in trend], "attendance": [count for _, count in trend]},
            x="day",
            y="attendance",
        )

    with right:
        st.subheader("Quick Actions")
        a1, a2 = st.columns(2)
        a1.button("📷 Start Scan", on_click=navigate, args=(router, View.RECOGNITION), width="stretch")
        a2.button("➕ Add Student", on_click=navigate, args=(router, View.STUDENTS), width="stretch")

        st.markdown("##### Recent Marks")
        recent = recent_records(state.records)
        if not recent:
            st.caption("_No recent activity._")
        for record in recent:
            when = record.timestamp.astimezone().strftime("%H:%M:%S")
            st.markdown(f"**{record.student_name}** · {when} · `{record.status.value}`")
