"""
views/components/user_detail.py

관리자 대시보드의 응시자 상세 패널.
"""

from __future__ import annotations

import streamlit as st

from pppk_exam.models.dashboard_model import UserDashboard


def render(data: UserDashboard) -> None:
    st.markdown(f"#### User: {data.user_id}")

    if not data.has_exam:
        st.info("This user has not taken an exam yet.")
        return

    status = data.exam_status.value.replace("_", " ") if data.exam_status else "-"
    st.markdown(f"**Status:** {status}")

    if data.exam_session:
        s = data.exam_session
        expires = f"{s.expires_at:%Y-%m-%d %H:%M}" if s.expires_at else "-"
        st.markdown(
            f"**Session:** {s.session_code} · **Duration:** {s.duration} min · **Expires:** {expires}"
        )

    if data.progress_info:
        p = data.progress_info
        c1, c2, c3 = st.columns(3)
        c1.metric("Answered", p.answered_questions)
        c2.metric("Total", p.total_questions)
        remaining = f"{p.remaining_time_minutes:.0f} min" if p.remaining_time_minutes is not None else "-"
        c3.metric("Remaining", remaining)
        st.progress(p.answered_questions / p.total_questions if p.total_questions else 0)

    if data.exam_results:
        summary = data.exam_results.summary
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Answered", f"{summary.total_answered or 0} / {summary.total_questions or 0}")
        c2.metric("Score", f"{summary.total_score} / {summary.max_score}")
        c3.metric("Percentage", f"{summary.overall_percentage:.1f}%")
        c4.metric("Grade", summary.overall_grade)
        st.markdown("Passed ✅" if summary.is_passed else "Failed ❌")

        rows = [
            {
                "Category": r.category,
                "Score": f"{r.total_score} / {r.max_score}",
                "Percentage": f"{r.percentage:.1f}%",
                "Grade": r.grade,
                "Passed": "Yes" if r.is_passed else "No",
            }
            for r in data.exam_results.results_by_category
        ]
        st.dataframe(rows, hide_index=True, use_container_width=True)

        if summary.completed_at:
            st.caption(f"Completed at {summary.completed_at:%Y-%m-%d %H:%M}")
