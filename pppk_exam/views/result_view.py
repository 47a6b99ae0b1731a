"""
views/result_view.py — 시험 결과 화면

표시 내용 (모두 백엔드가 계산한 값):
  - 종합 등급, 점수 / 만점, 백분율
  - 합격 / 불합격 배지
  - 카테고리별 점수·등급·합격 여부
  - 카테고리 상세 (문제별 답안과 점수)
  - 처음으로 버튼
"""

from __future__ import annotations

import streamlit as st

from pppk_exam.models.exam_model import ExamResults
from pppk_exam.services.api_client import PortalError
from pppk_exam.views.components import category_answers
from pppk_exam.views.context import exam_api


def _go_home() -> None:
    """처음 화면으로 이동하며 시험 상태 초기화."""
    for key in ["user_id", "controller", "countdown", "results", "detailed_answers", "result_category"]:
        st.session_state.pop(key, None)
    for k in [k for k in st.session_state if str(k).startswith("radio_")]:
        del st.session_state[k]
    st.session_state.page = "login"


def _load_results(user_id: str) -> ExamResults | None:
    cached = st.session_state.get("results")
    if cached is not None and cached[0] == user_id:
        return cached[1]
    try:
        results = exam_api().get_results(user_id)
    except PortalError as e:
        st.error(e.message)
        if st.button("Retry", type="primary"):
            st.rerun()
        return None
    st.session_state.results = (user_id, results)
    return results


def _render_detail(user_id: str, category: str) -> None:
    details = st.session_state.get("detailed_answers")
    if details is None or details[0] != user_id:
        try:
            details = (user_id, exam_api().get_detailed_answers(user_id))
        except PortalError as e:
            st.error(e.message)
            return
        st.session_state.detailed_answers = details
    category_answers.render(category, details[1].get(category, []))
    if st.button("Close", key="close_detail"):
        st.session_state.pop("result_category", None)
        st.rerun()


def render() -> None:
    """결과 화면 렌더링."""

    user_id = st.session_state.get("user_id")
    if not user_id:
        st.warning("No result information.")
        if st.button("Back to Home", type="primary"):
            _go_home()
            st.rerun()
        return

    results = _load_results(user_id)
    if results is None:
        return

    summary = results.summary

    _, col, _ = st.columns([0.8, 2.5, 0.8])

    with col:
        st.markdown(
            "<h3 style='text-align:center; margin-bottom:16px;'>Exam Completed</h3>",
            unsafe_allow_html=True,
        )

        score_color = "#10b981" if summary.is_passed else "#ef4444"
        st.markdown(
            f'<p class="score-big" style="text-align:center; font-size:3rem; font-weight:800; '
            f'color:{score_color}; margin:0;">{summary.overall_grade}</p>',
            unsafe_allow_html=True,
        )

        s1, s2, s3 = st.columns(3)
        s1.metric("Score", f"{summary.total_score} / {summary.max_score}")
        s2.metric("Percentage", f"{summary.overall_percentage:.2f}%")
        s3.metric("Status", "Passed" if summary.is_passed else "Failed")

        if summary.completed_at:
            st.caption(f"Completed at {summary.completed_at:%Y-%m-%d %H:%M}")

        st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)

        # ── 카테고리별 결과 ───────────────────────────────────────────────
        st.markdown("##### Category Breakdown")
        for cat in results.results_by_category:
            c1, c2, c3, c4, c5 = st.columns([3, 2, 1, 1, 2])
            c1.write(cat.category)
            c2.write(f"{cat.total_score} / {cat.max_score}")
            c3.write(cat.grade)
            c4.write("✅" if cat.is_passed else "❌")
            if c5.button("Detail", key=f"detail_{cat.category}"):
                st.session_state.result_category = cat.category
                st.rerun()

        selected = st.session_state.get("result_category")
        if selected:
            st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
            _render_detail(user_id, selected)

        st.markdown("<br>", unsafe_allow_html=True)
        st.button("Back to Home", key="home_btn", use_container_width=True, on_click=_go_home)
