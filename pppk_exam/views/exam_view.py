"""
views/exam_view.py — 시험 풀기 화면

레이아웃:
  - st.sidebar : 타이머 + 카테고리별 문제 번호 네비게이터 + 최종 제출
  - 메인 영역  : 시작 안내(NOT_STARTED) 또는 현재 문제 카드 + 이전/다음/제출

상태 관리:
  - st.session_state.controller (ExamSessionController)
  - 답안은 백엔드 확인 후에만 controller.answers에 반영
"""

from __future__ import annotations

import streamlit as st

from pppk_exam.models.session_state import BoardPhase
from pppk_exam.services.exam_session import ExamSessionController
from pppk_exam.views.components import question_card as qcard
from pppk_exam.views.components import sidebar as nav
from pppk_exam.views.components import timer as tmr
from pppk_exam.views.context import dismissible_error, exam_api, go


def _get_controller(user_id: str) -> ExamSessionController:
    controller: ExamSessionController | None = st.session_state.get("controller")
    if controller is None or controller.user_id != user_id:
        controller = ExamSessionController(exam_api(), user_id)
        st.session_state.controller = controller
        st.session_state.pop("countdown", None)
        controller.load()
    return controller


def _finish(controller: ExamSessionController) -> None:
    if controller.finish():
        go("result")
    st.rerun()


def render() -> None:
    """시험 화면 렌더링."""

    # ── 세션 가드 ──────────────────────────────────────────────────────────
    user_id = st.session_state.get("user_id")
    if not user_id:
        st.warning("No exam session. Please log in first.")
        if st.button("Back to Login", type="primary"):
            go("login")
        return

    controller = _get_controller(user_id)
    state = controller.state

    # 완료/만료 세션은 문제 보드를 그리지 않고 결과 화면으로
    if controller.shows_results:
        go("result")
        return

    # ── 로드 실패 ──────────────────────────────────────────────────────────
    if state.phase == BoardPhase.LOADING:
        if state.error:
            st.error(state.error)
            if st.button("Retry", type="primary"):
                controller.load()
                st.rerun()
        else:
            with st.spinner("Loading..."):
                controller.load()
            st.rerun()
        return

    session = state.session

    # ── 사이드바 ───────────────────────────────────────────────────────────
    with st.sidebar:
        st.markdown(
            f"<h3 style='font-size:1rem; font-weight:700; color:#1a1a2e; margin-bottom:4px;'>"
            f"User: {user_id}</h3>"
            f"<p style='font-size:0.75rem; color:#9ca3af;'>Session: {session.session_code}</p>",
            unsafe_allow_html=True,
        )

        if state.phase == BoardPhase.IN_PROGRESS:
            tmr.render(controller)

        st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
        nav.render(controller)
        st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)

        if state.phase == BoardPhase.IN_PROGRESS:
            unanswered = state.total - state.answered_count
            if unanswered > 0:
                st.markdown(
                    f"<p style='font-size:0.8rem; color:#f59e0b; margin-bottom:8px;'>"
                    f"⚠️ Unanswered: {unanswered}</p>",
                    unsafe_allow_html=True,
                )
            if st.button(
                "Finish Exam",
                key="finish_sidebar",
                type="primary",
                disabled=not controller.can_finish,
                use_container_width=True,
            ):
                _finish(controller)

    # ── 오류 메시지 ───────────────────────────────────────────────────────
    if state.error:
        if dismissible_error(state.error, "exam"):
            controller.dismiss_error()
            st.rerun()

    # 시간 만료 후 제출 실패 → 재시도 경로
    if state.completion_pending:
        st.warning("Time is up, but the exam could not be submitted.")
        if st.button("Retry Submission", type="primary"):
            if controller.retry_completion():
                go("result")
            st.rerun()
        return

    # ── 시작 전 안내 ───────────────────────────────────────────────────────
    if state.phase == BoardPhase.NOT_STARTED:
        _, col, _ = st.columns([1, 2, 1])
        with col:
            st.markdown(
                "<h3 style='text-align:center;'>Ready to Start Your PPPK Exam</h3>"
                f"<p style='text-align:center; color:#6b7280;'>You have "
                f"{session.duration_minutes} minutes to complete "
                f"{len(session.questions)} questions.</p>",
                unsafe_allow_html=True,
            )
            if st.button("Start Exam", type="primary", use_container_width=True):
                controller.start()
                st.rerun()
        return

    # ── 문제 카드 ─────────────────────────────────────────────────────────
    current_q = controller.current_question
    if current_q is None:
        st.info("This exam has no questions.")
        return

    current_idx = state.current_index
    total = state.total

    qcard.render(
        controller,
        question=current_q,
        question_number=current_idx + 1,
        selected_option=state.answers.get(current_q.exam_question_id),
    )

    # ── 이전 / 다음 네비게이션 ────────────────────────────────────────────
    st.markdown("<br>", unsafe_allow_html=True)
    nav_left, nav_center, nav_right = st.columns([1, 2, 1])

    with nav_left:
        if st.button("← Previous", key="prev_btn", disabled=current_idx == 0,
                     use_container_width=True):
            controller.previous()
            st.rerun()

    with nav_center:
        st.markdown(
            f"<p style='text-align:center; font-size:0.85rem; color:#9ca3af; "
            f"padding-top:8px;'>{current_idx + 1} / {total}</p>",
            unsafe_allow_html=True,
        )

    with nav_right:
        if current_idx < total - 1:
            if st.button("Next →", key="next_btn", type="primary", use_container_width=True):
                controller.next()
                st.rerun()
        else:
            if st.button("Finish Exam", key="finish_last", type="primary",
                         disabled=not controller.can_finish, use_container_width=True):
                _finish(controller)
