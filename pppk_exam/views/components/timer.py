"""
views/components/timer.py

서버 만료 시각(expires_at) 기준 남은 시간을 1초마다 다시 그리는 컴포넌트.
남은 시간이 0이 되면 컨트롤러의 자동 제출이 정확히 한 번 실행된다.
"""

from __future__ import annotations

import streamlit as st

from pppk_exam.services.exam_session import ExamSessionController
from pppk_exam.services.timer import Countdown

_COLORS = {"normal": "#10b981", "warning": "#f59e0b", "danger": "#ef4444"}


def _countdown_for(controller: ExamSessionController) -> Countdown | None:
    """세션/만료 시각이 같으면 같은 Countdown을 재사용 (만료 콜백 1회 보장)."""
    session = controller.state.session
    if session is None:
        return None
    key = (controller.user_id, session.expires_at)
    cached = st.session_state.get("countdown")
    if cached is not None and cached[0] == key:
        return cached[1]
    countdown = controller.countdown()
    st.session_state.countdown = (key, countdown)
    return countdown


@st.fragment(run_every=1)
def render(controller: ExamSessionController) -> None:
    countdown = _countdown_for(controller)
    if countdown is None:
        return

    was_expired = countdown.expired
    countdown.tick()
    color = _COLORS[countdown.urgency()]
    icon = "⚠️ " if countdown.urgency() == "danger" else "⏱ "

    st.markdown(
        f'<div class="timer-display" style="color:{color}; font-weight:700; '
        f'font-size:1.4rem;">{icon}{countdown.format_remaining()}</div>',
        unsafe_allow_html=True,
    )

    # 방금 만료되었으면 (콜백에서 제출 완료) 전체 화면을 다시 그린다
    if countdown.expired and not was_expired:
        st.rerun()
