"""
views/components/sidebar.py

카테고리별 문제 번호 네비게이션 그리드 컴포넌트.
각 번호를 클릭하면 해당 문제로 바로 이동한다 (백엔드 호출 없음).
"""

from __future__ import annotations

import streamlit as st

from pppk_exam.services.exam_session import ExamSessionController

_COLS_PER_ROW = 5
_MARKERS = {"current": "▶", "answered": "✓", "unanswered": ""}


def render(controller: ExamSessionController) -> None:
    """
    사이드바에 진행 현황과 카테고리별 문제 번호 버튼을 렌더링한다.

    표시:
      - 현재 문제: ▶ + primary 버튼
      - 답한 문제: ✓
      - 미답 문제: 번호만
    시험 시작 전에는 모든 버튼이 비활성화된다.
    """
    state = controller.state
    total = state.total
    answered = state.answered_count

    # ── 진행 현황 ──────────────────────────────────────────────────────────
    st.markdown(
        f"""
        <div style="display:flex; justify-content:space-between;
                    font-size:0.8rem; color:#6b7280; margin-bottom:4px;">
            <span>Questions</span>
            <span><b>{answered}</b> / {total}</span>
        </div>
        """,
        unsafe_allow_html=True,
    )
    st.progress(answered / total if total > 0 else 0)

    # ── 카테고리별 번호 그리드 ─────────────────────────────────────────────
    disabled = not controller.can_navigate

    for group in controller.navigator():
        st.markdown(
            f"<p style='font-size:0.78rem; color:#9ca3af; font-weight:600; "
            f"margin:12px 0 6px 0;'>{group.category} "
            f"({group.answered_count}/{len(group.items)})</p>",
            unsafe_allow_html=True,
        )
        for row_start in range(0, len(group.items), _COLS_PER_ROW):
            row = group.items[row_start : row_start + _COLS_PER_ROW]
            cols = st.columns(_COLS_PER_ROW)
            for col, item in zip(cols, row):
                with col:
                    label = f"{_MARKERS[item.status]}{item.number}"
                    if st.button(
                        label,
                        key=f"nav_{item.exam_question_id}",
                        type="primary" if item.current else "secondary",
                        disabled=disabled,
                        help=f"Question {item.number}",
                    ):
                        controller.go_to(item.index)
                        st.rerun()
