"""
views/components/question_card.py

단일 문제(ExamQuestion)를 카드 형태로 렌더링하고,
보기를 선택하면 컨트롤러를 통해 답안을 제출하는 컴포넌트.
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

from pppk_exam.models.exam_model import ExamQuestion
from pppk_exam.services.exam_session import ExamSessionController


def _on_select(controller: ExamSessionController, question: ExamQuestion, radio_key: str) -> None:
    option_id = st.session_state.get(radio_key)
    if option_id is None:
        return
    if not controller.submit_answer(question.exam_question_id, option_id):
        # 제출 실패: 확인된 이전 선택으로 되돌린다 (다시 선택하면 재시도)
        st.session_state[radio_key] = controller.answers.get(question.exam_question_id)
        st.toast("Answer was not saved. Please select again.", icon="⚠️")


def render(
    controller: ExamSessionController,
    question: ExamQuestion,
    question_number: int,
    selected_option: Optional[int] = None,
) -> None:
    """
    문제 카드를 렌더링한다.

    Args:
        controller:      답안 제출을 담당하는 컨트롤러
        question:        렌더링할 문제
        question_number: 표시용 번호 (1-based)
        selected_option: 확인된(저장된) 선택 option id
    """

    # ── 문제 헤더 ──────────────────────────────────────────────────────────
    st.markdown(
        f"""
        <div style="display:flex; align-items:center; gap:10px; margin-bottom:12px;">
            <span class="question-number-badge">#{question_number}</span>
            <span style="font-size:0.8rem; color:#9ca3af;">{question.category}</span>
        </div>
        """,
        unsafe_allow_html=True,
    )

    # ── 문제 본문 ──────────────────────────────────────────────────────────
    st.markdown(
        f"""
        <div class="question-card">
            <p style="font-size:1.05rem; font-weight:600; color:#1a1a2e;
                      line-height:1.7; margin:0;">
                {question.question_text}
            </p>
        </div>
        """,
        unsafe_allow_html=True,
    )

    # ── 보기 선택 (Radio) ─────────────────────────────────────────────────
    radio_key = f"radio_{question.exam_question_id}"
    option_ids = [opt.id for opt in question.options]
    texts = {opt.id: opt.option_text for opt in question.options}

    # 위젯 상태는 항상 확인된 답안을 따른다
    st.session_state[radio_key] = selected_option if selected_option in option_ids else None

    st.radio(
        "Choose an answer",
        options=option_ids,
        format_func=lambda oid: texts[oid],
        key=radio_key,
        on_change=_on_select,
        args=(controller, question, radio_key),
        label_visibility="collapsed",
        disabled=not controller.can_navigate,
    )
