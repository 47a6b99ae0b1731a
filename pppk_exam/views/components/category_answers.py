"""
views/components/category_answers.py

결과 화면의 카테고리 상세: 문제별 선택 답안, 최고 점수 보기, 획득 점수.
"""

from __future__ import annotations

import streamlit as st

from pppk_exam.models.exam_model import DetailedAnswer


def render(category: str, answers: list[DetailedAnswer]) -> None:
    total = sum(a.score for a in answers)
    max_total = sum(a.max_score for a in answers)

    st.markdown(
        f"<h4 style='margin-bottom:4px;'>{category}</h4>"
        f"<p style='font-size:0.85rem; color:#6b7280;'>{total} / {max_total} points · "
        f"{len(answers)} questions</p>",
        unsafe_allow_html=True,
    )

    if not answers:
        st.info("No answers for this category.")
        return

    for number, answer in enumerate(answers, start=1):
        icon = "✅" if answer.is_correct else ("❌" if answer.selected_option else "⬜")
        with st.expander(f"{icon} {number}. {answer.question_text}  ({answer.score}/{answer.max_score})"):
            st.markdown(f"**Your answer:** {answer.selected_option or '_Not answered_'}")
            if not answer.is_correct and answer.correct_option:
                best = f" ({answer.correct_score} points)" if answer.correct_score is not None else ""
                st.markdown(f"**Best answer:** {answer.correct_option}{best}")
            if answer.answered_at:
                st.caption(f"Answered at {answer.answered_at:%Y-%m-%d %H:%M:%S}")
