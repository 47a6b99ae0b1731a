"""
views/login_view.py — 로그인 / 시작 화면

사용자 ID를 입력하면 시험 세션을 조회(없으면 생성)한 뒤 시험 화면으로 이동한다.
"""

from __future__ import annotations

import streamlit as st

from pppk_exam.services.api_client import PortalError
from pppk_exam.views.context import exam_api, go


def _reset_exam_state() -> None:
    for key in ["controller", "countdown", "results", "detailed_answers", "result_category"]:
        st.session_state.pop(key, None)
    for k in [k for k in st.session_state if str(k).startswith("radio_")]:
        del st.session_state[k]


def render() -> None:
    """로그인 화면 렌더링."""

    _, col, _ = st.columns([1, 2, 1])

    with col:
        st.markdown('<p class="cbt-title">PPPK Exam Login</p>', unsafe_allow_html=True)

        with st.form("login_form"):
            user_id = st.text_input("User ID", key="login_user_id")
            submitted = st.form_submit_button(
                "Create/Start Exam", type="primary", use_container_width=True
            )

        if not submitted:
            return

        user_id = user_id.strip()
        if not user_id:
            st.error("Please enter your User ID.")
            return

        try:
            with st.spinner("Loading..."):
                exam_api().get_or_create_exam(user_id)
        except PortalError as e:
            st.error(e.message)
            return

        _reset_exam_state()
        st.session_state.user_id = user_id
        go("exam")
