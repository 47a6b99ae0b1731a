"""
views/context.py — 화면 공용 API 클라이언트

httpx 연결 풀은 프로세스당 하나만 만들고 모든 세션이 공유한다.
"""

import streamlit as st

import config
from pppk_exam.services.api_client import ExamAPI, PortalClient, QuestionAPI


@st.cache_resource
def get_client() -> PortalClient:
    return PortalClient(base_url=config.API_BASE_URL, timeout=config.REQUEST_TIMEOUT)


def exam_api() -> ExamAPI:
    return ExamAPI(get_client())


def question_api() -> QuestionAPI:
    return QuestionAPI(get_client())


def go(page: str) -> None:
    """페이지 전환 후 즉시 재실행."""
    st.session_state.page = page
    st.rerun()


def dismissible_error(message: str, key: str) -> bool:
    """닫기 버튼이 있는 오류 메시지. 닫기를 누르면 True."""
    col_msg, col_btn = st.columns([6, 1])
    with col_msg:
        st.error(message)
    with col_btn:
        return st.button("✕", key=f"dismiss_{key}", help="Dismiss")
