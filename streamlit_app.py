"""
streamlit_app.py — PPPK 시험 포털 Streamlit 진입점

실행: streamlit run streamlit_app.py  (또는 python main.py)

페이지 라우팅:
  - 시험 (login → exam → result)  : st.session_state.page
  - 관리자 대시보드 / 문제 관리     : 사이드바 영역 선택
"""

import logging
import sys

import streamlit as st

import config
from pppk_exam.views import admin_view, exam_view, login_view, question_bank_view, result_view

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    stream=sys.stdout,
)

_CSS = """
<style>
.cbt-title { text-align:center; font-size:1.6rem; font-weight:800; color:#1a1a2e; margin:24px 0 16px 0; }
.cbt-divider { border:none; border-top:1px solid #e5eaf2; margin:16px 0; }
.question-card { background:#ffffff; border:1px solid #e5eaf2; border-radius:12px; padding:20px; margin-bottom:16px; }
.question-number-badge { background:#1a1a2e; color:white; border-radius:12px; padding:2px 10px; font-size:0.8rem; font-weight:600; }
.timer-display { text-align:center; margin:8px 0; }
</style>
"""

_EXAM_PAGES = {
    "login": login_view.render,
    "exam": exam_view.render,
    "result": result_view.render,
}

_AREAS = {
    "Exam": None,
    "Admin Dashboard": admin_view.render,
    "Question Manager": question_bank_view.render,
}


def main() -> None:
    st.set_page_config(page_title="PPPK Exam", page_icon="📝", layout="wide")
    st.markdown(_CSS, unsafe_allow_html=True)

    if "page" not in st.session_state:
        st.session_state.page = "login"

    with st.sidebar:
        area = st.selectbox("Area", list(_AREAS), key="area", label_visibility="collapsed")
        st.caption(f"API: {config.API_BASE_URL}")

    render = _AREAS[area]
    if render is not None:
        render()
        return

    _EXAM_PAGES.get(st.session_state.page, login_view.render)()


main()
