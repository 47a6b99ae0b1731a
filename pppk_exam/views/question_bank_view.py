"""
views/question_bank_view.py — 문제 관리 화면

기능:
  - 비밀번호 입력 → AccessGrant 발급 (보안 경계 아님)
  - 카테고리 필터 / 검색(300ms 디바운스) / 페이지 크기 / 페이지 이동
  - 문제별 보기 점수 수정 (성공 후 목록·상세 동시 반영)
  - 현재 목록 JSON 다운로드
"""

from __future__ import annotations

import time

import streamlit as st

import config
from pppk_exam.models.question_model import BankQuestion
from pppk_exam.services.access import AccessDenied, AccessGrant, check_grant, grant_access
from pppk_exam.services.question_bank import QuestionBankEditor
from pppk_exam.views.context import question_api

_GRANT_KEY = "question_access"


def _render_gate() -> None:
    """접근 허가 입력 폼."""
    _, col, _ = st.columns([1, 2, 1])
    with col:
        st.markdown("#### Access Protected Area")
        st.caption("This area is password protected. Please enter the password to continue.")
        with st.form("question_access_form"):
            password = st.text_input("Password", type="password", placeholder="Enter password")
            submitted = st.form_submit_button("Access Questions", type="primary",
                                              use_container_width=True)
        if submitted:
            try:
                st.session_state[_GRANT_KEY] = grant_access(password)
            except AccessDenied as e:
                st.error(str(e))
                return
            st.rerun()


def _get_editor() -> QuestionBankEditor:
    editor: QuestionBankEditor | None = st.session_state.get("question_editor")
    if editor is None:
        editor = QuestionBankEditor(question_api())
        editor.load_categories()
        editor.refresh()
        st.session_state.question_editor = editor
    return editor


def _render_options(editor: QuestionBankEditor, question: BankQuestion) -> None:
    """상세: 보기별 점수 편집."""
    for opt in question.options:
        c1, c2, c3 = st.columns([6, 2, 1])
        c1.write(opt.option_text)
        new_score = c2.number_input(
            "Score",
            min_value=0,
            max_value=10,
            step=1,
            value=opt.score,
            key=f"score_{question.id}_{opt.id}",
            label_visibility="collapsed",
        )
        if c3.button("Save", key=f"save_{question.id}_{opt.id}",
                     disabled=int(new_score) == opt.score):
            editor.update_score(question.id, opt.id, int(new_score))
            st.rerun()


def _render_editor(editor: QuestionBankEditor) -> None:
    st.markdown("## Question Management")

    # ── 필터 ───────────────────────────────────────────────────────────────
    f1, f2, f3, f4 = st.columns([3, 4, 2, 1])
    with f1:
        categories = [""] + editor.categories
        category = st.selectbox(
            "Filter by Category",
            categories,
            format_func=lambda c: c or "All Categories",
            key="qb_category",
        )
    with f2:
        search = st.text_input("Search Question", key="qb_search",
                               placeholder="Search by question text...")
    with f3:
        limit = st.selectbox(
            "Per page",
            config.PAGE_SIZE_CHOICES,
            index=config.PAGE_SIZE_CHOICES.index(config.DEFAULT_PAGE_SIZE),
            format_func=lambda n: "All" if n == 0 else str(n),
            key="qb_limit",
        )
    with f4:
        st.markdown("<br>", unsafe_allow_html=True)
        if st.button("Refresh", use_container_width=True):
            editor.refresh()

    editor.set_category(category)
    editor.set_limit(limit)
    if editor.set_search(search) or editor.search_pending:
        # 새 입력이 들어오면 Streamlit이 이 실행을 중단하므로 대기 자체가 디바운스가 된다
        time.sleep(editor.debounce_remaining())
        editor.flush_search()

    # ── 알림 ───────────────────────────────────────────────────────────────
    if editor.error:
        st.error(editor.error)
    if editor.success:
        st.success(editor.success)
        editor.success = None

    # ── 목록 ───────────────────────────────────────────────────────────────
    head, dl = st.columns([4, 1])
    head.markdown(f"**Questions List** · {editor.pagination.total_items} Questions")
    dl.download_button(
        "Download JSON",
        data=editor.export_json(),
        file_name="questions.json",
        mime="application/json",
        use_container_width=True,
    )

    if not editor.questions:
        st.info(editor.empty_message())
        return

    for i, question in enumerate(editor.questions):
        is_open = editor.selected is not None and editor.selected.id == question.id
        label = f"{editor.row_number(i)}. [{question.category}] {question.question_text}"
        with st.expander(label, expanded=is_open):
            st.caption(f"{len(question.options)} options")
            if is_open:
                _render_options(editor, editor.selected)
                if st.button("Close", key=f"close_{question.id}"):
                    editor.close_detail()
                    st.rerun()
            else:
                for opt in question.options:
                    st.write(f"• {opt.option_text} — **{opt.score}**")
                if st.button("Edit Scores", key=f"edit_{question.id}"):
                    editor.open_detail(question.id)
                    st.rerun()

    # ── 페이지 이동 ───────────────────────────────────────────────────────
    pages = editor.pagination_range()
    if not pages:
        return
    cols = st.columns(len(pages) + 2)
    if cols[0].button("‹", key="page_prev", disabled=editor.page <= 1):
        editor.set_page(editor.page - 1)
        st.rerun()
    for col, number in zip(cols[1:-1], pages):
        if col.button(str(number), key=f"page_{number}",
                      type="primary" if number == editor.page else "secondary"):
            editor.set_page(number)
            st.rerun()
    if cols[-1].button("›", key="page_next",
                       disabled=editor.page >= editor.pagination.total_pages):
        editor.set_page(editor.page + 1)
        st.rerun()


def render() -> None:
    grant: AccessGrant | None = st.session_state.get(_GRANT_KEY)
    if not check_grant(grant):
        st.session_state.pop(_GRANT_KEY, None)
        _render_gate()
        return

    _, logout = st.columns([6, 1])
    if logout.button("Logout", use_container_width=True):
        st.session_state.pop(_GRANT_KEY, None)
        st.session_state.pop("question_editor", None)
        st.rerun()

    _render_editor(_get_editor())
