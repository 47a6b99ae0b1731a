"""
views/admin_view.py — 관리자 대시보드

  - 상태별 응시자 수 카드
  - 응시자 목록 (30초마다 자동 새로고침, 그 사이의 재실행은 캐시 사용)
  - user_id 검색 + 상태 필터 (클라이언트 필터)
  - 응시자 상세 패널
"""

from __future__ import annotations

from datetime import datetime

import streamlit as st

import config
from pppk_exam.models.exam_model import ExamStatus
from pppk_exam.services.roster import STATUS_ALL, AdminRoster
from pppk_exam.views.components import user_detail
from pppk_exam.views.context import exam_api

_STATUS_OPTIONS = [STATUS_ALL, "COMPLETED", "IN_PROGRESS", "NOT_STARTED", "EXPIRED"]
_COUNT_CARDS = [
    ("Completed", ExamStatus.COMPLETED),
    ("In Progress", ExamStatus.IN_PROGRESS),
    ("Not Started", ExamStatus.NOT_STARTED),
    ("Expired", ExamStatus.EXPIRED),
]


def _fmt(value: datetime | None) -> str:
    return f"{value:%Y-%m-%d %H:%M}" if value else "-"


def _get_roster() -> AdminRoster:
    roster: AdminRoster | None = st.session_state.get("roster")
    if roster is None:
        # fragment 주기보다 1초 짧게: 자동 새로고침 tick마다 다시 조회된다
        roster = AdminRoster(exam_api(), max_age=config.ROSTER_REFRESH_SECONDS - 1)
        st.session_state.roster = roster
    return roster


def _render_counts(roster: AdminRoster) -> None:
    counts = roster.status_counts()
    for col, (label, status) in zip(st.columns(len(_COUNT_CARDS)), _COUNT_CARDS):
        col.metric(label, counts[status])


@st.fragment(run_every=config.ROSTER_REFRESH_SECONDS)
def _render_table(roster: AdminRoster, search_term: str, status: str) -> None:
    roster.refresh_if_stale()

    if roster.error:
        st.error(roster.error)
        if st.button("Retry", key="roster_retry"):
            roster.load()
            st.rerun()
        return

    _render_counts(roster)

    users = roster.filtered(search_term, status)
    st.caption(f"{len(users)} of {len(roster.users)} users")

    rows = [
        {
            "User ID": u.user_id,
            "Session": u.session_code or "-",
            "Status": u.exam_status.value if u.exam_status else "-",
            "Started": _fmt(u.started_at),
            "Completed": _fmt(u.completed_at),
            "Score": f"{u.total_score} / {u.max_score}" if u.total_score is not None else "-",
            "Percentage": f"{u.percentage:.1f}%" if u.percentage is not None else "-",
            "Grade": u.grade or "-",
            "Passed": "-" if u.is_passed is None else ("Yes" if u.is_passed else "No"),
        }
        for u in users
    ]
    st.dataframe(rows, hide_index=True, use_container_width=True)


def render() -> None:
    roster = _get_roster()

    head, refresh = st.columns([4, 1])
    with head:
        st.markdown("## PPPK Exam Admin Dashboard")
    with refresh:
        if st.button("Refresh", use_container_width=True):
            roster.load()
            st.rerun()

    # ── 필터 ───────────────────────────────────────────────────────────────
    f1, f2 = st.columns([3, 2])
    with f1:
        search_term = st.text_input("Search User ID", placeholder="Enter user ID...")
    with f2:
        status = st.selectbox(
            "Filter by Status",
            _STATUS_OPTIONS,
            format_func=lambda s: "All Status" if s == STATUS_ALL else s.replace("_", " ").title(),
        )

    _render_table(roster, search_term, status)

    # ── 응시자 상세 ───────────────────────────────────────────────────────
    st.markdown('<hr class="cbt-divider">', unsafe_allow_html=True)
    user_ids = [u.user_id for u in roster.filtered(search_term, status)]
    if not user_ids:
        return

    d1, d2 = st.columns([3, 1])
    with d1:
        selected = st.selectbox("User details", user_ids, key="detail_user")
    with d2:
        st.markdown("<br>", unsafe_allow_html=True)
        if st.button("View Details", use_container_width=True):
            roster.load_detail(selected)

    if roster.detail_error:
        st.error(roster.detail_error)
    elif roster.detail is not None:
        user_detail.render(roster.detail)
        if st.button("Close", key="close_user_detail"):
            roster.close_detail()
            st.rerun()
