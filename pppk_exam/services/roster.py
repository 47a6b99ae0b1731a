"""
services/roster.py

관리자 대시보드의 응시자 목록 상태.
검색/상태 필터는 클라이언트에서만 적용한다.
목록은 refresh_if_stale()로 일정 주기마다만 다시 조회한다.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional

import config
from pppk_exam.models.dashboard_model import UserDashboard, UserSummary
from pppk_exam.models.exam_model import ExamStatus
from pppk_exam.services.api_client import ExamAPI, PortalError

logger = logging.getLogger(__name__)

STATUS_ALL = "ALL"


class AdminRoster:
    """
    Args:
        api:     ExamAPI
        max_age: 이 시간(초)이 지나야 refresh_if_stale()가 다시 조회한다
        clock:   단조 증가 시각 함수
    """

    def __init__(
        self,
        api: ExamAPI,
        max_age: float = config.ROSTER_REFRESH_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.max_age = max_age
        self.clock = clock
        self.users: List[UserSummary] = []
        self.error: Optional[str] = None
        self.detail: Optional[UserDashboard] = None
        self.detail_error: Optional[str] = None
        self._loaded_at: Optional[float] = None

    def load(self) -> bool:
        try:
            self.users = self.api.get_all_users_dashboard()
        except PortalError as e:
            logger.error(f"응시자 목록 조회 실패: {e.message}")
            self.error = e.message
            return False
        self.error = None
        self._loaded_at = self.clock()
        return True

    @property
    def is_stale(self) -> bool:
        return self._loaded_at is None or self.clock() - self._loaded_at >= self.max_age

    def refresh_if_stale(self) -> bool:
        """마지막 성공 조회 후 max_age가 지났을 때만 조회. 조회했으면 True."""
        if not self.is_stale:
            return False
        self.load()
        return True

    def filtered(self, search_term: str = "", status: str = STATUS_ALL) -> List[UserSummary]:
        """user_id 부분 일치(대소문자 무시) + 상태 필터."""
        term = search_term.strip().lower()
        result = []
        for user in self.users:
            if term and term not in user.user_id.lower():
                continue
            if status != STATUS_ALL and (user.exam_status is None or user.exam_status.value != status):
                continue
            result.append(user)
        return result

    def status_counts(self) -> Dict[ExamStatus, int]:
        """상태별 응시자 수 (필터와 무관한 전체 기준). 상태 없는 응시자는 세지 않는다."""
        counts = {status: 0 for status in ExamStatus}
        for user in self.users:
            if user.exam_status is not None:
                counts[user.exam_status] += 1
        return counts

    def load_detail(self, user_id: str) -> Optional[UserDashboard]:
        try:
            self.detail = self.api.get_user_dashboard(user_id)
        except PortalError as e:
            logger.error(f"응시자 상세 조회 실패 (user={user_id}): {e.message}")
            self.detail = None
            self.detail_error = e.message
            return None
        self.detail_error = None
        return self.detail

    def close_detail(self) -> None:
        self.detail = None
        self.detail_error = None
