"""
services/question_bank.py

문제 관리(Question Bank Editor) 화면의 목록 상태.

  - 필터: category / search / page / limit (limit=0 → 전체)
  - 카테고리·페이지·페이지 크기 변경은 즉시 조회, 검색어는 300ms 디바운스 후 조회
  - 조회마다 증가하는 요청 번호를 붙이고, 가장 마지막에 보낸 요청의 응답만 반영
  - 보기 점수 수정은 confirm-then-update: 성공 응답 후에만 목록·상세에 반영

UI 코드 없음.
"""

from __future__ import annotations

import itertools
import json
import logging
import time
from typing import Callable, List, Optional

import config
from pppk_exam.models.question_model import BankQuestion, Pagination, QuestionPage
from pppk_exam.services.api_client import PortalError, QuestionAPI

logger = logging.getLogger(__name__)

_MAX_VISIBLE_PAGES = 5


class QuestionBankEditor:
    """
    Args:
        api:       QuestionAPI
        page_size: 기본 페이지 크기
        debounce:  검색어 디바운스 (초)
        clock:     단조 증가 시각 함수 (디바운스 계산용)
    """

    def __init__(
        self,
        api: QuestionAPI,
        page_size: int = config.DEFAULT_PAGE_SIZE,
        debounce: float = config.SEARCH_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api = api
        self.debounce = debounce
        self.clock = clock

        self.category = ""
        self.search = ""
        self.page = 1
        self.limit = page_size

        self.categories: List[str] = []
        self.questions: List[BankQuestion] = []
        self.pagination = Pagination(items_per_page=page_size)
        self.selected: Optional[BankQuestion] = None

        self.error: Optional[str] = None
        self.success: Optional[str] = None

        self._seq = itertools.count(1)
        self._latest_seq = 0
        self._search_edited_at: Optional[float] = None

    # ── 필터 ───────────────────────────────────────────────────────────────

    def params(self) -> dict:
        return QuestionAPI.build_params(self.category, self.search, self.page, self.limit)

    def set_category(self, category: str) -> bool:
        if category == self.category:
            return False
        self.category = category
        self.page = 1
        self.refresh()
        return True

    def set_search(self, text: str) -> bool:
        """검색어 변경. 조회는 debounce_remaining()이 0이 된 뒤 flush_search()로."""
        if text == self.search:
            return False
        self.search = text
        self.page = 1
        self._search_edited_at = self.clock()
        return True

    def debounce_remaining(self) -> float:
        if self._search_edited_at is None:
            return 0.0
        return max(0.0, self.debounce - (self.clock() - self._search_edited_at))

    @property
    def search_pending(self) -> bool:
        return self._search_edited_at is not None

    def flush_search(self) -> bool:
        """디바운스가 끝난 검색어 조회를 실행한다. 아직이면 False."""
        if self._search_edited_at is None or self.debounce_remaining() > 0:
            return False
        self._search_edited_at = None
        self.refresh()
        return True

    def set_page(self, page: int) -> bool:
        total = self.pagination.total_pages
        if page < 1 or (total and page > total) or page == self.page:
            return False
        self.page = page
        self.refresh()
        return True

    def set_limit(self, limit: int) -> bool:
        if limit < 0 or limit == self.limit:
            return False
        self.limit = limit
        self.page = 1
        self.refresh()
        return True

    # ── 조회 ───────────────────────────────────────────────────────────────

    def load_categories(self) -> bool:
        try:
            self.categories = self.api.get_categories()
        except PortalError as e:
            logger.error(f"카테고리 조회 실패: {e.message}")
            self.error = "Failed to load categories"
            return False
        return True

    def issue(self) -> int:
        """새 조회 요청 번호를 발급한다."""
        self._latest_seq = next(self._seq)
        return self._latest_seq

    def apply(self, seq: int, page: QuestionPage) -> bool:
        """가장 마지막 요청의 응답일 때만 목록을 교체한다."""
        if seq != self._latest_seq:
            logger.info(f"이전 조회 응답 무시 (seq={seq}, latest={self._latest_seq})")
            return False
        self.questions = page.questions
        self.pagination = page.pagination
        return True

    def refresh(self) -> bool:
        """
        현재 필터로 목록을 조회한다.

        editor는 st.session_state에 있어 여러 스크립트 실행(전체 재실행, fragment)이
        함께 쓴다. 이전 실행이 응답을 기다리는 사이 새 실행이 조회를 보내면,
        늦게 도착한 이전 응답은 apply()에서 버려진다.
        """
        seq = self.issue()
        params = self.params()
        logger.debug(f"문제 목록 조회 #{seq}: {params}")
        try:
            page = self.api.get_questions(
                category=self.category, search=self.search, page=self.page, limit=self.limit
            )
        except PortalError as e:
            if seq == self._latest_seq:
                logger.error(f"문제 목록 조회 실패: {e.message}")
                self.error = e.message
            return False
        if self.apply(seq, page):
            self.error = None
            return True
        return False

    # ── 상세 / 점수 수정 ──────────────────────────────────────────────────

    def open_detail(self, question_id: int) -> Optional[BankQuestion]:
        for q in self.questions:
            if q.id == question_id:
                self.selected = q
                return q
        return None

    def close_detail(self) -> None:
        self.selected = None

    def update_score(self, question_id: int, option_id: int, score: int) -> bool:
        """
        보기 점수를 수정한다.

        성공 응답을 받은 뒤에 목록과 열려 있는 상세 화면을 함께 갱신한다.
        실패하면 아무것도 바꾸지 않고 오류 메시지만 남긴다.
        """
        self.error = None
        self.success = None
        if score < 0:
            self.error = "Score must be a non-negative number"
            return False
        try:
            self.api.update_option_score(question_id, option_id, score)
        except PortalError as e:
            logger.error(f"점수 수정 실패 (question={question_id}, option={option_id}): {e.message}")
            self.error = e.message
            return False

        self.questions = [
            q.with_option_score(option_id, score) if q.id == question_id else q
            for q in self.questions
        ]
        if self.selected is not None and self.selected.id == question_id:
            self.selected = self.selected.with_option_score(option_id, score)

        logger.info(f"점수 수정: question={question_id} option={option_id} score={score}")
        self.success = "Score updated successfully!"
        return True

    # ── 표시용 헬퍼 ───────────────────────────────────────────────────────

    def pagination_range(self) -> List[int]:
        """현재 페이지 주변 최대 5개의 페이지 번호."""
        total = self.pagination.total_pages
        if not total or total <= 1:
            return []
        start = max(1, self.page - 2)
        end = min(total, start + _MAX_VISIBLE_PAGES - 1)
        if end - start < _MAX_VISIBLE_PAGES - 1:
            start = max(1, end - _MAX_VISIBLE_PAGES + 1)
        return list(range(start, end + 1))

    def row_number(self, index: int) -> int:
        """페이지를 넘어 이어지는 행 번호 (1-based)."""
        per_page = self.limit or len(self.questions)
        return (self.page - 1) * per_page + index + 1

    def empty_message(self) -> str:
        if self.search:
            suffix = f' in category "{self.category}"' if self.category else ""
            return f'No questions found matching "{self.search}"{suffix}'
        if self.category:
            return f'No questions found for category "{self.category}"'
        return "No questions found"

    def export_json(self) -> str:
        """현재 목록을 JSON 문자열로 (다운로드용)."""
        payload = {
            "filters": {"category": self.category, "search": self.search},
            "pagination": self.pagination.model_dump(),
            "questions": [q.model_dump() for q in self.questions],
        }
        return json.dumps(payload, ensure_ascii=False, indent=2)
