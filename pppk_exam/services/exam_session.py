"""
services/exam_session.py

시험 화면의 세션 상태 머신 (클라이언트 관점).

    LOADING → NOT_STARTED | IN_PROGRESS | COMPLETED | EXPIRED
    NOT_STARTED → IN_PROGRESS        (start, 성공 시 세션 재조회)
    IN_PROGRESS → IN_PROGRESS        (submit_answer, 백엔드 확인 후 반영)
    IN_PROGRESS → COMPLETED          (finish: 답안 1개 이상 / 타이머 만료: 무조건)
    IN_PROGRESS → COMPLETED | EXPIRED (제출 실패 후 재조회한 백엔드 상태가 종료 상태일 때)

COMPLETED, EXPIRED는 종료 상태: 화면은 곧바로 결과 페이지로 이동한다.
점수·등급 계산 없음. UI 코드 없음.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from pppk_exam.models.exam_model import ExamQuestion
from pppk_exam.models.session_state import BoardPhase, BoardState
from pppk_exam.services.api_client import ExamAPI, PortalError
from pppk_exam.services.navigator import build_navigator
from pppk_exam.services.timer import Countdown

logger = logging.getLogger(__name__)


class ExamSessionController:
    """
    한 사용자의 시험 세션을 구동한다.

    Args:
        api:     ExamAPI
        user_id: 응시자 ID
        clock:   Countdown에 넘길 현재 시각 함수 (기본: 서버 시계 보정값)
    """

    def __init__(self, api: ExamAPI, user_id: str, clock: Optional[Callable[[], float]] = None):
        self.api = api
        self.user_id = user_id
        self.clock = clock or api.client.server_now
        self.state = BoardState()

    # ── 조회용 속성 ────────────────────────────────────────────────────────

    @property
    def phase(self) -> BoardPhase:
        return self.state.phase

    @property
    def answers(self) -> dict:
        return self.state.answers

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    @property
    def shows_results(self) -> bool:
        """종료 상태이면 결과 화면으로 이동해야 한다 (문제 보드는 그리지 않음)."""
        return self.state.phase.is_terminal

    @property
    def can_navigate(self) -> bool:
        return self.state.phase == BoardPhase.IN_PROGRESS

    @property
    def can_finish(self) -> bool:
        return self.state.phase == BoardPhase.IN_PROGRESS and bool(self.state.answers)

    @property
    def current_question(self) -> Optional[ExamQuestion]:
        if self.state.session is None:
            return None
        return self.state.session.question_at(self.state.current_index)

    def navigator(self):
        if self.state.session is None:
            return []
        return build_navigator(
            self.state.session.questions, self.state.answers, self.state.current_index
        )

    def countdown(self, on_expire: Optional[Callable[[], None]] = None) -> Optional[Countdown]:
        """진행 중 세션의 카운트다운. 기본 만료 콜백은 on_timer_expired."""
        if self.state.session is None or self.state.phase != BoardPhase.IN_PROGRESS:
            return None
        return Countdown(
            self.state.session.expires_at,
            on_expire=on_expire or self.on_timer_expired,
            clock=self.clock,
        )

    def dismiss_error(self) -> None:
        self.state.error = None

    # ── 상태 전이 ─────────────────────────────────────────────────────────

    def load(self) -> BoardPhase:
        """
        세션을 조회(없으면 생성)한다.

        IN_PROGRESS 세션이면 저장된 답안을 먼저 받아 AnswerMap에 병합한 뒤
        상태를 전환하므로, 새로고침해도 진행 상황이 유지된다.
        실패 시 오류 메시지를 남기고 LOADING에 머문다 (재시도는 사용자가 직접).
        """
        self.state.phase = BoardPhase.LOADING
        try:
            session = self.api.get_or_create_exam(self.user_id)
        except PortalError as e:
            logger.error(f"시험 세션 조회 실패 (user={self.user_id}): {e.message}")
            self.state.error = e.message
            return self.state.phase

        self.state.session = session
        self.state.error = None
        phase = BoardPhase.from_status(session.status)

        if phase == BoardPhase.IN_PROGRESS:
            self._merge_stored_answers()

        if self.state.current_index >= len(session.questions):
            self.state.current_index = 0
        self.state.phase = phase
        logger.info(f"시험 세션 로드: user={self.user_id} status={phase.value}")
        return phase

    def _merge_stored_answers(self) -> None:
        try:
            stored = self.api.get_user_answers(self.user_id)
        except PortalError as e:
            # 답안 복원 실패는 사용자에게 표시하지 않는다
            logger.error(f"저장된 답안 조회 실패 (user={self.user_id}): {e.message}")
            return
        self.state.answers.update(stored)

    def start(self) -> bool:
        """NOT_STARTED → IN_PROGRESS. 성공 시 서버 expires_at을 얻기 위해 재조회."""
        if self.state.phase != BoardPhase.NOT_STARTED:
            logger.warning(f"시작할 수 없는 상태: {self.state.phase.value}")
            return False
        try:
            self.api.start_exam(self.user_id)
        except PortalError as e:
            logger.error(f"시험 시작 실패 (user={self.user_id}): {e.message}")
            self.state.error = e.message
            return False
        self.load()
        return self.state.phase == BoardPhase.IN_PROGRESS

    def submit_answer(self, exam_question_id: int, option_id: int) -> bool:
        """
        답안 제출 (fire-and-confirm).

        백엔드가 성공을 확인한 뒤에만 AnswerMap을 갱신한다 (같은 문제는 마지막 값 유지).
        실패는 로그만 남기고 기존 상태를 그대로 둔다. 다시 선택하면 재시도된다.
        """
        if self.state.phase != BoardPhase.IN_PROGRESS:
            logger.warning(f"진행 중이 아닌 세션에 답안 제출 시도: {self.state.phase.value}")
            return False
        try:
            self.api.submit_answer(self.user_id, exam_question_id, option_id)
        except PortalError as e:
            logger.error(
                f"답안 제출 실패 (question={exam_question_id}, option={option_id}): {e.message}"
            )
            return False
        self.state.answers[exam_question_id] = option_id
        return True

    def go_to(self, index: int) -> bool:
        """문제 인덱스 이동. 백엔드 호출 없음. 시작 전에는 불가."""
        if not self.can_navigate or self.state.session is None:
            return False
        if not 0 <= index < len(self.state.session.questions):
            return False
        self.state.current_index = index
        return True

    def next(self) -> bool:
        return self.go_to(self.state.current_index + 1)

    def previous(self) -> bool:
        return self.go_to(self.state.current_index - 1)

    def finish(self) -> bool:
        """사용자 '제출'. 답안이 하나도 없으면 거부한다."""
        if not self.can_finish:
            logger.info("답안이 없어 제출이 거부됨")
            return False
        return self._complete()

    def on_timer_expired(self) -> bool:
        """시간 만료 자동 제출. 답안 수와 관계없이 무조건 실행."""
        if self.state.phase != BoardPhase.IN_PROGRESS:
            return False
        logger.info(f"시험 시간 만료, 자동 제출 (user={self.user_id})")
        ok = self._complete()
        self.state.completion_pending = not ok and not self.state.phase.is_terminal
        return ok

    def retry_completion(self) -> bool:
        """시간 만료 후 제출이 실패했을 때 수동 재시도."""
        if not self.state.completion_pending:
            return False
        ok = self._complete()
        self.state.completion_pending = not ok and not self.state.phase.is_terminal
        return ok

    def _complete(self) -> bool:
        try:
            self.api.complete_exam(self.user_id)
        except PortalError as e:
            logger.error(f"시험 제출 실패 (user={self.user_id}): {e.message}")
            self.state.error = e.message
            self._sync_terminal_status()
            return False
        self.state.phase = BoardPhase.COMPLETED
        self.state.error = None
        logger.info(f"시험 제출 완료 (user={self.user_id}, answered={self.state.answered_count})")
        return True

    def _sync_terminal_status(self) -> None:
        """
        제출 실패 후 세션을 다시 조회한다.

        백엔드가 이미 종료 상태(COMPLETED/EXPIRED)로 옮겼다면 그 상태를 따라
        결과 화면으로 이동하게 하고, 아니면 현재 상태를 유지한다.
        """
        try:
            session = self.api.get_or_create_exam(self.user_id)
        except PortalError as e:
            logger.error(f"제출 실패 후 세션 재조회 실패 (user={self.user_id}): {e.message}")
            return
        phase = BoardPhase.from_status(session.status)
        if not phase.is_terminal:
            return
        self.state.session = session
        self.state.phase = phase
        self.state.error = None
        logger.info(f"백엔드 세션이 이미 종료됨: user={self.user_id} status={phase.value}")
