"""
services/api_client.py

시험 / 문제 은행 백엔드 REST API 클라이언트 (httpx 기반).

모든 응답은 {success, data?, error?, message?} 봉투(envelope) 형식이며,
HTTP 상태 코드와 관계없이 봉투의 success 값으로 성공 여부를 판단한다.
요청 형태 구성과 응답 검증 외의 로직은 두지 않는다.

오류 분류:
  - ApiConnectionError : 응답 자체를 받지 못함 (네트워크/전송 오류)
  - BackendError       : 응답은 받았으나 success=false 이거나 형식이 잘못됨
"""

from __future__ import annotations

import logging
import time
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

import config
from pppk_exam.models.dashboard_model import UserDashboard, UserRoster, UserSummary
from pppk_exam.models.exam_model import (
    DetailedAnswer, ExamResults, ExamSession, coerce_answer_map,
)
from pppk_exam.models.question_model import BankOption, QuestionPage

logger = logging.getLogger(__name__)

CONNECTION_FAILED = "Connection failed. Please try again."


class PortalError(Exception):
    """포털 클라이언트 오류의 공통 부모."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiConnectionError(PortalError):
    """응답을 받지 못한 경우 (연결 실패, 타임아웃 등)."""


class BackendError(PortalError):
    """응답은 받았으나 실패를 알린 경우. message는 화면에 그대로 표시한다."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PortalClient:
    """
    봉투 형식을 해석하는 얇은 HTTP 래퍼.

    Args:
        base_url: API 기본 경로 (예: http://localhost:8080/api/v1)
        timeout:  요청 타임아웃 (초)
        http:     주입할 httpx.Client (테스트에서 MockTransport / TestClient 사용)
        sync_clock: True이면 응답 Date 헤더로 서버 시계 오차를 추정
    """

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        timeout: float = config.REQUEST_TIMEOUT,
        http: Optional[httpx.Client] = None,
        sync_clock: bool = config.SYNC_SERVER_CLOCK,
    ):
        self._http = http or httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )
        self._sync_clock = sync_clock
        self.clock_offset = 0.0  # 서버 시각 - 로컬 시각 (초)

    # ── 저수준 요청 ───────────────────────────────────────────────────────

    def request(self, method: str, path: str, **kwargs) -> Any:
        """요청을 보내고 봉투의 data를 반환한다. 실패 시 PortalError 하위 예외."""
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.error(f"API 연결 실패: {method} {path} - {e}")
            raise ApiConnectionError(CONNECTION_FAILED) from e

        try:
            body = resp.json()
        except ValueError:
            logger.error(f"API 응답 형식 오류: {method} {path} ({resp.status_code})")
            raise BackendError(
                f"Unexpected response from server ({resp.status_code})",
                resp.status_code,
            )

        if not isinstance(body, dict) or not body.get("success"):
            message = ""
            if isinstance(body, dict):
                message = body.get("error") or body.get("message") or ""
            message = message or f"Request failed ({resp.status_code})"
            logger.warning(f"API 실패 응답: {method} {path} - {message}")
            raise BackendError(message, resp.status_code)

        self._sample_clock(resp)
        return body.get("data")

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request("PUT", path, **kwargs)

    def close(self) -> None:
        self._http.close()

    # ── 서버 시계 ─────────────────────────────────────────────────────────

    def _sample_clock(self, resp: httpx.Response) -> None:
        if not self._sync_clock:
            return
        date_header = resp.headers.get("date")
        if not date_header:
            return
        try:
            server_ts = parsedate_to_datetime(date_header).timestamp()
        except (TypeError, ValueError):
            return
        offset = server_ts - time.time()
        # Date 헤더는 초 단위 해상도라 작은 오차는 버린다
        self.clock_offset = offset if abs(offset) >= config.CLOCK_SKEW_TOLERANCE else 0.0

    def server_now(self) -> float:
        """서버 기준 현재 시각 추정치 (Unix timestamp)."""
        return time.time() + self.clock_offset


def _parse(model, data: Any, what: str):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"{what} 응답 검증 실패: {e}")
        raise BackendError(f"Malformed {what} data received from server")


def _user_path(user_id: str) -> str:
    return quote(str(user_id), safe="")


class ExamAPI:
    """/exam, /dashboard 엔드포인트."""

    def __init__(self, client: PortalClient):
        self.client = client

    def get_or_create_exam(self, user_id: str) -> ExamSession:
        data = self.client.get(f"/exam/{_user_path(user_id)}")
        return _parse(ExamSession, data, "exam session")

    def start_exam(self, user_id: str) -> Any:
        return self.client.post(f"/exam/{_user_path(user_id)}/start")

    def submit_answer(self, user_id: str, exam_question_id: int, option_id: int) -> Any:
        return self.client.post(
            f"/exam/{_user_path(user_id)}/answer",
            json={
                "exam_question_id": exam_question_id,
                "question_option_id": option_id,
            },
        )

    def complete_exam(self, user_id: str) -> Any:
        return self.client.post(f"/exam/{_user_path(user_id)}/complete")

    def get_results(self, user_id: str) -> ExamResults:
        data = self.client.get(f"/exam/{_user_path(user_id)}/results")
        return _parse(ExamResults, data, "exam results")

    def get_user_answers(self, user_id: str) -> Dict[int, int]:
        """저장된 답안 맵. 문자열 키는 int로 변환된다."""
        data = self.client.get(f"/exam/{_user_path(user_id)}/answers")
        try:
            return coerce_answer_map(data)
        except (TypeError, ValueError, AttributeError):
            raise BackendError("Malformed answers data received from server")

    def get_detailed_answers(self, user_id: str) -> Dict[str, List[DetailedAnswer]]:
        data = self.client.get(f"/exam/{_user_path(user_id)}/detailed-answers") or {}
        try:
            return {
                category: [DetailedAnswer.model_validate(a) for a in (answers or [])]
                for category, answers in data.items()
            }
        except (ValidationError, AttributeError) as e:
            logger.error(f"detailed answers 응답 검증 실패: {e}")
            raise BackendError("Malformed detailed answers data received from server")

    def get_user_dashboard(self, user_id: str) -> UserDashboard:
        data = self.client.get(f"/exam/{_user_path(user_id)}/dashboard")
        return _parse(UserDashboard, data, "user dashboard")

    def get_all_users_dashboard(self) -> List[UserSummary]:
        data = self.client.get("/dashboard/users")
        return _parse(UserRoster, data, "users dashboard").users


class QuestionAPI:
    """/questions 엔드포인트."""

    def __init__(self, client: PortalClient):
        self.client = client

    @staticmethod
    def build_params(category: str = "", search: str = "", page: int = 1, limit: int = 10) -> dict:
        """빈 category / search는 쿼리에서 제외한다."""
        params = {"page": page, "limit": limit}
        if category:
            params["category"] = category
        if search:
            params["search"] = search
        return params

    def get_questions(self, category: str = "", search: str = "", page: int = 1, limit: int = 10) -> QuestionPage:
        data = self.client.get(
            "/questions",
            params=self.build_params(category, search, page, limit),
        )
        return _parse(QuestionPage, data, "questions")

    def get_categories(self) -> List[str]:
        data = self.client.get("/questions/categories")
        return [str(c) for c in (data or [])]

    def update_option_score(self, question_id: int, option_id: int, score: int) -> Optional[BankOption]:
        data = self.client.put(
            f"/questions/{question_id}/option/{option_id}/score",
            json={"score": score},
        )
        if not data:
            return None
        return _parse(BankOption, data, "question option")
