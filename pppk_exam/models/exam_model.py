"""
models/exam_model.py

시험 세션 / 결과 데이터 모델.
백엔드 응답(data 필드)을 그대로 검증하는 Pydantic v2 모델. 점수·등급 계산 없음.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


class ExamStatus(str, Enum):
    """백엔드가 관리하는 시험 세션 상태."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"

    @property
    def is_finished(self) -> bool:
        return self in (ExamStatus.COMPLETED, ExamStatus.EXPIRED)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # timezone 정보가 없는 시각은 UTC로 간주
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ExamOption(BaseModel):
    """시험 중 노출되는 보기. 점수는 시험 중에는 내려오지 않는다."""

    id: int = Field(..., description="보기 ID (question_option_id)")
    option_text: str = Field(..., description="보기 내용")
    score: Optional[int] = Field(None, ge=0, description="보기 점수 (결과 화면 등에서만 존재)")


class ExamQuestion(BaseModel):
    """세션에 배정된 문제. 세션 생성 이후 변경되지 않는다."""

    exam_question_id: int = Field(..., description="세션 내 문제 식별자")
    question_id: Optional[int] = Field(None, description="문제 은행의 원본 문제 ID")
    category: str = Field(..., min_length=1, description="카테고리 (예: MANAJERIAL, TEKNIS)")
    order_number: Optional[int] = Field(None, description="시험 내 출제 순서 (1-based)")
    question_text: str = Field(..., description="문제 본문")
    options: List[ExamOption] = Field(default_factory=list, description="보기 리스트 (순서 유지)")


class CategoryStat(BaseModel):
    category: str
    total_questions: int = 0
    answered_count: int = 0


class ExamSession(BaseModel):
    """
    한 사용자의 시험 응시 세션 (클라이언트 캐시).

    Attributes:
        user_id:          응시자 ID (URL로 전달되는 값)
        session_code:     세션 코드 (화면 표시용)
        status:           세션 상태
        duration_minutes: 시험 시간 (분). 응답 키는 "duration".
        expires_at:       서버가 발급한 만료 시각. 남은 시간 계산의 유일한 기준.
        questions:        출제 순서대로 정렬된 문제 리스트
    """

    session_id: Optional[int] = None
    user_id: str
    session_code: str = ""
    status: ExamStatus
    duration_minutes: int = Field(0, alias="duration", ge=0)
    expires_at: datetime
    questions: List[ExamQuestion] = Field(default_factory=list)
    category_stats: List[CategoryStat] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @field_validator("expires_at")
    @classmethod
    def _expires_at_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @field_validator("questions", "category_stats", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []

    def question_at(self, index: int) -> Optional[ExamQuestion]:
        if 0 <= index < len(self.questions):
            return self.questions[index]
        return None

    def find_question(self, exam_question_id: int) -> Optional[ExamQuestion]:
        for q in self.questions:
            if q.exam_question_id == exam_question_id:
                return q
        return None


class ResultSummary(BaseModel):
    """전체 결과 요약. 모든 수치는 백엔드가 계산한 값."""

    total_questions: Optional[int] = None
    total_answered: Optional[int] = None
    total_score: int
    max_score: int
    overall_percentage: float
    overall_grade: str
    is_passed: bool
    completed_at: Optional[datetime] = None

    @field_validator("completed_at")
    @classmethod
    def _completed_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class CategoryResult(BaseModel):
    category: str
    total_questions: Optional[int] = None
    total_answered: Optional[int] = None
    total_score: int
    max_score: int
    percentage: float
    grade: str
    is_passed: bool


class ExamResults(BaseModel):
    summary: ResultSummary
    results_by_category: List[CategoryResult] = Field(default_factory=list)


class DetailedAnswer(BaseModel):
    """완료된 시험의 문제별 상세 답안 (결과 화면 카테고리 상세)."""

    exam_question_id: int
    question_id: Optional[int] = None
    question_text: str
    selected_option: Optional[str] = None
    correct_option: Optional[str] = None
    score: int = 0
    max_score: int = 0
    correct_score: Optional[int] = None
    is_correct: bool = False
    answered_at: Optional[datetime] = None


def coerce_answer_map(raw: Optional[Mapping]) -> Dict[int, int]:
    """
    백엔드 답안 맵({"10": 3, "11": "4"})을 {10: 3, 11: 4} 형태로 변환한다.

    JSON 객체의 키는 항상 문자열이므로 문제/보기 식별자 타입(int)으로 강제 변환.
    변환할 수 없는 항목이 있으면 ValueError.
    """
    if not raw:
        return {}
    return {int(k): int(v) for k, v in raw.items()}
