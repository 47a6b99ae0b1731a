"""
models/session_state.py

시험 화면(Exam Board)의 클라이언트 측 진행 상태 모델.
Pydantic BaseModel 기반. 권위 있는 상태는 백엔드에 있고, 여기에는 캐시만 둔다.
UI 코드 없음.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from pppk_exam.models.exam_model import ExamSession, ExamStatus


class BoardPhase(str, Enum):
    """클라이언트가 관찰하는 세션 상태. LOADING은 클라이언트 전용."""

    LOADING = "LOADING"
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    EXPIRED = "EXPIRED"

    @classmethod
    def from_status(cls, status: ExamStatus) -> "BoardPhase":
        return cls(status.value)

    @property
    def is_terminal(self) -> bool:
        return self in (BoardPhase.COMPLETED, BoardPhase.EXPIRED)


class BoardState(BaseModel):
    """
    사용자의 시험 화면 상태 전체를 표현하는 모델.

    Attributes:
        phase:              현재 상태 (LOADING → NOT_STARTED/IN_PROGRESS/COMPLETED/EXPIRED)
        session:            마지막으로 받은 세션 (없으면 None)
        current_index:      현재 보고 있는 문제의 인덱스 (0-based)
        answers:            AnswerMap. {exam_question_id: 선택한 option id}
        error:              화면에 그대로 표시할 오류 메시지
        completion_pending: 타이머 만료 후 제출이 실패해 재시도가 필요한 상태
    """

    phase: BoardPhase = Field(
        default=BoardPhase.LOADING,
        description="클라이언트 관찰 상태"
    )
    session: Optional[ExamSession] = Field(
        default=None,
        description="백엔드에서 받은 시험 세션"
    )
    current_index: int = Field(
        default=0,
        ge=0,
        description="현재 문제 인덱스 (0-based)"
    )
    answers: Dict[int, int] = Field(
        default_factory=dict,
        description="답안지. key: exam_question_id, value: question_option_id"
    )
    error: Optional[str] = Field(
        default=None,
        description="표시 중인 오류 메시지"
    )
    completion_pending: bool = Field(
        default=False,
        description="시간 만료 후 제출 재시도 필요 여부"
    )

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    @property
    def total(self) -> int:
        return len(self.session.questions) if self.session else 0
