"""
models/dashboard_model.py

관리자 대시보드용 조회 모델 (읽기 전용).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from pppk_exam.models.exam_model import ExamResults, ExamStatus


class UserSummary(BaseModel):
    """응시자 목록의 한 행."""

    user_id: str
    session_code: Optional[str] = None
    exam_status: Optional[ExamStatus] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    total_score: Optional[int] = None
    max_score: Optional[int] = None
    percentage: Optional[float] = None
    grade: Optional[str] = None
    is_passed: Optional[bool] = None


class SessionInfo(BaseModel):
    session_code: str = ""
    duration: int = 0
    expires_at: Optional[datetime] = None


class ProgressInfo(BaseModel):
    answered_questions: int = 0
    total_questions: int = 0
    remaining_time_minutes: Optional[float] = None


class UserDashboard(BaseModel):
    """응시자 상세 (관리자 상세 모달)."""

    user_id: str
    has_exam: bool = False
    exam_status: Optional[ExamStatus] = None
    exam_session: Optional[SessionInfo] = None
    progress_info: Optional[ProgressInfo] = None
    exam_results: Optional[ExamResults] = None


class UserRoster(BaseModel):
    users: List[UserSummary] = Field(default_factory=list)
