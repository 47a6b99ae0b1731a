"""
sandbox/routes.py — 시험 / 문제 은행 REST 엔드포인트 (/api/v1)

모든 응답은 {success, message?, data?, error?} 봉투 형식.
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from sandbox.store import SandboxStore

router = APIRouter(prefix="/api/v1")


# ── Pydantic request bodies ──────────────────────────────────────────────────

class AnswerBody(BaseModel):
    exam_question_id: int
    question_option_id: int

class ScoreBody(BaseModel):
    score: int = Field(..., ge=0)


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _store(request: Request) -> SandboxStore:
    return request.app.state.store


def _ok(data=None, message: str = "OK") -> dict:
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


# ── 시험 ─────────────────────────────────────────────────────────────────────

@router.get("/exam/{user_id}")
async def get_or_create_exam(user_id: str, request: Request):
    return _ok(_store(request).get_or_create(user_id), "Exam session retrieved")


@router.post("/exam/{user_id}/start")
async def start_exam(user_id: str, request: Request):
    return _ok(_store(request).start(user_id), "Exam started successfully")


@router.post("/exam/{user_id}/answer")
async def submit_answer(user_id: str, body: AnswerBody, request: Request):
    data = _store(request).answer(user_id, body.exam_question_id, body.question_option_id)
    return _ok(data, "Answer submitted successfully")


@router.post("/exam/{user_id}/complete")
async def complete_exam(user_id: str, request: Request):
    return _ok(_store(request).complete(user_id), "Exam completed successfully")


@router.get("/exam/{user_id}/results")
async def get_results(user_id: str, request: Request):
    return _ok(_store(request).results(user_id), "Exam results retrieved")


@router.get("/exam/{user_id}/answers")
async def get_user_answers(user_id: str, request: Request):
    return _ok(_store(request).answers(user_id), "User answers retrieved")


@router.get("/exam/{user_id}/detailed-answers")
async def get_detailed_answers(user_id: str, request: Request):
    return _ok(_store(request).detailed_answers(user_id), "Detailed answers retrieved")


@router.get("/exam/{user_id}/dashboard")
async def get_user_dashboard(user_id: str, request: Request):
    return _ok(_store(request).user_dashboard(user_id), "User dashboard retrieved")


@router.get("/dashboard/users")
async def get_all_users_dashboard(request: Request):
    return _ok(_store(request).all_users(), "Users dashboard retrieved")


# ── 문제 은행 ────────────────────────────────────────────────────────────────

@router.get("/questions")
async def get_questions(
    request: Request,
    category: str = "",
    search: str = "",
    page: int = 1,
    limit: int = 10,
):
    data = _store(request).list_questions(category, search, page, limit)
    return _ok(data, "Questions retrieved successfully")


@router.get("/questions/categories")
async def get_categories(request: Request):
    return _ok(_store(request).categories(), "Categories retrieved")


@router.put("/questions/{question_id}/option/{option_id}/score")
async def update_option_score(question_id: int, option_id: int, body: ScoreBody, request: Request):
    data = _store(request).update_option_score(question_id, option_id, body.score)
    return _ok(data, "Score updated successfully")
