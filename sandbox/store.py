"""
sandbox/store.py — 인메모리 시험 백엔드 저장소 (개발/테스트용)

실제 백엔드와 같은 REST 계약을 흉내 내기 위한 최소 구현.
사용자별 시험 세션, 답안, 채점 결과, 문제 은행을 메모리에 보관하고
모든 접근은 하나의 lock으로 직렬화한다.
"""

import copy
import math
import random
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from sandbox.sample_questions import CATEGORY_ORDER, build_sample_bank

ACTIVE_STATUSES = ("NOT_STARTED", "IN_PROGRESS")
PASS_PERCENTAGE = 90.0
MAX_OPTION_SCORE = 10


class SandboxError(Exception):
    """봉투 응답의 error로 그대로 내려갈 오류."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def calculate_grade(percentage: float) -> str:
    """100%=A, 90%=B, 80%=C, 70%=D, 그 미만 E."""
    if percentage >= 100:
        return "A"
    if percentage >= 90:
        return "B"
    if percentage >= 80:
        return "C"
    if percentage >= 70:
        return "D"
    return "E"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SandboxStore:
    """
    Args:
        questions:              문제 은행 (None이면 샘플 문제)
        questions_per_category: 카테고리당 출제 문제 수
        duration_minutes:       시험 시간 (분)
        clock:                  현재 시각 함수 (timezone 포함 datetime)
        seed:                   출제 셔플용 시드
    """

    def __init__(
        self,
        questions: Optional[list[dict]] = None,
        questions_per_category: int = 3,
        duration_minutes: int = 120,
        clock: Callable[[], datetime] = _utcnow,
        seed: Optional[int] = None,
    ):
        self._lock = threading.Lock()
        self._questions: dict[int, dict] = {
            q["id"]: copy.deepcopy(q) for q in (questions if questions is not None else build_sample_bank())
        }
        self._sessions: dict[str, list[dict]] = {}
        self._next_session_id = 1
        self._next_exam_question_id = 1
        self.questions_per_category = questions_per_category
        self.duration_minutes = duration_minutes
        self.clock = clock
        self._rng = random.Random(seed)

    # ── 내부 헬퍼 (lock 보유 상태에서 호출) ───────────────────────────────

    def _categories(self) -> list[str]:
        present = []
        for q in self._questions.values():
            if q["category"] not in present:
                present.append(q["category"])
        ordered = [c for c in CATEGORY_ORDER if c in present]
        return ordered + [c for c in present if c not in ordered]

    def _create_session(self, user_id: str) -> dict:
        now = self.clock()
        exam_questions = []
        order = 1
        for category in self._categories():
            pool = [q["id"] for q in self._questions.values() if q["category"] == category]
            count = min(self.questions_per_category, len(pool))
            for qid in self._rng.sample(pool, count):
                exam_questions.append({
                    "exam_question_id": self._next_exam_question_id,
                    "question_id": qid,
                    "category": category,
                    "order_number": order,
                })
                self._next_exam_question_id += 1
                order += 1

        session = {
            "session_id": self._next_session_id,
            "user_id": user_id,
            "session_code": f"EXAM_{user_id}_{int(now.timestamp())}",
            "status": "NOT_STARTED",
            "started_at": None,
            "completed_at": None,
            "expires_at": now + timedelta(minutes=self.duration_minutes),
            "duration": self.duration_minutes,
            "exam_questions": exam_questions,
            "answers": {},
            "results": None,
        }
        self._next_session_id += 1
        self._sessions.setdefault(user_id, []).append(session)
        return session

    def _expire_if_due(self, session: dict) -> None:
        # 시작 전 세션도 만료 시각이 지나면 EXPIRED (점수 0으로 채점)
        if session["status"] in ACTIVE_STATUSES and self.clock() >= session["expires_at"]:
            session["status"] = "EXPIRED"
            session["completed_at"] = session["expires_at"]
            session["results"] = self._score(session, session["expires_at"])

    def _latest(self, user_id: str, expire: bool = True) -> Optional[dict]:
        sessions = self._sessions.get(user_id) or []
        if expire:
            for s in sessions:
                self._expire_if_due(s)
        active = [s for s in sessions if s["status"] in ACTIVE_STATUSES]
        if active:
            return active[-1]
        return sessions[-1] if sessions else None

    def _require(self, user_id: str, expire: bool = True) -> dict:
        session = self._latest(user_id, expire)
        if session is None:
            raise SandboxError(f"Exam session not found for user {user_id}", 404)
        return session

    def _option_score(self, question_id: int, option_id: int) -> int:
        for opt in self._questions[question_id]["options"]:
            if opt["id"] == option_id:
                return opt["score"]
        return 0

    def _max_score(self, question_id: int) -> int:
        return max((o["score"] for o in self._questions[question_id]["options"]), default=0)

    def _score(self, session: dict, completed_at: datetime) -> dict:
        by_category: dict[str, dict] = {}
        for eq in session["exam_questions"]:
            bucket = by_category.setdefault(eq["category"], {
                "category": eq["category"], "total_questions": 0, "total_answered": 0,
                "total_score": 0, "max_score": 0,
            })
            bucket["total_questions"] += 1
            bucket["max_score"] += self._max_score(eq["question_id"])
            option_id = session["answers"].get(eq["exam_question_id"])
            if option_id is not None:
                bucket["total_answered"] += 1
                bucket["total_score"] += self._option_score(eq["question_id"], option_id)

        results = []
        for bucket in by_category.values():
            pct = bucket["total_score"] / bucket["max_score"] * 100.0 if bucket["max_score"] else 0.0
            results.append({
                **bucket,
                "percentage": round(pct, 2),
                "grade": calculate_grade(pct),
                "is_passed": pct >= PASS_PERCENTAGE,
            })

        total = sum(r["total_score"] for r in results)
        max_total = sum(r["max_score"] for r in results)
        overall = total / max_total * 100.0 if max_total else 0.0
        summary = {
            "user_id": session["user_id"],
            "exam_session_id": session["session_id"],
            "total_questions": len(session["exam_questions"]),
            "total_answered": sum(r["total_answered"] for r in results),
            "total_score": total,
            "max_score": max_total,
            "overall_percentage": round(overall, 2),
            "overall_grade": calculate_grade(overall),
            "is_passed": overall >= PASS_PERCENTAGE,
            "completed_at": _iso(completed_at),
        }
        return {"summary": summary, "results_by_category": results}

    def _session_view(self, session: dict) -> dict:
        questions = []
        stats: dict[str, dict] = {}
        for eq in session["exam_questions"]:
            q = self._questions[eq["question_id"]]
            questions.append({
                **eq,
                "question_text": q["question_text"],
                "options": [{"id": o["id"], "option_text": o["option_text"]} for o in q["options"]],
            })
            stat = stats.setdefault(eq["category"], {
                "category": eq["category"], "total_questions": 0, "answered_count": 0,
            })
            stat["total_questions"] += 1
            if eq["exam_question_id"] in session["answers"]:
                stat["answered_count"] += 1
        return {
            "session_id": session["session_id"],
            "user_id": session["user_id"],
            "session_code": session["session_code"],
            "status": session["status"],
            "expires_at": _iso(session["expires_at"]),
            "duration": session["duration"],
            "questions": questions,
            "category_stats": list(stats.values()),
        }

    # ── 시험 세션 ─────────────────────────────────────────────────────────

    def get_or_create(self, user_id: str) -> dict:
        with self._lock:
            session = self._latest(user_id) or self._create_session(user_id)
            return self._session_view(session)

    def start(self, user_id: str) -> dict:
        with self._lock:
            session = self._require(user_id)
            if session["status"] != "NOT_STARTED":
                raise SandboxError(f"Exam cannot be started from status {session['status']}")
            now = self.clock()
            session["status"] = "IN_PROGRESS"
            session["started_at"] = now
            session["expires_at"] = now + timedelta(minutes=session["duration"])
            return {"session_id": session["session_id"], "status": "IN_PROGRESS", "started_at": _iso(now)}

    def answer(self, user_id: str, exam_question_id: int, option_id: int) -> dict:
        with self._lock:
            session = self._require(user_id)
            if session["status"] != "IN_PROGRESS":
                raise SandboxError("Exam is not in progress")
            eq = next(
                (e for e in session["exam_questions"] if e["exam_question_id"] == exam_question_id),
                None,
            )
            if eq is None:
                raise SandboxError("Question does not belong to this exam", 404)
            option_ids = [o["id"] for o in self._questions[eq["question_id"]]["options"]]
            if option_id not in option_ids:
                raise SandboxError("Option does not belong to this question")
            session["answers"][exam_question_id] = option_id
            session.setdefault("answered_at", {})[exam_question_id] = self.clock()
            return {"exam_question_id": exam_question_id, "question_option_id": option_id}

    def complete(self, user_id: str) -> dict:
        with self._lock:
            # 마감 시각이 지난 진행 중 세션도 제출할 수 있다 (타이머 자동 제출)
            session = self._require(user_id, expire=False)
            if session["status"] == "EXPIRED" and session["results"] is not None:
                return {
                    "session_id": session["session_id"],
                    "status": "EXPIRED",
                    "completed_at": _iso(session["completed_at"]),
                }
            if session["status"] != "IN_PROGRESS":
                raise SandboxError(f"Exam cannot be completed from status {session['status']}")
            now = self.clock()
            session["status"] = "COMPLETED"
            session["completed_at"] = now
            session["results"] = self._score(session, now)
            return {"session_id": session["session_id"], "status": "COMPLETED", "completed_at": _iso(now)}

    def results(self, user_id: str) -> dict:
        with self._lock:
            session = self._require(user_id)
            if session["results"] is None:
                raise SandboxError("Exam results not available", 404)
            return copy.deepcopy(session["results"])

    def answers(self, user_id: str) -> dict:
        with self._lock:
            session = self._require(user_id)
            return {str(k): v for k, v in session["answers"].items()}

    def detailed_answers(self, user_id: str) -> dict:
        with self._lock:
            session = self._require(user_id)
            if session["results"] is None:
                raise SandboxError("Exam is not completed yet")
            detail: dict[str, list] = {}
            answered_at = session.get("answered_at", {})
            for eq in session["exam_questions"]:
                q = self._questions[eq["question_id"]]
                best = max(q["options"], key=lambda o: o["score"]) if q["options"] else None
                option_id = session["answers"].get(eq["exam_question_id"])
                selected = next((o for o in q["options"] if o["id"] == option_id), None)
                score = selected["score"] if selected else 0
                max_score = best["score"] if best else 0
                detail.setdefault(eq["category"], []).append({
                    "exam_question_id": eq["exam_question_id"],
                    "question_id": q["id"],
                    "question_text": q["question_text"],
                    "selected_option": selected["option_text"] if selected else None,
                    "correct_option": best["option_text"] if best else None,
                    "score": score,
                    "max_score": max_score,
                    "correct_score": max_score,
                    "is_correct": selected is not None and score == max_score,
                    "answered_at": _iso(answered_at.get(eq["exam_question_id"])),
                })
            return detail

    # ── 대시보드 ───────────────────────────────────────────────────────────

    def user_dashboard(self, user_id: str) -> dict:
        with self._lock:
            session = self._latest(user_id)
            if session is None:
                return {"user_id": user_id, "has_exam": False}
            data: dict[str, Any] = {
                "user_id": user_id,
                "has_exam": True,
                "exam_status": session["status"],
                "exam_session": {
                    "session_code": session["session_code"],
                    "duration": session["duration"],
                    "expires_at": _iso(session["expires_at"]),
                },
            }
            if session["status"] == "IN_PROGRESS":
                remaining = (session["expires_at"] - self.clock()).total_seconds() / 60.0
                data["progress_info"] = {
                    "answered_questions": len(session["answers"]),
                    "total_questions": len(session["exam_questions"]),
                    "remaining_time_minutes": max(0.0, round(remaining, 1)),
                }
            if session["results"] is not None:
                data["exam_results"] = copy.deepcopy(session["results"])
            return data

    def all_users(self) -> dict:
        with self._lock:
            users = []
            for user_id in self._sessions:
                session = self._latest(user_id)
                summary = (session["results"] or {}).get("summary", {})
                users.append({
                    "user_id": user_id,
                    "session_code": session["session_code"],
                    "exam_status": session["status"],
                    "started_at": _iso(session["started_at"]),
                    "completed_at": _iso(session["completed_at"]),
                    "total_score": summary.get("total_score"),
                    "max_score": summary.get("max_score"),
                    "percentage": summary.get("overall_percentage"),
                    "grade": summary.get("overall_grade"),
                    "is_passed": summary.get("is_passed"),
                })
            return {"users": users}

    # ── 문제 은행 ─────────────────────────────────────────────────────────

    def list_questions(self, category: str = "", search: str = "", page: int = 1, limit: int = 10) -> dict:
        page = page if page >= 1 else 1
        limit = limit if limit >= 0 else 10
        with self._lock:
            matched = [
                q for q in sorted(self._questions.values(), key=lambda q: q["id"])
                if (not category or q["category"] == category)
                and (not search or search.lower() in q["question_text"].lower())
            ]
            total = len(matched)
            if limit > 0:
                offset = (page - 1) * limit
                items = matched[offset:offset + limit]
                total_pages = math.ceil(total / limit)
            else:
                items = matched
                page = 1
                total_pages = 1
            return {
                "questions": copy.deepcopy(items),
                "pagination": {
                    "current_page": page,
                    "items_per_page": limit,
                    "total_items": total,
                    "total_pages": total_pages,
                },
            }

    def categories(self) -> list[str]:
        with self._lock:
            return self._categories()

    def update_option_score(self, question_id: int, option_id: int, score: int) -> dict:
        if not 0 <= score <= MAX_OPTION_SCORE:
            raise SandboxError(f"Score must be between 0 and {MAX_OPTION_SCORE}")
        with self._lock:
            question = self._questions.get(question_id)
            option = None
            if question is not None:
                option = next((o for o in question["options"] if o["id"] == option_id), None)
            if option is None:
                raise SandboxError("Question option not found", 404)
            option["score"] = score
            return dict(option)
