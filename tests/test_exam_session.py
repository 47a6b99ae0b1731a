from datetime import datetime, timezone

import pytest

from pppk_exam.models.exam_model import ExamSession, coerce_answer_map
from pppk_exam.models.session_state import BoardPhase
from pppk_exam.services.api_client import (
    CONNECTION_FAILED, ApiConnectionError, BackendError, ExamAPI,
)
from pppk_exam.services.exam_session import ExamSessionController
from sandbox.store import SandboxStore

NOW = 1_700_000_000.0


def _session_data(status="IN_PROGRESS", expires_in=3600):
    return {
        "session_id": 1,
        "user_id": "u1",
        "session_code": "EXAM_u1",
        "status": status,
        "duration": 60,
        "expires_at": datetime.fromtimestamp(NOW + expires_in, tz=timezone.utc).isoformat(),
        "questions": [
            {
                "exam_question_id": eqid,
                "category": "TEKNIS" if eqid < 12 else "MANAJERIAL",
                "question_text": f"Question {eqid}",
                "options": [{"id": n, "option_text": f"Option {n}"} for n in (1, 2, 3, 4)],
            }
            for eqid in (10, 11, 12)
        ],
    }


class DummyExamAPI:
    def __init__(self, status="IN_PROGRESS", stored_answers=None, expires_in=3600):
        self.data = _session_data(status, expires_in)
        self.stored_answers = stored_answers or {}
        self.submitted = []
        self.complete_calls = 0
        self.load_error = None
        self.submit_error = None
        self.complete_error = None
        self.phase_when_answers_fetched = None
        self.controller = None

    def get_or_create_exam(self, user_id):
        if self.load_error:
            raise self.load_error
        return ExamSession.model_validate(self.data)

    def start_exam(self, user_id):
        self.data["status"] = "IN_PROGRESS"

    def get_user_answers(self, user_id):
        if self.controller is not None:
            self.phase_when_answers_fetched = self.controller.phase
        return coerce_answer_map(self.stored_answers)

    def submit_answer(self, user_id, exam_question_id, option_id):
        self.submitted.append((exam_question_id, option_id))
        if self.submit_error:
            raise self.submit_error

    def complete_exam(self, user_id):
        self.complete_calls += 1
        if self.complete_error:
            raise self.complete_error


def _controller(api):
    controller = ExamSessionController(api, "u1", clock=lambda: NOW)
    api.controller = controller
    controller.load()
    return controller


@pytest.mark.parametrize("status", ["COMPLETED", "EXPIRED"])
def test_finished_session_redirects_to_results(status):
    controller = _controller(DummyExamAPI(status=status))

    assert controller.phase == BoardPhase(status)
    assert controller.shows_results
    assert not controller.can_navigate
    assert controller.countdown() is None


def test_last_confirmed_answer_wins():
    api = DummyExamAPI()
    controller = _controller(api)

    assert controller.submit_answer(10, 1)
    assert controller.submit_answer(10, 3)
    assert controller.answers == {10: 3}
    assert api.submitted == [(10, 1), (10, 3)]


def test_failed_submission_leaves_answers_unchanged():
    api = DummyExamAPI()
    controller = _controller(api)
    controller.submit_answer(10, 2)

    api.submit_error = BackendError("Failed to save answer", 500)
    assert not controller.submit_answer(10, 4)
    assert not controller.submit_answer(11, 1)

    assert controller.answers == {10: 2}
    # 실패는 로그로만 남는다
    assert controller.error is None


def test_finish_requires_at_least_one_answer():
    api = DummyExamAPI()
    controller = _controller(api)

    assert not controller.can_finish
    assert not controller.finish()
    assert api.complete_calls == 0
    assert controller.phase == BoardPhase.IN_PROGRESS

    controller.submit_answer(11, 2)
    assert controller.can_finish
    assert controller.finish()
    assert api.complete_calls == 1
    assert controller.shows_results


def test_timer_completion_ignores_empty_answers(fake_clock):
    api = DummyExamAPI(expires_in=5)
    controller = ExamSessionController(api, "u1", clock=fake_clock)
    controller.load()

    countdown = controller.countdown()
    fake_clock.advance(5)
    assert countdown.tick() == 0

    assert api.complete_calls == 1
    assert controller.phase == BoardPhase.COMPLETED


def test_stored_answers_merged_before_board():
    api = DummyExamAPI(stored_answers={"10": 3, "11": 4})
    controller = _controller(api)

    assert controller.answers == {10: 3, 11: 4}
    assert api.phase_when_answers_fetched == BoardPhase.LOADING
    assert controller.phase == BoardPhase.IN_PROGRESS


def test_load_connection_failure_stays_loading():
    api = DummyExamAPI()
    api.load_error = ApiConnectionError(CONNECTION_FAILED)
    controller = _controller(api)

    assert controller.phase == BoardPhase.LOADING
    assert controller.error == CONNECTION_FAILED

    api.load_error = None
    assert controller.load() == BoardPhase.IN_PROGRESS
    assert controller.error is None


def test_load_backend_message_is_shown_verbatim():
    api = DummyExamAPI()
    api.load_error = BackendError("No active exam schedule", 400)
    controller = _controller(api)

    assert controller.error == "No active exam schedule"
    controller.dismiss_error()
    assert controller.error is None


def test_start_only_from_not_started():
    api = DummyExamAPI(status="NOT_STARTED")
    controller = _controller(api)

    assert not controller.can_navigate
    assert not controller.go_to(1)
    assert not controller.submit_answer(10, 1)
    assert api.submitted == []

    assert controller.start()
    assert controller.phase == BoardPhase.IN_PROGRESS
    assert controller.countdown() is not None
    assert not controller.start()


def test_navigation_bounds():
    controller = _controller(DummyExamAPI())

    assert not controller.previous()
    assert controller.next()
    assert controller.next()
    assert controller.current_question.exam_question_id == 12
    assert not controller.next()
    assert not controller.go_to(-1)
    assert controller.go_to(0)
    assert controller.current_question.exam_question_id == 10


def test_navigator_groups_follow_answers():
    controller = _controller(DummyExamAPI(stored_answers={"11": 2}))
    groups = controller.navigator()

    assert [g.category for g in groups] == ["TEKNIS", "MANAJERIAL"]
    assert [item.status for item in groups[0].items] == ["current", "answered"]
    assert groups[1].items[0].status == "unanswered"


def test_failed_timer_completion_can_be_retried():
    api = DummyExamAPI()
    api.complete_error = ApiConnectionError(CONNECTION_FAILED)
    controller = _controller(api)

    assert not controller.on_timer_expired()
    assert controller.state.completion_pending
    assert controller.error == CONNECTION_FAILED
    assert controller.phase == BoardPhase.IN_PROGRESS

    api.complete_error = None
    assert controller.retry_completion()
    assert not controller.state.completion_pending
    assert controller.phase == BoardPhase.COMPLETED
    assert not controller.retry_completion()
    assert api.complete_calls == 2


def test_failed_completion_follows_expired_backend():
    api = DummyExamAPI()
    api.complete_error = BackendError("Exam cannot be completed from status EXPIRED", 400)
    controller = _controller(api)

    # 백엔드가 먼저 세션을 만료시킨 상태
    api.data["status"] = "EXPIRED"
    assert not controller.on_timer_expired()

    assert controller.phase == BoardPhase.EXPIRED
    assert controller.shows_results
    assert not controller.state.completion_pending
    assert controller.error is None


def test_failed_finish_follows_completed_backend():
    api = DummyExamAPI(stored_answers={"10": 1})
    api.complete_error = BackendError("Exam already completed", 400)
    controller = _controller(api)

    api.data["status"] = "COMPLETED"
    assert not controller.finish()
    assert controller.shows_results


def test_timer_expiry_against_sandbox(make_bank, utc_clock, portal_for):
    store = SandboxStore(questions=make_bank(3), duration_minutes=1, clock=utc_clock)
    api = ExamAPI(portal_for(store))
    controller = ExamSessionController(api, "p1", clock=lambda: utc_clock.now.timestamp())
    controller.load()
    assert controller.start()

    countdown = controller.countdown()
    utc_clock.advance(60)
    assert countdown.tick() == 0

    assert controller.phase == BoardPhase.COMPLETED
    assert not controller.state.completion_pending
    assert api.get_results("p1").summary.total_questions == 3


def test_full_flow_against_sandbox(exam_api):
    controller = ExamSessionController(exam_api, "budi")
    assert controller.load() == BoardPhase.NOT_STARTED
    assert controller.start()

    first = controller.current_question
    assert controller.submit_answer(first.exam_question_id, first.options[-1].id)

    # 새로고침: 새 컨트롤러가 저장된 답안을 복원한다
    reloaded = ExamSessionController(exam_api, "budi")
    reloaded.load()
    assert reloaded.answers == {first.exam_question_id: first.options[-1].id}

    assert reloaded.finish()
    results = exam_api.get_results("budi")
    assert results.summary.total_answered == 1
    assert len(results.results_by_category) == 4

    again = ExamSessionController(exam_api, "budi")
    again.load()
    assert again.shows_results


def test_sandbox_rejects_foreign_option(exam_api):
    controller = ExamSessionController(exam_api, "sari")
    controller.load()
    controller.start()

    question = controller.current_question
    assert not controller.submit_answer(question.exam_question_id, 999_999)
    assert controller.answers == {}
