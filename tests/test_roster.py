from pppk_exam.models.dashboard_model import UserSummary
from pppk_exam.models.exam_model import ExamStatus
from pppk_exam.services.api_client import CONNECTION_FAILED, ApiConnectionError
from pppk_exam.services.roster import STATUS_ALL, AdminRoster


class DummyExamAPI:
    def __init__(self, users):
        self.users = users
        self.error = None

    def get_all_users_dashboard(self):
        if self.error:
            raise self.error
        return self.users


def _users():
    return [
        UserSummary(user_id="Alice01", exam_status="COMPLETED", total_score=40, max_score=48),
        UserSummary(user_id="alicia", exam_status="IN_PROGRESS"),
        UserSummary(user_id="bob", exam_status="NOT_STARTED"),
        UserSummary(user_id="carol"),
    ]


def test_search_is_case_insensitive():
    roster = AdminRoster(DummyExamAPI(_users()))
    assert roster.load()

    assert [u.user_id for u in roster.filtered("ALI")] == ["Alice01", "alicia"]
    assert [u.user_id for u in roster.filtered("  bob ")] == ["bob"]
    assert len(roster.filtered("", STATUS_ALL)) == 4


def test_status_filter():
    roster = AdminRoster(DummyExamAPI(_users()))
    roster.load()

    assert [u.user_id for u in roster.filtered(status="IN_PROGRESS")] == ["alicia"]
    assert [u.user_id for u in roster.filtered("ali", "COMPLETED")] == ["Alice01"]
    assert roster.filtered(status="EXPIRED") == []


def test_load_failure_keeps_previous_rows():
    api = DummyExamAPI(_users())
    roster = AdminRoster(api)
    roster.load()

    api.error = ApiConnectionError(CONNECTION_FAILED)
    assert not roster.load()
    assert roster.error == CONNECTION_FAILED
    assert len(roster.users) == 4


def test_roster_and_detail_against_sandbox(exam_api):
    exam_api.get_or_create_exam("dewi")
    exam_api.start_exam("dewi")
    exam_api.get_or_create_exam("eko")

    roster = AdminRoster(exam_api)
    assert roster.load()
    statuses = {u.user_id: u.exam_status.value for u in roster.users}
    assert statuses == {"dewi": "IN_PROGRESS", "eko": "NOT_STARTED"}

    detail = roster.load_detail("dewi")
    assert detail.has_exam
    assert detail.progress_info.total_questions == 12
    assert detail.progress_info.answered_questions == 0

    missing = roster.load_detail("nobody")
    assert missing is not None and not missing.has_exam

    roster.close_detail()
    assert roster.detail is None


def test_status_counts_cover_every_status():
    roster = AdminRoster(DummyExamAPI(_users()))
    roster.load()
    counts = roster.status_counts()

    assert counts[ExamStatus.COMPLETED] == 1
    assert counts[ExamStatus.IN_PROGRESS] == 1
    assert counts[ExamStatus.NOT_STARTED] == 1
    assert counts[ExamStatus.EXPIRED] == 0
    # 상태 없는 응시자(carol)는 세지 않는다
    assert sum(counts.values()) == 3


class CountingExamAPI(DummyExamAPI):
    def __init__(self, users):
        super().__init__(users)
        self.calls = 0

    def get_all_users_dashboard(self):
        self.calls += 1
        return super().get_all_users_dashboard()


def test_refresh_only_when_stale(fake_clock):
    api = CountingExamAPI(_users())
    roster = AdminRoster(api, max_age=29, clock=fake_clock)

    assert roster.refresh_if_stale()
    fake_clock.advance(5)
    assert not roster.refresh_if_stale()
    assert not roster.refresh_if_stale()
    assert api.calls == 1

    fake_clock.advance(24)
    assert roster.refresh_if_stale()
    assert api.calls == 2

    # Refresh 버튼은 주기와 관계없이 조회
    assert roster.load()
    assert api.calls == 3


def test_failed_load_is_retried_on_next_refresh(fake_clock):
    api = CountingExamAPI(_users())
    api.error = ApiConnectionError(CONNECTION_FAILED)
    roster = AdminRoster(api, max_age=29, clock=fake_clock)

    roster.refresh_if_stale()
    assert roster.error == CONNECTION_FAILED

    api.error = None
    assert roster.refresh_if_stale()
    assert roster.error is None
    assert api.calls == 2
