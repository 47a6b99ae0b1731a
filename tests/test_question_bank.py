import json

import pytest

from pppk_exam.models.question_model import BankQuestion, Pagination, QuestionPage
from pppk_exam.services.api_client import BackendError, QuestionAPI
from pppk_exam.services.question_bank import QuestionBankEditor
from sandbox.store import SandboxStore


class DummyQuestionAPI:
    def __init__(self, categories=None):
        self.calls = []
        self.categories = categories or ["TEKNIS", "MANAJERIAL"]
        self.categories_error = None

    def get_questions(self, category="", search="", page=1, limit=10):
        self.calls.append(QuestionAPI.build_params(category, search, page, limit))
        return QuestionPage(pagination=Pagination(current_page=page, items_per_page=limit))

    def get_categories(self):
        if self.categories_error:
            raise self.categories_error
        return self.categories


@pytest.fixture
def bank_editor(make_bank, portal_for):
    store = SandboxStore(questions=make_bank(25))
    editor = QuestionBankEditor(QuestionAPI(portal_for(store)))
    editor.refresh()
    return editor


def test_second_page_of_25(bank_editor):
    assert bank_editor.set_page(2)

    assert [q.id for q in bank_editor.questions] == list(range(11, 21))
    assert bank_editor.pagination.total_pages == 3
    assert bank_editor.pagination.total_items == 25
    assert bank_editor.row_number(0) == 11


def test_limit_zero_returns_everything(bank_editor):
    bank_editor.set_page(3)
    assert bank_editor.set_limit(0)

    assert bank_editor.page == 1
    assert len(bank_editor.questions) == 25
    assert bank_editor.pagination.total_pages == 1
    assert bank_editor.pagination_range() == []


def test_score_update_reflected_in_list_and_detail(bank_editor):
    bank_editor.open_detail(3)
    assert bank_editor.update_score(3, 31, 7)

    assert bank_editor.success == "Score updated successfully!"
    assert bank_editor.questions[2].option(31).score == 7
    assert bank_editor.selected.option(31).score == 7

    refetched = bank_editor.api.get_questions(limit=0)
    assert refetched.questions[2].option(31).score == 7


def test_rejected_score_changes_nothing(bank_editor):
    bank_editor.open_detail(3)
    before = [q.model_copy(deep=True) for q in bank_editor.questions]

    assert not bank_editor.update_score(3, 31, 11)
    assert bank_editor.error == "Score must be between 0 and 10"
    assert bank_editor.success is None
    assert bank_editor.questions == before
    assert bank_editor.selected.option(31).score == 1

    assert not bank_editor.update_score(3, 31, -2)
    assert bank_editor.error == "Score must be a non-negative number"


def test_unknown_option(bank_editor):
    assert not bank_editor.update_score(3, 999, 5)
    assert bank_editor.error == "Question option not found"


def test_category_and_limit_reset_page():
    api = DummyQuestionAPI()
    editor = QuestionBankEditor(api)
    editor.page = 4

    assert editor.set_category("TEKNIS")
    assert api.calls[-1] == {"page": 1, "limit": 10, "category": "TEKNIS"}
    assert not editor.set_category("TEKNIS")

    editor.page = 2
    assert editor.set_limit(25)
    assert api.calls[-1] == {"page": 1, "limit": 25, "category": "TEKNIS"}
    assert len(api.calls) == 2


def test_search_waits_for_debounce(fake_clock):
    api = DummyQuestionAPI()
    editor = QuestionBankEditor(api, clock=fake_clock)

    assert editor.set_search("rep")
    fake_clock.advance(0.1)
    assert editor.set_search("report")
    assert editor.search_pending
    assert editor.debounce_remaining() == pytest.approx(0.3)
    assert not editor.flush_search()
    assert api.calls == []

    fake_clock.advance(0.31)
    assert editor.flush_search()
    assert api.calls == [{"page": 1, "limit": 10, "search": "report"}]
    assert not editor.search_pending
    assert not editor.set_search("report")


def test_stale_response_is_discarded():
    editor = QuestionBankEditor(DummyQuestionAPI())
    old = editor.issue()
    new = editor.issue()

    stale = QuestionPage(questions=[BankQuestion(id=1, category="TEKNIS", question_text="old")])
    fresh = QuestionPage(questions=[BankQuestion(id=2, category="TEKNIS", question_text="new")])

    assert editor.apply(new, fresh)
    assert not editor.apply(old, stale)
    assert [q.id for q in editor.questions] == [2]


def test_pagination_range_window():
    editor = QuestionBankEditor(DummyQuestionAPI())
    editor.pagination = Pagination(total_pages=10)

    editor.page = 1
    assert editor.pagination_range() == [1, 2, 3, 4, 5]
    editor.page = 5
    assert editor.pagination_range() == [3, 4, 5, 6, 7]
    editor.page = 10
    assert editor.pagination_range() == [6, 7, 8, 9, 10]

    editor.pagination = Pagination(total_pages=3)
    editor.page = 2
    assert editor.pagination_range() == [1, 2, 3]


def test_load_categories_failure():
    api = DummyQuestionAPI()
    editor = QuestionBankEditor(api)
    assert editor.load_categories()
    assert editor.categories == ["TEKNIS", "MANAJERIAL"]

    api.categories_error = BackendError("boom", 500)
    assert not editor.load_categories()
    assert editor.error == "Failed to load categories"


def test_empty_messages():
    editor = QuestionBankEditor(DummyQuestionAPI())
    assert editor.empty_message() == "No questions found"
    editor.category = "TEKNIS"
    assert editor.empty_message() == 'No questions found for category "TEKNIS"'
    editor.search = "audit"
    assert editor.empty_message() == 'No questions found matching "audit" in category "TEKNIS"'


def test_export_json(bank_editor):
    payload = json.loads(bank_editor.export_json())

    assert payload["filters"] == {"category": "", "search": ""}
    assert payload["pagination"]["total_items"] == 25
    assert [q["id"] for q in payload["questions"]] == list(range(1, 11))


class OverlappingQuestionAPI(DummyQuestionAPI):
    """첫 응답이 돌아오기 전에 다른 실행이 페이지 크기를 바꾸는 상황."""

    def __init__(self):
        super().__init__()
        self.editor = None

    def get_questions(self, category="", search="", page=1, limit=10):
        self.calls.append(QuestionAPI.build_params(category, search, page, limit))
        number = len(self.calls)
        if number == 1:
            self.editor.limit = 25
            self.editor.refresh()
        return QuestionPage(
            questions=[BankQuestion(id=number, category="TEKNIS", question_text="q")],
            pagination=Pagination(current_page=page, items_per_page=limit, total_items=1, total_pages=1),
        )


def test_late_refresh_response_is_discarded():
    api = OverlappingQuestionAPI()
    editor = QuestionBankEditor(api)
    api.editor = editor

    assert not editor.refresh()

    # 나중에 보낸 limit=25 조회의 응답만 남는다
    assert [q.id for q in editor.questions] == [2]
    assert editor.pagination.items_per_page == 25
