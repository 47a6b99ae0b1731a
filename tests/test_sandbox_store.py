import pytest

from sandbox.sample_questions import CATEGORY_ORDER, build_sample_bank
from sandbox.store import SandboxError, SandboxStore, calculate_grade


@pytest.mark.parametrize("percentage, grade", [
    (100, "A"), (99.9, "B"), (90, "B"), (80, "C"), (70, "D"), (69.99, "E"), (0, "E"),
])
def test_calculate_grade(percentage, grade):
    assert calculate_grade(percentage) == grade


def test_sample_bank_ids_are_unique():
    bank = build_sample_bank()
    option_ids = [o["id"] for q in bank for o in q["options"]]

    assert [q["id"] for q in bank] == list(range(1, len(bank) + 1))
    assert len(option_ids) == len(set(option_ids))
    assert {q["category"] for q in bank} == set(CATEGORY_ORDER)


def test_get_or_create_is_idempotent():
    store = SandboxStore(seed=1)
    first = store.get_or_create("u1")
    second = store.get_or_create("u1")

    assert first["session_id"] == second["session_id"]
    assert first["status"] == "NOT_STARTED"


def test_scoring_per_category(make_bank):
    store = SandboxStore(questions=make_bank(2), questions_per_category=2, seed=3)
    session = store.get_or_create("u1")
    store.start("u1")

    for q in session["questions"]:
        best = q["options"][-1]["id"]
        store.answer("u1", q["exam_question_id"], q["options"][0]["id"])
        store.answer("u1", q["exam_question_id"], best)
    store.complete("u1")

    results = store.results("u1")
    assert results["summary"]["total_score"] == 6
    assert results["summary"]["max_score"] == 6
    assert results["summary"]["overall_grade"] == "A"
    assert results["summary"]["is_passed"]
    assert results["results_by_category"][0]["category"] == "TEKNIS"

    detail = store.detailed_answers("u1")
    assert all(a["is_correct"] for a in detail["TEKNIS"])


def test_partial_score_fails(make_bank):
    store = SandboxStore(questions=make_bank(2), questions_per_category=2, seed=3)
    session = store.get_or_create("u1")
    store.start("u1")
    q = session["questions"][0]
    store.answer("u1", q["exam_question_id"], q["options"][-1]["id"])
    store.complete("u1")

    summary = store.results("u1")["summary"]
    assert summary["total_answered"] == 1
    assert summary["overall_percentage"] == 50.0
    assert summary["overall_grade"] == "E"
    assert not summary["is_passed"]


def test_session_expires_lazily(make_bank, utc_clock):
    store = SandboxStore(questions=make_bank(3), duration_minutes=1, clock=utc_clock)
    store.get_or_create("u1")
    store.start("u1")

    utc_clock.advance(61)
    session = store.get_or_create("u1")
    assert session["status"] == "EXPIRED"
    assert store.results("u1")["summary"]["total_answered"] == 0

    # 이미 만료·채점된 세션의 제출 요청은 그대로 성공
    assert store.complete("u1")["status"] == "EXPIRED"
    with pytest.raises(SandboxError):
        store.answer("u1", session["questions"][0]["exam_question_id"],
                     session["questions"][0]["options"][0]["id"])


def test_complete_after_deadline_scores_answers(make_bank, utc_clock):
    store = SandboxStore(questions=make_bank(2), questions_per_category=2,
                         duration_minutes=1, clock=utc_clock)
    session = store.get_or_create("u1")
    store.start("u1")
    q = session["questions"][0]
    store.answer("u1", q["exam_question_id"], q["options"][-1]["id"])

    utc_clock.advance(60)
    assert store.complete("u1")["status"] == "COMPLETED"
    assert store.results("u1")["summary"]["total_score"] == 3


def test_unstarted_session_expires(make_bank, utc_clock):
    store = SandboxStore(questions=make_bank(2), duration_minutes=1, clock=utc_clock)
    store.get_or_create("u1")

    utc_clock.advance(60)
    assert store.get_or_create("u1")["status"] == "EXPIRED"
    assert store.results("u1")["summary"]["total_score"] == 0
    with pytest.raises(SandboxError):
        store.start("u1")


def test_answer_requires_in_progress():
    store = SandboxStore(seed=1)
    session = store.get_or_create("u1")
    q = session["questions"][0]

    with pytest.raises(SandboxError) as exc:
        store.answer("u1", q["exam_question_id"], q["options"][0]["id"])
    assert exc.value.message == "Exam is not in progress"


def test_list_questions_filters(make_bank):
    store = SandboxStore(questions=make_bank(12))

    found = store.list_questions(search="question 1", limit=0)
    assert [q["id"] for q in found["questions"]] == [1, 10, 11, 12]
    assert found["pagination"]["total_pages"] == 1

    assert store.list_questions(category="WAWANCARA")["pagination"]["total_items"] == 0

    last = store.list_questions(page=2, limit=5)
    assert [q["id"] for q in last["questions"]] == [6, 7, 8, 9, 10]
    assert last["pagination"]["total_pages"] == 3


def test_option_score_range(make_bank):
    store = SandboxStore(questions=make_bank(1))

    assert store.update_option_score(1, 12, 10)["score"] == 10
    with pytest.raises(SandboxError):
        store.update_option_score(1, 12, 11)
    with pytest.raises(SandboxError) as exc:
        store.update_option_score(1, 99, 1)
    assert exc.value.status_code == 404
