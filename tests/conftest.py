from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from pppk_exam.services.api_client import ExamAPI, PortalClient, QuestionAPI
from sandbox.app import create_app
from sandbox.store import SandboxStore


class FakeClock:
    """수동으로 진행시키는 시계. Unix timestamp 또는 datetime 반환."""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        if isinstance(self.now, datetime):
            self.now += timedelta(seconds=seconds)
        else:
            self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def portal_for():
    """SandboxStore를 실제 FastAPI 앱으로 감싸 PortalClient에 주입한다."""
    clients = []

    def _make(store):
        http = TestClient(create_app(store), base_url="http://testserver/api/v1")
        client = PortalClient(http=http, sync_clock=False)
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def store():
    return SandboxStore(seed=7)


@pytest.fixture
def portal(store, portal_for):
    return portal_for(store)


@pytest.fixture
def exam_api(portal):
    return ExamAPI(portal)


@pytest.fixture
def question_api(portal):
    return QuestionAPI(portal)


@pytest.fixture
def mock_portal():
    """handler(request) -> httpx.Response 로 응답을 흉내 내는 PortalClient."""

    def _make(handler, sync_clock=False):
        http = httpx.Client(
            base_url="http://backend.test/api/v1",
            transport=httpx.MockTransport(handler),
        )
        return PortalClient(http=http, sync_clock=sync_clock)

    return _make


@pytest.fixture
def make_bank():
    """카테고리 하나에 count개 문제. 보기 id = 문제 id * 10 + (1..3), 점수 1..3."""

    def _make(count, category="TEKNIS"):
        return [
            {
                "id": i,
                "category": category,
                "question_text": f"Question {i}",
                "options": [
                    {"id": i * 10 + n, "option_text": f"Option {n}", "score": n}
                    for n in (1, 2, 3)
                ],
            }
            for i in range(1, count + 1)
        ]

    return _make


@pytest.fixture
def utc_clock():
    return FakeClock(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))
