from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from forum_service.app.api.identity import get_current_identity
from forum_service.app.config import AppConfig, TasksConfig
from forum_service.app.exceptions import UnauthorizedError
from forum_service.app.models.content import ContentItem, ContentType
from forum_service.app.services.credit_service import CreditService, get_credit_service
from forum_service.app.services.inbox_service import InboxService, get_inbox_service
from forum_service.app.services.violation_service import (
    ViolationService,
    get_violation_service,
)
from forum_service.app.main import create_app
from forum_service.tests.fakes import (
    COMMENT_ID,
    DEFAULT_NOW,
    POST_ID,
    FakeClock,
    FakeContentRepository,
    FakeInboxRepository,
    FakeScheduledJobRepository,
    FakeTransactionManager,
    FakeUserRepository,
    FakeViolationRepository,
    build_user,
    credit_config,
)


TASKS_KEY = "cron-secret"
ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Admin": "true"}


@dataclass
class ApiFixture:
    client: TestClient
    user_repo: FakeUserRepository
    content_repo: FakeContentRepository
    inbox_repo: FakeInboxRepository


def _build_fixture(tasks_key: str | None = TASKS_KEY) -> ApiFixture:
    user_repo = FakeUserRepository()
    content_repo = FakeContentRepository()
    violation_repo = FakeViolationRepository()
    inbox_repo = FakeInboxRepository()
    job_repo = FakeScheduledJobRepository()
    tx = FakeTransactionManager(
        user_repo, content_repo, violation_repo, inbox_repo, job_repo
    )
    credit_service = CreditService(
        user_repo=user_repo,
        inbox_repo=inbox_repo,
        job_repo=job_repo,
        tx_manager=tx,
        config=credit_config(),
        clock=FakeClock(),
    )
    violation_service = ViolationService(
        violation_repo=violation_repo,
        content_repo=content_repo,
        inbox_repo=inbox_repo,
        credit_service=credit_service,
        tx_manager=tx,
    )

    config = AppConfig(
        credit=credit_config(),
        tasks=TasksConfig(api_key=tasks_key, sweep_interval_seconds=0),
        port=8010,
    )
    app = create_app(config=config)
    app.dependency_overrides[get_credit_service] = lambda: credit_service
    app.dependency_overrides[get_violation_service] = lambda: violation_service
    app.dependency_overrides[get_inbox_service] = lambda: InboxService(inbox_repo)

    return ApiFixture(
        client=TestClient(app),
        user_repo=user_repo,
        content_repo=content_repo,
        inbox_repo=inbox_repo,
    )


def _user_headers(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


def test_health() -> None:
    fixture = _build_fixture()

    response = fixture.client.get("/health")

    assert response.status_code == 200


def test_credit_status_requires_identity() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("u1"))

    response = fixture.client.get("/api/v1/credits/u1")

    assert response.status_code == 401
    assert response.json() == {"detail": "로그인이 필요합니다."}


@pytest.mark.parametrize("user_id", [None, "", "   "])
def test_missing_user_header_raises_unauthorized(user_id: str | None) -> None:
    with pytest.raises(UnauthorizedError):
        get_current_identity(x_user_id=user_id, x_user_admin="true")


def test_admin_header_is_parsed_into_identity() -> None:
    identity = get_current_identity(x_user_id=" admin-1 ", x_user_admin="TRUE")

    assert identity.user_id == "admin-1"
    assert identity.is_admin is True
    assert identity.can_access("someone-else") is True


def test_credit_status_of_other_user_is_forbidden_for_non_admin() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("u1"))

    response = fixture.client.get("/api/v1/credits/u1", headers=_user_headers("u2"))

    assert response.status_code == 403
    assert response.json() == {"detail": "다른 사용자의 정보에는 접근할 수 없습니다."}


def test_credit_status_for_self() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("u1", credit_score=85))

    response = fixture.client.get("/api/v1/credits/u1", headers=_user_headers("u1"))

    assert response.status_code == 200
    body = response.json()
    assert body["credit_score"] == 85
    assert body["ban_until"] is None
    assert body["state"] == "normal"


def test_credit_status_of_unknown_user_is_404() -> None:
    fixture = _build_fixture()

    response = fixture.client.get(
        "/api/v1/credits/ghost", headers=ADMIN_HEADERS
    )

    assert response.status_code == 404


def test_admission_allowed() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("u1", credit_score=90))

    response = fixture.client.post(
        "/api/v1/credits/u1/admission", headers=_user_headers("u1")
    )

    assert response.status_code == 200
    assert response.json() == {"allowed": True, "credit_score": 90}


def test_admission_denied_while_banned_returns_403_with_remaining_hours() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(
        build_user("u1", credit_score=79, ban_until=DEFAULT_NOW + timedelta(hours=10))
    )

    response = fixture.client.post(
        "/api/v1/credits/u1/admission", headers=_user_headers("u1")
    )

    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["code"] == "posting_banned"
    assert detail["remaining_hours"] == 10
    assert detail["credit_score"] == 79
    assert detail["ban_until"].startswith("2026-10-15T22:00:00")
    assert "10시간" in detail["message"]


def test_admission_with_low_score_imposes_ban() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("u1", credit_score=70))

    response = fixture.client.post(
        "/api/v1/credits/u1/admission", headers=_user_headers("u1")
    )

    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "credit_score_too_low"
    assert fixture.user_repo.users["u1"].ban_until == DEFAULT_NOW + timedelta(hours=24)


def test_restore_requires_admin() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("u1", credit_score=40))

    response = fixture.client.post(
        "/api/v1/credits/u1/restore", headers=_user_headers("u1")
    )

    assert response.status_code == 403
    assert fixture.user_repo.users["u1"].credit_score == 40


def test_restore_by_admin() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("u1", credit_score=40))

    response = fixture.client.post("/api/v1/credits/u1/restore", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["credit_score"] == 90


def test_mark_violation_flow() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("author", credit_score=84))
    fixture.content_repo.items[(ContentType.POST, POST_ID)] = ContentItem(
        id=POST_ID,
        content_type=ContentType.POST,
        author_id="author",
        title="제목",
    )
    url = f"/api/v1/moderation/post/{POST_ID}/violation"

    created = fixture.client.post(url, json={"reason": "스팸"}, headers=ADMIN_HEADERS)
    duplicate = fixture.client.post(url, json={"reason": "스팸"}, headers=ADMIN_HEADERS)

    assert created.status_code == 201
    body = created.json()
    assert body["credit_score"] == 79
    assert body["banned"] is True
    assert body["violation"]["moderator_id"] == "admin-1"
    assert body["violation"]["points_deducted"] == 5
    assert duplicate.status_code == 409

    listed = fixture.client.get(
        f"/api/v1/moderation/post/{POST_ID}/violations", headers=ADMIN_HEADERS
    )
    assert listed.status_code == 200
    assert len(listed.json()) == 1


def test_mark_violation_with_upper_case_id_is_a_duplicate() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("author", credit_score=100))
    fixture.content_repo.items[(ContentType.POST, POST_ID)] = ContentItem(
        id=POST_ID, content_type=ContentType.POST, author_id="author", title="t"
    )

    created = fixture.client.post(
        f"/api/v1/moderation/post/{POST_ID}/violation",
        json={"reason": "스팸"},
        headers=ADMIN_HEADERS,
    )
    again = fixture.client.post(
        f"/api/v1/moderation/post/{POST_ID.upper()}/violation",
        json={"reason": "스팸"},
        headers=ADMIN_HEADERS,
    )

    assert created.status_code == 201
    assert again.status_code == 409
    assert fixture.user_repo.users["author"].credit_score == 95


def test_mark_violation_without_body_uses_default_reason() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("author"))
    fixture.content_repo.items[(ContentType.COMMENT, COMMENT_ID)] = ContentItem(
        id=COMMENT_ID,
        content_type=ContentType.COMMENT,
        author_id="author",
        content="댓글",
        post_id=POST_ID,
    )

    response = fixture.client.post(
        f"/api/v1/moderation/comment/{COMMENT_ID}/violation", headers=ADMIN_HEADERS
    )

    assert response.status_code == 201
    assert response.json()["violation"]["reason"] == "커뮤니티 규칙 위반"
    assert response.json()["credit_score"] == 99


@pytest.mark.parametrize(
    ("path", "json", "expected"),
    [
        ("/api/v1/moderation/post/missing/violation", {"reason": "x"}, 404),
        (
            "/api/v1/moderation/post/6530f1a2b3c4d5e6f7a8ffff/violation",
            {"reason": "x"},
            404,
        ),
        (f"/api/v1/moderation/reply/{POST_ID}/violation", {"reason": "x"}, 422),
        (f"/api/v1/moderation/post/{POST_ID}/violation", {"reason": "  "}, 422),
    ],
)
def test_mark_violation_errors(path: str, json: dict, expected: int) -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("author"))
    fixture.content_repo.items[(ContentType.POST, POST_ID)] = ContentItem(
        id=POST_ID, content_type=ContentType.POST, author_id="author", title="t"
    )

    response = fixture.client.post(path, json=json, headers=ADMIN_HEADERS)

    assert response.status_code == expected


def test_mark_violation_by_non_admin_is_forbidden() -> None:
    fixture = _build_fixture()

    response = fixture.client.post(
        f"/api/v1/moderation/post/{POST_ID}/violation",
        json={"reason": "x"},
        headers=_user_headers("u1"),
    )

    assert response.status_code == 403
    assert response.json() == {"detail": "관리자만 사용할 수 있습니다."}


def test_inbox_endpoints() -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(build_user("author"))
    fixture.content_repo.items[(ContentType.POST, POST_ID)] = ContentItem(
        id=POST_ID, content_type=ContentType.POST, author_id="author", title="t"
    )
    fixture.client.post(
        f"/api/v1/moderation/post/{POST_ID}/violation",
        json={"reason": "스팸"},
        headers=ADMIN_HEADERS,
    )
    headers = _user_headers("author")

    listed = fixture.client.get("/api/v1/inbox", headers=headers)
    assert listed.status_code == 200
    page = listed.json()
    assert page["total"] == 1
    assert page["items"][0]["type"] == "post_violation"
    message_id = page["items"][0]["id"]

    assert fixture.client.get("/api/v1/inbox/unread-count", headers=headers).json() == {
        "unread": 1
    }

    other = fixture.client.put(
        f"/api/v1/inbox/{message_id}/read", headers=_user_headers("u2")
    )
    assert other.status_code == 403

    marked = fixture.client.put(f"/api/v1/inbox/{message_id}/read", headers=headers)
    assert marked.status_code == 200
    assert marked.json()["is_read"] is True
    assert fixture.client.get("/api/v1/inbox/unread-count", headers=headers).json() == {
        "unread": 0
    }


def test_tasks_endpoint_requires_bearer_token() -> None:
    fixture = _build_fixture()

    missing = fixture.client.post("/api/v1/tasks/credit-score")
    wrong = fixture.client.post(
        "/api/v1/tasks/credit-score", headers={"Authorization": "Bearer nope"}
    )

    assert missing.status_code == 401
    assert wrong.status_code == 401


@pytest.mark.parametrize("method", ["GET", "POST"])
def test_tasks_endpoint_runs_sweeps(method: str) -> None:
    fixture = _build_fixture()
    fixture.user_repo.add(
        build_user("u1", credit_score=60, ban_until=DEFAULT_NOW - timedelta(hours=1))
    )

    response = fixture.client.request(
        method,
        "/api/v1/tasks/credit-score",
        headers={"Authorization": f"Bearer {TASKS_KEY}"},
    )

    assert response.status_code == 200
    # DEFAULT_NOW 은 목요일이라 주간 리셋 창 밖이다.
    assert response.json() == {"unbanned_users": 1, "reset_users": 0}
    assert fixture.user_repo.users["u1"].credit_score == 80


def test_tasks_endpoint_disabled_without_key() -> None:
    fixture = _build_fixture(tasks_key=None)

    response = fixture.client.post(
        "/api/v1/tasks/credit-score", headers={"Authorization": "Bearer anything"}
    )

    assert response.status_code == 503
