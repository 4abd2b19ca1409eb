from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from vegmap.api.dependencies import get_current_user, get_optional_user_id, get_record_store
from vegmap.database.connection import get_db
from vegmap.main import app
from vegmap.models.user import User
from vegmap.services.record_store import SearchQueryRecord
from vegmap.services.session_service import SESSION_COOKIE_NAME


async def no_db():
    yield None


@pytest.fixture
def client(store):
    app.dependency_overrides[get_db] = no_db
    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_optional_user_id] = lambda: None
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def signed_in_as(user: User):
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_optional_user_id] = lambda: user.id


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_visit_start_sets_session_cookie(client, store):
    response = client.post("/api/progress/visit/start", headers={"user-agent": "pytest"})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert response.cookies.get(SESSION_COOKIE_NAME) == body["session_id"]
    assert store.current_visit(body["session_id"]).page_views == 1


def test_session_cookie_is_reused(client, store):
    session_id = client.post("/api/progress/visit/start").json()["session_id"]

    client.post("/api/progress/restaurant-view", json={"restaurant_id": "r1", "source": "map"})
    client.post("/api/progress/search", json={"query_text": "tofu", "results_count": 3})
    client.post("/api/progress/visit/update", json={"type": "page_view"})
    client.post("/api/progress/visit/end")

    visit = store.current_visit(session_id)
    assert len(store.visits) == 1
    assert (visit.page_views, visit.restaurants_viewed, visit.searches_performed) == (2, 1, 1)
    assert visit.duration_seconds is not None
    assert store.views[0].session_id == session_id


def test_visit_update_rejects_unknown_type(client):
    assert client.post("/api/progress/visit/update", json={"type": "scroll"}).status_code == 422


def test_tracking_failure_still_returns_ok(client, failing_store):
    app.dependency_overrides[get_record_store] = lambda: failing_store

    response = client.post("/api/progress/search", json={"query_text": "tofu"})

    assert response.json() == {"status": "ok"}


def test_progress_is_null_for_anonymous(client):
    response = client.get("/api/progress/me")

    assert response.status_code == 200
    assert response.json() is None


def test_progress_for_signed_in_user(client, store):
    signed_in_as(User(id="u1", auth_provider_id="sub-1", role="user"))
    store.searches = [
        SearchQueryRecord(
            id="q1",
            session_id="s1",
            query_text="bibimbap",
            searched_at=datetime(2026, 5, 1, tzinfo=timezone.utc),
            user_id="u1",
        )
    ]

    body = client.get("/api/progress/me").json()

    assert body["total_searches"] == 1
    assert body["recent_searches"][0]["query_text"] == "bibimbap"
    assert body["favorite_categories"] == []


def test_dashboard_requires_credentials(client):
    assert client.get("/api/admin/dashboard").status_code == 401


def test_dashboard_requires_admin_role(client):
    signed_in_as(User(id="u1", auth_provider_id="sub-1", role="user"))

    assert client.get("/api/admin/dashboard").status_code == 403


def test_dashboard_for_admin(client, store):
    signed_in_as(User(id="a1", auth_provider_id="sub-admin", role="admin"))
    store.users = ["a1"]

    body = client.get("/api/admin/dashboard").json()

    assert body["total_users"] == 1
    assert body["popular_searches"] == []
    assert body["daily_activity"] == []


def test_dashboard_is_null_when_reads_fail(client, failing_store):
    signed_in_as(User(id="a1", auth_provider_id="sub-admin", role="admin"))
    app.dependency_overrides[get_record_store] = lambda: failing_store

    response = client.get("/api/admin/dashboard")

    assert response.status_code == 200
    assert response.json() is None


@pytest.mark.parametrize("payload", [{"name_en": None}, {"is_verified": None}])
def test_admin_update_rejects_null_for_required_columns(client, payload):
    signed_in_as(User(id="a1", auth_provider_id="sub-admin", role="admin"))

    response = client.patch("/api/admin/restaurants/r1", json=payload)

    assert response.status_code == 400
    assert "cannot be empty" in response.json()["detail"]
