"""
Tests for resume, profile and OAuth endpoints.
"""

from datetime import datetime, timedelta, timezone

import pytest

from jobswipe.common.models import Resume, User


@pytest.fixture
def hh_user(repositories):
    return repositories.users.add(User(
        hh_user_id="777",
        email="anna@example.ru",
        hh_access_token="access-0",
        hh_refresh_token="refresh-0",
        hh_token_expires_at=datetime.now(timezone.utc) + timedelta(days=7),
    ))


class TestResumeSync:

    def test_sync_stores_and_selects(self, client, auth_headers, hh_user, repositories):
        response = client.post("/api/hh/resumes/sync", json={"userId": hh_user.id}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["count"] == 1
        selected = repositories.resumes.get_selected(hh_user.id)
        assert selected.hh_resume_id == "hh-r1"
        assert selected.content.startswith("Анна Петрова")

    def test_sync_without_tokens(self, client, auth_headers, repositories):
        user = repositories.users.add(User(hh_user_id="1"))
        response = client.post("/api/hh/resumes/sync", json={"userId": user.id}, headers=auth_headers)

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated with HH.ru"

    def test_list_and_select(self, client, auth_headers, hh_user, repositories):
        first = repositories.resumes.add(Resume(user_id=hh_user.id, hh_resume_id="a", title="A", selected=True))
        second = repositories.resumes.add(Resume(user_id=hh_user.id, hh_resume_id="b", title="B"))

        response = client.post(
            "/api/hh/resumes/select",
            json={"userId": hh_user.id, "resumeId": second.id},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["selected"] is True
        listed = client.get(f"/api/hh/resumes?userId={hh_user.id}", headers=auth_headers).json()
        assert [r["id"] for r in listed if r["selected"]] == [second.id]
        assert repositories.resumes.get(first.id).selected is False

    def test_select_unknown_resume(self, client, auth_headers, hh_user):
        response = client.post(
            "/api/hh/resumes/select",
            json={"userId": hh_user.id, "resumeId": "64b000000000000000000000"},
            headers=auth_headers,
        )
        assert response.status_code == 404


class TestManualResume:

    def test_save_and_get(self, client, auth_headers):
        saved = client.post("/api/resume", json={"userId": "u1", "content": "Мой опыт"}, headers=auth_headers)
        assert saved.status_code == 201

        fetched = client.get("/api/resume?userId=u1", headers=auth_headers)
        assert fetched.json() == {"content": "Мой опыт"}

    def test_content_must_be_string(self, client, auth_headers):
        response = client.post("/api/resume", json={"userId": "u1", "content": 5}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Content must be a string"

    def test_get_requires_user(self, client, auth_headers):
        assert client.get("/api/resume", headers=auth_headers).status_code == 400


class TestProfile:

    def test_profile_and_profession(self, client, auth_headers, hh_user, repositories):
        repositories.resumes.add(Resume(user_id=hh_user.id, hh_resume_id="a", title="SMM", selected=True))

        profile = client.get(f"/api/profile?userId={hh_user.id}", headers=auth_headers).json()
        profession = client.get(f"/api/user/profession?userId={hh_user.id}", headers=auth_headers).json()

        assert profile["hhConnected"] is True
        assert profile["user"]["email"] == "anna@example.ru"
        assert profession == {"profession": "SMM", "resumeTitle": "SMM"}

    def test_profession_without_user(self, client, auth_headers):
        assert client.get("/api/user/profession", headers=auth_headers).json() == {"profession": None}


class TestOAuth:

    def test_start_redirects_to_hh(self, client):
        response = client.get("/auth/hh/start", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"].startswith("https://hh.ru/oauth/authorize?response_type=code")

    def test_callback_without_code(self, client):
        response = client.get("/auth/hh/callback", follow_redirects=False)
        assert response.headers["location"] == "/?hhAuth=error&reason=no_code"

    def test_callback_creates_user_and_syncs(self, client, repositories):
        response = client.get("/auth/hh/callback?code=abc", follow_redirects=False)

        assert response.status_code == 302
        location = response.headers["location"]
        assert location.endswith("hhAuth=success")
        user = repositories.users.get_by_hh_user_id("777")
        assert f"userId={user.id}" in location
        assert user.hh_access_token == "access-1"
        assert repositories.resumes.get_selected(user.id).hh_resume_id == "hh-r1"

    def test_callback_token_failure(self, client, fake_hh):
        fake_hh.token_status = 400
        response = client.get("/auth/hh/callback?code=bad", follow_redirects=False)
        assert response.headers["location"] == "/?hhAuth=error"

    def test_auth_status(self, client, auth_headers, hh_user):
        status = client.get(f"/api/auth/status?userId={hh_user.id}").json()
        assert status["authenticated"] is True
        assert status["user"]["hhUserId"] == "777"

        assert client.get("/api/auth/status").json() == {"authenticated": False}
