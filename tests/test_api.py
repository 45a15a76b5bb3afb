"""
End-to-end tests through the HTTP API.
"""

import time

import pytest
from fastapi.testclient import TestClient

from jobboard.api.app import create_app
from tests.conftest import bearer

API = "/api/v1"
RESUME = "Senior engineer with Python, Django, PostgreSQL and Kubernetes."
JOB_BODY = {
    "title": "Senior Python Engineer",
    "description": "Own our backend services.",
    "requirements": "python, django, postgresql, kubernetes",
    "location": "Remote",
    "salary": "90k-110k EUR",
}


def register(client, role: str, email: str) -> tuple[dict, dict]:
    response = client.post(
        f"{API}/auth/register",
        json={
            "email": email,
            "password": "long-enough-password",
            "role": role,
            "first_name": role.title(),
            "last_name": "Tester",
        },
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def employer_auth(client):
    return register(client, "employer", "boss@example.com")


@pytest.fixture
def candidate_auth(client):
    return register(client, "candidate", "seeker@example.com")


@pytest.fixture
def posted_job(client, employer_auth):
    _, headers = employer_auth
    response = client.post(f"{API}/jobs", json=JOB_BODY, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestHealth:
    def test_reports_heuristic_scoring(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "scoring": {"enabled": False, "provider": "heuristic"}}


class TestAuth:
    def test_register_returns_user_and_token(self, client):
        user, headers = register(client, "candidate", "New.User@Example.com")

        assert user["email"] == "new.user@example.com"
        assert user["role"] == "candidate"
        assert "password_hash" not in user

        me = client.get(f"{API}/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["data"]["id"] == user["id"]

    def test_duplicate_email(self, client, candidate_auth):
        response = client.post(
            f"{API}/auth/register",
            json={
                "email": "seeker@example.com",
                "password": "another-password",
                "role": "employer",
                "first_name": "Dup",
                "last_name": "Licate",
            },
        )

        assert response.status_code == 409
        assert response.json() == {"success": False, "error": "User already exists with this email"}

    def test_register_validation(self, client):
        response = client.post(
            f"{API}/auth/register",
            json={"email": "not-an-email", "password": "short", "role": "admin"},
        )

        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["error"] == "Validation error"

    def test_login(self, client, candidate_auth):
        response = client.post(
            f"{API}/auth/login",
            json={"email": "seeker@example.com", "password": "long-enough-password"},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Login successful"
        assert response.json()["data"]["token"]

    def test_login_wrong_password(self, client, candidate_auth):
        response = client.post(
            f"{API}/auth/login",
            json={"email": "seeker@example.com", "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Invalid credentials"}

    def test_me_requires_token(self, client):
        response = client.get(f"{API}/auth/me")

        assert response.status_code == 401
        assert response.json()["error"] == "Access token is required"

    def test_me_rejects_bad_token(self, client):
        response = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer nonsense"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"

    def test_update_profile(self, client, candidate_auth):
        _, headers = candidate_auth

        response = client.put(
            f"{API}/auth/me",
            json={"skills": ["python", "sql"], "bio": "Backend developer"},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["skills"] == ["python", "sql"]
        assert response.json()["data"]["bio"] == "Backend developer"

    def test_refresh(self, client, candidate_auth):
        user, headers = candidate_auth

        response = client.post(f"{API}/auth/refresh", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["user"]["id"] == user["id"]


class TestJobs:
    def test_candidate_cannot_post(self, client, candidate_auth):
        _, headers = candidate_auth

        response = client.post(f"{API}/jobs", json=JOB_BODY, headers=headers)

        assert response.status_code == 403
        assert response.json() == {"success": False, "error": "Insufficient permissions"}

    def test_posting_requires_token(self, client):
        assert client.post(f"{API}/jobs", json=JOB_BODY).status_code == 401

    def test_post_and_fetch(self, client, posted_job, employer_auth):
        employer, _ = employer_auth

        assert posted_job["status"] == "active"
        assert posted_job["employer"]["id"] == employer["id"]

        response = client.get(f"{API}/jobs/{posted_job['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["title"] == JOB_BODY["title"]

    def test_unknown_job(self, client):
        response = client.get(f"{API}/jobs/does-not-exist")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_public_listing_is_paginated(self, client, employer_auth):
        _, headers = employer_auth
        for i in range(12):
            client.post(f"{API}/jobs", json={**JOB_BODY, "title": f"Role {i}"}, headers=headers)
        client.post(f"{API}/jobs", json={**JOB_BODY, "status": "draft"}, headers=headers)

        response = client.get(f"{API}/jobs", params={"page": 2, "limit": 5})

        body = response.json()
        assert response.status_code == 200
        assert len(body["data"]) == 5
        assert body["pagination"] == {"page": 2, "limit": 5, "total": 12, "total_pages": 3}

    def test_search_and_location(self, client, employer_auth):
        _, headers = employer_auth
        client.post(f"{API}/jobs", json={**JOB_BODY, "title": "Data Analyst", "location": "Paris"}, headers=headers)
        client.post(f"{API}/jobs", json=JOB_BODY, headers=headers)

        response = client.get(f"{API}/jobs", params={"search": "analyst", "location": "par"})

        assert [job["title"] for job in response.json()["data"]] == ["Data Analyst"]

    def test_bad_sort_field(self, client):
        response = client.get(f"{API}/jobs", params={"sort_by": "owner_id"})

        assert response.status_code == 400

    def test_zero_limit_is_rejected(self, client, employer_auth):
        _, headers = employer_auth

        assert client.get(f"{API}/jobs", params={"limit": 0}).status_code == 400
        assert client.get(f"{API}/jobs/employer/my-jobs", params={"limit": 0}, headers=headers).status_code == 400

    def test_my_jobs_include_drafts(self, client, employer_auth, posted_job):
        _, headers = employer_auth
        client.post(f"{API}/jobs", json={**JOB_BODY, "status": "draft"}, headers=headers)

        response = client.get(f"{API}/jobs/employer/my-jobs", headers=headers)

        assert response.json()["pagination"]["total"] == 2

    def test_update_and_delete_by_owner(self, client, employer_auth, posted_job):
        _, headers = employer_auth
        url = f"{API}/jobs/{posted_job['id']}"

        updated = client.put(url, json={"status": "closed"}, headers=headers)
        assert updated.status_code == 200
        assert updated.json()["data"]["status"] == "closed"

        deleted = client.delete(url, headers=headers)
        assert deleted.status_code == 200
        assert deleted.json()["success"] is True
        assert client.get(url).status_code == 404

    def test_other_employer_cannot_modify(self, client, posted_job):
        _, headers = register(client, "employer", "rival@example.com")
        url = f"{API}/jobs/{posted_job['id']}"

        assert client.put(url, json={"title": "Mine"}, headers=headers).status_code == 404
        assert client.delete(url, headers=headers).status_code == 404


class TestApplications:
    def apply(self, client, headers, job_id: str, resume: str = RESUME):
        return client.post(
            f"{API}/applications",
            json={"job_id": job_id, "resume": resume, "cover_letter": "Keen to join."},
            headers=headers,
        )

    def test_apply_returns_pending_unscored(self, client, candidate_auth, posted_job):
        _, headers = candidate_auth

        response = self.apply(client, headers, posted_job["id"])

        data = response.json()["data"]
        assert response.status_code == 201
        assert response.json()["message"] == "Application submitted successfully"
        assert data["status"] == "pending"
        assert data["score"] is None
        assert data["job"]["id"] == posted_job["id"]

    def test_score_arrives_in_background(self, client, candidate_auth, posted_job):
        _, headers = candidate_auth
        application_id = self.apply(client, headers, posted_job["id"]).json()["data"]["id"]

        data = None
        for _ in range(50):
            data = client.get(f"{API}/applications/{application_id}", headers=headers).json()["data"]
            if data["score"] is not None:
                break
            time.sleep(0.1)

        assert data["score"] is not None
        assert 30 <= data["score"] <= 100
        assert data["score_detail"]["source"] == "fallback"
        assert data["status"] == "pending"

    def test_duplicate_application(self, client, candidate_auth, posted_job):
        _, headers = candidate_auth
        self.apply(client, headers, posted_job["id"])

        response = self.apply(client, headers, posted_job["id"])

        assert response.status_code == 409
        assert response.json() == {"success": False, "error": "You have already applied to this job"}

    def test_unknown_job(self, client, candidate_auth):
        _, headers = candidate_auth

        response = self.apply(client, headers, "does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"] == "Job not found"

    def test_missing_resume(self, client, candidate_auth, posted_job):
        _, headers = candidate_auth

        response = client.post(f"{API}/applications", json={"job_id": posted_job["id"]}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"

    def test_employer_cannot_apply(self, client, employer_auth, posted_job):
        _, headers = employer_auth

        assert self.apply(client, headers, posted_job["id"]).status_code == 403

    def test_my_applications(self, client, candidate_auth, posted_job):
        _, headers = candidate_auth
        self.apply(client, headers, posted_job["id"])

        response = client.get(f"{API}/applications/my-applications", headers=headers)

        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["job"]["title"] == JOB_BODY["title"]
        assert data[0]["candidate"] is None

    def test_employer_reviews(self, client, employer_auth, candidate_auth, posted_job):
        _, employer_headers = employer_auth
        candidate, candidate_headers = candidate_auth
        application_id = self.apply(client, candidate_headers, posted_job["id"]).json()["data"]["id"]

        listed = client.get(f"{API}/applications/job/{posted_job['id']}", headers=employer_headers)
        assert [a["candidate"]["id"] for a in listed.json()["data"]] == [candidate["id"]]

        response = client.put(
            f"{API}/applications/{application_id}/status",
            json={"status": "accepted"},
            headers=employer_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "accepted"

    def test_invalid_status(self, client, employer_auth, candidate_auth, posted_job):
        _, employer_headers = employer_auth
        _, candidate_headers = candidate_auth
        application_id = self.apply(client, candidate_headers, posted_job["id"]).json()["data"]["id"]

        response = client.put(
            f"{API}/applications/{application_id}/status",
            json={"status": "hired"},
            headers=employer_headers,
        )

        assert response.status_code == 400

    def test_other_employer_cannot_list_or_review(self, client, candidate_auth, posted_job):
        _, candidate_headers = candidate_auth
        application_id = self.apply(client, candidate_headers, posted_job["id"]).json()["data"]["id"]
        _, rival = register(client, "employer", "rival@example.com")

        listed = client.get(f"{API}/applications/job/{posted_job['id']}", headers=rival)
        assert listed.status_code == 403
        assert listed.json()["error"] == "Job not found or access denied"

        reviewed = client.put(
            f"{API}/applications/{application_id}/status",
            json={"status": "rejected"},
            headers=rival,
        )
        assert reviewed.status_code == 404

    def test_other_candidate_cannot_view(self, client, candidate_auth, posted_job):
        _, headers = candidate_auth
        application_id = self.apply(client, headers, posted_job["id"]).json()["data"]["id"]
        _, stranger = register(client, "candidate", "stranger@example.com")

        response = client.get(f"{API}/applications/{application_id}", headers=stranger)

        assert response.status_code == 404
        assert response.json()["success"] is False


@pytest.fixture
def limited_client(settings, database):
    """App whose own settings switch rate limiting on with tight limits."""
    limited = settings.model_copy(
        update={"rate_limit_enabled": True, "apply_rate_limit": "1/minute", "auth_rate_limit": "1/minute"}
    )
    with TestClient(create_app(limited, database=database)) as test_client:
        yield test_client


class TestRateLimits:
    def test_apply_limit_comes_from_app_settings(self, limited_client, make_job, employer, candidate, tokens):
        headers = bearer(tokens, candidate)
        statuses = [
            limited_client.post(
                f"{API}/applications",
                json={"job_id": make_job(employer).id, "resume": RESUME},
                headers=headers,
            )
            for _ in range(2)
        ]

        assert [r.status_code for r in statuses] == [201, 429]
        assert statuses[1].json() == {"success": False, "error": "Rate limit exceeded: 1/minute"}

    def test_auth_limit_is_per_route(self, limited_client):
        body = {"email": "nobody@example.com", "password": "whatever-password"}

        assert limited_client.post(f"{API}/auth/login", json=body).status_code == 401
        assert limited_client.post(f"{API}/auth/login", json=body).status_code == 429
        assert register(limited_client, "candidate", "first@example.com")

    def test_apps_do_not_share_limits(self, limited_client, client, make_job, employer, candidate, tokens):
        headers = bearer(tokens, candidate)

        for _ in range(3):
            response = client.post(
                f"{API}/applications",
                json={"job_id": make_job(employer).id, "resume": RESUME},
                headers=headers,
            )
            assert response.status_code == 201
