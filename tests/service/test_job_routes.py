"""
Tests for the local job catalog endpoints.
"""

import pytest

JOBS = [
    {"title": "Маркетолог", "company": "Ромашка", "salary": "120k ₽", "description": "Контекстная реклама"},
    {"title": "SMM-менеджер", "company": "Лютик", "salary": "180k ₽", "description": "Соцсети",
     "employmentType": "part-time", "location": "Казань"},
]


@pytest.fixture
def catalog(client, auth_headers):
    return [client.post("/api/jobs", json=job, headers=auth_headers).json() for job in JOBS]


class TestCreate:

    def test_created_with_defaults(self, client, auth_headers):
        response = client.post("/api/jobs", json=JOBS[0], headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert body["employmentType"] == "full-time"
        assert body["location"] == "Москва"
        assert body["tags"] == []

    def test_missing_field_400(self, client, auth_headers):
        response = client.post("/api/jobs", json={"title": "Маркетолог"}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid job data"

    def test_non_object_body_400(self, client, auth_headers):
        response = client.post("/api/jobs", json=["Маркетолог"], headers=auth_headers)
        assert response.status_code == 400

    def test_requires_auth(self, client, invalid_auth_headers):
        response = client.post("/api/jobs", json=JOBS[0], headers=invalid_auth_headers)
        assert response.status_code == 401


class TestRead:

    def test_list_newest_first(self, client, auth_headers, catalog):
        titles = [job["title"] for job in client.get("/api/jobs", headers=auth_headers).json()]
        assert titles == ["SMM-менеджер", "Маркетолог"]

    def test_unswiped_filters(self, client, auth_headers, catalog):
        response = client.get(
            "/api/jobs/unswiped",
            params={"location": "Казань", "salaryRange": "150-200", "company": "all"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert [job["title"] for job in response.json()] == ["SMM-менеджер"]

    def test_unswiped_unknown_salary_range_400(self, client, auth_headers, catalog):
        response = client.get("/api/jobs/unswiped", params={"salaryRange": "lots"}, headers=auth_headers)
        assert response.status_code == 400

    def test_filter_options(self, client, auth_headers, catalog):
        response = client.get("/api/jobs/filter-options", headers=auth_headers)
        assert response.json() == {"companies": ["Лютик", "Ромашка"], "locations": ["Казань", "Москва"]}

    def test_search(self, client, auth_headers, catalog):
        response = client.get("/api/jobs/search", params={"keyword": "РЕКЛАМА"}, headers=auth_headers)
        assert [job["title"] for job in response.json()] == ["Маркетолог"]
