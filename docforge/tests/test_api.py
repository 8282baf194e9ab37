"""Tests for the HTTP API."""

import base64


class TestHealth:
    def test_root_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_api_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["version"] == "1.0.0"

    def test_ready(self, client):
        response = client.get("/api/v1/ready")
        body = response.json()
        assert body["ready"] is True
        assert body["checks"] == {"catalog": True}
        assert body["catalog"]["patterns"] == 6
        assert "legal" in body["catalog"]["categories"]

    def test_request_id_header(self, client):
        response = client.get("/api/v1/patterns", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"


class TestPatterns:
    """Catalog browsing and feedback."""

    def test_list_all(self, client):
        body = client.get("/api/v1/patterns").json()
        assert body["total"] == len(body["patterns"]) == 6

    def test_search_filters(self, client):
        body = client.get("/api/v1/patterns", params={"category": "legal"}).json()
        assert [p["id"] for p in body["patterns"]] == ["service-agreement"]

    def test_categories(self, client):
        body = client.get("/api/v1/patterns/categories").json()
        assert "business" in body["categories"]
        assert "simple" in body["complexity_levels"]

    def test_get_pattern(self, client):
        response = client.get("/api/v1/patterns/business-proposal")
        assert response.status_code == 200
        assert response.json()["name"] == "Business Proposal"

    def test_unknown_pattern(self, client):
        response = client.get("/api/v1/patterns/missing")
        assert response.status_code == 404
        assert response.json()["detail"] == "Pattern not found: missing"

    def test_similar(self, client):
        body = client.get("/api/v1/patterns/business-proposal/similar", params={"limit": 2}).json()
        assert len(body) == 2
        assert all(r["pattern"]["id"] != "business-proposal" for r in body)

    def test_feedback(self, client):
        response = client.post("/api/v1/patterns/case-study/feedback", json={"rating": 4, "feedback": "Clear"})
        assert response.status_code == 200
        body = response.json()
        assert body["pattern_id"] == "case-study"
        assert body["feedback_count"] >= 1
        assert "Clear" in body["feedback"]

    def test_feedback_out_of_range(self, client):
        response = client.post("/api/v1/patterns/case-study/feedback", json={"rating": 9})
        assert response.status_code == 422
        assert response.json()["detail"][0]["field"] == "rating"


class TestRecommendationsAndPresets:
    def test_recommendations(self, client):
        response = client.get("/api/v1/recommendations/user-1", params={"industry": "technology"})
        assert response.status_code == 200
        assert all("score" in r for r in response.json())

    def test_presets(self, client):
        ids = [p["id"] for p in client.get("/api/v1/presets").json()]
        assert "professional" in ids


class TestExports:
    """POST /api/v1/exports."""

    def test_html_export(self, client, proposal_data):
        response = client.post("/api/v1/exports", json={
            "pattern_id": "business-proposal",
            "data": proposal_data,
            "options": {"format": "html"},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert "Website Revamp" in body["html"]
        assert body["pdf"] is None

    def test_pdf_export(self, client, proposal_data):
        response = client.post("/api/v1/exports", json={
            "pattern_id": "business-proposal",
            "data": proposal_data,
            "options": {"format": "pdf", "quality": "draft"},
        })
        body = response.json()
        assert body["success"] is True
        assert body["pdf"]["page_count"] >= 1
        assert base64.b64decode(body["pdf"]["content_base64"]).startswith(b"%PDF")

    def test_missing_data_reported(self, client):
        """Empty data fails the export and names the required variables."""
        response = client.post("/api/v1/exports", json={
            "pattern_id": "meeting-minutes",
            "options": {"format": "html"},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert "meeting_title" in body["errors"][0]
        assert "attendees" in body["errors"][0]

    def test_unknown_pattern(self, client):
        response = client.post("/api/v1/exports", json={"pattern_id": "missing"})
        assert response.status_code == 404

    def test_invalid_customizations(self, client):
        response = client.post("/api/v1/exports", json={
            "pattern_id": "business-proposal",
            "customizations": {"colors": {"primary": "not-a-color"}},
        })
        assert response.status_code == 422
