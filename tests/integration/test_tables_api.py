"""
Integration tests for the tables API.

Tests the HTTP surface end to end against an in-memory reference context:
- JSON and HTML table rendering
- Ingredient detection from recipe text
- Load failures surfaced as 503
"""
import pytest
from fastapi.testclient import TestClient

from app.api.tables import get_reference_context
from app.main import app
from app.services.data_provider import InMemoryReferenceProvider
from app.services.reference_context import ReferenceContext


@pytest.fixture
def broken_client():
    """Client whose reference data cannot be loaded."""
    context = ReferenceContext(InMemoryReferenceProvider({}))
    app.dependency_overrides[get_reference_context] = lambda: context
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestRenderTablesJson:
    """Tests for POST /tables."""

    def test_filters_by_alias(self, client: TestClient):
        response = client.post("/tables", json={"ingredients": ["haldi"]})

        assert response.status_code == 200
        data = response.json()
        assert data["ingredients"] == ["Turmeric"]
        assert data["status"] == "Showing tables for: Turmeric"
        cognitive = next(t for t in data["tables"] if t["name"] == "cognitive")
        assert cognitive["rows"] == [
            {"ingredient_name": "Turmeric", "benefit": "anti-inflammatory"}
        ]
        assert cognitive["columns"] == ["ingredient_name", "benefit"]
        others = [t for t in data["tables"] if t["name"] != "cognitive"]
        assert all(t["rows"] == [] for t in others)

    def test_missing_body_field_defaults_to_empty(self, client: TestClient):
        """Test that an empty body renders every row (no filter criteria)."""
        response = client.post("/tables", json={})

        assert response.status_code == 200
        nutrition = response.json()["tables"][0]
        assert len(nutrition["rows"]) == 4

    def test_invalid_body_rejected(self, client: TestClient):
        response = client.post("/tables", json={"ingredients": "kale"})

        assert response.status_code == 422

    def test_load_failure_returns_503(self, broken_client: TestClient):
        response = broken_client.post("/tables", json={"ingredients": ["Kale"]})

        assert response.status_code == 503
        assert response.json()["error"].startswith("Error rendering tables:")

    def test_context_loaded_once_across_requests(self, client: TestClient, context):
        client.post("/tables", json={"ingredients": ["Kale"]})
        client.post("/tables", json={"ingredients": ["Carrot"]})

        assert context.is_loaded is True


class TestRenderTablesHtml:
    """Tests for POST /tables/html."""

    def test_returns_fragment(self, client: TestClient):
        response = client.post("/tables/html", json={"ingredients": ["Kale"]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "<h3>Nutrition</h3>" in response.text
        assert "<td>Kale</td>" in response.text

    def test_no_matches_message(self, client: TestClient):
        response = client.post("/tables/html", json={"ingredients": ["Moon Cheese"]})

        assert response.status_code == 200
        assert "No matching rows were found for the selected ingredients." in response.text

    def test_load_failure_renders_error(self, broken_client: TestClient):
        response = broken_client.post("/tables/html", json={"ingredients": ["Kale"]})

        assert response.status_code == 503
        assert 'class="error"' in response.text


class TestDeriveIngredients:
    """Tests for POST /tables/ingredients/derive."""

    def test_detects_names_and_aliases(self, client: TestClient):
        response = client.post(
            "/tables/ingredients/derive",
            json={"text": "Roast the carrot with haldi and a drizzle of evoo"},
        )

        assert response.status_code == 200
        assert set(response.json()["ingredients"]) == {
            "Carrot",
            "Turmeric",
            "Extra Virgin Olive Oil",
        }

    def test_empty_text(self, client: TestClient):
        response = client.post("/tables/ingredients/derive", json={"text": ""})

        assert response.status_code == 200
        assert response.json() == {"ingredients": []}

    def test_load_failure_returns_503(self, broken_client: TestClient):
        response = broken_client.post("/tables/ingredients/derive", json={"text": "kale"})

        assert response.status_code == 503
        assert "Reference data unavailable" in response.json()["detail"]
