"""Integration tests for API endpoints."""
import pytest
from fastapi.testclient import TestClient
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from moleco.api.main import app
from moleco.config import settings

client = TestClient(app)

CAFFEINE = "InChI=1S/C8H10N4O2/c1-10-4-9-6-5(10)7(13)12(3)8(14)11(6)2/h4H,1-3H3"
FORMALDEHYDE = (
    "MInChI=0.00.1S/CH2O/c1-2/h1H2&CH4O/c1-2/h2H,1H3&H2O/h1H2"
    "/n{{1&3}&2}/g{{37wf-2&}&10:15pp0}"
)


class TestAPIEndpoints:
    """Test cases for API endpoints."""

    def test_root_endpoint(self):
        """Test root endpoint."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "message" in data
        assert "version" in data

    def test_health_check(self):
        """Test health check endpoint."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "timestamp" in data


class TestSwatchEndpoint:
    """Test cases for the single swatch endpoint."""

    def test_single_substance(self):
        """Test swatch of one InChI."""
        response = client.post("/api/v1/swatch", json={"identifier": CAFFEINE})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["notation"] == "InChI"
        assert len(data["segments"]) == 1
        segment = data["segments"][0]
        assert segment["proportion"] == 1.0
        assert segment["depth"] == 0
        assert segment["identifier"] == CAFFEINE[len("InChI=1S/"):]
        assert segment["color"]["hex"].startswith("#")

    def test_mixture(self):
        """Test swatch of a nested mixture."""
        response = client.post("/api/v1/swatch", json={"identifier": FORMALDEHYDE})
        assert response.status_code == 200
        data = response.json()
        assert data["components"] == ["CH2O/c1-2/h1H2", "CH4O/c1-2/h2H,1H3", "H2O/h1H2"]
        assert [s["component_index"] for s in data["segments"]] == [1, 3, 2]
        assert [s["proportion"] for s in data["segments"]] == pytest.approx(
            [0.32375, 0.55125, 0.125], abs=1e-9
        )
        assert data["totals"]["2"] == pytest.approx(0.125)

    def test_unsupported_format(self):
        """Test that hashed keys are rejected with the failure kind."""
        response = client.post(
            "/api/v1/swatch",
            json={"identifier": "InChIKey=RYYVLZVUVIJVGH-UHFFFAOYSA-N"}
        )
        assert response.status_code == 400
        data = response.json()
        assert data["kind"] == "UnsupportedFormat"
        assert data["offset"] == 0

    def test_unbalanced_grouping(self):
        """Test that parse failures report their offset."""
        identifier = "MInChI=0.00.1S/H2O/h1H2&CH4O/c1-2/h2H,1H3/n{1&2/g{50pp0&50pp0}"
        response = client.post("/api/v1/swatch", json={"identifier": identifier})
        assert response.status_code == 400
        data = response.json()
        assert data["kind"] == "UnbalancedGrouping"
        assert data["offset"] == identifier.index("/n{") + 2

    def test_weight_exponent_out_of_range(self):
        """Test that an out-of-range weight is a parse error, not a server error."""
        identifier = "MInChI=0.00.1S/H2O/h1H2&CH4O/c1-2/h2H,1H3/n{1&2}/g{1wf-400&}"
        response = client.post("/api/v1/swatch", json={"identifier": identifier})
        assert response.status_code == 400
        data = response.json()
        assert data["kind"] == "MalformedWeight"
        assert data["offset"] == identifier.index("1wf-400")

    def test_version_override(self):
        """Test the per-request version check."""
        response = client.post("/api/v1/swatch", json={"identifier": "InChI=1/H2O/h1H2"})
        assert response.status_code == 400

        response = client.post(
            "/api/v1/swatch",
            json={"identifier": "InChI=1/H2O/h1H2", "strict_version_check": False}
        )
        assert response.status_code == 200
        assert response.json()["version"] == "1"

    def test_empty_identifier(self):
        """Test swatch with empty identifier."""
        response = client.post("/api/v1/swatch", json={"identifier": ""})
        assert response.status_code == 422


class TestBatchSwatchEndpoint:
    """Test cases for the batch swatch endpoint."""

    def test_mixed_results(self):
        """Test that failures are reported per identifier."""
        response = client.post(
            "/api/v1/batch-swatch",
            json={"identifiers": [CAFFEINE, "SMILES=CCO", FORMALDEHYDE]}
        )
        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["success"] for r in results] == [True, False, True]
        assert results[1]["kind"] == "UnsupportedFormat"
        assert results[1]["segments"] is None

    def test_empty_list(self):
        """Test batch swatch with empty identifier list."""
        response = client.post("/api/v1/batch-swatch", json={"identifiers": []})
        assert response.status_code == 422

    def test_too_many(self):
        """Test batch swatch with too many identifiers."""
        identifiers = [CAFFEINE] * (settings.max_batch_size + 1)
        response = client.post("/api/v1/batch-swatch", json={"identifiers": identifiers})
        assert response.status_code == 422


class TestColorsEndpoint:
    """Test cases for the color scheme endpoint."""

    def test_json(self):
        """Test color schemes as JSON."""
        response = client.post(
            "/api/v1/colors",
            json={"identifiers": [CAFFEINE, "H2O/h1H2"]}
        )
        assert response.status_code == 200
        data = response.json()
        assert set(data["schemes"]) == {CAFFEINE, "H2O/h1H2"}
        scheme = data["schemes"]["H2O/h1H2"]
        assert scheme["primary"]["lightness"] == scheme["complementary"]["lightness"]
        assert data["min_separation"] > 0

    def test_single_has_no_separation(self):
        response = client.post("/api/v1/colors", json={"identifiers": ["H2O/h1H2"]})
        assert response.status_code == 200
        assert response.json()["min_separation"] is None

    def test_csv(self):
        """Test color schemes as CSV."""
        response = client.post(
            "/api/v1/colors",
            json={"identifiers": [CAFFEINE, "H2O/h1H2"], "format": "csv"}
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        lines = response.text.strip().splitlines()
        assert lines[0].startswith("substance,primary_hue,primary_hex")
        assert len(lines) == 3

    def test_mixture_rejected(self):
        """Test that mixtures are rejected."""
        response = client.post("/api/v1/colors", json={"identifiers": [FORMALDEHYDE]})
        assert response.status_code == 400
        assert response.json()["kind"] == "UnsupportedFormat"

    def test_key_rejected(self):
        """Test that hashed keys are not colored as if they were substances."""
        response = client.post(
            "/api/v1/colors",
            json={"identifiers": ["InChIKey=RYYVLZVUVIJVGH-UHFFFAOYSA-N"]}
        )
        assert response.status_code == 400
        data = response.json()
        assert data["kind"] == "UnsupportedFormat"
        assert data["offset"] == 0

    def test_invalid_format(self):
        response = client.post(
            "/api/v1/colors",
            json={"identifiers": ["H2O/h1H2"], "format": "xml"}
        )
        assert response.status_code == 422


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
