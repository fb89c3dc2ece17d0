"""
Unit tests for the Shipment Tracking API.
"""

from shiptrack.common.errors import ExternalServiceError, RouteNotFoundError, StorageError
from shiptrack.integrations import TravelEstimate

ESTIMATE = TravelEstimate(
    start_name="Delhi, India",
    end_name="Mumbai, India",
    duration_seconds=5400.0,
    distance_meters=1400000.0,
    profile="driving-car",
)


def create(client, payload):
    response = client.post("/api/shipments", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_returns_healthy(self, api_client):
        """Test health endpoint returns healthy status."""
        response = api_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["environment"] == "test"
        assert "timestamp" in data


class TestRootEndpoint:
    """Tests for root endpoint."""

    def test_root_returns_api_info(self, api_client):
        """Test root endpoint returns API info."""
        response = api_client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Shipment Tracking API"
        assert data["version"] == "1.0.0"


class TestShipmentEndpoints:
    """Tests for shipment CRUD endpoints."""

    def test_list_shipments_returns_empty(self, api_client):
        """Test listing shipments returns empty list."""
        response = api_client.get("/api/shipments")

        assert response.status_code == 200
        assert response.json() == []

    def test_create_shipment(self, api_client, create_payload):
        """Test creating a shipment returns the pending record."""
        data = create(api_client, create_payload)

        assert data["status"] == "pending"
        assert data["currentLocation"] == "Delhi"
        assert data["locationHistory"][0]["officer"] == "System"
        assert data["locationHistory"][0]["action"] == "dispatched"
        assert data["version"] == 1

    def test_create_missing_field(self, api_client, create_payload):
        """Test that a missing field returns 400 with an error message."""
        del create_payload["supply"]

        response = api_client.post("/api/shipments", json=create_payload)

        assert response.status_code == 400
        assert "All fields are required" in response.json()["error"]

    def test_create_duplicate(self, api_client, create_payload):
        """Test that a duplicate id returns 400."""
        create(api_client, create_payload)

        response = api_client.post("/api/shipments", json=create_payload)

        assert response.status_code == 400
        assert response.json() == {"error": "Shipment ID already exists: S1"}

    def test_malformed_body(self, api_client):
        """Test that a body of the wrong type is a 400."""
        response = api_client.post("/api/shipments", json=["not", "an", "object"])

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    def test_get_shipment_with_etag(self, api_client, create_payload):
        """Test that a read returns the record and its version tag."""
        create(api_client, create_payload)

        response = api_client.get("/api/shipments/S1")

        assert response.status_code == 200
        assert response.headers["ETag"] == '"1"'
        assert response.json()["id"] == "S1"

    def test_get_unknown_shipment(self, api_client):
        """Test that an unknown id returns 404."""
        response = api_client.get("/api/shipments/NOPE")

        assert response.status_code == 404
        assert response.json() == {"error": "Shipment not found"}

    def test_update_shipment(self, api_client, create_payload):
        """Test a partial edit keeps unspecified fields."""
        create(api_client, create_payload)

        response = api_client.put("/api/shipments/S1", json={"status": "in_transit", "name": ""})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "in_transit"
        assert data["name"] == "Medkit"
        assert response.headers["ETag"] == '"2"'

    def test_update_with_stale_if_match(self, api_client, create_payload):
        """Test that an outdated If-Match is rejected with 409."""
        create(api_client, create_payload)
        api_client.post("/api/shipments/S1/location", json={"location": "Jaipur"})

        response = api_client.put("/api/shipments/S1", json={"name": "Late"}, headers={"If-Match": '"1"'})

        assert response.status_code == 409
        assert api_client.get("/api/shipments/S1").json()["name"] == "Medkit"

    def test_update_with_current_if_match(self, api_client, create_payload):
        """Test that the current ETag is accepted."""
        create(api_client, create_payload)
        etag = api_client.get("/api/shipments/S1").headers["ETag"]

        response = api_client.put("/api/shipments/S1", json={"name": "Fresh"}, headers={"If-Match": etag})

        assert response.status_code == 200
        assert response.json()["name"] == "Fresh"

    def test_update_with_invalid_if_match(self, api_client, create_payload):
        """Test that a non-numeric If-Match is a 400."""
        create(api_client, create_payload)

        response = api_client.put("/api/shipments/S1", json={"name": "x"}, headers={"If-Match": "abc"})

        assert response.status_code == 400

    def test_update_unknown_shipment(self, api_client):
        """Test that editing an unknown id returns 404."""
        response = api_client.put("/api/shipments/NOPE", json={"name": "x"})

        assert response.status_code == 404

    def test_delete_then_get(self, api_client, create_payload):
        """Test that a deleted shipment returns 404 afterwards."""
        create(api_client, create_payload)

        response = api_client.delete("/api/shipments/S1")
        assert response.status_code == 200
        assert response.json() == {"message": "Shipment deleted successfully"}

        assert api_client.get("/api/shipments/S1").status_code == 404
        assert api_client.delete("/api/shipments/S1").status_code == 404

    def test_storage_failure_is_500(self, api_client, memory_store, create_payload, monkeypatch):
        """Test that persistence failures surface as 500."""
        def fail(shipments):
            raise StorageError("Failed to save shipments")

        monkeypatch.setattr(memory_store, "_save", fail)

        response = api_client.post("/api/shipments", json=create_payload)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to save shipments"}


class TestLifecycleEndpoints:
    """Tests for location, verify, tamper and receive endpoints."""

    def test_record_location(self, api_client, create_payload):
        """Test that a scan is appended and the status kept."""
        create(api_client, create_payload)

        response = api_client.post(
            "/api/shipments/S1/location",
            json={"location": "Jaipur", "officer": "A", "action": "checked_in"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["location"]["location"] == "Jaipur"
        assert data["location"]["officer"] == "A"
        assert data["shipment"]["currentLocation"] == "Jaipur"
        assert len(data["shipment"]["locationHistory"]) == 2
        assert data["shipment"]["status"] == "pending"

    def test_record_location_missing(self, api_client, create_payload):
        """Test that a scan without location returns 400."""
        create(api_client, create_payload)

        response = api_client.post("/api/shipments/S1/location", json={"officer": "A"})

        assert response.status_code == 400
        assert response.json() == {"error": "Location is required"}

    def test_verify(self, api_client, create_payload):
        """Test that verify marks the shipment received."""
        create(api_client, create_payload)

        response = api_client.post("/api/shipments/S1/verify", json={"officer": "R", "location": "Mumbai"})

        assert response.status_code == 200
        data = response.json()
        assert data["eventRecorded"] is True
        assert data["completed"] is True
        assert data["shipment"]["status"] == "received"
        assert data["shipment"]["receivedAt"]

    def test_tamper_without_body(self, api_client, create_payload):
        """Test that tamper needs no body and is sticky under receive."""
        create(api_client, create_payload)

        response = api_client.post("/api/shipments/S1/tamper")
        assert response.status_code == 200
        assert response.json()["status"] == "tampered"

        received = api_client.post("/api/shipments/S1/receive")
        assert received.status_code == 200
        assert received.json()["status"] == "tampered"

    def test_receive(self, api_client, create_payload):
        """Test that receive stamps receivedAt."""
        create(api_client, create_payload)

        response = api_client.post("/api/shipments/S1/receive")

        assert response.status_code == 200
        assert response.json()["status"] == "received"
        assert response.json()["receivedAt"]


class TestAnalyticsEndpoints:
    """Tests for analytics endpoints."""

    def test_overview_scenario(self, api_client, create_payload):
        """Test that setting received moves one shipment between buckets."""
        create(api_client, create_payload)
        api_client.post("/api/shipments/S1/location", json={"location": "Jaipur", "officer": "A"})

        before = api_client.get("/api/analytics/overview").json()["statusBreakdown"]
        api_client.put("/api/shipments/S1", json={"status": "received"})
        after = api_client.get("/api/analytics/overview").json()

        assert after["statusBreakdown"]["received"] == before["received"] + 1
        assert after["statusBreakdown"]["pending"] == before["pending"] - 1
        assert after["total"] == 1

    def test_timeline_with_bounds(self, api_client, create_payload):
        """Test the timeline filters by startDate/endDate."""
        create(api_client, create_payload)
        create(api_client, {**create_payload, "id": "S2", "date": "2024-02-01"})

        response = api_client.get("/api/analytics/timeline", params={"startDate": "2024-01-15"})

        assert response.status_code == 200
        assert [e["date"] for e in response.json()["timeline"]] == ["2024-02-01"]

    def test_timeline_invalid_bound(self, api_client):
        """Test that an unparsable bound returns 400."""
        response = api_client.get("/api/analytics/timeline", params={"endDate": "soon"})

        assert response.status_code == 400

    def test_routes_and_checkpoints(self, api_client, create_payload):
        """Test the route and checkpoint reports."""
        create(api_client, create_payload)

        routes = api_client.get("/api/analytics/routes").json()["routes"]
        checkpoints = api_client.get("/api/analytics/checkpoints").json()["checkpoints"]

        assert routes[0]["route"] == "Delhi → Mumbai"
        assert routes[0]["total"] == 1
        assert checkpoints == [{"location": "Delhi", "totalScans": 1, "uniqueShipments": 1, "officersCount": 1}]


class TestEstimateEndpoints:
    """Tests for travel estimate endpoints."""

    def test_estimate(self, api_client, mock_estimator):
        """Test the ad-hoc estimate."""
        mock_estimator.estimate.return_value = ESTIMATE

        response = api_client.post("/api/estimate", json={"startLocation": "Delhi", "endLocation": "Mumbai"})

        assert response.status_code == 200
        assert response.json()["durationFormatted"] == "1h 30m"
        mock_estimator.estimate.assert_called_once_with("Delhi", "Mumbai", None)

    def test_estimate_missing_places(self, api_client):
        """Test that both places are required."""
        response = api_client.post("/api/estimate", json={"startLocation": "Delhi"})

        assert response.status_code == 400
        assert response.json() == {"error": "startLocation and endLocation are required"}

    def test_shipment_estimate(self, api_client, mock_estimator, create_payload):
        """Test estimate from a shipment's origin to destination."""
        create(api_client, create_payload)
        mock_estimator.estimate.return_value = ESTIMATE

        response = api_client.get("/api/shipments/S1/estimate", params={"mode": "driving-hgv"})

        assert response.status_code == 200
        assert response.json()["shipmentId"] == "S1"
        assert response.json()["distanceFormatted"] == "1400.00 km"
        mock_estimator.estimate.assert_called_once_with("Delhi", "Mumbai", "driving-hgv")

    def test_route_not_found_is_404(self, api_client, mock_estimator):
        """Test that a missing route maps to 404."""
        mock_estimator.estimate.side_effect = RouteNotFoundError("No route found")

        response = api_client.post("/api/estimate", json={"startLocation": "Delhi", "endLocation": "Perth"})

        assert response.status_code == 404
        assert response.json() == {"error": "No route found"}

    def test_upstream_failure_is_500(self, api_client, mock_estimator):
        """Test that upstream failures map to 500."""
        mock_estimator.estimate.side_effect = ExternalServiceError("Route failed: 503")

        response = api_client.post("/api/estimate", json={"startLocation": "Delhi", "endLocation": "Agra"})

        assert response.status_code == 500
