"""
Tests for the /api/graph endpoints: relations, path, relationship writes.
"""


class TestRelationsEndpoint:
    """Tests for GET /api/graph/{id}/relations"""

    def test_relations(self, client, seeded_store):
        response = client.get("/api/graph/c3/relations")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["concept"]["label"] == "Continuity"
        assert data["outgoing"] == [{"type": "ACCESSIBLE", "targetId": "topo", "weight": None, "cost": 4.0}]
        assert data["incoming"] == [{"type": "ACCESSIBLE", "sourceId": "limit", "weight": None, "cost": 3.0}]

    def test_isolated_concept(self, client):
        client.post("/api/concepts", json={"id": "alone", "label": "Alone"})

        data = client.get("/api/graph/alone/relations").json()["data"]

        assert data["outgoing"] == []
        assert data["incoming"] == []

    def test_missing_concept(self, client):
        response = client.get("/api/graph/ghost/relations")

        assert response.status_code == 404
        assert response.json()["error"] == "Concept not found"


class TestPathEndpoint:
    """Tests for GET /api/graph/path"""

    def test_path(self, client, seeded_store):
        response = client.get("/api/graph/path", params={"startId": "c1", "endId": "c3"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalCost"] == 3
        assert len(data["relationshipTypes"]) == 3
        assert data["nodes"][0]["id"] == "c1"
        assert data["nodes"][-1]["id"] == "c3"
        assert data["nodes"][0]["label"] == "Set"

    def test_same_start_and_end(self, client, seeded_store):
        data = client.get("/api/graph/path", params={"startId": "topo", "endId": "topo"}).json()["data"]

        assert [n["id"] for n in data["nodes"]] == ["topo"]
        assert data["totalCost"] == 0

    def test_directed_flag(self, client, seeded_store):
        # group is only reachable from topo by walking edges backwards
        undirected = client.get("/api/graph/path", params={"startId": "topo", "endId": "group"})
        directed = client.get(
            "/api/graph/path", params={"startId": "topo", "endId": "group", "directed": "true"}
        )

        assert undirected.status_code == 200
        assert directed.status_code == 404

    def test_missing_start(self, client, seeded_store):
        response = client.get("/api/graph/path", params={"endId": "c3"})

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_unknown_node_is_404(self, client, seeded_store):
        response = client.get("/api/graph/path", params={"startId": "c1", "endId": "ghost"})

        assert response.status_code == 404
        assert response.json()["error"] == "No accessible path found between these concepts."

    def test_max_hops_out_of_range(self, client, seeded_store):
        response = client.get(
            "/api/graph/path", params={"startId": "c1", "endId": "c3", "maxHops": 11}
        )

        assert response.status_code == 400

    def test_max_hops_too_small(self, client, seeded_store):
        response = client.get(
            "/api/graph/path", params={"startId": "c1", "endId": "c3", "maxHops": 2}
        )

        assert response.status_code == 404


class TestRelationshipEndpoints:
    """Tests for POST/DELETE /api/graph/relationships"""

    def test_create(self, client, seeded_store):
        response = client.post(
            "/api/graph/relationships",
            json={"sourceId": "topo", "targetId": "group", "type": "ACCESSIBLE", "cost": 2},
        )

        assert response.status_code == 201
        assert response.json()["data"] == {
            "sourceId": "topo",
            "targetId": "group",
            "type": "ACCESSIBLE",
            "weight": None,
            "cost": 2.0,
        }
        path = client.get(
            "/api/graph/path", params={"startId": "topo", "endId": "group", "directed": "true"}
        ).json()["data"]
        assert path["totalCost"] == 1

    def test_create_unknown_endpoint(self, client, seeded_store):
        response = client.post(
            "/api/graph/relationships",
            json={"sourceId": "c1", "targetId": "ghost", "type": "ACCESSIBLE"},
        )

        assert response.status_code == 404

    def test_create_invalid_type(self, client, seeded_store):
        response = client.post(
            "/api/graph/relationships",
            json={"sourceId": "c1", "targetId": "c2", "type": "NOT A TYPE"},
        )

        assert response.status_code == 400

    def test_delete(self, client, seeded_store):
        response = client.delete(
            "/api/graph/relationships",
            params={"sourceId": "c1", "targetId": "c2", "type": "COMMUNICATE"},
        )

        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": 1}
        outgoing = client.get("/api/graph/c1/relations").json()["data"]["outgoing"]
        assert "c2" not in {r["targetId"] for r in outgoing}

    def test_delete_missing(self, client, seeded_store):
        response = client.delete(
            "/api/graph/relationships",
            params={"sourceId": "c2", "targetId": "c1", "type": "COMMUNICATE"},
        )

        assert response.status_code == 404
