"""Tests for the Flask REST API."""

import pytest

from api.server import create_app


@pytest.fixture
def client(test_settings):
    app = create_app(test_settings)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def shop(client):
    response = client.post("/api/databases", json={"name": "shop"})
    assert response.status_code == 201
    return client


def execute(client, query, db="shop"):
    return client.post(f"/api/databases/{db}/execute", json={"query": query})


class TestDatabases:
    def test_create_and_list(self, shop):
        data = shop.get("/api/databases").get_json()
        assert data["databases"] == ["shop"]
        assert data["count"] == 1

    def test_create_twice(self, shop):
        response = shop.post("/api/databases", json={"name": "shop"})
        assert response.status_code == 409

    def test_name_required(self, client):
        assert client.post("/api/databases", json={}).status_code == 400

    def test_invalid_name(self, client):
        assert client.post("/api/databases", json={"name": "../x"}).status_code == 400


class TestExecute:
    def test_round_trip(self, shop):
        execute(shop, "CREATE TABLE users (id int, name varchar(10))")
        assert execute(shop, "INSERT INTO users VALUES (1, 'Bob')").get_json()["success"]
        data = execute(shop, "SELECT * FROM users").get_json()
        assert data["status"] == "printed"
        assert data["lines"] == ["id name", "1 Bob"]
        assert data["data"] == [{"id": "1", "name": "Bob"}]

    def test_engine_errors_are_results(self, shop):
        response = execute(shop, "SELECT * FROM ghost")
        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is False
        assert data["error_kind"] == "NotFound"

    def test_unknown_database(self, client):
        assert execute(client, "SELECT * FROM t", db="nope").status_code == 404

    def test_query_required(self, shop):
        assert shop.post("/api/databases/shop/execute", json={}).status_code == 400

    def test_transaction_spans_requests(self, shop):
        execute(shop, "CREATE TABLE users (id int, name varchar(10))")
        execute(shop, "BEGIN TRANSACTION")
        buffered = execute(shop, "INSERT INTO users VALUES (1, 'Bob')").get_json()
        assert buffered["status"] == "buffered"

        status = shop.get("/api/databases/shop/transaction").get_json()["transaction"]
        assert status["open"] is True
        assert status["pending"] == 1

        execute(shop, "COMMIT")
        rows = shop.get("/api/databases/shop/tables/users/data").get_json()["rows"]
        assert rows == [{"id": "1", "name": "Bob"}]

    def test_batch(self, shop):
        response = shop.post("/api/databases/shop/execute/batch", json={"queries": [
            "CREATE TABLE t (a int)",
            "INSERT INTO t VALUES (1)",
            "INSERT INTO t VALUES (x)",
        ]})
        data = response.get_json()
        assert data["count"] == 3
        assert data["success"] is False
        assert [r["success"] for r in data["results"]] == [True, True, False]

    def test_batch_requires_list(self, shop):
        response = shop.post("/api/databases/shop/execute/batch", json={"queries": "x"})
        assert response.status_code == 400


class TestTables:
    def test_list_and_schema(self, shop):
        execute(shop, "CREATE TABLE users (id int, name varchar(10))")
        assert shop.get("/api/databases/shop/tables").get_json()["tables"] == ["users"]

        schema = shop.get("/api/databases/shop/tables/users/schema").get_json()["schema"]
        assert schema["name"] == "users"
        assert [c["type"] for c in schema["columns"]] == ["int", "varchar(10)"]

    def test_missing_table_schema(self, shop):
        assert shop.get("/api/databases/shop/tables/ghost/schema").status_code == 404

    def test_stats(self, shop):
        execute(shop, "CREATE TABLE users (id int, name varchar(10))")
        execute(shop, "INSERT INTO users VALUES (1, 'Bob')")
        stats = shop.get("/api/databases/shop/tables/users/stats").get_json()["stats"]
        assert stats["row_count"] == 1
        assert stats["columns"] == ["id int", "name varchar(10)"]
        assert shop.get("/api/databases/shop/tables/ghost/stats").status_code == 404


class TestSystem:
    def test_health(self, client):
        data = client.get("/api/health").get_json()
        assert data["status"] == "healthy"
        assert data["storage_writable"] is True

    def test_unknown_endpoint(self, client):
        response = client.get("/api/nothing")
        assert response.status_code == 404
        assert response.get_json()["error"] == "Endpoint not found"

    def test_wrong_method(self, client):
        assert client.delete("/api/health").status_code == 405
