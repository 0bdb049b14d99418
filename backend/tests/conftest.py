"""
Pytest configuration and fixtures for the Concept Atlas API.

This module provides:
- Test client fixture for the FastAPI app
- A fresh in-memory graph store per test, injected through dependency_overrides
- A mocked Neo4j driver/session pair for adapter tests
- The seeded demo graph used by the relation and path tests
"""
import os
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from tests.mock_helpers import make_mock_driver

# Never touch a real database from the test suite
os.environ.setdefault("GRAPH_STORE_BACKEND", "memory")
os.environ.setdefault("NEO4J_URI", "bolt://localhost:7687")
os.environ.setdefault("NEO4J_USER", "neo4j")
os.environ.setdefault("NEO4J_PASSWORD", "test-password")
os.environ.setdefault("SEED_ON_STARTUP", "false")

# Import app after env vars are set
from main import app  # noqa: E402
from db_neo4j import get_graph_store  # noqa: E402
from services.graph.memory_store import InMemoryGraphStore  # noqa: E402


@pytest.fixture
def test_app():
    """The app from main.py; dependencies are overridden per test below."""
    return app


@pytest.fixture
def graph_store():
    """Empty in-memory graph store."""
    return InMemoryGraphStore(default_map_id="default")


@pytest.fixture
def seeded_store(graph_store):
    """The demo math map (c1, c2, limit, c3, c4, group, equiv, topo)."""
    from scripts.seed_concepts import seed_default_map

    seed_default_map(graph_store)
    return graph_store


@pytest.fixture
def client(test_app):
    """
    Test client for the FastAPI app.

    raise_server_exceptions=False so exceptions go through the exception
    handlers and come back as responses, as they would in production.
    """
    return TestClient(test_app, raise_server_exceptions=False)


@pytest.fixture(autouse=True)
def override_graph_store_dependency(test_app, graph_store):
    """
    Route every endpoint to this test's graph_store.

    autouse=True, so no test can reach the store built by the lifespan.
    """
    test_app.dependency_overrides[get_graph_store] = lambda: graph_store
    yield
    test_app.dependency_overrides.pop(get_graph_store, None)


@pytest.fixture
def mock_neo4j_session():
    """MagicMock session; configure session.run.return_value / side_effect per test."""
    return MagicMock()


@pytest.fixture
def mock_neo4j_driver(mock_neo4j_session):
    """Driver whose session() context manager yields mock_neo4j_session."""
    return make_mock_driver(mock_neo4j_session)


@pytest.fixture
def neo4j_store(mock_neo4j_driver):
    from services.graph.neo4j_store import Neo4jGraphStore

    return Neo4jGraphStore(mock_neo4j_driver, database="neo4j", default_map_id="default")
