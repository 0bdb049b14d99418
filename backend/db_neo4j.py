from neo4j import GraphDatabase  # type: ignore[reportMissingImports]
from fastapi import Request

from config import (
    DEFAULT_MAP_ID,
    GRAPH_STORE_BACKEND,
    NEO4J_DATABASE,
    NEO4J_PASSWORD,
    NEO4J_URI,
    NEO4J_USER,
)
from services.graph.memory_store import InMemoryGraphStore
from services.graph.neo4j_store import Neo4jGraphStore
from services.graph.store import GraphStore


def create_driver():
    """Create the Neo4j driver. Called once per process."""
    if not NEO4J_PASSWORD:
        raise ValueError(
            "NEO4J_PASSWORD environment variable is required. "
            "Please set it in your .env.local file (or use GRAPH_STORE_BACKEND=memory)."
        )
    # Connection pooling and keepalive to handle defunct connections
    return GraphDatabase.driver(
        NEO4J_URI,
        auth=(NEO4J_USER, NEO4J_PASSWORD),
        max_connection_lifetime=3600,  # 1 hour
        max_connection_pool_size=50,
        connection_acquisition_timeout=30,
        keep_alive=True,
    )


def build_graph_store(backend: str = GRAPH_STORE_BACKEND) -> GraphStore:
    """
    Build the process-wide graph store. The result is handed to FastAPI via
    app.state and reaches the routes through get_graph_store.
    """
    if backend == "memory":
        return InMemoryGraphStore(default_map_id=DEFAULT_MAP_ID)
    if backend == "neo4j":
        return Neo4jGraphStore(create_driver(), database=NEO4J_DATABASE, default_map_id=DEFAULT_MAP_ID)
    raise ValueError(f"Unknown GRAPH_STORE_BACKEND: {backend!r} (expected 'neo4j' or 'memory')")


def get_graph_store(request: Request) -> GraphStore:
    """FastAPI dependency returning the store built at startup."""
    return request.app.state.graph_store
