"""
Neo4j-backed graph store.

Every operation opens one driver session in a `with` block, so the session
is released on success and on failure. Operations made of several
statements (map cascade delete, reorder, map create) run inside a single
explicit write transaction (`begin_transaction`), never a managed
`execute_write`, so a transient failure is raised on the first attempt.
"""
import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Tuple

from neo4j import Driver  # type: ignore[reportMissingImports]
from neo4j.exceptions import (  # type: ignore[reportMissingImports]
    ConstraintError,
    ServiceUnavailable,
    SessionExpired,
    TransientError,
)

from config import DEFAULT_MAP_ID, DEFAULT_MAP_EMOJI, NEO4J_DATABASE
from errors import ConflictError, StoreUnavailableError, ValidationError
from models import RELATIONSHIP_TYPE_PATTERN
from services.graph.store import (
    CONCEPT_PROPERTIES,
    MAP_PROPERTIES,
    Edge,
    RawRelations,
    to_properties,
)

logger = logging.getLogger(__name__)

_REL_TYPE = re.compile(RELATIONSHIP_TYPE_PATTERN)

SCHEMA_STATEMENTS = [
    "CREATE CONSTRAINT concept_id IF NOT EXISTS FOR (c:Concept) REQUIRE c.id IS UNIQUE",
    "CREATE CONSTRAINT map_id IF NOT EXISTS FOR (m:Map) REQUIRE m.id IS UNIQUE",
    "CREATE INDEX concept_map_id IF NOT EXISTS FOR (c:Concept) ON (c.mapId)",
]


def _native(props: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert neo4j temporal values (DateTime) to python datetimes."""
    if props is None:
        return None
    out = {}
    for key, value in dict(props).items():
        if hasattr(value, "to_native"):
            value = value.to_native()
        out[key] = value
    return out


def _checked_rel_type(rel_type: str) -> str:
    # Relationship types are spliced into the query text
    if not rel_type or not _REL_TYPE.match(rel_type):
        raise ValidationError(f"Invalid relationship type: {rel_type!r}")
    return rel_type


class Neo4jGraphStore:
    def __init__(
        self,
        driver: Driver,
        database: str = NEO4J_DATABASE,
        default_map_id: str = DEFAULT_MAP_ID,
    ):
        self._driver = driver
        self.database = database
        self.default_map_id = default_map_id

    def close(self) -> None:
        self._driver.close()

    @contextmanager
    def _session(self):
        try:
            with self._driver.session(database=self.database) as session:
                yield session
        except (ServiceUnavailable, SessionExpired, TransientError) as exc:
            logger.error("Neo4j unavailable: %s", exc)
            raise StoreUnavailableError("Graph store unavailable") from exc
        except ConstraintError as exc:
            raise ConflictError(str(exc)) from exc

    @staticmethod
    def _write(session, work, *args):
        """Run work(tx, *args) in one explicit transaction; rolled back if it raises."""
        with session.begin_transaction() as tx:
            result = work(tx, *args)
            tx.commit()
        return result

    def ensure_schema(self) -> None:
        with self._session() as session:
            for statement in SCHEMA_STATEMENTS:
                session.run(statement).consume()
        logger.info("Neo4j constraints and indexes ensured")

    # ------------------------------------------------------------------
    # Concepts
    # ------------------------------------------------------------------

    def upsert_concept(self, concept_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        query = """
        MERGE (c:Concept {id: $id})
        ON CREATE SET c.mapId = $default_map_id
        SET c += $props,
            c.updatedAt = datetime()
        RETURN c {.*} AS c
        """
        props = to_properties(fields, CONCEPT_PROPERTIES)
        with self._session() as session:
            record = session.run(
                query, id=concept_id, props=props, default_map_id=self.default_map_id
            ).single()
        return _native(record["c"])

    def update_concept(self, concept_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        query = """
        MATCH (c:Concept {id: $id})
        SET c += $props,
            c.updatedAt = datetime()
        RETURN c {.*} AS c
        """
        props = to_properties(fields, CONCEPT_PROPERTIES)
        with self._session() as session:
            record = session.run(query, id=concept_id, props=props).single()
        if not record:
            return None
        return _native(record["c"])

    def delete_concept(self, concept_id: str) -> int:
        # DETACH DELETE drops the node and its relationships in one statement
        query = """
        MATCH (c:Concept {id: $id})
        DETACH DELETE c
        RETURN count(c) AS deleted
        """
        with self._session() as session:
            record = session.run(query, id=concept_id).single()
        return record["deleted"] if record else 0

    def get_concepts(self, concept_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        ids = list(dict.fromkeys(concept_ids))
        if not ids:
            return {}
        query = """
        MATCH (c:Concept)
        WHERE c.id IN $ids
        RETURN c {.*} AS c
        """
        with self._session() as session:
            rows = [_native(record["c"]) for record in session.run(query, ids=ids)]
        return {row["id"]: row for row in rows}

    def get_concepts_by_map(self, map_id: str, limit: int) -> List[Dict[str, Any]]:
        query = """
        MATCH (c:Concept)
        WHERE c.mapId = $map_id OR (c.mapId IS NULL AND $map_id = $default_map_id)
        RETURN c {.*} AS c
        LIMIT $limit
        """
        with self._session() as session:
            result = session.run(
                query, map_id=map_id, default_map_id=self.default_map_id, limit=limit
            )
            return [_native(record["c"]) for record in result]

    def count_concepts(self) -> int:
        with self._session() as session:
            record = session.run("MATCH (c:Concept) RETURN count(c) AS n").single()
        return record["n"] if record else 0

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def relations_of(self, concept_id: str) -> Optional[RawRelations]:
        # OPTIONAL MATCH + collect() yields one {type: null, ...} row for a
        # concept with no relationships in that direction
        query = """
        MATCH (n:Concept {id: $id})
        OPTIONAL MATCH (n)-[r]->(target:Concept)
        WITH n, collect({type: type(r), target: target.id, weight: r.weight, cost: r.cost}) AS outgoing
        OPTIONAL MATCH (source:Concept)-[r2]->(n)
        WITH n, outgoing, collect({type: type(r2), source: source.id, weight: r2.weight, cost: r2.cost}) AS incoming
        RETURN n {.*} AS n, outgoing, incoming
        """
        with self._session() as session:
            record = session.run(query, id=concept_id).single()
        if not record:
            return None
        return RawRelations(
            concept=_native(record["n"]),
            outgoing=list(record["outgoing"] or []),
            incoming=list(record["incoming"] or []),
        )

    def incident_edges(self, concept_ids: Iterable[str], *, directed: bool = False) -> List[Edge]:
        ids = list(dict.fromkeys(concept_ids))
        if not ids:
            return []
        pattern = "(a:Concept)-[r]->(b:Concept)" if directed else "(a:Concept)-[r]-(b:Concept)"
        query = f"""
        MATCH {pattern}
        WHERE a.id IN $ids
        RETURN elementId(r) AS rid,
               startNode(r).id AS source,
               endNode(r).id AS target,
               type(r) AS type,
               r.weight AS weight,
               r.cost AS cost
        """
        edges: List[Edge] = []
        seen = set()
        with self._session() as session:
            for record in session.run(query, ids=ids):
                # An edge between two frontier nodes is matched from both ends
                if record["rid"] in seen:
                    continue
                seen.add(record["rid"])
                edges.append(
                    Edge(
                        source_id=record["source"],
                        target_id=record["target"],
                        type=record["type"],
                        weight=record["weight"],
                        cost=record["cost"],
                    )
                )
        return edges

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def create_relationship(self, edge: Edge) -> bool:
        rel_type = _checked_rel_type(edge.type)
        props = {k: v for k, v in (("weight", edge.weight), ("cost", edge.cost)) if v is not None}
        # CREATE rather than MERGE: parallel relationships are allowed
        query = f"""
        MATCH (s:Concept {{id: $source_id}})
        MATCH (t:Concept {{id: $target_id}})
        CREATE (s)-[r:`{rel_type}`]->(t)
        SET r += $props
        RETURN count(r) AS created
        """
        with self._session() as session:
            record = session.run(
                query, source_id=edge.source_id, target_id=edge.target_id, props=props
            ).single()
        return bool(record and record["created"] > 0)

    def delete_relationships(self, source_id: str, target_id: str, rel_type: str) -> int:
        rel_type = _checked_rel_type(rel_type)
        query = f"""
        MATCH (s:Concept {{id: $source_id}})-[r:`{rel_type}`]->(t:Concept {{id: $target_id}})
        DELETE r
        RETURN count(r) AS deleted
        """
        with self._session() as session:
            record = session.run(query, source_id=source_id, target_id=target_id).single()
        return record["deleted"] if record else 0

    # ------------------------------------------------------------------
    # Maps
    # ------------------------------------------------------------------

    @staticmethod
    def _create_map_tx(tx, map_id: str, props: Dict[str, Any]) -> Dict[str, Any]:
        existing = tx.run("MATCH (m:Map {id: $id}) RETURN count(m) AS n", id=map_id).single()
        if existing and existing["n"] > 0:
            raise ConflictError(f"Map '{map_id}' already exists")
        record = tx.run(
            """
            CREATE (m:Map {id: $id, createdAt: datetime()})
            SET m += $props
            RETURN m {.*} AS m
            """,
            id=map_id,
            props=props,
        ).single()
        return record["m"]

    def create_map(self, map_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        props = {"description": "", "emoji": DEFAULT_MAP_EMOJI}
        props.update(to_properties(fields, MAP_PROPERTIES))
        with self._session() as session:
            node = self._write(session, self._create_map_tx, map_id, props)
        return _native(node)

    def update_map(self, map_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        query = """
        MATCH (m:Map {id: $id})
        SET m += $props
        RETURN m {.*} AS m
        """
        props = to_properties(fields, MAP_PROPERTIES)
        with self._session() as session:
            record = session.run(query, id=map_id, props=props).single()
        if not record:
            return None
        return _native(record["m"])

    def list_maps(self) -> List[Dict[str, Any]]:
        # Maps without sortOrder sink to the end; creation time breaks ties
        query = """
        MATCH (m:Map)
        RETURN m {.*} AS m
        ORDER BY m.sortOrder IS NULL, m.sortOrder ASC, m.createdAt ASC
        """
        with self._session() as session:
            return [_native(record["m"]) for record in session.run(query)]

    @staticmethod
    def _delete_map_tx(tx, map_id: str, default_map_id: str) -> Tuple[int, int]:
        # Concepts first so no relationship is left pointing at a dead map
        concepts = tx.run(
            """
            MATCH (c:Concept)
            WHERE c.mapId = $id OR (c.mapId IS NULL AND $id = $default_map_id)
            DETACH DELETE c
            RETURN count(c) AS deleted
            """,
            id=map_id,
            default_map_id=default_map_id,
        ).single()
        maps = tx.run(
            """
            MATCH (m:Map {id: $id})
            DELETE m
            RETURN count(m) AS deleted
            """,
            id=map_id,
        ).single()
        return (
            concepts["deleted"] if concepts else 0,
            maps["deleted"] if maps else 0,
        )

    def delete_map(self, map_id: str) -> Tuple[int, int]:
        with self._session() as session:
            counts = self._write(session, self._delete_map_tx, map_id, self.default_map_id)
        logger.info("Deleted map %s with %d concepts", map_id, counts[0])
        return counts

    @staticmethod
    def _reorder_maps_tx(tx, pairs: List[Dict[str, Any]]) -> None:
        tx.run("MATCH (m:Map) REMOVE m.sortOrder").consume()
        tx.run(
            """
            UNWIND $pairs AS pair
            MATCH (m:Map {id: pair.id})
            SET m.sortOrder = pair.order
            """,
            pairs=pairs,
        ).consume()

    def reorder_maps(self, ordered_ids: List[str]) -> None:
        pairs = [{"id": map_id, "order": idx} for idx, map_id in enumerate(ordered_ids)]
        with self._session() as session:
            self._write(session, self._reorder_maps_tx, pairs)
