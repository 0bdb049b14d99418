"""
Graph store abstraction shared by the Neo4j adapter and the in-memory store.

Services never talk to a driver directly: they receive a GraphStore that was
built once at process start (see db_neo4j.build_graph_store) and passed in.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

# Python field name -> stored property name. The stored names are camelCase
# because the same graph is shared with the map UI and legacy seed scripts.
CONCEPT_PROPERTIES: Dict[str, str] = {
    "label": "label",
    "description": "description",
    "mastery_level": "masteryLevel",
    "emotion": "emotion",
    "crisis": "crisis",
    "meta_tags": "metaTags",
    "links": "links",
    "map_id": "mapId",
}

MAP_PROPERTIES: Dict[str, str] = {
    "name": "name",
    "description": "description",
    "emoji": "emoji",
}


@dataclass(frozen=True)
class Edge:
    """A directed, typed relationship between two concept ids."""

    source_id: str
    target_id: str
    type: str
    weight: Optional[float] = None
    cost: Optional[float] = None

    def other_end(self, node_id: str) -> str:
        return self.target_id if node_id == self.source_id else self.source_id


@dataclass
class RawRelations:
    """
    One-hop neighborhood of a concept as the store returns it.

    Rows are dicts with keys type/target (outgoing) or type/source (incoming)
    plus weight/cost. A store may emit placeholder rows whose type is None for
    a concept without relationships; callers filter them.
    """

    concept: Dict[str, Any]
    outgoing: List[Dict[str, Any]]
    incoming: List[Dict[str, Any]]


def to_properties(fields: Dict[str, Any], mapping: Dict[str, str]) -> Dict[str, Any]:
    """Translate supplied (non-None) python fields to stored property names."""
    props = {}
    for key, value in fields.items():
        if value is None or key not in mapping:
            continue
        if hasattr(value, "value"):  # enums
            value = value.value
        props[mapping[key]] = value
    return props


def concept_record(props: Dict[str, Any]) -> Dict[str, Any]:
    """Stored concept properties -> kwargs for models.Concept."""
    record = {"id": props.get("id")}
    for field, prop in CONCEPT_PROPERTIES.items():
        record[field] = props.get(prop)
    record["updated_at"] = props.get("updatedAt")
    return record


def map_record(props: Dict[str, Any]) -> Dict[str, Any]:
    """Stored map properties -> kwargs for models.Map."""
    record = {"id": props.get("id")}
    for field, prop in MAP_PROPERTIES.items():
        if props.get(prop) is not None:
            record[field] = props.get(prop)
    record["sort_order"] = props.get("sortOrder")
    record["created_at"] = props.get("createdAt")
    return record


class GraphStore(Protocol):
    """Operations the relation, path and mutation services rely on."""

    def ensure_schema(self) -> None: ...

    def close(self) -> None: ...

    # Concepts
    def upsert_concept(self, concept_id: str, fields: Dict[str, Any]) -> Dict[str, Any]: ...

    def update_concept(self, concept_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    def delete_concept(self, concept_id: str) -> int: ...

    def get_concepts(self, concept_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]: ...

    def get_concepts_by_map(self, map_id: str, limit: int) -> List[Dict[str, Any]]: ...

    def count_concepts(self) -> int: ...

    # Traversal
    def relations_of(self, concept_id: str) -> Optional[RawRelations]: ...

    def incident_edges(self, concept_ids: Iterable[str], *, directed: bool = False) -> List[Edge]: ...

    # Relationships
    def create_relationship(self, edge: Edge) -> bool: ...

    def delete_relationships(self, source_id: str, target_id: str, rel_type: str) -> int: ...

    # Maps
    def create_map(self, map_id: str, fields: Dict[str, Any]) -> Dict[str, Any]: ...

    def update_map(self, map_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    def list_maps(self) -> List[Dict[str, Any]]: ...

    def delete_map(self, map_id: str) -> Tuple[int, int]: ...

    def reorder_maps(self, ordered_ids: List[str]) -> None: ...
