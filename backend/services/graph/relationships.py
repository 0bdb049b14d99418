"""
Relation lookup (one hop in each direction) and relationship writes.
"""
import logging
from typing import Any, Dict, List

from errors import NotFoundError
from models import (
    Concept,
    ConceptRelations,
    IncomingRelation,
    OutgoingRelation,
    Relationship,
    RelationshipCreate,
)
from services.graph.store import Edge, GraphStore, concept_record

logger = logging.getLogger(__name__)


def _typed_rows(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Drop the {type: null} placeholder rows an OPTIONAL MATCH produces
    return [row for row in rows if row and row.get("type") is not None]


def get_relations(store: GraphStore, concept_id: str) -> ConceptRelations:
    """
    Return the concept with its outgoing and incoming relationships.

    An existing concept with no relationships comes back with empty lists;
    an unknown id raises NotFoundError.
    """
    raw = store.relations_of(concept_id)
    if raw is None:
        raise NotFoundError("Concept not found")

    outgoing = [
        OutgoingRelation(
            type=row["type"],
            target_id=row.get("target"),
            weight=row.get("weight"),
            cost=row.get("cost"),
        )
        for row in _typed_rows(raw.outgoing)
    ]
    incoming = [
        IncomingRelation(
            type=row["type"],
            source_id=row.get("source"),
            weight=row.get("weight"),
            cost=row.get("cost"),
        )
        for row in _typed_rows(raw.incoming)
    ]
    return ConceptRelations(
        concept=Concept(**concept_record(raw.concept)),
        outgoing=outgoing,
        incoming=incoming,
    )


def create_relationship(store: GraphStore, payload: RelationshipCreate) -> Relationship:
    """Create a directed relationship. Parallel relationships are allowed."""
    edge = Edge(
        source_id=payload.source_id,
        target_id=payload.target_id,
        type=payload.type,
        weight=payload.weight,
        cost=payload.cost,
    )
    if not store.create_relationship(edge):
        raise NotFoundError("Source or target concept not found")
    logger.info("Created %s relationship %s -> %s", edge.type, edge.source_id, edge.target_id)
    return Relationship(
        source_id=edge.source_id,
        target_id=edge.target_id,
        type=edge.type,
        weight=edge.weight,
        cost=edge.cost,
    )


def delete_relationship(store: GraphStore, source_id: str, target_id: str, rel_type: str) -> int:
    """Delete every relationship of rel_type from source_id to target_id."""
    deleted = store.delete_relationships(source_id, target_id, rel_type)
    if deleted == 0:
        raise NotFoundError("Relationship not found")
    return deleted
