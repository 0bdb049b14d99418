"""
Concept CRUD, map listing and the read accessor used by the narration layer.
"""
import logging
from typing import List, Optional

from config import CONCEPT_PAGE_SIZE, DEFAULT_MAP_ID
from errors import NotFoundError, ValidationError
from models import Concept, ConceptContext, ConceptCreate, ConceptUpdate
from services.graph.store import GraphStore, concept_record

logger = logging.getLogger(__name__)


def list_concepts(store: GraphStore, map_id: Optional[str] = None) -> List[Concept]:
    """
    Concepts of one map, capped at CONCEPT_PAGE_SIZE with no cursor.

    The default map also owns legacy concepts that have no mapId at all.
    """
    map_id = map_id or DEFAULT_MAP_ID
    rows = store.get_concepts_by_map(map_id, CONCEPT_PAGE_SIZE)
    if len(rows) >= CONCEPT_PAGE_SIZE:
        logger.warning(
            "Concept listing for map %s hit the page cap of %d; extra concepts are not returned",
            map_id,
            CONCEPT_PAGE_SIZE,
        )
    return [Concept(**concept_record(row)) for row in rows]


def get_concept_by_id(store: GraphStore, concept_id: str) -> Optional[Concept]:
    row = store.get_concepts([concept_id]).get(concept_id)
    if row is None:
        return None
    return Concept(**concept_record(row))


def create_concept(store: GraphStore, payload: ConceptCreate) -> Concept:
    """
    Create the concept, or merge the supplied fields into an existing one.
    Fields left out of the payload keep their stored values.
    """
    if not payload.id or not payload.label:
        raise ValidationError("id and label are required.")
    fields = payload.model_dump(exclude={"id"}, exclude_none=True)
    row = store.upsert_concept(payload.id, fields)
    return Concept(**concept_record(row))


def update_concept(store: GraphStore, concept_id: str, payload: ConceptUpdate) -> Concept:
    if not concept_id:
        raise ValidationError("id is required")
    row = store.update_concept(concept_id, payload.model_dump(exclude_none=True))
    if row is None:
        raise NotFoundError("Concept not found")
    return Concept(**concept_record(row))


def delete_concept(store: GraphStore, concept_id: str) -> None:
    """Delete a concept and every relationship touching it."""
    if not concept_id:
        raise ValidationError("id is required")
    if store.delete_concept(concept_id) == 0:
        raise NotFoundError("Concept not found")
    logger.info("Deleted concept %s", concept_id)


def get_concept_context(store: GraphStore, concept_id: str) -> ConceptContext:
    """label/description/crisis/metaTags of one concept, for prompt building."""
    concept = get_concept_by_id(store, concept_id)
    if concept is None:
        raise NotFoundError("Concept not found")
    return ConceptContext(
        label=concept.label,
        description=concept.description,
        crisis=concept.crisis,
        meta_tags=concept.meta_tags,
    )
