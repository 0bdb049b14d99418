"""
Concept endpoints: list a map's concepts, create, patch, delete, and the
context accessor the narration layer reads before building a prompt.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from db_neo4j import get_graph_store
from models import ConceptCreate, ConceptUpdate
from responses import success
from services_graph import (
    create_concept,
    delete_concept,
    get_concept_context,
    list_concepts,
    update_concept,
)

router = APIRouter(prefix="/api/concepts", tags=["concepts"])


# ============================================================================
# ROUTE ORDERING NOTE:
# Specific routes (like /{concept_id}/context) are declared before the bare
# /{concept_id} routes so they are matched first.
# ============================================================================

@router.get("")
def read_concepts(
    map_id: Optional[str] = Query(None, alias="mapId"),
    store=Depends(get_graph_store),
):
    """
    List the concepts of one map.

    PURPOSE:
    Loads the nodes the map canvas renders. Omitting mapId means the default
    map, which also owns legacy concepts stored without a mapId.

    LIMITATION:
    At most 100 concepts come back and there is no cursor; larger maps are
    truncated.
    """
    return success(list_concepts(store, map_id))


@router.post("", status_code=201)
def create_concept_endpoint(payload: ConceptCreate, store=Depends(get_graph_store)):
    """
    Create a concept, or merge into the existing one with the same id.

    Only the fields present in the body are written; everything else keeps
    its stored value. A new concept without mapId lands in the default map.
    """
    return success(create_concept(store, payload))


@router.get("/{concept_id}/context")
def read_concept_context(concept_id: str, store=Depends(get_graph_store)):
    """label, description, crisis and metaTags of a concept (prompt input)."""
    return success(get_concept_context(store, concept_id))


@router.patch("/{concept_id}")
def update_concept_endpoint(
    concept_id: str,
    payload: ConceptUpdate,
    store=Depends(get_graph_store),
):
    return success(update_concept(store, concept_id, payload))


@router.delete("/{concept_id}")
def delete_concept_endpoint(concept_id: str, store=Depends(get_graph_store)):
    """
    Delete a concept together with all of its relationships.

    Responds 404 when nothing was deleted so the caller can tell a stale id
    from a successful delete.
    """
    delete_concept(store, concept_id)
    return success(message="Concept deleted successfully")
