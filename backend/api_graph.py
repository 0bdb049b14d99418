"""
Graph queries: relations of a concept and the shortest accessible path
between two concepts, plus relationship writes.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from config import PATH_MAX_HOPS
from db_neo4j import get_graph_store
from errors import ValidationError
from models import RELATIONSHIP_TYPE_PATTERN, RelationshipCreate
from responses import success
from services_graph import (
    create_relationship,
    delete_relationship,
    find_path,
    get_relations,
)

router = APIRouter(prefix="/api/graph", tags=["graph"])


@router.get("/path")
def read_path(
    start_id: Optional[str] = Query(None, alias="startId"),
    end_id: Optional[str] = Query(None, alias="endId"),
    directed: bool = Query(False, description="Follow relationships only in their stored direction"),
    max_hops: int = Query(PATH_MAX_HOPS, alias="maxHops", ge=0, le=PATH_MAX_HOPS),
    store=Depends(get_graph_store),
):
    """
    Shortest path between two concepts.

    HOW IT WORKS:
    Breadth-first search, at most 10 hops. By default relationship direction
    is ignored, so a path may walk an edge backwards; pass directed=true to
    forbid that.

    RESULT:
    nodes (full concept records, start to end), relationshipTypes (one per
    hop) and totalCost, which is the hop count. Weights on relationships are
    not summed.

    ERRORS:
    400 when startId or endId is missing. 404 both when an endpoint does not
    exist and when no path fits in the hop limit.
    """
    if not start_id or not end_id:
        raise ValidationError("startId and endId are required")
    return success(find_path(store, start_id, end_id, max_hops=max_hops, directed=directed))


@router.post("/relationships", status_code=201)
def create_relationship_endpoint(payload: RelationshipCreate, store=Depends(get_graph_store)):
    return success(create_relationship(store, payload))


@router.delete("/relationships")
def delete_relationship_endpoint(
    source_id: str = Query(..., alias="sourceId", min_length=1),
    target_id: str = Query(..., alias="targetId", min_length=1),
    rel_type: str = Query(..., alias="type", pattern=RELATIONSHIP_TYPE_PATTERN),
    store=Depends(get_graph_store),
):
    deleted = delete_relationship(store, source_id, target_id, rel_type)
    return success({"deleted": deleted})


@router.get("/{concept_id}/relations")
def read_relations(concept_id: str, store=Depends(get_graph_store)):
    """
    A concept with its one-hop outgoing and incoming relationships.

    An isolated concept returns empty lists; an unknown id is a 404.
    """
    return success(get_relations(store, concept_id))
