"""
Shortest accessible path between two concepts.

Breadth-first search expanded one level per store round trip
(GraphStore.incident_edges on the whole frontier). Relationship direction
is ignored unless the caller passes directed=True.
"""
import logging
from typing import Dict, List, Tuple

from config import PATH_MAX_HOPS
from errors import NotFoundError, ValidationError
from models import Concept, ConceptPath
from services.graph.store import GraphStore, concept_record

logger = logging.getLogger(__name__)

NO_PATH_MESSAGE = "No accessible path found between these concepts."


def _walk_back(
    parents: Dict[str, Tuple[str, str]], start_id: str, end_id: str
) -> Tuple[List[str], List[str]]:
    node_ids = [end_id]
    rel_types: List[str] = []
    node = end_id
    while node != start_id:
        previous, rel_type = parents[node]
        node_ids.append(previous)
        rel_types.append(rel_type)
        node = previous
    node_ids.reverse()
    rel_types.reverse()
    return node_ids, rel_types


def find_path(
    store: GraphStore,
    start_id: str,
    end_id: str,
    *,
    max_hops: int = PATH_MAX_HOPS,
    directed: bool = False,
) -> ConceptPath:
    """
    Find one shortest path from start_id to end_id.

    totalCost is the hop count; weight/cost properties on relationships are
    not summed. When several shortest paths exist any one of them may come
    back. A missing endpoint and a path longer than max_hops both raise the
    same NotFoundError.
    """
    if not start_id or not end_id:
        raise ValidationError("startId and endId are required")
    max_hops = max(0, min(int(max_hops), PATH_MAX_HOPS))

    endpoints = store.get_concepts([start_id, end_id])
    if start_id not in endpoints or end_id not in endpoints:
        raise NotFoundError(NO_PATH_MESSAGE)

    if start_id == end_id:
        return ConceptPath(
            nodes=[Concept(**concept_record(endpoints[start_id]))],
            relationship_types=[],
            total_cost=0,
        )

    # node -> (node it was reached from, relationship type used)
    parents: Dict[str, Tuple[str, str]] = {}
    visited = {start_id}
    frontier = [start_id]

    for depth in range(1, max_hops + 1):
        frontier_set = set(frontier)
        next_frontier: List[str] = []
        for edge in store.incident_edges(frontier, directed=directed):
            if edge.type is None:
                continue
            steps = []
            if edge.source_id in frontier_set:
                steps.append((edge.source_id, edge.target_id))
            if not directed and edge.target_id in frontier_set:
                steps.append((edge.target_id, edge.source_id))
            for previous, neighbor in steps:
                if neighbor in visited:
                    continue
                visited.add(neighbor)
                parents[neighbor] = (previous, edge.type)
                next_frontier.append(neighbor)
        if end_id in parents:
            logger.debug("Path %s -> %s found at depth %d", start_id, end_id, depth)
            break
        if not next_frontier:
            break
        frontier = next_frontier

    if end_id not in parents:
        raise NotFoundError(NO_PATH_MESSAGE)

    node_ids, rel_types = _walk_back(parents, start_id, end_id)
    records = store.get_concepts(node_ids)
    if len(records) != len(set(node_ids)):
        # A node on the path was deleted while we were searching
        raise NotFoundError(NO_PATH_MESSAGE)

    return ConceptPath(
        nodes=[Concept(**concept_record(records[node_id])) for node_id in node_ids],
        relationship_types=rel_types,
        total_cost=len(rel_types),
    )
