"""
Facade over services/graph/*. API modules import graph operations from here.
"""
from services.graph.concepts import (
    create_concept,
    delete_concept,
    get_concept_by_id,
    get_concept_context,
    list_concepts,
    update_concept,
)
from services.graph.maps import (
    create_map,
    delete_map,
    list_maps,
    reorder_maps,
    update_map,
)
from services.graph.paths import find_path
from services.graph.relationships import (
    create_relationship,
    delete_relationship,
    get_relations,
)

__all__ = [
    "create_concept",
    "delete_concept",
    "get_concept_by_id",
    "get_concept_context",
    "list_concepts",
    "update_concept",
    "create_map",
    "delete_map",
    "list_maps",
    "reorder_maps",
    "update_map",
    "find_path",
    "create_relationship",
    "delete_relationship",
    "get_relations",
]
