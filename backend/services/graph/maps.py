"""
Map CRUD and ordering.
"""
import logging
from typing import List

from errors import NotFoundError, ValidationError
from models import Map, MapCreate, MapUpdate
from services.graph.store import GraphStore, map_record

logger = logging.getLogger(__name__)


def list_maps(store: GraphStore) -> List[Map]:
    """Maps by sortOrder (unordered last), then creation time."""
    return [Map(**map_record(row)) for row in store.list_maps()]


def create_map(store: GraphStore, payload: MapCreate) -> Map:
    if not payload.id or not payload.name:
        raise ValidationError("id and name are required")
    row = store.create_map(payload.id, payload.model_dump(exclude={"id"}, exclude_none=True))
    return Map(**map_record(row))


def update_map(store: GraphStore, map_id: str, payload: MapUpdate) -> Map:
    row = store.update_map(map_id, payload.model_dump(exclude_none=True))
    if row is None:
        raise NotFoundError("Map not found")
    return Map(**map_record(row))


def delete_map(store: GraphStore, map_id: str) -> int:
    """
    Delete the map and all of its concepts in one transaction.
    Returns the number of concepts removed.
    """
    concepts_deleted, maps_deleted = store.delete_map(map_id)
    if concepts_deleted == 0 and maps_deleted == 0:
        raise NotFoundError("Map not found")
    return concepts_deleted


def reorder_maps(store: GraphStore, ordered_ids: List[str]) -> None:
    """
    Replace the whole ordering: position i gets sortOrder i, maps missing
    from the list lose their sortOrder.
    """
    if not isinstance(ordered_ids, list):
        raise ValidationError("orderedIds required")
    if len(set(ordered_ids)) != len(ordered_ids):
        raise ValidationError("orderedIds must not contain duplicates")
    store.reorder_maps(ordered_ids)
