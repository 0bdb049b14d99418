from fastapi import APIRouter, Depends

from db_neo4j import get_graph_store
from models import MapCreate, MapReorder, MapUpdate
from responses import success
from services_graph import (
    create_map,
    delete_map,
    list_maps,
    reorder_maps,
    update_map,
)

router = APIRouter(prefix="/api/maps", tags=["maps"])


@router.get("")
def read_maps(store=Depends(get_graph_store)):
    """All maps, ordered by sortOrder (unordered maps last), then creation time."""
    return success(list_maps(store))


@router.post("", status_code=201)
def create_map_endpoint(payload: MapCreate, store=Depends(get_graph_store)):
    return success(create_map(store, payload))


@router.post("/reorder")
def reorder_maps_endpoint(payload: MapReorder, store=Depends(get_graph_store)):
    """
    Save the sidebar order. The list replaces the previous order entirely:
    maps left out of it lose their position and sink to the end.
    """
    reorder_maps(store, payload.ordered_ids)
    return success()


@router.patch("/{map_id}")
def update_map_endpoint(map_id: str, payload: MapUpdate, store=Depends(get_graph_store)):
    return success(update_map(store, map_id, payload))


@router.delete("/{map_id}")
def delete_map_endpoint(map_id: str, store=Depends(get_graph_store)):
    """Delete a map and every concept in it (single transaction)."""
    concepts_deleted = delete_map(store, map_id)
    return success(
        {"conceptsDeleted": concepts_deleted},
        message="Map and all its concepts deleted.",
    )
