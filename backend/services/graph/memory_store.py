"""
Process-local graph store.

Keeps the graph as an adjacency map (concept id -> outgoing edges) plus a
reverse index (concept id -> incoming edges). Every public method holds one
re-entrant lock, so a concurrent reader never sees a half-applied cascade.
"""
import logging
import threading
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config import DEFAULT_MAP_ID, DEFAULT_MAP_EMOJI
from errors import ConflictError
from services.graph.store import (
    CONCEPT_PROPERTIES,
    MAP_PROPERTIES,
    Edge,
    RawRelations,
    to_properties,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryGraphStore:
    def __init__(self, default_map_id: str = DEFAULT_MAP_ID):
        self.default_map_id = default_map_id
        self._lock = threading.RLock()
        self._concepts: Dict[str, Dict[str, Any]] = {}
        self._maps: Dict[str, Dict[str, Any]] = {}
        self._out: Dict[str, List[Edge]] = defaultdict(list)
        self._in: Dict[str, List[Edge]] = defaultdict(list)

    def ensure_schema(self) -> None:
        # Uniqueness is enforced by the dict keys
        return None

    def close(self) -> None:
        return None

    # ------------------------------------------------------------------
    # Concepts
    # ------------------------------------------------------------------

    def upsert_concept(self, concept_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        props = to_properties(fields, CONCEPT_PROPERTIES)
        with self._lock:
            node = self._concepts.get(concept_id)
            if node is None:
                node = {"id": concept_id, "mapId": self.default_map_id}
                self._concepts[concept_id] = node
            node.update(props)
            node["updatedAt"] = _now()
            return dict(node)

    def update_concept(self, concept_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        with self._lock:
            if concept_id not in self._concepts:
                return None
            return self.upsert_concept(concept_id, fields)

    def insert_raw_concept(self, props: Dict[str, Any]) -> None:
        """Store properties verbatim (used to load legacy records without mapId)."""
        with self._lock:
            self._concepts[props["id"]] = dict(props)

    def delete_concept(self, concept_id: str) -> int:
        with self._lock:
            if self._concepts.pop(concept_id, None) is None:
                return 0
            self._detach(concept_id)
            return 1

    def _detach(self, concept_id: str) -> None:
        for edge in self._out.pop(concept_id, []):
            self._in[edge.target_id] = [e for e in self._in[edge.target_id] if e is not edge]
        for edge in self._in.pop(concept_id, []):
            self._out[edge.source_id] = [e for e in self._out[edge.source_id] if e is not edge]

    def get_concepts(self, concept_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        with self._lock:
            return {cid: dict(self._concepts[cid]) for cid in concept_ids if cid in self._concepts}

    def _in_map(self, node: Dict[str, Any], map_id: str) -> bool:
        node_map = node.get("mapId")
        return node_map == map_id or (node_map is None and map_id == self.default_map_id)

    def get_concepts_by_map(self, map_id: str, limit: int) -> List[Dict[str, Any]]:
        with self._lock:
            matched = [dict(n) for n in self._concepts.values() if self._in_map(n, map_id)]
        return matched[:limit]

    def count_concepts(self) -> int:
        with self._lock:
            return len(self._concepts)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def relations_of(self, concept_id: str) -> Optional[RawRelations]:
        with self._lock:
            node = self._concepts.get(concept_id)
            if node is None:
                return None
            outgoing = [
                {"type": e.type, "target": e.target_id, "weight": e.weight, "cost": e.cost}
                for e in self._out.get(concept_id, [])
            ]
            incoming = [
                {"type": e.type, "source": e.source_id, "weight": e.weight, "cost": e.cost}
                for e in self._in.get(concept_id, [])
            ]
            return RawRelations(concept=dict(node), outgoing=outgoing, incoming=incoming)

    def incident_edges(self, concept_ids: Iterable[str], *, directed: bool = False) -> List[Edge]:
        edges: List[Edge] = []
        seen = set()
        with self._lock:
            for cid in concept_ids:
                candidates = list(self._out.get(cid, []))
                if not directed:
                    candidates.extend(self._in.get(cid, []))
                for edge in candidates:
                    if id(edge) not in seen:
                        seen.add(id(edge))
                        edges.append(edge)
        return edges

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def create_relationship(self, edge: Edge) -> bool:
        with self._lock:
            if edge.source_id not in self._concepts or edge.target_id not in self._concepts:
                return False
            # Multiplicity is allowed: identical edges are kept side by side
            self._out[edge.source_id].append(edge)
            self._in[edge.target_id].append(edge)
            return True

    def delete_relationships(self, source_id: str, target_id: str, rel_type: str) -> int:
        def matches(e: Edge) -> bool:
            return e.source_id == source_id and e.target_id == target_id and e.type == rel_type

        with self._lock:
            doomed = [e for e in self._out.get(source_id, []) if matches(e)]
            if not doomed:
                return 0
            self._out[source_id] = [e for e in self._out[source_id] if not matches(e)]
            self._in[target_id] = [e for e in self._in[target_id] if not matches(e)]
            return len(doomed)

    # ------------------------------------------------------------------
    # Maps
    # ------------------------------------------------------------------

    def create_map(self, map_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        props = to_properties(fields, MAP_PROPERTIES)
        with self._lock:
            if map_id in self._maps:
                raise ConflictError(f"Map '{map_id}' already exists")
            node = {
                "id": map_id,
                "description": "",
                "emoji": DEFAULT_MAP_EMOJI,
                "createdAt": _now(),
            }
            node.update(props)
            self._maps[map_id] = node
            return dict(node)

    def update_map(self, map_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        props = to_properties(fields, MAP_PROPERTIES)
        with self._lock:
            node = self._maps.get(map_id)
            if node is None:
                return None
            node.update(props)
            return dict(node)

    def list_maps(self) -> List[Dict[str, Any]]:
        with self._lock:
            maps = [dict(m) for m in self._maps.values()]
        maps.sort(
            key=lambda m: (
                m.get("sortOrder") is None,
                m.get("sortOrder") or 0,
                m.get("createdAt") or datetime.min.replace(tzinfo=timezone.utc),
            )
        )
        return maps

    def delete_map(self, map_id: str) -> Tuple[int, int]:
        with self._lock:
            doomed = [cid for cid, n in self._concepts.items() if self._in_map(n, map_id)]
            for cid in doomed:
                del self._concepts[cid]
                self._detach(cid)
            maps_deleted = 1 if self._maps.pop(map_id, None) is not None else 0
        logger.info("Deleted map %s with %d concepts", map_id, len(doomed))
        return len(doomed), maps_deleted

    def reorder_maps(self, ordered_ids: List[str]) -> None:
        with self._lock:
            for node in self._maps.values():
                node.pop("sortOrder", None)
            for order, map_id in enumerate(ordered_ids):
                if map_id in self._maps:
                    self._maps[map_id]["sortOrder"] = order
