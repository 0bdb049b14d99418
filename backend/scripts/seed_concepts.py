"""
Seed the default map with a small philosophy-of-mathematics concept graph.

The default map is deleted first (with every concept in it, legacy concepts
without a mapId included), so running the seed twice leaves one copy of
each concept and relationship.

Usage (from backend/):
    python scripts/seed_concepts.py            # uses GRAPH_STORE_BACKEND
"""
import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import backend modules
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config import DEFAULT_MAP_ID
from models import ConceptCreate, MapCreate, RelationshipCreate
from services.graph.concepts import create_concept
from services.graph.maps import create_map
from services.graph.relationships import create_relationship
from services.graph.store import GraphStore

logger = logging.getLogger(__name__)

# --------- DATA ---------

DEFAULT_MAP = {
    "id": DEFAULT_MAP_ID,
    "name": "Math concept map",
    "description": "Philosophical links between foundational math concepts",
    "emoji": "🧮",
}

CONCEPTS = [
    {
        "id": "c1",
        "label": "Set",
        "mastery_level": "MASTERED",
        "emotion": "😎",
        "description": "A collection of elements determined by a condition. The most basic language of mathematics.",
        "meta_tags": ["Philosophy: Structure", "Philosophy: Classification"],
        "crisis": "When Cantor compared the sizes of infinite sets, many mathematicians treated "
                  "the idea that infinity has a size as heresy.",
    },
    {
        "id": "c2",
        "label": "Function",
        "mastery_level": "MASTERED",
        "emotion": "🤔",
        "description": "A correspondence between two sets: every input has exactly one output.",
        "meta_tags": ["Philosophy: Mapping", "Philosophy: Structure"],
        "crisis": "Euler's generation only accepted functions given by a formula. Fourier's "
                  "discontinuous functions started the 'is this even a function?' debate.",
    },
    {
        "id": "limit",
        "label": "Limit",
        "mastery_level": "LEARNING",
        "emotion": "🌊",
        "description": "Where a function heads as its input approaches a point without end.",
        "meta_tags": ["Philosophy: Infinity", "Philosophy: Approximation"],
        "crisis": "Newton and Leibniz built calculus on infinitesimals that were somehow "
                  "both zero and not zero.",
    },
    {
        "id": "c3",
        "label": "Continuity",
        "mastery_level": "LEARNING",
        "emotion": "🤯",
        "description": "Being unbroken; made rigorous by the epsilon-delta definition.",
        "meta_tags": ["Philosophy: Approximation", "Philosophy: Local-to-Global"],
        "crisis": "Weierstrass exhibited a function continuous everywhere and differentiable "
                  "nowhere, turning intuition about smoothness upside down.",
    },
    {
        "id": "c4",
        "label": "Abstraction",
        "mastery_level": "UNSEEN",
        "emotion": "🔭",
        "description": "Keeping only the shared structure of concrete things to see a wider truth.",
        "meta_tags": ["Philosophy: Structure", "Philosophy: Classification"],
    },
    {
        "id": "group",
        "label": "Group",
        "mastery_level": "UNSEEN",
        "emotion": "♾️",
        "description": "A set with an associative operation, an identity and inverses.",
        "meta_tags": ["Philosophy: Symmetry", "Philosophy: Structure"],
        "crisis": "Galois used groups to prove the quintic has no general formula: proving "
                  "that something cannot be solved changed mathematics.",
    },
    {
        "id": "equiv",
        "label": "Equivalence Relation",
        "mastery_level": "UNSEEN",
        "emotion": "⚖️",
        "description": "A reflexive, symmetric and transitive relation; it partitions a set into classes.",
        "meta_tags": ["Philosophy: Classification", "Philosophy: Symmetry"],
        "crisis": "Geometry mixed up congruence and similarity until 'sameness' itself was "
                  "given a precise definition.",
    },
    {
        "id": "topo",
        "label": "Topological Space",
        "mastery_level": "UNSEEN",
        "emotion": "🍩",
        "description": "Continuity defined by nearness alone, without any distance.",
        "meta_tags": ["Philosophy: Local-to-Global", "Philosophy: Approximation"],
        "crisis": "A doughnut and a coffee cup being 'the same' shattered geometric intuition.",
    },
]

RELATIONSHIPS = [
    ("c1", "COMMUNICATE", "c2", {"weight": 1.0}),
    ("c2", "COMMUNICATE", "limit", {"weight": 1.0}),
    ("limit", "ACCESSIBLE", "c3", {"cost": 3.0}),
    ("c1", "ACCESSIBLE", "group", {"cost": 4.0}),
    ("c1", "COMMUNICATE", "equiv", {"weight": 0.8}),
    ("equiv", "ACCESSIBLE", "topo", {"cost": 5.0}),
    ("c3", "ACCESSIBLE", "topo", {"cost": 4.0}),
    ("c4", "INFLUENCES", "c1", {}),
    ("c4", "INFLUENCES", "group", {}),
    ("c4", "INFLUENCES", "equiv", {}),
]


# --------- SEED ---------

def seed_default_map(store: GraphStore) -> int:
    """
    Replace the default map with the demo graph. Returns concept count.

    The map and its concepts are deleted first, and so is any seed concept id
    that lives in another map, so the relationships below are never doubled.
    """
    concepts_deleted, _ = store.delete_map(DEFAULT_MAP_ID)
    stray = sum(store.delete_concept(concept["id"]) for concept in CONCEPTS)
    if concepts_deleted or stray:
        logger.info("Cleared %d existing concepts before seeding", concepts_deleted + stray)

    create_map(store, MapCreate(**DEFAULT_MAP))

    for concept in CONCEPTS:
        create_concept(store, ConceptCreate(map_id=DEFAULT_MAP_ID, **concept))

    for source_id, rel_type, target_id, props in RELATIONSHIPS:
        create_relationship(
            store,
            RelationshipCreate(source_id=source_id, target_id=target_id, type=rel_type, **props),
        )

    logger.info("Seeded %d concepts and %d relationships", len(CONCEPTS), len(RELATIONSHIPS))
    return len(CONCEPTS)


def main(argv=None) -> None:
    from db_neo4j import build_graph_store
    from services_logging import configure_logging

    parser = argparse.ArgumentParser(
        description="Replace the default concept map with the demo graph",
    )
    parser.parse_args(argv)

    configure_logging()
    store = build_graph_store()
    try:
        store.ensure_schema()
        seed_default_map(store)
    finally:
        store.close()


if __name__ == "__main__":
    main()
