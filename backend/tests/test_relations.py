"""
Tests for the relation aggregator and relationship writes.
"""
import pytest

from errors import NotFoundError
from models import ConceptCreate, RelationshipCreate
from services.graph.store import RawRelations
from services_graph import (
    create_concept,
    create_relationship,
    delete_concept,
    delete_relationship,
    get_relations,
)


class TestGetRelations:
    def test_outgoing_and_incoming(self, seeded_store):
        relations = get_relations(seeded_store, "c1")

        assert relations.concept.id == "c1"
        outgoing = {(r.type, r.target_id) for r in relations.outgoing}
        assert outgoing == {
            ("COMMUNICATE", "c2"),
            ("ACCESSIBLE", "group"),
            ("COMMUNICATE", "equiv"),
        }
        incoming = [(r.type, r.source_id) for r in relations.incoming]
        assert incoming == [("INFLUENCES", "c4")]

    def test_weight_and_cost_are_reported(self, seeded_store):
        relations = get_relations(seeded_store, "c1")
        by_target = {r.target_id: r for r in relations.outgoing}

        assert by_target["equiv"].weight == 0.8
        assert by_target["group"].cost == 4.0
        assert by_target["group"].weight is None

    def test_only_one_hop(self, seeded_store):
        relations = get_relations(seeded_store, "c1")
        targets = {r.target_id for r in relations.outgoing}
        assert "limit" not in targets
        assert "topo" not in targets

    def test_isolated_concept_has_empty_lists(self, graph_store):
        create_concept(graph_store, ConceptCreate(id="alone", label="Alone"))

        relations = get_relations(graph_store, "alone")

        assert relations.concept.label == "Alone"
        assert relations.outgoing == []
        assert relations.incoming == []

    def test_missing_concept_is_not_found(self, graph_store):
        with pytest.raises(NotFoundError):
            get_relations(graph_store, "ghost")

    def test_null_type_rows_are_filtered(self, graph_store):
        graph_store.relations_of = lambda concept_id: RawRelations(
            concept={"id": "x", "label": "X"},
            outgoing=[{"type": None, "target": None, "weight": None, "cost": None}],
            incoming=[
                {"type": None, "source": None},
                {"type": "INFLUENCES", "source": "y", "weight": None, "cost": None},
            ],
        )

        relations = get_relations(graph_store, "x")

        assert relations.outgoing == []
        assert [(r.type, r.source_id) for r in relations.incoming] == [("INFLUENCES", "y")]

    def test_deleted_neighbor_leaves_no_dangling_entries(self, seeded_store):
        delete_concept(seeded_store, "c2")

        c1 = get_relations(seeded_store, "c1")
        limit = get_relations(seeded_store, "limit")

        assert "c2" not in {r.target_id for r in c1.outgoing}
        assert "c2" not in {r.source_id for r in limit.incoming}


class TestRelationshipWrites:
    def test_create_requires_both_endpoints(self, graph_store):
        create_concept(graph_store, ConceptCreate(id="a", label="A"))

        with pytest.raises(NotFoundError):
            create_relationship(
                graph_store, RelationshipCreate(source_id="a", target_id="missing", type="ACCESSIBLE")
            )
        assert get_relations(graph_store, "a").outgoing == []

    def test_parallel_relationships_are_kept(self, graph_store):
        create_concept(graph_store, ConceptCreate(id="a", label="A"))
        create_concept(graph_store, ConceptCreate(id="b", label="B"))
        payload = RelationshipCreate(source_id="a", target_id="b", type="ACCESSIBLE", cost=2)

        create_relationship(graph_store, payload)
        create_relationship(graph_store, payload)

        assert len(get_relations(graph_store, "a").outgoing) == 2
        assert delete_relationship(graph_store, "a", "b", "ACCESSIBLE") == 2
        assert get_relations(graph_store, "b").incoming == []

    def test_delete_only_matching_type(self, seeded_store):
        create_relationship(
            seeded_store, RelationshipCreate(source_id="c1", target_id="c2", type="INFLUENCES")
        )

        delete_relationship(seeded_store, "c1", "c2", "INFLUENCES")

        types = [r.type for r in get_relations(seeded_store, "c1").outgoing if r.target_id == "c2"]
        assert types == ["COMMUNICATE"]

    def test_delete_missing_relationship(self, seeded_store):
        with pytest.raises(NotFoundError):
            delete_relationship(seeded_store, "c2", "c1", "COMMUNICATE")
