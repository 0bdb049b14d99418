"""
Tests for concept CRUD and listing (services/graph/concepts.py) on the
in-memory store.
"""
import logging

import pytest

import services.graph.concepts as concepts_service
from errors import NotFoundError
from models import ConceptCreate, ConceptUpdate, MasteryLevel
from services_graph import (
    create_concept,
    delete_concept,
    get_concept_by_id,
    get_concept_context,
    list_concepts,
    update_concept,
)


class TestCreateConcept:
    def test_new_concept_defaults(self, graph_store):
        concept = create_concept(graph_store, ConceptCreate(id="c1", label="Set"))

        assert concept.map_id == "default"
        assert concept.mastery_level == MasteryLevel.UNSEEN
        assert concept.meta_tags == []
        assert concept.updated_at is not None

    def test_upsert_never_nulls_omitted_fields(self, graph_store):
        create_concept(
            graph_store,
            ConceptCreate(id="c1", label="Set", description="A collection", crisis="Cantor", map_id="math"),
        )

        merged = create_concept(graph_store, ConceptCreate(id="c1", label="Set theory"))

        assert merged.label == "Set theory"
        assert merged.description == "A collection"
        assert merged.crisis == "Cantor"
        assert merged.map_id == "math"

    def test_meta_tags_are_deduplicated(self, graph_store):
        concept = create_concept(
            graph_store,
            ConceptCreate(id="c1", label="Set", meta_tags=["Structure", "Structure", "Classification"]),
        )
        assert concept.meta_tags == ["Structure", "Classification"]

    def test_camel_case_payload(self, graph_store):
        payload = ConceptCreate.model_validate(
            {"id": "c1", "label": "Set", "masteryLevel": "LEARNING", "mapId": "math", "metaTags": ["x"]}
        )

        concept = create_concept(graph_store, payload)

        assert concept.mastery_level == MasteryLevel.LEARNING
        assert concept.map_id == "math"
        assert concept.meta_tags == ["x"]


class TestUpdateAndDelete:
    def test_update_merges(self, graph_store):
        create_concept(graph_store, ConceptCreate(id="c1", label="Set", description="A collection"))

        updated = update_concept(graph_store, "c1", ConceptUpdate(mastery_level=MasteryLevel.MASTERED))

        assert updated.mastery_level == MasteryLevel.MASTERED
        assert updated.description == "A collection"

    def test_update_missing_concept(self, graph_store):
        with pytest.raises(NotFoundError):
            update_concept(graph_store, "ghost", ConceptUpdate(label="Ghost"))
        assert get_concept_by_id(graph_store, "ghost") is None

    def test_delete(self, seeded_store):
        delete_concept(seeded_store, "c1")

        assert get_concept_by_id(seeded_store, "c1") is None

    def test_delete_missing_concept(self, graph_store):
        with pytest.raises(NotFoundError):
            delete_concept(graph_store, "ghost")

    def test_delete_count_from_store(self, graph_store):
        create_concept(graph_store, ConceptCreate(id="c1", label="Set"))

        assert graph_store.delete_concept("c1") == 1
        assert graph_store.delete_concept("c1") == 0


class TestListConcepts:
    def test_default_map_includes_legacy_concepts(self, graph_store):
        create_concept(graph_store, ConceptCreate(id="tagged", label="Tagged", map_id="default"))
        graph_store.insert_raw_concept({"id": "legacy", "label": "Legacy"})
        create_concept(graph_store, ConceptCreate(id="other", label="Other", map_id="physics"))

        ids = {c.id for c in list_concepts(graph_store, "default")}

        assert ids == {"tagged", "legacy"}

    def test_legacy_concept_reports_default_map(self, graph_store):
        graph_store.insert_raw_concept({"id": "legacy", "label": "Legacy"})

        (concept,) = list_concepts(graph_store)

        assert concept.map_id == "default"
        assert concept.mastery_level == MasteryLevel.UNSEEN

    def test_other_map_excludes_legacy(self, graph_store):
        graph_store.insert_raw_concept({"id": "legacy", "label": "Legacy"})
        create_concept(graph_store, ConceptCreate(id="p1", label="Force", map_id="physics"))

        assert [c.id for c in list_concepts(graph_store, "physics")] == ["p1"]

    def test_legacy_concept_without_label_is_listed(self, graph_store):
        graph_store.insert_raw_concept({"id": "unnamed"})

        (concept,) = list_concepts(graph_store)

        assert concept.id == "unnamed"
        assert concept.label is None

    def test_page_cap(self, graph_store, monkeypatch, caplog):
        monkeypatch.setattr(concepts_service, "CONCEPT_PAGE_SIZE", 3)
        for i in range(5):
            create_concept(graph_store, ConceptCreate(id=f"c{i}", label=f"C{i}"))

        with caplog.at_level(logging.WARNING):
            listed = list_concepts(graph_store)

        assert len(listed) == 3
        assert any("page cap" in r.message for r in caplog.records)


class TestConceptContext:
    def test_context_fields(self, seeded_store):
        context = get_concept_context(seeded_store, "c1")

        assert context.label == "Set"
        assert context.crisis.startswith("When Cantor")
        assert "Philosophy: Structure" in context.meta_tags
        assert set(context.model_dump(by_alias=True)) == {"label", "description", "crisis", "metaTags"}

    def test_context_missing(self, graph_store):
        with pytest.raises(NotFoundError):
            get_concept_context(graph_store, "ghost")
