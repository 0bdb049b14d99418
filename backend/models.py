from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from config import DEFAULT_MAP_ID, DEFAULT_MAP_EMOJI

# Relationship types are interpolated into Cypher (they cannot be parameters),
# so only identifier-shaped names are accepted.
RELATIONSHIP_TYPE_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


class CamelModel(BaseModel):
    """
    Python side uses snake_case, the JSON contract uses camelCase
    (mapId, masteryLevel, metaTags, ...). Both spellings are accepted on input.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MasteryLevel(str, Enum):
    MASTERED = "MASTERED"
    LEARNING = "LEARNING"
    UNSEEN = "UNSEEN"


def _dedupe(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


# ---------------------------------------------------------------------------
# Concepts
# ---------------------------------------------------------------------------

class Concept(CamelModel):
    id: str
    label: Optional[str] = None
    description: Optional[str] = None
    mastery_level: MasteryLevel = MasteryLevel.UNSEEN
    emotion: Optional[str] = None
    crisis: Optional[str] = None
    # metaTags behave as a set; links keep the order the user gave them
    meta_tags: List[str] = []
    links: List[str] = []
    map_id: str = DEFAULT_MAP_ID
    updated_at: Optional[datetime] = None

    @field_validator("meta_tags", mode="before")
    @classmethod
    def _unique_tags(cls, v):
        return _dedupe(v) or []

    @field_validator("links", mode="before")
    @classmethod
    def _links_default(cls, v):
        return v or []

    @field_validator("map_id", mode="before")
    @classmethod
    def _legacy_map(cls, v):
        # Legacy concepts were written before maps existed
        return v or DEFAULT_MAP_ID

    @field_validator("mastery_level", mode="before")
    @classmethod
    def _mastery_default(cls, v):
        return v or MasteryLevel.UNSEEN


class ConceptFields(CamelModel):
    """Writable concept fields. None means "not supplied", never "clear"."""
    label: Optional[str] = None
    description: Optional[str] = None
    mastery_level: Optional[MasteryLevel] = None
    emotion: Optional[str] = None
    crisis: Optional[str] = None
    meta_tags: Optional[List[str]] = None
    links: Optional[List[str]] = None
    map_id: Optional[str] = None

    @field_validator("meta_tags")
    @classmethod
    def _unique_tags(cls, v):
        return _dedupe(v)


class ConceptCreate(ConceptFields):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)


class ConceptUpdate(ConceptFields):
    pass


class ConceptContext(CamelModel):
    """The slice of a concept the narration/LLM layer reads."""
    label: Optional[str] = None
    description: Optional[str] = None
    crisis: Optional[str] = None
    meta_tags: List[str] = []


# ---------------------------------------------------------------------------
# Maps
# ---------------------------------------------------------------------------

class Map(CamelModel):
    id: str
    name: str
    description: Optional[str] = ""
    emoji: str = DEFAULT_MAP_EMOJI
    sort_order: Optional[int] = None
    created_at: Optional[datetime] = None


class MapCreate(CamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    emoji: Optional[str] = None


class MapUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    emoji: Optional[str] = None


class MapReorder(CamelModel):
    ordered_ids: List[str]


# ---------------------------------------------------------------------------
# Relationships, relations and paths
# ---------------------------------------------------------------------------

class RelationshipCreate(CamelModel):
    source_id: str = Field(min_length=1)
    target_id: str = Field(min_length=1)
    type: str = Field(pattern=RELATIONSHIP_TYPE_PATTERN)
    weight: Optional[float] = None
    cost: Optional[float] = None


class Relationship(CamelModel):
    source_id: str
    target_id: str
    type: str
    weight: Optional[float] = None
    cost: Optional[float] = None


class OutgoingRelation(CamelModel):
    type: str
    target_id: str
    weight: Optional[float] = None
    cost: Optional[float] = None


class IncomingRelation(CamelModel):
    type: str
    source_id: str
    weight: Optional[float] = None
    cost: Optional[float] = None


class ConceptRelations(CamelModel):
    concept: Concept
    outgoing: List[OutgoingRelation] = []
    incoming: List[IncomingRelation] = []


class ConceptPath(CamelModel):
    nodes: List[Concept]
    relationship_types: List[str]
    # Hop count of the path; edge weight/cost is not summed in
    total_cost: int
