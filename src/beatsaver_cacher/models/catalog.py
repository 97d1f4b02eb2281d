"""Pydantic models for map entries returned by the BeatSaver catalog."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import AIDeclarationType, MapState


class CatalogModel(BaseModel):
    """Base for catalog payloads: camelCase on the wire, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )


class MapDifficulty(CatalogModel):
    """One playable difficulty of a map version."""

    njs: float = Field(..., description="Note jump speed")
    notes: int = Field(..., description="Note count")
    characteristic: str = Field(..., description="Characteristic name, e.g. Standard")
    difficulty: str = Field(..., description="Difficulty label, e.g. ExpertPlus")
    environment: Optional[str] = Field(None, description="Environment name")
    ss_stars: Optional[float] = Field(None, alias="stars", description="ScoreSaber star rating")
    bl_stars: Optional[float] = Field(None, description="BeatLeader star rating")
    cinema: bool = False
    me: bool = Field(False, description="Requires Mapping Extensions")
    chroma: bool = False
    ne: bool = Field(False, description="Requires Noodle Extensions")
    vivify: bool = False


class MapVersion(CatalogModel):
    """One uploaded revision of a map."""

    hash: str
    state: MapState
    created_at: Optional[datetime] = None
    diffs: List[MapDifficulty] = Field(default_factory=list)


class MapMetadata(CatalogModel):
    """Song and level metadata."""

    bpm: float = 0.0
    duration: int = Field(..., description="Song length in seconds")
    song_name: str
    song_sub_name: str = ""
    song_author_name: str = ""
    level_author_name: str = ""


class MapStats(CatalogModel):
    upvotes: int = 0
    downvotes: int = 0
    plays: int = 0
    downloads: int = 0
    score: float = 0.0


class Curator(CatalogModel):
    id: Optional[int] = None
    name: str


class MapDetail(CatalogModel):
    """A single map as listed by the catalog."""

    id: str = Field(..., description="Hexadecimal map key")
    name: str = ""
    description: str = ""
    metadata: MapMetadata
    stats: MapStats = Field(default_factory=MapStats)
    uploaded: datetime = Field(..., description="First publication time, used as page cursor")
    automapper: bool = False
    ranked: bool = False
    qualified: bool = False
    versions: List[MapVersion] = Field(default_factory=list)
    curator: Optional[Curator] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_published_at: Optional[datetime] = None
    declared_ai: AIDeclarationType = AIDeclarationType.NONE


class MapSearchResponse(CatalogModel):
    """Envelope of a ``/maps/latest`` page."""

    docs: List[MapDetail] = Field(default_factory=list)
