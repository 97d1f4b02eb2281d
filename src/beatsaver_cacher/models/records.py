"""Output records written to the snapshot, one per eligible map."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

UINT32_MAX = 2**32 - 1


class RecordModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')


class RankedValue(RecordModel):
    is_ranked: bool = False
    stars: float = 0.0


class Ranked(RecordModel):
    """Ranking data from the two scoring engines."""

    score_saber: RankedValue = Field(default_factory=RankedValue)
    beat_leader: RankedValue = Field(default_factory=RankedValue)


class Votes(RecordModel):
    up: int = Field(0, ge=0, le=UINT32_MAX)
    down: int = Field(0, ge=0, le=UINT32_MAX)


class DifficultyRecord(RecordModel):
    njs: float
    notes: int = Field(..., ge=0, le=UINT32_MAX)
    characteristic_name: str
    difficulty_name: str
    mods: int = Field(0, ge=0, le=UINT32_MAX)
    environment_name: str
    ranked: Ranked = Field(default_factory=Ranked)


class MapRecord(RecordModel):
    """Dense metadata for one map as consumed downstream."""

    key: int = Field(..., ge=0, le=UINT32_MAX, description="Numeric form of the hex map id")
    hash: str
    song_name: str
    song_sub_name: str
    song_author_name: str
    level_author_name: str
    duration: int = Field(..., ge=0, le=UINT32_MAX)
    uploaded: int = Field(..., ge=0, le=UINT32_MAX, description="Unix seconds of last publication")
    last_updated: int = Field(..., ge=0, le=UINT32_MAX)
    mods: int = Field(0, ge=0, le=UINT32_MAX)
    curator_name: Optional[str] = None
    votes: Votes = Field(default_factory=Votes)
    difficulties: List[DifficultyRecord] = Field(default_factory=list)


# Map id -> record
Snapshot = Dict[str, MapRecord]
