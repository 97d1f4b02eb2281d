"""Catalog input models and snapshot output records."""

from .catalog import (
    Curator,
    MapDetail,
    MapDifficulty,
    MapMetadata,
    MapSearchResponse,
    MapStats,
    MapVersion,
)
from .enums import AIDeclarationType, MapState, ModFlag
from .records import (
    UINT32_MAX,
    DifficultyRecord,
    MapRecord,
    Ranked,
    RankedValue,
    Snapshot,
    Votes,
)

__all__ = [
    'AIDeclarationType',
    'Curator',
    'DifficultyRecord',
    'MapDetail',
    'MapDifficulty',
    'MapMetadata',
    'MapRecord',
    'MapSearchResponse',
    'MapState',
    'MapStats',
    'MapVersion',
    'ModFlag',
    'Ranked',
    'RankedValue',
    'Snapshot',
    'UINT32_MAX',
    'Votes',
]
