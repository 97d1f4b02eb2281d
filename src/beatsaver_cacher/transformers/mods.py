"""Mod requirement flags and their packed bitmask form."""

from dataclasses import dataclass
from functools import reduce
from typing import Tuple

from ..models.catalog import MapDifficulty, MapVersion
from ..models.enums import ModFlag

# Wire bit order; index i is bit i of the mask.
MOD_FLAG_ORDER: Tuple[ModFlag, ...] = (
    ModFlag.CINEMA,
    ModFlag.MAPPING_EXTENSIONS,
    ModFlag.CHROMA,
    ModFlag.NOODLE_EXTENSIONS,
    ModFlag.VIVIFY,
)

FlagVector = Tuple[bool, bool, bool, bool, bool]

_NO_FLAGS: FlagVector = (False, False, False, False, False)


@dataclass(frozen=True)
class MapMods:
    """Mods required by at least one difficulty of a map version."""

    cinema: bool = False
    mapping_extensions: bool = False
    chroma: bool = False
    noodle_extensions: bool = False
    vivify: bool = False


def difficulty_flags(diff: MapDifficulty) -> FlagVector:
    """Flags of a single difficulty in ``MOD_FLAG_ORDER``."""
    return (diff.cinema, diff.me, diff.chroma, diff.ne, diff.vivify)


def _or_flags(acc: FlagVector, flags: FlagVector) -> FlagVector:
    return tuple(a or b for a, b in zip(acc, flags))


def version_flags(map_version: MapVersion) -> FlagVector:
    """OR-reduce the flags of every difficulty in the version."""
    return reduce(_or_flags, (difficulty_flags(d) for d in map_version.diffs), _NO_FLAGS)


def get_map_mods(map_version: MapVersion) -> MapMods:
    return MapMods(*version_flags(map_version))


def pack_mods(flags: FlagVector) -> int:
    """Pack a flag vector into bits 0-4."""
    mask = 0
    for flag, enabled in zip(MOD_FLAG_ORDER, flags):
        if enabled:
            mask |= flag.mask
    return mask


def get_version_mods(map_version: MapVersion) -> int:
    return pack_mods(version_flags(map_version))


def get_difficulty_mods(diff: MapDifficulty) -> int:
    return pack_mods(difficulty_flags(diff))
