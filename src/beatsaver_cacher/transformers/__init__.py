"""Pure transformations from catalog entries to snapshot records."""

from .eligibility import should_cache_map
from .mods import MOD_FLAG_ORDER, MapMods, get_difficulty_mods, get_map_mods, get_version_mods, pack_mods, version_flags
from .records import cache_map_data, encode_map

__all__ = [
    'MOD_FLAG_ORDER',
    'MapMods',
    'cache_map_data',
    'encode_map',
    'get_difficulty_mods',
    'get_map_mods',
    'get_version_mods',
    'pack_mods',
    'should_cache_map',
    'version_flags',
]
