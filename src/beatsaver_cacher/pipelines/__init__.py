"""Pipeline orchestration."""

from .harvest import HarvestState, HarvestStats, MapHarvester, harvest_maps

__all__ = ['HarvestState', 'HarvestStats', 'MapHarvester', 'harvest_maps']
