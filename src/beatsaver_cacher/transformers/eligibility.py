"""Eligibility filter deciding which catalog maps enter the snapshot - pure, synchronous."""

from ..cacher_logging import get_logger
from ..models.catalog import MapDetail
from ..models.enums import AIDeclarationType, MapState

logger = get_logger(__name__)


def should_cache_map(map_detail: MapDetail) -> bool:
    """Return True if the map belongs in the snapshot.

    Checks run in a fixed order and the first failing one decides:
    never published, first version not published, declared AI-generated,
    automapped.
    """
    if map_detail.last_published_at is None:
        logger.info("Map has never been published, ignoring", map_id=map_detail.id)
        return False

    if not map_detail.versions or map_detail.versions[0].state != MapState.PUBLISHED:
        logger.info("Map version is not published, ignoring", map_id=map_detail.id)
        return False

    if map_detail.declared_ai != AIDeclarationType.NONE:
        logger.info(
            "Map has been declared as AI-generated, ignoring",
            map_id=map_detail.id,
            declared_ai=map_detail.declared_ai.value,
        )
        return False

    if map_detail.automapper:
        logger.info("Map is automapped, ignoring", map_id=map_detail.id)
        return False

    return True
