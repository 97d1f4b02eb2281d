"""Payload builders mirroring BeatSaver API JSON."""

from datetime import UTC, datetime, timedelta
from typing import Any, Dict, List, Optional

from beatsaver_cacher.models.catalog import MapDetail

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def iso(value: datetime) -> str:
    return value.isoformat().replace("+00:00", "Z")


def diff_payload(**overrides: Any) -> Dict[str, Any]:
    """A BeatSaver difficulty as it appears in API JSON."""
    payload = {
        "njs": 16.0,
        "offset": 0.0,
        "notes": 512,
        "bombs": 4,
        "obstacles": 10,
        "nps": 3.4,
        "length": 300.0,
        "characteristic": "Standard",
        "difficulty": "Expert",
        "events": 1200,
        "chroma": False,
        "me": False,
        "ne": False,
        "cinema": False,
        "vivify": False,
        "seconds": 180.0,
        "maxScore": 471155,
        "environment": "DefaultEnvironment",
    }
    payload.update(overrides)
    return payload


def map_payload(
    map_id: str = "3a5f",
    uploaded: datetime = BASE_TIME,
    diffs: Optional[List[Dict[str, Any]]] = None,
    version_state: str = "Published",
    **overrides: Any,
) -> Dict[str, Any]:
    """A BeatSaver map as returned by ``/maps/latest``."""
    payload = {
        "id": map_id,
        "name": f"Map {map_id}",
        "description": "",
        "uploader": {"id": 4284, "name": "mapper"},
        "metadata": {
            "bpm": 128.0,
            "duration": 180,
            "songName": f"Song {map_id}",
            "songSubName": "Extended Mix",
            "songAuthorName": "Artist",
            "levelAuthorName": "Mapper",
        },
        "stats": {"plays": 0, "downloads": 25, "upvotes": 12, "downvotes": 3, "score": 0.76},
        "uploaded": iso(uploaded),
        "automapper": False,
        "ranked": False,
        "qualified": False,
        "versions": [
            {
                "hash": f"{map_id:0>8}" + "ab" * 16,
                "state": version_state,
                "createdAt": iso(uploaded - timedelta(days=1)),
                "diffs": diffs if diffs is not None else [diff_payload()],
            }
        ],
        "createdAt": iso(uploaded - timedelta(days=1)),
        "updatedAt": iso(uploaded + timedelta(hours=1)),
        "lastPublishedAt": iso(uploaded),
        "declaredAi": "None",
    }
    payload.update(overrides)
    return payload


def build_map(map_id: str = "3a5f", **kwargs: Any) -> MapDetail:
    return MapDetail.model_validate(map_payload(map_id, **kwargs))


