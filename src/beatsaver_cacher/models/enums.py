"""Enumerations for BeatSaver catalog data validation."""

from enum import Enum


class MapState(str, Enum):
    """Publication state of a map version."""

    UPLOADED = "Uploaded"
    TESTPLAY = "Testplay"
    PUBLISHED = "Published"
    FEEDBACK = "Feedback"
    SCHEDULED = "Scheduled"


class AIDeclarationType(str, Enum):
    """Who, if anyone, declared a map as AI-generated."""

    NONE = "None"
    ADMIN = "Admin"
    UPLOADER = "Uploader"
    SAGE_SCORE = "SageScore"


class ModFlag(int, Enum):
    """Bit positions of the mod requirement mask.

    The order is part of the snapshot wire format and must not change.
    """

    CINEMA = 0
    MAPPING_EXTENSIONS = 1
    CHROMA = 2
    NOODLE_EXTENSIONS = 3
    VIVIFY = 4

    @property
    def mask(self) -> int:
        return 1 << self.value
