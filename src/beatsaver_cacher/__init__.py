"""BeatSaver map metadata cacher.

Harvests the BeatSaver catalog newest-first, keeps maps that are published,
human-made and not automapped, and writes them as a gzip-compressed protobuf
snapshot for offline use.
"""

from .config import AppSettings, get_settings

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AppSettings",
    "get_settings",
    # Key subpackages
    "models",
    "io_clients",
    "transformers",
    "pipelines",
    "snapshot",
]
