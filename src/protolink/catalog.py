"""Well-known Google API types bundled with protolink.

The files under ``google/type/`` in https://github.com/googleapis/googleapis are
imported by many schemas but are not part of the protobuf runtime, so they are
shipped as package data and written into every virtual file tree.
"""

import logging
from collections.abc import Mapping
from functools import cache
from importlib import resources
from types import MappingProxyType

from protolink.errors import CatalogLoadError

logger = logging.getLogger(__name__)

GOOGLE_TYPE_PREFIX = "google/type/"

WELL_KNOWN_PROTOS: tuple[str, ...] = (
    "money.proto",
    "timeofday.proto",
    "date.proto",
    "calendar_period.proto",
    "color.proto",
    "dayofweek.proto",
    "latlng.proto",
    "fraction.proto",
    "month.proto",
    "phone_number.proto",
    "postal_address.proto",
    "localized_text.proto",
    "interval.proto",
    "expr.proto",
    "quaternion.proto",
)

_RESOURCE_PACKAGE = "protolink"
_RESOURCE_DIR = "resources"


def prefix_segments() -> list[str]:
    return [segment for segment in GOOGLE_TYPE_PREFIX.split("/") if segment]


def _read_resource(name: str) -> bytes:
    resource = resources.files(_RESOURCE_PACKAGE).joinpath(_RESOURCE_DIR, *prefix_segments(), name)
    try:
        content = resource.read_bytes()
    except OSError as e:
        raise CatalogLoadError(f"Well-known type {GOOGLE_TYPE_PREFIX}{name} could not be read: {e}") from e
    try:
        content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CatalogLoadError(f"Well-known type {GOOGLE_TYPE_PREFIX}{name} is not valid UTF-8") from e
    if not content.strip():
        raise CatalogLoadError(f"Well-known type {GOOGLE_TYPE_PREFIX}{name} is empty")
    return content


@cache
def load_catalog() -> Mapping[str, bytes]:
    """Return the read-only mapping of catalog file name to file content.

    Resources are read once per process. A missing or unreadable entry is a
    packaging defect and raises ``CatalogLoadError``.
    """
    entries = {name: _read_resource(name) for name in WELL_KNOWN_PROTOS}
    logger.debug("Loaded %d well-known type files from package resources", len(entries))
    return MappingProxyType(entries)
