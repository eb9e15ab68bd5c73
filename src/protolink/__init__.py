"""Load a single .proto schema, linked with its well-known type imports, entirely in memory."""

from protolink.core.bootstrap import load_schema, load_schema_request
from protolink.core.linker import Schema, SchemaLoader
from protolink.errors import (
    CatalogLoadError,
    DirectoryCreationError,
    ProtoLinkError,
    SchemaEngineError,
    SchemaExtractionError,
    SchemaLinkError,
    SchemaParseError,
    TreeClosedError,
    VirtualFileTreeError,
    WriteError,
)
from protolink.models import SchemaLoadRequest, SchemaLoadResult
from protolink.vfs import VirtualFileTree

__all__ = [
    "CatalogLoadError",
    "DirectoryCreationError",
    "ProtoLinkError",
    "Schema",
    "SchemaEngineError",
    "SchemaExtractionError",
    "SchemaLinkError",
    "SchemaLoadRequest",
    "SchemaLoadResult",
    "SchemaLoader",
    "SchemaParseError",
    "TreeClosedError",
    "VirtualFileTree",
    "VirtualFileTreeError",
    "WriteError",
    "load_schema",
    "load_schema_request",
]
