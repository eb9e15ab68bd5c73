"""Exception taxonomy for schema loading."""


class ProtoLinkError(Exception):
    """Base exception for protolink errors."""


class CatalogLoadError(ProtoLinkError):
    """A well-known type resource is missing or unreadable."""


class VirtualFileTreeError(ProtoLinkError):
    """Base exception for virtual file tree failures."""


class DirectoryCreationError(VirtualFileTreeError):
    """A directory could not be created in the virtual file tree."""


class WriteError(VirtualFileTreeError):
    """A file could not be written to the virtual file tree."""


class TreeClosedError(VirtualFileTreeError):
    """The virtual file tree was used after it was closed."""


class SchemaEngineError(ProtoLinkError):
    """Base exception for parser and linker failures."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class SchemaParseError(SchemaEngineError):
    """Schema text is not valid protobuf IDL."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message, path)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        location = self.path or "<schema>"
        if self.line is not None:
            location = f"{location}:{self.line}:{self.column or 0}"
        return f"{location}: {self.args[0]}"


class SchemaLinkError(SchemaEngineError):
    """Parsed files could not be linked into a consistent schema."""


class SchemaExtractionError(ProtoLinkError):
    """The requested file is missing from an otherwise linked schema."""
