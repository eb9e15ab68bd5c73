import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from types import TracebackType

from protolink.errors import DirectoryCreationError, TreeClosedError, WriteError

logger = logging.getLogger(__name__)

ROOT = "/"


@dataclass
class _DirectoryNode:
    children: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class _FileNode:
    content: bytes


class VirtualFileTree:
    """In-memory directory tree addressed by absolute POSIX paths.

    Nodes live in a single dict keyed by normalized path. Nothing is shared
    between instances and ``close()`` drops every node. Implements the
    ``FileSystemView`` protocol.
    """

    def __init__(self, max_bytes: int = 0, max_entries: int = 0) -> None:
        self._nodes: dict[str, _DirectoryNode | _FileNode] = {ROOT: _DirectoryNode()}
        self._max_bytes = max_bytes
        self._max_entries = max_entries
        self._total_bytes = 0
        self._closed = False

    def __enter__(self) -> "VirtualFileTree":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def file_count(self) -> int:
        self._ensure_open()
        return sum(1 for node in self._nodes.values() if isinstance(node, _FileNode))

    @property
    def total_bytes(self) -> int:
        self._ensure_open()
        return self._total_bytes

    def close(self) -> None:
        if self._closed:
            return
        logger.debug("Releasing virtual file tree with %d entries", len(self._nodes))
        self._nodes.clear()
        self._total_bytes = 0
        self._closed = True

    def create_directory(self, segments: Sequence[str]) -> str:
        """Create each directory of ``segments`` below the root, in order.

        Existing directories are reused. Returns the absolute path of the
        innermost directory (the root when ``segments`` is empty).
        """
        self._ensure_open()
        dir_path = ROOT
        for segment in segments:
            if not segment or segment in (".", "..") or "/" in segment:
                raise DirectoryCreationError(f"Invalid directory name {segment!r} in {list(segments)}")
            dir_path = _join(dir_path, segment)
            node = self._nodes.get(dir_path)
            if isinstance(node, _DirectoryNode):
                continue
            if node is not None:
                raise DirectoryCreationError(f"Cannot create directory {dir_path}: a file exists at that path")
            if self._max_entries and len(self._nodes) >= self._max_entries:
                raise DirectoryCreationError(
                    f"Cannot create directory {dir_path}: tree entry limit {self._max_entries} reached"
                )
            self._nodes[dir_path] = _DirectoryNode()
            self._parent_node(dir_path).children.add(segment)
            logger.debug("Created directory %s", dir_path)
        return dir_path

    def write_file(self, path: str, content: bytes) -> None:
        self._ensure_open()
        normalized = _normalize(path)
        if normalized is None or normalized == ROOT:
            raise WriteError(f"Cannot write {path!r}: not an absolute file path")

        parent_path, name = _split(normalized)
        parent = self._nodes.get(parent_path)
        if parent is None:
            raise WriteError(f"Cannot write {normalized}: directory {parent_path} does not exist")
        if not isinstance(parent, _DirectoryNode):
            raise WriteError(f"Cannot write {normalized}: {parent_path} is not a directory")

        existing = self._nodes.get(normalized)
        if isinstance(existing, _DirectoryNode):
            raise WriteError(f"Cannot write {normalized}: path is a directory")
        if existing is not None:
            raise WriteError(f"Cannot write {normalized}: file already exists")

        if self._max_entries and len(self._nodes) >= self._max_entries:
            raise WriteError(f"Cannot write {normalized}: tree entry limit {self._max_entries} reached")
        if self._max_bytes and self._total_bytes + len(content) > self._max_bytes:
            raise WriteError(f"Cannot write {normalized}: tree size limit of {self._max_bytes} bytes exceeded")

        self._nodes[normalized] = _FileNode(bytes(content))
        parent.children.add(name)
        self._total_bytes += len(content)
        logger.debug("Wrote %d bytes to %s", len(content), normalized)

    def exists(self, path: str) -> bool:
        self._ensure_open()
        normalized = _normalize(path)
        return normalized is not None and normalized in self._nodes

    def is_dir(self, path: str) -> bool:
        self._ensure_open()
        normalized = _normalize(path)
        return normalized is not None and isinstance(self._nodes.get(normalized), _DirectoryNode)

    def is_file(self, path: str) -> bool:
        self._ensure_open()
        normalized = _normalize(path)
        return normalized is not None and isinstance(self._nodes.get(normalized), _FileNode)

    def read_bytes(self, path: str) -> bytes:
        self._ensure_open()
        normalized = _normalize(path)
        node = self._nodes.get(normalized) if normalized is not None else None
        if not isinstance(node, _FileNode):
            raise FileNotFoundError(f"File not found: {path}")
        return node.content

    def iterdir(self, path: str = ROOT) -> list[str]:
        """Return the absolute paths of the direct children of ``path``, sorted."""
        self._ensure_open()
        normalized = _normalize(path)
        node = self._nodes.get(normalized) if normalized is not None else None
        if not isinstance(node, _DirectoryNode):
            raise FileNotFoundError(f"Directory not found: {path}")
        return [_join(normalized, name) for name in sorted(node.children)]  # type: ignore[arg-type]

    def walk_files(self, path: str = ROOT) -> Iterator[str]:
        """Yield every file below ``path`` depth-first, in sorted order."""
        for child in self.iterdir(path):
            if self.is_dir(child):
                yield from self.walk_files(child)
            else:
                yield child

    def _parent_node(self, path: str) -> _DirectoryNode:
        parent_path, _ = _split(path)
        node = self._nodes[parent_path]
        assert isinstance(node, _DirectoryNode)
        return node

    def _ensure_open(self) -> None:
        if self._closed:
            raise TreeClosedError("Virtual file tree is closed")


def _normalize(path: str) -> str | None:
    if not path.startswith(ROOT):
        return None
    parts = PurePosixPath(path).parts[1:]
    if any(part in (".", "..") for part in parts):
        return None
    return ROOT + "/".join(parts)


def _join(directory: str, name: str) -> str:
    return f"{directory.rstrip('/')}/{name}"


def _split(path: str) -> tuple[str, str]:
    parent, _, name = path.rpartition("/")
    return parent or ROOT, name
