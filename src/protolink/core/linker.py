"""Link parsed ``.proto`` files read from a filesystem view into one schema.

``SchemaLoader`` follows the shape of path-based schema loaders: it is given
source roots (every ``.proto`` below them is loaded) and import roots
(searched in order for ``import`` paths), reads through a ``FileSystemView``
and links everything into a fresh ``DescriptorPool``. Imports under
``google/protobuf/`` that are not present in the view resolve to the
descriptors bundled with the protobuf runtime.
"""

import importlib
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType, TracebackType

from google.protobuf import descriptor_pool
from google.protobuf.descriptor import Descriptor, EnumDescriptor, FileDescriptor, ServiceDescriptor
from google.protobuf.descriptor_pb2 import FileDescriptorProto

from protolink.core.parser import parse_proto
from protolink.core.ports.filesystem import FileSystemView
from protolink.errors import SchemaLinkError, SchemaParseError

logger = logging.getLogger(__name__)

PROTO_SUFFIX = ".proto"
RUNTIME_PREFIX = "google/protobuf/"


@dataclass(frozen=True)
class Schema:
    """A linked set of files sharing one descriptor pool."""

    pool: descriptor_pool.DescriptorPool
    files: Mapping[str, FileDescriptor] = field(default_factory=dict)

    @property
    def paths(self) -> list[str]:
        return sorted(self.files)

    def proto_file(self, path: str) -> FileDescriptor | None:
        return self.files.get(path)

    def find_message_type(self, full_name: str) -> Descriptor:
        return self.pool.FindMessageTypeByName(full_name)

    def find_enum_type(self, full_name: str) -> EnumDescriptor:
        return self.pool.FindEnumTypeByName(full_name)

    def find_service(self, full_name: str) -> ServiceDescriptor:
        return self.pool.FindServiceByName(full_name)


def _relative(path: str) -> str:
    return path.lstrip("/")


def _join(root: str, relative_path: str) -> str:
    return f"{root.rstrip('/')}/{relative_path}"


def runtime_file_proto(path: str) -> FileDescriptorProto | None:
    """Return the descriptor proto bundled with the protobuf runtime for ``path``, if any."""
    if not path.startswith(RUNTIME_PREFIX) or not path.endswith(PROTO_SUFFIX):
        return None
    stem = path[len(RUNTIME_PREFIX) : -len(PROTO_SUFFIX)]
    if not stem or "/" in stem:
        return None
    try:
        module = importlib.import_module(f"google.protobuf.{stem}_pb2")
    except ImportError:
        return None
    fdp = FileDescriptorProto()
    module.DESCRIPTOR.CopyToProto(fdp)
    return fdp


class SchemaLoader:
    def __init__(self, fs: FileSystemView, runtime_imports: bool = True) -> None:
        self._fs = fs
        self._runtime_imports = runtime_imports
        self._source_roots: list[str] = []
        self._import_roots: list[str] = []
        self._parsed: dict[str, FileDescriptorProto] = {}
        self._closed = False

    def __enter__(self) -> "SchemaLoader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._parsed.clear()
        self._closed = True

    def init_roots(self, source_roots: Iterable[str], import_roots: Iterable[str] = ()) -> None:
        self._source_roots = list(source_roots)
        self._import_roots = list(import_roots)
        for root in [*self._source_roots, *self._import_roots]:
            if not self._fs.is_dir(root):
                raise SchemaLinkError(f"Root {root} is not a directory")

    def load_schema(self) -> Schema:
        """Parse every file under the source roots and link them with their imports."""
        if self._closed:
            raise SchemaLinkError("Schema loader is closed")
        if not self._source_roots:
            raise SchemaLinkError("No source roots configured; call init_roots() first")

        sources: list[str] = []
        for root in self._source_roots:
            for file_path in self._fs.walk_files(root):
                if not file_path.endswith(PROTO_SUFFIX):
                    continue
                relative_path = _relative(file_path[len(root.rstrip("/")) :])
                if relative_path in self._parsed:
                    continue
                self._parsed[relative_path] = self._parse(file_path, relative_path)
                sources.append(relative_path)
        logger.debug("Discovered %d source files under %s", len(sources), self._source_roots)

        pool = descriptor_pool.DescriptorPool()
        linked: dict[str, FileDescriptor] = {}
        for relative_path in sources:
            self._link(relative_path, pool, linked, [])
        return Schema(pool=pool, files=MappingProxyType(linked))

    def _parse(self, file_path: str, relative_path: str) -> FileDescriptorProto:
        raw = self._fs.read_bytes(file_path)
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SchemaParseError(f"File is not valid UTF-8: {e}", path=relative_path) from e
        return parse_proto(text, relative_path)

    def _resolve_import(self, import_path: str, importer: str) -> FileDescriptorProto:
        parsed = self._parsed.get(import_path)
        if parsed is not None:
            return parsed

        for root in self._import_roots:
            candidate = _join(root, import_path)
            if self._fs.is_file(candidate):
                logger.debug("Resolved import %s from %s", import_path, root)
                parsed = self._parse(candidate, import_path)
                self._parsed[import_path] = parsed
                return parsed

        if self._runtime_imports:
            bundled = runtime_file_proto(import_path)
            if bundled is not None:
                logger.debug("Resolved import %s from the protobuf runtime", import_path)
                self._parsed[import_path] = bundled
                return bundled

        raise SchemaLinkError(
            f"{importer}: File not found: {import_path!r} (searched {self._import_roots or ['<no import roots>']})",
            path=importer,
        )

    def _link(
        self,
        path: str,
        pool: descriptor_pool.DescriptorPool,
        linked: dict[str, FileDescriptor],
        stack: list[str],
    ) -> FileDescriptor:
        if path in linked:
            return linked[path]
        if path in stack:
            cycle = " -> ".join([*stack[stack.index(path) :], path])
            raise SchemaLinkError(f"Import cycle detected: {cycle}", path=path)

        fdp = self._parsed[path]
        stack.append(path)
        try:
            for dependency in fdp.dependency:
                self._resolve_import(dependency, path)
                self._link(dependency, pool, linked, stack)
        finally:
            stack.pop()

        try:
            pool.AddSerializedFile(fdp.SerializeToString())
            file_descriptor = pool.FindFileByName(path)
        except (TypeError, KeyError, ValueError) as e:
            raise SchemaLinkError(f"{path}: {e}", path=path) from e

        linked[path] = file_descriptor
        logger.debug("Linked %s", path)
        return file_descriptor
