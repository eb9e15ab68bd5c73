from collections.abc import Iterator
from typing import Protocol


class FileSystemView(Protocol):
    def is_dir(self, path: str) -> bool: ...

    def is_file(self, path: str) -> bool: ...

    def read_bytes(self, path: str) -> bytes: ...

    def walk_files(self, path: str = "/") -> Iterator[str]: ...
