"""Unit tests for the in-memory virtual file tree."""

import pytest

from protolink.errors import DirectoryCreationError, TreeClosedError, WriteError
from protolink.vfs import ROOT, VirtualFileTree


def test_create_directory_returns_nested_path(tree: VirtualFileTree) -> None:
    path = tree.create_directory(["a", "b", "c"])

    assert path == "/a/b/c"
    assert tree.is_dir("/a")
    assert tree.is_dir("/a/b")
    assert tree.is_dir("/a/b/c")


def test_create_directory_with_no_segments_is_root(tree: VirtualFileTree) -> None:
    assert tree.create_directory([]) == ROOT
    assert tree.is_dir(ROOT)


def test_create_directory_is_idempotent(tree: VirtualFileTree) -> None:
    tree.create_directory(["google", "type"])
    tree.write_file("/google/type/money.proto", b"syntax = 'proto3';")

    assert tree.create_directory(["google", "type"]) == "/google/type"
    assert tree.create_directory(["google"]) == "/google"
    assert tree.read_bytes("/google/type/money.proto") == b"syntax = 'proto3';"


def test_create_directory_through_file_fails(tree: VirtualFileTree) -> None:
    tree.write_file("/a", b"")

    with pytest.raises(DirectoryCreationError, match="a file exists"):
        tree.create_directory(["a", "b"])


@pytest.mark.parametrize("segments", [["a", ""], [".."], ["."], ["a/b"]], ids=["empty", "parent", "self", "slash"])
def test_create_directory_rejects_invalid_segments(tree: VirtualFileTree, segments: list[str]) -> None:
    with pytest.raises(DirectoryCreationError, match="Invalid directory name"):
        tree.create_directory(segments)


def test_create_directory_respects_entry_limit() -> None:
    with VirtualFileTree(max_entries=3) as tree:
        tree.create_directory(["a", "b"])
        with pytest.raises(DirectoryCreationError, match="entry limit"):
            tree.create_directory(["c"])


def test_write_file_requires_existing_parent(tree: VirtualFileTree) -> None:
    with pytest.raises(WriteError, match="does not exist"):
        tree.write_file("/missing/file.proto", b"x")


def test_write_file_rejects_file_parent(tree: VirtualFileTree) -> None:
    tree.write_file("/a", b"")

    with pytest.raises(WriteError, match="not a directory"):
        tree.write_file("/a/b.proto", b"x")


def test_write_file_rejects_directory_target(tree: VirtualFileTree) -> None:
    tree.create_directory(["pkg"])

    with pytest.raises(WriteError, match="is a directory"):
        tree.write_file("/pkg", b"x")


def test_write_file_content_is_immutable(tree: VirtualFileTree) -> None:
    tree.write_file("/a.proto", b"first")

    with pytest.raises(WriteError, match="already exists"):
        tree.write_file("/a.proto", b"second")
    assert tree.read_bytes("/a.proto") == b"first"


@pytest.mark.parametrize("path", ["relative.proto", "/", "/a/../b.proto"])
def test_write_file_rejects_non_absolute_paths(tree: VirtualFileTree, path: str) -> None:
    with pytest.raises(WriteError):
        tree.write_file(path, b"x")


def test_write_file_respects_byte_limit() -> None:
    with VirtualFileTree(max_bytes=10) as tree:
        tree.write_file("/a", b"12345")
        with pytest.raises(WriteError, match="size limit"):
            tree.write_file("/b", b"123456")
        assert tree.total_bytes == 5


def test_read_bytes_of_missing_file_raises(tree: VirtualFileTree) -> None:
    tree.create_directory(["dir"])

    with pytest.raises(FileNotFoundError):
        tree.read_bytes("/missing")
    with pytest.raises(FileNotFoundError):
        tree.read_bytes("/dir")


def test_walk_files_is_sorted_depth_first(tree: VirtualFileTree) -> None:
    tree.create_directory(["b", "c"])
    tree.create_directory(["a"])
    tree.write_file("/b/c/z.proto", b"")
    tree.write_file("/b/y.proto", b"")
    tree.write_file("/a/x.proto", b"")
    tree.write_file("/root.proto", b"")

    assert list(tree.walk_files()) == ["/a/x.proto", "/b/c/z.proto", "/b/y.proto", "/root.proto"]
    assert list(tree.walk_files("/b")) == ["/b/c/z.proto", "/b/y.proto"]
    assert tree.iterdir("/b") == ["/b/c", "/b/y.proto"]
    assert tree.file_count == 4


def test_close_releases_everything_and_is_repeatable() -> None:
    tree = VirtualFileTree()
    tree.create_directory(["a"])
    tree.write_file("/a/b.proto", b"x")

    tree.close()
    tree.close()

    assert tree.closed
    with pytest.raises(TreeClosedError):
        tree.read_bytes("/a/b.proto")
    with pytest.raises(TreeClosedError):
        tree.create_directory(["a"])


def test_context_manager_closes_on_error() -> None:
    with pytest.raises(RuntimeError), VirtualFileTree() as tree:
        tree.write_file("/a.proto", b"x")
        raise RuntimeError("boom")

    assert tree.closed


def test_trees_are_isolated() -> None:
    with VirtualFileTree() as first, VirtualFileTree() as second:
        first.write_file("/a.proto", b"x")

        assert first.exists("/a.proto")
        assert not second.exists("/a.proto")
