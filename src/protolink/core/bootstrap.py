import logging

from protolink.catalog import GOOGLE_TYPE_PREFIX, load_catalog, prefix_segments
from protolink.config import Settings, get_settings
from protolink.core.linker import SchemaLoader
from protolink.errors import SchemaExtractionError
from protolink.models import SchemaLoadRequest, SchemaLoadResult
from protolink.vfs.tree import ROOT, VirtualFileTree

logger = logging.getLogger(__name__)


def seed_catalog(tree: VirtualFileTree) -> str:
    """Write every well-known type file under ``google/type/``; returns that directory."""
    catalog = load_catalog()
    directory = tree.create_directory(prefix_segments())
    for name, content in catalog.items():
        tree.write_file(f"{directory}/{name}", content)
    logger.debug("Seeded %d well-known type files under /%s", len(catalog), GOOGLE_TYPE_PREFIX)
    return directory


def load_schema_request(request: SchemaLoadRequest, settings: Settings | None = None) -> SchemaLoadResult:
    """Write the request's schema into a fresh virtual tree and return it linked.

    The tree holds the well-known type catalog and the schema file at the path
    implied by its package. It is closed before this function returns or
    raises; the result owns its descriptor pool and does not reference it.
    """
    settings = settings or get_settings()
    with VirtualFileTree(max_bytes=settings.max_tree_bytes, max_entries=settings.max_tree_entries) as tree:
        seed_catalog(tree)

        directory = tree.create_directory(request.package_segments)
        target_path = f"{directory.rstrip('/')}/{request.normalized_file_name}"
        tree.write_file(target_path, request.schema_text.encode("utf-8"))
        logger.debug("Wrote schema %s (%d characters)", target_path, len(request.schema_text))

        with SchemaLoader(tree) as loader:
            loader.init_roots([ROOT], [ROOT])
            schema = loader.load_schema()

        schema_path = target_path.replace("/", "", 1)
        proto_file = schema.proto_file(schema_path)
        if proto_file is None:
            raise SchemaExtractionError(f"Error loading Protobuf File: {request.normalized_file_name}")

    logger.info("Loaded %s with %d linked files", schema_path, len(schema.files))
    return SchemaLoadResult(schema=schema, proto_file=proto_file)


def load_schema(
    package_name: str | None,
    file_name: str,
    schema_text: str,
    settings: Settings | None = None,
) -> SchemaLoadResult:
    settings = settings or get_settings()
    request = SchemaLoadRequest(
        package_name=package_name,
        file_name=file_name,
        schema_text=schema_text,
    )
    return load_schema_request(request, settings)
