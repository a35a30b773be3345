"""Context catalogs: name -> ContextDefinition lookups.

On disk a catalog is a directory with one subdirectory per context:

    contexts/
        social-network/
            context.yaml    # optional: title, description, example_queries
            schema.tql
            seed.tql
        e-commerce/
            ...

Subdirectories starting with "_" or "." are skipped.
"""

from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Iterable

import structlog
import yaml

from .models import ContextDefinition, ExampleQuery

logger = structlog.get_logger()

CONTEXT_META_FILE = "context.yaml"
SCHEMA_FILE = "schema.tql"
SEED_FILE = "seed.tql"


class ContextCatalog(Mapping[str, ContextDefinition]):
    """Ordered, mutable registry of context definitions."""

    def __init__(self, definitions: Iterable[ContextDefinition] = ()):
        self._definitions: dict[str, ContextDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def __getitem__(self, name: str) -> ContextDefinition:
        return self._definitions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def register(self, definition: ContextDefinition) -> None:
        """Add or replace a definition."""
        self._definitions[definition.name] = definition

    def unregister(self, name: str) -> bool:
        return self._definitions.pop(name, None) is not None

    def clear(self) -> None:
        self._definitions.clear()

    def names(self) -> list[str]:
        return list(self._definitions)


def _read_text(path: Path, context: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("context_file_missing", context=context, path=str(path))
        return ""


def _read_meta(path: Path, context: str) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            meta = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.warning("context_meta_invalid", context=context, path=str(path), error=str(e))
        return {}
    if not isinstance(meta, dict):
        logger.warning("context_meta_invalid", context=context, path=str(path))
        return {}
    return meta


def load_context_dir(context_dir: Path) -> ContextDefinition:
    """Build a definition from one context directory."""
    name = context_dir.name
    meta = _read_meta(context_dir / CONTEXT_META_FILE, name)

    return ContextDefinition(
        name=name,
        schema_text=_read_text(context_dir / SCHEMA_FILE, name),
        seed_text=_read_text(context_dir / SEED_FILE, name),
        title=meta.get("title", "") or "",
        description=meta.get("description", "") or "",
        example_queries=tuple(
            ExampleQuery(**query) for query in meta.get("example_queries", []) or []
        ),
    )


def load_catalog(directory: Path | str) -> ContextCatalog:
    """
    Load every context found under a directory.

    A missing directory gives an empty catalog.
    """
    directory = Path(directory)
    catalog = ContextCatalog()

    if not directory.is_dir():
        logger.warning("catalog_dir_not_found", path=str(directory))
        return catalog

    for entry in sorted(directory.iterdir()):
        if not entry.is_dir() or entry.name.startswith(("_", ".")):
            continue
        catalog.register(load_context_dir(entry))

    logger.debug("catalog_loaded", path=str(directory), contexts=catalog.names())
    return catalog
