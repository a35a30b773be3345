"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
import structlog

from typedb_contexts.catalog import ContextCatalog
from typedb_contexts.models import ContextDefinition, ExampleQuery

SOCIAL_SCHEMA = """\
# Social network schema
define
  attribute name, value string;
  entity person, owns name, plays friendship:friend;
  relation friendship, relates friend;
"""

SOCIAL_SEED = """\
# People
insert $p isa person, has name "Alice";
insert $p isa person, has name "Bob";

# Friendships
match
  $a isa person, has name "Alice";
  $b isa person, has name "Bob";
insert
  (friend: $a, friend: $b) isa friendship;
"""

COMMERCE_SCHEMA = """\
define
  attribute sku, value string;
  entity product, owns sku;
"""

COMMERCE_SEED = """\
insert $p isa product, has sku "A-1";
"""


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


class RecordingDatabaseOps:
    """
    In-memory DatabaseOps that records every call.

    Failures are injected per operation: create_error / schema_error /
    exists_error / activate_error raise on the corresponding call, and any
    seed statement containing one of failing_statements raises.
    """

    def __init__(self, existing: set[str] | None = None):
        self.calls: list[tuple] = []
        self.databases: set[str] = set(existing or ())
        self.active: str | None = None
        self.create_error: Exception | None = None
        self.schema_error: Exception | None = None
        self.exists_error: Exception | None = None
        self.activate_error: Exception | None = None
        self.failing_statements: list[str] = []

    def names(self) -> list[str]:
        """Operation names in call order."""
        return [call[0] for call in self.calls]

    async def create_database(self, name: str) -> None:
        self.calls.append(("create_database", name))
        if self.create_error is not None:
            raise self.create_error
        self.databases.add(name)

    async def execute_schema(self, database: str, schema: str) -> None:
        self.calls.append(("execute_schema", database, schema))
        if self.schema_error is not None:
            raise self.schema_error

    async def execute_write(self, database: str, query: str) -> None:
        self.calls.append(("execute_write", database, query))
        if any(marker in query for marker in self.failing_statements):
            raise RuntimeError(f"write rejected: {query.splitlines()[0]}")

    def get_active_database(self) -> str | None:
        return self.active

    def set_active_database(self, name: str) -> None:
        self.calls.append(("set_active_database", name))
        if self.activate_error is not None:
            raise self.activate_error
        self.active = name

    async def database_exists(self, name: str) -> bool:
        self.calls.append(("database_exists", name))
        if self.exists_error is not None:
            raise self.exists_error
        return name in self.databases


@pytest.fixture
def social_network() -> ContextDefinition:
    return ContextDefinition(
        name="social-network",
        title="Social Network",
        description="People and friendships",
        schema_text=SOCIAL_SCHEMA,
        seed_text=SOCIAL_SEED,
        example_queries=(
            ExampleQuery(
                name="All people",
                query="match $p isa person, has name $n;",
            ),
        ),
    )


@pytest.fixture
def e_commerce() -> ContextDefinition:
    return ContextDefinition(
        name="e-commerce",
        schema_text=COMMERCE_SCHEMA,
        seed_text=COMMERCE_SEED,
    )


@pytest.fixture
def catalog(social_network, e_commerce) -> ContextCatalog:
    return ContextCatalog([social_network, e_commerce])


@pytest.fixture
def ops() -> RecordingDatabaseOps:
    return RecordingDatabaseOps()


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the user config file into a temp directory."""
    path = tmp_path / ".typedb-contexts" / "config.yaml"
    monkeypatch.setattr("typedb_contexts.config.CONFIG_FILE", path)
    for key in (
        "TYPEDB_URL", "USERNAME", "PASSWORD", "CATALOG_DIR", "DEMO_CATALOG_DIR",
        "LESSON_PREFIX", "DEMO_PREFIX", "DEBUG", "JSON_LOGS",
    ):
        monkeypatch.delenv(f"TYPEDB_CONTEXTS_{key}", raising=False)
    monkeypatch.chdir(tmp_path)
    return path


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """A catalog directory on disk with two contexts and a skipped one."""
    root = tmp_path / "contexts"

    social = root / "social-network"
    social.mkdir(parents=True)
    (social / "context.yaml").write_text(
        "title: Social Network\n"
        "description: People and friendships\n"
        "example_queries:\n"
        "  - name: All people\n"
        "    description: Every person with a name\n"
        "    query: match $p isa person, has name $n;\n"
    )
    (social / "schema.tql").write_text(SOCIAL_SCHEMA)
    (social / "seed.tql").write_text(SOCIAL_SEED)

    commerce = root / "e-commerce"
    commerce.mkdir()
    (commerce / "schema.tql").write_text(COMMERCE_SCHEMA)
    (commerce / "seed.tql").write_text(COMMERCE_SEED)

    (root / "_template").mkdir()
    (root / "_template" / "schema.tql").write_text("define\n")
    (root / "README.md").write_text("not a context\n")

    return root
