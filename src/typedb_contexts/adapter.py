"""DatabaseOps implementation backed by a TypeDB server."""

from typing import Callable

import structlog

from .client import TypeDBAPIError, TypeDBClient

logger = structlog.get_logger()


class ContextDatabaseAdapter:
    """
    Connects a ContextController to a TypeDB server.

    - create_database drops an existing database of the same name first
    - schema and write queries run in schema / write transactions
    - the active database is session state held here; changing it invokes
      the optional callback (e.g. to refresh a database selector)
    """

    def __init__(
        self,
        client: TypeDBClient,
        on_active_database_changed: Callable[[str], None] | None = None,
    ):
        self.client = client
        self._on_active_database_changed = on_active_database_changed
        self._active_database: str | None = None

    async def create_database(self, name: str) -> None:
        # Reset behavior: drop any previous database with this name
        try:
            if name in await self.client.list_databases():
                logger.info("context_database_deleting", database=name)
                await self.client.delete_database(name)
        except TypeDBAPIError as e:
            logger.info("context_database_delete_skipped", database=name, error=str(e))

        logger.info("context_database_creating", database=name)
        await self.client.create_database(name)

    async def execute_schema(self, database: str, schema: str) -> None:
        if not schema.strip():
            return
        logger.debug("context_schema_executing", database=database)
        await self.client.query(database, schema, transaction_type="schema")

    async def execute_write(self, database: str, query: str) -> None:
        if not query.strip():
            return
        logger.debug("context_write_executing", database=database)
        await self.client.query(database, query, transaction_type="write")

    def get_active_database(self) -> str | None:
        return self._active_database

    def set_active_database(self, name: str) -> None:
        logger.info("active_database_set", database=name)
        self._active_database = name
        if self._on_active_database_changed is not None:
            self._on_active_database_changed(name)

    async def database_exists(self, name: str) -> bool:
        return name in await self.client.list_databases()
