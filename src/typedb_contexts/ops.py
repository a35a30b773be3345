"""Database operations the context controller depends on."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class DatabaseOps(Protocol):
    """
    Narrow interface to the database engine.

    Coroutine methods are the only places where controller operations
    suspend. create_database has create-or-replace semantics: any previous
    contents of the named database are discarded.
    """

    async def create_database(self, name: str) -> None:
        ...

    async def execute_schema(self, database: str, schema: str) -> None:
        ...

    async def execute_write(self, database: str, query: str) -> None:
        ...

    def get_active_database(self) -> str | None:
        ...

    def set_active_database(self, name: str) -> None:
        ...

    async def database_exists(self, name: str) -> bool:
        ...
