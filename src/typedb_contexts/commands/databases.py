"""Database listing commands."""

import asyncio

import httpx
import typer

from ..client import TypeDBAPIError, get_client
from ..config import get_settings
from ..main import state
from ..naming import DatabaseNamespace
from ..output import print_error, print_json, print_table

app = typer.Typer(
    name="databases",
    help="Inspect databases on the TypeDB server",
    no_args_is_help=True,
)


async def _list_databases() -> list[str]:
    async with get_client(get_settings()) as client:
        return await client.list_databases()


@app.command("list")
def list_databases(
    managed: bool = typer.Option(False, "--managed", "-m", help="Only databases created for contexts"),
    demo: bool = typer.Option(False, "--demo", "-d", help="Use the demo_* namespace"),
) -> None:
    """List databases with the context each one belongs to."""
    settings = get_settings()
    namespace = DatabaseNamespace(settings.demo_prefix if demo else settings.lesson_prefix)

    try:
        names = asyncio.run(_list_databases())
    except (TypeDBAPIError, httpx.HTTPError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    if managed:
        names = namespace.filter_managed(names)

    rows = [
        {"Database": name, "Context": namespace.logical_name_of(name)}
        for name in names
    ]

    if state.json_output:
        print_json({
            "databases": [{"name": r["Database"], "context": r["Context"]} for r in rows],
            "total": len(rows),
        })
        return

    if not rows:
        print("No databases found")
        return

    print_table(rows, columns=["Database", "Context"], title=f"Databases (Total: {len(rows)})")
