"""Context commands: list, split, load, switch, reset."""

import asyncio
from pathlib import Path

import httpx
import typer

from ..adapter import ContextDatabaseAdapter
from ..catalog import ContextCatalog, load_catalog
from ..client import TypeDBAPIError, get_client
from ..config import Settings, get_settings
from ..controller import ContextController, create_demo_controller, create_lesson_controller
from ..exceptions import ContextError
from ..main import state
from ..output import print_error, print_json, print_success, print_table
from ..splitter import split_statements

app = typer.Typer(
    name="contexts",
    help="Load and switch contexts",
    no_args_is_help=True,
)

DEMO_OPTION = typer.Option(False, "--demo", "-d", help="Use the demo catalog and demo_* databases")


def _catalog_for(settings: Settings, demo: bool) -> ContextCatalog:
    directory = settings.demo_catalog_dir if demo else settings.catalog_dir
    if directory is None:
        key = "demo_catalog_dir" if demo else "catalog_dir"
        raise ValueError(f"Catalog directory not configured. Use: typedb-contexts config set {key} <path>")
    return load_catalog(directory)


def _controller_for(
    settings: Settings, catalog: ContextCatalog, adapter: ContextDatabaseAdapter, demo: bool
) -> ContextController:
    if demo:
        return create_demo_controller(catalog, adapter, prefix=settings.demo_prefix)
    return create_lesson_controller(catalog, adapter, prefix=settings.lesson_prefix)


async def _run(action: str, name: str, demo: bool) -> dict:
    settings = get_settings()
    catalog = _catalog_for(settings, demo)

    async with get_client(settings) as client:
        adapter = ContextDatabaseAdapter(client)
        controller = _controller_for(settings, catalog, adapter, demo)

        if action == "load":
            await controller.load(name)
        elif action == "switch":
            await controller.switch_or_load(name)
        elif action == "reset":
            # A fresh controller has nothing current, so load always rebuilds
            await controller.load(name)

        result = controller.get_status().model_dump()
        result["database"] = adapter.get_active_database()
        return result


def _execute(action: str, name: str, demo: bool) -> None:
    try:
        result = asyncio.run(_run(action, name, demo))
    except (ContextError, TypeDBAPIError, httpx.HTTPError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    if state.json_output:
        print_json(result)
    else:
        print_success(f"Context '{result['name']}' ready (database: {result['database']})")


@app.command("list")
def list_contexts(demo: bool = DEMO_OPTION) -> None:
    """List contexts in the configured catalog."""
    try:
        catalog = _catalog_for(get_settings(), demo)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if state.json_output:
        print_json({
            "contexts": [
                definition.model_dump(exclude={"schema_text", "seed_text"})
                for definition in catalog.values()
            ],
            "total": len(catalog),
        })
        return

    if not catalog:
        print("No contexts found")
        return

    table_data = [
        {
            "Name": definition.name,
            "Title": definition.display_title,
            "Description": definition.description,
            "Examples": len(definition.example_queries),
        }
        for definition in catalog.values()
    ]
    print_table(
        table_data,
        columns=["Name", "Title", "Description", "Examples"],
        title=f"Contexts (Total: {len(catalog)})",
    )


@app.command("split")
def split_file(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Seed script (.tql)"),
) -> None:
    """Show the statements a seed script is split into."""
    statements = split_statements(file.read_text(encoding="utf-8"))

    if state.json_output:
        print_json({"statements": statements, "total": len(statements)})
        return

    for index, statement in enumerate(statements, start=1):
        print(f"-- [{index}]")
        print(statement)
    print_success(f"{len(statements)} statement(s)")


@app.command("load")
def load_context(
    name: str = typer.Argument(..., help="Context name (e.g. social-network)"),
    demo: bool = DEMO_OPTION,
) -> None:
    """Recreate a context database from its schema and seed data."""
    _execute("load", name, demo)


@app.command("switch")
def switch_context(
    name: str = typer.Argument(..., help="Context name (e.g. social-network)"),
    demo: bool = DEMO_OPTION,
) -> None:
    """Select a context, reusing its database when it already exists."""
    _execute("switch", name, demo)


@app.command("reset")
def reset_context(
    name: str = typer.Argument(..., help="Context name (e.g. social-network)"),
    demo: bool = DEMO_OPTION,
) -> None:
    """Select a context and rebuild its database from scratch."""
    _execute("reset", name, demo)
