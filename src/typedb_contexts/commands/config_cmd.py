"""Configuration management commands."""

import typer
from pydantic import ValidationError

from ..config import Settings, get_settings, save_user_config
from .. import config as config_module
from ..main import state
from ..output import print_dict, print_error, print_json, print_success


app = typer.Typer(help="Configuration management")


@app.command("set")
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g. typedb-url, password, catalog-dir)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value.

    Configuration is saved to ~/.typedb-contexts/config.yaml. Environment
    variables (TYPEDB_CONTEXTS_*) still take precedence.
    """
    key_normalized = key.lower().replace("-", "_")
    if key_normalized not in Settings.model_fields:
        print_error(f"Unknown config key: {key}")
        raise typer.Exit(1)

    try:
        Settings.model_validate({key_normalized: value})
    except ValidationError as e:
        print_error(f"Invalid value for {key}: {e.errors()[0]['msg']}")
        raise typer.Exit(1)

    path = save_user_config({key_normalized: value})

    if state.json_output:
        print_json({"success": True, "key": key_normalized, "file": str(path)})
    else:
        display_value = value
        if key_normalized == "password":
            display_value = Settings._mask(value) if value else ""
        print_success(f"Configuration updated: {key_normalized} = {display_value}")
        print_success(f"Saved to: {path}")


@app.command("show")
def show_config() -> None:
    """Show the effective configuration (password masked)."""
    settings = get_settings()

    if state.json_output:
        print_json(settings.to_display())
        return

    print_dict(settings.to_display(), title="Current Configuration")
    if config_module.CONFIG_FILE.exists():
        print_success(f"\nConfig file: {config_module.CONFIG_FILE}")
    else:
        print_error(f"\nConfig file not found: {config_module.CONFIG_FILE}")
