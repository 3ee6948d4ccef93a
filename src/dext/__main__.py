"""CLI entry point: plugin install/uninstall, dev links, themes, config."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console

from .core.config import load_settings
from .core.logging import setup_logging
from .core.utils import package_name, short_path
from .errors import DextError
from .plugins import PluginState, create_manager

console = Console()


def _fail(e: DextError) -> NoReturn:
    console.print(f"[red]error:[/red] {e}  [dim]({e.code})[/dim]")
    sys.exit(1)


def _run(coro):
    """Run a lifecycle coroutine; report a lifecycle error and exit 1."""
    try:
        return asyncio.run(coro)
    except DextError as e:
        _fail(e)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """dext: plugin manager for the Dext launcher."""
    setup_logging(verbose)
    settings = load_settings(verbose=verbose)
    ctx.obj = create_manager(settings)


@cli.command()
@click.argument("plugin")
@click.pass_obj
def install(manager, plugin: str):
    """Install a plugin from the registry and enable it."""
    with console.status(f"installing [bold]{plugin}[/bold]..."):
        _run(manager.install(plugin, manager.plugins_dir))
    console.print(f"installed [bold]{plugin}[/bold]")


@cli.command()
@click.argument("plugin")
@click.pass_obj
def uninstall(manager, plugin: str):
    """Remove an installed plugin."""
    try:
        src_dir = manager.plugin_path(plugin)
    except DextError as e:
        _fail(e)
    _run(manager.uninstall(plugin, src_dir))
    console.print(f"uninstalled [bold]{plugin}[/bold]")


@cli.command()
@click.argument(
    "path", required=False, default=".", type=click.Path(exists=True, file_okay=False)
)
@click.pass_obj
def dev(manager, path: str):
    """Link a local plugin directory (default: cwd) for development."""
    src = Path(path).resolve()
    name = package_name(src)
    result = _run(manager.create_symlink(name, src))
    console.print(f"linked [bold]{name}[/bold]")
    console.print(f"  {short_path(result.src_path)} -> {short_path(result.dest_path)}", style="dim")


@cli.command()
@click.argument("path", required=False, default=".", type=click.Path(file_okay=False))
@click.pass_obj
def undev(manager, path: str):
    """Remove the development link for a local plugin directory."""
    name = package_name(Path(path))
    result = _run(manager.remove_symlink(name))
    console.print(f"unlinked [bold]{name}[/bold]  [dim]{short_path(result.dest_path)}[/dim]")


@cli.command()
@click.argument("name", required=False, default=None)
@click.pass_obj
def theme(manager, name: str | None):
    """Show the current theme, or switch to NAME."""
    if not name:
        current = _run(manager.get_theme())
        if current:
            console.print(f"current theme: [bold]{current}[/bold]")
        else:
            console.print("no theme set", style="dim")
        return
    _run(manager.set_theme(name))
    console.print(f"theme switched to [bold]{name}[/bold]")


@cli.command("list")
@click.option("--all", "-a", "show_all", is_flag=True, help="Include disabled plugins")
@click.pass_obj
def list_plugins(manager, show_all: bool):
    """List enabled plugins."""
    names = manager.plugins.names() if show_all else manager.plugins.enabled()
    if not names:
        console.print("no plugins enabled", style="dim")
        return
    current = _run(manager.get_theme())
    for name in names:
        state = manager.plugins.state(name)
        style = "green" if state is PluginState.ENABLED else "dim"
        marker = "  [cyan](theme)[/cyan]" if name == current else ""
        try:
            if manager.plugin_path(name).is_symlink():
                marker += "  [dim]linked[/dim]"
        except DextError:
            marker += "  [red]invalid name[/red]"
        console.print(f"  [bold]{name}[/bold]  [{style}]{state.value}[/{style}]{marker}")


@cli.command()
@click.pass_obj
def config(manager):
    """Print the configuration document."""
    data = _run(manager.get_config())
    console.print_json(json.dumps(data))


@cli.command()
@click.argument("plugin")
@click.pass_obj
def search(manager, plugin: str):
    """Check whether a plugin is published in the registry."""
    if _run(manager.check_on_registry(plugin)):
        console.print(f"[bold]{plugin}[/bold] is available")
    else:
        console.print(f"[bold]{plugin}[/bold] not found", style="dim")
        sys.exit(1)


def main():
    cli()


if __name__ == "__main__":
    main()
