import logging
import subprocess
import sys
from typing import Tuple

import click
from rapidfuzz import fuzz, process
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from sniplias import __version__
from sniplias.alias_store import AliasStore, AliasStoreError
from sniplias.config import Config
from sniplias.session import Session, Tab
from sniplias.snippet_store import SnippetStore, SnippetStoreError

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def open_stores(config: Config) -> Tuple[AliasStore, SnippetStore]:
    """Build and load both stores, exiting with a diagnostic on failure"""
    try:
        alias_store = AliasStore(config.get_path("shell_config_file")).initialize()
        snippet_store = SnippetStore(config.get_path("snippets_file")).initialize()
    except (AliasStoreError, SnippetStoreError) as e:
        err_console.print(f"[red]✗[/] {e}")
        if e.__cause__ is not None:
            err_console.print(f"[dim]  {e.__cause__}[/]")
        sys.exit(1)
    return alias_store, snippet_store


def execute_pending(command: str) -> int:
    """Run a rendered snippet command through the shell"""
    logger.debug("Executing %r", command)
    result = subprocess.run(["sh", "-c", command])
    if result.returncode != 0:
        err_console.print(f"[yellow]Command exited with code: {result.returncode}[/]")
    return result.returncode


@click.group(invoke_without_command=True)
@click.option("--debug", is_flag=True, help="Log store activity to stderr")
@click.version_option(version=__version__, prog_name="sniplias")
@click.pass_context
def main(ctx, debug):
    """sniplias - browse, edit and run shell aliases and command snippets

    Run without commands to launch the interactive TUI.
    """
    setup_logging(debug)
    ctx.obj = Config()
    if ctx.invoked_subcommand is not None:
        return

    from sniplias.tui import SnipliasApp

    config = ctx.obj
    alias_store, snippet_store = open_stores(config)
    start_tab = Tab.ALIASES if config.get("default_tab") == "aliases" else Tab.SNIPPETS
    session = Session(alias_store, snippet_store, start_tab=start_tab)
    SnipliasApp(session, config).run()

    status = 0
    if session.pending_command:
        status = execute_pending(session.pending_command)

    if session.aliases_modified:
        err_console.print("\n[green]Aliases modified![/] Run to reload:")
        err_console.print(f"  [cyan]{alias_store.source_command()}[/]\n")

    sys.exit(status)


@main.command(name="list")
@click.argument("query", required=False, default="")
@click.option("--aliases", "only_aliases", is_flag=True, help="Only list aliases")
@click.option("--snippets", "only_snippets", is_flag=True, help="Only list snippets")
@click.pass_obj
def list_items(config, query, only_aliases, only_snippets):
    """List aliases and snippets, optionally filtered by QUERY"""
    alias_store, snippet_store = open_stores(config)
    show_all = not only_aliases and not only_snippets

    if show_all or only_aliases:
        aliases = alias_store.list_filtered(query)
        table = Table(title=f"Aliases ({alias_store.config_path})")
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Command", style="green")
        for alias in aliases:
            table.add_row(alias.name, alias.command)
        console.print(table)
        console.print(f"[dim]{len(aliases)} aliases[/]")

    if show_all or only_snippets:
        snippets = snippet_store.list_filtered(query)
        table = Table(title="Snippets")
        table.add_column("Title", style="cyan")
        table.add_column("Command", style="green")
        table.add_column("Description", style="dim")
        for snippet in snippets:
            table.add_row(snippet.title, snippet.command, snippet.description or "—")
        console.print(table)
        console.print(f"[dim]{len(snippets)} snippets[/]")


@main.command(name="vars")
@click.argument("title")
@click.pass_obj
def show_vars(config, title):
    """Show the placeholders a snippet asks for"""
    _, snippet_store = open_stores(config)
    matches = snippet_store.find_by_title(title)
    if not matches:
        console.print(f"[red]✗[/] No snippet titled '{title}'")
        titles = [snippet.title for snippet in snippet_store.list()]
        suggestions = process.extract(title, titles, scorer=fuzz.partial_ratio, limit=3, score_cutoff=60)
        if suggestions:
            console.print("[dim]Did you mean: " + ", ".join(match for match, _, _ in suggestions) + "?[/]")
        sys.exit(1)

    for snippet in matches:
        console.print(f"[bold cyan]{snippet.title}[/]: {snippet.command}")
        variables = snippet.variables()
        if not variables:
            console.print("  [dim]no variables[/]")
        for variable in variables:
            suffix = ""
            if variable.default_value is not None:
                suffix = f" [dim](default: {variable.default_value})[/]"
            console.print(f"  • [yellow]{variable.name}[/]{suffix}")


@main.command(name="config")
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.pass_obj
def configure(config, key, value):
    """Show settings, or set KEY to VALUE"""
    if key is None:
        table = Table(title=f"Settings ({config.config_path})")
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")
        for name in Config.DEFAULT_CONFIG:
            current = config.get(name)
            table.add_row(name, "—" if current is None else str(current))
        console.print(table)
        return

    if key not in Config.DEFAULT_CONFIG:
        err_console.print(f"[red]✗[/] Unknown setting '{key}'")
        err_console.print(f"[dim]  Known settings: {', '.join(Config.DEFAULT_CONFIG)}[/]")
        sys.exit(1)
    if value is None:
        console.print(f"{key} = {config.get(key)}")
        return

    if key == "theme" and value not in Config.THEMES:
        err_console.print(f"[red]✗[/] Unknown theme '{value}'. Available: {', '.join(Config.THEMES)}")
        sys.exit(1)
    if key == "default_tab" and value not in (Tab.SNIPPETS.value, Tab.ALIASES.value):
        err_console.print("[red]✗[/] default_tab must be 'snippets' or 'aliases'")
        sys.exit(1)

    try:
        config.set(key, value)
    except OSError as e:
        err_console.print(f"[red]✗[/] Could not save {config.config_path}: {e}")
        sys.exit(1)
    console.print(f"[green]✔[/] {key} = {value}")


if __name__ == "__main__":
    main()
