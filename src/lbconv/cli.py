"""
Click-based CLI for lbconv.

IMPORTANT: This module only ORCHESTRATES. It never parses or resolves.
- Loads settings
- Invokes the pipeline
- Formats output
"""

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from lbconv import __version__
from lbconv.config import SettingsManager
from lbconv.errors import LBConvError
from lbconv.logging_setup import configure_logging
from lbconv.model.config import Configuration
from lbconv.model.diagnostic import Severity
from lbconv.pipeline import detect_dialect, load_config

console = Console()

DIALECT_CHOICES = ["auto", "config-edit", "brace"]


@click.group()
@click.version_option(version=__version__, prog_name="lbconv")
@click.option("--config", "-c", type=click.Path(), help="Path to settings directory")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """lbconv: load-balancer configuration dumps as a vendor-neutral graph."""
    ctx.ensure_object(dict)
    config_dir = Path(config) if config else None
    try:
        settings = SettingsManager(config_dir).load()
    except LBConvError as e:
        console.print(f"[red]Error:[/] {e}")
        ctx.exit(2)
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj["settings"] = settings


@main.command()
@click.argument("path", type=click.Path())
def detect(path: str) -> None:
    """Print the dialect of a configuration file."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
        dialect = detect_dialect(text)
    except OSError as e:
        console.print(f"[red]Error:[/] Cannot read {path}: {e}")
        raise SystemExit(2)
    except LBConvError as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(2)
    console.print(dialect.value)


@main.command()
@click.argument("path", type=click.Path())
@click.option("--dialect", "-d", type=click.Choice(DIALECT_CHOICES), default=None, help="Input dialect")
@click.pass_context
def inspect(ctx: click.Context, path: str, dialect: str | None) -> None:
    """Parse a configuration file and summarise the resolved graph."""
    settings = ctx.obj["settings"]
    try:
        config = load_config(path, dialect=dialect, settings=settings)
    except LBConvError as e:
        console.print(f"[red]Error:[/] {e}")
        raise SystemExit(2)

    _print_summary(config)
    _print_virtual_servers(config)
    _print_diagnostics(config)

    if config.unresolved_references():
        raise SystemExit(1)


def _print_summary(config: Configuration) -> None:
    grid = Table.grid(expand=True)
    grid.add_column()
    grid.add_column(justify="right")
    for name, count in config.stats.items():
        grid.add_row(name.replace("_", " ").title(), str(count))

    title = f"{config.vendor or 'unknown vendor'} ({config.metadata.get('dialect', '?')})"
    version = config.metadata.get("version")
    if version:
        title += f" {version}"
    console.print(Panel(grid, title=title, border_style="blue"))


def _print_virtual_servers(config: Configuration) -> None:
    if not config.virtual_servers:
        return
    table = Table(title="Virtual Servers")
    table.add_column("Name", style="bold")
    table.add_column("Listener")
    table.add_column("Status")
    table.add_column("Pool")
    table.add_column("Members", justify="right")
    table.add_column("Monitors")

    for vs in config.virtual_servers:
        if vs.pool is not None:
            pool_cell = escape(vs.pool.name)
            members = str(len(vs.pool.members))
            monitors = escape(f" {vs.pool.health_check_relation} ".join(m.name for m in vs.pool.health_monitors))
        elif vs.pool_name:
            pool_cell = f"[red]{escape(vs.pool_name)} (missing)[/]"
            members = "-"
            monitors = "-"
        else:
            pool_cell, members, monitors = "-", "-", "-"
        status_color = "green" if vs.status.startswith("enable") else "yellow"
        table.add_row(
            escape(vs.name),
            escape(vs.listener),
            f"[{status_color}]{escape(vs.status)}[/]",
            pool_cell,
            members,
            monitors or "-",
        )
    console.print(table)


def _print_diagnostics(config: Configuration) -> None:
    if not config.diagnostics:
        return
    console.print()
    console.print("Diagnostics", style="bold underline")
    for diagnostic in config.diagnostics:
        color = "yellow" if diagnostic.severity == Severity.WARNING else "cyan"
        console.print(f"   [{color}]{diagnostic.severity.value}[/] {escape(str(diagnostic))}", highlight=False)


if __name__ == "__main__":
    main()
