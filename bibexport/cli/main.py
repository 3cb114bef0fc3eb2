"""Main CLI entry point and application setup."""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
import msgspec
import yaml
from click.exceptions import Exit
from rich.console import Console

from bibexport import __version__
from bibexport.cli.config import build_export_config, load_config
from bibexport.core.config import Dialect, DOIandURL, PreserveCaps
from bibexport.core.engine import ExportEngine
from bibexport.core.exceptions import ItemFormatError
from bibexport.core.models import Item
from bibexport.operations.export import ExportWorkflow
from bibexport.operations.results import WorkflowResult
from bibexport.storage.cache import RecordCache
from bibexport.storage.sink import FileSink, StringSink

logger = logging.getLogger(__name__)


@dataclass
class Context:
    """CLI context that holds shared resources."""

    console: Console
    config: dict[str, Any] = field(default_factory=dict)
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console for status output.

    Status goes to stderr so exported records can be piped from stdout.
    """
    return Console(
        stderr=True,
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


def load_items(path: Path) -> list[Item]:
    """Read a JSON array of items.

    Raises:
        ItemFormatError: If the file is not a valid item list.
    """
    try:
        return msgspec.json.decode(path.read_bytes(), type=list[Item])
    except (msgspec.DecodeError, msgspec.ValidationError) as e:
        raise ItemFormatError(str(path), str(e)) from e


class BibExportGroup(click.Group):
    """Custom group that reports errors without tracebacks."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {e}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=BibExportGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.version_option(
    version=__version__, prog_name="bibexport", message="bibexport version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
) -> None:
    """Export bibliographic items as BibTeX or BibLaTeX records."""
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    console = create_console(no_color=no_color)

    try:
        config_data = load_config(config)
    except Exception as e:
        if debug:
            raise
        console.print(f"[red]Error loading config file:[/red] {e}")
        ctx.exit(1)

    ctx.obj = Context(console=console, config=config_data, debug=debug)


@cli.command()
@click.argument("items", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output", "-o", type=click.Path(path_type=Path), help="Write records to a file"
)
@click.option(
    "--dialect",
    type=click.Choice([d.value for d in Dialect]),
    default=None,
    help="Output dialect",
)
@click.option(
    "--testing/--no-testing",
    default=None,
    help="Deterministic output: sorted fields, tags and synthetic file paths",
)
@click.option("--workers", "-w", type=int, default=None, help="Number of worker threads")
@click.option(
    "--cache-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Reuse and update a record cache",
)
@click.option(
    "--preserve-caps",
    type=click.Choice([p.value for p in PreserveCaps]),
    default=None,
    help="Which capitals to protect with braces",
)
@click.option(
    "--doi-and-url",
    type=click.Choice([p.value for p in DOIandURL]),
    default=None,
    help="Which of doi and url to keep when both are present",
)
@click.option("--fancy-urls/--no-fancy-urls", default=None, help="Wrap URLs in \\url{}")
@click.option("--unicode/--no-unicode", default=None, help="Keep non-ASCII characters")
@click.pass_obj
def export(
    obj: Context,
    items: Path,
    output: Path | None,
    dialect: str | None,
    testing: bool | None,
    workers: int | None,
    cache_file: Path | None,
    preserve_caps: str | None,
    doi_and_url: str | None,
    fancy_urls: bool | None,
    unicode: bool | None,
) -> None:
    """Export the items in a JSON file."""
    console = obj.console
    export_config, settings = build_export_config(
        obj.config,
        dialect=dialect,
        testing=testing,
        preserve_caps=preserve_caps,
        doi_and_url=doi_and_url,
        fancy_urls=fancy_urls,
        unicode=unicode,
    )
    workers = workers or settings.get("workers")
    output = output or (Path(settings["output"]) if settings.get("output") else None)
    if cache_file is None and settings.get("cache_file"):
        cache_file = Path(settings["cache_file"])

    cache = None
    if cache_file is not None:
        export_config = export_config.replace(caching=True)
        cache = RecordCache.load(cache_file)

    item_list = load_items(items)
    sink = FileSink(output) if output else StringSink()
    engine = ExportEngine(export_config, sink=sink, cache=cache)

    with sink:
        result = ExportWorkflow(engine, max_workers=workers).execute(
            item_list, source=str(items)
        )

    if isinstance(sink, StringSink):
        click.echo(sink.getvalue(), nl=False)

    if cache is not None:
        cache.save(cache_file)

    if output is not None:
        _copy_attachments(result, output.parent, console)

    _print_summary(result, console)
    if not result.success:
        raise Exit(1)


def _copy_attachments(result: WorkflowResult, root: Path, console: Console) -> None:
    for source, destination in result.copy_requests:
        target = root / destination
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            logger.debug(f"Copied {source} to {target}")
        except OSError as e:
            console.print(f"[yellow]Could not copy {source}:[/yellow] {e}")


def _print_summary(result: WorkflowResult, console: Console) -> None:
    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")
    for step in result.failed_steps:
        for error in step.errors or []:
            console.print(f"[red]Error:[/red] {error}")

    summary = result.get_summary()
    message = (
        f"Exported {summary['successful_steps']} of {summary['total_steps']} records"
    )
    if summary["cached"]:
        message += f" ({summary['cached']} from cache)"
    style = "green" if result.success else "red"
    console.print(f"[{style}]{message}[/{style}]")


@cli.command(name="config")
@click.pass_obj
def show_config(obj: Context) -> None:
    """Show the effective configuration."""
    export_config, settings = build_export_config(obj.config)
    data = export_config.to_dict()
    data.update(settings)
    click.echo(yaml.safe_dump(data, sort_keys=True), nl=False)


def main() -> None:
    """Entry point for the bibexport command."""
    cli()


if __name__ == "__main__":
    main()
