"""Thin CLI wrapper for fetch_abis.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from fetch_abis import __version__
from fetch_abis.config import Settings, get_settings, print_settings_json

if TYPE_CHECKING:
    from fetch_abis.layout.schema import LayoutSchema

app = typer.Typer(
    name="fetch-abis",
    help="Sway ABI fetcher - clone, build and relocate contract and script outputs",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Route log records through Rich at the given level."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"fetch-abis version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Sway ABI fetcher - clone, build and relocate contract and script outputs."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)


def _fail(code: str, message: str, log_path: Path | None = None) -> NoReturn:
    console.print(f"[red]Error ({code}): {escape(message)}[/red]")
    if log_path is not None:
        console.print(f"  See log: {log_path}")
    raise typer.Exit(code=1)


def _load_layout_or_exit(
    layout_file: Path | None, settings: Settings
) -> "LayoutSchema":
    from fetch_abis.layout.io import LayoutError, resolve_layout

    try:
        return resolve_layout(layout_file or settings.layout_file)
    except LayoutError as e:
        _fail(e.code, str(e))


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        typer.echo(print_settings_json(settings))
    else:
        layout_display = (
            str(settings.layout_file) if settings.layout_file else "(built-in Mira v1)"
        )
        clone_timeout_display = (
            str(settings.clone_timeout) if settings.clone_timeout else "(none)"
        )
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Paths:[/bold]")
        console.print(f"  Output directory:    {settings.output_dir}")
        console.print(f"  Scratch directory:   {settings.scratch_dir}")
        console.print(f"  Layout file:         {layout_display}")
        console.print()
        console.print("[bold]Tools:[/bold]")
        console.print(f"  git:                 {settings.git_binary}")
        console.print(f"  forc:                {settings.forc_binary}")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Keep scratch:        {settings.keep_scratch}")
        console.print(f"  Log level:           {settings.log_level}")
        console.print()
        console.print("[bold]Timeouts (seconds):[/bold]")
        console.print(f"  Clone timeout:       {clone_timeout_display}")
        console.print(f"  Build timeout:       {settings.build_timeout}")


@app.command()
def layout(
    file: Annotated[
        Path | None,
        typer.Option("--file", "-f", help="Layout file (YAML or JSON)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the effective layout."""
    from fetch_abis.layout.io import layout_to_json_string, layout_to_yaml_string

    effective = _load_layout_or_exit(file, get_settings())
    if json_output:
        typer.echo(layout_to_json_string(effective))
    else:
        console.print(layout_to_yaml_string(effective), markup=False)


@app.command()
def fetch(
    layout_file: Annotated[
        Path | None,
        typer.Option("--layout", "-l", help="Layout file (YAML or JSON)"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Output root directory"),
    ] = None,
    scratch_dir: Annotated[
        Path | None,
        typer.Option("--scratch-dir", help="Scratch directory for checkouts"),
    ] = None,
    keep_scratch: Annotated[
        bool,
        typer.Option("--keep-scratch", help="Keep the scratch directory on success"),
    ] = False,
    no_manifest: Annotated[
        bool,
        typer.Option("--no-manifest", help="Do not write manifest.json"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Clone, build and relocate every artifact of the layout."""
    from fetch_abis.builds.relocate import RelocationError
    from fetch_abis.builds.runner import BuildExecutionError
    from fetch_abis.service import PathConflictError, fetch_abis
    from fetch_abis.sources.git import CloneError

    settings = get_settings()
    overrides: dict[str, object] = {}
    if output_dir is not None:
        overrides["output_dir"] = output_dir
    if scratch_dir is not None:
        overrides["scratch_dir"] = scratch_dir
    if overrides:
        settings = settings.model_copy(update=overrides)

    effective_layout = _load_layout_or_exit(layout_file, settings)

    try:
        result = fetch_abis(
            layout=effective_layout,
            settings=settings,
            keep_scratch=keep_scratch or None,
            write_manifest=not no_manifest,
        )
    except (CloneError, BuildExecutionError) as e:
        _fail(e.code, str(e), e.log_path)
    except (RelocationError, PathConflictError) as e:
        _fail(e.code, str(e))
    except OSError as e:
        _fail("filesystem_error", str(e))

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    console.print(
        f"[green]✓ Relocated {len(result.relocated)} artifact(s) "
        f"into {result.output_dir}[/green]"
    )
    for relocated in result.relocated:
        console.print(f"  {relocated.name}: {relocated.destination}")
    if result.manifest_path:
        console.print(f"  Manifest: {result.manifest_path}")
    if not result.scratch_removed:
        console.print(f"  Scratch kept: {result.scratch_dir}")


@app.command()
def artifacts(
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Output root directory"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List files in the output layout."""
    from dataclasses import asdict

    from fetch_abis.builds.artifacts import discover_artifacts

    root = output_dir or get_settings().output_dir
    found = discover_artifacts(root)

    if not found:
        if json_output:
            typer.echo("[]")
        else:
            console.print(f"[yellow]No artifacts found in {root}[/yellow]")
        return

    if json_output:
        typer.echo(json.dumps([asdict(a) for a in found], indent=2))
        return

    console.print(f"[bold]Found {len(found)} file(s) in {root}:[/bold]")
    for a in found:
        console.print(f"  [green]{a.relative_path}[/green]")
        console.print(f"    Kind: {a.kind}  Size: {a.size_bytes}  SHA-256: {a.sha256[:16]}")


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Check that git and forc are available."""
    from fetch_abis.service import check_tools

    tools = check_tools(get_settings())
    missing = [name for name, path in tools.items() if path is None]

    if json_output:
        typer.echo(json.dumps(tools, indent=2))
    else:
        for name, path in tools.items():
            if path:
                console.print(f"[green]✓ {name}: {path}[/green]")
            else:
                console.print(f"[red]✗ {name}: not found on PATH[/red]")

    if missing:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
