"""Command line interface for aliaszip."""

from __future__ import annotations

import difflib
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, NoReturn

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from aliaszip.config import AliasZipConfig, ConfigManager
from aliaszip.errors import AliasZipError, UsageError
from aliaszip.logging_setup import configure_logging
from aliaszip.pipeline import PackagingPipeline, build_tree_resolver, default_archive_path
from aliaszip.resolution import ResolutionReport

console = Console()


def _fail(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: dict[str, Any] | None = None,
    original: Exception | None = None,
) -> NoReturn:
    """Report a failed command and exit with status 1.

    In JSON mode the error is printed as `{"error": {...}}` so scripted callers
    always receive a parseable document.
    """

    if json_output:
        error: dict[str, Any] = {"code": code, "message": message}
        if details:
            error["details"] = details
        console.print_json(data={"error": error})
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original
    raise click.ClickException(message) from original


@contextmanager
def _reported_errors(action: str, *, json_output: bool = False) -> Iterator[None]:
    """Map failures raised inside a command onto CLI errors."""
    try:
        yield
    except AliasZipError as exc:
        _fail(
            str(exc),
            code=exc.code,
            json_output=json_output,
            details={"path": str(exc.path)} if exc.path is not None else None,
            original=exc,
        )
    except click.ClickException as exc:
        _fail(exc.format_message(), code="cli_error", json_output=json_output, original=exc)
    except Exception as exc:
        _fail(
            f"Unexpected error while {action}: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )


def _given(ctx: click.Context, name: str) -> bool:
    return ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE


@dataclass(frozen=True)
class Output:
    """Which kinds of CLI messages a command prints.

    Attributes:
        quiet: Print nothing but errors.
        summary_only: Print summary lines and warnings only.
        json_output: Print a single JSON document and nothing else.
    """

    quiet: bool = False
    summary_only: bool = False
    json_output: bool = False

    @classmethod
    def from_flags(
        cls,
        ctx: click.Context,
        config: AliasZipConfig,
        *,
        json_output: bool,
        quiet: bool,
        summary_mode: bool,
    ) -> "Output":
        """Combine command flags with the `cli.*_default` settings.

        Raises:
            UsageError: If the requested modes conflict.
        """
        if json_output:
            if (_given(ctx, "quiet") and quiet) or (_given(ctx, "summary_mode") and summary_mode):
                raise UsageError("--json cannot be combined with --quiet or --summary.")
            return cls(json_output=True)

        quiet_enabled = quiet if _given(ctx, "quiet") else config.cli.quiet_default
        summary_only = summary_mode if _given(ctx, "summary_mode") else config.cli.summary_default
        if quiet_enabled and summary_only:
            raise UsageError(
                "Quiet and summary modes cannot both be enabled; check --quiet, --summary, "
                "cli.quiet_default and cli.summary_default."
            )
        return cls(quiet=quiet_enabled, summary_only=summary_only)

    @property
    def details_visible(self) -> bool:
        return not (self.quiet or self.summary_only or self.json_output)

    def detail(self, message: Any) -> None:
        if self.details_visible:
            console.print(message)

    def summary(self, message: Any) -> None:
        if not (self.quiet or self.json_output):
            console.print(message)

    def report(self, report: ResolutionReport) -> None:
        """Print the alias table and any skipped entries."""
        if report.shortcuts and self.details_visible:
            table = Table(title=f"Resolved aliases in {report.source_root}")
            table.add_column("Entry", overflow="fold")
            table.add_column("Kind")
            table.add_column("Original", overflow="fold")
            for entry in report.shortcuts:
                kind = "folder" if entry.kind == "directory_shortcut" else "file"
                table.add_row(entry.path, kind, str(entry.source))
            console.print(table)

        if report.skipped:
            self.summary(f"[yellow]{len(report.skipped)} entries were skipped:[/yellow]")
            for skipped in report.skipped:
                self.summary(f"  - {skipped.path}: {skipped.reason}")


def _summary_line(command: str, root: Path, metrics: dict[str, int]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _load_config(on_unresolved: str | None, reproducible: bool = False) -> AliasZipConfig:
    overrides: dict[str, Any] = {}
    if on_unresolved is not None:
        overrides["resolution.on_unresolved"] = on_unresolved
    if reproducible:
        overrides["archive.reproducible"] = True
    return ConfigManager().load(cli_overrides=overrides)


_ON_UNRESOLVED = click.option(
    "--on-unresolved",
    type=click.Choice(["fail", "skip"]),
    help="What to do with aliases that cannot be resolved (default: resolution.on_unresolved).",
)
_VERBOSE = click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv).")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="aliaszip")
def cli() -> None:
    """aliaszip resolves Finder aliases in a folder and packages the result as a ZIP archive."""


@cli.command("zip")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Archive file or directory (defaults to <name>.zip in the current directory).",
)
@_ON_UNRESOLVED
@click.option("--keep-workspace", is_flag=True, help="Leave the resolved workspace on disk.")
@click.option("--reproducible", is_flag=True, help="Use fixed timestamps for archive members.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the archive.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@_VERBOSE
@click.pass_context
def zip_command(
    ctx: click.Context,
    path: Path,
    output: Path | None,
    on_unresolved: str | None,
    keep_workspace: bool,
    reproducible: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: int,
) -> None:
    """Resolve aliases under PATH and write PATH's contents to a ZIP archive.

    The archive is named after PATH's folder name, so `aliaszip zip ..` run
    from `MyFolder/sub` writes `MyFolder.zip`.
    """

    with _reported_errors("creating the archive", json_output=json_output):
        config = _load_config(on_unresolved, reproducible)
        out = Output.from_flags(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        configure_logging(config.logging, verbosity=verbose)

        source = path.expanduser().resolve()
        archive_path = default_archive_path(source, output, cwd=Path.cwd())
        out.detail(f"[cyan]Starting recursive resolution for {source.name}[/cyan]")

        result = PackagingPipeline.from_config(config).run(
            source, archive_path, keep_workspace=keep_workspace
        )
        if out.json_output:
            console.print_json(data=result.json_payload)
            return

        out.report(result.resolution)
        if result.workspace_kept:
            out.summary(f"[cyan]Resolved workspace kept at {result.workspace}[/cyan]")
        counts = result.json_payload["counts"]
        out.summary(
            _summary_line(
                "Archive",
                result.archive_path,
                {
                    "files": counts["archived_files"],
                    "directories": counts["archived_directories"],
                    "aliases": counts["file_shortcuts"] + counts["directory_shortcuts"],
                    "skipped": counts["skipped"],
                    "excluded": counts["excluded"],
                },
            )
        )


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("destination", type=click.Path(file_okay=False, path_type=Path))
@_ON_UNRESOLVED
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing resolved entries.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@_VERBOSE
@click.pass_context
def resolve(
    ctx: click.Context,
    path: Path,
    destination: Path,
    on_unresolved: str | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: int,
) -> None:
    """Copy PATH into DESTINATION with every alias replaced by its original.

    DESTINATION must be missing or empty.
    """

    with _reported_errors("resolving the folder", json_output=json_output):
        config = _load_config(on_unresolved)
        out = Output.from_flags(
            ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
        )
        configure_logging(config.logging, verbosity=verbose)

        source = path.expanduser().resolve()
        target = destination.expanduser().resolve()
        if target.exists() and any(target.iterdir()):
            raise UsageError(f"Destination must be empty: {target}", path=target)

        report = build_tree_resolver(config).resolve(source, target)
        if out.json_output:
            console.print_json(
                data={
                    "context": {
                        "source": report.source_root.as_posix(),
                        "destination": report.destination_root.as_posix(),
                    },
                    "counts": report.counts(),
                    "entries": [entry.model_dump(mode="json") for entry in report.entries],
                    "skipped": [entry.model_dump(mode="json") for entry in report.skipped],
                }
            )
            return

        out.report(report)
        out.summary(_summary_line("Resolve", report.destination_root, report.counts()))


@cli.group()
def config() -> None:
    """Manage the aliaszip settings file (~/.aliaszip/config.yaml)."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore ALIASZIP__* environment overrides.")
def config_view(no_env: bool) -> None:
    """Show the effective settings after file and environment overrides."""
    with _reported_errors("reading the configuration"):
        loaded = ConfigManager().load(include_env=not no_env)
        yaml_text = yaml.safe_dump(loaded.model_dump(mode="json"), sort_keys=False)
        console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML value to store, e.g. skip, true, or 5.")
def config_set(key: str, value: str) -> None:
    """Store VALUE for the setting KEY, e.g. `resolution.on_unresolved`."""
    manager = ConfigManager()
    with _reported_errors("updating the configuration"):
        manager.ensure_exists()
        before = manager.read_text().splitlines()
        if not manager.set_value(key, value):
            console.print(f"[yellow]No changes applied; {key} is already {value}.[/yellow]")
            return

        diff = difflib.unified_diff(
            before,
            manager.read_text().splitlines(),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
        console.print(f"[green]Updated {key.strip()}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the settings file in $EDITOR; invalid edits are rejected."""
    manager = ConfigManager()
    with _reported_errors("editing the configuration"):
        manager.ensure_exists()
        original = manager.read_text()
        edited = click.edit(original, extension=".yaml")
        if edited is None or edited == original:
            console.print("[yellow]No changes applied.[/yellow]")
            return

        manager.replace_text(edited)
        console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
