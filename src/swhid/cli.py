"""Command-line interface for swhid."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Iterable

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .config import ConfigError, load_config
from .content import Content
from .core import Swhid
from .directory import DirectoryBuildOptions, DiskDirectoryBuilder
from .errors import SwhidError, SwhidFormatError
from .filesystem import as_bytes_path, read_bytes
from .git import open_repo, release_from_git, release_swhid, revision_swhid, snapshot_swhid, tag_ids
from .identify import PathIdentifier
from .models import PermissionPolicy, PermissionsSourceKind
from .permissions import PermissionManifest
from .qualifier import QualifiedSwhid

app = typer.Typer(help="Compute, parse and verify Software Heritage identifiers (SWHIDs)")
git_app = typer.Typer(help="Identifiers of git commits, tags and snapshots")
app.add_typer(git_app, name="git")

console = Console()
err_console = Console(stderr=True)


def _handle_error(exc: Exception) -> None:
    if isinstance(exc, ConfigError):
        message = str(exc)
        err_console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)
        if "Expected to find" in message:
            err_console.print(
                "[yellow]Point --config at the directory containing swhid.toml, or at the file itself.[/yellow]"
            )
        raise typer.Exit(code=1)
    if isinstance(exc, SwhidFormatError):
        err_console.print(f"[red]Invalid identifier:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1)
    if isinstance(exc, SwhidError):
        err_console.print(f"[red]{escape(str(exc))}[/red]", soft_wrap=True)
        raise typer.Exit(code=1)
    raise exc


def _print_value(value: object) -> None:
    console.print(str(value), markup=False, highlight=False, soft_wrap=True)


def _print_warnings(warnings: Iterable[str]) -> None:
    for warning in warnings:
        err_console.print(f"[yellow]{escape(warning)}[/yellow]", soft_wrap=True)


def _build_options(
    config: Path | None,
    follow_symlinks: bool | None,
    exclude: list[str] | None,
    permissions_source: PermissionsSourceKind | None,
    permissions_policy: PermissionPolicy | None,
    permissions_manifest: Path | None,
) -> DirectoryBuildOptions:
    options = load_config(config).directory

    walk = options.walk_options
    if follow_symlinks is not None:
        walk = walk.model_copy(update={"follow_symlinks": follow_symlinks})
    if exclude:
        walk = walk.model_copy(update={"exclude_suffixes": walk.exclude_suffixes + tuple(exclude)})

    updates: dict[str, object] = {"walk_options": walk}
    if permissions_source is not None:
        updates["permissions_source"] = permissions_source
    if permissions_policy is not None:
        updates["permissions_policy"] = permissions_policy
    if permissions_manifest is not None:
        updates["permissions_manifest_path"] = permissions_manifest.resolve()
    return options.model_copy(update=updates)


_CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to swhid.toml")
_FOLLOW_OPTION = typer.Option(
    None,
    "--follow-symlinks/--no-follow-symlinks",
    help="Hash what symlinks point to instead of their target path",
)
_EXCLUDE_OPTION = typer.Option(None, "--exclude", "-e", help="Skip entries whose name ends with SUFFIX")
_SOURCE_OPTION = typer.Option(None, "--permissions-source", help="Where executable bits are read from")
_POLICY_OPTION = typer.Option(None, "--permissions-policy", help="What to do when an executable bit is unknown")
_MANIFEST_OPTION = typer.Option(
    None,
    "--permissions-manifest",
    help="Sidecar TOML listing executable bits (with --permissions-source manifest)",
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log progress to stderr"),
) -> None:
    """Compute, parse and verify Software Heritage identifiers (SWHIDs)."""

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
            force=True,
        )


@app.command()
def content(
    file: Path | None = typer.Option(None, "--file", "-f", help="File to hash (standard input when omitted)"),
) -> None:
    """Print the content SWHID of a file or of standard input."""

    try:
        data = sys.stdin.buffer.read() if file is None else read_bytes(as_bytes_path(file))
        _print_value(Content(data).swhid())
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@app.command("dir")
def directory(
    path: Path = typer.Argument(..., help="Directory to hash"),
    follow_symlinks: bool | None = _FOLLOW_OPTION,
    exclude: list[str] = _EXCLUDE_OPTION,
    permissions_source: PermissionsSourceKind | None = _SOURCE_OPTION,
    permissions_policy: PermissionPolicy | None = _POLICY_OPTION,
    permissions_manifest: Path | None = _MANIFEST_OPTION,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Print the directory SWHID of a tree on disk."""

    try:
        options = _build_options(
            config, follow_symlinks, exclude, permissions_source, permissions_policy, permissions_manifest
        )
        builder = DiskDirectoryBuilder(path, options)
        _print_value(builder.swhid())
        _print_warnings(builder.pull_warnings())
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@app.command()
def parse(swhid: str = typer.Argument(..., help="Core or qualified SWHID")) -> None:
    """Validate an identifier and print its canonical form."""

    try:
        qualified = QualifiedSwhid.from_string(swhid)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)
        return

    _print_value(qualified)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Field")
    table.add_column("Value", overflow="fold")
    table.add_row("type", qualified.core.object_type.name.lower())
    table.add_row("digest", qualified.core.digest_hex)
    for key in ("origin", "visit", "anchor", "path", "lines", "bytes"):
        value = getattr(qualified, key)
        if value is not None:
            table.add_row(key, escape(str(value)))
    for key, value in qualified.others:
        table.add_row(escape(key), escape(value))
    console.print(table)


@app.command()
def verify(
    path: Path = typer.Argument(..., help="File or directory to check"),
    swhid: str = typer.Argument(..., help="Expected core SWHID"),
    follow_symlinks: bool | None = _FOLLOW_OPTION,
    exclude: list[str] = _EXCLUDE_OPTION,
    permissions_source: PermissionsSourceKind | None = _SOURCE_OPTION,
    permissions_policy: PermissionPolicy | None = _POLICY_OPTION,
    permissions_manifest: Path | None = _MANIFEST_OPTION,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Exit non-zero unless PATH hashes to SWHID."""

    try:
        expected = Swhid.from_string(swhid)
        options = _build_options(
            config, follow_symlinks, exclude, permissions_source, permissions_policy, permissions_manifest
        )
        identifier = PathIdentifier(options)
        result = identifier.verify(path, expected)
        _print_warnings(identifier.pull_warnings())
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)
        return

    if not result.matches:
        err_console.print(f"[red]Mismatch for '{escape(str(path))}'[/red]", soft_wrap=True)
        err_console.print(f"expected: {result.expected}", markup=False, highlight=False, soft_wrap=True)
        err_console.print(f"actual:   {result.actual}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(code=1)

    console.print(f"[green]OK[/green] {escape(str(result.actual))}", soft_wrap=True)


@app.command("permissions-manifest")
def permissions_manifest(
    path: Path = typer.Argument(..., help="Directory whose executable bits are recorded"),
    output: Path = typer.Option(..., "--output", "-o", help="Where to write the TOML manifest"),
) -> None:
    """Record executable bits so another host can hash the same tree."""

    try:
        manifest = PermissionManifest.from_directory(path)
        manifest.save(output)
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)
        return

    console.print(f"[green]Wrote {len(manifest)} entries to '{escape(str(output))}'.[/green]", soft_wrap=True)


@git_app.command("revision")
def git_revision(
    repo: Path = typer.Argument(..., help="Repository path"),
    commit: str | None = typer.Argument(None, help="Commit id or reference (defaults to HEAD)"),
) -> None:
    """Print the revision SWHID of a commit."""

    try:
        _print_value(revision_swhid(repo, commit))
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@git_app.command("release")
def git_release(
    repo: Path = typer.Argument(..., help="Repository path"),
    tag: str = typer.Argument(..., help="Annotated tag name or id"),
) -> None:
    """Print the release SWHID of an annotated tag."""

    try:
        _print_value(release_swhid(repo, tag))
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@git_app.command("snapshot")
def git_snapshot(repo: Path = typer.Argument(..., help="Repository path")) -> None:
    """Print the snapshot SWHID of all references of a repository."""

    try:
        _print_value(snapshot_swhid(repo))
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


@git_app.command("tags")
def git_tags(repo: Path = typer.Argument(..., help="Repository path")) -> None:
    """List annotated tags with their release SWHIDs."""

    try:
        with open_repo(repo) as handle:
            rows = [
                (name.decode("utf-8", "replace"), release_from_git(handle, object_id).swhid())
                for name, object_id in tag_ids(handle).items()
            ]
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)
        return

    for name, swhid in rows:
        _print_value(f"{swhid}  {name}")


def run() -> None:
    """Entry point used for console_script bindings."""

    app()
