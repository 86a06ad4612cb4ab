"""Command line interface for the Witness archive catalog."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any, Optional, Sequence, Set

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from witness.api.payloads import (
    breadcrumbs_payload,
    document_payload,
    documents_payload,
    neighbor_payload,
    stats_payload,
    tree_payload,
)
from witness.archive.fetch import DocumentTextFetcher, DocumentViewer, FetchStatus
from witness.browse.state import ExpandedFolders, JsonFileKeyValueStore
from witness.catalog.catalog import ArchiveCatalog
from witness.catalog.filters import CONFIDENCE_LEVELS, documents_by_year
from witness.catalog.index import find_folder
from witness.catalog.models import FolderTreeNode, SearchCriteria
from witness.catalog.normalize import flatten_manifest
from witness.catalog.related import next_document, previous_document
from witness.config import (
    ConfigError,
    ConfigManager,
    WitnessConfig,
    assign_nested,
    resolve_with_precedence,
)
from witness.manifest.errors import ManifestError
from witness.manifest.sources import StaticManifestSource, build_source
from witness.manifest.store import DocumentStore
from witness.render.formatting import format_document_date
from witness.render.text import RenderOptions

console = Console()
LOGGER = logging.getLogger(__name__)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """
    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, target: str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {target}: {parts}.[/green]"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_config(ctx: click.Context, *, json_output: bool = False) -> WitnessConfig:
    """Load configuration with the group-level overrides applied."""
    obj = ctx.find_root().obj or {}
    manager = ConfigManager(obj.get("config_path"))
    try:
        config = manager.load(cli_overrides=obj.get("overrides") or None)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    _configure_logging(config.logging.level)
    return config


def _load_catalog(
    ctx: click.Context, *, json_output: bool
) -> tuple[WitnessConfig, ArchiveCatalog]:
    """Load configuration and the catalog, reporting failures uniformly."""
    config = _load_config(ctx, json_output=json_output)
    try:
        catalog = ArchiveCatalog.load(
            build_source(config), top_tags_limit=config.browse.top_tags_limit
        )
    except ManifestError as exc:
        _handle_cli_error(
            f"Unable to load the archive catalog: {exc}",
            code="manifest_error",
            json_output=json_output,
            original=exc,
        )
    return config, catalog


def _output_modes(
    ctx: click.Context,
    config: WitnessConfig,
    *,
    json_output: bool,
    quiet: bool,
    summary_mode: bool,
) -> tuple[bool, bool]:
    """Resolve quiet/summary flags against configuration defaults."""
    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE
    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False
    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _require_document(catalog: ArchiveCatalog, path: str, *, json_output: bool):
    document = catalog.get(path)
    if document is None:
        _handle_cli_error(
            f"No document at {path}.", code="not_found", json_output=json_output
        )
    return document


def _add_tree_nodes(
    branch: Tree, nodes: Sequence[FolderTreeNode], expanded: Optional[Set[str]] = None
) -> None:
    """Add ``nodes`` to ``branch``, descending only into expanded folders.

    ``expanded=None`` descends into every folder.
    """
    for node in nodes:
        is_open = expanded is None or node.path in expanded
        marker = "" if not node.children else (" -" if is_open else " +")
        label = (
            f"[bold]{escape(node.name)}[/bold]{marker} "
            f"({node.document_count}/{node.total_count()})"
        )
        child = branch.add(label)
        if is_open:
            _add_tree_nodes(child, node.children, expanded)


def _documents_table(title: str, documents) -> Table:
    table = Table(title=title)
    table.add_column("Path", overflow="fold")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Tags", overflow="fold")
    for document in documents:
        table.add_row(
            escape(document.path),
            format_document_date(document.date),
            escape(document.type),
            escape(", ".join(document.tags)),
        )
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="witness-archive")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file to use instead of ~/.witness/config.yaml.",
)
@click.option(
    "--source",
    "provider",
    type=click.Choice(["static", "store"]),
    help="Document source to load the catalog from.",
)
@click.option("--manifest", type=str, help="Manifest URL or path for the static source.")
@click.option("--store", "store_path", type=str, help="Document store path for the store source.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Path | None,
    provider: str | None,
    manifest: str | None,
    store_path: str | None,
) -> None:
    """Witness browses, searches, and renders documents recovered from old disk images."""
    overrides: dict[str, Any] = {}
    if provider:
        overrides["source.provider"] = provider
    if manifest:
        overrides["source.manifest"] = manifest
    if store_path:
        overrides["source.store_path"] = store_path
    ctx.obj = {"config_path": config_path, "overrides": overrides}


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit statistics as JSON.")
@click.pass_context
def stats(ctx: click.Context, json_output: bool) -> None:
    """Show collection statistics."""
    _, catalog = _load_catalog(ctx, json_output=json_output)
    summary = catalog.stats
    if json_output:
        console.print_json(data=stats_payload(summary))
        return

    coverage = summary.date_range
    table = Table(title="Archive statistics", show_header=False)
    table.add_row("Documents", str(summary.total_documents))
    table.add_row("Folders", str(summary.total_folders))
    table.add_row("Dated documents", str(coverage.documents_with_dates))
    table.add_row("Date coverage", f"{coverage.coverage_percentage:.1f}%")
    if coverage.documents_with_dates:
        table.add_row("Years", f"{coverage.earliest}-{coverage.latest}")
    console.print(table)


@cli.command()
@click.option("--limit", type=int, help="Number of tags to list (defaults to configuration).")
@click.option("--json", "json_output", is_flag=True, help="Emit the tag table as JSON.")
@click.pass_context
def tags(ctx: click.Context, limit: int | None, json_output: bool) -> None:
    """List tags merged case-insensitively, most frequent first."""
    _, catalog = _load_catalog(ctx, json_output=json_output)
    entries = catalog.top_tags if limit is None else catalog.all_tags[: max(limit, 0)]
    if json_output:
        console.print_json(data=[entry.model_dump() for entry in entries])
        return

    table = Table(title="Tags")
    table.add_column("Tag")
    table.add_column("Documents", justify="right")
    for entry in entries:
        table.add_row(escape(entry.tag), str(entry.count))
    console.print(table)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit the type table as JSON.")
@click.pass_context
def types(ctx: click.Context, json_output: bool) -> None:
    """List document types, most frequent first."""
    _, catalog = _load_catalog(ctx, json_output=json_output)
    entries = catalog.document_types
    if json_output:
        console.print_json(data=[entry.model_dump() for entry in entries])
        return

    table = Table(title="Document types")
    table.add_column("Type")
    table.add_column("Documents", justify="right")
    for entry in entries:
        table.add_row(escape(entry.type), str(entry.count))
    console.print(table)


@cli.command()
@click.option("--expand", "expand_paths", multiple=True, help="Expand a folder; repeatable.")
@click.option("--collapse", "collapse_paths", multiple=True, help="Collapse a folder; repeatable.")
@click.option("--collapse-all", is_flag=True, help="Collapse every folder before expanding.")
@click.option("--all", "show_all", is_flag=True, help="Show every folder regardless of state.")
@click.option("--json", "json_output", is_flag=True, help="Emit the folder tree as JSON.")
@click.pass_context
def tree(
    ctx: click.Context,
    expand_paths: tuple[str, ...],
    collapse_paths: tuple[str, ...],
    collapse_all: bool,
    show_all: bool,
    json_output: bool,
) -> None:
    """Show the folder tree with own/total document counts.

    Expanded folders are remembered between runs in ``browse.state_path``.
    """
    config, catalog = _load_catalog(ctx, json_output=json_output)
    for path in (*expand_paths, *collapse_paths):
        if find_folder(catalog.folder_tree, path) is None:
            _handle_cli_error(f"No folder at {path}.", code="not_found", json_output=json_output)

    folders = ExpandedFolders(JsonFileKeyValueStore(config.browse.state_path))
    if collapse_all:
        folders.collapse_all()
    if collapse_paths:
        folders.collapse(collapse_paths)
    if expand_paths:
        folders.expand(expand_paths)
    expanded = folders.paths()

    if json_output:
        console.print_json(
            data=[tree_payload(node, expanded=expanded) for node in catalog.folder_tree]
        )
        return

    root = Tree("[bold]Archive[/bold]")
    _add_tree_nodes(root, catalog.folder_tree, None if show_all else expanded)
    console.print(root)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit the timeline as JSON.")
@click.pass_context
def timeline(ctx: click.Context, json_output: bool) -> None:
    """Group dated documents by year."""
    _, catalog = _load_catalog(ctx, json_output=json_output)
    grouped = documents_by_year(catalog.documents)
    if json_output:
        console.print_json(
            data=[
                {"year": year, "documents": documents_payload(items)}
                for year, items in grouped.items()
            ]
        )
        return

    table = Table(title="Timeline")
    table.add_column("Year")
    table.add_column("Documents", justify="right")
    table.add_column("Types", overflow="fold")
    for year, items in grouped.items():
        kinds = sorted({item.type for item in items})
        table.add_row(str(year), str(len(items)), escape(", ".join(kinds)))
    console.print(table)


@cli.command()
@click.option("-q", "--query", type=str, help="Case-insensitive text in summary, name, or path.")
@click.option("--tag", "tag_filters", multiple=True, help="Tag filter; repeat for several.")
@click.option("--type", "type_filters", multiple=True, help="Document type; repeat for several.")
@click.option(
    "--match",
    "tag_match",
    type=click.Choice(["any", "all"]),
    default="any",
    show_default=True,
    help="Require any or all of the --tag values.",
)
@click.option("--start", type=str, help="Earliest raw date (lexical, e.g. 19850101).")
@click.option("--end", type=str, help="Latest raw date (lexical, e.g. 19891231).")
@click.option(
    "--min-confidence",
    type=click.Choice(list(CONFIDENCE_LEVELS)),
    help="Minimum date confidence.",
)
@click.option("--folder", type=str, help="Folder path prefix.")
@click.option("--limit", type=int, help="Maximum number of results to display.")
@click.option("--json", "json_output", is_flag=True, help="Emit results as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def search(
    ctx: click.Context,
    query: str | None,
    tag_filters: tuple[str, ...],
    type_filters: tuple[str, ...],
    tag_match: str,
    start: str | None,
    end: str | None,
    min_confidence: str | None,
    folder: str | None,
    limit: int | None,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Search the catalog; every supplied filter must match."""
    config, catalog = _load_catalog(ctx, json_output=json_output)
    quiet_enabled, summary_only = _output_modes(
        ctx, config, json_output=json_output, quiet=quiet, summary_mode=summary_mode
    )

    criteria = SearchCriteria(
        query=query or None,
        tags=tag_filters,
        types=type_filters,
        date_start=start,
        date_end=end,
        min_confidence=min_confidence,
        folder_path=folder,
        tag_match=tag_match,
    )
    matches = catalog.search(criteria)
    shown = matches if limit is None else matches[: max(limit, 0)]
    counts = {
        "total": len(catalog.documents),
        "matches": len(matches),
        "truncated": len(matches) - len(shown),
    }

    if json_output:
        console.print_json(data={"counts": counts, "results": documents_payload(shown)})
        return

    if shown:
        _emit_message(
            _documents_table("Search results", shown),
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    _emit_message(
        _format_summary_line("Search", "archive", counts),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("path")
@click.option("--raw", is_flag=True, help="Print the text without rendering.")
@click.option("--wrap/--no-wrap", default=None, help="Wrap long lines (defaults to configuration).")
@click.option("--json", "json_output", is_flag=True, help="Emit the document and text as JSON.")
@click.pass_context
def show(
    ctx: click.Context, path: str, raw: bool, wrap: bool | None, json_output: bool
) -> None:
    """Render the text of the document at PATH."""
    config, catalog = _load_catalog(ctx, json_output=json_output)
    document = _require_document(catalog, path, json_output=json_output)

    options = RenderOptions.from_settings(config.render)
    if wrap is not None:
        options = options.model_copy(update={"wrap_lines": wrap})
    viewer = DocumentViewer(DocumentTextFetcher.from_config(config), options)
    view = viewer.open(document.text_path)
    if view.status is FetchStatus.FAILED:
        _handle_cli_error(
            view.error or f"Could not load {path}.", code="fetch_error", json_output=json_output
        )

    text = view.content if raw else viewer.rendered()
    if json_output:
        console.print_json(
            data={
                "document": document_payload(document, full=True),
                "breadcrumbs": breadcrumbs_payload(document.folder_path),
                "previous": neighbor_payload(previous_document(document, catalog.documents)),
                "next": neighbor_payload(next_document(document, catalog.documents)),
                "text": text,
            }
        )
        return

    console.rule(f"[bold]{document.filename}[/bold]")
    console.print(
        f"{document.folder_path} | {format_document_date(document.date)} | {document.type}",
        markup=False,
    )
    console.print(text or "", markup=False, highlight=False)


@cli.command()
@click.argument("path")
@click.option("--limit", type=int, help="Number of related documents (defaults to configuration).")
@click.option("--json", "json_output", is_flag=True, help="Emit related documents as JSON.")
@click.pass_context
def related(ctx: click.Context, path: str, limit: int | None, json_output: bool) -> None:
    """List documents sharing tags with the document at PATH."""
    config, catalog = _load_catalog(ctx, json_output=json_output)
    document = _require_document(catalog, path, json_output=json_output)
    matches = catalog.related(document, config.browse.related_limit if limit is None else limit)

    if json_output:
        console.print_json(data={"path": document.path, "related": documents_payload(matches)})
        return
    if not matches:
        console.print(f"[yellow]No documents share tags with {document.path}.[/yellow]")
        return
    console.print(_documents_table(f"Related to {document.path}", matches))


@cli.command()
@click.argument("manifest", type=str)
@click.option("--store", "store_path", type=str, help="Target store (defaults to configuration).")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def publish(
    ctx: click.Context,
    manifest: str,
    store_path: str | None,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Load MANIFEST and replace the document store contents with it."""
    config = _load_config(ctx)
    quiet_enabled, summary_only = _output_modes(
        ctx, config, json_output=False, quiet=quiet, summary_mode=summary_mode
    )
    target = store_path or config.source.store_path

    try:
        source = StaticManifestSource(
            manifest,
            root_prefix=config.archive.root_prefix,
            timeout=config.source.timeout_seconds,
        )
        documents = flatten_manifest(source.fetch_manifest(), root_prefix=config.archive.root_prefix)
        written = DocumentStore(target).publish(documents)
    except ManifestError as exc:
        _handle_cli_error(str(exc), code="manifest_error", json_output=False, original=exc)

    folders = len({document.folder_path for document in documents})
    _emit_message(
        f"[cyan]Wrote {written} documents from {folders} folders.[/cyan]",
        mode="detail",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )
    _emit_message(
        _format_summary_line("Publish", target, {"documents": written, "folders": folders}),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.command()
@click.option("--host", type=str, help="Interface to bind (defaults to configuration).")
@click.option("--port", type=int, help="Port to bind (defaults to configuration).")
@click.option("--debug", is_flag=True, help="Enable the Flask debugger.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, debug: bool) -> None:
    """Serve the read-only JSON metadata API."""
    from witness.api import create_app

    config = _load_config(ctx)
    app = create_app(config)
    app.run(
        host=host or config.server.host,
        port=port or config.server.port,
        debug=debug or config.server.debug,
    )


@cli.group()
def config() -> None:
    """Manage Witness configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.pass_context
def config_view(ctx: click.Context, no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager((ctx.find_root().obj or {}).get("config_path"))
    try:
        manager.ensure_exists()
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = ConfigManager((ctx.find_root().obj or {}).get("config_path"))
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'source.provider'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=WitnessConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if not line.lstrip("+-").startswith("# Last updated:")
    ]
    if not any(line.startswith(("+", "-")) and not line.startswith(("+++", "---")) for line in diff):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
@click.pass_context
def config_edit(ctx: click.Context) -> None:
    """Open the configuration file in an interactive editor session."""
    manager = ConfigManager((ctx.find_root().obj or {}).get("config_path"))
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=WitnessConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
