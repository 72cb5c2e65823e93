"""CLI entrypoints for linkdeck."""

import logging
import os
import webbrowser
from enum import IntEnum
from pathlib import Path
from typing import Annotated, Iterable, Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape

from .config import DEFAULT_CONFIG_FILENAME, Config, load_config
from .manifest import ManifestFormatError, ManifestNotFoundError, load_manifest, write_manifest
from .preview_server import make_request_handler, serve
from .render import CatalogRenderer
from .urls import InvalidChannelUrlError, classify_channel_url
from .validation import IssueSeverity, ManifestIssue, lint_manifest
from .youtube import ChannelInfo, ChannelResolver, PatchOptions, PatchOutcome, PatchStatus, apply_channel

console = Console()
app = typer.Typer(help="linkdeck catalog and channel tooling.")

USAGE = (
    'Usage: linkdeck resolve-channel --channel="https://www.youtube.com/@progamer-sub" '
    "--file=./categories.json [--apiKey=YOUR_KEY]"
)


class ExitCode(IntEnum):
    """Process exit codes for ``resolve-channel``."""

    OK = 0
    USAGE = 1
    MANIFEST_NOT_FOUND = 2
    INVALID_URL = 4
    INVALID_MANIFEST = 6
    NOTHING_UPDATED = 7


ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file."),
]
ManifestOption = Annotated[
    Optional[str],
    typer.Option("--manifest", "-m", help="Manifest file; defaults to manifest_path from the config."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log progress details to stderr."),
    ] = False,
) -> None:
    """linkdeck catalog and channel tooling."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("resolve-channel")
def resolve_channel(
    channel: Annotated[
        Optional[str],
        typer.Option("--channel", help="Channel URL, e.g. https://www.youtube.com/@handle."),
    ] = None,
    file: Annotated[
        Optional[str],
        typer.Option("--file", help="Path to the categories.json manifest to patch."),
    ] = None,
    api_key: Annotated[
        Optional[str],
        typer.Option("--apiKey", "--apikey", "--key", help="YouTube Data API key."),
    ] = None,
    config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME,
) -> None:
    """Resolve a channel's id and uploads playlist, then patch the manifest."""
    if not channel or not file:
        console.print(USAGE, highlight=False)
        console.print(
            "You can also set the environment variable YOUTUBE_API_KEY instead of passing --apiKey.",
            highlight=False,
        )
        raise typer.Exit(code=ExitCode.USAGE)

    config = _load(config_path)
    manifest_path = Path(file).resolve()
    if not manifest_path.exists():
        console.print(f"[bold red]Manifest not found[/]: {manifest_path}")
        raise typer.Exit(code=ExitCode.MANIFEST_NOT_FOUND)

    try:
        classify_channel_url(channel)
    except InvalidChannelUrlError as exc:
        console.print(f"[bold red]Invalid channel URL[/]: {channel}")
        raise typer.Exit(code=ExitCode.INVALID_URL) from exc

    key = api_key or _api_key_from_env(config.youtube.api_key_env)
    resolver = ChannelResolver(
        api_key=key,
        api_base=config.youtube.api_base,
        timeout=config.youtube.request_timeout,
        user_agent=config.youtube.user_agent,
    )
    console.print(f"[bold blue]Resolving[/]: {channel}" + (" (YouTube Data API)" if key else " (page scrape)"))
    info = resolver.resolve(channel)
    _print_resolution(info, resolver.errors)

    try:
        manifest = load_manifest(manifest_path)
    except ManifestNotFoundError as exc:
        console.print(f"[bold red]Manifest not found[/]: {manifest_path}")
        raise typer.Exit(code=ExitCode.MANIFEST_NOT_FOUND) from exc
    except ManifestFormatError as exc:
        console.print(f"[bold red]Invalid manifest[/]: {escape(str(exc))}")
        raise typer.Exit(code=ExitCode.INVALID_MANIFEST) from exc

    options = PatchOptions(
        default_site=config.resolver.default_site,
        default_title=config.resolver.default_title,
        default_category_id=config.resolver.default_category_id,
        default_category_title=config.resolver.default_category_title,
        title_marker=config.resolver.title_marker,
    )
    outcome = apply_channel(manifest, channel, info, options)
    _print_outcome(outcome)

    if not outcome.status.changed:
        console.print("[bold yellow]Nothing updated[/].")
        raise typer.Exit(code=ExitCode.NOTHING_UPDATED)

    write_manifest(manifest, manifest_path)
    console.print(f"[bold green]Updated[/]: {_display_path(manifest_path)}. Reload the site to see the change.")


@app.command()
def check(
    manifest_path: ManifestOption = None,
    config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors."),
    ] = False,
) -> None:
    """Run lightweight checks for common manifest issues."""
    config = _load(config_path)
    target = _manifest_path(manifest_path, config)
    try:
        manifest = load_manifest(target)
    except ManifestNotFoundError as exc:
        console.print(f"[bold red]Manifest not found[/]: {_display_path(target)}")
        raise typer.Exit(code=1) from exc
    except ManifestFormatError as exc:
        console.print(f"[bold red]Invalid manifest[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    report = lint_manifest(manifest)
    if not report.issues:
        console.print(
            f"[bold green]Lint clean[/]: {report.category_count} category(ies), {report.item_count} item(s)."
        )
        raise typer.Exit()

    for issue in sorted(report.issues, key=_lint_sort_key):
        style = "red" if issue.severity is IssueSeverity.ERROR else "yellow"
        console.print(f"[bold {style}]{issue.severity.name}[/] {issue.pointer} - {issue.message}")

    console.print(
        f"[bold blue]Summary[/]: {report.error_count} error(s), {report.warning_count} warning(s) "
        f"across {report.item_count} item(s)."
    )
    exit_code = 0
    if report.error_count > 0 or (strict and report.warning_count > 0):
        exit_code = 1
    raise typer.Exit(code=exit_code)


@app.command()
def render(
    manifest_path: ManifestOption = None,
    config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME,
    site: Annotated[
        Optional[str],
        typer.Option("--site", help="Render as served from /sites/<name>/ (filters site-tagged items)."),
    ] = None,
    category: Annotated[
        Optional[str],
        typer.Option("--category", help="Category id to show; defaults to the first category."),
    ] = None,
    output: Annotated[
        Optional[str],
        typer.Option("--output", "-o", help="Write the page to this file instead of stdout."),
    ] = None,
) -> None:
    """Render one catalog page to HTML."""
    config = _load(config_path)
    target = _manifest_path(manifest_path, config)
    renderer = CatalogRenderer(page_title=config.project_name)
    html = renderer.render_manifest_file(target, current_site=site, selector=category)
    if output is None:
        typer.echo(html)
        return
    destination = Path(output)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(html, encoding="utf-8")
    console.print(f"[bold green]Rendered[/]: {_display_path(destination)}")


@app.command("serve")
def serve_command(
    manifest_path: ManifestOption = None,
    config_path: ConfigPathOption = DEFAULT_CONFIG_FILENAME,
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="Host interface to bind the preview server."),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Port for the preview server."),
    ] = None,
    open_browser: Annotated[
        bool,
        typer.Option(
            "--open-browser/--no-open-browser",
            help="Automatically open the catalog in a browser after starting.",
        ),
    ] = False,
) -> None:
    """Serve the catalog, re-reading the manifest on every request."""
    config = _load(config_path)
    bind_host = host or config.preview.host
    bind_port = config.preview.port if port is None else port
    if bind_port < 0 or bind_port > 65535:
        raise typer.BadParameter("Port must be between 0 and 65535.")

    target = _manifest_path(manifest_path, config)
    if not target.exists():
        console.print(f"[bold yellow]Warning[/]: {_display_path(target)} does not exist yet; pages will show an error.")

    handler = make_request_handler(target, CatalogRenderer(page_title=config.project_name))
    try:
        with serve(bind_host, bind_port, handler) as server:
            bound_port = int(server.server_address[1])
            url_host = "127.0.0.1" if bind_host in {"0.0.0.0", ""} else bind_host
            site_url = f"http://{url_host}:{bound_port}/"
            console.print(
                f"[bold green]Preview server[/]: serving {_display_path(target)} at {site_url} "
                "(press Ctrl+C to stop)"
            )
            if open_browser:
                webbrowser.open(site_url)
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                console.print("\n[bold yellow]Stopping preview server...[/]")
    except OSError as exc:
        console.print(f"[bold red]Failed to start preview server[/]: {exc}")
        raise typer.Exit(code=1) from exc


def _load(path: str) -> Config:
    if path == DEFAULT_CONFIG_FILENAME and not Path(path).exists():
        return Config()
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        console.print(f"[bold red]Config file not found[/]: {path}")
        raise typer.Exit(code=ExitCode.USAGE) from exc
    except (ValueError, yaml.YAMLError) as exc:
        console.print(f"[bold red]Invalid config[/]: {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=ExitCode.USAGE) from exc


def _manifest_path(explicit: str | None, config: Config) -> Path:
    if explicit:
        return Path(explicit).resolve()
    return config.manifest_path.resolve()


def _api_key_from_env(names: Iterable[str]) -> str | None:
    for name in names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


def _print_resolution(info: ChannelInfo, errors: list[str]) -> None:
    for error in errors:
        console.print(f"[bold yellow]Lookup problem[/]: {escape(error)}")
    if not info.resolved:
        console.print("[bold yellow]Unresolved[/]: continuing with the channel URL only.")
        return
    console.print(
        "[bold green]Resolved[/]: "
        f"channelId={info.channel_id or '-'} "
        f"uploads={info.uploads_playlist or '-'} "
        f"title={info.title or '-'} "
        f"(via {info.source})"
    )


def _print_outcome(outcome: PatchOutcome) -> None:
    if outcome.status is PatchStatus.APPENDED:
        console.print(
            "[bold green]Appended[/]: no matching channel item; added a new one to "
            f"category '{outcome.category_id}'."
        )
    elif outcome.status is PatchStatus.UPDATED:
        console.print(
            f"[bold green]Matched[/]: channel item in '{outcome.category_id}' (by {outcome.matched_by}); updated."
        )
    else:
        console.print(
            f"[bold blue]Matched[/]: channel item in '{outcome.category_id}' (by {outcome.matched_by}); "
            "values already current."
        )


def _lint_sort_key(issue: ManifestIssue) -> tuple[int, str]:
    severity_order = 0 if issue.severity is IssueSeverity.ERROR else 1
    return (severity_order, issue.pointer)


def _display_path(path: Path) -> str:
    try:
        return path.relative_to(Path.cwd()).as_posix()
    except ValueError:
        return path.as_posix()


if __name__ == "__main__":
    app()
