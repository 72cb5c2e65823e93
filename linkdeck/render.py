"""Render catalog views to HTML with Jinja2."""

from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from .catalog import CatalogView, build_catalog_view, error_view
from .manifest import ManifestError, load_manifest

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
CATALOG_TEMPLATE = "catalog.html"
DEFAULT_PAGE_TITLE = "Catalog"


class RenderError(RuntimeError):
    """Raised when the catalog template cannot be loaded."""


class CatalogRenderer:
    """Turn :class:`CatalogView` objects into standalone HTML documents."""

    def __init__(self, templates_dir: Path | None = None, *, page_title: str = DEFAULT_PAGE_TITLE) -> None:
        self._templates_dir = templates_dir or TEMPLATES_DIR
        self.page_title = page_title
        self.environment = Environment(
            loader=FileSystemLoader(str(self._templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, view: CatalogView, *, reload_href: str = "") -> str:
        try:
            template = self.environment.get_template(CATALOG_TEMPLATE)
        except TemplateNotFound as exc:
            raise RenderError(f"Template '{CATALOG_TEMPLATE}' not found in {self._templates_dir}") from exc
        title = self.page_title
        if view.current_site:
            title = f"{title} - {view.current_site}"
        return template.render(view=view, page_title=title, reload_href=reload_href)

    def render_manifest_file(
        self,
        manifest_path: Path,
        *,
        current_site: str | None = None,
        selector: str | None = None,
        reload_href: str = "",
    ) -> str:
        """Load the manifest fresh and render it; load failures become an inline message."""
        try:
            manifest = load_manifest(manifest_path)
        except ManifestError as exc:
            logger.error("Failed to load %s: %s", manifest_path, exc)
            view = error_view(current_site=current_site)
        else:
            view = build_catalog_view(manifest, current_site=current_site, selector=selector)
        return self.render(view, reload_href=reload_href)
