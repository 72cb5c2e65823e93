from __future__ import annotations

import json
import re
from pathlib import Path

from linkdeck.render import CatalogRenderer

MANIFEST = {
    "sites": [{"path": "/sites/harisatif", "title": "Haris <Site>", "description": "Main & only"}],
    "categories": [
        {
            "id": "videos",
            "title": "Videos",
            "items": [
                {"title": "First <clip>", "url": "https://www.youtube.com/watch?v=aaa"},
                {"title": "Tagged", "url": "https://youtu.be/bbb", "site": "other"},
            ],
        },
        {
            "id": "channels",
            "title": "Channels",
            "items": [
                {
                    "title": "progamer",
                    "url": "https://www.youtube.com/@progamer-sub",
                    "type": "channel",
                    "avatarUrl": "https://img.example/avatar.jpg",
                    "description": "All the runs",
                }
            ],
        },
    ],
}


def _write_manifest(tmp_path: Path, payload: object = MANIFEST) -> Path:
    path = tmp_path / "categories.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_render_includes_dropdown_cards_and_banner(tmp_path: Path) -> None:
    renderer = CatalogRenderer(page_title="Test Deck")
    html = renderer.render_manifest_file(_write_manifest(tmp_path))

    assert "<title>Test Deck</title>" in html
    options = re.findall(r'<option value="([^"]+)"', html)
    assert options == ["videos", "channels"]
    assert '<option value="videos" selected>Videos</option>' in html

    assert 'href="https://www.youtube.com/watch?v=aaa" target="_blank" rel="noopener noreferrer"' in html
    assert 'src="https://img.youtube.com/vi/aaa/hqdefault.jpg"' in html
    assert "First &lt;clip&gt;" in html
    assert "Tagged" in html

    assert 'id="channel-banner-container"' in html
    assert "All the runs" in html
    assert "Open on YouTube" in html
    assert 'src="https://img.example/avatar.jpg"' in html

    assert 'href="/sites/harisatif/index.html"' in html
    assert "Haris &lt;Site&gt;" in html
    assert "Main &amp; only" in html


def test_render_filters_items_for_site_context(tmp_path: Path) -> None:
    renderer = CatalogRenderer()
    html = renderer.render_manifest_file(_write_manifest(tmp_path), current_site="harisatif", selector="videos")

    assert "First &lt;clip&gt;" in html
    assert "Tagged" not in html
    assert "<title>Catalog - harisatif</title>" in html


def test_render_selected_category(tmp_path: Path) -> None:
    renderer = CatalogRenderer()
    html = renderer.render_manifest_file(_write_manifest(tmp_path), selector="#channels", reload_href="/?category=channels")

    assert '<option value="channels" selected>Channels</option>' in html
    assert '<div class="small">Channel</div>' in html
    assert 'id="reload-categories" class="btn small" href="/?category=channels"' in html


def test_render_reports_load_failures_inline(tmp_path: Path) -> None:
    renderer = CatalogRenderer()

    missing = renderer.render_manifest_file(tmp_path / "absent.json")
    broken_path = tmp_path / "broken.json"
    broken_path.write_text("{oops", encoding="utf-8")
    broken = renderer.render_manifest_file(broken_path)

    for html in (missing, broken):
        assert "Could not load categories.json." in html
        assert "<option" not in html


def test_banner_initial_without_avatar(tmp_path: Path) -> None:
    payload = {
        "categories": [
            {"id": "c", "items": [{"title": "zeta", "url": "https://www.youtube.com/@zeta", "type": "channel"}]}
        ]
    }
    html = CatalogRenderer().render_manifest_file(_write_manifest(tmp_path, payload))

    assert re.search(r'<div class="avatar">\s*Z\s*</div>', html)


def test_dropdown_submits_on_change_with_button_fallback(tmp_path: Path) -> None:
    html = CatalogRenderer().render_manifest_file(_write_manifest(tmp_path))

    assert '<select id="category-select" name="category" onchange="this.form.submit()">' in html
    assert '<button class="btn small" type="submit">Show</button>' in html
