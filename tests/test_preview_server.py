from __future__ import annotations

import json
from pathlib import Path
from typing import Iterator

import pytest
import requests

from linkdeck.preview_server import PreviewServerHandle, start_preview, stop_preview


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    path = tmp_path / "categories.json"
    path.write_text(
        json.dumps(
            {
                "sites": [{"path": "/sites/harisatif", "name": "harisatif"}],
                "categories": [
                    {
                        "id": "videos",
                        "title": "Videos",
                        "items": [
                            {"title": "Shared", "url": "https://youtu.be/aaa"},
                            {"title": "Elsewhere", "url": "https://youtu.be/bbb", "site": "other"},
                        ],
                    },
                    {"id": "more", "title": "More", "items": [{"title": "Extra", "url": "https://youtu.be/ccc"}]},
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def server(manifest_path: Path) -> Iterator[PreviewServerHandle]:
    handle = start_preview(manifest_path, host="127.0.0.1", port=0)
    try:
        yield handle
    finally:
        stop_preview(handle)


def test_root_page_renders_first_category(server: PreviewServerHandle) -> None:
    response = requests.get(server.url, timeout=5)

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "no-store"
    assert response.headers["Content-Type"].startswith("text/html")
    assert "Shared" in response.text
    assert "Elsewhere" in response.text
    assert "Extra" not in response.text


def test_category_query_and_site_path(server: PreviewServerHandle) -> None:
    by_query = requests.get(f"{server.url}index.html", params={"category": "more"}, timeout=5)
    assert "Extra" in by_query.text

    site_page = requests.get(f"{server.url}sites/harisatif/index.html", timeout=5)
    assert "Shared" in site_page.text
    assert "Elsewhere" not in site_page.text


def test_manifest_is_reread_on_every_request(server: PreviewServerHandle, manifest_path: Path) -> None:
    assert "Renamed" not in requests.get(server.url, timeout=5).text

    data = json.loads(manifest_path.read_text(encoding="utf-8"))
    data["categories"][0]["items"][0]["title"] = "Renamed"
    manifest_path.write_text(json.dumps(data), encoding="utf-8")

    assert "Renamed" in requests.get(server.url, timeout=5).text


def test_manifest_route_and_unknown_paths(server: PreviewServerHandle, manifest_path: Path) -> None:
    raw = requests.get(f"{server.url}categories.json", timeout=5)
    assert raw.status_code == 200
    assert raw.json()["categories"][0]["id"] == "videos"

    missing = requests.get(f"{server.url}assets/missing.css", timeout=5)
    assert missing.status_code == 404


def test_broken_manifest_renders_inline_error(server: PreviewServerHandle, manifest_path: Path) -> None:
    manifest_path.write_text("{broken", encoding="utf-8")

    response = requests.get(server.url, timeout=5)

    assert response.status_code == 200
    assert "Could not load categories.json." in response.text
