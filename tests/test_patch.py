from __future__ import annotations

from linkdeck.manifest import ChannelItem, Manifest, manifest_to_dict
from linkdeck.youtube import ChannelInfo, PatchOptions, PatchStatus, apply_channel, find_channel_item

CHANNEL_URL = "https://www.youtube.com/@progamer-sub"
RESOLVED = ChannelInfo(
    channel_id="UCabc",
    title="ProGamer Official",
    thumbnails={"medium": {"url": "https://yt3.example/medium.jpg"}},
    uploads_playlist="UUabc",
    source="api",
)


def _manifest(items: list[dict]) -> Manifest:
    return Manifest.model_validate({"categories": [{"id": "main", "title": "Main", "items": items}]})


def test_url_match_ignores_trailing_slash_and_query() -> None:
    manifest = _manifest(
        [
            {"title": "Video", "url": CHANNEL_URL},
            {"title": "Channel", "url": CHANNEL_URL + "/?si=abc", "type": "channel"},
        ]
    )

    found = find_channel_item(manifest, CHANNEL_URL)

    assert found is not None
    category, item, matched_by = found
    assert category.id == "main"
    assert item.title == "Channel"
    assert matched_by == "url"


def test_url_match_wins_over_title_marker() -> None:
    manifest = _manifest(
        [
            {"title": "progamer fan page", "url": "https://www.youtube.com/@fan", "type": "channel"},
            {"title": "Exact", "url": CHANNEL_URL, "type": "channel"},
        ]
    )

    found = find_channel_item(manifest, CHANNEL_URL, title_marker="progamer")

    assert found is not None
    assert found[1].title == "Exact"


def test_title_marker_fallback_is_case_insensitive_and_optional() -> None:
    manifest = _manifest([{"title": "The PROGAMER channel", "url": "https://www.youtube.com/@old", "type": "channel"}])

    assert find_channel_item(manifest, CHANNEL_URL) is None
    found = find_channel_item(manifest, CHANNEL_URL, title_marker="progamer")
    assert found is not None
    assert found[2] == "title"


def test_matched_item_is_updated_in_place() -> None:
    manifest = _manifest([{"title": "Old", "url": CHANNEL_URL + "/", "type": "channel", "note": "keep"}])

    outcome = apply_channel(manifest, CHANNEL_URL, RESOLVED)

    assert outcome.status is PatchStatus.UPDATED
    data = manifest_to_dict(manifest)
    item = data["categories"][0]["items"][0]
    assert item == {
        "title": "ProGamer Official",
        "url": CHANNEL_URL + "/",
        "type": "channel",
        "note": "keep",
        "avatarUrl": "https://yt3.example/medium.jpg",
        "playlist": "UUabc",
        "embedUrl": "https://www.youtube.com/embed?listType=playlist&list=UUabc",
    }


def test_matched_item_with_same_values_is_unchanged() -> None:
    manifest = _manifest([{"title": "Old", "url": CHANNEL_URL, "type": "channel"}])
    apply_channel(manifest, CHANNEL_URL, RESOLVED)

    second = apply_channel(manifest, CHANNEL_URL, RESOLVED)

    assert second.status is PatchStatus.UNCHANGED
    assert not second.status.changed


def test_partial_resolution_only_touches_known_fields() -> None:
    manifest = _manifest([{"title": "Keep me", "url": CHANNEL_URL, "type": "channel", "avatarUrl": "a.jpg"}])

    outcome = apply_channel(manifest, CHANNEL_URL, ChannelInfo(channel_id="UCabc", uploads_playlist="UUabc"))

    item = outcome.item
    assert outcome.status is PatchStatus.UPDATED
    assert item.title == "Keep me"
    assert item.avatar_url == "a.jpg"
    assert item.playlist == "UUabc"


def test_appends_to_first_category_when_unmatched() -> None:
    manifest = Manifest.model_validate(
        {
            "categories": [
                {"id": "first", "items": [{"title": "Video", "url": "https://youtu.be/x"}]},
                {"id": "second", "items": []},
            ]
        }
    )

    outcome = apply_channel(manifest, CHANNEL_URL, RESOLVED, PatchOptions(title_marker=None))

    assert outcome.status is PatchStatus.APPENDED
    assert outcome.category_id == "first"
    assert len(manifest.categories[0].items) == 2
    assert manifest.categories[1].items == []
    appended = manifest_to_dict(manifest)["categories"][0]["items"][1]
    assert appended == {
        "title": "ProGamer Official",
        "url": CHANNEL_URL,
        "embed": False,
        "type": "channel",
        "site": "harisatif",
        "avatarUrl": "https://yt3.example/medium.jpg",
        "playlist": "UUabc",
        "embedUrl": "https://www.youtube.com/embed?listType=playlist&list=UUabc",
    }


def test_creates_default_category_for_empty_manifest() -> None:
    manifest = Manifest.model_validate({"sites": []})

    outcome = apply_channel(manifest, CHANNEL_URL, ChannelInfo(), PatchOptions(default_site="mysite"))

    assert outcome.status is PatchStatus.APPENDED
    data = manifest_to_dict(manifest)
    assert data["categories"] == [
        {
            "id": "channels",
            "title": "Channels",
            "items": [
                {
                    "title": "ProGamer channel",
                    "url": CHANNEL_URL,
                    "embed": False,
                    "type": "channel",
                    "site": "mysite",
                }
            ],
        }
    ]


def test_category_without_items_key_gets_one() -> None:
    manifest = Manifest.model_validate({"categories": [{"id": "bare"}]})

    apply_channel(manifest, CHANNEL_URL, ChannelInfo())

    items = manifest_to_dict(manifest)["categories"][0]["items"]
    assert len(items) == 1
    assert isinstance(manifest.categories[0].items[0], ChannelItem)
