"""Build the view model for a rendered catalog page.

Everything here is pure: the functions take an already-loaded manifest plus the
current site context and category selector and return plain dataclasses that
the HTML renderer turns into markup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .manifest import Category, ChannelItem, Manifest, Site, VideoItem
from .urls import preview_image

LOAD_ERROR_MESSAGE = "Could not load categories.json."
CATEGORY_NOT_FOUND_MESSAGE = "Category not found."
EMPTY_CATEGORY_MESSAGE = "No items in this category yet."
DEFAULT_CHANNEL_TITLE = "Channel"
DEFAULT_CHANNEL_INITIAL = "C"


@dataclass(frozen=True, slots=True)
class SiteLink:
    label: str
    href: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class CategoryOption:
    value: str
    label: str
    selected: bool = False


@dataclass(frozen=True, slots=True)
class ItemCard:
    """Thumbnail card linking to the original URL."""

    href: str
    label: str
    kind: str
    alt: str
    thumbnail: str | None = None


@dataclass(frozen=True, slots=True)
class ChannelBanner:
    title: str
    description: str
    href: str
    avatar_url: str | None = None
    initial: str = DEFAULT_CHANNEL_INITIAL


@dataclass(slots=True)
class CatalogView:
    """Everything needed to render one catalog page."""

    current_site: str | None
    site_links: list[SiteLink] = field(default_factory=list)
    options: list[CategoryOption] = field(default_factory=list)
    active_category: str | None = None
    cards: list[ItemCard] = field(default_factory=list)
    message: str | None = None
    banner: ChannelBanner | None = None


def site_links(sites: Iterable[Site]) -> list[SiteLink]:
    return [
        SiteLink(label=site.label, href=f"{site.path}/index.html", description=site.description)
        for site in sites
    ]


def category_options(categories: Sequence[Category], active: str | None = None) -> list[CategoryOption]:
    """One dropdown option per category, in manifest order."""
    return [
        CategoryOption(value=category.id, label=category.label, selected=category.id == active)
        for category in categories
    ]


def resolve_active_category(categories: Sequence[Category], selector: str | None) -> str | None:
    """Pick the category addressed by ``selector`` or fall back to the first one."""
    wanted = (selector or "").strip().lstrip("#")
    if wanted:
        return wanted
    if categories:
        return categories[0].id
    return None


def item_visible(item: VideoItem | ChannelItem, current_site: str | None) -> bool:
    if not item.site or not current_site:
        return True
    return item.site == current_site


def visible_items(category: Category, current_site: str | None) -> list[VideoItem | ChannelItem]:
    """Items of ``category`` shown in the current site context, order preserved."""
    return [item for item in category.items if item_visible(item, current_site)]


def item_kind(item: VideoItem | ChannelItem) -> str:
    if item.is_channel:
        return "Channel"
    if item.url and "/shorts/" in item.url:
        return "Short"
    return "Video"


def build_card(item: VideoItem | ChannelItem) -> ItemCard:
    thumbnail = item.thumbnail or item.avatar_url or preview_image(item.url)
    return ItemCard(
        href=item.url or "#",
        label=item.title or item.url or "",
        kind=item_kind(item),
        alt=item.title or "thumbnail",
        thumbnail=thumbnail,
    )


def find_channel_item(categories: Sequence[Category], current_site: str | None) -> ChannelItem | None:
    for category in categories:
        for item in category.items:
            if isinstance(item, ChannelItem) and item_visible(item, current_site):
                return item
    return None


def build_banner(item: ChannelItem) -> ChannelBanner:
    initial = item.title[0].upper() if item.title else DEFAULT_CHANNEL_INITIAL
    return ChannelBanner(
        title=item.title or DEFAULT_CHANNEL_TITLE,
        description=item.description or item.url or "",
        href=item.url or "#",
        avatar_url=item.avatar_url,
        initial=initial,
    )


def find_channel_banner(categories: Sequence[Category], current_site: str | None) -> ChannelBanner | None:
    item = find_channel_item(categories, current_site)
    return build_banner(item) if item is not None else None


def build_catalog_view(
    manifest: Manifest,
    *,
    current_site: str | None = None,
    selector: str | None = None,
) -> CatalogView:
    active = resolve_active_category(manifest.categories, selector)
    view = CatalogView(
        current_site=current_site,
        site_links=site_links(manifest.sites),
        options=category_options(manifest.categories, active),
        active_category=active,
        banner=find_channel_banner(manifest.categories, current_site),
    )
    if active is None:
        return view

    category = manifest.category(active)
    if category is None:
        view.message = CATEGORY_NOT_FOUND_MESSAGE
        return view
    if not category.items:
        view.message = EMPTY_CATEGORY_MESSAGE
        return view
    view.cards = [build_card(item) for item in visible_items(category, current_site)]
    return view


def error_view(message: str = LOAD_ERROR_MESSAGE, *, current_site: str | None = None) -> CatalogView:
    return CatalogView(current_site=current_site, message=message)
