"""Pydantic models describing the catalog manifest (``categories.json``)."""

from __future__ import annotations

from typing import Annotated, Any, Callable, Iterator, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    PrivateAttr,
    Tag,
    TypeAdapter,
    ValidationError,
    model_validator,
)

CHANNEL_TYPE = "channel"


class ManifestObject(BaseModel):
    """Lenient view over one JSON object of the hand-edited manifest.

    Keys we do not model are kept as extras. A modelled key whose value has an
    unexpected type is ignored for reading but written back untouched, and so
    are list entries that do not fit the entry model. ``to_document`` restores
    the source key order.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    _source_keys: tuple[str, ...] = PrivateAttr(default=())
    _ignored: dict[str, Any] = PrivateAttr(default_factory=dict)
    _skipped: dict[str, list[tuple[int, Any]]] = PrivateAttr(default_factory=dict)

    @classmethod
    def _entry_adapters(cls) -> dict[str, TypeAdapter[Any]]:
        """List-valued keys whose entries are validated one by one."""
        return {}

    @model_validator(mode="wrap")
    @classmethod
    def _tolerate_unexpected_shapes(cls, data: Any, handler: Callable[[Any], Any]) -> Any:
        if not isinstance(data, dict):
            return handler(data)

        values = dict(data)
        ignored: dict[str, Any] = {}
        skipped: dict[str, list[tuple[int, Any]]] = {}
        for key, adapter in cls._entry_adapters().items():
            if key not in values:
                continue
            if not isinstance(values[key], list):
                ignored[key] = values.pop(key)
                continue
            kept: list[Any] = []
            for index, entry in enumerate(values[key]):
                try:
                    kept.append(adapter.validate_python(entry))
                except ValidationError:
                    skipped.setdefault(key, []).append((index, entry))
            values[key] = kept

        try:
            model = handler(values)
        except ValidationError as exc:
            bad_keys = {error["loc"][0] for error in exc.errors() if error["loc"] and error["loc"][0] in values}
            if not bad_keys:
                raise
            for key in bad_keys:
                ignored[key] = values.pop(key)
            model = handler(values)

        model._source_keys = tuple(data)
        model._ignored = ignored
        model._skipped = skipped
        return model

    def ignored_keys(self) -> list[str]:
        return list(self._ignored)

    def skipped_entries(self) -> list[tuple[str, int, Any]]:
        return [(key, index, raw) for key, entries in self._skipped.items() for index, raw in entries]

    def entry_positions(self, key: str) -> list[int]:
        """Source index of each modelled entry under ``key``."""
        skipped = {index for index, _ in self._skipped.get(key, [])}
        total = len(getattr(self, key)) + len(skipped)
        return [index for index in range(total) if index not in skipped]

    def to_document(self) -> dict[str, Any]:
        """Return JSON-ready data holding only keys that were read or assigned."""
        document = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        for key in self._entry_adapters():
            if key not in document:
                continue
            entries: list[Any] = [entry.to_document() for entry in getattr(self, key)]
            for index, raw in self._skipped.get(key, []):
                entries.insert(min(index, len(entries)), raw)
            document[key] = entries
        for key, raw in self._ignored.items():
            document.setdefault(key, raw)

        order = {key: position for position, key in enumerate(self._source_keys)}
        return dict(sorted(document.items(), key=lambda pair: order.get(pair[0], len(order))))


class Site(ManifestObject):
    """Static sub-site linked from the catalog navigation."""

    path: str = Field(...)
    title: Optional[str] = Field(default=None)
    name: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)

    @property
    def label(self) -> str:
        return self.title or self.name or self.path


class _ItemBase(ManifestObject):
    title: Optional[str] = Field(default=None)
    url: Optional[str] = Field(default=None)
    site: Optional[str] = Field(default=None, description="Site tag restricting where the item is listed.")
    thumbnail: Optional[str] = Field(default=None)
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")
    description: Optional[str] = Field(default=None)

    @property
    def is_channel(self) -> bool:
        return False


class VideoItem(_ItemBase):
    """A single piece of media (video, short, or any non-channel link)."""

    type: Optional[str] = Field(default=None)


class ChannelItem(_ItemBase):
    """An entire external channel rather than one video."""

    type: Literal["channel"] = Field(default=CHANNEL_TYPE)
    playlist: Optional[str] = Field(default=None, description="Uploads list id (UU...).")
    embed_url: Optional[str] = Field(default=None, alias="embedUrl")
    embed: Optional[bool] = Field(default=None, strict=True)

    @property
    def is_channel(self) -> bool:
        return True


def _item_tag(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return "channel" if kind == CHANNEL_TYPE else "video"


ManifestItem = Annotated[
    Union[
        Annotated[ChannelItem, Tag("channel")],
        Annotated[VideoItem, Tag("video")],
    ],
    Discriminator(_item_tag),
]


_ITEM_ADAPTER: TypeAdapter[Any] = TypeAdapter(ManifestItem)


class Category(ManifestObject):
    """Ordered group of items shown together in the catalog."""

    id: str = Field(...)
    title: Optional[str] = Field(default=None)
    items: list[ManifestItem] = Field(default_factory=list)

    @classmethod
    def _entry_adapters(cls) -> dict[str, TypeAdapter[Any]]:
        return {"items": _ITEM_ADAPTER}

    @property
    def label(self) -> str:
        return self.title or self.id


_SITE_ADAPTER: TypeAdapter[Any] = TypeAdapter(Site)
_CATEGORY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Category)


class Manifest(ManifestObject):
    """Top-level manifest document."""

    sites: list[Site] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)

    @classmethod
    def _entry_adapters(cls) -> dict[str, TypeAdapter[Any]]:
        return {"sites": _SITE_ADAPTER, "categories": _CATEGORY_ADAPTER}

    def category(self, category_id: str) -> Category | None:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def iter_items(self) -> Iterator[tuple[Category, VideoItem | ChannelItem]]:
        for category in self.categories:
            for item in category.items:
                yield category, item

    def channel_items(self) -> Iterator[ChannelItem]:
        for _, item in self.iter_items():
            if isinstance(item, ChannelItem):
                yield item
