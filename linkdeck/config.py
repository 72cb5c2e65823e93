from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from .youtube.api import YOUTUBE_API_BASE

DEFAULT_CONFIG_FILENAME = "linkdeck.yml"


class YouTubeConfig(BaseModel):
    """Settings for talking to the YouTube Data API and channel pages."""

    api_base: str = Field(default=YOUTUBE_API_BASE)
    api_key_env: list[str] = Field(
        default_factory=lambda: ["YOUTUBE_API_KEY", "YT_API_KEY"],
        description="Environment variables consulted, in order, when no --apiKey flag is given.",
    )
    request_timeout: float = Field(default=15.0, gt=0, description="Per-request timeout in seconds.")
    user_agent: str = Field(
        default="linkdeck-channel-resolver",
        description="User-Agent header sent when fetching channel page markup.",
    )

    @field_validator("api_base")
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ResolverConfig(BaseModel):
    """Defaults applied when the resolver patches the manifest."""

    default_site: str = Field(
        default="harisatif",
        description="Site tag stamped on channel items appended by the resolver.",
    )
    default_category_id: str = Field(default="channels")
    default_category_title: str = Field(default="Channels")
    default_title: str = Field(
        default="ProGamer channel",
        description="Title for appended channel items when the API supplied none.",
    )
    title_marker: str | None = Field(
        default="progamer",
        description=(
            "Case-insensitive substring used to match an existing channel item by title "
            "when no item URL matches. Set to an empty value to match by URL only."
        ),
    )

    @field_validator("title_marker", mode="before")
    def _empty_marker_disables(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None


class PreviewConfig(BaseModel):
    """Options for the local catalog preview server."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=0, le=65535)


class Config(BaseModel):
    project_name: str = Field(default="linkdeck")
    manifest_path: Path = Field(default=Path("categories.json"))
    youtube: YouTubeConfig = Field(default_factory=YouTubeConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    preview: PreviewConfig = Field(default_factory=PreviewConfig)

    @field_validator("manifest_path", mode="before")
    def _ensure_path(cls, value: Any) -> Path:
        return Path(value)


def load_config(path: str | Path) -> Config:
    """Load configuration and resolve relative paths based on the config location.

    ``path`` may point at a YAML file or at a directory. A directory without a
    ``linkdeck.yml`` yields the defaults anchored to that directory.
    """
    candidate = Path(path)
    data: dict[str, Any] = {}
    if candidate.is_dir():
        config_file = candidate / DEFAULT_CONFIG_FILENAME
        if config_file.exists():
            data = _read_yaml(config_file)
        base_dir = candidate.resolve()
    else:
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        data = _read_yaml(candidate)
        base_dir = candidate.parent.resolve()

    cfg = Config(**data)
    if not cfg.manifest_path.is_absolute():
        cfg.manifest_path = (base_dir / cfg.manifest_path).resolve()
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping at its root.")
    return loaded
