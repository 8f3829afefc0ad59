from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUPPORTED_FORMATS = ("image", "link", "video", "audio", "quote")

MIGRATED_META_KEY = "migrated"

# Side-car keys per format, current schema first and legacy schema second.
FORMAT_META_KEYS: dict[str, tuple[str, ...]] = {
    "image": ("image_html", "link_url", "legacy_image_ref", "legacy_link_url"),
    "link": ("link_target_url", "legacy_link_url"),
    "video": ("video_embed_html", "legacy_media_embed"),
    "audio": ("audio_embed_html", "legacy_media_embed"),
    "quote": (
        "quote_source_name",
        "quote_source_url",
        "legacy_quote_source_name",
        "legacy_link_url",
    ),
}


class PostRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: int
    title: str = ""
    content: str = ""
    format: Optional[str] = None

    @field_validator("title", "content", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Optional[str]):
        return "" if v is None else v

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, v: Optional[str]):
        if v is None:
            return None
        text = str(v).strip().lower()
        # WordPress stores the taxonomy term as "post-format-<slug>"
        if text.startswith("post-format-"):
            text = text[len("post-format-"):]
        if text in ("", "none", "standard"):
            return None
        return text


class PostQuery(BaseModel):
    """
    Structured filter handed to a record store.

    ``meta_exists`` maps each format to the side-car keys of which at least
    one must be present on a post of that format.  ``meta_not_exists`` lists
    keys that must be absent.
    """

    formats: list[str]
    meta_exists: dict[str, list[str]] = Field(default_factory=dict)
    meta_not_exists: list[str] = Field(default_factory=list)
    order_by: str = "id"
    ascending: bool = True
    limit: Optional[int] = None

    @field_validator("order_by")
    @classmethod
    def _known_column(cls, v: str):
        if v not in ("id", "title"):
            raise ValueError(f"cannot order posts by {v!r}")
        return v


class UnmigrationOutcome(BaseModel):
    post_id: Optional[int] = None
    changed: bool = False


class UnmigrationSummary(BaseModel):
    processed: int = 0
    changed: int = 0
    batches: int = 0
