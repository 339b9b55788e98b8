"""Contentstack asset and workflow image schemas."""

from typing import Any

from pydantic import BaseModel, field_validator

from .base import CamelModel
from .usage import UsageSummary


class Locale(BaseModel):
    """A language/region variant configured on the stack."""

    code: str
    name: str = ""
    uid: str | None = None


class AssetDimension(BaseModel):
    """Pixel dimensions reported by Contentstack for image assets."""

    width: int | None = None
    height: int | None = None


class Asset(BaseModel):
    """A raw asset as returned by the Contentstack Management API.

    Attributes:
        uid: Asset identifier
        url: Delivery URL
        filename: Original file name
        title: Asset title (may be empty)
        content_type: MIME type (e.g., "image/jpeg")
        description: Free-text description, used as ALT text
        tags: Tag names; Contentstack sometimes returns ``{"uid": ...}`` objects
        dimension: Pixel dimensions for images
    """

    uid: str
    url: str = ""
    filename: str = ""
    title: str | None = None
    content_type: str | None = None
    description: str | None = None
    tags: list[str] = []
    dimension: AssetDimension | None = None

    model_config = {"extra": "allow"}

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> list[str]:
        if not value:
            return []
        return [normalize_tag(tag) for tag in value]

    @property
    def has_description(self) -> bool:
        return bool((self.description or "").strip())


def normalize_tag(tag: Any) -> str:
    """Return a tag name from either a plain string or a ``{"uid": ...}`` object."""
    if isinstance(tag, dict):
        return str(tag.get("uid") or tag.get("name") or "")
    return str(tag)


class ImageAsset(CamelModel):
    """An image tracked through the ALT text workflow.

    ``usages`` is ``None`` until usage analysis has run. After analysis it
    is always a list; an empty list marks the image as unused, which is a
    category in its own right rather than an error.
    """

    uid: str
    url: str = ""
    filename: str = ""
    title: str = ""
    locale: str
    locale_name: str = ""
    description: str | None = None
    width: int | None = None
    height: int | None = None
    usages: list[UsageSummary] | None = None

    model_config = {"extra": "allow"}

    @property
    def is_analyzed(self) -> bool:
        return self.usages is not None

    @property
    def is_unused(self) -> bool:
        return self.usages is not None and len(self.usages) == 0

    @property
    def usage_keys(self) -> list[str]:
        return [usage.key for usage in self.usages or []]

    @classmethod
    def from_asset(cls, asset: Asset, locale: Locale) -> "ImageAsset":
        """Build a workflow image from a raw asset fetched for a locale."""
        dimension = asset.dimension or AssetDimension()
        return cls(
            uid=asset.uid,
            url=asset.url,
            filename=asset.filename,
            title=asset.title or "",
            locale=locale.code,
            locale_name=locale.name,
            description=asset.description,
            width=dimension.width,
            height=dimension.height,
        )
