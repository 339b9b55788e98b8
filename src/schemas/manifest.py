"""Run artifacts written by the usage analysis and filtering commands."""

from datetime import datetime

from pydantic import Field

from .asset import ImageAsset
from .base import CamelModel
from .usage import ResolvedComponent


class KeyGroupImage(CamelModel):
    """An image listed under a usage key."""

    uid: str
    filename: str = ""
    url: str = ""
    locale: str


class KeyGroup(CamelModel):
    """All images sharing a usage key.

    Attributes:
        key: The usage key
        content_type_uid: Content type of the first usage seen under the key
        content_type_title: Display title of that content type
        component_hierarchy: Resolved component chain of the first usage
        field_name: Terminal field name
        image_count: Number of usages recorded under the key
        images: Distinct images using the key, in first-seen order
    """

    key: str
    content_type_uid: str
    content_type_title: str
    component_hierarchy: list[ResolvedComponent] = []
    field_name: str
    image_count: int = 0
    images: list[KeyGroupImage] = []


class RunSummary(CamelModel):
    """Counts reported at the end of a usage analysis run."""

    images_analyzed: int = 0
    images_with_usages: int = 0
    images_without_usages: int = 0
    images_failed: int = 0
    usages_found: int = 0
    unique_keys: int = 0


class UsageManifest(CamelModel):
    """Output of usage analysis: every input image annotated with usages."""

    created_at: datetime = Field(default_factory=datetime.now)
    summary: RunSummary = Field(default_factory=RunSummary)
    key_groups: dict[str, KeyGroup] = {}
    images: list[ImageAsset] = []


class FilteredManifest(CamelModel):
    """Output of key filtering: the images kept for ALT text generation."""

    total_images: int
    filtered_images: int
    selected_keys: list[str] = []
    key_groups: dict[str, KeyGroup] = {}
    images: list[ImageAsset] = []
