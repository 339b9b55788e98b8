"""Usage discovery schemas.

A usage is one place inside a CMS entry where an asset identifier appears.
Reference records come straight from the CMS "what references this asset"
query; usage paths are produced by walking the referencing entries; usage
summaries are the keyed form persisted on each image.
"""

from typing import Any

from pydantic import model_validator

from .base import CamelModel


class ReferenceRecord(CamelModel):
    """A CMS-reported reference from an entry to an asset.

    The CMS payload is loosely shaped: the content type may arrive as
    ``content_type_uid`` or ``_content_type_uid`` and the entry as
    ``entry_uid`` or ``uid``. Records missing either are kept but flagged
    through ``is_complete`` so callers can drop them.
    """

    content_type_uid: str | None = None
    entry_uid: str | None = None
    locale: str | None = None

    model_config = {"extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def _accept_cms_shapes(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("content_type_uid") and not data.get("contentTypeUid"):
            data["content_type_uid"] = data.get("_content_type_uid")
        if not data.get("entry_uid") and not data.get("entryUid"):
            data["entry_uid"] = data.get("uid")
        return data

    @property
    def is_complete(self) -> bool:
        return bool(self.content_type_uid) and bool(self.entry_uid)

    def resolved_locale(self, default_locale: str) -> str:
        return self.locale or default_locale

    def dedup_key(self, default_locale: str) -> str:
        return f"{self.content_type_uid}:{self.entry_uid}:{self.resolved_locale(default_locale)}"


class ComponentRef(CamelModel):
    """An enclosing component on a usage path.

    Attributes:
        uid: The component's own content type identifier
        field_name: Field under which the component was nested
    """

    uid: str
    field_name: str


class ResolvedComponent(ComponentRef):
    """A component reference with its display title resolved."""

    title: str


class UsagePath(CamelModel):
    """One location of an asset identifier inside an entry document.

    Attributes:
        path: Field names and array indexes from the entry root
        field_name: Field that directly held the reference
        component_hierarchy: Enclosing components, outermost first
        content_type_uid: Content type of the originating entry
        entry_uid: Originating entry
        locale: Locale the entry was fetched in
    """

    path: list[str | int]
    field_name: str
    component_hierarchy: list[ComponentRef] = []
    content_type_uid: str | None = None
    entry_uid: str | None = None
    locale: str | None = None


class TypeInfo(CamelModel):
    """Identity and display title of a content type or component."""

    uid: str
    title: str


class UsageSummary(CamelModel):
    """A keyed usage persisted on an image."""

    content_type_uid: str
    content_type_title: str
    entry_uid: str
    locale: str
    field_name: str
    key: str
    component_hierarchy: list[ResolvedComponent] = []
