"""Description write-back schemas."""

from pydantic import field_validator

from .base import CamelModel


class AltTextItem(CamelModel):
    """Reviewed ALT text for one image in one locale."""

    uid: str
    locale: str
    alt_text: str = ""
    filename: str | None = None

    @field_validator("alt_text", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or ""

    @property
    def has_alt_text(self) -> bool:
        return bool(self.alt_text.strip())


class UpdateResult(CamelModel):
    """Outcome of writing one description back to the CMS."""

    uid: str
    filename: str | None = None
    locale: str
    alt_text: str
    success: bool
    error: str | None = None
    dry_run: bool = False


class UpdateReport(CamelModel):
    """Results of a description write-back run."""

    dry_run: bool = False
    total: int = 0
    successful: int = 0
    failed: int = 0
    results: list[UpdateResult] = []
