"""Writers that push reviewed results back to the CMS."""

from .description_updater import AI_DESCRIPTION_TAG, DescriptionUpdater

__all__ = ["AI_DESCRIPTION_TAG", "DescriptionUpdater"]
