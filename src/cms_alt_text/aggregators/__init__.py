"""Aggregators for gathering images and their usages from the CMS."""

from .image_collector import ImageCollector, default_content_types
from .usage_aggregator import (
    UsageAggregator,
    analyze_image_usage,
    analyze_image_usages,
)

__all__ = [
    "ImageCollector",
    "UsageAggregator",
    "analyze_image_usage",
    "analyze_image_usages",
    "default_content_types",
]
