"""
Reconciliation stages: relevance filter, size classifier, version resolver.
"""

from .relevance_filter import FilterOutcome, RelevanceFilter
from .size_classifier import CHUNK_SIZE, Classification, SizeClassifier, is_chunked
from .version_resolver import (
    Resolution,
    UnrepairableInspector,
    VersionResolver,
    select_version,
    sort_versions,
)

__all__ = [
    "CHUNK_SIZE",
    "is_chunked",
    "RelevanceFilter",
    "FilterOutcome",
    "SizeClassifier",
    "Classification",
    "VersionResolver",
    "UnrepairableInspector",
    "Resolution",
    "sort_versions",
    "select_version",
]
