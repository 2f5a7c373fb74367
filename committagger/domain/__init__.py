"""
Domain layer for committagger.

Contains pure domain objects with no I/O or side effects:
- RepositoryKey: owner/name identity used for caching
- TagEntry: (name, identifier) pair produced by extractors
- TagMap: full commit identifier -> tag names
- CacheEntry: TagMap plus acquisition timestamp
- AcquisitionResult: uniform result of an acquisition source
"""

from .tag_map import (
    TagMap,
    TagEntry,
    RepositoryKey,
    CacheEntry,
    AcquisitionOutcome,
    AcquisitionResult,
    add_tag,
    merge_entries,
    count_tags,
    normalize_identifier,
    is_full_identifier,
    is_valid_identifier,
    FULL_IDENTIFIER_LENGTH,
    MIN_ABBREVIATED_LENGTH,
)

__all__ = [
    'TagMap',
    'TagEntry',
    'RepositoryKey',
    'CacheEntry',
    'AcquisitionOutcome',
    'AcquisitionResult',
    'add_tag',
    'merge_entries',
    'count_tags',
    'normalize_identifier',
    'is_full_identifier',
    'is_valid_identifier',
    'FULL_IDENTIFIER_LENGTH',
    'MIN_ABBREVIATED_LENGTH',
]
