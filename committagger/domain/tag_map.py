"""
Tag map domain objects for committagger.

A TagMap associates full commit identifiers with the tags pointing at them:
    {"3f2a...c91e": ["v1.2.0", "latest"]}

Keys are always full 40-character lowercase hex identifiers. Abbreviated
identifiers only ever appear as lookup arguments (see resolver.py).
"""

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

# Mapping of full commit identifier -> ordered, duplicate-free tag names
TagMap = Dict[str, List[str]]

FULL_IDENTIFIER_LENGTH = 40
MIN_ABBREVIATED_LENGTH = 7

_FULL_IDENTIFIER_RE = re.compile(r'^[0-9a-f]{40}$')
_IDENTIFIER_RE = re.compile(r'^[0-9a-f]{7,40}$')


def normalize_identifier(identifier: str) -> str:
    """Lowercase and strip a commit identifier."""
    return identifier.strip().lower()


def is_full_identifier(identifier: str) -> bool:
    """Check if identifier is a full 40-character hex commit id."""
    return bool(_FULL_IDENTIFIER_RE.match(normalize_identifier(identifier)))


def is_valid_identifier(identifier: str) -> bool:
    """Check if identifier is a full or abbreviated (7+ chars) hex commit id."""
    return bool(_IDENTIFIER_RE.match(normalize_identifier(identifier)))


@dataclass(frozen=True)
class RepositoryKey:
    """
    Composite repository identity (owner + name).

    Used as the cache key and as the unit of invalidation.

    Examples:
        RepositoryKey("torvalds", "linux")     -> torvalds/linux
        RepositoryKey.parse("torvalds/linux")  -> RepositoryKey("torvalds", "linux")
    """

    owner: str
    name: str

    def __post_init__(self):
        if not self.owner or not self.name:
            raise ValueError("Repository owner and name must be non-empty")
        if '/' in self.owner or '/' in self.name:
            raise ValueError(f"Invalid repository identity: {self.owner}/{self.name}")

    @classmethod
    def parse(cls, value: str) -> 'RepositoryKey':
        """
        Parse an "owner/name" string.

        Trailing slashes and a ".git" suffix are tolerated.

        Raises:
            ValueError: If value is not of the form owner/name
        """
        cleaned = value.strip().strip('/')
        if cleaned.endswith('.git'):
            cleaned = cleaned[:-4]
        parts = cleaned.split('/')
        if len(parts) != 2:
            raise ValueError(f"Expected owner/name, got {value!r}")
        return cls(owner=parts[0], name=parts[1])

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class TagEntry:
    """A single (tag name, commit identifier) pair emitted by an extractor."""

    name: str
    identifier: str


@dataclass
class CacheEntry:
    """
    A cached TagMap paired with its acquisition time.

    Attributes:
        data: The full tag map for one repository
        timestamp: Acquisition time in epoch milliseconds
    """

    data: TagMap
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))

    def is_expired(self, now_ms: int, ttl_ms: int) -> bool:
        """An entry stays valid while now - timestamp <= ttl."""
        return now_ms - self.timestamp > ttl_ms

    def to_dict(self) -> Dict[str, Any]:
        return {'data': self.data, 'timestamp': self.timestamp}

    @classmethod
    def from_dict(cls, raw: Any) -> Optional['CacheEntry']:
        """
        Rebuild an entry from its persisted form.

        Returns:
            CacheEntry, or None if the stored value is not a valid entry
        """
        if not isinstance(raw, dict):
            return None
        data = raw.get('data')
        timestamp = raw.get('timestamp')
        if not isinstance(data, dict) or not isinstance(timestamp, (int, float)):
            return None
        return cls(data=data, timestamp=int(timestamp))


class AcquisitionOutcome(Enum):
    """How an acquisition attempt ended."""
    SUCCESS = "success"    # Non-empty tag map
    EMPTY = "empty"        # Source exhausted or repository not accessible
    FAILED = "failed"      # Transient, rate-limit or network failure


@dataclass
class AcquisitionResult:
    """Uniform result returned by every acquisition source."""

    tag_map: TagMap
    outcome: AcquisitionOutcome
    source: str = ""
    error: Optional[str] = None

    @classmethod
    def from_tag_map(cls, tag_map: Optional[TagMap], source: str = "") -> 'AcquisitionResult':
        if tag_map:
            return cls(tag_map=tag_map, outcome=AcquisitionOutcome.SUCCESS, source=source)
        return cls(tag_map={}, outcome=AcquisitionOutcome.EMPTY, source=source)

    @classmethod
    def failed(cls, error: str, source: str = "") -> 'AcquisitionResult':
        return cls(tag_map={}, outcome=AcquisitionOutcome.FAILED, source=source, error=error)

    @property
    def usable(self) -> bool:
        return self.outcome is AcquisitionOutcome.SUCCESS


def add_tag(tag_map: TagMap, identifier: str, name: str) -> bool:
    """
    Fold a single tag into a tag map.

    The tag name is appended for the identifier unless already present.
    Abbreviated identifiers are rejected so the map only ever holds
    full-length keys.

    Returns:
        True if the tag was added
    """
    identifier = normalize_identifier(identifier)
    if not is_full_identifier(identifier):
        logger.debug(f"Skipping tag {name!r}: {identifier!r} is not a full commit id")
        return False

    names = tag_map.setdefault(identifier, [])
    if name in names:
        return False
    names.append(name)
    return True


def merge_entries(tag_map: TagMap, entries: Iterable[TagEntry]) -> int:
    """
    Fold extractor entries into a tag map.

    Returns:
        Number of tags newly added
    """
    added = 0
    for entry in entries:
        if add_tag(tag_map, entry.identifier, entry.name):
            added += 1
    return added


def count_tags(tag_map: TagMap) -> int:
    """Total number of tag names across all identifiers."""
    return sum(len(names) for names in tag_map.values())
