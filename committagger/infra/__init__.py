"""
Infrastructure layer for committagger.

Contains abstractions for external systems:
- FileStore: JSON file persistence
- TagCache: TTL-bounded tag map cache on top of FileStore
- GitHubClient: GitHub REST API access
- ListingPageClient: github.com tags/commits pages with the viewer's session
- PageContextBridge: timed request/response channel to ListingPageClient

These provide clean interfaces that can be mocked for testing.
"""

from .file_store import FileStore
from .tag_cache import TagCache
from .github_client import GitHubClient, RateLimitStatus
from .page_client import ListingPageClient
from .page_bridge import PageContextBridge

__all__ = [
    'FileStore',
    'TagCache',
    'GitHubClient',
    'RateLimitStatus',
    'ListingPageClient',
    'PageContextBridge',
]
