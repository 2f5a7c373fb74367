"""
Service layer for committagger.

- TagService: cache check, source fallback, persistence and resolution
- TagSource and its implementations: the ordered acquisition chain

Services are the primary API for commands to use.
"""

from .sources import TagSource, PageContextSource, RestApiSource
from .tag_service import TagService

__all__ = [
    'TagService',
    'TagSource',
    'PageContextSource',
    'RestApiSource',
]
