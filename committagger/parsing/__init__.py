"""
Listing page parsing for committagger.

- parse_html: build an element tree from page markup
- extract_structured_entries: tags from embedded JSON payloads
- scrape_tag_entries: tags from release/commit anchor pairs
- extract_commit_identifiers: commit ids from a commit listing
"""

from .document import Element, parse_html
from .structured import extract_structured_entries, find_embedded_payloads, structured_next_cursor
from .markup import scrape_tag_entries, find_next_page_link, extract_commit_identifiers

__all__ = [
    'Element',
    'parse_html',
    'extract_structured_entries',
    'find_embedded_payloads',
    'structured_next_cursor',
    'scrape_tag_entries',
    'find_next_page_link',
    'extract_commit_identifiers',
]
