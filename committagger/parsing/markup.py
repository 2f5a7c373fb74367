"""
Markup scraping for GitHub tags and commit listing pages.

Tags page rows look like:
    <div class="Box-row">
      <h2><a href="/{owner}/{repo}/releases/tag/{tag}">tag</a></h2>
      ...
      <a href="/{owner}/{repo}/commit/{sha}">...</a>
    </div>

Used when the page carries no usable embedded JSON.
"""

import re
from typing import List, Optional
from urllib.parse import unquote, urlsplit

from ..domain import TagEntry, normalize_identifier
from .document import Element

_TAG_PATH_RE = re.compile(r'/releases/tag/(.+)$')
_COMMIT_PATH_RE = re.compile(r'/commit/([0-9a-fA-F]{7,40})(?![0-9a-fA-F])')
# Commit listing links end in the sha, optionally followed by a query string
_LISTING_COMMIT_RE = re.compile(r'/commit/([0-9a-f]{7,40})(?:\?.*)?$')


def _href_path(href: str) -> str:
    """Path component of an absolute or relative href."""
    return urlsplit(href).path


def _repo_prefix(owner: Optional[str], repo: Optional[str]) -> str:
    return f"/{owner}/{repo}" if owner and repo else ""


def _anchor_with(el: Element, marker: str) -> bool:
    return el.tag == 'a' and marker in el.get('href', '')


def _commit_identifier(anchor: Element) -> Optional[str]:
    match = _COMMIT_PATH_RE.search(_href_path(anchor.get('href', '')))
    return normalize_identifier(match.group(1)) if match else None


def _nearest_commit(tag_anchor: Element, tag_marker: str, commit_marker: str) -> Optional[str]:
    """
    Walk up from the tag link; the first ancestor that contains a commit link
    supplies the identifier.

    The walk stops at the first ancestor that also holds a link to another
    tag: that ancestor spans more than this tag's row.
    """
    href = tag_anchor.get('href', '')

    def other_tag(el: Element) -> bool:
        return el is not tag_anchor and _anchor_with(el, tag_marker) and el.get('href') != href

    for ancestor in tag_anchor.ancestors():
        if ancestor.find('a', other_tag) is not None:
            return None
        for anchor in ancestor.find_all('a', lambda el: _anchor_with(el, commit_marker)):
            identifier = _commit_identifier(anchor)
            if identifier:
                return identifier
    return None


def scrape_tag_entries(document: Element, owner: Optional[str] = None,
                       repo: Optional[str] = None) -> List[TagEntry]:
    """
    Scrape (tag, commit) pairs from tags listing markup.

    Args:
        document: Parsed listing page
        owner: Restrict to links of this repository owner (with repo)
        repo: Restrict to links of this repository (with owner)

    Returns:
        Entries in document order, identical pairs removed
    """
    prefix = _repo_prefix(owner, repo)
    tag_marker = f"{prefix}/releases/tag/"
    commit_marker = f"{prefix}/commit/"

    results: List[TagEntry] = []
    seen = set()

    for tag_anchor in document.find_all('a', lambda el: _anchor_with(el, tag_marker)):
        match = _TAG_PATH_RE.search(_href_path(tag_anchor.get('href', '')))
        if not match:
            continue
        name = unquote(match.group(1))
        if not name:
            continue

        identifier = _nearest_commit(tag_anchor, tag_marker, commit_marker)
        if not identifier:
            continue

        entry = TagEntry(name=name, identifier=identifier)
        if entry in seen:
            continue
        seen.add(entry)
        results.append(entry)

    return results


def find_next_page_link(document: Element) -> Optional[str]:
    """href of the first <a rel="next"> link, if any."""
    anchor = document.find(
        'a', lambda el: 'next' in el.get('rel', '').lower().split() and bool(el.get('href'))
    )
    return anchor.get('href') if anchor is not None else None


def extract_commit_identifiers(document: Element) -> List[str]:
    """
    Collect commit identifiers linked from a commit listing page.

    Returns:
        Unique identifiers (full or abbreviated) in document order
    """
    identifiers: List[str] = []
    seen = set()
    for anchor in document.find_all('a', lambda el: _anchor_with(el, '/commit/')):
        match = _LISTING_COMMIT_RE.search(anchor.get('href', ''))
        if not match:
            continue
        identifier = match.group(1)
        if identifier not in seen:
            seen.add(identifier)
            identifiers.append(identifier)
    return identifiers
