"""
Listing page client for committagger.

Fetches github.com HTML pages the way a logged-in browser tab would: the
requests session carries the viewer's `user_session` cookie, so private
repositories visible to the viewer work without an API token.
"""

import logging
from typing import List, Optional, Tuple
from urllib.parse import quote, urljoin, urlsplit

import requests

from ..domain import RepositoryKey, TagMap, merge_entries
from ..exceptions import PageFetchError
from ..parsing import (
    extract_commit_identifiers,
    extract_structured_entries,
    find_next_page_link,
    parse_html,
    scrape_tag_entries,
    structured_next_cursor,
)

logger = logging.getLogger(__name__)

GITHUB_WEB_BASE = "https://github.com"

# Hard ceiling on listing pages followed
MAX_PAGES = 50


class ListingPageClient:
    """
    Reads tags and commit listings from github.com pages.

    Example:
        client = ListingPageClient(session_cookie="...")
        tag_map = client.fetch_all_tags(RepositoryKey("octo", "hello"))
    """

    def __init__(
        self,
        session_cookie: Optional[str] = None,
        web_base: str = GITHUB_WEB_BASE,
        timeout: float = 30,
        max_pages: int = MAX_PAGES,
    ):
        """
        Initialize ListingPageClient.

        Args:
            session_cookie: Value of the viewer's github.com `user_session` cookie
            web_base: Site root URL
            timeout: HTTP request timeout in seconds
            max_pages: Maximum listing pages to follow
        """
        self.web_base = web_base.rstrip('/')
        self.timeout = timeout
        self.max_pages = max_pages
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'text/html,application/xhtml+xml',
            'User-Agent': 'committagger',
        })
        if session_cookie:
            domain = urlsplit(self.web_base).hostname or 'github.com'
            self.session.cookies.set('user_session', session_cookie, domain=domain)

    def _get(self, url: str) -> Tuple[int, str]:
        response = self.session.get(url, timeout=self.timeout)
        return response.status_code, response.text

    def tags_url(self, key: RepositoryKey) -> str:
        return f"{self.web_base}/{key.owner}/{key.name}/tags"

    def _next_url(self, current: str, document, key: RepositoryKey) -> Optional[str]:
        href = find_next_page_link(document)
        if href:
            return urljoin(current, href)
        cursor = structured_next_cursor(document)
        if cursor:
            return f"{self.tags_url(key)}?after={quote(cursor)}"
        return None

    def fetch_all_tags(self, key: RepositoryKey) -> TagMap:
        """
        Walk the tags listing pages of a repository.

        Each page is read from its embedded JSON first, falling back to
        scraping anchors when that yields nothing. Stops on a page with no
        entries, when no next-page link is found, or at max_pages.

        Raises:
            PageFetchError: If the first page cannot be fetched
        """
        tag_map: TagMap = {}
        url: Optional[str] = self.tags_url(key)
        page = 0

        while url and page < self.max_pages:
            try:
                status, html = self._get(url)
            except requests.RequestException as e:
                if page == 0:
                    raise PageFetchError(f"Tags page for {key} unreachable: {e}") from e
                logger.debug(f"Tags page {page + 1} for {key} failed: {e}")
                break

            if not 200 <= status < 300:
                if page == 0:
                    raise PageFetchError(f"HTTP {status} for {url}", status_code=status)
                break

            document = parse_html(html)
            entries = extract_structured_entries(document)
            if not entries:
                entries = scrape_tag_entries(document, key.owner, key.name)
            if not entries:
                break

            merge_entries(tag_map, entries)
            url = self._next_url(url, document, key)
            page += 1

        logger.info(f"Tags pages: {len(tag_map)} tagged commits for {key} ({page} pages)")
        return tag_map

    def fetch_commit_identifiers(self, key: RepositoryKey, ref: Optional[str] = None) -> List[str]:
        """
        Read the commit identifiers shown on a commit listing page.

        Args:
            key: Repository identity
            ref: Branch, tag or sha (default branch when None)

        Raises:
            PageFetchError: If the page cannot be fetched
        """
        url = f"{self.web_base}/{key.owner}/{key.name}/commits"
        if ref:
            url += f"/{quote(ref, safe='')}"

        try:
            status, html = self._get(url)
        except requests.RequestException as e:
            raise PageFetchError(f"Commit listing for {key} unreachable: {e}") from e
        if not 200 <= status < 300:
            raise PageFetchError(f"HTTP {status} for {url}", status_code=status)

        return extract_commit_identifiers(parse_html(html))
