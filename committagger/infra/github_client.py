"""
GitHub REST API client infrastructure for committagger.

Provides the REST fallback for tag acquisition:
- Paginated /repos/{owner}/{repo}/tags listing (Link header cursor)
- Optional bearer token (config, env var, or `gh auth token`)
- Rate limit tracking from X-RateLimit-* response headers
"""

import logging
import re
import subprocess
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from ..domain import RepositoryKey, TagMap, add_tag
from ..exceptions import GitHubAPIError, RateLimitError

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"

# GitHub caps per_page at 100
TAGS_PER_PAGE = 100

# Hard ceiling on pages followed, in case the Link header never ends
MAX_PAGES = 50

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')


def parse_next_link(link_header: Optional[str]) -> Optional[str]:
    """
    Extract the rel="next" URL from a Link header.

    Example:
        '<https://api.github.com/...&page=2>; rel="next", <...>; rel="last"'
        -> 'https://api.github.com/...&page=2'
    """
    if not link_header:
        return None
    match = _NEXT_LINK_RE.search(link_header)
    return match.group(1) if match else None


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def reset_datetime(self) -> datetime:
        """Get reset time as datetime."""
        return datetime.fromtimestamp(self.reset_time)

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 10 remaining)."""
        return self.remaining < 10

    def to_dict(self) -> Dict[str, Any]:
        return {
            'remaining': self.remaining,
            'limit': self.limit,
            'used': self.used,
            'reset_time': self.reset_time,
            'reset_at': self.reset_datetime.isoformat(),
        }


class GitHubClient:
    """
    GitHub REST client for tag listings.

    Example:
        client = GitHubClient(token="ghp_...")
        tag_map = client.fetch_all_tags(RepositoryKey("octo", "hello"))
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_base: str = GITHUB_API_BASE,
        timeout: float = 30,
        use_gh_cli: bool = False,
    ):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub token; without one, requests are unauthenticated
            api_base: REST API root URL
            timeout: HTTP request timeout in seconds
            use_gh_cli: Ask `gh auth token` for a token when none is given
        """
        self.token = token or (self._token_from_gh_cli() if use_gh_cli else None)
        self.api_base = api_base.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'committagger',
        })
        if self.token:
            self.session.headers['Authorization'] = f'Bearer {self.token}'
        self._rate_limit_status: Optional[RateLimitStatus] = None

    @staticmethod
    def _token_from_gh_cli() -> Optional[str]:
        """Read the token of an authenticated `gh` CLI, if any."""
        try:
            result = subprocess.run(
                ['gh', 'auth', 'token'],
                capture_output=True,
                text=True,
                timeout=10
            )
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return None
        token = result.stdout.strip()
        return token if result.returncode == 0 and token else None

    def _update_rate_limit_from_headers(self, headers) -> None:
        """Update rate limit status from response headers."""
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining >= 0 and limit >= 0:
            self._rate_limit_status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )
            if self._rate_limit_status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {self._rate_limit_status.minutes_until_reset} minutes"
                )

    @property
    def last_rate_limit(self) -> Optional[RateLimitStatus]:
        """Rate limit status seen on the most recent response."""
        return self._rate_limit_status

    def get_rate_limit_status(self) -> RateLimitStatus:
        """
        Query /rate_limit for the core API budget.

        Raises:
            GitHubAPIError: If the endpoint cannot be reached or errors
        """
        try:
            response = self.session.get(f"{self.api_base}/rate_limit", timeout=self.timeout)
        except requests.RequestException as e:
            raise GitHubAPIError(f"GitHub API request failed: {e}") from e

        if response.status_code != 200:
            raise GitHubAPIError(
                f"GitHub API error {response.status_code} for rate_limit",
                status_code=response.status_code,
            )

        data = response.json()
        core = data.get('resources', {}).get('core') or data.get('rate', {})
        self._rate_limit_status = RateLimitStatus(
            remaining=core.get('remaining', 0),
            limit=core.get('limit', 0),
            reset_time=core.get('reset', 0),
            used=core.get('used', 0)
        )
        return self._rate_limit_status

    def tags_url(self, key: RepositoryKey) -> str:
        return f"{self.api_base}/repos/{key.owner}/{key.name}/tags?per_page={TAGS_PER_PAGE}"

    def fetch_all_tags(self, key: RepositoryKey) -> TagMap:
        """
        Fetch every tag of a repository, following pagination.

        A 404 on the first page means the repository is not visible with the
        current credentials: that is an empty result, not an error. A 404 on a
        later page ends pagination with what was gathered so far.

        Args:
            key: Repository identity

        Returns:
            TagMap of full commit sha -> tag names

        Raises:
            RateLimitError: On 403/429
            GitHubAPIError: On any other non-success status or network failure
        """
        tag_map: TagMap = {}
        url: Optional[str] = self.tags_url(key)
        page = 0

        while url and page < MAX_PAGES:
            try:
                response = self.session.get(url, timeout=self.timeout)
            except requests.RequestException as e:
                raise GitHubAPIError(f"GitHub API request failed for {key}: {e}") from e

            self._update_rate_limit_from_headers(response.headers)

            if response.status_code == 404:
                if page == 0:
                    logger.warning(f"Repository {key} not accessible via API (404)")
                else:
                    logger.debug(f"Page {page + 1} of {key} tags returned 404, stopping")
                return tag_map

            if response.status_code in (403, 429):
                logger.warning(f"Rate limited by GitHub API while fetching tags for {key}")
                raise RateLimitError(
                    f"GitHub API rate limit hit ({response.status_code}) for {key}",
                    status_code=response.status_code,
                )

            if not 200 <= response.status_code < 300:
                raise GitHubAPIError(
                    f"GitHub API error {response.status_code} for {key}",
                    status_code=response.status_code,
                )

            try:
                items = response.json()
            except ValueError as e:
                raise GitHubAPIError(f"GitHub API returned invalid JSON for {key}: {e}") from e

            for item in items if isinstance(items, list) else []:
                name = item.get('name') if isinstance(item, dict) else None
                commit = item.get('commit') if isinstance(item, dict) else None
                sha = commit.get('sha') if isinstance(commit, dict) else None
                if name and sha:
                    add_tag(tag_map, sha, name)

            url = parse_next_link(response.headers.get('Link'))
            page += 1

        if url:
            logger.warning(f"Stopped after {MAX_PAGES} pages of tags for {key}")

        logger.info(f"GitHub API: {len(tag_map)} tagged commits for {key}")
        return tag_map
