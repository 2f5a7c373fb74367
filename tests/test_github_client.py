"""
Tests for the GitHub REST tag fetcher.

Tests cover:
- Link header pagination and page merging
- 404 on first page (not accessible) vs later page (end of data)
- Rate limit and other error statuses
- Network failures
- Bearer token header
"""

from unittest.mock import Mock, patch

import pytest
import requests

from committagger.domain import RepositoryKey
from committagger.exceptions import GitHubAPIError, RateLimitError
from committagger.infra.github_client import GitHubClient, parse_next_link

SHA_A = "a" * 40
SHA_B = "b" * 40
KEY = RepositoryKey("octo", "hello")

NEXT = '<https://api.github.com/repositories/1/tags?per_page=100&page=2>; rel="next", ' \
       '<https://api.github.com/repositories/1/tags?per_page=100&page=5>; rel="last"'


def make_response(status=200, items=None, link=None, headers=None):
    response = Mock()
    response.status_code = status
    response.json.return_value = items if items is not None else []
    response.headers = dict(headers or {})
    if link:
        response.headers['Link'] = link
    return response


def tag(name, sha):
    return {"name": name, "commit": {"sha": sha, "url": "..."}}


class TestParseNextLink:

    def test_next_present(self):
        assert parse_next_link(NEXT).endswith("page=2")

    def test_only_last(self):
        assert parse_next_link('<https://x/tags?page=5>; rel="last"') is None

    def test_missing(self):
        assert parse_next_link(None) is None
        assert parse_next_link("") is None


class TestFetchAllTags:
    """Tests for GitHubClient.fetch_all_tags."""

    def test_single_page(self):
        client = GitHubClient()
        with patch.object(client.session, 'get',
                          return_value=make_response(items=[tag("v1.0", SHA_A)])) as mock_get:
            tag_map = client.fetch_all_tags(KEY)

        assert tag_map == {SHA_A: ["v1.0"]}
        url = mock_get.call_args[0][0]
        assert url == "https://api.github.com/repos/octo/hello/tags?per_page=100"

    def test_pagination_merges_pages(self):
        client = GitHubClient()
        pages = [
            make_response(items=[tag("v1.0", SHA_A)], link=NEXT),
            make_response(items=[tag("v1.1", SHA_B), tag("v1.0", SHA_A)]),
        ]
        with patch.object(client.session, 'get', side_effect=pages) as mock_get:
            tag_map = client.fetch_all_tags(KEY)

        assert tag_map == {SHA_A: ["v1.0"], SHA_B: ["v1.1"]}
        assert mock_get.call_count == 2
        assert mock_get.call_args_list[1][0][0].endswith("page=2")

    def test_several_tags_on_one_commit(self):
        client = GitHubClient()
        items = [tag("v2.0", SHA_A), tag("stable", SHA_A)]
        with patch.object(client.session, 'get', return_value=make_response(items=items)):
            assert client.fetch_all_tags(KEY) == {SHA_A: ["v2.0", "stable"]}

    def test_not_found_first_page_is_empty(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(status=404)):
            assert client.fetch_all_tags(KEY) == {}

    def test_not_found_later_page_keeps_accumulated(self):
        client = GitHubClient()
        pages = [
            make_response(items=[tag("v1.0", SHA_A)], link=NEXT),
            make_response(status=404),
        ]
        with patch.object(client.session, 'get', side_effect=pages):
            assert client.fetch_all_tags(KEY) == {SHA_A: ["v1.0"]}

    @pytest.mark.parametrize("status", [403, 429])
    def test_rate_limited_raises(self, status, caplog):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(status=status)):
            with pytest.raises(RateLimitError) as exc_info:
                client.fetch_all_tags(KEY)

        assert exc_info.value.status_code == status
        assert "Rate limited" in caplog.text

    def test_server_error_raises(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(status=500)):
            with pytest.raises(GitHubAPIError) as exc_info:
                client.fetch_all_tags(KEY)
        assert not isinstance(exc_info.value, RateLimitError)
        assert exc_info.value.status_code == 500

    def test_network_error_raises(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', side_effect=requests.ConnectionError("down")):
            with pytest.raises(GitHubAPIError):
                client.fetch_all_tags(KEY)

    def test_malformed_items_skipped(self):
        client = GitHubClient()
        items = [{"name": "v1.0"}, {"commit": {"sha": SHA_A}}, "junk", tag("v2.0", SHA_B)]
        with patch.object(client.session, 'get', return_value=make_response(items=items)):
            assert client.fetch_all_tags(KEY) == {SHA_B: ["v2.0"]}

    def test_page_ceiling(self):
        client = GitHubClient()
        endless = make_response(items=[tag("v1.0", SHA_A)], link=NEXT)
        with patch.object(client.session, 'get', return_value=endless) as mock_get:
            client.fetch_all_tags(KEY)
        assert mock_get.call_count == 50

    def test_rate_limit_headers_tracked(self):
        client = GitHubClient()
        headers = {
            'X-RateLimit-Remaining': '42',
            'X-RateLimit-Limit': '60',
            'X-RateLimit-Reset': '0',
            'X-RateLimit-Used': '18',
        }
        with patch.object(client.session, 'get', return_value=make_response(headers=headers)):
            client.fetch_all_tags(KEY)
        assert client.last_rate_limit.remaining == 42
        assert client.last_rate_limit.limit == 60


class TestAuthentication:

    def test_bearer_token(self):
        client = GitHubClient(token="ghp_secret")
        assert client.session.headers['Authorization'] == 'Bearer ghp_secret'

    def test_anonymous(self):
        client = GitHubClient()
        assert 'Authorization' not in client.session.headers

    def test_gh_cli_token(self):
        completed = Mock(returncode=0, stdout="gho_fromcli\n")
        with patch('committagger.infra.github_client.subprocess.run', return_value=completed):
            client = GitHubClient(use_gh_cli=True)
        assert client.token == "gho_fromcli"

    def test_gh_cli_missing(self):
        with patch('committagger.infra.github_client.subprocess.run', side_effect=FileNotFoundError):
            client = GitHubClient(use_gh_cli=True)
        assert client.token is None


class TestRateLimitStatus:

    def test_get_rate_limit_status(self):
        client = GitHubClient()
        body = {"resources": {"core": {"remaining": 10, "limit": 60, "reset": 0, "used": 50}}}
        with patch.object(client.session, 'get', return_value=make_response(items=body)):
            status = client.get_rate_limit_status()
        assert status.remaining == 10
        assert status.to_dict()["used"] == 50

    def test_get_rate_limit_status_error(self):
        client = GitHubClient()
        with patch.object(client.session, 'get', return_value=make_response(status=500)):
            with pytest.raises(GitHubAPIError):
                client.get_rate_limit_status()
