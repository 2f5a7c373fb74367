"""Tests for ListingPageClient and the page-context bridge."""

import asyncio
import json
import time
from unittest.mock import Mock, patch

import pytest
import requests

from committagger.domain import RepositoryKey
from committagger.exceptions import PageFetchError
from committagger.infra.page_bridge import BridgeResponse, PageContextBridge
from committagger.infra.page_client import ListingPageClient

SHA_A = "a" * 40
SHA_B = "b" * 40
KEY = RepositoryKey("octo", "hello")


def page(status=200, text=""):
    return Mock(status_code=status, text=text)


def scraped_page(rows, next_href=None):
    html = ''.join(
        f'<div><a href="/octo/hello/releases/tag/{name}">{name}</a>'
        f'<a href="/octo/hello/commit/{sha}">c</a></div>'
        for name, sha in rows
    )
    if next_href:
        html += f'<div class="pagination"><a rel="next" href="{next_href}">Next</a></div>'
    return page(text=html)


def structured_page(tags, cursor=None):
    refs = {"nodes": [{"name": name, "target": {"oid": sha}} for name, sha in tags]}
    if cursor:
        refs["pageInfo"] = {"hasNextPage": True, "endCursor": cursor}
    payload = json.dumps({"data": {"repository": {"refs": refs}}})
    return page(text=(
        '<script type="application/json" data-target="react-app.embeddedData">'
        f'{payload}</script>'
    ))


class TestListingPageClient:
    """Tests for ListingPageClient.fetch_all_tags."""

    def test_session_cookie_set(self):
        client = ListingPageClient(session_cookie="s3cret")
        assert client.session.cookies.get('user_session', domain='github.com') == "s3cret"

    def test_scraped_single_page(self):
        client = ListingPageClient()
        with patch.object(client.session, 'get',
                          return_value=scraped_page([("v1.0", SHA_A)])) as mock_get:
            assert client.fetch_all_tags(KEY) == {SHA_A: ["v1.0"]}
        assert mock_get.call_args[0][0] == "https://github.com/octo/hello/tags"

    def test_follows_next_link(self):
        client = ListingPageClient()
        pages = [
            scraped_page([("v2.0", SHA_B)], next_href="/octo/hello/tags?after=v2.0"),
            scraped_page([("v1.0", SHA_A)]),
        ]
        with patch.object(client.session, 'get', side_effect=pages) as mock_get:
            tag_map = client.fetch_all_tags(KEY)

        assert tag_map == {SHA_B: ["v2.0"], SHA_A: ["v1.0"]}
        assert mock_get.call_args_list[1][0][0] == "https://github.com/octo/hello/tags?after=v2.0"

    def test_follows_structured_cursor(self):
        client = ListingPageClient()
        pages = [
            structured_page([("v2.0", SHA_B)], cursor="djIuMA"),
            structured_page([("v1.0", SHA_A)]),
        ]
        with patch.object(client.session, 'get', side_effect=pages) as mock_get:
            tag_map = client.fetch_all_tags(KEY)

        assert tag_map == {SHA_B: ["v2.0"], SHA_A: ["v1.0"]}
        assert mock_get.call_args_list[1][0][0].endswith("/octo/hello/tags?after=djIuMA")

    def test_stops_on_empty_page(self):
        client = ListingPageClient()
        pages = [
            scraped_page([("v1.0", SHA_A)], next_href="/octo/hello/tags?after=v1.0"),
            page(text="<p>No tags</p>"),
        ]
        with patch.object(client.session, 'get', side_effect=pages) as mock_get:
            assert client.fetch_all_tags(KEY) == {SHA_A: ["v1.0"]}
        assert mock_get.call_count == 2

    def test_max_pages(self):
        client = ListingPageClient(max_pages=3)
        endless = scraped_page([("v1.0", SHA_A)], next_href="/octo/hello/tags?after=x")
        with patch.object(client.session, 'get', return_value=endless) as mock_get:
            client.fetch_all_tags(KEY)
        assert mock_get.call_count == 3

    def test_first_page_error_raises(self):
        client = ListingPageClient()
        with patch.object(client.session, 'get', return_value=page(status=404)):
            with pytest.raises(PageFetchError) as exc_info:
                client.fetch_all_tags(KEY)
        assert exc_info.value.status_code == 404

    def test_first_page_network_error_raises(self):
        client = ListingPageClient()
        with patch.object(client.session, 'get', side_effect=requests.ConnectionError("down")):
            with pytest.raises(PageFetchError):
                client.fetch_all_tags(KEY)

    def test_later_page_error_keeps_accumulated(self):
        client = ListingPageClient()
        pages = [
            scraped_page([("v1.0", SHA_A)], next_href="/octo/hello/tags?after=v1.0"),
            page(status=500),
        ]
        with patch.object(client.session, 'get', side_effect=pages):
            assert client.fetch_all_tags(KEY) == {SHA_A: ["v1.0"]}

    def test_commit_identifiers(self):
        client = ListingPageClient()
        html = f'<a href="/octo/hello/commit/{SHA_A}">x</a><a href="/octo/hello/commit/{SHA_B}">y</a>'
        with patch.object(client.session, 'get', return_value=page(text=html)) as mock_get:
            assert client.fetch_commit_identifiers(KEY, ref="release/1.x") == [SHA_A, SHA_B]
        assert mock_get.call_args[0][0] == "https://github.com/octo/hello/commits/release%2F1.x"

    def test_commit_identifiers_error(self):
        client = ListingPageClient()
        with patch.object(client.session, 'get', return_value=page(status=403)):
            with pytest.raises(PageFetchError):
                client.fetch_commit_identifiers(KEY)


class FakePageClient:
    def __init__(self, result=None, delay=0.0, error=None):
        self.result = result if result is not None else {}
        self.delay = delay
        self.error = error
        self.calls = []

    def fetch_all_tags(self, key):
        self.calls.append(key)
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


def run_bridge(client, timeout=1.0, keys=(KEY,)):
    async def scenario():
        bridge = PageContextBridge(client, timeout=timeout)
        try:
            return [await bridge.fetch_tags(key) for key in keys], bridge
        finally:
            await bridge.close()
    return asyncio.run(scenario())


class TestPageContextBridge:
    """Tests for PageContextBridge request/response handling."""

    def test_success(self):
        client = FakePageClient(result={SHA_A: ["v1.0"]})
        results, bridge = run_bridge(client)
        assert results == [{SHA_A: ["v1.0"]}]
        assert client.calls == [KEY]
        assert bridge._pending == {}

    def test_empty_success_is_empty_map(self):
        results, _ = run_bridge(FakePageClient(result={}))
        assert results == [{}]

    def test_failure_is_none(self, caplog):
        results, _ = run_bridge(FakePageClient(error=PageFetchError("HTTP 500")))
        assert results == [None]
        assert "Page context fetch failed" in caplog.text

    def test_timeout_is_none(self, caplog):
        client = FakePageClient(result={SHA_A: ["v1.0"]}, delay=0.3)
        results, bridge = run_bridge(client, timeout=0.05)
        assert results == [None]
        assert "timed out" in caplog.text
        assert bridge._pending == {}

    def test_sequential_requests_are_correlated(self):
        other = RepositoryKey("octo", "other")

        class PerRepoClient(FakePageClient):
            def fetch_all_tags(self, key):
                self.calls.append(key)
                return {SHA_A: [key.name]}

        results, _ = run_bridge(PerRepoClient(), keys=(KEY, other))
        assert results == [{SHA_A: ["hello"]}, {SHA_A: ["other"]}]

    def test_unknown_response_dropped(self):
        bridge = PageContextBridge(FakePageClient())
        bridge._deliver(BridgeResponse("not-a-request", True, {SHA_A: ["v1.0"]}))
        assert bridge._pending == {}
