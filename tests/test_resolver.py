"""Tests for commit identifier resolution."""

import pytest

from committagger.resolver import find_full_identifier, resolve_identifiers

SHA_1 = "abc1234" + "0" * 33
SHA_2 = "abc1234" + "f" * 33
SHA_3 = "def5678" + "1" * 33

TAG_MAP = {
    SHA_2: ["v2.0"],
    SHA_1: ["v1.0", "stable"],
    SHA_3: ["v3.0"],
}


class TestFindFullIdentifier:

    def test_exact(self):
        assert find_full_identifier(TAG_MAP, SHA_3) == SHA_3

    def test_exact_case_insensitive(self):
        assert find_full_identifier(TAG_MAP, SHA_3.upper()) == SHA_3

    def test_unique_prefix(self):
        assert find_full_identifier(TAG_MAP, "def5678") == SHA_3

    def test_ambiguous_prefix_picks_smallest_key(self):
        """Map insertion order does not affect which key wins."""
        assert find_full_identifier(TAG_MAP, "abc1234") == SHA_1
        reordered = dict(reversed(list(TAG_MAP.items())))
        assert find_full_identifier(reordered, "abc1234") == SHA_1

    def test_longer_prefix_disambiguates(self):
        assert find_full_identifier(TAG_MAP, "abc1234f") == SHA_2

    @pytest.mark.parametrize("identifier", ["abc123", "zzzzzzz", "", "0" * 40, "abc1234" + "0" * 34])
    def test_no_match(self, identifier):
        assert find_full_identifier(TAG_MAP, identifier) is None


class TestResolveIdentifiers:
    """Tests for resolve_identifiers."""

    def test_mixed_request(self):
        result = resolve_identifiers(TAG_MAP, ["def5678", SHA_1, "1234567"])
        assert result == {"def5678": ["v3.0"], SHA_1: ["v1.0", "stable"]}

    def test_keys_are_as_requested(self):
        result = resolve_identifiers(TAG_MAP, ["DEF5678"])
        assert list(result) == ["DEF5678"]

    def test_empty_map(self):
        assert resolve_identifiers({}, ["abc1234"]) == {}

    def test_empty_request(self):
        assert resolve_identifiers(TAG_MAP, []) == {}

    def test_result_is_subset(self):
        requested = ["abc1234", "def5678", "9999999", SHA_2]
        result = resolve_identifiers(TAG_MAP, requested)
        assert set(result) <= set(requested)
        for tags in result.values():
            assert tags in TAG_MAP.values()

    def test_result_lists_are_copies(self):
        result = resolve_identifiers(TAG_MAP, [SHA_3])
        result[SHA_3].append("mutated")
        assert TAG_MAP[SHA_3] == ["v3.0"]
