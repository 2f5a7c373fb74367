"""
Commit identifier resolution for committagger.

Matches requested identifiers (full or abbreviated) against a TagMap.
"""

from typing import Dict, Iterable, List, Optional

from .domain import (
    FULL_IDENTIFIER_LENGTH,
    TagMap,
    is_valid_identifier,
    normalize_identifier,
)


def find_full_identifier(tag_map: TagMap, identifier: str) -> Optional[str]:
    """
    Find the tag map key an identifier refers to.

    An exact key wins. Otherwise an abbreviated identifier matches the
    lexicographically smallest key it prefixes, so ambiguous prefixes
    always resolve the same way regardless of map order.

    Returns:
        Full identifier, or None if nothing matches
    """
    wanted = normalize_identifier(identifier)
    if not is_valid_identifier(wanted):
        return None
    if wanted in tag_map:
        return wanted
    if len(wanted) >= FULL_IDENTIFIER_LENGTH:
        return None

    matches = [full for full in tag_map if full.startswith(wanted)]
    return min(matches) if matches else None


def resolve_identifiers(tag_map: TagMap, identifiers: Iterable[str]) -> Dict[str, List[str]]:
    """
    Return the tags of each requested identifier that has any.

    Args:
        tag_map: Full tag map of the repository
        identifiers: Requested identifiers, in caller order

    Returns:
        Mapping of identifier (as requested) -> tag names. Identifiers that
        match nothing are omitted.

    Example:
        resolve_identifiers({"abc1234def...": ["v2.0"]}, ["abc1234"])
        -> {"abc1234": ["v2.0"]}
    """
    result: Dict[str, List[str]] = {}
    for identifier in identifiers:
        if identifier in result:
            continue
        full = find_full_identifier(tag_map, identifier)
        if full is not None:
            result[identifier] = list(tag_map[full])
    return result
