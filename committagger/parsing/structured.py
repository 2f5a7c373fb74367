"""
Structured-data extraction for tags listing pages.

GitHub pages may embed their data as JSON inside
<script type="application/json" data-target="react-app.embeddedData">.
The layout of that payload has changed over time, so a small, ordered set of
shape matchers is tried. Each matcher is total: it never raises and returns
zero or more TagEntry objects.
"""

import json
import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from ..domain import TagEntry, is_valid_identifier, normalize_identifier
from .document import Element

logger = logging.getLogger(__name__)

# Field aliases, in lookup order. Dotted names descend into nested objects.
NAME_FIELDS = ('name', 'tagName', 'tag_name')
IDENTIFIER_FIELDS = (
    'sha', 'oid', 'commitOid', 'commit_sha',
    'commit.sha', 'commit.oid', 'target.oid', 'target.target.oid',
)

FLAT_ARRAY_PATHS = (
    ('payload', 'tags'),
    ('payload', 'refs'),
    ('payload', 'tagsAndReleases'),
    ('tags',),
    ('refs',),
)

GRAPH_CONNECTION_PATHS = (
    ('data', 'repository', 'refs'),
    ('payload', 'repository', 'refs'),
    ('repository', 'refs'),
    ('refs',),
)


def _dig(data: Any, path: Sequence[str]) -> Any:
    """Follow a key path through nested dicts; None when any step is missing."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _first_field(item: dict, fields: Iterable[str]) -> Optional[str]:
    for dotted in fields:
        value = _dig(item, dotted.split('.'))
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def normalize_record(item: Any) -> Optional[TagEntry]:
    """
    Turn one payload record into a TagEntry.

    Returns:
        TagEntry, or None if the name or identifier is missing or invalid
    """
    if not isinstance(item, dict):
        return None
    name = _first_field(item, NAME_FIELDS)
    identifier = _first_field(item, IDENTIFIER_FIELDS)
    if not name or not identifier or not is_valid_identifier(identifier):
        return None
    return TagEntry(name=name, identifier=normalize_identifier(identifier))


def _normalize_all(items: Any) -> List[TagEntry]:
    if not isinstance(items, list):
        return []
    entries = []
    for item in items:
        entry = normalize_record(item)
        if entry is not None:
            entries.append(entry)
    return entries


def match_flat_arrays(payload: Any) -> List[TagEntry]:
    """Shape 1: plain arrays of tag/ref records."""
    for path in FLAT_ARRAY_PATHS:
        entries = _normalize_all(_dig(payload, path))
        if entries:
            return entries
    return []


def match_graph_edges(payload: Any) -> List[TagEntry]:
    """Shape 2: GraphQL-style connection with edges[].node."""
    for path in GRAPH_CONNECTION_PATHS:
        edges = _dig(payload, path + ('edges',))
        if not isinstance(edges, list):
            continue
        entries = _normalize_all([edge.get('node') for edge in edges if isinstance(edge, dict)])
        if entries:
            return entries
    return []


def match_graph_nodes(payload: Any) -> List[TagEntry]:
    """Shape 3: GraphQL-style connection with a flat nodes[] list."""
    for path in GRAPH_CONNECTION_PATHS:
        entries = _normalize_all(_dig(payload, path + ('nodes',)))
        if entries:
            return entries
    return []


SHAPE_MATCHERS: Tuple[Callable[[Any], List[TagEntry]], ...] = (
    match_flat_arrays,
    match_graph_edges,
    match_graph_nodes,
)


def _is_json_script(el: Element) -> bool:
    return el.get('type', '').lower() == 'application/json'


def find_embedded_payloads(document: Element) -> List[Any]:
    """
    Parse every JSON script payload of the document.

    Payloads marked as embedded data come first. Unparsable scripts are
    skipped.
    """
    scripts = document.find_all('script', _is_json_script)
    scripts.sort(key=lambda el: 0 if 'embeddeddata' in el.get('data-target', '').lower() else 1)

    payloads = []
    for script in scripts:
        raw = script.text.strip()
        if not raw:
            continue
        try:
            payloads.append(json.loads(raw))
        except ValueError as e:
            logger.debug(f"Skipping unparsable embedded JSON: {e}")
    return payloads


def extract_structured_entries(document: Element) -> List[TagEntry]:
    """
    Extract tag entries from the embedded JSON payload of a listing page.

    Returns:
        Entries from the first payload/matcher combination that yields any,
        or [] when there is no usable payload
    """
    for payload in find_embedded_payloads(document):
        for matcher in SHAPE_MATCHERS:
            entries = matcher(payload)
            if entries:
                logger.debug(f"{matcher.__name__} matched {len(entries)} entries")
                return _dedupe(entries)
    return []


def structured_next_cursor(document: Element) -> Optional[str]:
    """
    Find a pagination cursor in a graph-shaped payload.

    Returns:
        pageInfo.endCursor when pageInfo.hasNextPage is true, else None
    """
    for payload in find_embedded_payloads(document):
        for path in GRAPH_CONNECTION_PATHS:
            page_info = _dig(payload, path + ('pageInfo',))
            if isinstance(page_info, dict) and page_info.get('hasNextPage'):
                cursor = page_info.get('endCursor')
                if isinstance(cursor, str) and cursor:
                    return cursor
    return None


def _dedupe(entries: List[TagEntry]) -> List[TagEntry]:
    seen = set()
    result = []
    for entry in entries:
        if entry not in seen:
            seen.add(entry)
            result.append(entry)
    return result
