"""
Minimal HTML document tree for committagger.

Listing pages only need a handful of queries (anchors by href, script
payloads, ancestor walks), so a small element tree built on the standard
library's HTMLParser is enough.
"""

from html.parser import HTMLParser
from typing import Callable, Dict, Iterator, List, Optional

# Elements that never have content or an end tag
VOID_ELEMENTS = frozenset({
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'link', 'meta', 'param', 'source', 'track', 'wbr',
})


class Element:
    """A node in the parsed document."""

    __slots__ = ('tag', 'attrs', 'children', 'parent', '_text')

    def __init__(self, tag: str, attrs: Optional[Dict[str, str]] = None,
                 parent: Optional['Element'] = None):
        self.tag = tag
        self.attrs = attrs or {}
        self.children: List['Element'] = []
        self.parent = parent
        self._text: List[str] = []

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(name, default)

    @property
    def text(self) -> str:
        """Concatenated text of this element and its descendants."""
        parts = list(self._text)
        for child in self.children:
            parts.append(child.text)
        return ''.join(parts)

    def iter(self) -> Iterator['Element']:
        """Depth-first iteration over descendants in document order (self excluded)."""
        for child in self.children:
            yield child
            yield from child.iter()

    def find_all(self, tag: Optional[str] = None,
                 predicate: Optional[Callable[['Element'], bool]] = None) -> List['Element']:
        return [
            el for el in self.iter()
            if (tag is None or el.tag == tag) and (predicate is None or predicate(el))
        ]

    def find(self, tag: Optional[str] = None,
             predicate: Optional[Callable[['Element'], bool]] = None) -> Optional['Element']:
        for el in self.iter():
            if (tag is None or el.tag == tag) and (predicate is None or predicate(el)):
                return el
        return None

    def ancestors(self) -> Iterator['Element']:
        """Parents from nearest to the document root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, {self.attrs!r})"


class _TreeBuilder(HTMLParser):

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = Element('#document')
        self._current = self.root

    def handle_starttag(self, tag, attrs):
        element = Element(tag, {k: (v or '') for k, v in attrs}, parent=self._current)
        self._current.children.append(element)
        if tag not in VOID_ELEMENTS:
            self._current = element

    def handle_startendtag(self, tag, attrs):
        element = Element(tag, {k: (v or '') for k, v in attrs}, parent=self._current)
        self._current.children.append(element)

    def handle_endtag(self, tag):
        # Close up to the nearest open element with this tag; stray end tags are ignored
        node = self._current
        while node is not None and node is not self.root:
            if node.tag == tag:
                self._current = node.parent or self.root
                return
            node = node.parent

    def handle_data(self, data):
        self._current._text.append(data)


def parse_html(html: str) -> Element:
    """
    Parse an HTML string into an element tree.

    Never raises on malformed markup; unclosed elements are closed at EOF.

    Returns:
        The document root element (tag '#document')
    """
    builder = _TreeBuilder()
    builder.feed(html or '')
    builder.close()
    return builder.root
