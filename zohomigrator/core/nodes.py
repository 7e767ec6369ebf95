"""Content tree node types and read-only helpers.

A parsed note body is a tree of two node kinds: ``TextNode`` holding a raw
string and ``ElementNode`` holding a lowercase tag name, an ordered
attribute mapping and ordered children. The implicit document root is an
``ElementNode`` whose tag is ``ROOT_TAG``.

Nodes compare by identity so they can be tracked in sets while a
container's siblings are being rendered. All helpers here walk the tree
with an explicit stack; a pathologically deep tree cannot exhaust the
interpreter's recursion limit through them.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Union

ROOT_TAG = '#root'


@dataclass(eq=False)
class TextNode:
    data: str = ''


@dataclass(eq=False)
class ElementNode:
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List['Node'] = field(default_factory=list)

    def get(self, name: str, default: str = '') -> str:
        value = self.attrs.get(name)
        return default if value is None else value

    def has_attr(self, name: str) -> bool:
        return name in self.attrs

    def __repr__(self) -> str:
        return f'ElementNode(tag={self.tag!r}, attrs={self.attrs!r}, children=<{len(self.children)}>)'


Node = Union[TextNode, ElementNode]


def is_element(node: Node, *tags: str) -> bool:
    """True when ``node`` is an element, optionally restricted to ``tags``."""
    if not isinstance(node, ElementNode):
        return False
    return not tags or node.tag in tags


def is_blank_text(node: Node) -> bool:
    return isinstance(node, TextNode) and not node.data.strip()


def meaningful_children(node: ElementNode) -> List[Node]:
    """Element children plus text children that hold non-whitespace."""
    return [c for c in node.children if isinstance(c, ElementNode) or c.data.strip()]


def iter_descendants(node: ElementNode) -> Iterator[Node]:
    """Yield every descendant of ``node`` in document order."""
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, ElementNode):
            stack.extend(reversed(current.children))

def get_text(node: Node) -> str:
    """Concatenated text content of ``node`` and all its descendants."""
    if isinstance(node, TextNode):
        return node.data
    return ''.join(d.data for d in iter_descendants(node) if isinstance(d, TextNode))

def find_by_tag(node: ElementNode, tag: str) -> List[ElementNode]:
    """Depth-first search for descendant elements named ``tag``."""
    return [d for d in iter_descendants(node) if isinstance(d, ElementNode) and d.tag == tag]
