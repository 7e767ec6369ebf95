"""
Zoho note content tree -> Obsidian Markdown transducer.

The walker turns a parsed note body into Markdown text:
- Rich text (bold, italic, strike, underline, highlight, code) -> Markdown/Obsidian syntax
- Lists, including lists nested directly inside lists -> indented bullets
- Both checkbox shapes -> - [ ] / - [x] task lines
- Internal note links -> [[wikilinks]] resolved through an id -> title map
- Local images, links and resources -> ![[attachments/...]] embeds
- Tables -> pipe tables padded to the widest row

Unknown tags are never dropped: they recurse into their children.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterator, Mapping, Optional, Tuple

from .nodes import (
    ElementNode,
    Node,
    TextNode,
    get_text,
    is_blank_text,
    is_element,
    meaningful_children,
)
from .sanitize import NONSTANDARD_SPACES, normalize_filename

logger = logging.getLogger(__name__)

MAX_WALK_DEPTH = 64
LIST_INDENT = '    '

LIST_TAGS = ('ul', 'ol')
HEADING_RE = re.compile(r'^h([1-6])$')
TASK_LINE = re.compile(r'^- (\[[ x]\])')
BLOCK_TAGS = frozenset([
    'div', 'p', 'blockquote', 'pre', 'table', 'ul', 'ol', 'li', 'hr',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
])

NOTE_LINK_CLASSES = ('editor-note-link', 'rte-link')
INTERNAL_SCHEME = 'zohonotebook://'
INTERNAL_NOTE_ID = re.compile(r'zohonotebook://notes/(\w+)')
PLACEHOLDER_LINK_TEXT = 'link'

_URI_SCHEME = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')


def is_network_url(href: str) -> bool:
    return href.lower().startswith(('http://', 'https://', '//'))


def is_local_reference(href: str) -> bool:
    """True for relative file references: no URI scheme, no fragment, no network."""
    if not href or href.startswith('#') or href.startswith('//'):
        return False
    return not _URI_SCHEME.match(href)


def is_checkbox_input(node: Node) -> bool:
    return is_element(node, 'input') and node.get('type').lower() == 'checkbox'


def checkbox_line(checked: bool, label: str) -> str:
    return f"- [{'x' if checked else ' '}] {label}".rstrip() + '\n'


@dataclass(frozen=True)
class WalkContext:
    """Per-branch walk state, copied on descent rather than mutated."""
    list_depth: int = 0
    list_kind: Optional[str] = None  # 'ul', 'ol' or None outside lists
    depth: int = 0

    def descend(self) -> 'WalkContext':
        return replace(self, depth=self.depth + 1)

    def in_list(self, kind: str, nested: bool = False) -> 'WalkContext':
        return replace(self, list_kind=kind, list_depth=self.list_depth + (1 if nested else 0))


class MarkdownWalker:
    """Render a content tree as Markdown.

    ``id_to_title`` maps Zoho note ids to titles for internal link
    resolution; it is only read. ``attachments_root`` prefixes every embed.
    """

    def __init__(self, id_to_title: Optional[Mapping[str, str]] = None,
                 attachments_root: str = 'attachments'):
        self.id_to_title = id_to_title or {}
        self.attachments_root = attachments_root.strip('/')

        self._handlers: Dict[str, Callable[[ElementNode, WalkContext], str]] = {
            'br': lambda node, ctx: '\n',
            'hr': lambda node, ctx: '---\n\n',
            'div': self._render_div,
            'p': self._render_paragraph,
            'blockquote': self._render_blockquote,
            'pre': self._render_pre,
            'table': self._render_table,
            'ul': self._render_list,
            'ol': self._render_list,
            'li': self._render_list_item,
            'strong': self._wrapper('**', '**'),
            'b': self._wrapper('**', '**'),
            'em': self._wrapper('*', '*'),
            'i': self._wrapper('*', '*'),
            'u': self._wrapper('<u>', '</u>'),
            's': self._wrapper('~~', '~~'),
            'strike': self._wrapper('~~', '~~'),
            'del': self._wrapper('~~', '~~'),
            'mark': self._wrapper('==', '=='),
            'code': self._render_code,
            'span': self._render_span,
            'a': self._render_link,
            'img': self._render_image,
            'input': self._render_input,
            'checkbox': self._render_checkbox,
            'znresource': self._render_resource,
        }

    # --- Entry points ---

    def render(self, root: ElementNode) -> str:
        """Render a whole note body and normalize blank lines."""
        result = self.walk_children(root, WalkContext())
        result = re.sub(r'\n{3,}', '\n\n', result)
        return result.rstrip() + '\n'

    def embed(self, path: str) -> str:
        return f'![[{self.attachments_root}/{normalize_filename(path)}]]'

    def walk(self, node: Node, context: WalkContext) -> str:
        """Render one node. Total over node kinds and tag names."""
        if isinstance(node, TextNode):
            return NONSTANDARD_SPACES.sub(' ', node.data)

        if context.depth >= MAX_WALK_DEPTH:
            logger.debug("Walk depth limit reached at <%s>, rendering as plain text", node.tag)
            return NONSTANDARD_SPACES.sub(' ', get_text(node))

        context = context.descend()
        handler = self._handlers.get(node.tag)
        if handler is not None:
            return handler(node, context)

        heading = HEADING_RE.match(node.tag)
        if heading:
            return self._render_heading(node, context, int(heading.group(1)))

        # <content>, unknown tags, the root: recurse so nothing is lost
        return self.walk_children(node, context)

    def walk_children(self, node: ElementNode, context: WalkContext) -> str:
        return ''.join(text for _, text in self._iter_rendered(node.children, context))

    # --- Sibling iteration ---

    def _iter_rendered(self, children, context: WalkContext,
                       render: Optional[Callable[[Node, WalkContext], str]] = None
                       ) -> Iterator[Tuple[Node, str]]:
        """Yield ``(child, markdown)`` for each sibling that is not consumed.

        The consumed set is local to this sibling list: a checkbox marker
        claims the label that follows it and only that marker can skip it.
        """
        render = render or self.walk
        consumed = set()
        meaningful = [c for c in children if not is_blank_text(c)]
        last_meaningful = meaningful[-1] if meaningful else None

        for index, child in enumerate(children):
            if child in consumed:
                continue
            if is_checkbox_input(child):
                yield child, self._render_checkbox_pair(children, index, consumed, context)
            elif is_element(child, 'br'):
                # A trailing break is editor padding, not content
                yield child, '' if child is last_meaningful else '\n'
            else:
                yield child, render(child, context)

    def _render_checkbox_pair(self, children, index: int, consumed: set, context: WalkContext) -> str:
        marker = children[index]
        label = ''
        for sibling in children[index + 1:]:
            if is_blank_text(sibling):
                continue
            if isinstance(sibling, TextNode):
                label = NONSTANDARD_SPACES.sub(' ', sibling.data).strip()
                consumed.add(sibling)
            elif not is_checkbox_input(sibling) and not is_element(sibling, 'br', *BLOCK_TAGS):
                label = self.walk(sibling, context).strip()
                consumed.add(sibling)
            break
        return checkbox_line(marker.has_attr('checked'), label)

    # --- Block elements ---

    def _render_div(self, node: ElementNode, context: WalkContext) -> str:
        if 'checklist' in node.get('class'):
            return self.walk_children(node, context)

        children = meaningful_children(node)
        if not children:
            return ''
        if len(children) == 1:
            only = children[0]
            if is_element(only, 'br'):
                return ''
            if is_element(only, 'b', 'strong'):
                inner = meaningful_children(only)
                if not inner or (len(inner) == 1 and is_element(inner[0], 'br')):
                    return ''

        # Checklist lines stay tight: no paragraph spacing around them
        if any(is_checkbox_input(c) or is_element(c, 'checkbox') for c in children):
            return self.walk_children(node, context)

        if not any(is_element(c, *BLOCK_TAGS) for c in children):
            content = self.walk_children(node, context).strip()
            return content + '\n\n' if content else ''

        result = ''
        pending = ''
        for child, text in self._iter_rendered(node.children, context):
            if is_element(child, *BLOCK_TAGS):
                if pending.strip():
                    result += pending.strip() + '\n\n'
                pending = ''
                result += text
            else:
                pending += text
        if pending.strip():
            result += pending.strip() + '\n\n'
        return result

    def _render_paragraph(self, node: ElementNode, context: WalkContext) -> str:
        content = self.walk_children(node, context).strip()
        return content + '\n\n' if content else ''

    def _render_blockquote(self, node: ElementNode, context: WalkContext) -> str:
        inner = self.walk_children(node, context).strip()
        if not inner:
            return ''
        return '\n'.join(f'> {line}'.rstrip() for line in inner.split('\n')) + '\n\n'

    def _render_pre(self, node: ElementNode, context: WalkContext) -> str:
        text = NONSTANDARD_SPACES.sub(' ', get_text(node))
        return '```\n' + text.strip('\n') + '\n```\n\n'

    def _render_heading(self, node: ElementNode, context: WalkContext, level: int) -> str:
        inner = self.walk_children(node, context)
        if not inner.strip():
            return inner
        return '#' * level + ' ' + inner.strip() + '\n\n'

    # --- Lists ---

    def _render_list(self, node: ElementNode, context: WalkContext) -> str:
        return self._render_list_items(node, context.in_list(node.tag)) + '\n'

    def _render_list_items(self, node: ElementNode, context: WalkContext) -> str:
        if context.depth >= MAX_WALK_DEPTH:
            return NONSTANDARD_SPACES.sub(' ', get_text(node))
        result = ''
        children = [c for c in node.children if not is_blank_text(c)]
        for _, text in self._iter_rendered(children, context, self._render_list_child):
            result += text
        return result

    def _render_list_child(self, child: Node, context: WalkContext) -> str:
        # <ul><ul>..</ul></ul> is invalid markup but Zoho emits it for indentation
        if is_element(child, *LIST_TAGS):
            return self._render_list_items(child, context.descend().in_list(child.tag, nested=True))
        return self.walk(child, context)

    def _render_list_item(self, node: ElementNode, context: WalkContext) -> str:
        indent = LIST_INDENT * context.list_depth
        marker = '1. ' if context.list_kind == 'ol' else '- '

        content = ''
        sublist = ''
        for child, text in self._iter_rendered(node.children, context, self._render_item_child):
            if is_element(child, *LIST_TAGS):
                sublist += text
            else:
                content += text

        # A checkbox item already carries its own "- " marker
        content = TASK_LINE.sub(r'\1', content.strip(), count=1)
        return f'{indent}{marker}{content}\n{sublist}'

    def _render_item_child(self, child: Node, context: WalkContext) -> str:
        if is_element(child, *LIST_TAGS):
            return self._render_list_items(child, context.descend().in_list(child.tag, nested=True))
        if is_element(child, 'div', 'p'):
            # <li><div>text</div></li>: unwrap to the item text
            return self.walk_children(child, context.descend()).strip()
        return self.walk(child, context)

    # --- Inline elements ---

    def _wrapper(self, left: str, right: str) -> Callable[[ElementNode, WalkContext], str]:
        def render(node: ElementNode, context: WalkContext) -> str:
            return self._wrap(self.walk_children(node, context), left, right)
        return render

    @staticmethod
    def _wrap(inner: str, left: str, right: str) -> str:
        trimmed = inner.strip()
        if not trimmed:
            return inner
        # Markers must hug the text; surrounding spaces stay outside
        lead = inner[:len(inner) - len(inner.lstrip())]
        trail = inner[len(inner.rstrip()):]
        return f'{lead}{left}{trimmed}{right}{trail}'

    def _render_code(self, node: ElementNode, context: WalkContext) -> str:
        inner = self.walk_children(node, context)
        if not inner.strip():
            return inner
        return '`' + inner + '`'

    def _render_span(self, node: ElementNode, context: WalkContext) -> str:
        inner = self.walk_children(node, context)
        if 'highlight' in node.get('class'):
            return self._wrap(inner, '==', '==')
        # Color and font spans carry nothing Markdown can express
        return inner

    def _render_link(self, node: ElementNode, context: WalkContext) -> str:
        href = node.get('href').strip()
        classes = node.get('class')
        text = self.walk_children(node, context).strip()

        if text and any(cls in classes for cls in NOTE_LINK_CLASSES):
            return f'[[{text}]]'

        if href.startswith(INTERNAL_SCHEME):
            return self._render_internal_link(href, text)

        if is_local_reference(href):
            return self.embed(href)

        if not text or text == href:
            return href
        return f'[{text}]({href})'

    def _render_internal_link(self, href: str, text: str) -> str:
        is_placeholder = not text or text.lower() == PLACEHOLDER_LINK_TEXT

        match = INTERNAL_NOTE_ID.match(href)
        if match:
            title = self.id_to_title.get(match.group(1))
            if title:
                if is_placeholder or text == title:
                    return f'[[{title}]]'
                return f'[[{title}|{text}]]'

        if not is_placeholder:
            return f'[[{text}]]'

        logger.debug("Unresolved internal link: %s", href)
        safe_href = href.replace('-->', '--\u200b>')
        return f'<!-- zoho internal link (unresolved): {safe_href} -->'

    def _render_image(self, node: ElementNode, context: WalkContext) -> str:
        src = node.get('src').strip()
        if not src:
            return ''
        if is_network_url(src):
            return f'![]({src})'
        return self.embed(src)

    def _render_resource(self, node: ElementNode, context: WalkContext) -> str:
        # Inline resources embed the same way whatever their media type
        path = node.get('relative-path').strip()
        if not path:
            return self.walk_children(node, context)
        return self.embed(path)

    def _render_input(self, node: ElementNode, context: WalkContext) -> str:
        # Checkbox markers are paired with their label while iterating siblings
        if is_checkbox_input(node):
            return checkbox_line(node.has_attr('checked'), '')
        return ''

    def _render_checkbox(self, node: ElementNode, context: WalkContext) -> str:
        state = node.attrs.get('checked')
        checked = state is not None and state.strip().lower() not in ('false', '0', 'no')
        return checkbox_line(checked, self.walk_children(node, context).strip())

    # --- Tables ---

    def _render_table(self, node: ElementNode, context: WalkContext) -> str:
        rows = []
        for row in self._table_rows(node):
            cells = []
            for cell in row.children:
                if not is_element(cell, 'td', 'th'):
                    continue
                text = self.walk_children(cell, context.descend()).strip()
                text = re.sub(r'\s*\n\s*', ' ', text).replace('|', '\\|')
                cells.append(text)
            rows.append(cells)

        if not rows:
            return ''

        col_count = max(len(r) for r in rows)
        if col_count == 0:
            return ''

        result = ''
        for index, row in enumerate(rows):
            row = row + [''] * (col_count - len(row))
            result += '| ' + ' | '.join(row) + ' |\n'
            if index == 0:
                result += '| ' + ' | '.join(['---'] * col_count) + ' |\n'
        return result + '\n'

    @staticmethod
    def _table_rows(table: ElementNode):
        """Direct rows of ``table``, including those of its own row groups."""
        for child in table.children:
            if is_element(child, 'tr'):
                yield child
            elif is_element(child, 'thead', 'tbody', 'tfoot'):
                for row in child.children:
                    if is_element(row, 'tr'):
                        yield row
