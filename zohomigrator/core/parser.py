"""
Zoho Notebook export parsing.

Reads both export flavours into ``Note`` objects:
- HTML export: one <note>.html per note, metadata in JSON data attributes
- Znote export: notebook folders with meta.json and one tar archive
  (.znote) per note holding a Note.znel XML envelope plus its resources
"""

import json
import logging
import re
import tarfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup, CData, Comment, Declaration, Doctype, NavigableString, ProcessingInstruction, Tag

from .exceptions import UnsafeArchiveError
from .models import Note
from .nodes import ROOT_TAG, ElementNode, TextNode, find_by_tag, is_element, meaningful_children

logger = logging.getLogger(__name__)

SKIPPED_STRINGS = (Comment, CData, Declaration, Doctype, ProcessingInstruction)

# Attribute values may contain '>' inside quotes
_ATTRS = r'''((?:\s(?:[^>"']|"[^"]*"|'[^']*')*?)?)'''
_SELF_CLOSING = [
    (re.compile(r'<znresource' + _ATTRS + r'\s*/>'), r'<znresource\1></znresource>'),
    (re.compile(r'<checkbox' + _ATTRS + r'\s*/>'), r'<checkbox\1></checkbox>'),
]


def parse_json_attr(value: Optional[str]) -> dict:
    """Parse a JSON data attribute; anything unparsable counts as absent."""
    if not value:
        return {}
    try:
        data = json.loads(value)
    except (ValueError, TypeError):
        return {}
    return data if isinstance(data, dict) else {}


def preprocess_znote_html(html: str) -> str:
    """Expand self-closing <znresource/> and <checkbox/> into open/close pairs.

    HTML parsers treat unknown self-closing tags as unclosed, which would
    make them swallow the following siblings.
    """
    for pattern, replacement in _SELF_CLOSING:
        html = pattern.sub(replacement, html)
    return html


def _attrs(tag: Tag) -> dict:
    attrs = {}
    for name, value in tag.attrs.items():
        # bs4 returns multi-valued attributes such as class as lists
        if isinstance(value, (list, tuple)):
            value = ' '.join(value)
        attrs[name.lower()] = '' if value is None else str(value)
    return attrs


def to_content_tree(source: Tag) -> ElementNode:
    """Copy the children of a bs4 element into a fresh content tree root."""
    root = ElementNode(ROOT_TAG)
    stack = [(source, root)]
    while stack:
        element, target = stack.pop()
        for child in element.children:
            if isinstance(child, Tag):
                node = ElementNode(child.name.lower(), _attrs(child))
                target.children.append(node)
                stack.append((child, node))
            elif isinstance(child, SKIPPED_STRINGS):
                continue
            elif isinstance(child, NavigableString):
                target.children.append(TextNode(str(child)))
    return root


def find_content_root(soup: BeautifulSoup, fallback: Tag) -> ElementNode:
    """Content tree of the first <content> element, unwrapping <content><content>."""
    content = soup.find('content')
    if content is None:
        return to_content_tree(fallback)

    tree = to_content_tree(content)
    children = meaningful_children(tree)
    if len(children) == 1 and is_element(children[0], 'content'):
        nested = children[0]
        tree = ElementNode(ROOT_TAG, children=nested.children)
    return tree


def collect_resources(content: ElementNode) -> Tuple[List[str], List[str]]:
    """Referenced (images, attachments) in document order."""
    images = []
    attachments = []

    for resource in find_by_tag(content, 'znresource'):
        relative_path = resource.get('relative-path')
        if not relative_path:
            continue
        media_type = resource.get('type')
        if media_type.startswith('image/') or 'sketch' in resource.get('consumers'):
            images.append(relative_path)
        else:
            attachments.append(relative_path)

    for image in find_by_tag(content, 'img'):
        src = image.get('src')
        if src and not src.startswith('http'):
            images.append(src)

    # href="#" (used by note-link anchors) is kept here on purpose; the
    # writer reports it as missing rather than dropping it silently
    for link in find_by_tag(content, 'a'):
        href = link.get('href')
        if href and not href.startswith(('http', 'zohonotebook://', 'mailto:')):
            attachments.append(href)

    return images, attachments


def parse_html_note(html_path: Path, data_dir: Optional[Path] = None) -> Note:
    """Parse one HTML export file into a Note."""
    html_path = Path(html_path)
    html = html_path.read_text(encoding='utf-8', errors='replace')
    soup = BeautifulSoup(html, 'html.parser')

    body = soup.body
    title_tag = soup.title
    page_title = title_tag.get_text().strip() if title_tag else ''

    notebook_data = parse_json_attr(body.get('data-notebook') if body else None)
    notecard_data = parse_json_attr(body.get('data-notecard') if body else None)

    content = find_content_root(soup, body or soup)
    images, attachments = collect_resources(content)

    return Note(
        source_file=html_path.name,
        note_id=html_path.stem,
        notebook=notebook_data.get('name') or 'Uncategorized',
        title=notecard_data.get('name') or page_title or 'Untitled',
        color=notecard_data.get('color'),
        created_date=notecard_data.get('created_date') or notebook_data.get('created_date'),
        modified_date=notecard_data.get('modified_date') or notebook_data.get('modified_date'),
        note_type=notecard_data.get('type'),
        content=content,
        images=images,
        attachments=attachments,
        attachment_dir=data_dir or html_path.parent,
    )


def find_html_notes(data_dir: Path) -> List[Path]:
    return sorted(p for p in Path(data_dir).glob('*.html') if p.name != 'index.html')


def parse_html_export(data_dir: Path,
                      on_file: Optional[Callable[[int, int], None]] = None,
                      warn: Optional[Callable[[str], None]] = None) -> List[Note]:
    """Parse every note file of an HTML export directory.

    ``on_file(index, total)`` runs before each file, so callers can report
    progress or raise to stop. Unreadable files go to ``warn`` and are skipped.
    """
    html_files = find_html_notes(data_dir)
    total = len(html_files)
    notes = []
    for index, html_path in enumerate(html_files):
        if on_file:
            on_file(index, total)
        try:
            notes.append(parse_html_note(html_path, data_dir))
        except OSError as e:
            message = f"Could not read {html_path.name}: {e}"
            if warn:
                warn(message)
            else:
                logger.warning(message)
    return notes


# --- Znote format ---

def read_meta_json(meta_path: Path) -> Optional[dict]:
    try:
        with open(meta_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not parse %s: %s", meta_path, e)
        return None
    return data if isinstance(data, dict) else None


def check_tar_members(tar: tarfile.TarFile, target: Path):
    """Refuse archives with absolute, escaping, link or device members."""
    base = target.resolve()
    for member in tar.getmembers():
        if '\x00' in member.name:
            raise UnsafeArchiveError(f"Archive member name contains null byte: {member.name!r}")
        if not (member.isfile() or member.isdir()):
            raise UnsafeArchiveError(f"Archive member is not a regular file: {member.name}")
        destination = (base / member.name).resolve()
        if destination != base and base not in destination.parents:
            raise UnsafeArchiveError(f"Archive member would extract outside target: {member.name}")


def _xml_text(root: ET.Element, tag: str) -> Optional[str]:
    element = root.find(f'.//{tag}')
    if element is None or element.text is None:
        return None
    return element.text.strip() or None


def parse_znote(znote_path: Path, notebook_meta: dict, work_dir: Path) -> Optional[Note]:
    """Extract and parse a single .znote archive. Returns None when it is unusable."""
    znote_path = Path(znote_path)
    note_id = znote_path.name[:-len('.znote')]

    if note_id in ('', '.', '..') or '/' in note_id or '\\' in note_id:
        logger.warning("Suspicious note ID %r in %s, skipping", note_id, znote_path.name)
        return None

    extract_dir = Path(work_dir) / note_id
    extract_dir.mkdir(parents=True, exist_ok=True)
    with tarfile.open(znote_path) as tar:
        check_tar_members(tar, extract_dir)
        tar.extractall(extract_dir, filter='data')

    note_dir = extract_dir / note_id
    znel_path = note_dir / 'Note.znel'
    if not znel_path.is_file():
        logger.warning("No Note.znel found in %s", znote_path.name)
        return None

    envelope = ET.fromstring(znel_path.read_bytes())
    content_html = ''
    content_element = envelope.find('.//ZContent')
    if content_element is not None and content_element.text:
        content_html = content_element.text

    soup = BeautifulSoup(preprocess_znote_html(content_html), 'html.parser')
    content = find_content_root(soup, soup)
    images, attachments = collect_resources(content)

    return Note(
        source_file=znote_path.name,
        note_id=note_id,
        notebook=notebook_meta.get('name') or 'Uncategorized',
        title=_xml_text(envelope, 'ZTitle') or 'Untitled',
        color=_xml_text(envelope, 'ZNoteColor'),
        created_date=_xml_text(envelope, 'ZCreatedDate'),
        modified_date=_xml_text(envelope, 'ZModifiedDate'),
        note_type=_xml_text(envelope, 'ZNoteType'),
        content=content,
        images=images,
        attachments=attachments,
        attachment_dir=note_dir,
    )


def parse_znote_export(data_dir: Path, work_dir: Path) -> List[Note]:
    """Parse every notebook folder of a Znote export.

    Archives are extracted below ``work_dir``, which must outlive the
    returned notes because their resources are copied from there. Corrupt
    or unsafe archives are skipped with a warning.
    """
    notes = []
    for notebook_dir in sorted(Path(data_dir).iterdir()):
        if not notebook_dir.is_dir():
            continue
        meta_path = notebook_dir / 'meta.json'
        if not meta_path.exists():
            continue

        meta = read_meta_json(meta_path)
        if not meta or meta.get('data_type') != 'NOTEBOOK':
            continue

        for znote_path in sorted(notebook_dir.glob('*.znote')):
            try:
                note = parse_znote(znote_path, meta, work_dir)
            except (tarfile.TarError, UnsafeArchiveError, ET.ParseError, OSError) as e:
                logger.warning("Skipping unreadable note %s: %s", znote_path.name, e)
                continue
            if note:
                notes.append(note)

    return notes
