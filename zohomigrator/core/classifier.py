"""Card type detection from a note's content shape and declared type.

Zoho marks special cards (photo, file, audio, video, bookmark) mostly by
the shape of the exported content rather than by a reliable type field.
The rules below are evaluated in order and the first match wins; shapes
overlap, so the order is part of the behaviour. Anything that matches no
rule is rich text.
"""

import posixpath
import re
from typing import Callable, List, Optional

from .models import CardDecision, CardType, Note
from .nodes import ElementNode, Node, find_by_tag, get_text, is_element, meaningful_children
from .sanitize import normalize_filename
from .walker import INTERNAL_SCHEME, NOTE_LINK_CLASSES, is_local_reference, is_network_url

VIDEO_EXTENSIONS = ('.webm', '.mp4', '.mov', '.avi', '.mkv')


def declared_kind(note: Note) -> str:
    """Last segment of the declared note type: 'note/bookmark' -> 'bookmark'."""
    return (note.note_type or '').strip().lower().rsplit('/', 1)[-1]


def _consumer_tags(consumers: str) -> List[str]:
    return [token.rsplit('.', 1)[-1] for token in re.split(r'[,\s]+', consumers.lower()) if token]


def _is_blank(note: Note, children: List[Node]) -> bool:
    return not children and not get_text(note.content).strip()


def _single_element(children: List[Node], tag: str) -> Optional[ElementNode]:
    if len(children) == 1 and is_element(children[0], tag):
        return children[0]
    return None


def _video_lost(note: Note, children: List[Node]) -> Optional[CardDecision]:
    if not _is_blank(note, children):
        return None
    if note.title.lower().endswith(VIDEO_EXTENSIONS) or declared_kind(note) == 'video':
        return CardDecision(CardType.VIDEO_LOST, text=note.title)
    return None


def _empty(note: Note, children: List[Node]) -> Optional[CardDecision]:
    if _is_blank(note, children):
        return CardDecision(CardType.EMPTY)
    return None


def _media_embed(note: Note, children: List[Node]) -> Optional[CardDecision]:
    image = _single_element(children, 'img')
    if image is None:
        return None
    src = image.get('src').strip()
    if not src or is_network_url(src):
        return None
    return CardDecision(CardType.MEDIA_EMBED, path=src)


def _resource_card(note: Note, children: List[Node]) -> Optional[CardDecision]:
    resource = _single_element(children, 'znresource')
    if resource is None:
        return None
    path = resource.get('relative-path').strip()
    if not path:
        return None

    media_type = resource.get('type').strip().lower()
    consumers = resource.get('consumers')
    tags = _consumer_tags(consumers)

    if media_type.startswith('audio/') or 'audio' in tags or declared_kind(note) == 'audio':
        kind = 'audio'
    elif 'file' in tags:
        kind = 'file'
    else:
        # Images and sketches arriving as resources embed without a prefix
        kind = ''

    return CardDecision(CardType.RESOURCE_EMBED, path=path, media_type=media_type,
                        consumers=consumers, attachment_kind=kind)


def _link_bookmark(note: Note, children: List[Node]) -> Optional[CardDecision]:
    if declared_kind(note) != 'bookmark':
        return None
    for link in find_by_tag(note.content, 'a'):
        href = link.get('href').strip()
        if not href:
            continue
        text = get_text(link).strip()
        # Only a pure bookmark; any other content goes through rich text
        if get_text(note.content).strip() != text:
            return None
        return CardDecision(CardType.LINK_BOOKMARK, href=href, text=text or note.title)
    return None


def _legacy_link_resource(note: Note, children: List[Node]) -> Optional[CardDecision]:
    link = _single_element(children, 'a')
    if link is None:
        return None
    href = link.get('href').strip()
    if href.startswith(INTERNAL_SCHEME) or not is_local_reference(href):
        return None
    if any(cls in link.get('class') for cls in NOTE_LINK_CLASSES):
        return None

    # HTML exports strip the extension from audio recordings
    has_extension = bool(posixpath.splitext(normalize_filename(href))[1])
    return CardDecision(CardType.RESOURCE_EMBED, path=href,
                        attachment_kind='file' if has_extension else 'audio')


CARD_RULES: List[Callable[[Note, List[Node]], Optional[CardDecision]]] = [
    _video_lost,
    _empty,
    _media_embed,
    _resource_card,
    _link_bookmark,
    _legacy_link_resource,
]


def classify_card(note: Note) -> CardDecision:
    """Pick the rendering strategy for ``note``; rich text when nothing else fits."""
    children = meaningful_children(note.content)
    for rule in CARD_RULES:
        decision = rule(note, children)
        if decision is not None:
            return decision
    return CardDecision(CardType.RICH_TEXT)
