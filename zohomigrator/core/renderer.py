"""Turn one parsed note into frontmatter plus a Markdown body."""

import posixpath
from typing import Mapping, Optional

from .classifier import classify_card
from .frontmatter import build_frontmatter
from .models import CardDecision, CardType, ConvertedNote, Note
from .sanitize import normalize_filename
from .walker import MarkdownWalker

VIDEO_LOST_TEMPLATE = (
    '> **Warning**: Video content was not included in Zoho\'s export. '
    'The original file "{title}" could not be recovered.\n'
)
AUDIO_EXTENSION_ADVISORY = (
    '> **Note**: Audio file exported without extension. '
    'You may need to rename it (likely .m4a or .webm).\n'
)
ATTACHMENT_PREFIXES = {
    'audio': 'Attached audio: ',
    'file': 'Attached file: ',
}


def render_card(decision: CardDecision, note: Note, walker: MarkdownWalker) -> str:
    """Render a note body according to its card decision."""
    card_type = decision.card_type

    if card_type == CardType.VIDEO_LOST:
        return VIDEO_LOST_TEMPLATE.format(title=decision.text)

    if card_type == CardType.EMPTY:
        return ''

    if card_type == CardType.MEDIA_EMBED:
        return walker.embed(decision.path) + '\n'

    if card_type == CardType.RESOURCE_EMBED:
        prefix = ATTACHMENT_PREFIXES.get(decision.attachment_kind, '')
        body = prefix + walker.embed(decision.path) + '\n'
        # Only extensionless audio needs renaming; a .m4a recording plays as is
        if decision.attachment_kind == 'audio' and not posixpath.splitext(normalize_filename(decision.path))[1]:
            body += '\n' + AUDIO_EXTENSION_ADVISORY
        return body

    if card_type == CardType.LINK_BOOKMARK:
        return f'[{decision.text}]({decision.href})\n'

    return walker.render(note.content)


def convert_note(note: Note, id_to_title: Optional[Mapping[str, str]] = None,
                 attachments_root: str = 'attachments') -> ConvertedNote:
    """Convert a note to Markdown.

    ``id_to_title`` must already hold every note of the batch; links to ids
    missing from it render as unresolved.
    """
    walker = MarkdownWalker(id_to_title, attachments_root)
    decision = classify_card(note)

    return ConvertedNote(
        frontmatter=build_frontmatter(note),
        body=render_card(decision, note, walker),
        card_type=decision.card_type,
        images=list(note.images),
        attachments=list(note.attachments),
    )
