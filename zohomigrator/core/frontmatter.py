"""YAML frontmatter for converted notes."""

import re
from datetime import datetime, timezone
from typing import Optional, Union

from .models import Note
from .sanitize import NONSTANDARD_SPACES, escape_frontmatter_value

SOURCE_TAG = 'zoho-notebook'

_COMPACT_OFFSET = re.compile(r'([+-]\d{2})(\d{2})$')


def format_date(raw: Optional[Union[str, int, float]]) -> Optional[str]:
    """Format a raw Zoho timestamp as YYYY-MM-DD.

    Returns None for anything that does not parse, so callers can omit the
    field instead of writing an invalid date. Aware timestamps are reported
    as their UTC date.
    """
    if raw is None or raw == '':
        return None

    try:
        if isinstance(raw, str) and raw.strip().isdigit():
            raw = int(raw.strip())

        # Handle epoch timestamps (milliseconds when 13+ digits)
        if isinstance(raw, (int, float)):
            timestamp = raw / 1000 if raw > 1e12 else raw
            return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime('%Y-%m-%d')

        # Handle ISO format strings, including Zoho's +0530 style offsets
        value = raw.strip().replace('Z', '+00:00')
        value = _COMPACT_OFFSET.sub(r'\1:\2', value)
        dt = datetime.fromisoformat(value)
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc)
        return dt.strftime('%Y-%m-%d')
    except (ValueError, TypeError, OSError, OverflowError):
        return None


def slugify(text: str) -> str:
    """Make a tag-safe slug: lowercase ASCII letters, digits and single hyphens."""
    slug = (text or '').lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')


def build_frontmatter(note: Note) -> str:
    """Create the YAML header block (without a trailing newline)."""
    title = NONSTANDARD_SPACES.sub(' ', note.title or '')
    notebook = NONSTANDARD_SPACES.sub(' ', note.notebook or '')
    created = format_date(note.created_date)
    modified = format_date(note.modified_date)
    notebook_tag = slugify(notebook)

    lines = [
        '---',
        f'title: "{escape_frontmatter_value(title)}"',
        f'notebook: "{escape_frontmatter_value(notebook)}"',
    ]
    if created:
        lines.append(f'created: {created}')
    if modified:
        lines.append(f'modified: {modified}')

    lines.append('tags:')
    lines.append(f'  - {SOURCE_TAG}')
    if notebook_tag and notebook_tag != SOURCE_TAG:
        lines.append(f'  - {notebook_tag}')

    lines.append('aliases:')
    lines.append(f'  - "{escape_frontmatter_value(title)}"')
    lines.append(f'source: {SOURCE_TAG}')
    lines.append('---')

    return '\n'.join(lines)
