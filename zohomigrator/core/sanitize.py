"""Pure string sanitizers and the path boundary guard.

Everything derived from export data that ends up as a folder name, a file
name, a YAML scalar or a copy destination passes through here first.
"""

import logging
import re
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

# U+00A0 no-break space and U+202F narrow no-break space, both emitted by
# Zoho in titles and generated screenshot names.
NONSTANDARD_SPACES = re.compile('[\u00a0\u202f]')

ILLEGAL_CHARS = re.compile(r'[/\\:*?"<>|]')
CONTROL_CHARS = re.compile('[\x00-\x1f\x7f-\x9f\ud800-\udfff]')
LINE_SEPARATORS = re.compile('[\u2028\u2029]')

RESERVED_NAMES = frozenset(
    ['CON', 'PRN', 'AUX', 'NUL']
    + [f'COM{i}' for i in range(1, 10)]
    + [f'LPT{i}' for i in range(1, 10)]
)

MAX_FILENAME_BYTES = 200
FALLBACK_FILENAME = 'Untitled'
FALLBACK_FOLDER = 'uncategorized'

PathLike = Union[str, Path]


def normalize_filename(name: str) -> str:
    """Fold non-standard spaces in a resource path to ordinary spaces."""
    return NONSTANDARD_SPACES.sub(' ', name)


def to_folder_name(notebook: str) -> str:
    """Turn a notebook name into a lowercase, hyphenated folder name.

    Every dot is removed so neither ``.`` nor ``..`` (nor any longer run of
    dots) can survive as a path segment.
    """
    name = NONSTANDARD_SPACES.sub(' ', notebook or '').lower()
    name = CONTROL_CHARS.sub(' ', name)
    name = ILLEGAL_CHARS.sub('', name)
    name = name.replace('.', '')
    name = re.sub(r'\s+', '-', name)
    name = re.sub(r'-+', '-', name)
    name = name.strip('-')
    return name or FALLBACK_FOLDER


def truncate_utf8(text: str, max_bytes: int) -> str:
    """Cut ``text`` to at most ``max_bytes`` UTF-8 bytes on a character boundary."""
    encoded = text.encode('utf-8')
    if len(encoded) <= max_bytes:
        return text
    # A cut through a multi-byte sequence leaves a partial tail; drop it.
    return encoded[:max_bytes].decode('utf-8', errors='ignore')


def sanitize_filename(title: str) -> str:
    """Create a safe file base name (without extension) from a note title."""
    name = NONSTANDARD_SPACES.sub(' ', title or '')
    name = LINE_SEPARATORS.sub(' ', name)
    name = CONTROL_CHARS.sub('', name)
    name = ILLEGAL_CHARS.sub('', name)
    name = name.strip()

    stem = name.split('.', 1)[0].rstrip()
    if stem.upper() in RESERVED_NAMES:
        name = '_' + name

    name = truncate_utf8(name, MAX_FILENAME_BYTES).rstrip()
    return name or FALLBACK_FILENAME


def escape_frontmatter_value(text: str) -> str:
    """Escape a value for use inside a double-quoted YAML scalar.

    The result holds no unescaped ``"``, no raw control character and no raw
    line terminator, so it cannot close the scalar or start a new key.
    """
    text = (text or '').replace('\\', '\\\\').replace('"', '\\"')
    text = text.replace('\x00', '')
    text = re.sub('[\u0085\u2028\u2029]', r'\\n', text)
    text = re.sub('[\x01-\x09\x0b\x0c\x0e-\x1f\x7f-\x9f\ud800-\udfff]', '', text)
    return text.replace('\n', '\\n').replace('\r', '\\r')


def is_within(base: PathLike, target: PathLike) -> bool:
    """True when ``target`` resolves strictly inside ``base`` (never equal to it)."""
    if '\x00' in str(base) or '\x00' in str(target):
        return False
    base_path = Path(base).resolve()
    target_path = Path(target).resolve()
    return target_path != base_path and base_path in target_path.parents


def is_safe_copy(src_base: PathLike, relative_path: str, dest_base: PathLike, dest_name: str) -> bool:
    """Decide whether copying ``src_base/relative_path`` to ``dest_base/dest_name`` is allowed.

    Both ends must resolve strictly inside their base directory and the
    source entry must not be a symbolic link, wherever it points.
    """
    if not relative_path or not dest_name:
        return False
    if '\x00' in relative_path or '\x00' in dest_name:
        logger.warning("Refusing path with embedded NUL byte: %r", relative_path)
        return False

    source = Path(src_base) / relative_path
    if source.is_symlink():
        logger.warning("Refusing to copy symbolic link: %s", relative_path)
        return False
    if not is_within(src_base, source):
        logger.warning("Skipping file outside source directory: %s", relative_path)
        return False
    if not is_within(dest_base, Path(dest_base) / dest_name):
        logger.warning("Skipping file outside attachments directory: %s", dest_name)
        return False
    return True
