"""Data classes for notes, configuration and results."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .nodes import ElementNode, ROOT_TAG


class CardType(Enum):
    """Rendering strategy chosen for a note by the card classifier."""
    VIDEO_LOST = 'video-lost'
    EMPTY = 'empty'
    MEDIA_EMBED = 'media-embed'
    RESOURCE_EMBED = 'resource-embed'
    LINK_BOOKMARK = 'link-bookmark'
    RICH_TEXT = 'rich-text'


@dataclass
class Note:
    """One convertible note: metadata plus its parsed content tree."""
    source_file: str
    notebook: str = 'Uncategorized'
    title: str = 'Untitled'
    note_id: Optional[str] = None
    color: Optional[str] = None
    created_date: Optional[str] = None  # raw, parsed leniently by the frontmatter builder
    modified_date: Optional[str] = None
    note_type: Optional[str] = None  # e.g. 'note/image', 'note/bookmark'
    content: ElementNode = field(default_factory=lambda: ElementNode(ROOT_TAG))
    images: List[str] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)
    attachment_dir: Optional[Path] = None  # base directory of relative resource paths


@dataclass
class CardDecision:
    """Card type plus whatever the chosen card renderer needs."""
    card_type: CardType
    path: Optional[str] = None
    media_type: str = ''
    consumers: str = ''
    href: Optional[str] = None
    text: str = ''
    attachment_kind: str = ''  # 'audio', 'file' or '' for a bare embed


@dataclass
class ConvertedNote:
    """Markdown output for one note, frontmatter and body kept apart."""
    frontmatter: str
    body: str
    card_type: CardType = CardType.RICH_TEXT
    images: List[str] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)

    @property
    def markdown(self) -> str:
        return self.frontmatter + '\n' + self.body


@dataclass
class ConversionSettings:
    """User-configurable conversion options."""
    input_path: Path
    output_dir: Path

    skip_empty: bool = False  # Do not write notes with an empty body
    verbose: bool = False  # Report every written file
    attachments_folder: str = "attachments"  # Subfolder for copied images/files


@dataclass
class ConversionProgress:
    """Progress update sent to the GUI or CLI."""
    phase: str  # e.g., "Reading", "Parsing", "Converting", "Writing"
    current: int = 0
    total: int = 0
    message: str = ""


@dataclass
class WriteStats:
    """Counters collected while writing notes and copying resources."""
    total: int = 0
    written: int = 0
    empty: int = 0
    video_lost: int = 0
    images: int = 0
    files: int = 0
    audio: int = 0
    notebooks: set = field(default_factory=set)
    warnings: List[str] = field(default_factory=list)


@dataclass
class ConversionResult:
    """Final result of conversion."""
    success: bool
    notes_total: int = 0
    notes_written: int = 0
    empty_notes: int = 0
    video_lost: int = 0
    images_copied: int = 0
    files_copied: int = 0
    audio_copied: int = 0
    notebooks_count: int = 0
    warnings: List[str] = field(default_factory=list)
    error_message: str = ""

    def summary(self) -> str:
        """One-line human summary of what was converted and copied."""
        parts = [f"Converted {self.notes_total} notes"]
        if self.empty_notes > 0:
            parts.append(f"{self.empty_notes} empty")
        if self.video_lost > 0:
            parts.append(f"{self.video_lost} video lost")
        parts.append(f"across {self.notebooks_count} notebooks")

        file_parts = []
        if self.images_copied > 0:
            file_parts.append(f"{self.images_copied} images")
        if self.files_copied > 0:
            file_parts.append(f"{self.files_copied} files")
        if self.audio_copied > 0:
            file_parts.append(f"{self.audio_copied} audio")

        text = ', '.join(parts) + '.'
        if file_parts:
            text += ' ' + ', '.join(file_parts) + ' copied.'
        return text
