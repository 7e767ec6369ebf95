"""Write converted notes and their referenced resources into the vault."""

import logging
import posixpath
import shutil
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .exceptions import FileAccessError
from .models import CardType, ConvertedNote, Note, WriteStats
from .names import NoteLocation
from .sanitize import is_safe_copy, is_within, normalize_filename

logger = logging.getLogger(__name__)


class NoteWriter:
    """Writes markdown files per notebook folder and copies attachments once.

    Every resource path comes from the export, so each copy goes through
    ``is_safe_copy`` and each notebook folder through ``is_within`` before
    anything touches the disk.
    """

    def __init__(self, output_dir: Path, attachments_folder: str = "attachments",
                 skip_empty: bool = False, verbose: bool = False,
                 check_cancelled: Optional[Callable[[], None]] = None):
        self.output_dir = Path(output_dir).resolve()
        self.attachments_dir = self.output_dir / attachments_folder
        self.skip_empty = skip_empty
        self.verbose = verbose
        self.check_cancelled = check_cancelled

        self.stats = WriteStats()
        self._copied = set()  # destination names already copied
        self._failed = set()  # resource paths already reported

    def warn(self, message: str):
        logger.warning(message)
        self.stats.warnings.append(message)

    def prepare(self):
        """Create the output and attachments directories."""
        if not is_within(self.output_dir, self.attachments_dir):
            raise FileAccessError(
                f"Attachments folder must be inside the output directory: {self.attachments_dir}"
            )
        try:
            self.attachments_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileAccessError(f"Cannot create output directory {self.output_dir}: {e}")

    def write(self, notes: List[Note], converted: List[ConvertedNote],
              name_map: Dict[int, NoteLocation],
              on_note: Optional[Callable[[int, Note], None]] = None) -> WriteStats:
        """Write every note; returns the collected statistics."""
        self.prepare()
        self.stats.total = len(notes)

        for index, note in enumerate(notes):
            if self.check_cancelled:
                self.check_cancelled()
            if on_note:
                on_note(index, note)
            self.write_note(note, converted[index], name_map[index])

        return self.stats

    def write_note(self, note: Note, result: ConvertedNote, location: NoteLocation):
        self.stats.notebooks.add(location.folder)
        is_empty = not result.body.strip()

        if self.skip_empty and is_empty:
            self.stats.empty += 1
            if self.verbose:
                logger.info("SKIP (empty): %s", note.title)
            return

        if is_empty:
            self.stats.empty += 1
        if result.card_type == CardType.VIDEO_LOST:
            self.stats.video_lost += 1

        folder_path = self.output_dir / location.folder
        if not is_within(self.output_dir, folder_path):
            self.warn(f'SKIP: notebook folder "{location.folder}" would escape output directory')
            return
        folder_path.mkdir(parents=True, exist_ok=True)

        file_path = folder_path / location.filename
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(result.markdown)
        self.stats.written += 1

        if self.verbose:
            logger.info("%s/%s", location.folder, location.filename)

        source_dir = note.attachment_dir
        if source_dir is None:
            return

        for image in result.images:
            if self.copy_resource(source_dir, image):
                self.stats.images += 1

        for attachment in result.attachments:
            if self.copy_resource(source_dir, attachment):
                # HTML exports drop the extension of audio recordings
                if posixpath.splitext(normalize_filename(attachment))[1]:
                    self.stats.files += 1
                else:
                    self.stats.audio += 1

    def copy_resource(self, source_dir: Path, relative_path: str) -> bool:
        """Copy one resource into the attachments folder.

        Returns True only for a fresh copy; repeats and refusals return False.
        """
        dest_name = normalize_filename(relative_path)
        if dest_name in self._copied or relative_path in self._failed:
            return False

        if not is_safe_copy(source_dir, relative_path, self.attachments_dir, dest_name):
            self._failed.add(relative_path)
            self.stats.warnings.append(f"Skipped unsafe resource path: {relative_path}")
            return False

        source = Path(source_dir) / relative_path
        if not source.is_file():
            self._failed.add(relative_path)
            self.warn(f"File not found: {relative_path}")
            return False

        destination = self.attachments_dir / dest_name
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as e:
            self._failed.add(relative_path)
            self.warn(f"Could not copy {relative_path}: {e}")
            return False

        self._copied.add(dest_name)
        return True
