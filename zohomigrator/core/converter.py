"""
Zoho Notebook to Obsidian Migration Converter

Converts a Zoho Notebook export (zip or extracted folder) to Obsidian
markdown files.
- Each notebook -> a folder named after the notebook
- Each note -> <notebook>/<title>.md with YAML frontmatter
- Images and attachments -> <attachments>/ referenced via ![[embeds]]
- Links between notes -> [[wikilinks]] resolved by note id
"""

import logging
import tempfile
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .exceptions import ConversionCancelled, ConversionError, ExportNotFoundError
from .extractor import FORMAT_ZNOTE, ExtractedInput, extract_input
from .models import ConversionProgress, ConversionResult, ConversionSettings, ConvertedNote, Note
from .names import build_name_map
from .parser import parse_html_export, parse_znote_export
from .renderer import convert_note
from .writer import NoteWriter

logger = logging.getLogger(__name__)


class ZohoToObsidian:
    def __init__(
        self,
        settings: ConversionSettings,
        progress_callback: Optional[Callable[[ConversionProgress], None]] = None,
        cancel_event: Optional[threading.Event] = None
    ):
        self.settings = settings
        self.progress_callback = progress_callback
        self.cancel_event = cancel_event

        # Initialize from settings
        self.input_path = Path(settings.input_path)
        self.output_dir = Path(settings.output_dir)

        # Internal state
        self.notes: List[Note] = []
        self.id_to_title: Dict[str, str] = {}  # note_id -> title (for internal links)
        self.converted: List[ConvertedNote] = []
        self.warnings: List[str] = []

    def report_progress(self, phase: str, current: int = 0, total: int = 0, message: str = ""):
        """Send progress update to GUI."""
        if self.progress_callback:
            self.progress_callback(ConversionProgress(phase, current, total, message))

    def check_cancelled(self):
        """Check if user requested cancellation."""
        if self.cancel_event and self.cancel_event.is_set():
            raise ConversionCancelled("Conversion cancelled by user")

    def load_notes(self, extracted: ExtractedInput, work_dir: Path):
        """Parse every note of the export into ``self.notes``."""
        if extracted.format == FORMAT_ZNOTE:
            self.report_progress("Parsing", message="Reading Znote notebooks...")
            self.notes = parse_znote_export(extracted.data_dir, work_dir)
        else:
            def on_file(idx: int, total: int):
                self.check_cancelled()
                if idx == 0:
                    self.report_progress("Parsing", 0, total, f"Found {total} notes")
                elif idx % 50 == 0:
                    self.report_progress("Parsing", idx, total, f"Parsing notes ({idx}/{total})")

            self.notes = parse_html_export(extracted.data_dir, on_file=on_file, warn=self.warn)

        if not self.notes:
            raise ExportNotFoundError("No notes found in the export.")

        self.report_progress("Parsing", len(self.notes), len(self.notes), f"Parsed {len(self.notes)} notes")

    def build_indices(self):
        """Build the note id -> title lookup used to resolve internal links."""
        self.id_to_title = {}
        for note in self.notes:
            if note.note_id:
                self.id_to_title[note.note_id] = note.title

    def convert_notes(self):
        """Convert every parsed note to markdown."""
        total = len(self.notes)
        self.converted = []
        for idx, note in enumerate(self.notes):
            self.check_cancelled()
            self.converted.append(
                convert_note(note, self.id_to_title, self.settings.attachments_folder)
            )
            if idx % 50 == 0:
                self.report_progress("Converting", idx, total, f"Converting notes ({idx}/{total})")
        self.report_progress("Converting", total, total, f"Converted {total} notes")

    def warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)

    def write_output(self):
        """Write notes and copy resources; returns the writer statistics."""
        name_map = build_name_map(self.notes)
        total = len(self.notes)
        writer = NoteWriter(
            self.output_dir,
            attachments_folder=self.settings.attachments_folder,
            skip_empty=self.settings.skip_empty,
            verbose=self.settings.verbose,
            check_cancelled=self.check_cancelled,
        )

        def on_note(idx: int, note: Note):
            if idx % 50 == 0:
                self.report_progress("Writing", idx, total, f"Writing notes ({idx}/{total})")

        return writer.write(self.notes, self.converted, name_map, on_note)

    def run(self) -> ConversionResult:
        """Main conversion process with progress reporting."""
        try:
            self.report_progress("Reading", message=f"Reading from {self.input_path}...")
            with extract_input(self.input_path) as extracted:
                self.check_cancelled()
                if extracted.format == FORMAT_ZNOTE:
                    self.report_progress("Reading", message="Using Znote format")

                # Znote archives are unpacked here; resources are copied from it while writing
                with tempfile.TemporaryDirectory(prefix='zoho-znote-') as work_dir:
                    self.load_notes(extracted, Path(work_dir))
                    self.check_cancelled()
                    self.build_indices()
                    self.convert_notes()
                    self.check_cancelled()
                    stats = self.write_output()

            result = ConversionResult(
                success=True,
                notes_total=stats.total,
                notes_written=stats.written,
                empty_notes=stats.empty,
                video_lost=stats.video_lost,
                images_copied=stats.images,
                files_copied=stats.files,
                audio_copied=stats.audio,
                notebooks_count=len(stats.notebooks),
                warnings=self.warnings + stats.warnings,
            )
            self.report_progress("Complete", stats.written, stats.total, "Conversion complete!")
            return result

        except ConversionCancelled:
            return ConversionResult(success=False, error_message="Conversion cancelled by user")
        except ConversionError as e:
            return ConversionResult(success=False, error_message=str(e), warnings=list(self.warnings))
        except Exception as e:
            logger.exception("Unexpected error during conversion")
            return ConversionResult(success=False, error_message=f"Unexpected error: {str(e)}")
