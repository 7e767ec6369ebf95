"""Locate the note files of a Zoho Notebook export (zip archive or folder)."""

import logging
import re
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import ExportNotFoundError, FileAccessError, UnsafeArchiveError

logger = logging.getLogger(__name__)

FORMAT_HTML = 'html'
FORMAT_ZNOTE = 'znote'

_EXPORT_ID = re.compile(r'^\d+$')


@dataclass
class ExtractedInput:
    """Where the export's notes live and how to clean up afterwards."""
    data_dir: Path
    format: str
    temp_dir: Optional[Path] = None

    def cleanup(self):
        if self.temp_dir is not None:
            shutil.rmtree(self.temp_dir, ignore_errors=True)
            self.temp_dir = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()


def has_html_files(directory: Path) -> bool:
    return any(p.name != 'index.html' for p in directory.glob('*.html'))


def has_znote_files(directory: Path) -> bool:
    """Znote exports hold notebook folders with a meta.json each."""
    return any(p.is_dir() and (p / 'meta.json').exists() for p in directory.iterdir())


def has_note_files(directory: Path) -> bool:
    return has_html_files(directory) or has_znote_files(directory)


def detect_format(data_dir: Path) -> str:
    """Return 'znote' when notebook folders exist, 'html' otherwise."""
    if has_znote_files(data_dir):
        if has_html_files(data_dir):
            logger.warning("Both HTML and Znote files found. Using Znote format (richer metadata).")
        return FORMAT_ZNOTE
    return FORMAT_HTML


def find_data_dir(base_dir: Path) -> Path:
    """Find the directory holding the note files.

    Zoho nests exports in a numbered folder (the export id), sometimes
    under one more wrapper folder.
    """
    if has_note_files(base_dir):
        return base_dir

    subdirs = sorted(p for p in base_dir.iterdir() if p.is_dir())
    for subdir in subdirs:
        if _EXPORT_ID.match(subdir.name) and has_note_files(subdir):
            return subdir

    for subdir in subdirs:
        for deep_dir in sorted(p for p in subdir.iterdir() if p.is_dir()):
            if _EXPORT_ID.match(deep_dir.name) and has_note_files(deep_dir):
                return deep_dir

    raise ExportNotFoundError(
        "No Zoho Notebook export files found. Expected HTML files or Znote folders "
        "(typically inside a numbered subfolder like 60040376304/)."
    )


def check_zip_entries(archive: zipfile.ZipFile, target: Path):
    """Refuse entries that would land outside ``target``."""
    base = target.resolve()
    for name in archive.namelist():
        if '\x00' in name:
            raise UnsafeArchiveError("ZIP entry name contains null byte")
        destination = (base / name).resolve()
        if destination != base and base not in destination.parents:
            raise UnsafeArchiveError(f'ZIP entry "{name}" would extract outside temp directory')


def extract_zip(zip_path: Path) -> ExtractedInput:
    temp_dir = Path(tempfile.mkdtemp(prefix='zoho-notebook-to-obsidian-'))
    try:
        with zipfile.ZipFile(zip_path) as archive:
            check_zip_entries(archive, temp_dir)
            archive.extractall(temp_dir)
        data_dir = find_data_dir(temp_dir)
        return ExtractedInput(data_dir, detect_format(data_dir), temp_dir)
    except zipfile.BadZipFile as e:
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise FileAccessError(f"Invalid zip file: {e}")
    except BaseException:
        shutil.rmtree(temp_dir, ignore_errors=True)
        raise


def extract_input(input_path: Path) -> ExtractedInput:
    """Resolve a .zip file or an extracted export folder to its data directory."""
    resolved = Path(input_path).resolve()

    if not resolved.exists():
        raise FileAccessError(f"Input path does not exist: {input_path}")

    if resolved.is_file() and resolved.suffix.lower() == '.zip':
        return extract_zip(resolved)

    if resolved.is_dir():
        data_dir = find_data_dir(resolved)
        return ExtractedInput(data_dir, detect_format(data_dir))

    raise FileAccessError(f"Input must be a .zip file or directory: {input_path}")
