"""Output locations for converted notes: notebook folder plus unique filename."""

from dataclasses import dataclass
from typing import Dict, List

from .models import Note
from .sanitize import FALLBACK_FILENAME, sanitize_filename, to_folder_name


@dataclass(frozen=True)
class NoteLocation:
    folder: str
    filename: str


def build_name_map(notes: List[Note]) -> Dict[int, NoteLocation]:
    """Map each note index to its notebook folder and a unique .md filename.

    Within a folder notes are numbered in creation order, so the oldest
    keeps the plain title and later duplicates become "Title 2", "Title 3".
    Duplicates are matched case-insensitively since common filesystems are.
    """
    by_folder: Dict[str, List[int]] = {}
    for index, note in enumerate(notes):
        by_folder.setdefault(to_folder_name(note.notebook), []).append(index)

    name_map = {}
    for folder, indices in by_folder.items():
        indices.sort(key=lambda i: str(notes[i].created_date or ''))

        title_counts: Dict[str, int] = {}
        used = set()
        for index in indices:
            base_title = sanitize_filename(notes[index].title or FALLBACK_FILENAME)
            key = base_title.casefold()
            count = title_counts.get(key, 0)

            filename = f"{base_title}.md" if count == 0 else f"{base_title} {count + 1}.md"
            # A literal "Title 2" may already have taken the generated name
            while filename.casefold() in used:
                count += 1
                filename = f"{base_title} {count + 1}.md"

            title_counts[key] = count + 1
            used.add(filename.casefold())
            name_map[index] = NoteLocation(folder, filename)

    return name_map
