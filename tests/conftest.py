"""Shared fixtures: notes built from content HTML and small on-disk exports."""

import json
import shutil
import tarfile
from pathlib import Path
from typing import Dict, Optional

import pytest
from bs4 import BeautifulSoup

from zohomigrator.core.models import Note
from zohomigrator.core.parser import collect_resources, find_content_root, preprocess_znote_html

FIXTURES_DIR = Path(__file__).parent / "fixtures"
EXPORT_ID = "60040376304"


def note_from_html(content_html: str, **overrides) -> Note:
    """Parse content markup the way the Znote parser does and wrap it in a Note."""
    soup = BeautifulSoup(preprocess_znote_html(content_html), 'html.parser')
    content = find_content_root(soup, soup)
    images, attachments = collect_resources(content)

    fields = dict(
        source_file='test.znote',
        note_id='test123',
        notebook='Test Notebook',
        title='Test Note',
        color='#FEBF59',
        created_date='2024-01-15T10:00:00+0530',
        modified_date='2024-06-20T14:30:00+0530',
        content=content,
        images=images,
        attachments=attachments,
    )
    fields.update(overrides)
    return Note(**fields)


@pytest.fixture
def make_note():
    """Factory fixture returning ``note_from_html``."""
    return note_from_html


ZNEL_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<ZNote>
<ZTitle>{title}</ZTitle>
<ZNoteColor>#FEBF59</ZNoteColor>
<ZCreatedDate>{created}</ZCreatedDate>
<ZModifiedDate>{modified}</ZModifiedDate>
<ZNoteType>{note_type}</ZNoteType>
<ZContent><![CDATA[{content}]]></ZContent>
</ZNote>
"""


def write_znote(notebook_dir: Path, note_id: str, content: str = '<content><div>Hello</div></content>',
                title: str = 'Znote Note', created: str = '2024-02-10T09:00:00+0000',
                modified: str = '2024-02-11T09:00:00+0000', note_type: str = 'note/text',
                resources: Optional[Dict[str, bytes]] = None) -> Path:
    """Pack a Note.znel envelope plus resource files into <note_id>.znote."""
    staging = notebook_dir / f'.staging-{note_id}' / note_id
    staging.mkdir(parents=True)
    znel = ZNEL_TEMPLATE.format(title=title, created=created, modified=modified,
                                note_type=note_type, content=content)
    (staging / 'Note.znel').write_text(znel, encoding='utf-8')
    for name, data in (resources or {}).items():
        (staging / name).parent.mkdir(parents=True, exist_ok=True)
        (staging / name).write_bytes(data)

    znote_path = notebook_dir / f'{note_id}.znote'
    with tarfile.open(znote_path, 'w') as tar:
        tar.add(staging, arcname=note_id)
    shutil.rmtree(staging.parent)
    return znote_path


def write_notebook(export_dir: Path, folder: str, name: str) -> Path:
    """Create a notebook folder with its meta.json."""
    notebook_dir = export_dir / folder
    notebook_dir.mkdir(parents=True)
    meta = {'data_type': 'NOTEBOOK', 'name': name}
    (notebook_dir / 'meta.json').write_text(json.dumps(meta), encoding='utf-8')
    return notebook_dir


@pytest.fixture
def html_export(tmp_path):
    """The HTML fixtures laid out like a real export, resources included."""
    data_dir = tmp_path / 'export' / EXPORT_ID
    shutil.copytree(FIXTURES_DIR, data_dir)
    # A second copy of simple-note acts as the target of the internal link fixture
    shutil.copyfile(FIXTURES_DIR / 'simple-note.html', data_dir / 'gsgjktest123.html')
    (data_dir / 'gsgjkphoto456.png').write_bytes(b'\x89PNG fake')
    (data_dir / 'gsgjkfile789.zip').write_bytes(b'PK fake')
    (data_dir / 'gsgjkaudio012').write_bytes(b'fake audio')
    return data_dir
