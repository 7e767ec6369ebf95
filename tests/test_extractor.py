"""Tests for locating the export inside a zip archive or folder."""

import logging
import tempfile
import zipfile

import pytest

from conftest import write_notebook, write_znote
from zohomigrator.core.exceptions import ExportNotFoundError, FileAccessError, UnsafeArchiveError
from zohomigrator.core.extractor import (
    FORMAT_HTML,
    FORMAT_ZNOTE,
    detect_format,
    extract_input,
    find_data_dir,
    has_html_files,
)


def write_html(directory, name='note.html'):
    directory.mkdir(parents=True, exist_ok=True)
    (directory / name).write_text('<html><body><content>x</content></body></html>', encoding='utf-8')


class TestFindDataDir:
    """Tests for finding the folder that holds the notes."""

    def test_notes_at_top_level(self, tmp_path):
        write_html(tmp_path)
        assert find_data_dir(tmp_path) == tmp_path

    def test_numbered_subfolder(self, tmp_path):
        write_html(tmp_path / '60040376304')
        assert find_data_dir(tmp_path) == tmp_path / '60040376304'

    def test_numbered_subfolder_one_level_deeper(self, tmp_path):
        write_html(tmp_path / 'Zoho Notebook Export' / '60040376304')
        assert find_data_dir(tmp_path) == tmp_path / 'Zoho Notebook Export' / '60040376304'

    def test_znote_notebooks_found(self, tmp_path):
        write_notebook(tmp_path / '123', 'nb', 'Work')
        assert find_data_dir(tmp_path) == tmp_path / '123'

    def test_unnumbered_subfolder_ignored(self, tmp_path):
        write_html(tmp_path / 'notes')
        with pytest.raises(ExportNotFoundError):
            find_data_dir(tmp_path)

    def test_index_alone_is_not_an_export(self, tmp_path):
        write_html(tmp_path, 'index.html')
        assert not has_html_files(tmp_path)
        with pytest.raises(ExportNotFoundError) as exc_info:
            find_data_dir(tmp_path)
        assert "No Zoho Notebook export files found" in str(exc_info.value)


class TestDetectFormat:
    """Tests for choosing between the HTML and Znote readers."""

    def test_html(self, tmp_path):
        write_html(tmp_path)
        assert detect_format(tmp_path) == FORMAT_HTML

    def test_znote(self, tmp_path):
        write_notebook(tmp_path, 'nb', 'Work')
        assert detect_format(tmp_path) == FORMAT_ZNOTE

    def test_both_prefers_znote_with_warning(self, tmp_path, caplog):
        write_html(tmp_path)
        write_notebook(tmp_path, 'nb', 'Work')
        with caplog.at_level(logging.WARNING):
            assert detect_format(tmp_path) == FORMAT_ZNOTE
        assert 'Both HTML and Znote files found' in caplog.text


class TestExtractInput:
    """Tests for resolving the user's input path."""

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileAccessError) as exc_info:
            extract_input(tmp_path / 'nope.zip')
        assert "does not exist" in str(exc_info.value)

    def test_unsupported_file(self, tmp_path):
        path = tmp_path / 'export.txt'
        path.write_text('x')
        with pytest.raises(FileAccessError) as exc_info:
            extract_input(path)
        assert ".zip file or directory" in str(exc_info.value)

    def test_folder_used_in_place(self, tmp_path):
        write_html(tmp_path / '123')
        with extract_input(tmp_path) as extracted:
            assert extracted.data_dir == (tmp_path / '123').resolve()
            assert extracted.format == FORMAT_HTML
            assert extracted.temp_dir is None
        assert (tmp_path / '123' / 'note.html').exists()

    def test_zip_extracted_and_cleaned_up(self, tmp_path):
        export = tmp_path / 'export'
        write_znote(write_notebook(export / '123', 'nb', 'Work'), 'n1')
        zip_path = tmp_path / 'export.ZIP'
        with zipfile.ZipFile(zip_path, 'w') as archive:
            for path in sorted(export.rglob('*')):
                archive.write(path, path.relative_to(export).as_posix())

        with extract_input(zip_path) as extracted:
            temp_dir = extracted.temp_dir
            assert extracted.format == FORMAT_ZNOTE
            assert extracted.data_dir == temp_dir / '123'
            assert (extracted.data_dir / 'nb' / 'n1.znote').is_file()
        assert not temp_dir.exists()

    def test_invalid_zip(self, tmp_path):
        path = tmp_path / 'broken.zip'
        path.write_bytes(b'not a zip at all')
        with pytest.raises(FileAccessError) as exc_info:
            extract_input(path)
        assert "Invalid zip file" in str(exc_info.value)

    def test_traversal_entry_rejected_before_extraction(self, tmp_path, monkeypatch):
        target = tmp_path / 'unpack'
        target.mkdir()
        monkeypatch.setattr(tempfile, 'mkdtemp', lambda prefix=None: str(target))

        zip_path = tmp_path / 'evil.zip'
        with zipfile.ZipFile(zip_path, 'w') as archive:
            archive.writestr('123/note.html', '<html></html>')
            archive.writestr('../escaped.html', 'evil')

        with pytest.raises(UnsafeArchiveError) as exc_info:
            extract_input(zip_path)
        assert 'outside temp directory' in str(exc_info.value)
        assert not (tmp_path / 'escaped.html').exists()
        assert not target.exists()

    def test_zip_without_export(self, tmp_path, monkeypatch):
        target = tmp_path / 'unpack'
        target.mkdir()
        monkeypatch.setattr(tempfile, 'mkdtemp', lambda prefix=None: str(target))

        zip_path = tmp_path / 'empty.zip'
        with zipfile.ZipFile(zip_path, 'w') as archive:
            archive.writestr('readme.txt', 'nothing here')

        with pytest.raises(ExportNotFoundError):
            extract_input(zip_path)
        assert not target.exists()
