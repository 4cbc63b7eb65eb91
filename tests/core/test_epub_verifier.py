# tests/core/test_epub_verifier.py
"""
Tests pour le module core.epub.verifier.
"""

import zipfile

import pytest

from epub_repacker.core.epub.verifier import check_ocf_layout, safe_read_epub, verify_epub
from epub_repacker.core.epub.writer import write_epub
from epub_repacker.core.exceptions import EpubVerificationError


class TestCheckOcfLayout:
    """Tests pour check_ocf_layout."""

    def test_valid_archive(self, sample_epub):
        """Test archive conforme: aucune erreur."""
        check_ocf_layout(sample_epub)

    def test_mimetype_not_first(self, tmp_path):
        """Test mimetype qui n'est pas la première entrée."""
        path = tmp_path / "bad.epub"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("META-INF/container.xml", "<container/>")
            zf.writestr("mimetype", "application/epub+zip")

        with pytest.raises(EpubVerificationError):
            check_ocf_layout(path)

    def test_mimetype_compressed(self, tmp_path):
        """Test mimetype compressé."""
        path = tmp_path / "bad.epub"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_DEFLATED)

        with pytest.raises(EpubVerificationError):
            check_ocf_layout(path)

    def test_not_a_zip(self, tmp_path):
        """Test fichier qui n'est pas une archive."""
        path = tmp_path / "bad.epub"
        path.write_text("This is not an EPUB")

        with pytest.raises(EpubVerificationError):
            check_ocf_layout(path)


class TestVerifyEpub:
    """Tests pour verify_epub."""

    def test_rebuilt_archive_is_readable(self, tmp_path, book_dir):
        """Test relecture d'une archive reconstruite."""
        output = write_epub(book_dir, tmp_path / "out.epub")
        assert verify_epub(output) == "Test Book"

    def test_unreadable_book(self, tmp_path):
        """Test enveloppe correcte mais livre illisible (pas de container.xml)."""
        path = tmp_path / "empty.epub"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)

        with pytest.raises(EpubVerificationError):
            verify_epub(path)

    def test_safe_read_epub_nonexistent_file(self, tmp_path):
        """Test qu'un fichier inexistant retourne None."""
        assert safe_read_epub(tmp_path / "nonexistent.epub") is None
