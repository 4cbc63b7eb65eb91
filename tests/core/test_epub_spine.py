# tests/core/test_epub_spine.py
"""
Tests pour le module core.epub.spine.
"""

import logging
import zipfile

import pytest

from epub_repacker.core.epub.spine import cover_linear_stage, set_cover_linear
from epub_repacker.core.exceptions import MalformedXml
from epub_repacker.core.repack_service import RepackService
from epub_repacker.core.xml_tree import get_attr, read_xml

COVER_SPINE = '<itemref idref="cover" linear="no"/>\n    <itemref idref="chapter1"/>'
COVER_ITEM = '<item id="cover" href="cover.xhtml" media-type="application/xhtml+xml"/>\n    '


def _with_cover_itemref(opf_text: str) -> str:
    opf_text = opf_text.replace('<item id="chapter1"', COVER_ITEM + '<item id="chapter1"')
    return opf_text.replace('<itemref idref="chapter1"/>', COVER_SPINE)


def _itemref(opf_path, idref):
    return read_xml(opf_path).find_by_attr("idref", idref, tag="itemref")


class TestSetCoverLinear:
    """Tests pour set_cover_linear."""

    def test_sets_linear_yes(self, book_dir):
        """Test itemref de couverture passé en linear="yes"."""
        opf = book_dir / "OPS" / "content.opf"
        opf.write_text(_with_cover_itemref(opf.read_text(encoding="utf-8")), encoding="utf-8")

        assert set_cover_linear(opf) is True

        assert get_attr(_itemref(opf, "cover"), "linear") == "yes"
        assert get_attr(_itemref(opf, "chapter1"), "linear") is None

    def test_idempotent(self, book_dir):
        """Test qu'un second appel ne réécrit pas le fichier."""
        opf = book_dir / "OPS" / "content.opf"
        opf.write_text(_with_cover_itemref(opf.read_text(encoding="utf-8")), encoding="utf-8")
        set_cover_linear(opf)
        before = opf.read_bytes()

        assert set_cover_linear(opf) is False
        assert opf.read_bytes() == before

    def test_no_cover_itemref_warns(self, book_dir, caplog):
        """Test spine sans couverture: avertissement, fichier inchangé."""
        opf = book_dir / "OPS" / "content.opf"
        before = opf.read_bytes()

        with caplog.at_level(logging.WARNING, logger="epub_repacker"):
            assert set_cover_linear(opf) is False

        assert opf.read_bytes() == before
        assert "No cover reference" in caplog.text

    def test_custom_idref(self, book_dir):
        """Test idref de couverture fourni par l'appelant."""
        opf = book_dir / "OPS" / "content.opf"

        assert set_cover_linear(opf, "chapter1") is True
        assert get_attr(_itemref(opf, "chapter1"), "linear") == "yes"

    def test_malformed_package_document(self, tmp_path):
        """Test document de package mal formé."""
        opf = tmp_path / "content.opf"
        opf.write_text("<package><spine>")

        with pytest.raises(MalformedXml):
            set_cover_linear(opf)


class TestCoverLinearStage:
    """Tests pour cover_linear_stage dans le pipeline."""

    def test_end_to_end(self, tmp_path, make_epub, book_tree):
        """Test bout en bout: le spine de l'archive produite est mis à jour."""
        files = book_tree()
        files["OPS/content.opf"] = _with_cover_itemref(files["OPS/content.opf"])
        files["OPS/cover.xhtml"] = files["OPS/chapter1.xhtml"]
        source = make_epub(tmp_path / "in.epub", files)
        output = tmp_path / "out.epub"

        service = RepackService(stages=[cover_linear_stage()], temp_root=tmp_path / "temp")
        result = service.repack(source, output)

        assert result.ok
        assert "update_cover_linear" in [s.name for s in result.stages]
        with zipfile.ZipFile(output) as zf:
            assert b'linear="yes"' in zf.read("OPS/content.opf")
