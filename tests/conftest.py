# tests/conftest.py
"""
Configuration globale pour pytest.

Fournit des fixtures réutilisables pour tous les tests: un petit EPUB3
valide (dossier de travail et archive) et un constructeur d'arborescence.
"""

import zipfile
from pathlib import Path
from typing import Callable, Dict, Union

import pytest

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

CONTENT_OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="bookid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:identifier id="bookid">urn:uuid:0c9a4f4e-6f0e-4a52-9d7a-3f1f8c2b7e11</dc:identifier>
    <dc:title>Test Book</dc:title>
    <dc:language>en</dc:language>
    <meta property="dcterms:modified">2024-01-01T00:00:00Z</meta>
  </metadata>
  <manifest>
    <item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>
    <item id="nav" href="nav.xhtml" media-type="application/xhtml+xml" properties="nav"/>
    <item id="chapter1" href="chapter1.xhtml" media-type="application/xhtml+xml"/>
    <item id="cover-image" href="images/cover.png" media-type="image/png" properties="cover-image"/>
  </manifest>
  <spine toc="ncx">
    <itemref idref="chapter1"/>
  </spine>
</package>
"""

NAV_XHTML = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">
<head>
  <title>Contents</title>
</head>
<body>
  <nav epub:type="toc" id="toc">
    <h1>Contents</h1>
    <ol>
      <li><a href="chapter1.xhtml">Chapter 1</a></li>
    </ol>
  </nav>
</body>
</html>
"""

TOC_NCX = """<?xml version="1.0" encoding="UTF-8"?>
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
  <head>
    <meta name="dtb:uid" content="urn:uuid:0c9a4f4e-6f0e-4a52-9d7a-3f1f8c2b7e11"/>
  </head>
  <docTitle><text>Test Book</text></docTitle>
  <navMap>
    <navPoint id="navpoint-1" playOrder="1">
      <navLabel><text>Chapter 1</text></navLabel>
      <content src="chapter1.xhtml"/>
    </navPoint>
  </navMap>
</ncx>
"""

CHAPTER_XHTML = """<?xml version="1.0" encoding="UTF-8"?>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>Chapter 1</title></head>
<body><h1>Chapter 1</h1><p>Il était une fois.</p></body>
</html>
"""

# Octets binaires arbitraires: NUL, CR/LF et octets hauts doivent survivre tels quels
COVER_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + bytes(range(256))

FileTree = Dict[str, Union[str, bytes]]


def book_files(opf_path: str = "OPS/content.opf") -> FileTree:
    """Fichiers d'un EPUB3 minimal, le contenu étant placé à côté du OPF."""
    base = opf_path.rsplit("/", 1)[0] + "/" if "/" in opf_path else ""
    return {
        "mimetype": "application/epub+zip",
        "META-INF/container.xml": CONTAINER_XML.format(opf=opf_path),
        opf_path: CONTENT_OPF,
        base + "nav.xhtml": NAV_XHTML,
        base + "toc.ncx": TOC_NCX,
        base + "chapter1.xhtml": CHAPTER_XHTML,
        base + "images/cover.png": COVER_BYTES,
    }


def _as_bytes(content: Union[str, bytes]) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else content


@pytest.fixture
def write_tree() -> Callable[[Path, FileTree], Path]:
    """Retourne une fonction qui écrit une arborescence {chemin relatif: contenu}."""

    def _write(root: Path, files: FileTree) -> Path:
        for rel, content in files.items():
            path = root.joinpath(*rel.split("/"))
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(_as_bytes(content))
        return root

    return _write


@pytest.fixture
def make_epub() -> Callable[[Path, FileTree], Path]:
    """Retourne une fonction qui construit une archive EPUB avec zipfile."""

    def _make(path: Path, files: FileTree) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            if "mimetype" in files:
                zf.writestr("mimetype", _as_bytes(files["mimetype"]), compress_type=zipfile.ZIP_STORED)
            for rel, content in files.items():
                if rel != "mimetype":
                    zf.writestr(rel, _as_bytes(content))
        return path

    return _make


@pytest.fixture
def book_dir(tmp_path, write_tree) -> Path:
    """Dossier de travail d'un EPUB3 dont le contenu est dans OPS/."""
    return write_tree(tmp_path / "book", book_files()).resolve()


@pytest.fixture
def sample_epub(tmp_path, make_epub) -> Path:
    """Archive EPUB3 valide dont le contenu est dans OPS/."""
    return make_epub(tmp_path / "sample.epub", book_files())


def read_tree(root: Path) -> Dict[str, bytes]:
    """Lit tous les fichiers d'une arborescence: {chemin posix relatif: octets}."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def book_tree() -> Callable[..., FileTree]:
    """Retourne la fonction book_files (contenu d'un EPUB3 minimal)."""
    return book_files


@pytest.fixture
def tree_reader() -> Callable[[Path], Dict[str, bytes]]:
    """Retourne la fonction read_tree."""
    return read_tree
