# epub_repacker/src/epub_repacker/core/epub/verifier.py
"""
Module de vérification d'archive EPUB.

Responsabilité unique: relire une archive produite pour s'assurer
qu'elle respecte l'enveloppe OCF et qu'un lecteur EPUB l'ouvre.
Ce n'est pas une validation de schéma EPUB/OPF.
"""

import logging
import zipfile
from pathlib import Path
from typing import Optional, Union

from ebooklib import epub
from ebooklib.epub import EpubBook

from ...config import EPUB_MIMETYPE, MIMETYPE_FILENAME
from ..exceptions import EpubVerificationError

logger = logging.getLogger(__name__)


def check_ocf_layout(epub_path: Union[str, Path]) -> None:
    """
    Vérifie la première entrée de l'archive.

    Raises:
        EpubVerificationError: si mimetype n'est pas la première entrée,
            est compressé, ou n'a pas le contenu exact attendu
    """
    epub_path = Path(epub_path)
    try:
        with zipfile.ZipFile(epub_path) as zf:
            infos = zf.infolist()
            if not infos or infos[0].filename != MIMETYPE_FILENAME:
                raise EpubVerificationError(f"mimetype is not the first entry of {epub_path}", epub_path)
            first = infos[0]
            if first.compress_type != zipfile.ZIP_STORED:
                raise EpubVerificationError(f"mimetype entry is compressed in {epub_path}", epub_path)
            if zf.read(first) != EPUB_MIMETYPE.encode("ascii"):
                raise EpubVerificationError(f"Unexpected mimetype content in {epub_path}", epub_path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise EpubVerificationError(f"Cannot open {epub_path}: {exc}", epub_path) from exc


def safe_read_epub(epub_path: Union[str, Path]) -> Optional[EpubBook]:
    """
    Lit un fichier EPUB de manière sécurisée.

    Returns:
        Objet EpubBook si succès, None sinon
    """
    try:
        return epub.read_epub(str(epub_path), {"ignore_ncx": True})
    except Exception as e:
        logger.exception("ebooklib failed to read %s: %s", epub_path, e)
        return None


def verify_epub(epub_path: Union[str, Path]) -> Optional[str]:
    """
    Vérifie qu'une archive est une enveloppe OCF lisible.

    Returns:
        Titre du livre (DC title) s'il est présent, sinon None

    Raises:
        EpubVerificationError: si l'archive ne peut pas être relue
    """
    check_ocf_layout(epub_path)

    book = safe_read_epub(epub_path)
    if book is None:
        raise EpubVerificationError(f"EPUB reader could not open {epub_path}", epub_path)

    title = book.get_metadata("DC", "title")
    title = title[0][0] if title else None
    logger.info("Verified %s (title: %s)", epub_path, title)
    return title
