# epub_repacker/src/epub_repacker/core/epub/toc.py
"""
Module de découverte de la table des matières.

Responsabilité unique: trouver le document de navigation EPUB3 et le
fichier NCX EPUB2 à partir des métadonnées du manifeste (jamais à partir
des noms de fichiers).
"""

import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import unquote

from ...config import NAV_PROPERTY, NCX_MEDIA_TYPE
from ..exceptions import EpubStructureError
from ..models import ManifestItem, TocFiles
from .container import get_content_path, get_package_document_path
from .manifest import ManifestIndex

logger = logging.getLogger(__name__)


def _resolve_item(item: Optional[ManifestItem], content_path: Path, label: str) -> Optional[Path]:
    """Joint le href de l'item au dossier de contenu et vérifie son existence."""
    if item is None:
        logger.info("No %s item in manifest", label)
        return None
    href = unquote(item.href.split("#", 1)[0])
    if not href:
        logger.info("%s item %r has no href", label, item.id)
        return None

    path = content_path / href
    if not path.is_file():
        logger.info("%s file listed in manifest but missing on disk: %s", label, path)
        return None
    return path


def find_toc_files(manifest: ManifestIndex, content_path: Union[str, Path]) -> TocFiles:
    """
    Découvre les fichiers de TOC depuis un manifeste déjà indexé.

    Ne lève jamais d'exception pour une TOC absente: chaque champ
    est simplement None.
    """
    content_path = Path(content_path)
    return TocFiles(
        epub3_nav=_resolve_item(
            manifest.first_by_property_contains(NAV_PROPERTY), content_path, "EPUB3 nav"
        ),
        epub2_ncx=_resolve_item(
            manifest.first_by_media_type(NCX_MEDIA_TYPE), content_path, "EPUB2 NCX"
        ),
    )


def get_toc_files(epub_dir: Union[str, Path]) -> TocFiles:
    """
    Découvre les fichiers de TOC d'un EPUB extrait.

    Raises:
        EpubStructureError: si le document de package est introuvable ou illisible
    """
    opf_path = get_package_document_path(epub_dir)
    manifest = ManifestIndex.load(opf_path)
    return find_toc_files(manifest, get_content_path(epub_dir))


def get_epub3_nav_path(epub_dir: Union[str, Path]) -> Optional[Path]:
    """Chemin du document de navigation EPUB3, ou None."""
    try:
        return get_toc_files(epub_dir).epub3_nav
    except EpubStructureError:
        logger.info("TOC discovery failed for %s", epub_dir, exc_info=True)
        return None


def get_epub2_ncx_path(epub_dir: Union[str, Path]) -> Optional[Path]:
    """Chemin du fichier NCX EPUB2, ou None."""
    try:
        return get_toc_files(epub_dir).epub2_ncx
    except EpubStructureError:
        logger.info("TOC discovery failed for %s", epub_dir, exc_info=True)
        return None
