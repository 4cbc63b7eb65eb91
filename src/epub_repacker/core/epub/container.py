# epub_repacker/src/epub_repacker/core/epub/container.py
"""
Module de localisation du conteneur OCF.

Responsabilité unique: trouver le document de package via
META-INF/container.xml et déterminer le dossier racine du contenu.
"""

import logging
from pathlib import Path
from typing import Union

from ...config import CONTAINER_PATH, CONTENT_DIR_CONVENTIONS, OPF_MEDIA_TYPE
from ..exceptions import (
    ContainerNotFound,
    EpubStructureError,
    MalformedContainer,
    MalformedXml,
    PackageDocumentMissing,
    RootfileMissing,
)
from ..models import Container
from ..xml_tree import get_attr, read_xml

logger = logging.getLogger(__name__)


def get_container_path(epub_dir: Union[str, Path]) -> Path:
    """Chemin de META-INF/container.xml dans un dossier extrait."""
    return Path(epub_dir).joinpath(*CONTAINER_PATH)


def get_package_document_path(epub_dir: Union[str, Path]) -> Path:
    """
    Lit container.xml et retourne le chemin du document de package (OPF).

    Seul le premier élément <rootfile> (ordre du document) est consulté,
    quel que soit son media-type.

    Args:
        epub_dir: Dossier racine de l'EPUB extrait

    Returns:
        Chemin absolu du document de package

    Raises:
        ContainerNotFound: container.xml absent
        MalformedContainer: container.xml illisible
        RootfileMissing: pas de rootfile ou pas de full-path
        PackageDocumentMissing: le fichier référencé n'existe pas
    """
    root = Path(epub_dir).resolve()
    container_path = get_container_path(root)

    if not container_path.is_file():
        raise ContainerNotFound(f"Container file not found: {container_path}", container_path)

    try:
        doc = read_xml(container_path)
    except MalformedXml as exc:
        raise MalformedContainer(
            f"Failed to parse container.xml: {exc.message}", container_path
        ) from exc
    except OSError as exc:
        raise MalformedContainer(
            f"Failed to read container.xml: {exc}", container_path
        ) from exc

    rootfile = doc.find_first("rootfile")
    if rootfile is None:
        raise RootfileMissing("No rootfile element in container.xml", container_path)

    full_path = get_attr(rootfile, "full-path")
    if not full_path:
        raise RootfileMissing("No OPF path found in container.xml", container_path)

    media_type = get_attr(rootfile, "media-type")
    if media_type and media_type != OPF_MEDIA_TYPE:
        logger.warning("First rootfile of %s has media-type %s, using it anyway", container_path, media_type)

    opf_path = (root / full_path).resolve()
    if not opf_path.is_relative_to(root):
        raise PackageDocumentMissing(
            f"Package document path escapes the EPUB root: {full_path}", opf_path
        )
    if not opf_path.is_file():
        raise PackageDocumentMissing(f"OPF file not found: {opf_path}", opf_path)

    logger.debug("Package document for %s: %s", root, opf_path)
    return opf_path


def locate_container(epub_dir: Union[str, Path]) -> Container:
    """Construit l'objet Container (racine + document de package)."""
    root = Path(epub_dir).resolve()
    return Container(root=root, package_document=get_package_document_path(root))


def get_content_dir(epub_dir: Union[str, Path]) -> str:
    """
    Détermine le dossier de contenu de l'EPUB.

    Ordre de résolution (le premier qui répond gagne):
    1. un dossier OPS à la racine
    2. un dossier OEBPS à la racine
    3. le dossier du document de package, relatif à la racine
    4. "" si le document de package est introuvable

    Ne lève jamais d'exception.

    Returns:
        Nom du dossier ("OPS", "OEBPS", "sub/dir") ou "" pour la racine
    """
    root = Path(epub_dir)

    for name in CONTENT_DIR_CONVENTIONS:
        if (root / name).is_dir():
            return name

    try:
        opf_path = get_package_document_path(root)
    except EpubStructureError as exc:
        logger.info("Could not locate package document (%s); using archive root", exc.message)
        return ""

    opf_dir = opf_path.parent.relative_to(root.resolve())
    return "" if opf_dir == Path(".") else opf_dir.as_posix()


def get_content_path(epub_dir: Union[str, Path]) -> Path:
    """Chemin complet du dossier de contenu."""
    content_dir = get_content_dir(epub_dir)
    return Path(epub_dir) / content_dir if content_dir else Path(epub_dir)
