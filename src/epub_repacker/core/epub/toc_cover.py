# epub_repacker/src/epub_repacker/core/epub/toc_cover.py
"""
Module d'ajout du lien de couverture dans la table des matières.

Responsabilité unique: insérer une entrée de couverture (libellé fourni
par l'appelant) en tête du document de navigation EPUB3 et du NCX EPUB2.
Les deux opérations sont idempotentes.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from ...config import COVER_HREF, COVER_NAVPOINT_ID
from ..models import BookStructure, TocFiles
from ..xml_tree import (
    Element,
    XmlDocument,
    attr_tokens,
    children,
    get_attr,
    local_name,
    new_element,
    prepend_child,
    read_xml,
    set_attr,
    write_xml,
)

logger = logging.getLogger(__name__)


# --- EPUB3 nav ---


def _first_child_list(nav: Element) -> Optional[Element]:
    for child in children(nav):
        if local_name(child) == "ol":
            return child
    return None


def find_toc_list(doc: XmlDocument) -> Optional[Element]:
    """
    Trouve la liste <ol> de la table des matières.

    Ordre de préférence: nav[epub:type~=toc] > ol, nav[role=doc-toc] > ol,
    nav > ol, puis le premier <ol> du document.
    """
    navs = doc.find_all("nav")
    candidates = (
        [nav for nav in navs if "toc" in attr_tokens(nav, "epub:type")],
        [nav for nav in navs if get_attr(nav, "role") == "doc-toc"],
        navs,
    )
    for group in candidates:
        for nav in group:
            ol = _first_child_list(nav)
            if ol is not None:
                return ol
    return doc.find_first("ol")


def add_cover_to_nav(nav_path: Union[str, Path], label: str, href: str = COVER_HREF) -> bool:
    """
    Ajoute un lien vers la couverture en tête du document de navigation.

    Returns:
        True si le fichier a été modifié

    Raises:
        MalformedXml: si le document de navigation n'est pas du XML valide
    """
    logger.info("Adding cover to EPUB3 navigation file: %s", nav_path)
    doc = read_xml(nav_path)

    if doc.find_by_attr("href", href, tag="a") is not None:
        logger.info("Cover is already in EPUB3 navigation file")
        return False

    toc_list = find_toc_list(doc)
    if toc_list is None:
        logger.warning("Could not find TOC list in EPUB3 navigation file %s", nav_path)
        return False

    item = new_element("li", like=toc_list)
    item.append(new_element("a", {"href": href}, text=label, like=toc_list))
    prepend_child(toc_list, item)

    write_xml(doc)
    logger.info("Successfully added cover to EPUB3 navigation file")
    return True


# --- EPUB2 NCX ---


def _has_cover_navpoint(doc: XmlDocument, href: str) -> bool:
    if doc.find_by_attr("id", COVER_NAVPOINT_ID, tag="navPoint") is not None:
        return True
    return doc.find_by_attr("src", href, tag="content") is not None


def _shift_play_order(doc: XmlDocument) -> None:
    """Décale de 1 le playOrder de tous les navPoint existants."""
    for point in doc.iter_elements("navPoint"):
        current = get_attr(point, "playOrder") or "1"
        try:
            set_attr(point, "playOrder", str(int(current) + 1))
        except ValueError:
            logger.warning("Ignoring non-numeric playOrder %r", current)


def add_cover_to_ncx(ncx_path: Union[str, Path], label: str, href: str = COVER_HREF) -> bool:
    """
    Ajoute un navPoint de couverture en tête du navMap du NCX.

    Returns:
        True si le fichier a été modifié

    Raises:
        MalformedXml: si le NCX n'est pas du XML valide
    """
    logger.info("Adding cover to EPUB2 NCX file: %s", ncx_path)
    doc = read_xml(ncx_path)

    if _has_cover_navpoint(doc, href):
        logger.info("Cover is already in EPUB2 NCX file")
        return False

    nav_map = doc.find_first("navMap")
    if nav_map is None:
        logger.warning("Could not find navMap in EPUB2 NCX file %s", ncx_path)
        return False

    _shift_play_order(doc)

    point = new_element("navPoint", {"id": COVER_NAVPOINT_ID, "playOrder": "1"}, like=nav_map)
    nav_label = new_element("navLabel", like=nav_map)
    nav_label.append(new_element("text", text=label, like=nav_map))
    point.append(nav_label)
    point.append(new_element("content", {"src": href}, like=nav_map))
    prepend_child(nav_map, point)

    write_xml(doc)
    logger.info("Successfully added cover to EPUB2 NCX file")
    return True


# --- Fonction principale ---


def update_toc_with_cover(toc_files: TocFiles, label: str, href: str = COVER_HREF) -> Dict[str, bool]:
    """
    Met à jour les fichiers de TOC découverts avec un lien de couverture.

    Les fichiers absents sont ignorés (rien à mettre à jour).

    Returns:
        {"epub3_nav": modifié?, "epub2_ncx": modifié?}
    """
    result = {"epub3_nav": False, "epub2_ncx": False}
    if toc_files.empty:
        logger.info("No TOC files found in OPF manifest. Skipping TOC updates.")
        return result

    if toc_files.epub3_nav:
        result["epub3_nav"] = add_cover_to_nav(toc_files.epub3_nav, label, href)
    else:
        logger.info("No EPUB3 navigation file found")

    if toc_files.epub2_ncx:
        result["epub2_ncx"] = add_cover_to_ncx(toc_files.epub2_ncx, label, href)
    else:
        logger.info("No EPUB2 NCX file found")

    return result


def cover_link_stage(label: str, href: str = COVER_HREF):
    """Étape de pipeline qui ajoute le lien de couverture aux TOC du livre."""

    def stage(structure: BookStructure) -> None:
        update_toc_with_cover(structure.toc_files, label, href)

    stage.__name__ = "update_toc_with_cover"
    return stage
