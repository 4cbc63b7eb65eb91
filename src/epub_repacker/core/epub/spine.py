# epub_repacker/src/epub_repacker/core/epub/spine.py
"""
Module de mise à jour du spine du document de package.

Rend la page de couverture linéaire (``linear="yes"``) pour qu'elle
soit affichée en première page dans l'ordre de lecture.
"""

import logging
from pathlib import Path
from typing import Union

from ...config import COVER_IDREF
from ..models import BookStructure
from ..xml_tree import children, get_attr, local_name, read_xml, set_attr, write_xml

logger = logging.getLogger(__name__)


def set_cover_linear(opf_path: Union[str, Path], idref: str = COVER_IDREF) -> bool:
    """
    Passe ``<itemref idref="cover">`` du spine en ``linear="yes"``.

    Returns:
        True si le document de package a été réécrit

    Raises:
        MalformedXml: document de package mal formé
    """
    doc = read_xml(opf_path)
    spine = doc.find_first("spine")
    itemref = None
    if spine is not None:
        itemref = next(
            (n for n in children(spine) if local_name(n) == "itemref" and get_attr(n, "idref") == idref),
            None,
        )
    if itemref is None:
        logger.warning("No cover reference %r found in spine of %s", idref, opf_path)
        return False

    if get_attr(itemref, "linear") == "yes":
        logger.debug("Cover %r already linear in %s", idref, opf_path)
        return False

    set_attr(itemref, "linear", "yes")
    write_xml(doc)
    logger.info('Set cover to linear: <itemref idref="%s" linear="yes"/>', idref)
    return True


def cover_linear_stage(idref: str = COVER_IDREF):
    """Étape de pipeline qui rend la couverture linéaire dans le spine."""

    def stage(structure: BookStructure) -> None:
        set_cover_linear(structure.package_document, idref)

    stage.__name__ = "update_cover_linear"
    return stage
