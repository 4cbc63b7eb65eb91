# epub_repacker/src/epub_repacker/core/epub/manifest.py
"""
Module d'index du manifeste.

Responsabilité unique: lire les <item> du manifeste d'un document de
package et permettre des recherches "premier qui correspond".
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Sequence, Tuple, Union

from ..models import ManifestItem
from ..xml_tree import XmlDocument, attr_tokens, get_attr, local_name, read_xml

logger = logging.getLogger(__name__)


class ManifestIndex:
    """
    Séquence ordonnée et en lecture seule des items du manifeste.

    L'ordre est celui du document : les recherches retournent le premier
    item qui correspond, ou None (l'absence n'est pas une erreur).
    """

    def __init__(self, items: Sequence[ManifestItem], path: Optional[Path] = None):
        self._items: Tuple[ManifestItem, ...] = tuple(items)
        self.path = path
        self._by_id: Dict[str, ManifestItem] = {}
        for item in self._items:
            if item.id in self._by_id:
                logger.warning("Duplicate manifest id %r in %s", item.id, path)
                continue
            self._by_id[item.id] = item

    @classmethod
    def from_document(cls, doc: XmlDocument) -> "ManifestIndex":
        manifest = doc.find_first("manifest")
        if manifest is None:
            logger.info("No manifest element in %s", doc.path)
            return cls([], path=doc.path)

        items = []
        for node in manifest.iter():
            if local_name(node) != "item":
                continue
            items.append(
                ManifestItem(
                    id=get_attr(node, "id", ""),
                    href=get_attr(node, "href", ""),
                    media_type=get_attr(node, "media-type", ""),
                    properties=attr_tokens(node, "properties"),
                )
            )
        logger.debug("Parsed %d manifest item(s) from %s", len(items), doc.path)
        return cls(items, path=doc.path)

    @classmethod
    def load(cls, opf_path: Union[str, Path]) -> "ManifestIndex":
        """
        Analyse un document de package.

        Raises:
            MalformedXml: si le document n'est pas du XML valide
        """
        return cls.from_document(read_xml(opf_path))

    @property
    def items(self) -> Tuple[ManifestItem, ...]:
        return self._items

    def __iter__(self) -> Iterator[ManifestItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> Optional[ManifestItem]:
        return self._by_id.get(item_id)

    def first_by_property_contains(self, token: str) -> Optional[ManifestItem]:
        """Premier item dont l'ensemble de propriétés contient ``token``."""
        for item in self._items:
            if token in item.properties:
                return item
        return None

    def first_by_media_type(self, value: str) -> Optional[ManifestItem]:
        """Premier item dont le media-type vaut exactement ``value``."""
        for item in self._items:
            if item.media_type == value:
                return item
        return None
