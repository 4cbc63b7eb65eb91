# epub_repacker/src/epub_repacker/core/xml_tree.py
"""
Arbre XML adressable utilisé par tous les composants OCF.

Construit sur lxml. Les requêtes se font par nom local (sans espace de noms)
et les attributs préfixés comme ``epub:type`` sont traités comme des noms
opaques : ils sont trouvés qu'ils soient déclarés correctement, déclarés
avec une autre URI connue, ou pas déclarés du tout.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from lxml import etree

from .exceptions import MalformedXml

logger = logging.getLogger(__name__)

XML_NS = "http://www.w3.org/XML/1998/namespace"

# Préfixes couramment utilisés sans déclaration dans les livres réels
KNOWN_PREFIXES: Dict[str, str] = {
    "epub": "http://www.idpf.org/2007/ops",
    "opf": "http://www.idpf.org/2007/opf",
    "dc": "http://purl.org/dc/elements/1.1/",
    "xml": XML_NS,
    "xlink": "http://www.w3.org/1999/xlink",
}

Element = etree._Element


def _make_parser(encoding: Optional[str] = None, recover: bool = False) -> etree.XMLParser:
    return etree.XMLParser(
        encoding=encoding,
        recover=recover,
        resolve_entities=False,
        no_network=True,
        remove_blank_text=False,
        strip_cdata=False,
        huge_tree=True,
    )


def _only_namespace_errors(parser: etree.XMLParser) -> bool:
    errors = parser.error_log.filter_from_errors()
    return bool(errors) and all(e.domain == etree.ErrorDomains.NAMESPACE for e in errors)


# --- Helpers sur les noeuds ---


def local_name(node) -> Optional[str]:
    """Nom local d'un élément, ou None pour les commentaires et PI."""
    tag = node.tag
    if not isinstance(tag, str):
        return None
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag.rsplit(":", 1)[-1]


def _attr_keys(node: Element, name: str) -> List[str]:
    if ":" not in name:
        return [name]
    prefix, local = name.split(":", 1)
    keys = [name]
    for uri in (node.nsmap.get(prefix), KNOWN_PREFIXES.get(prefix)):
        if uri and "{%s}%s" % (uri, local) not in keys:
            keys.append("{%s}%s" % (uri, local))
    return keys


def get_attr(node: Element, name: str, default: Optional[str] = None) -> Optional[str]:
    """Lit un attribut, en tolérant les préfixes non déclarés."""
    for key in _attr_keys(node, name):
        value = node.get(key)
        if value is not None:
            return value
    return default


def set_attr(node: Element, name: str, value: str) -> None:
    """Écrit un attribut, en réutilisant la clé existante si possible."""
    keys = _attr_keys(node, name)
    for key in keys:
        if key in node.attrib and (key.startswith("{") or ":" not in key):
            node.set(key, value)
            return
    node.set(keys[-1], value)


def attr_tokens(node: Element, name: str) -> frozenset:
    """Ensemble des jetons d'un attribut multi-valué (séparés par des espaces)."""
    return frozenset((get_attr(node, name) or "").split())


def children(node: Element) -> List[Element]:
    """Enfants éléments (commentaires et PI exclus)."""
    return [child for child in node if isinstance(child.tag, str)]


def parent(node: Element) -> Optional[Element]:
    return node.getparent()


def new_element(tag: str, attrs: Optional[Dict[str, str]] = None, text: Optional[str] = None,
                like: Optional[Element] = None) -> Element:
    """
    Crée un élément détaché.

    Si ``like`` est fourni, l'élément hérite de son espace de noms
    (un <li> ajouté dans un document XHTML reste dans l'espace XHTML).
    """
    nsmap = None
    qualified = tag
    if like is not None:
        like_tag = like.tag
        if isinstance(like_tag, str) and like_tag.startswith("{"):
            qualified = "{%s}%s" % (like_tag[1:].split("}", 1)[0], tag)
        nsmap = like.nsmap
    node = etree.Element(qualified, nsmap=nsmap)
    for key, value in (attrs or {}).items():
        set_attr(node, key, value)
    if text is not None:
        node.text = text
    return node


def insert_before(ref: Element, node: Element) -> None:
    ref.addprevious(node)


def insert_after(ref: Element, node: Element) -> None:
    ref.addnext(node)


def append_child(container: Element, node: Element) -> None:
    container.append(node)


def prepend_child(container: Element, node: Element) -> None:
    """Insère ``node`` comme premier enfant, en conservant l'indentation existante."""
    first = children(container)
    if first:
        node.tail = container.text
        first[0].addprevious(node)
    else:
        container.insert(0, node)


def remove(node: Element) -> None:
    """Retire un noeud (et son sous-arbre) en préservant le texte qui le suit."""
    owner = node.getparent()
    if owner is None:
        return
    if node.tail:
        previous = node.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + node.tail
        else:
            owner.text = (owner.text or "") + node.tail
    owner.remove(node)


# --- Document ---


class XmlDocument:
    """Document XML analysé, avec requêtes par nom local et attribut."""

    def __init__(self, tree: etree._ElementTree, path: Optional[Path] = None,
                 xml_declaration: bool = True):
        self.tree = tree
        self.path = path
        self.xml_declaration = xml_declaration

    @property
    def root(self) -> Element:
        return self.tree.getroot()

    def iter_elements(self, tag: Optional[str] = None) -> Iterator[Element]:
        """Parcourt les éléments en ordre de document, filtrés par nom local."""
        for node in self.root.iter():
            name = local_name(node)
            if name is None:
                continue
            if tag is None or name == tag:
                yield node

    def find_all(self, tag: str) -> List[Element]:
        return list(self.iter_elements(tag))

    def find_first(self, tag: str) -> Optional[Element]:
        return next(self.iter_elements(tag), None)

    def find_by_attr(self, attr: str, value: str, tag: Optional[str] = None) -> Optional[Element]:
        """Premier élément dont l'attribut vaut exactement ``value``."""
        for node in self.iter_elements(tag):
            if get_attr(node, attr) == value:
                return node
        return None

    def find_by_attr_token(self, attr: str, token: str, tag: Optional[str] = None) -> Optional[Element]:
        """Premier élément dont l'attribut multi-valué contient le jeton ``token``."""
        for node in self.iter_elements(tag):
            if token in attr_tokens(node, attr):
                return node
        return None

    def find_by_attr_contains(self, attr: str, substring: str,
                              tag: Optional[str] = None) -> Optional[Element]:
        """Premier élément dont l'attribut contient ``substring`` (sous-chaîne brute)."""
        for node in self.iter_elements(tag):
            value = get_attr(node, attr)
            if value is not None and substring in value:
                return node
        return None

    def to_bytes(self) -> bytes:
        return etree.tostring(
            self.tree,
            xml_declaration=self.xml_declaration,
            encoding="utf-8",
        )

    def serialize(self) -> str:
        return self.to_bytes().decode("utf-8")


def _has_declaration(data: bytes) -> bool:
    return data.lstrip(b"\xef\xbb\xbf \t\r\n").startswith(b"<?xml")


def parse_xml(text: Union[str, bytes], path: Optional[Path] = None) -> XmlDocument:
    """
    Analyse un texte XML.

    Les documents dont la seule faute est un préfixe d'espace de noms non
    déclaré sont relus en mode tolérant: les noms préfixés restent alors
    des chaînes littérales (``epub:type``).

    Raises:
        MalformedXml: si le texte n'est pas du XML bien formé
    """
    encoding = None
    if isinstance(text, str):
        data = text.encode("utf-8")
        encoding = "utf-8"
    else:
        data = text

    where = path if path is not None else "<string>"
    parser = _make_parser(encoding)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as exc:
        if not _only_namespace_errors(parser):
            raise MalformedXml(f"Malformed XML in {where}: {exc}", path) from exc
        logger.debug("Undeclared namespace prefix in %s, parsing leniently", where)
        try:
            root = etree.fromstring(data, _make_parser(encoding, recover=True))
        except etree.XMLSyntaxError as exc2:
            raise MalformedXml(f"Malformed XML in {where}: {exc2}", path) from exc2
    if root is None:
        raise MalformedXml(f"Empty XML document: {path or '<string>'}", path)

    return XmlDocument(root.getroottree(), path=path, xml_declaration=_has_declaration(data))


def read_xml(path: Union[str, Path]) -> XmlDocument:
    """Lit et analyse un fichier XML (les octets bruts sont transmis à lxml)."""
    path = Path(path)
    data = path.read_bytes()
    return parse_xml(data, path=path)


def write_xml(doc: XmlDocument, path: Optional[Union[str, Path]] = None) -> Path:
    """Réécrit le document sur le disque (à son chemin d'origine par défaut)."""
    target = Path(path) if path is not None else doc.path
    if target is None:
        raise ValueError("No target path for XML document")
    target.write_bytes(doc.to_bytes())
    logger.debug("Wrote XML document %s", target)
    return target
