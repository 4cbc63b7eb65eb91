# epub_repacker/src/epub_repacker/core/exceptions.py
"""
Exceptions du noyau OCF.

Toutes les erreurs structurelles sont fatales pour le traitement en cours
et portent le chemin du fichier fautif. L'absence d'un fichier de table
des matières n'est PAS une erreur (voir core.epub.toc).
"""

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class EpubStructureError(Exception):
    """Erreur de base pour toute anomalie structurelle d'un EPUB."""

    def __init__(self, message: str, path: Optional[PathLike] = None):
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None


class ContainerNotFound(EpubStructureError):
    """META-INF/container.xml est absent."""


class MalformedXml(EpubStructureError):
    """Un document XML n'a pas pu être analysé."""


class MalformedContainer(MalformedXml):
    """container.xml existe mais n'est pas du XML valide."""


class RootfileMissing(EpubStructureError):
    """Aucun élément rootfile, ou attribut full-path absent."""


class PackageDocumentMissing(EpubStructureError):
    """Le document de package référencé n'existe pas sur le disque."""


class MissingMimetype(EpubStructureError):
    """Le fichier mimetype est absent de la racine du dossier de travail."""


class ArchiveReadFailure(EpubStructureError):
    """Lecture ou décompression de l'archive impossible."""


class ArchiveWriteFailure(EpubStructureError):
    """Écriture de l'archive impossible."""


class EpubVerificationError(EpubStructureError):
    """L'archive produite ne peut pas être relue."""
