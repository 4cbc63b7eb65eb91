# epub_repacker/src/epub_repacker/core/epub/__init__.py
"""
Module EPUB - Modèle du conteneur OCF.

Ce module fournit les fonctions pour localiser le document de package,
résoudre le dossier de contenu, indexer le manifeste, découvrir les
fichiers de table des matières, mettre à jour le spine, et
extraire/reconstruire les archives.
"""

from .container import (
    get_content_dir,
    get_content_path,
    get_package_document_path,
    locate_container,
)
from .manifest import ManifestIndex
from .reader import extract_epub
from .spine import cover_linear_stage, set_cover_linear
from .toc import find_toc_files, get_epub2_ncx_path, get_epub3_nav_path, get_toc_files
from .verifier import verify_epub
from .writer import write_epub

__all__ = [
    "ManifestIndex",
    "cover_linear_stage",
    "extract_epub",
    "find_toc_files",
    "get_content_dir",
    "get_content_path",
    "get_epub2_ncx_path",
    "get_epub3_nav_path",
    "get_package_document_path",
    "get_toc_files",
    "locate_container",
    "set_cover_linear",
    "verify_epub",
    "write_epub",
]
