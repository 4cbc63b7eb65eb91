# epub_repacker/src/epub_repacker/core/file_utils.py
"""
Logique pour les opérations sur le système de fichiers (trouver, préparer, nettoyer).
"""

import logging
import os
import re
import shutil
import uuid
from pathlib import Path
from typing import List, Union

from ..config import SUPPORTED_EXT

logger = logging.getLogger(__name__)


def find_epubs_in_folder(folder: str) -> List[str]:
    """Trouve tous les fichiers EPUB dans un dossier et ses sous-dossiers."""
    files = []
    for root, dirs, filenames in os.walk(folder):
        dirs.sort()
        for f in sorted(filenames):
            if f.lower().endswith(SUPPORTED_EXT):
                files.append(os.path.join(root, f))
    logger.info("Found %d epub(s) in folder %s", len(files), folder)
    return files


def sanitize_filename(value: str) -> str:
    """Nettoie un texte pour un nom de fichier valide."""
    value = re.sub(r'[\\/*?:"<>|]', "", value)
    value = re.sub(r"\s+", " ", value)
    return value.strip()


def prepare_workdir(path: Union[str, Path]) -> Path:
    """Crée un dossier de travail vide (en le vidant s'il existe déjà)."""
    path = Path(path)
    if path.exists():
        logger.info("Emptying existing working directory %s", path)
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def make_job_workdir(temp_root: Union[str, Path], epub_path: Union[str, Path]) -> Path:
    """
    Chemin de dossier de travail propre à un traitement.

    Deux traitements concurrents n'obtiennent jamais le même chemin.
    """
    stem = sanitize_filename(Path(epub_path).stem).replace(" ", "_") or "book"
    return Path(temp_root) / f"{stem}-{uuid.uuid4().hex[:8]}"


def remove_workdir(path: Union[str, Path]) -> None:
    """Supprime un dossier de travail (sans erreur s'il n'existe pas)."""
    path = Path(path)
    if path.exists():
        shutil.rmtree(path)
        logger.info("Removed working directory %s", path)
