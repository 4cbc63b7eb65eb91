# epub_repacker/src/epub_repacker/core/epub/reader.py
"""
Module de lecture d'archive EPUB.

Responsabilité unique: décompresser une archive OCF dans un dossier de
travail, octet pour octet.
"""

import logging
import shutil
import zipfile
from pathlib import Path, PurePosixPath
from typing import List, Union

from ..exceptions import ArchiveReadFailure

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


def _safe_target(target_dir: Path, name: str, archive_path: Path) -> Path:
    """Chemin de destination d'une entrée, refusé s'il sort du dossier cible."""
    member = PurePosixPath(name.replace("\\", "/"))
    if member.is_absolute() or ".." in member.parts:
        raise ArchiveReadFailure(f"Unsafe entry path {name!r} in {archive_path}", archive_path)
    return target_dir.joinpath(*member.parts)


def list_entries(epub_path: Union[str, Path]) -> List[str]:
    """Liste les noms d'entrées de l'archive, dans l'ordre de l'archive."""
    epub_path = Path(epub_path)
    try:
        with zipfile.ZipFile(epub_path) as zf:
            return zf.namelist()
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveReadFailure(f"Cannot read archive {epub_path}: {exc}", epub_path) from exc


def extract_epub(epub_path: Union[str, Path], target_dir: Union[str, Path]) -> Path:
    """
    Décompresse une archive EPUB dans ``target_dir``.

    Le dossier cible ne doit pas exister, ou doit être vide: l'isolation
    entre traitements est la responsabilité de l'appelant. En cas d'échec,
    une extraction partielle peut rester sur le disque.

    Args:
        epub_path: Chemin de l'archive
        target_dir: Dossier de travail à remplir

    Returns:
        Chemin absolu du dossier de travail

    Raises:
        ArchiveReadFailure: archive absente, corrompue, ou erreur d'E/S
    """
    epub_path = Path(epub_path)
    target_dir = Path(target_dir).resolve()

    try:
        not_empty = target_dir.exists() and any(target_dir.iterdir())
    except OSError as exc:
        raise ArchiveReadFailure(f"Cannot use target directory {target_dir}: {exc}", target_dir) from exc
    if not_empty:
        raise ArchiveReadFailure(f"Target directory is not empty: {target_dir}", target_dir)

    count = 0
    try:
        with zipfile.ZipFile(epub_path) as zf:
            target_dir.mkdir(parents=True, exist_ok=True)
            for info in zf.infolist():
                dest = _safe_target(target_dir, info.filename, epub_path)
                if info.is_dir():
                    dest.mkdir(parents=True, exist_ok=True)
                    continue
                dest.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(dest, "wb") as out:
                    shutil.copyfileobj(src, out, _CHUNK_SIZE)
                count += 1
    except ArchiveReadFailure:
        raise
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile, RuntimeError) as exc:
        # RuntimeError: entrées chiffrées
        raise ArchiveReadFailure(f"Failed to extract {epub_path}: {exc}", epub_path) from exc

    logger.info("Extracted %d file(s) from %s into %s", count, epub_path, target_dir)
    return target_dir
