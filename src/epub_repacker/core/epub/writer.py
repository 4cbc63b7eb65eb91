# epub_repacker/src/epub_repacker/core/epub/writer.py
"""
Module d'écriture d'archive EPUB.

Responsabilité unique: reconstruire une archive OCF à partir d'un
dossier de travail, en respectant les règles d'ordre et de compression:

- ``mimetype`` en premier, non compressé, contenu exact ``application/epub+zip``
- tous les autres fichiers en DEFLATE, triés par chemin relatif
"""

import logging
import os
import zipfile
from pathlib import Path
from typing import List, Tuple, Union

from ...config import EPUB_MIMETYPE, MIMETYPE_FILENAME
from ..exceptions import ArchiveWriteFailure, MissingMimetype

logger = logging.getLogger(__name__)

# Horodatage fixe pour des archives identiques octet pour octet
_FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_FILE_MODE = 0o100644 << 16


# --- Helpers pour la construction de l'archive ---


def _read_mimetype(workdir: Path) -> bytes:
    """
    Vérifie le fichier mimetype du dossier de travail.

    Un retour à la ligne final est toléré (et retiré); tout autre
    contenu est refusé.
    """
    mimetype_path = workdir / MIMETYPE_FILENAME
    if not mimetype_path.is_file():
        raise MissingMimetype(f"No mimetype file at {mimetype_path}", mimetype_path)

    raw = mimetype_path.read_bytes()
    if raw.strip() != EPUB_MIMETYPE.encode("ascii"):
        raise MissingMimetype(
            f"mimetype file does not declare {EPUB_MIMETYPE}: {raw[:40]!r}", mimetype_path
        )
    if raw != EPUB_MIMETYPE.encode("ascii"):
        logger.warning("Normalized whitespace in %s", mimetype_path)
    return EPUB_MIMETYPE.encode("ascii")


def _raise_walk_error(exc: OSError):
    path = Path(exc.filename) if exc.filename else None
    raise ArchiveWriteFailure(f"Cannot list {exc.filename}: {exc}", path) from exc


def collect_entries(workdir: Union[str, Path], exclude: Tuple[Path, ...] = ()) -> List[Tuple[str, Path]]:
    """
    Liste les fichiers à archiver (hors mimetype), triés par chemin relatif.

    Returns:
        Liste de tuples (nom d'entrée avec '/', chemin sur le disque)

    Raises:
        ArchiveWriteFailure: un dossier du dossier de travail ne peut pas être listé
    """
    workdir = Path(workdir)
    excluded = {p.resolve() for p in exclude}
    entries = []
    for root, dirs, files in os.walk(workdir, onerror=_raise_walk_error):
        dirs.sort()
        for name in files:
            path = Path(root) / name
            if path.resolve() in excluded:
                continue
            arcname = path.relative_to(workdir).as_posix()
            if arcname == MIMETYPE_FILENAME:
                continue
            entries.append((arcname, path))
    entries.sort(key=lambda entry: entry[0])
    return entries


def _zip_info(arcname: str, compress_type: int) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(arcname, date_time=_FIXED_DATE_TIME)
    info.compress_type = compress_type
    info.external_attr = _FILE_MODE
    info.create_system = 3
    return info


def _write_archive(target: Path, mimetype: bytes, entries: List[Tuple[str, Path]]):
    with zipfile.ZipFile(target, "w") as zf:
        # mimetype doit être la toute première entrée, sans compression
        zf.writestr(_zip_info(MIMETYPE_FILENAME, zipfile.ZIP_STORED), mimetype)
        for arcname, path in entries:
            zf.writestr(_zip_info(arcname, zipfile.ZIP_DEFLATED), path.read_bytes())


# --- Fonction principale d'écriture ---


def write_epub(workdir: Union[str, Path], output_path: Union[str, Path]) -> Path:
    """
    Construit une archive EPUB conforme OCF à partir d'un dossier de travail.

    L'archive est d'abord écrite dans un fichier temporaire puis déplacée
    atomiquement: en cas d'échec, ``output_path`` n'est jamais laissé
    à moitié écrit.

    Args:
        workdir: Racine du dossier de travail
        output_path: Chemin de l'archive à produire

    Returns:
        Chemin de l'archive produite

    Raises:
        MissingMimetype: pas de fichier mimetype valide à la racine
        ArchiveWriteFailure: erreur d'E/S pendant l'écriture
    """
    workdir = Path(workdir)
    output_path = Path(output_path)
    temp_path = output_path.with_name(output_path.name + ".tmp")

    mimetype = _read_mimetype(workdir)
    entries = collect_entries(workdir, exclude=(output_path, temp_path))

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        _write_archive(temp_path, mimetype, entries)
        logger.debug("Wrote temporary archive %s", temp_path)

        os.replace(temp_path, output_path)
    except OSError as exc:
        logger.exception("Failed during temp write or replace: %s", exc)
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                logger.warning("Could not remove temporary file %s", temp_path)
        raise ArchiveWriteFailure(f"Failed to write {output_path}: {exc}", output_path) from exc

    logger.info("Created EPUB %s (%d entries)", output_path, len(entries) + 1)
    return output_path
