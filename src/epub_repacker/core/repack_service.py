# epub_repacker/src/epub_repacker/core/repack_service.py
"""
Service de reconstruction EPUB.

Orchestre le pipeline séquentiel d'un livre:
extraction -> lecture structurelle -> étapes de modification en place
-> reconstruction de l'archive -> vérification.

Chaque étape est une fonction appelée dans le même processus; le
pipeline s'arrête à la première étape en échec et indique laquelle.
Plusieurs livres peuvent être traités en parallèle à condition que
chacun ait son propre dossier de travail.
"""

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from ..config import get_temp_dir
from .epub import (
    ManifestIndex,
    extract_epub,
    find_toc_files,
    get_content_dir,
    get_package_document_path,
    verify_epub,
    write_epub,
)
from .file_utils import find_epubs_in_folder, make_job_workdir, prepare_workdir, remove_workdir
from .models import BookStructure, PipelineResult, StageResult

logger = logging.getLogger(__name__)

Stage = Callable[[BookStructure], None]


def inspect_workdir(workdir: Union[str, Path]) -> BookStructure:
    """
    Lit les faits structurels d'un EPUB extrait.

    Doit être appelée avant toute modification du texte.

    Raises:
        EpubStructureError: si le conteneur ou le document de package est invalide
    """
    workdir = Path(workdir).resolve()
    package_document = get_package_document_path(workdir)
    manifest = ManifestIndex.load(package_document)
    content_dir = get_content_dir(workdir)
    content_path = workdir / content_dir if content_dir else workdir

    structure = BookStructure(
        workdir=workdir,
        package_document=package_document,
        content_dir=content_dir,
        manifest=manifest,
        toc_files=find_toc_files(manifest, content_path),
    )
    logger.info(
        "Structure of %s: opf=%s content_dir=%r items=%d nav=%s ncx=%s",
        workdir,
        package_document.relative_to(workdir).as_posix(),
        content_dir,
        len(manifest),
        structure.toc_files.epub3_nav,
        structure.toc_files.epub2_ncx,
    )
    return structure


def stage_name(stage: Stage) -> str:
    return getattr(stage, "__name__", None) or repr(stage)


class RepackService:
    """
    Service de reconstruction EPUB.

    Fournit les opérations de haut niveau:
    - Traitement complet d'un fichier (repack)
    - Traitement d'un dossier entier, un dossier de travail par livre
    """

    def __init__(
        self,
        stages: Sequence[Stage] = (),
        temp_root: Optional[Union[str, Path]] = None,
        verify: bool = True,
    ):
        """
        Args:
            stages: Étapes de modification en place, exécutées dans l'ordre
            temp_root: Dossier parent des dossiers de travail
            verify: Si True, relit l'archive produite
        """
        self.stages = list(stages)
        self.temp_root = Path(temp_root) if temp_root else Path(get_temp_dir())
        self.verify = verify
        logger.debug("RepackService initialized with %d stage(s)", len(self.stages))

    def _run_stage(self, result: PipelineResult, name: str, func: Callable[[], object]):
        logger.info("=== %s ===", name)
        try:
            value = func()
        except Exception as e:
            logger.exception("Stage %s failed for %s", name, result.input_path)
            result.stages.append(StageResult(name=name, ok=False, error=str(e)))
            result.note = f"{name} failed: {e}"
            return False, None
        result.stages.append(StageResult(name=name, ok=True))
        return True, value

    def repack(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        workdir: Optional[Union[str, Path]] = None,
        clean: bool = False,
    ) -> PipelineResult:
        """
        Traite un fichier EPUB de bout en bout.

        Args:
            input_path: Archive EPUB source
            output_path: Archive EPUB à produire
            workdir: Dossier de travail (un dossier unique est créé sinon)
            clean: Si True, supprime le dossier de travail après succès

        Returns:
            PipelineResult; ``failed_stage`` indique l'étape en échec
        """
        result = PipelineResult(input_path=str(input_path))
        workdir = Path(workdir) if workdir else make_job_workdir(self.temp_root, input_path)
        output_path = Path(output_path)

        ok, _ = self._run_stage(result, "extract", lambda: extract_epub(input_path, prepare_workdir(workdir)))
        if not ok:
            return result

        ok, structure = self._run_stage(result, "inspect", lambda: inspect_workdir(workdir))
        if not ok:
            return result
        result.structure = structure

        for stage in self.stages:
            ok, _ = self._run_stage(result, stage_name(stage), lambda: stage(structure))
            if not ok:
                logger.warning("Working directory kept for inspection: %s", workdir)
                return result

        ok, _ = self._run_stage(result, "write", lambda: write_epub(workdir, output_path))
        if not ok:
            return result

        if self.verify:
            ok, _ = self._run_stage(result, "verify", lambda: verify_epub(output_path))
            if not ok:
                if output_path.exists():
                    os.remove(output_path)
                    logger.info("Removed unreadable output %s", output_path)
                return result

        result.output_path = str(output_path)
        result.ok = True
        result.note = "Repacked"

        if clean:
            remove_workdir(workdir)
        else:
            logger.info("Temporary files kept in %s", workdir)

        logger.info("Successfully processed: %s -> %s", input_path, output_path)
        return result

    def process_folder(
        self,
        folder_path: str,
        output_dir: Union[str, Path],
        clean: bool = True,
    ) -> List[PipelineResult]:
        """
        Traite un dossier entier de fichiers EPUB.

        Chaque livre obtient son propre dossier de travail; les archives
        produites reprennent sous ``output_dir`` le chemin relatif de la
        source.

        Returns:
            Liste des résultats, dans l'ordre des fichiers trouvés
        """
        logger.info("Processing folder: %s", folder_path)
        output_dir = Path(output_dir)

        results = []
        for epub_path in find_epubs_in_folder(folder_path):
            output_path = output_dir / Path(epub_path).relative_to(folder_path)
            results.append(self.repack(epub_path, output_path, clean=clean))

        logger.info(
            "Processed %d files (%d failed)",
            len(results),
            sum(1 for r in results if not r.ok),
        )
        return results
