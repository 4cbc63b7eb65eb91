# epub_repacker/src/epub_repacker/cli.py
"""
Logique pour le mode ligne de commande.

Utilise RepackService pour réutiliser la logique de reconstruction.
"""

import logging
from typing import List, Optional

from .core.epub.spine import cover_linear_stage
from .core.epub.toc_cover import cover_link_stage
from .core.models import PipelineResult
from .core.repack_service import RepackService

logger = logging.getLogger(__name__)


def build_service(
    temp_root: Optional[str] = None,
    cover_label: Optional[str] = None,
    cover_linear: bool = False,
) -> RepackService:
    """Construit le service avec les étapes demandées en ligne de commande."""
    stages = []
    if cover_linear:
        stages.append(cover_linear_stage())
    if cover_label:
        stages.append(cover_link_stage(cover_label))
    return RepackService(stages=stages, temp_root=temp_root)


def cli_repack_file(
    input_path: str,
    output_path: str,
    temp_dir: Optional[str] = None,
    clean: bool = False,
    cover_label: Optional[str] = None,
    cover_linear: bool = False,
) -> PipelineResult:
    """
    Traite un fichier EPUB en mode CLI.

    Args:
        input_path: Archive source
        output_path: Archive à produire
        temp_dir: Dossier de travail explicite (sinon un dossier unique)
        clean: Si True, supprime le dossier de travail après succès
        cover_label: Libellé du lien de couverture à ajouter aux TOC
        cover_linear: Si True, rend la couverture linéaire dans le spine

    Returns:
        Résultat du pipeline
    """
    logger.info("CLI mode - processing file: %s", input_path)
    service = build_service(cover_label=cover_label, cover_linear=cover_linear)
    return service.repack(input_path, output_path, workdir=temp_dir, clean=clean)


def cli_process_folder(
    folder: str,
    output_dir: str,
    temp_root: Optional[str] = None,
    cover_label: Optional[str] = None,
    clean: bool = False,
    cover_linear: bool = False,
) -> List[PipelineResult]:
    """Traite un dossier entier en mode CLI."""
    logger.info("CLI mode - processing folder: %s", folder)
    service = build_service(temp_root=temp_root, cover_label=cover_label, cover_linear=cover_linear)
    results = service.process_folder(folder, output_dir, clean=clean)
    logger.info("CLI mode - processed %d files", len(results))
    return results


def print_result_summary(results: List[PipelineResult]):
    """Affiche un résumé des traitements."""
    print("\n=== Résumé du traitement ===")
    print(f"Fichiers traités: {len(results)}")

    succeeded = sum(1 for r in results if r.ok)
    print(f"Réussis: {succeeded}")

    failed = [r for r in results if not r.ok]
    if failed:
        print("\n=== Échecs ===")
        for result in failed:
            print(f"\n{result.input_path}:")
            print(f"  Étape en échec: {result.failed_stage}")
            print(f"  {result.note}")

    for result in results:
        if result.ok and result.structure is not None:
            toc = result.structure.toc_files
            print(f"\n{result.input_path} -> {result.output_path}")
            print(f"  Dossier de contenu: {result.structure.content_dir or '(racine)'}")
            print(f"  Navigation EPUB3: {toc.epub3_nav or 'absente'}")
            print(f"  NCX EPUB2: {toc.epub2_ncx or 'absent'}")
