# epub_repacker/src/epub_repacker/core/models.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, FrozenSet, List, Optional

if TYPE_CHECKING:
    from .epub.manifest import ManifestIndex


@dataclass(frozen=True)
class ManifestItem:
    """Un item du manifeste du document de package."""

    id: str
    href: str
    media_type: str
    properties: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Container:
    """Racine extraite et chemin résolu du document de package."""

    root: Path
    package_document: Path


@dataclass(frozen=True)
class TocFiles:
    """Fichiers de table des matières découverts (chacun optionnel)."""

    epub3_nav: Optional[Path] = None
    epub2_ncx: Optional[Path] = None

    @property
    def empty(self) -> bool:
        return self.epub3_nav is None and self.epub2_ncx is None


@dataclass
class BookStructure:
    """Faits structurels d'un livre extrait, produits avant toute modification."""

    workdir: Path
    package_document: Path
    content_dir: str
    manifest: "ManifestIndex"
    toc_files: TocFiles

    @property
    def content_path(self) -> Path:
        return self.workdir / self.content_dir if self.content_dir else self.workdir


@dataclass
class StageResult:
    """Résultat d'une étape du pipeline."""

    name: str
    ok: bool
    error: Optional[str] = None


@dataclass
class PipelineResult:
    """Résultat complet d'un traitement EPUB."""

    input_path: str
    output_path: Optional[str] = None
    structure: Optional[BookStructure] = None
    stages: List[StageResult] = field(default_factory=list)
    ok: bool = False
    note: str = ""

    @property
    def failed_stage(self) -> Optional[str]:
        for stage in self.stages:
            if not stage.ok:
                return stage.name
        return None
