# epub_repacker/src/epub_repacker/config.py
"""
Configuration et constantes pour EPUB Repacker
"""

import os

# ---------- Conteneur OCF ----------
MIMETYPE_FILENAME = "mimetype"
EPUB_MIMETYPE = "application/epub+zip"
CONTAINER_PATH = ("META-INF", "container.xml")
OPF_MEDIA_TYPE = "application/oebps-package+xml"

# ---------- Dossiers de contenu (ordre de priorité) ----------
CONTENT_DIR_CONVENTIONS = ("OPS", "OEBPS")

# ---------- Découverte de la table des matières ----------
NAV_PROPERTY = "nav"
NCX_MEDIA_TYPE = "application/x-dtbncx+xml"

# ---------- Lien de couverture dans la TOC ----------
COVER_HREF = "cover.xhtml"
COVER_NAVPOINT_ID = "navpoint-cover"
COVER_IDREF = "cover"

# ---------- Extensions supportées ----------
SUPPORTED_EXT = (".epub",)

# ---------- Dossiers ----------
DEFAULT_TEMP_DIR = "temp_epub"
LOG_DIR = "logs"

# ---------- Configuration logging ----------
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB
LOG_BACKUP_COUNT = 5
LOG_ENCODING = "utf-8"

# ---------- Variables d'environnement ----------
TEMP_DIR_ENV_VAR = "EPUB_REPACKER_TEMP_DIR"
NO_FILE_LOG_ENV_VAR = "EPUB_REPACKER_NO_FILE_LOG"


def get_temp_dir() -> str:
    """Retourne le dossier de travail racine (variable d'environnement ou défaut)."""
    return os.getenv(TEMP_DIR_ENV_VAR) or os.path.join(os.getcwd(), DEFAULT_TEMP_DIR)


# ---------- Initialisation des dossiers ----------
def ensure_directories():
    """Crée les dossiers nécessaires s'ils n'existent pas."""
    os.makedirs(LOG_DIR, exist_ok=True)
