# epub_repacker/src/epub_repacker/main.py
"""
Point d'entrée principal pour EPUB Repacker
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from .config import (
    LOG_BACKUP_COUNT,
    LOG_DIR,
    LOG_ENCODING,
    LOG_MAX_BYTES,
    NO_FILE_LOG_ENV_VAR,
    ensure_directories,
)

USAGE = """Usage: python -m epub_repacker <input> <output> [--temp DIR] [--clean] [--cover-label TEXT] [--cover-linear]
  input: Fichier EPUB, ou dossier contenant des fichiers EPUB
  output: Fichier EPUB à produire, ou dossier de sortie
  --temp: Dossier de travail (dossier racine en mode dossier)
  --clean: Supprime le dossier de travail après succès
  --cover-label: Ajoute un lien de couverture avec ce libellé aux TOC
  --cover-linear: Rend la couverture linéaire dans le spine (itemref idref="cover")"""


def setup_logging():
    """Configure le système de logging."""
    logger = logging.getLogger("epub_repacker")
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG)

    # Handler pour fichier avec rotation
    if os.getenv(NO_FILE_LOG_ENV_VAR) != "1":
        ensure_directories()
        logfile = os.path.join(LOG_DIR, "epub_repacker.log")
        handler = RotatingFileHandler(
            logfile, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding=LOG_ENCODING
        )
        formatter = logging.Formatter("%(asctime)s %(levelname)s [%(threadName)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Handler pour console
    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console)

    return logger


def _option_value(args: List[str], name: str) -> Optional[str]:
    """Lit ``--name value`` ou ``--name=value``."""
    for i, arg in enumerate(args):
        if arg.startswith(name + "="):
            return arg.split("=", 1)[1]
        if arg == name and i + 1 < len(args):
            return args[i + 1]
    return None


def _positionals(args: List[str]) -> List[str]:
    values = []
    skip = False
    for arg in args:
        if skip:
            skip = False
            continue
        if arg in ("--temp", "--cover-label"):
            skip = True
            continue
        if arg.startswith("--"):
            continue
        values.append(arg)
    return values


def run_cli(argv: Optional[List[str]] = None) -> int:
    """Lance le mode ligne de commande."""
    logger = logging.getLogger("epub_repacker")
    args = sys.argv[1:] if argv is None else argv

    positionals = _positionals(args)
    if len(positionals) < 2:
        print(USAGE)
        return 1

    input_path, output_path = positionals[:2]
    temp_dir = _option_value(args, "--temp")
    cover_label = _option_value(args, "--cover-label")
    clean = "--clean" in args
    cover_linear = "--cover-linear" in args

    if not os.path.exists(input_path):
        print(f"Error: {input_path} does not exist")
        return 1

    try:
        from .cli import cli_process_folder, cli_repack_file, print_result_summary

        if os.path.isdir(input_path):
            results = cli_process_folder(input_path, output_path, temp_dir, cover_label, clean, cover_linear)
        else:
            results = [cli_repack_file(input_path, output_path, temp_dir, clean, cover_label, cover_linear)]
        print_result_summary(results)
    except Exception as e:
        logger.exception("Error in CLI mode")
        print(f"Error: {e}")
        return 1

    failed = [r for r in results if not r.ok]
    for result in failed:
        print(f"\n✗ {result.failed_stage} failed for {result.input_path}.")
    return 1 if failed else 0


def main(argv: Optional[List[str]] = None) -> int:
    """Point d'entrée principal."""
    setup_logging()
    return run_cli(argv)


if __name__ == "__main__":
    raise SystemExit(main())
