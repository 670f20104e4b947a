"""
Configuration du logging de l'application via loguru.

Deux handlers :
- console (stderr) : coloree, pour suivre les tentatives et relances en direct
- fichier : JSON avec rotation, pour retrouver apres coup pourquoi une
  signature a echoue

La CLI coupe la console en mode --quiet : le fichier garde alors seul la trace.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = Path("logs/tokenqueue.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
    console: bool = True,
) -> None:
    """Configure le logging de l'application.

    Args :
        log_level : Niveau minimum pour la console (DEBUG, INFO, WARNING, ERROR)
        log_file : Fichier de log JSON, ou None pour ne rien ecrire sur disque
        rotation_size : Taille maximale du fichier avant rotation (ex: "10 MB")
        retention_count : Nombre de fichiers rotatifs a conserver
        console : Ajoute le handler stderr
    """
    logger.remove()

    if console:
        logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT, colorize=True)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",  # Chaque tentative est tracee au niveau DEBUG
            format="{message}",
            serialize=True,
            rotation=rotation_size,
            retention=retention_count,
            compression="zip",
            enqueue=True,
        )

    logger.debug("Logging configure", log_file=str(log_file), console=console)
