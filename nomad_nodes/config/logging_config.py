"""Configuration centralisée du logging pour nomad_nodes.

Les logs partent sur stderr (et éventuellement dans un fichier): stdout est
réservé au rapport.
"""

import os
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

def setup_logging(level: Optional[str] = None) -> None:
    """Configure le logging global pour l'outil."""

    # Charger la configuration depuis les variables d'environnement
    log_level = (level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    log_format = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = os.getenv("LOG_FILE")

    # Handler pour console (stderr)
    handlers = [logging.StreamHandler()]

    if log_file:
        # Créer le dossier de logs s'il n'existe pas
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # Handler pour fichier avec rotation
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
        )

    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format=log_format,
        handlers=handlers,
        force=True
    )

    # Configuration spécifique pour les modules
    loggers_config = {
        'httpx': 'WARNING',     # Une ligne par requête sinon
        'httpcore': 'WARNING',
        'asyncio': 'WARNING'
    }

    for logger_name, lvl in loggers_config.items():
        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, lvl, logging.WARNING))

def get_logger(name: str) -> logging.Logger:
    """Retourne un logger configuré pour le module donné."""
    return logging.getLogger(name)
