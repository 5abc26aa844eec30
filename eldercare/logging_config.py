# eldercare/logging_config.py
"""
Logging estructurado (JSON) a stdout.

Los campos ``extra`` de cada llamada (member_id, bed_id, ...) salen como
claves propias del objeto JSON.
"""

import logging
import sys
from pythonjsonlogger import jsonlogger

from eldercare.config import settings

# Librerías que solo interesan cuando fallan
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy", "asyncpg", "aiosqlite")


def setup_logging(level: str = settings.log_level) -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(level.upper())

    # uvicorn --reload vuelve a importar el módulo
    if not any(isinstance(h.formatter, jsonlogger.JsonFormatter) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(jsonlogger.JsonFormatter(
            fmt='%(asctime)s %(name)s %(levelname)s %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%S',
            rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        ))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


logger = setup_logging()
