# /studioalign/core/logging_config.py

import logging
import sys

from . import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    """
    Configures the root logger once for the whole process.

    Modules obtain their own logger with `logging.getLogger(__name__)`; this
    function only decides where records go and at which level.
    """
    root = logging.getLogger()
    if any(getattr(handler, "_studioalign", False) for handler in root.handlers):
        root.setLevel(level)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._studioalign = True
    root.addHandler(handler)
    root.setLevel(level)

    # SQLAlchemy's engine logger is noisy at INFO.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
