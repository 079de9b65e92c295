import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def init_logging(module_name: str, log_filename: str, log_dir: str | None = None) -> logging.Logger:
    """Return a logger writing to the project's ``logs`` directory and stdout.

    Handlers are attached to the ``govcontracts`` package logger so that every
    module logging through ``logging.getLogger(__name__)`` ends up in the same
    rotating file.
    """
    if log_dir is None:
        base_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
        log_dir = os.path.join(base_dir, "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, log_filename)

    package_logger = logging.getLogger("govcontracts")
    package_logger.setLevel(logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT)

    if not any(
        isinstance(h, RotatingFileHandler) and getattr(h, "baseFilename", None) == os.path.abspath(log_path)
        for h in package_logger.handlers
    ):
        file_handler = RotatingFileHandler(log_path, maxBytes=2 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        package_logger.addHandler(stream_handler)

    return logging.getLogger(module_name)
