import logging
from pathlib import Path

from psedata.core.config import settings

PACKAGE_LOGGER = "psedata"
LOG_FILE_NAME = "psedata.log"


def configure_logging(level: str | None = None, log_dir: Path | None = None) -> logging.Logger:
    """
    Send psedata log records to ``<log_dir>/psedata.log`` and to the console.

    Handlers are attached to the ``psedata`` package logger rather than the
    root logger, so a host application keeps its own handlers. Repeated calls
    only update the level.
    """

    level = (level or settings.log_level).upper()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    present = {type(handler) for handler in package_logger.handlers}
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    if logging.FileHandler not in present:
        log_dir = Path(log_dir or settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8")
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    if logging.StreamHandler not in present:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)

    return package_logger
