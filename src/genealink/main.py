"""Application wiring for GeneaLink: logging and storage selection."""

import sys
from pathlib import Path

from loguru import logger

from genealink.config import Config, get_config
from genealink.repositories import (
    InMemoryPersonRepository,
    PersonRepository,
    SqlitePersonRepository,
)

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


def configure_logging(config: Config | None = None) -> Path:
    """Send logs to stderr and to a rotating file.

    Args:
        config: Settings providing ``log_level`` and ``log_file``

    Returns:
        Path of the log file
    """
    config = config or get_config()

    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(sys.stderr, level=config.log_level, format=LOG_FORMAT)

    # Add file sink for all logs (rotation at 10 MB, keep 5 old files)
    logger.add(
        log_path,
        rotation="10 MB",
        retention=5,
        level=config.log_level,
        format=LOG_FORMAT,
        backtrace=True,
        diagnose=True,
    )

    logger.debug(f"Logging to file: {log_path}")
    return log_path


def open_repository(path: str | Path | None = None) -> PersonRepository:
    """Open the register at ``path`` (default: configured database).

    ``.json`` files are loaded into memory; anything else is opened as a
    SQLite database.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path or get_config().database_path).expanduser()
    if path.suffix.lower() == ".json":
        repository: PersonRepository = InMemoryPersonRepository.from_json(path)
    else:
        repository = SqlitePersonRepository(path)
    logger.debug(f"Opened register {path}")
    return repository
