import logging

LOGGER_NAME = "deezer_auth"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(level: int = logging.INFO, log_file: str = None) -> None:
    """Configure root logging for the CLI (console, plus an optional file)."""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    # httpx request lines are noise in the interactive menu.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_info(message: str) -> None:
    logger.info(message)


def log_success(message: str) -> None:
    logger.info(f"✅ {message}")


def log_warning(message: str) -> None:
    logger.warning(message)


def log_error(message: str) -> None:
    logger.error(message)
