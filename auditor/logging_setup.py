"""
Logging configuration for the analyzer
"""

import logging
from pathlib import Path

from rich.logging import RichHandler

FRAMEWORK_LOGGERS = ("openai", "httpx", "playwright", "werkzeug", "engineio", "socketio")
APP_LOGGERS = ("auditor", "llm", "web")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_installed_handlers: list[logging.Handler] = []


def setup_logging(log_file: str | Path | None = None, level: str = "INFO", console: bool = False):
    """Setup logging with framework logs suppressed to WARNING"""
    for name in FRAMEWORK_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    handlers: list[logging.Handler] = []
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handlers.append(file_handler)

    if console:
        handlers.append(RichHandler(rich_tracebacks=True, show_path=False))

    # Reconfiguring replaces the handlers of the previous call
    for name in APP_LOGGERS:
        for handler in _installed_handlers:
            logging.getLogger(name).removeHandler(handler)
    for handler in _installed_handlers:
        handler.close()
    _installed_handlers[:] = handlers

    app_level = getattr(logging, str(level).upper(), logging.INFO)
    for name in APP_LOGGERS:
        app_logger = logging.getLogger(name)
        app_logger.setLevel(app_level)
        for handler in handlers:
            app_logger.addHandler(handler)
