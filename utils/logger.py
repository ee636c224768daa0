"""
Logging utilities with thread-safe considerations.
"""
import logging
import threading
from typing import Optional
from config.settings import LOG_LEVEL, LOG_FORMAT, LOG_FILE


class ThreadSafeLogger:
    """
    Thread-safe logger wrapper.
    Commands may be resolved from several threads while one transport thread writes.
    """

    def __init__(self, name: str, level: str = LOG_LEVEL, log_file: Optional[str] = LOG_FILE):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._lock = threading.RLock()

        # Avoid duplicate handlers
        if not self._logger.handlers:
            formatter = logging.Formatter(LOG_FORMAT)

            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            self._logger.addHandler(console_handler)

            if log_file:
                try:
                    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
                    file_handler.setFormatter(formatter)
                    self._logger.addHandler(file_handler)
                except OSError as e:
                    self._logger.warning(f"Could not open log file {log_file}: {e}")

    @property
    def name(self) -> str:
        return self._logger.name

    def info(self, message: str) -> None:
        with self._lock:
            self._logger.info(message)

    def error(self, message: str) -> None:
        with self._lock:
            self._logger.error(message)

    def warning(self, message: str) -> None:
        with self._lock:
            self._logger.warning(message)

    def debug(self, message: str) -> None:
        with self._lock:
            self._logger.debug(message)

    def critical(self, message: str) -> None:
        with self._lock:
            self._logger.critical(message)

    def exception(self, message: str) -> None:
        with self._lock:
            self._logger.exception(message)


def get_logger(name: str, level: str = LOG_LEVEL) -> ThreadSafeLogger:
    """Get a thread-safe logger instance."""
    return ThreadSafeLogger(name, level)
