import logging
import sys
from typing import Optional


class HWLogger:
    _instance: Optional["HWLogger"] = None
    _logger: Optional[logging.Logger] = None

    def __new__(cls) -> "HWLogger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._logger is None:
            self._setup_logging("INFO")

    def _setup_logging(self, level: str) -> None:
        logger = logging.getLogger("hwcontract")
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter(
                    fmt="%(asctime)s - %(levelname)-5s - %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                    style="%",
                )
            )
            logger.addHandler(handler)
        logger.setLevel(level)
        self._logger = logger

    def set_logging_level(self, level: str) -> logging.Logger:
        if self._logger is None:
            raise RuntimeError("Logger not initialized")
        self._logger.setLevel(level)
        return self._logger

    @property
    def logger(self) -> logging.Logger:
        if self._logger is None:
            raise RuntimeError("Logger not initialized")
        return self._logger


_hw_logger = HWLogger()


def get_logger() -> logging.Logger:
    return _hw_logger.logger


def set_logging_level(level: str) -> logging.Logger:
    return _hw_logger.set_logging_level(level)
