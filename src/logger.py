"""Logging helpers for the filter engine."""

import logging
import sys
from typing import Optional

from constants import LOGGER_NAME
from interfaces import ILogger


def log_tag(version: str, lite: bool) -> str:
    variant = "lite" if lite else "full"
    return f"[Cosmetic filters (v{version} {variant})]:"


class FilterLogger(ILogger):
    def __init__(
        self,
        version: str,
        lite: bool = False,
        log_file: Optional[str] = None,
        quiet: bool = False,
        verbose: bool = False,
    ):
        self.tag = log_tag(version, lite)
        self.quiet = quiet
        self.logger = logging.getLogger(LOGGER_NAME)
        self._setup_logging(log_file, verbose)

    def _setup_logging(self, log_file, verbose):
        formatter = logging.Formatter(self.tag + " %(message)s")

        if self.quiet:
            console = logging.NullHandler()
        else:
            console = logging.StreamHandler(sys.stderr)
            console.setFormatter(formatter)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("[%(asctime)s][%(levelname)s] " + self.tag + " %(message)s", "%Y-%m-%d %H:%M:%S")
            )
        else:
            file_handler = logging.NullHandler()

        self.logger.propagate = False
        self.logger.handlers = []
        self.logger.setLevel(logging.DEBUG if verbose else logging.INFO)
        self.logger.addHandler(console)
        self.logger.addHandler(file_handler)

    @staticmethod
    def _join(data) -> str:
        return " ".join(str(d) for d in data)

    def log(self, *data) -> None:
        self.logger.info(self._join(data))

    def debug(self, *data) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._join(data))

    def error(self, *data) -> None:
        self.logger.error(self._join(data))
