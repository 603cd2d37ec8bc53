"""
Append-only error log file.

Each entry is one ``<ISO8601 timestamp> - <stack trace>`` line. The file is
never read, rotated or pruned by the service.
"""

import logging
import sys
import traceback
from pathlib import Path
from typing import Union

import structlog

from utilities.logger import iso_timestamp

logger = structlog.get_logger(__name__)


def format_stack(error: BaseException) -> str:
    """Render an exception the way a traceback prints it, without the trailing newline."""
    return "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    ).rstrip("\n")


class ErrorLogHandler(logging.FileHandler):
    """FileHandler that reports failed writes through structlog instead of stderr."""

    def handleError(self, record: logging.LogRecord) -> None:
        error = sys.exc_info()[1]
        logger.error("Error writing to error log", path=self.baseFilename, error=str(error))


class ErrorLogSink:
    """Writes error entries to a flat file through a dedicated stdlib logger."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.handler = ErrorLogHandler(self.path, mode="a", encoding="utf-8", delay=True)
        self.handler.setFormatter(logging.Formatter('%(message)s'))

        self._logger = logging.getLogger(f"{__name__}.{id(self)}")
        self._logger.setLevel(logging.ERROR)
        self._logger.propagate = False
        self._logger.addHandler(self.handler)

    def format_entry(self, error: BaseException) -> str:
        return f"{iso_timestamp()} - {format_stack(error)}"

    def write(self, error: BaseException) -> None:
        """
        Append one entry for ``error``.

        A failed write is only reported through the process logger and never
        propagates to the caller.
        """
        try:
            self._logger.error(self.format_entry(error))
        except OSError as e:
            # The file is opened on first write; a bad path fails here
            logger.error("Error writing to error log", path=str(self.path), error=str(e))

    def close(self) -> None:
        """Release the file handle."""
        self._logger.removeHandler(self.handler)
        self.handler.close()
        logging.Logger.manager.loggerDict.pop(self._logger.name, None)
