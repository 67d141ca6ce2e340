"""Log setup for typst-review.

Progress goes to stderr so it never mixes with the transcript on stdout.
Level and format come from LoggingConfig (logging.level / LOGGING_LEVEL).
"""

import logging
import sys

from typst_review.config import LoggingConfig

LEVELS = {name: getattr(logging, name) for name in ("DEBUG", "INFO", "WARNING", "ERROR")}
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    return LEVELS.get(level.upper().strip(), logging.INFO)


class ReviewLogging:
    """Root logger setup; DEBUG additionally shows every external command line."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> None:
        logging.basicConfig(level=self._level, format=self._format, stream=sys.stderr, force=True)

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)
