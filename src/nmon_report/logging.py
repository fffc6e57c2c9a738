from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
QUIET_LOGGERS = ("matplotlib", "PIL")


def configure_logging(level: str = "INFO") -> None:
    level_name = level.upper()
    logging.basicConfig(level=level_name, format=LOG_FORMAT)
    # Font discovery and PNG encoding flood DEBUG output on every chart.
    threshold = max(logging.getLevelName(level_name), logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(threshold)
