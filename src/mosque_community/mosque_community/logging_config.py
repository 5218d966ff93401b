from __future__ import annotations

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_HANDLER_NAME = "mosque_community.console"


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Install a single console handler on the root logger.

    Safe to call more than once (app factory in tests): the handler is only
    added the first time, later calls just change the level.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    # mysql-connector is chatty at DEBUG
    logging.getLogger("mysql.connector").setLevel(max(level, logging.INFO))
