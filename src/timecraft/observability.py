"""
Logging setup for timecraft.

Library modules only call logging.getLogger(__name__); hosts that want
timecraft's output formatted call configure_logging() once.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional, Union

LOGGER_NAME = "timecraft"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the kernel extras when present."""

    def format(self, record: logging.LogRecord) -> str:
        base: Dict[str, Any] = {
            "timestamp": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in ("kernel_key", "kernel_path"):
            if hasattr(record, attr):
                base[attr] = getattr(record, attr)

        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)

        return json.dumps(base, ensure_ascii=False)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    json_logs: bool = False,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Attach a single handler to the timecraft logger.

    Calling it again replaces the previous handler rather than stacking.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    for h in list(logger.handlers):
        logger.removeHandler(h)

    if handler is None:
        handler = logging.StreamHandler()
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    logger.addHandler(handler)
    return logger
