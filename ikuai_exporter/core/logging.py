from __future__ import annotations

import logging

LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    # urllib3 logs every connection at debug level
    logging.getLogger("urllib3").setLevel(logging.INFO if debug else logging.WARNING)
