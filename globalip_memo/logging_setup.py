from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(filename)s:%(lineno)d %(name)s - %(message)s"

_LEVEL_ALIASES = {"warn": "WARNING"}


def parse_level(level: str) -> int:
    name = level.strip().lower()
    name = _LEVEL_ALIASES.get(name, name.upper())
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Invalid log level: {level}")
    return value


def setup_logging(level: str) -> None:
    logging.basicConfig(level=parse_level(level), format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
