from __future__ import annotations

import logging
import os
from pathlib import Path

from globalip_memo.address import IPAddress, IpVersion, parse_ip
from globalip_memo.errors import ErrorKind, GlobalIpError

# Longest textual address: eight groups of four hex digits plus seven colons.
OUTPUT_MAX_SIZE = 39


def load_previous(path: Path, ip_version: IpVersion, logger: logging.Logger | None = None) -> IPAddress | None:
    """Read the last recorded address; every problem reads as "no previous address"."""
    logger = logger or logging.getLogger(__name__)

    if not path.is_file():
        logger.debug("Output file not found - %s", path)
        return None

    try:
        with path.open("rb") as handle:
            data = handle.read(OUTPUT_MAX_SIZE + 1)
    except OSError as exc:
        logger.warning("Failed to read previous output - %s: %s", path, exc)
        return None

    if len(data) > OUTPUT_MAX_SIZE:
        logger.warning("Previous output too large - %s", path)
        return None

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("Failed to decode previous output - %s: %s", path, exc)
        return None

    try:
        address = parse_ip(ip_version, text)
    except GlobalIpError as exc:
        logger.warning("Failed to parse previous output - %s: %s", path, exc)
        return None

    logger.debug("Previous IP address found - %s", address)
    return address


def needs_update(address: IPAddress, previous: IPAddress | None) -> bool:
    return previous is None or previous != address


def write_address(path: Path, address: IPAddress) -> None:
    """Replace the output file atomically; a failed write leaves the old content in place."""
    staging = path.with_name(f".{path.name}.tmp")
    try:
        with staging.open("w", encoding="utf-8", newline="") as handle:
            handle.write(str(address))
        os.replace(staging, path)
    except OSError as exc:
        staging.unlink(missing_ok=True)
        raise GlobalIpError(ErrorKind.PERSISTENCE, f"Failed to write {address} to {path}") from exc
