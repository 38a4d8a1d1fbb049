from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from globalip_memo.address import IPAddress
from globalip_memo.config import SourceDescriptor
from globalip_memo.errors import ErrorKind, GlobalIpError


@dataclass(frozen=True)
class SourceResult:
    source: SourceDescriptor
    address: IPAddress | None = None
    error: GlobalIpError | None = None

    @property
    def ok(self) -> bool:
        return self.address is not None


def tally_votes(results: Iterable[SourceResult]) -> dict[IPAddress, float]:
    """Sum source weights per address, keyed in order of first appearance."""
    tally: dict[IPAddress, float] = {}
    for result in results:
        if result.address is None:
            continue
        tally[result.address] = tally.get(result.address, 0.0) + result.source.weight
    return tally


def _log_failure(result: SourceResult, logger: logging.Logger) -> None:
    logger.warning("Failed to fetch method - %s", result.source.url)
    if result.error is None:
        return
    logger.warning("error - %s", result.error)
    for cause in result.error.causes():
        logger.warning("error source - %s", cause)


def resolve_consensus(results: list[SourceResult], logger: logging.Logger | None = None) -> IPAddress:
    """Return the address with the greatest summed weight.

    ``results`` must be in configured source order: equal weights go to the
    address first reported by an earlier source.
    """
    logger = logger or logging.getLogger(__name__)

    for result in results:
        if result.ok:
            logger.info("Global IP address %s found - %s", result.address, result.source.url)
        else:
            _log_failure(result, logger)

    tally = tally_votes(results)
    if not tally:
        raise GlobalIpError(ErrorKind.NO_CONSENSUS, "Global IP address not found")

    # sorted() is stable with reverse=True, so ties keep tally order.
    ranked = sorted(tally.items(), key=lambda item: item[1], reverse=True)
    logger.debug("Vote tally: %s", ranked)
    if len(ranked) > 1:
        logger.warning("Different addresses detected")
        for address, weight in ranked:
            logger.warning("address - %s, weight - %s", address, weight)
    return ranked[0][0]
