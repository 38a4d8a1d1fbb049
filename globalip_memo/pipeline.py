from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

import requests

from globalip_memo.address import IPAddress, IpVersion, parse_ip
from globalip_memo.config import SourceDescriptor
from globalip_memo.consensus import SourceResult, resolve_consensus
from globalip_memo.errors import GlobalIpError
from globalip_memo.extractor import extract_candidate
from globalip_memo.fetcher import build_session, fetch_text
from globalip_memo.state import load_previous, needs_update, write_address


@dataclass(frozen=True)
class RunSummary:
    address: IPAddress
    previous: IPAddress | None
    updated: bool
    resolved: int = 0
    failed: int = 0


def resolve_source(
    source: SourceDescriptor,
    ip_version: IpVersion,
    timeout_seconds: int,
    session: requests.Session,
    logger: logging.Logger | None = None,
) -> SourceResult:
    try:
        body = fetch_text(source.url, timeout_seconds=timeout_seconds, session=session, logger=logger)
        candidate = extract_candidate(body, field_path=source.field_path, pattern=source.pattern)
        address = parse_ip(ip_version, candidate)
    except GlobalIpError as exc:
        if exc.fatal:
            raise
        return SourceResult(source=source, error=exc)
    return SourceResult(source=source, address=address)


def collect_results(
    sources: list[SourceDescriptor],
    ip_version: IpVersion,
    timeout_seconds: int,
    session: requests.Session | None = None,
    max_workers: int = 1,
    logger: logging.Logger | None = None,
) -> list[SourceResult]:
    """Query every source, returning results in configured order regardless of completion order.

    Without an injected ``session`` each source gets its own from ``build_session``,
    so worker threads never share one.
    """
    logger = logger or logging.getLogger(__name__)

    def _resolve(source: SourceDescriptor) -> SourceResult:
        source_session = session or build_session(ip_version)
        try:
            result = resolve_source(source, ip_version, timeout_seconds, source_session, logger=logger)
        finally:
            if session is None:
                source_session.close()
        logger.debug("Result for %s: %s", source.url, result.address if result.ok else result.error)
        return result

    if max_workers <= 1 or len(sources) <= 1:
        return [_resolve(source) for source in sources]
    with ThreadPoolExecutor(max_workers=min(max_workers, len(sources))) as executor:
        return list(executor.map(_resolve, sources))


def run_once(
    sources: list[SourceDescriptor],
    ip_version: IpVersion,
    output_path: Path,
    timeout_seconds: int,
    dry_run: bool = False,
    max_workers: int = 1,
    session: requests.Session | None = None,
    logger: logging.Logger | None = None,
) -> RunSummary:
    logger = logger or logging.getLogger(__name__)

    results = collect_results(
        sources,
        ip_version,
        timeout_seconds=timeout_seconds,
        session=session,
        max_workers=max_workers,
        logger=logger,
    )
    resolved = sum(1 for result in results if result.ok)
    address = resolve_consensus(results, logger=logger)
    previous = load_previous(output_path, ip_version, logger=logger)

    if not needs_update(address, previous):
        logger.info("Up to date - %s", address)
        return RunSummary(address, previous, updated=False, resolved=resolved, failed=len(results) - resolved)

    if dry_run:
        logger.info("Dry run: would update %s to %s - %s", previous or "(none)", address, output_path)
        return RunSummary(address, previous, updated=False, resolved=resolved, failed=len(results) - resolved)

    write_address(output_path, address)
    if previous is None:
        logger.info("Updated to %s - %s", address, output_path)
    else:
        logger.info("Updated %s to %s - %s", previous, address, output_path)
    return RunSummary(address, previous, updated=True, resolved=resolved, failed=len(results) - resolved)
