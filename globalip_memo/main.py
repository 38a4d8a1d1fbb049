from __future__ import annotations

import logging
import sys

import requests

from globalip_memo.config import AppConfig, load_config
from globalip_memo.errors import GlobalIpError, cause_chain
from globalip_memo.logging_setup import setup_logging
from globalip_memo.pipeline import RunSummary, run_once


def run(config: AppConfig, logger: logging.Logger, session: requests.Session | None = None) -> RunSummary:
    summary = run_once(
        sources=config.sources,
        ip_version=config.ip_version,
        output_path=config.output_path,
        timeout_seconds=config.request_timeout_seconds,
        dry_run=config.dry_run,
        max_workers=config.max_workers,
        session=session,
        logger=logger,
    )
    logger.info(
        "Run completed. address=%s updated=%s resolved=%d failed=%d",
        summary.address,
        summary.updated,
        summary.resolved,
        summary.failed,
    )
    return summary


def main(argv: list[str] | None = None) -> int:
    try:
        config = load_config(argv=argv)
    except GlobalIpError as exc:
        print(f"Configuration error: {' - '.join(cause_chain(exc))}", file=sys.stderr)
        return 2

    setup_logging(config.log_level)
    logger = logging.getLogger("globalip-memo")
    logger.info(
        "Start processing config=%s output=%s ip_version=%s sources=%d dry_run=%s",
        config.config_path,
        config.output_path,
        config.ip_version.label,
        len(config.sources),
        config.dry_run,
    )

    try:
        run(config=config, logger=logger)
    except GlobalIpError as exc:
        logger.error("error - %s", exc)
        for cause in exc.causes():
            logger.error("error source - %s", cause)
        return 1

    logger.info("Successfully completed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
