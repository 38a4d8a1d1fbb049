from __future__ import annotations

import argparse
import json
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from globalip_memo.address import IpVersion
from globalip_memo.errors import ErrorKind, GlobalIpError
from globalip_memo.logging_setup import parse_level

HOME_ENV = "GLOBALIP_MEMO_HOME"
LOG_ENV = "GLOBALIP_MEMO_LOG"
TIMEOUT_ENV = "GLOBALIP_MEMO_TIMEOUT_SECONDS"
MAX_WORKERS_ENV = "GLOBALIP_MEMO_MAX_WORKERS"

CONFIG_FILENAME = "globalip-config.json"
OUTPUT_FILENAME = "globalip.txt"
YAML_SUFFIXES = {".yml", ".yaml"}

DEFAULT_LOG_LEVEL = "warn"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_WORKERS = 4


class ExtractionKind(str, Enum):
    PLAIN = "plain"
    JSON = "json"


@dataclass(frozen=True)
class SourceDescriptor:
    url: str
    kind: ExtractionKind = ExtractionKind.PLAIN
    field_path: str | None = None
    pattern: str = ""
    weight: float = 1.0


@dataclass(frozen=True)
class AppConfig:
    home: Path
    config_path: Path
    output_path: Path
    ip_version: IpVersion
    sources: list[SourceDescriptor]
    dry_run: bool
    log_level: str
    request_timeout_seconds: int
    max_workers: int


def _config_error(message: str) -> GlobalIpError:
    return GlobalIpError(ErrorKind.CONFIG, message)


def resolve_home(explicit: str | None = None) -> Path:
    if explicit:
        home = Path(explicit)
        if not home.is_dir():
            raise _config_error(f"Home directory does not exist: {home}")
        return home.resolve()
    from_env = os.getenv(HOME_ENV)
    if from_env and Path(from_env).is_dir():
        return Path(from_env).resolve()
    return Path.cwd()


def _parse_source(entry: Any, index: int) -> SourceDescriptor:
    context = f"methods[{index}]"
    if not isinstance(entry, dict):
        raise _config_error(f"{context} must be a mapping")

    raw_kind = entry.get("type")
    try:
        kind = ExtractionKind(raw_kind)
    except ValueError as exc:
        raise _config_error(f"{context}.type must be 'plain' or 'json', got {raw_kind!r}") from exc

    url = entry.get("url")
    if not isinstance(url, str) or not url.strip():
        raise _config_error(f"{context}.url is required")

    pattern = entry.get("regex", "")
    if not isinstance(pattern, str):
        raise _config_error(f"{context}.regex must be a string")

    field_path = None
    if kind is ExtractionKind.JSON:
        field_path = entry.get("path")
        if not isinstance(field_path, str):
            raise _config_error(f"{context}.path is required for json methods")

    weight = entry.get("weight", 1.0)
    if isinstance(weight, bool) or not isinstance(weight, (int, float)) or weight <= 0:
        raise _config_error(f"{context}.weight must be a positive number, got {weight!r}")

    return SourceDescriptor(
        url=url.strip(),
        kind=kind,
        field_path=field_path,
        pattern=pattern,
        weight=float(weight),
    )


def parse_config_document(document: Any) -> tuple[IpVersion, list[SourceDescriptor]]:
    if not isinstance(document, dict):
        raise _config_error("Config document must be a mapping")

    raw_version = document.get("ip_version", IpVersion.V4.value)
    try:
        ip_version = IpVersion(raw_version)
    except ValueError as exc:
        raise _config_error(f"ip_version must be 'ipv4' or 'ipv6', got {raw_version!r}") from exc

    methods = document.get("methods")
    if not isinstance(methods, list) or not methods:
        raise _config_error("methods not found")

    return ip_version, [_parse_source(entry, index) for index, entry in enumerate(methods)]


def read_config_file(config_path: Path) -> tuple[IpVersion, list[SourceDescriptor]]:
    if not config_path.is_file():
        raise _config_error(f"Config file not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            if config_path.suffix.lower() in YAML_SUFFIXES:
                document = yaml.safe_load(handle)
            else:
                document = json.load(handle)
    except (yaml.YAMLError, ValueError) as exc:
        raise _config_error(f"Failed to parse config file: {config_path}") from exc
    except OSError as exc:
        raise _config_error(f"Failed to open config file: {config_path}") from exc
    return parse_config_document(document)


def _positive_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise _config_error(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise _config_error(f"{name} must be > 0, got {value}")
    return value


def load_config(argv: list[str] | None = None) -> AppConfig:
    parser = argparse.ArgumentParser(description="Record this host's public IP address when it changes.")
    parser.add_argument("--home", help=f"Working directory (default: ${HOME_ENV} or the current directory).")
    parser.add_argument("--config", help=f"Path to the config file (default: <home>/{CONFIG_FILENAME}).")
    parser.add_argument("--output", help=f"Path to the output file (default: <home>/{OUTPUT_FILENAME}).")
    parser.add_argument("--dry-run", action="store_true", help="Resolve the address without writing the output file.")
    parser.add_argument("--log-level", help=f"Log level (default from {LOG_ENV} or {DEFAULT_LOG_LEVEL}).")

    args = parser.parse_args(argv)

    home = resolve_home(args.home)
    config_path = Path(args.config) if args.config else home / CONFIG_FILENAME
    output_path = Path(args.output) if args.output else home / OUTPUT_FILENAME
    ip_version, sources = read_config_file(config_path)

    log_level = args.log_level or os.getenv(LOG_ENV, DEFAULT_LOG_LEVEL)
    try:
        parse_level(log_level)
    except ValueError as exc:
        raise _config_error(str(exc)) from exc

    return AppConfig(
        home=home,
        config_path=config_path,
        output_path=output_path,
        ip_version=ip_version,
        sources=sources,
        dry_run=args.dry_run,
        log_level=log_level,
        request_timeout_seconds=_positive_int_env(TIMEOUT_ENV, DEFAULT_TIMEOUT_SECONDS),
        max_workers=_positive_int_env(MAX_WORKERS_ENV, DEFAULT_MAX_WORKERS),
    )
