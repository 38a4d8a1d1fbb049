from __future__ import annotations

import json
import re
from typing import Any

from globalip_memo.errors import ErrorKind, GlobalIpError

CAPTURE_GROUP = "ip"


def flatten(value: Any) -> dict[str, Any]:
    """Map ``a.b[0].c`` style paths to the leaf values of a decoded JSON document.

    Objects and arrays only contribute through their leaves; ``None`` is a leaf.
    """
    flat: dict[str, Any] = {}
    _flatten_into(value, "", flat)
    return flat


def _flatten_into(value: Any, path: str, flat: dict[str, Any]) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            _flatten_into(child, f"{path}.{key}" if path else str(key), flat)
    elif isinstance(value, list):
        for index, child in enumerate(value):
            _flatten_into(child, f"{path}[{index}]", flat)
    else:
        flat[path] = value


def select_field(raw_text: str, field_path: str) -> str:
    try:
        flat = flatten(json.loads(raw_text))
    except (ValueError, RecursionError) as exc:
        raise GlobalIpError(ErrorKind.INVALID_DOCUMENT, f"Failed to parse JSON - {raw_text[:200]!r}") from exc

    value = flat.get(field_path)
    if not isinstance(value, str):
        raise GlobalIpError(ErrorKind.FIELD_NOT_FOUND, f'"{field_path}" not found - {raw_text!r}')
    return value


def capture_ip(text: str, pattern: str) -> str:
    if not pattern:
        return text
    try:
        compiled = re.compile(pattern)
    except re.error as exc:
        raise GlobalIpError(ErrorKind.PATTERN_INVALID, f"Invalid regular expression - {pattern!r}") from exc

    match = compiled.search(text)
    captured = None
    if match is not None and CAPTURE_GROUP in compiled.groupindex:
        captured = match.group(CAPTURE_GROUP)
    if captured is None:
        raise GlobalIpError(
            ErrorKind.CAPTURE_ABSENT,
            f'Failed to capture "{CAPTURE_GROUP}" - regex: {pattern!r}, text: {text!r}',
        )
    return captured


def extract_candidate(raw_text: str, field_path: str | None = None, pattern: str = "") -> str:
    """Pick the address candidate out of a response body.

    With ``field_path`` the body is read as JSON and the string leaf at that
    path becomes the candidate; the optional ``pattern`` is then applied and
    its ``ip`` named group is returned.
    """
    candidate = raw_text if field_path is None else select_field(raw_text, field_path)
    return capture_ip(candidate, pattern)
