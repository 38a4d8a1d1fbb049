from __future__ import annotations

import ipaddress
from enum import Enum
from typing import Union

from globalip_memo.errors import ErrorKind, GlobalIpError

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


class IpVersion(str, Enum):
    V4 = "ipv4"
    V6 = "ipv6"

    @property
    def label(self) -> str:
        return "IPv4" if self is IpVersion.V4 else "IPv6"

    @property
    def wildcard_address(self) -> str:
        return "0.0.0.0" if self is IpVersion.V4 else "::"


def parse_ip(ip_version: IpVersion, text: str) -> IPAddress:
    """Parse an address literal of the given version.

    Surrounding whitespace is ignored. Hostnames are never resolved, and
    IPv6 zone suffixes (``fe80::1%eth0``) are rejected since they are not
    part of a public address.
    """
    trimmed = text.strip()
    try:
        if ip_version is IpVersion.V4:
            return ipaddress.IPv4Address(trimmed)
        address = ipaddress.IPv6Address(trimmed)
    except ValueError as exc:
        raise GlobalIpError(ErrorKind.ADDRESS_SYNTAX, f"Failed to parse {ip_version.label} - {text!r}") from exc
    if address.scope_id is not None:
        raise GlobalIpError(ErrorKind.ADDRESS_SYNTAX, f"Failed to parse {ip_version.label} - {text!r}")
    return address
