from __future__ import annotations

import logging

import requests
from requests.adapters import HTTPAdapter

from globalip_memo.address import IpVersion
from globalip_memo.errors import ErrorKind, GlobalIpError

USER_AGENT = "globalip-memo/0.1"


class AddressFamilyAdapter(HTTPAdapter):
    """Keep outgoing connections on one address family.

    Every socket is bound to the family's wildcard address, so urllib3 skips
    resolved addresses of the other family instead of connecting to them.
    """

    def __init__(self, ip_version: IpVersion, **kwargs) -> None:
        self.ip_version = ip_version
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs) -> None:
        pool_kwargs["source_address"] = (self.ip_version.wildcard_address, 0)
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)


def build_session(ip_version: IpVersion) -> requests.Session:
    session = requests.Session()
    adapter = AddressFamilyAdapter(ip_version)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers["User-Agent"] = USER_AGENT
    return session


def fetch_text(
    url: str,
    timeout_seconds: int,
    session: requests.Session,
    logger: logging.Logger | None = None,
) -> str:
    logger = logger or logging.getLogger(__name__)
    try:
        response = session.get(url, timeout=timeout_seconds)
        response.raise_for_status()
        body = response.text
    except requests.RequestException as exc:
        raise GlobalIpError(ErrorKind.TRANSPORT, f"Failed to get global IP - {url}") from exc
    logger.debug("Fetched %d characters from %s", len(body), url)
    return body
