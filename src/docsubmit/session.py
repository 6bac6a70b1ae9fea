"""HTTP session management."""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import __version__

DEFAULT_USER_AGENT = f"docsubmit/{__version__}"


def create_session(
    user_agent: str | None = None, pool_size: int = 10
) -> requests.Session:
    """
    Create a requests session for submitting documents.

    Failed requests are never retried: every attempt has already consumed a
    rate-limit permit, so retry policy is left to the caller.

    Args:
        user_agent: Value for the User-Agent header (default: docsubmit/<version>)
        pool_size: Connections kept per host, one per concurrent caller

    Returns:
        Configured requests.Session
    """
    session = requests.Session()

    retry_strategy = Retry(total=0, redirect=0, raise_on_status=False)
    adapter = HTTPAdapter(
        pool_connections=pool_size,
        pool_maxsize=pool_size,
        max_retries=retry_strategy,
    )
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    session.headers.update({"User-Agent": user_agent or DEFAULT_USER_AGENT})

    return session
