"""
HTTP session shared by the imagery and weather connectors
"""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from agrosat import __version__

RETRY_STATUSES = (429, 500, 502, 503, 504)
USER_AGENT = f"agrosat-api/{__version__}"


def create_session(max_retries: int = 2, backoff_factor: float = 0.5) -> requests.Session:
    """
    Session with retries on throttling and server errors

    GET lookups are retried; POST token exchanges get a single attempt so
    rejected credentials fail fast.
    """
    retries = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False
    )

    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    for prefix in ("http://", "https://"):
        session.mount(prefix, HTTPAdapter(max_retries=retries))
    return session
