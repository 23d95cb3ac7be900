from typing import Any
from urllib.parse import urlsplit

import requests
from loguru import logger

try:  # pragma: no cover
    from .config import get_teller_api_host, get_teller_timeout
    from .errors import ResponseParseError, TransportError, UpstreamError
except Exception:  # pragma: no cover
    from config import get_teller_api_host, get_teller_timeout
    from errors import ResponseParseError, TransportError, UpstreamError

USER_AGENT = "teller-sync-relay"


def resolve_url(endpoint: str) -> str:
    """
    Turn a Teller endpoint into a full https URL.

    `endpoint` is either a path against the API host ("/accounts") or an
    absolute URL taken from a previous response (account.links.transactions).
    Only the host and path+query of an absolute URL are kept; Teller is always
    called over https.
    """
    if endpoint.startswith("http"):
        parts = urlsplit(endpoint)
        if not parts.hostname:
            raise ResponseParseError(f"Invalid Teller URL: {endpoint}")
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"
        return f"https://{parts.hostname}{path}"

    path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
    return f"https://{get_teller_api_host()}{path}"


def fetch_json(endpoint: str, access_token: str) -> Any:
    url = resolve_url(endpoint)
    logger.debug(f"GET {url}")
    try:
        resp = requests.get(
            url,
            auth=(access_token, ""),
            headers={"User-Agent": USER_AGENT},
            timeout=get_teller_timeout(),
        )
    except requests.RequestException as e:
        raise TransportError(f"Teller API unreachable: {e}") from e

    if not 200 <= resp.status_code < 300:
        raise UpstreamError(resp.status_code, resp.text)

    try:
        return resp.json()
    except ValueError as e:
        raise ResponseParseError(f"Teller API returned invalid JSON for {url}") from e
