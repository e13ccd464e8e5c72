import asyncio
import logging
import xml.etree.ElementTree as ET

import requests

from .config import Config
from .errors import ParseFailure, TransportFailure


def parse_document(body):
    """
    Parses a NextBus XML body into an ElementTree root element.
    The feed reports request problems as an <Error> element inside a 200 response.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        logging.error("Could not parse NextBus response: %s", e)
        raise ParseFailure("response is not valid XML", detail=str(e), data=body) from e

    error = root.find("Error")
    if error is not None:
        message = (error.text or "").strip()
        logging.error("NextBus reported an error: %s", message)
        raise TransportFailure(f"NextBus error: {message}")
    return root


class APIClient:
    """
    Client for the NextBus public XML feed.
    Each call is a single GET; failures are raised to the caller, never retried.
    """

    def __init__(self, base_url=None, timeout=None):
        self.base_url = base_url or Config.BASE_URL
        self.timeout = timeout or Config.REQUEST_TIMEOUT

    def build_url(self, fragment: str = "") -> str:
        if not fragment:
            return self.base_url
        return f"{self.base_url}?{fragment.lstrip('&')}"

    def query(self, agency: str, command: str, fragment: str = "", params=None):
        """
        Runs ``command`` against the feed for ``agency`` and returns the parsed root element.

        ``fragment`` is a pre-built query string such as the memoized
        ``&stops=route|direction|stop`` sequences; ``params`` holds any
        further key/value pairs.
        """
        url = self.build_url(fragment)
        query_params = [("command", command), ("a", agency)]
        if params:
            query_params.extend(params.items() if isinstance(params, dict) else params)
        headers = {"User-Agent": Config.USER_AGENT, "Accept": "application/xml"}

        logging.debug(f"NextBus {command} request: {url} params={query_params}")
        try:
            response = requests.get(url, params=query_params, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logging.error(f"error in {command} request: {e}")
            raise TransportFailure(f"{command} request failed: {e}") from e

        if response.status_code != 200:
            logging.error("NextBus %s request returned %s", command, response.status_code)
            raise TransportFailure(f"Bad HTTP response {response.status_code}", status=response.status_code)

        return parse_document(response.content)

    async def fetch(self, agency: str, command: str, fragment: str = "", params=None):
        """Async form of ``query``; the blocking request runs in a worker thread."""
        return await asyncio.to_thread(self.query, agency, command, fragment, params)
