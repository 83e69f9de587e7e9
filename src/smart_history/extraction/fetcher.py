"""SSRF-safe page fetcher producing ``PageDocument`` snapshots."""

from __future__ import annotations

import ipaddress
import logging
import socket
from urllib.parse import urlparse

from smart_history.exceptions import FetchError
from smart_history.extraction.document import PageDocument

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"http", "https"}

_BLOCKED_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]

USER_AGENT = "SmartHistory/1.0"


def _validate_url(url: str) -> tuple[bool, str | None]:
    """Validate a URL for safety. Returns (is_safe, error_message)."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False, "Invalid URL format"

    if parsed.scheme not in _ALLOWED_SCHEMES:
        return False, f"Blocked URL scheme: {parsed.scheme}. Only http/https allowed."

    hostname = parsed.hostname
    if not hostname:
        return False, "URL has no hostname"

    if hostname in ("localhost", "0.0.0.0"):
        return False, "Blocked: localhost access not allowed"

    try:
        for addr_info in socket.getaddrinfo(hostname, None):
            ip = ipaddress.ip_address(addr_info[4][0])
            for network in _BLOCKED_NETWORKS:
                if ip in network:
                    return False, f"Blocked: URL resolves to private/internal IP ({ip})"
    except socket.gaierror:
        return False, f"Cannot resolve hostname: {hostname}"

    return True, None


class PageFetcher:
    """Fetch a live page and parse it for extraction.

    Args:
        max_response_bytes: Maximum response size in bytes (default 2MB).
        max_redirects: Maximum number of redirects to follow (default 5).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        max_response_bytes: int = 2_097_152,
        max_redirects: int = 5,
        timeout: float = 10.0,
    ):
        try:
            import httpx  # noqa: F401
        except ImportError:
            raise ImportError(
                "httpx is required for PageFetcher. "
                "Install with: pip install smart-history[web]"
            )
        self.max_response_bytes = max_response_bytes
        self.max_redirects = max_redirects
        self.timeout = timeout

    async def fetch(self, url: str) -> PageDocument:
        """Async fetch of ``url`` into a ``PageDocument``."""
        import httpx

        is_safe, error = _validate_url(url)
        if not is_safe:
            raise FetchError(error)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=False) as client:
                current_url = url
                response = None
                for _ in range(self.max_redirects):
                    response = await client.get(current_url, headers={"User-Agent": USER_AGENT})
                    next_url = self._redirect_target(response)
                    if next_url is None:
                        break
                    current_url = next_url
                return self._to_document(response)
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(f"Fetch failed: {e}") from e

    def fetch_sync(self, url: str) -> PageDocument:
        """Synchronous fetch of ``url`` into a ``PageDocument``."""
        import httpx

        is_safe, error = _validate_url(url)
        if not is_safe:
            raise FetchError(error)

        try:
            with httpx.Client(timeout=self.timeout, follow_redirects=False) as client:
                current_url = url
                response = None
                for _ in range(self.max_redirects):
                    response = client.get(current_url, headers={"User-Agent": USER_AGENT})
                    next_url = self._redirect_target(response)
                    if next_url is None:
                        break
                    current_url = next_url
                return self._to_document(response)
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(f"Fetch failed: {e}") from e

    @staticmethod
    def _redirect_target(response) -> str | None:
        if not (response.is_redirect and response.has_redirect_location):
            return None
        if response.next_request is None:
            return None
        redirect_url = str(response.next_request.url)
        redir_safe, redir_err = _validate_url(redirect_url)
        if not redir_safe:
            raise FetchError(f"Redirect blocked: {redir_err}")
        return redirect_url

    def _to_document(self, response) -> PageDocument:
        if response is None:
            raise FetchError("No response received")
        if len(response.content) > self.max_response_bytes:
            raise FetchError(f"Response too large (>{self.max_response_bytes} bytes)")
        response.raise_for_status()

        content_type = response.headers.get("content-type", "")
        text = response.text
        if "html" not in content_type and not text.strip().startswith("<"):
            raise FetchError(f"Not an HTML page: {content_type or 'unknown content type'}")
        logger.debug("Fetched %s (%d bytes)", response.url, len(response.content))
        return PageDocument.from_html(text, url=str(response.url))
