"""
HTTP utilities for CodeWire.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp
import async_timeout
import backoff

from codewire.config import get_config
from codewire.errors import UpstreamError

# Configure logging
logger = logging.getLogger(__name__)

RETRY_EXCEPTIONS = (aiohttp.ClientError, asyncio.TimeoutError)

class HttpFetcher:
    """
    Thin wrapper around a lazily created aiohttp session.

    Every failure (network error, non-2xx status, undecodable body) surfaces
    as UpstreamError so callers only have one exception to degrade on.
    """
    def __init__(self, timeout: Optional[float] = None, max_tries: Optional[int] = None,
                 headers: Optional[Dict[str, str]] = None):
        """
        Initialize the HttpFetcher.

        Args:
            timeout: Per-request timeout in seconds
            max_tries: Attempts per request; 1 disables retries
            headers: Extra default headers for the session
        """
        self.timeout = timeout if timeout is not None else get_config('fetch.timeout_seconds', 30)
        self.max_tries = max(1, int(max_tries if max_tries is not None else get_config('fetch.max_tries', 1)))
        self.headers = {
            'User-Agent': get_config('fetch.user_agent', 'CodeWire/0.1'),
            'Accept': 'application/json, text/html, application/xml;q=0.9, */*;q=0.8',
        }
        if headers:
            self.headers.update(headers)
        self._session = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """
        Lazy initialization of aiohttp session.

        Returns:
            aiohttp.ClientSession: The HTTP session
        """
        if self._session is None:
            self._session = aiohttp.ClientSession(headers=self.headers)
        return self._session

    async def close(self):
        """Close aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "HttpFetcher":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _request(self, method: str, url: str, as_json: bool, **kwargs) -> Any:
        @backoff.on_exception(backoff.expo, RETRY_EXCEPTIONS, max_tries=self.max_tries, logger=logger)
        async def attempt():
            async with async_timeout.timeout(self.timeout):
                async with self.session.request(method, url, **kwargs) as response:
                    response.raise_for_status()
                    if as_json:
                        return await response.json(content_type=None)
                    return await response.text()

        try:
            return await attempt()
        except RETRY_EXCEPTIONS as e:
            logger.warning(f"{method} {url} failed: {e!r}")
            raise UpstreamError(f"{method} {url} failed: {e!r}") from e
        except ValueError as e:
            logger.warning(f"{method} {url} returned an undecodable body: {e}")
            raise UpstreamError(f"{method} {url} returned an undecodable body") from e

    async def fetch_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET a URL and decode the body as JSON.

        Args:
            url: The URL to fetch
            params: Optional query parameters

        Returns:
            The decoded JSON value
        """
        return await self._request('GET', url, True, params=params)

    async def fetch_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """GET a URL and return the body as text."""
        return await self._request('GET', url, False, params=params)
