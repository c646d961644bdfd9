"""HTTP client for the node registry page.

Fetches the raw page for the active registry layout. There is no retry or
caching: a transport failure or non-2xx response aborts the discovery call
with ``FetchError``.
"""

from __future__ import annotations

import logging
import time

import httpx

from toxboot.middleware.error_handler import FetchError

logger = logging.getLogger(__name__)


class RegistryClient:
    """Retrieves the registry page as text.

    Parameters
    ----------
    url:
        Address of the node list page.
    timeout_seconds:
        Overall HTTP timeout for one fetch.
    """

    def __init__(self, url: str, timeout_seconds: float = 10.0) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds

    @property
    def url(self) -> str:
        return self._url

    async def fetch(self) -> str:
        """Download the registry page.

        Raises
        ------
        FetchError
            If the registry is unreachable or answers with a non-2xx status.
        """
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await client.get(self._url, timeout=self._timeout_seconds)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Registry returned status %d",
                exc.response.status_code,
                extra={"registry_url": self._url},
            )
            raise FetchError(
                f"Registry returned status {exc.response.status_code}",
                status=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Registry unreachable: %s",
                exc,
                extra={"registry_url": self._url},
            )
            raise FetchError(f"Registry unreachable: {exc}") from exc

        logger.info(
            "Fetched registry page (%d bytes)",
            len(response.content),
            extra={
                "registry_url": self._url,
                "duration_ms": round((time.monotonic() - start) * 1000, 2),
            },
        )
        return response.text
