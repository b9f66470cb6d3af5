"""run.events API client — authenticated access to event agenda, speakers and booths.

Returns decoded payloads as-is; grouping and validation of agenda items
happen in services/agenda.py. No retries here: a failed call surfaces as
UpstreamError and the caller decides what to do with it.
"""

import logging
from typing import Any

import httpx

from errors import MalformedDataError, UpstreamError

logger = logging.getLogger(__name__)


class RunEventsClient:
    """Thin async wrapper around the run.events v2 REST API.

    The API key is sent in the ``ApiKey`` header on every call and never
    appears in a URL. Most endpoints are bulk fetches over POST; search is
    the only GET.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout_seconds: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"ApiKey": api_key, "Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        logger.info("run.events %s %s", method, path)
        try:
            resp = await self._http.request(method, path, params=params)
        except httpx.TimeoutException as e:
            logger.error("run.events timeout for %s %s: %s", method, path, e)
            raise UpstreamError(f"run.events timed out for {method} {path}") from e
        except httpx.HTTPError as e:
            logger.error("run.events transport error for %s %s: %s", method, path, e)
            raise UpstreamError(f"run.events unreachable for {method} {path}: {e}") from e

        if resp.is_error:
            raise UpstreamError(
                f"run.events API error {resp.status_code} for {method} {path}: {resp.text}",
                upstream_status=resp.status_code,
                body=resp.text,
            )

        try:
            return resp.json()
        except ValueError as e:
            raise MalformedDataError(f"run.events returned non-JSON body for {method} {path}") from e

    async def _fetch_list(self, method: str, path: str, params: dict[str, str] | None = None) -> list:
        data = await self._request(method, path, params)
        if not isinstance(data, list):
            raise MalformedDataError(
                f"run.events returned {type(data).__name__} for {method} {path}, expected a list"
            )
        return data

    async def fetch_agenda_items(self, slug: str) -> list[dict]:
        """Flat list of agenda items (sessions and non-content blocks)."""
        return await self._fetch_list("POST", f"/v2/events/{slug}/agenda")

    async def fetch_speakers(self, slug: str) -> list[dict]:
        return await self._fetch_list("POST", f"/v2/events/{slug}/speakers")

    async def fetch_booths(self, slug: str) -> list[dict]:
        return await self._fetch_list("POST", f"/v2/events/{slug}/booths")

    async def fetch_partnerships(self, slug: str) -> list[dict]:
        return await self._fetch_list("POST", f"/v2/events/{slug}/partnerships")

    async def search_agenda(self, slug: str, query: str) -> list[dict]:
        """Free-text agenda search. Callers enforce the minimum query length."""
        return await self._fetch_list("GET", f"/v2/events/{slug}/agenda/search", params={"q": query})
