"""Giphy search client. Fail-open: any problem means "no GIF"."""

from __future__ import annotations

import logging

import httpx

from roastbot.errors import EnrichmentError

logger = logging.getLogger(__name__)

GIPHY_API = "https://api.giphy.com/v1"


class GiphyClient:
    def __init__(self, api_key: str, rating: str = "pg", timeout: float = 10.0):
        self.api_key = api_key
        self.rating = rating
        self.timeout = timeout

    async def search_gif(self, term: str) -> str | None:
        """Return the original-size URL of the top result for ``term``, or None."""
        try:
            return await self._search(term)
        except EnrichmentError as e:
            logger.warning("Giphy lookup failed for %r: %s", term, e)
            return None

    async def _search(self, term: str) -> str | None:
        logger.info("Searching Giphy for: %r", term)
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.get(
                    f"{GIPHY_API}/gifs/search",
                    params={
                        "api_key": self.api_key,
                        "q": term,
                        "limit": 1,
                        "rating": self.rating,
                    },
                    timeout=self.timeout,
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise EnrichmentError(str(e), stage="gif") from e

        if not isinstance(data, dict):
            raise EnrichmentError("Unexpected Giphy response shape", stage="gif")
        results = data.get("data") or []
        if not isinstance(results, list):
            raise EnrichmentError("Unexpected Giphy response shape", stage="gif")
        if not results:
            logger.info("No GIFs found for term: %r", term)
            return None

        top = results[0]
        try:
            url = top["images"]["original"]["url"]
        except (KeyError, TypeError) as e:
            raise EnrichmentError(f"Malformed Giphy result: {e!r}", stage="gif") from e

        logger.info("Found GIF id=%s title=%r url=%s", top.get("id"), top.get("title"), url)
        return url
