import logging
from typing import Any, Dict, List

import httpx

from movie_api.core.errors import ProviderError

log = logging.getLogger(__name__)

PEXELS_BASE = "https://api.pexels.com"


class PexelsClient:
    def __init__(self, api_key: str, base: str = PEXELS_BASE, timeout: float = 15):
        self.api_key = api_key
        self.base = base
        self.timeout = timeout

    async def _videos(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        headers = {"Authorization": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.get(f"{self.base}{path}", params=params, headers=headers)
                r.raise_for_status()
                data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error("Pexels request %s failed: %r", path, e)
            raise ProviderError() from e
        return data.get("videos", [])

    async def search(self, query: str, per_page: int = 10) -> List[Dict[str, Any]]:
        return await self._videos("/videos/search", {"query": query, "per_page": per_page})

    async def popular(self, per_page: int = 10) -> List[Dict[str, Any]]:
        return await self._videos("/videos/popular", {"per_page": per_page})
