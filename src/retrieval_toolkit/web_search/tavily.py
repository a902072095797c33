"""
Tavily web search client.

Tavily returns ranked page excerpts ('content') with their URL, which map
directly onto 'Source'. Two API keys can be configured: the primary key and a
backup key on a separate account, used when the primary is exhausted.

Keys are loaded with 'get_secret' by 'TavilySearch.from_env()':

    TAVILY_API_KEY          required
    TAVILY_BACKUP_API_KEY   optional
"""

from typing import Any

import httpx
from loguru import logger

from retrieval_toolkit.config import get_secret
from retrieval_toolkit.conversation_database.data_models.source import Source
from retrieval_toolkit.exceptions import ConfigurationError, SearchError
from retrieval_toolkit.web_search.base import WebSearchClient

TAVILY_BASE_URL = "https://api.tavily.com"
DEFAULT_TIMEOUT = 20.0


class TavilySearch(WebSearchClient):
    """
    'WebSearchClient' for the Tavily search API.

    Attributes:
        api_key: Key for the primary account.
        backup_api_key: Key used when 'use_backup_provider' is set. Optional.
        search_depth: Tavily search depth, 'basic' or 'advanced'.
    """

    provider = "tavily"

    def __init__(
        self,
        api_key: str,
        backup_api_key: str | None = None,
        base_url: str = TAVILY_BASE_URL,
        search_depth: str = "basic",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.backup_api_key = backup_api_key
        self.base_url = base_url
        self.search_depth = search_depth
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_env(cls) -> "TavilySearch":
        try:
            backup_api_key: str | None = get_secret("TAVILY_BACKUP_API_KEY")
        except ConfigurationError:
            backup_api_key = None
        return cls(api_key=get_secret("TAVILY_API_KEY"), backup_api_key=backup_api_key)

    async def search(self, query: str, result_count: int, use_backup_provider: bool = False) -> list[Source]:
        api_key = self.backup_api_key if use_backup_provider else self.api_key
        if not api_key:
            raise SearchError(
                "No backup API key configured" if use_backup_provider else "No API key configured",
                provider=self.provider,
                use_backup_provider=use_backup_provider,
            )

        payload = {
            "query": query,
            "max_results": result_count,
            "search_depth": self.search_depth,
        }
        logger.debug(f"Tavily search (backup={use_backup_provider}, max_results={result_count}): {query!r}")
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    "/search",
                    json=payload,
                    headers={"Authorization": f"Bearer {api_key}"},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise SearchError(
                f"Tavily rejected the request ({exc.response.status_code}): {exc.response.text}",
                provider=self.provider,
                use_backup_provider=use_backup_provider,
            ) from exc
        except httpx.RequestError as exc:
            raise SearchError(
                f"Failed to reach Tavily: {exc}",
                provider=self.provider,
                use_backup_provider=use_backup_provider,
            ) from exc
        except ValueError as exc:
            raise SearchError(
                f"Tavily returned a non-JSON response: {exc}",
                provider=self.provider,
                use_backup_provider=use_backup_provider,
            ) from exc

        return self._parse_results(data, use_backup_provider)

    def _parse_results(self, data: Any, use_backup_provider: bool) -> list[Source]:
        if not isinstance(data, dict) or not isinstance(data.get("results"), list):
            raise SearchError(
                "Tavily response has no 'results' list",
                provider=self.provider,
                use_backup_provider=use_backup_provider,
            )
        sources: list[Source] = []
        for result in data["results"]:
            if not isinstance(result, dict):
                continue
            url = result.get("url")
            if not isinstance(url, str) or not url.strip():
                continue
            sources.append(Source(text=str(result.get("content") or ""), source=url))
        return sources
