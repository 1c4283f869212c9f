"""Wikipedia search via the MediaWiki action API."""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import BaseModel, Field

from .base import Tool, ToolOutput

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://en.wikipedia.org/w/api.php"


class WikipediaInput(BaseModel):
    query: str = Field(min_length=1, description="Search query")


class WikipediaTool(Tool):
    name = "Wikipedia"
    description = "Search Wikipedia and return introductory extracts of the best matching pages."
    input_model = WikipediaInput

    def __init__(
        self,
        *,
        max_results: int = 3,
        max_chars: int = 1500,
        api_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
    ) -> None:
        self.max_results = max_results
        self.max_chars = max_chars
        self._api_url = api_url
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": "agent-workflows"})

    def _get(self, params: dict[str, Any]) -> dict[str, Any]:
        resp = self._session.get(
            self._api_url, params={**params, "format": "json"}, timeout=30
        )
        resp.raise_for_status()
        return resp.json()

    def _run(self, tool_input: WikipediaInput) -> ToolOutput:
        search = self._get(
            {
                "action": "query",
                "list": "search",
                "srsearch": tool_input.query,
                "srlimit": self.max_results,
            }
        )
        titles = [hit["title"] for hit in search.get("query", {}).get("search", [])]
        if not titles:
            return ToolOutput(text=f"No Wikipedia results for '{tool_input.query}'.", data=[])

        extracts = self._get(
            {
                "action": "query",
                "prop": "extracts",
                "exintro": 1,
                "explaintext": 1,
                "titles": "|".join(titles),
            }
        )
        pages = extracts.get("query", {}).get("pages", {})
        by_title = {p.get("title"): p.get("extract", "") for p in pages.values()}

        results = [{"title": t, "extract": by_title.get(t, "")[: self.max_chars]} for t in titles]
        logger.debug(
            "Wikipedia search", extra={"query": tool_input.query, "results": len(results)}
        )
        text = "\n\n".join(f"# {r['title']}\n{r['extract']}" for r in results)
        return ToolOutput(text=text, data=results)

    def close(self) -> None:
        self._session.close()
