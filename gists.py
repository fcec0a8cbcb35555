"""Public code snippets pulled from the GitHub gist API."""

import asyncio
import logging
from typing import List, Optional

import httpx

logger = logging.getLogger(__name__)

HEADERS = {
    "Accept": "application/vnd.github.v3+json",
    "User-Agent": "Portfolio-Website",
}


def normalize_gist(gist: dict) -> dict:
    files = {}
    for key, f in (gist.get("files") or {}).items():
        files[key] = {
            "filename": f.get("filename") or key,
            "language": f.get("language") or "text",
            "content": f.get("content") or "",
            "size": f.get("size") or 0,
        }
    return {
        "id": gist.get("id"),
        "description": gist.get("description") or "No description",
        "files": files,
        "public": gist.get("public", True),
        "created_at": gist.get("created_at"),
        "updated_at": gist.get("updated_at"),
        "html_url": gist.get("html_url"),
        "comments": gist.get("comments") or 0,
        # the API does not report forks per gist
        "forks": 0,
    }


def gist_stats(gists: List[dict]) -> dict:
    languages = {f["language"] for g in gists for f in g["files"].values()}
    return {
        "total": len(gists),
        "forks": sum(g.get("forks", 0) for g in gists),
        "comments": sum(g.get("comments", 0) for g in gists),
        "languages": len(languages),
    }


class GistClient:
    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout

    async def _fetch_one(self, client: httpx.AsyncClient, gist: dict) -> Optional[dict]:
        url = gist.get("url") or f"{self.base_url}/gists/{gist.get('id')}"
        try:
            resp = await client.get(url)
            resp.raise_for_status()
            return normalize_gist(resp.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("dropping gist %s: %s", gist.get("id"), e)
            return None

    async def fetch_gists(self, username: str) -> List[dict]:
        """List a user's public gists with each file's full content.

        A gist whose detail request fails is left out. If the listing itself
        fails the result is empty.
        """
        async with httpx.AsyncClient(headers=HEADERS, timeout=self.timeout, transport=self.transport) as client:
            try:
                resp = await client.get(f"{self.base_url}/users/{username}/gists")
                resp.raise_for_status()
                listing = resp.json()
            except (httpx.HTTPError, ValueError):
                logger.exception("error fetching gists for %s", username)
                return []

            if not isinstance(listing, list):
                logger.error("unexpected gist listing for %s: %r", username, listing)
                return []

            results = await asyncio.gather(*(self._fetch_one(client, g) for g in listing if isinstance(g, dict)))
        return [g for g in results if g is not None]
