"""GraphQL client for The Graph gateway.

Uses urllib.request (stdlib) in a worker thread so the event loop is never
blocked, with a bounded timeout on every request.
"""

import asyncio
import json
import urllib.error
import urllib.request

from collector.exceptions import QueryFailure
from collector.logging import get_logger

logger = get_logger(__name__)

_MAX_BODY_CHARS = 500


class SubgraphClient:
    """Posts GraphQL queries to a single subgraph endpoint.

    Args:
        url: Full query URL (gateway, API key and subgraph id).
        timeout: Seconds before a request is abandoned.
    """

    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self._url = url
        self._timeout = timeout

    async def query(self, query: str, variables: dict | None = None) -> dict:
        """Run a query and return its ``data`` object.

        Raises:
            QueryFailure: On transport errors, non-2xx statuses, undecodable
                bodies, or GraphQL ``errors`` in an otherwise successful reply.
        """
        payload = json.dumps({"query": query, "variables": variables or {}}).encode()
        body = await asyncio.to_thread(self._post, payload)

        try:
            result = json.loads(body)
        except json.JSONDecodeError as e:
            raise QueryFailure(
                f"GraphQL response is not JSON: {e}", body=body[:_MAX_BODY_CHARS]
            ) from e

        if not isinstance(result, dict):
            raise QueryFailure(
                "GraphQL response is not an object", body=body[:_MAX_BODY_CHARS]
            )
        if result.get("errors"):
            raise QueryFailure(json.dumps(result["errors"]))

        return result.get("data") or {}

    def _post(self, payload: bytes) -> str:
        req = urllib.request.Request(
            self._url,
            data=payload,
            headers={"content-type": "application/json", "User-Agent": "PoolStatsCollector/1.0"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:
                return resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise QueryFailure(
                f"GraphQL HTTP {e.code}: {body[:_MAX_BODY_CHARS]}",
                status=e.code,
                body=body,
            ) from e
        except (urllib.error.URLError, OSError) as e:
            raise QueryFailure(f"GraphQL transport error: {e}") from e
