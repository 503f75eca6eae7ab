"""CIViC GraphQL client used to look up therapy interaction types."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

import httpx

from kbimporter.errors import CivicApiError

logger = logging.getLogger(__name__)

CIVIC_GRAPHQL_URL = "https://civicdb.org/api/graphql"

_EVIDENCE_INTERACTIONS_QUERY = """
query EvidenceInteractions($first: Int!, $after: String) {
  evidenceItems(first: $first, after: $after) {
    pageInfo { hasNextPage endCursor }
    nodes { id therapyInteractionType }
  }
}
"""


class DrugInteractionSource(Protocol):
    def drug_interaction_map(self) -> dict[str, str]:
        ...


class CivicApiClient:
    """Scoped CIViC API client.

    Use as a context manager so the underlying HTTP connection pool is released
    as soon as the interaction map has been fetched::

        with CivicApiClient() as client:
            interactions = client.drug_interaction_map()
    """

    def __init__(
        self,
        *,
        base_url: str = CIVIC_GRAPHQL_URL,
        page_size: int = 500,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.page_size = page_size
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def drug_interaction_map(self) -> dict[str, str]:
        """Return ``evidence_id -> interaction type`` for all evidence items.

        Evidence without an interaction type maps to an empty string.
        """

        interactions: dict[str, str] = {}
        cursor: str | None = None
        while True:
            page = self._evidence_page(cursor)
            for node in page.get("nodes", []):
                interactions[str(node["id"])] = str(node.get("therapyInteractionType") or "")

            page_info = page.get("pageInfo", {})
            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")

        logger.info("Fetched therapy interaction types for %d evidence items", len(interactions))
        return interactions

    def _evidence_page(self, cursor: str | None) -> dict[str, Any]:
        response = self._client.post(
            self.base_url,
            json={
                "query": _EVIDENCE_INTERACTIONS_QUERY,
                "variables": {"first": self.page_size, "after": cursor},
            },
        )
        response.raise_for_status()
        payload = response.json()
        if payload.get("errors"):
            messages = "; ".join(str(error.get("message")) for error in payload["errors"])
            raise CivicApiError(f"CIViC GraphQL error: {messages}")
        return payload["data"]["evidenceItems"]

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CivicApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class StaticDrugInteractions:
    """Interaction types from a JSON export ``{"<evidence_id>": "<type>"}``.

    Stands in for the live API when a run must be reproducible offline.
    """

    def __init__(self, json_path: str | Path) -> None:
        self.json_path = Path(json_path)

    def drug_interaction_map(self) -> dict[str, str]:
        payload = json.loads(self.json_path.read_text())
        return {str(key): str(value or "") for key, value in payload.items()}

    def __enter__(self) -> "StaticDrugInteractions":
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None
