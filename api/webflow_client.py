#!/usr/bin/env python3
"""
webflow_client.py
Central REST helper for the Webflow v2 CMS collection that backs the
portfolio's Projects page.

Exposes a `WebflowClient` class with the four calls the sync needs:
list every item, bulk create, bulk update and publish.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import requests

logger = logging.getLogger(__name__)

PAGE_LIMIT = 100
# Webflow rejects bulk create/update bodies with more than 100 items.
BULK_LIMIT = 100


class WebflowAPIError(RuntimeError):
    def __init__(self, method: str, url: str, status_code: int, body: str = ""):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Webflow {method} {url} -> {status_code} {body}")


def _chunks(items: Sequence, size: int) -> Iterable[Sequence]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _items_of(payload) -> list:
    if not isinstance(payload, dict):
        return []
    return payload.get("items") or payload.get("data") or []


class WebflowClient:
    def __init__(
        self,
        token: str,
        collection_id: str,
        base_url: str = "https://api.webflow.com/v2",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not all([token, collection_id]):
            raise ValueError("WebflowClient needs a token and a collection id")

        self.collection_id = collection_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    @classmethod
    def from_config(cls, config) -> "WebflowClient":
        return cls(
            token=config.webflow_token,
            collection_id=config.collection_id,
            base_url=config.webflow_api_base,
            timeout=config.request_timeout,
        )

    @property
    def items_url(self) -> str:
        return f"{self.base_url}/collections/{self.collection_id}/items"

    # ------------------------------------------------------------------
    def request(self, method: str, url: str, *, params: dict | None = None, body: dict | None = None):
        """Perform a single JSON request. Any non-2xx status raises WebflowAPIError."""
        resp = self.session.request(method, url, params=params, json=body, timeout=self.timeout)
        if not resp.ok:
            raise WebflowAPIError(method, url, resp.status_code, resp.text)
        if not resp.content:
            return {}
        return resp.json()

    # ------------------------------------------------------------------
    # --- Read ---
    # ------------------------------------------------------------------

    def list_all_items(self, limit: int = PAGE_LIMIT) -> list:
        """
        Fetches every item in the collection, one offset page at a time.
        A page shorter than `limit` ends the listing.
        """
        logger.info(f"Fetching all items from collection {self.collection_id}...")
        items: list = []
        offset = 0
        while True:
            payload = self.request("GET", self.items_url, params={"offset": offset, "limit": limit})
            page = _items_of(payload)
            items.extend(page)
            logger.debug(f"  > offset={offset}: {len(page)} items")
            if len(page) < limit:
                break
            offset += limit
        logger.info(f"Found {len(items)} existing items.")
        return items

    # ------------------------------------------------------------------
    # --- Write ---
    # ------------------------------------------------------------------

    def create_items(self, field_data_list: Sequence[dict]) -> List[str]:
        """
        Bulk-creates live (non-draft, non-archived) items.
        Returns the ids Webflow reports back, in response order.
        """
        created: List[str] = []
        for chunk in _chunks(list(field_data_list), BULK_LIMIT):
            body = {
                "items": [
                    {"fieldData": fd, "isDraft": False, "isArchived": False}
                    for fd in chunk
                ]
            }
            payload = self.request("POST", self.items_url, body=body)
            created.extend(item["id"] for item in _items_of(payload) if item.get("id"))
        return created

    def update_items(self, updates: Sequence[Tuple[str, dict]]) -> List[str]:
        """
        Bulk-updates items given (item_id, fieldData) pairs.
        Returns the ids Webflow reports back.
        """
        updated: List[str] = []
        for chunk in _chunks(list(updates), BULK_LIMIT):
            body = {
                "items": [
                    {"id": item_id, "fieldData": fd, "isDraft": False, "isArchived": False}
                    for item_id, fd in chunk
                ]
            }
            payload = self.request("PATCH", self.items_url, body=body)
            updated.extend(item["id"] for item in _items_of(payload) if item.get("id"))
        return updated

    def publish_items(self, item_ids: Sequence[str]) -> dict:
        if not item_ids:
            return {}
        return self.request("POST", f"{self.items_url}/publish", body={"itemIds": list(item_ids)})
