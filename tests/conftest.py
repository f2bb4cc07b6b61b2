"""Shared fakes for the sync tests. No test touches the network."""

from __future__ import annotations

import json
from typing import Any

import pytest

from api.field_mapping import HYPHENATED_SCHEMA, Discriminator
from utils.config import DEFAULT_PROJECT_TYPE_FIELD, DEFAULT_PROJECT_TYPE_OPTION_ID


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None):
        self.status_code = status_code
        self._payload = payload
        self.text = json.dumps(payload) if payload is not None else ""
        self.content = self.text.encode()

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return self._payload


class FakeSession:
    """Records requests and replays queued responses in order."""

    def __init__(self, responses: list[FakeResponse] | None = None):
        self.headers: dict[str, str] = {}
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "timeout": timeout})
        return self.responses.pop(0)

    def get(self, url, timeout=None):
        return self.request("GET", url, timeout=timeout)


class FakeWebflow:
    """In-memory Webflow collection with the WebflowClient write surface."""

    def __init__(self, items: list[dict] | None = None):
        self.items = [dict(i) for i in (items or [])]
        self.calls: list[tuple[str, Any]] = []
        self._next_id = 1
        self.drop_create_ids = 0

    def list_all_items(self) -> list[dict]:
        self.calls.append(("list", None))
        return [{"id": i["id"], "fieldData": dict(i["fieldData"])} for i in self.items]

    def create_items(self, field_data_list):
        self.calls.append(("create", list(field_data_list)))
        ids = []
        for fd in field_data_list:
            item_id = f"new-{self._next_id}"
            self._next_id += 1
            self.items.append({"id": item_id, "fieldData": dict(fd)})
            ids.append(item_id)
        if self.drop_create_ids:
            ids = ids[:-self.drop_create_ids]
        return ids

    def update_items(self, updates):
        self.calls.append(("update", list(updates)))
        ids = []
        for item_id, fd in updates:
            for item in self.items:
                if item["id"] == item_id:
                    item["fieldData"].update(fd)
                    ids.append(item_id)
        return ids

    def publish_items(self, item_ids):
        self.calls.append(("publish", list(item_ids)))
        return {"publishedItemIds": list(item_ids)}

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def schema():
    return HYPHENATED_SCHEMA


@pytest.fixture
def discriminator():
    return Discriminator(DEFAULT_PROJECT_TYPE_FIELD, DEFAULT_PROJECT_TYPE_OPTION_ID)


@pytest.fixture
def write_projects(tmp_path):
    def _write(entries: list[dict]) -> str:
        path = tmp_path / "content" / "projects.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
        return str(path)
    return _write
