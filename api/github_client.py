#!/usr/bin/env python3
"""
github_client.py
Minimal REST helper for repository statistics.

Uses GH_META_TOKEN (or GITHUB_TOKEN) from SyncConfig when present to
avoid anonymous rate limits. One request per call, no retry.
"""

from __future__ import annotations

from typing import Optional

import requests


class GitHubAPIError(RuntimeError):
    def __init__(self, url: str, status_code: int, body: str = ""):
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"GitHub {url} -> {status_code}")


class GitHubClient:
    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_config(cls, config) -> "GitHubClient":
        return cls(
            token=config.github_token,
            base_url=config.github_api_base,
            timeout=config.request_timeout,
        )

    # ------------------------------------------------------------------
    def get_json(self, path: str):
        url = f"{self.base_url}{path}"
        resp = self.session.get(url, timeout=self.timeout)
        if not resp.ok:
            raise GitHubAPIError(url, resp.status_code, resp.text[:200])
        return resp.json()

    def get_repo(self, owner: str, repo: str) -> dict:
        """
        Repository resource for owner/repo. The enricher reads
        stargazers_count, forks_count, language and pushed_at from it.
        """
        return self.get_json(f"/repos/{owner}/{repo}")
