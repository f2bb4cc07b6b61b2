#!/usr/bin/env python3
"""
enricher.py

Refreshes the GitHub-derived fields of each project record
(github_stars, forks, primary_language, last_commit_at).

A failed fetch only costs that record its refresh: the error is logged
and the original record is returned, so one bad repo never stops a run.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, List, Optional, Sequence, Tuple

import requests

from api.github_client import GitHubAPIError
from utils.project_records import STATS_FIELDS, ProjectRecord

logger = logging.getLogger(__name__)

FetchRepo = Callable[[str, str], dict]

GITHUB_REPO_PATTERN = re.compile(r"github\.com/([^/?#]+)/([^/?#]+)(?:$|[/?#])", re.IGNORECASE)


def parse_owner_repo(url: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    "https://github.com/u/a"      -> ("u", "a")
    "https://github.com/u/a.git"  -> ("u", "a")
    "https://gitlab.com/u/a"      -> None
    """
    if not url or not isinstance(url, str):
        return None
    m = GITHUB_REPO_PATTERN.search(url)
    if not m:
        return None
    owner, repo = m.group(1), m.group(2)
    if repo.lower().endswith(".git"):
        repo = repo[:-4]
    if not repo:
        return None
    return owner, repo


def _int_or_zero(value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def enrich_project(record: ProjectRecord, fetch_repo: FetchRepo) -> ProjectRecord:
    pair = parse_owner_repo(record.repo_url)
    if not pair:
        return record

    owner, repo = pair
    try:
        data = fetch_repo(owner, repo)
    except (GitHubAPIError, requests.RequestException, ValueError) as e:
        logger.error(f"Enrich failed for {record.label}: {e}")
        return record
    if not isinstance(data, dict):
        logger.error(f"Enrich failed for {record.label}: unexpected response for {owner}/{repo}")
        return record

    # Fetched value or default; never the previous local value.
    return replace(
        record,
        github_stars=_int_or_zero(data.get("stargazers_count")),
        forks=_int_or_zero(data.get("forks_count")),
        primary_language=data.get("language") or None,
        last_commit_at=data.get("pushed_at") or None,
    )


def enrich_projects(
    records: Sequence[ProjectRecord],
    fetch_repo: FetchRepo,
    max_workers: int = 1,
) -> List[ProjectRecord]:
    """Enrich every record. Output order matches input order."""
    if max_workers <= 1 or len(records) <= 1:
        return [enrich_project(r, fetch_repo) for r in records]

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda r: enrich_project(r, fetch_repo), records))


def enrichment_changed(before: ProjectRecord, after: ProjectRecord) -> bool:
    return any(getattr(before, f) != getattr(after, f) for f in STATS_FIELDS)
