#!/usr/bin/env python3
"""
project_records.py

Typed view of content/projects.json, the source of truth for the
portfolio listing.

This module:
- Loads the ordered list of project records
- Rejects files where two records share a slug
- Writes the list back (enrich-only runs), keeping unknown keys intact
"""

from __future__ import annotations

import json
import pathlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# JSON key -> attribute name. Everything else lands in `extra`.
JSON_KEYS = {
    "slug": "slug",
    "name": "name",
    "summary": "summary",
    "repoUrl": "repo_url",
    "liveUrl": "live_url",
    "tags": "tags",
    "github_stars": "github_stars",
    "forks": "forks",
    "primary_language": "primary_language",
    "last_commit_at": "last_commit_at",
}

STATS_FIELDS = ("github_stars", "forks", "primary_language", "last_commit_at")


class DuplicateSlugError(ValueError):
    """Two records (local or remote) claim the same slug."""

    def __init__(self, source: str, slugs: List[str]):
        self.source = source
        self.slugs = slugs
        super().__init__(f"Duplicate {source} slug(s): {', '.join(slugs)}")


@dataclass(frozen=True)
class ProjectRecord:
    slug: str
    name: Optional[str] = None
    summary: Optional[str] = None
    repo_url: Optional[str] = None
    live_url: Optional[str] = None
    tags: Tuple[str, ...] = ()
    github_stars: Optional[int] = None
    forks: Optional[int] = None
    primary_language: Optional[str] = None
    last_commit_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def label(self) -> str:
        """Name for log lines; falls back to the slug."""
        return self.name or self.slug

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectRecord":
        if not isinstance(data, dict):
            raise ValueError(f"Project entry must be an object, got {type(data).__name__}")
        slug = data.get("slug")
        if not isinstance(slug, str) or not slug.strip():
            raise ValueError(f"Project entry is missing a slug: {data!r}")

        kwargs: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            attr = JSON_KEYS.get(key)
            if attr is None:
                extra[key] = value
            elif attr == "tags":
                if isinstance(value, str):
                    value = [t.strip() for t in value.split(",") if t.strip()]
                kwargs["tags"] = tuple(str(t) for t in (value or []))
            else:
                kwargs[attr] = value
        return cls(extra=extra, **kwargs)

    def to_dict(self) -> dict:
        """JSON shape, known keys first in file order, then anything unknown."""
        out: Dict[str, Any] = {}
        for key, attr in JSON_KEYS.items():
            value = getattr(self, attr)
            if attr == "tags":
                value = list(value)
            elif value is None and attr not in STATS_FIELDS:
                continue
            out[key] = value
        out.update(self.extra)
        return out


def check_unique_slugs(slugs: List[str], source: str) -> None:
    seen = set()
    dupes = []
    for slug in slugs:
        if slug in seen and slug not in dupes:
            dupes.append(slug)
        seen.add(slug)
    if dupes:
        raise DuplicateSlugError(source, dupes)


def load_projects(path: str | pathlib.Path) -> List[ProjectRecord]:
    path = pathlib.Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Projects file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON array of projects.")

    records = [ProjectRecord.from_dict(entry) for entry in raw]
    check_unique_slugs([r.slug for r in records], "local")
    return records


def save_projects(path: str | pathlib.Path, records: List[ProjectRecord]) -> None:
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in records], f, indent=2, ensure_ascii=False)
        f.write("\n")
