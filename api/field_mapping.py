#!/usr/bin/env python3
"""
field_mapping.py

Translation between ProjectRecord attributes and Webflow field keys.

The same `to_field_data` output is used to compare against the remote
item and to build the create/update payload, so what was compared is
exactly what gets written.

Two collection schemas exist in the wild; a deployment picks one with
WEBFLOW_FIELD_SCHEMA:

    snake       name, slug, summary, repo_url, tags (list), github_stars ...
    hyphenated  name, slug, project-description, repo-url, tags ("a, b") ...
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from utils.config import ConfigError
from utils.project_records import ProjectRecord

TAG_SEPARATOR = ", "


@dataclass(frozen=True)
class FieldSchema:
    name: str
    # attribute name -> remote field key, in payload order
    fields: Dict[str, str]
    tags_as_string: bool

    @property
    def slug_key(self) -> str:
        return self.fields["slug"]


@dataclass(frozen=True)
class Discriminator:
    """Option field forced on every automation-written item."""
    field: str
    value: str


SNAKE_SCHEMA = FieldSchema(
    name="snake",
    fields={
        "name": "name",
        "slug": "slug",
        "summary": "summary",
        "repo_url": "repo_url",
        "live_url": "live_url",
        "tags": "tags",
        "github_stars": "github_stars",
        "forks": "forks",
        "primary_language": "primary_language",
        "last_commit_at": "last_commit_at",
    },
    tags_as_string=False,
)

HYPHENATED_SCHEMA = FieldSchema(
    name="hyphenated",
    fields={
        "name": "name",
        "slug": "slug",
        "summary": "project-description",
        "repo_url": "repo-url",
        "live_url": "live-url",
        "tags": "tags",
        "github_stars": "github-stars",
        "forks": "forks",
        "primary_language": "primary-language",
        "last_commit_at": "last-commit-at",
    },
    tags_as_string=True,
)

SCHEMAS = {s.name: s for s in (HYPHENATED_SCHEMA, SNAKE_SCHEMA)}

TIMESTAMP_ATTRS = {"last_commit_at"}


def get_schema(name: str) -> FieldSchema:
    try:
        return SCHEMAS[name]
    except KeyError:
        raise ConfigError(f"Unknown field schema '{name}'. Supported: {sorted(SCHEMAS)}") from None


# ----------------------------------------------------------------------
# Local -> remote
# ----------------------------------------------------------------------

def serialize_tags(tags, as_string: bool):
    """Empty tags are written as null in both representations."""
    tags = [t for t in (tags or ()) if t]
    if not tags:
        return None
    return TAG_SEPARATOR.join(tags) if as_string else list(tags)


def _empty_to_none(value):
    # "" and None are the same absent value on the CMS side
    if value == "":
        return None
    return value


def to_field_data(
    record: ProjectRecord,
    schema: FieldSchema,
    discriminator: Discriminator,
    include_slug: bool = True,
) -> dict:
    """
    Build the Webflow fieldData for a record.

    include_slug=False is used for updates: an existing item's slug is
    never rewritten.
    """
    field_data: Dict[str, Any] = {}
    for attr, key in schema.fields.items():
        if attr == "slug" and not include_slug:
            continue
        if attr == "tags":
            field_data[key] = serialize_tags(record.tags, schema.tags_as_string)
        else:
            field_data[key] = _empty_to_none(getattr(record, attr))
    field_data[discriminator.field] = discriminator.value
    return field_data


# ----------------------------------------------------------------------
# Comparison
# ----------------------------------------------------------------------

def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def values_match(remote, local, is_timestamp: bool = False) -> bool:
    """
    True when the remote value already holds what we would write.

    A remote value of the wrong type never matches, which forces an
    update that rewrites it with the right type.
    """
    remote = _empty_to_none(remote)
    local = _empty_to_none(local)
    if remote is None or local is None:
        return remote is None and local is None

    if isinstance(local, bool) or isinstance(remote, bool):
        return type(local) is type(remote) and local == remote
    if isinstance(local, (int, float)):
        return isinstance(remote, (int, float)) and remote == local
    if isinstance(local, str):
        if not isinstance(remote, str):
            return False
        if remote == local:
            return True
        if is_timestamp:
            r_ts, l_ts = _parse_timestamp(remote), _parse_timestamp(local)
            return r_ts is not None and l_ts is not None and r_ts == l_ts
        return False
    if isinstance(local, list):
        return isinstance(remote, list) and remote == local
    return remote == local


def changed_fields(
    field_data: Optional[dict],
    record: ProjectRecord,
    schema: FieldSchema,
    discriminator: Discriminator,
) -> List[str]:
    """Remote keys whose current value differs from what the record would write."""
    current = field_data if isinstance(field_data, dict) else {}
    wanted = to_field_data(record, schema, discriminator, include_slug=False)
    timestamp_keys = {schema.fields[a] for a in TIMESTAMP_ATTRS}

    return [
        key for key, value in wanted.items()
        if not values_match(current.get(key), value, is_timestamp=key in timestamp_keys)
    ]


def fields_match(
    field_data: Optional[dict],
    record: ProjectRecord,
    schema: FieldSchema,
    discriminator: Discriminator,
) -> bool:
    return not changed_fields(field_data, record, schema, discriminator)
