#!/usr/bin/env python3
"""
reconciler.py

Decides, per local project, whether the Webflow collection needs a
CREATE, an UPDATE or nothing at all.

This module:
- DOES NOT call Webflow or GitHub
- DOES NOT mutate records or remote items
- NEVER schedules a delete: remote items without a local record are
  only reported back as `untouched`
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from api.field_mapping import Discriminator, FieldSchema, changed_fields
from utils.project_records import ProjectRecord, check_unique_slugs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingUpdate:
    item_id: str
    record: ProjectRecord
    changed: List[str] = field(default_factory=list)


@dataclass
class ReconcilePlan:
    to_create: List[ProjectRecord] = field(default_factory=list)
    to_update: List[PendingUpdate] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    untouched: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_create and not self.to_update


def item_slug(item: dict, slug_key: str = "slug") -> Optional[str]:
    """Slug from fieldData, falling back to a top-level slug attribute."""
    field_data = item.get("fieldData")
    if isinstance(field_data, dict) and field_data.get(slug_key):
        return field_data[slug_key]
    return item.get("slug") or None


def reconcile(
    records: Sequence[ProjectRecord],
    remote_items: Sequence[dict],
    schema: FieldSchema,
    discriminator: Discriminator,
) -> ReconcilePlan:
    """
    Classify every local record against the remote collection.

    Raises DuplicateSlugError when either side holds the same slug twice.
    """
    check_unique_slugs([r.slug for r in records], "local")

    remote_slugs = []
    by_slug = {}
    for item in remote_items:
        slug = item_slug(item, schema.slug_key)
        if slug is None:
            logger.debug(f"Ignoring remote item without slug: {item.get('id')}")
            continue
        remote_slugs.append(slug)
        by_slug[slug] = item
    check_unique_slugs(remote_slugs, "remote")

    plan = ReconcilePlan()
    for record in records:
        match = by_slug.get(record.slug)
        if match is None:
            logger.debug(f"{record.slug}: CREATE")
            plan.to_create.append(record)
            continue

        diff = changed_fields(match.get("fieldData"), record, schema, discriminator)
        if diff:
            logger.debug(f"{record.slug}: UPDATE ({', '.join(diff)})")
            plan.to_update.append(PendingUpdate(item_id=match["id"], record=record, changed=diff))
        else:
            logger.debug(f"{record.slug}: NOOP")
            plan.unchanged.append(record.slug)

    local_slugs = {r.slug for r in records}
    plan.untouched = [s for s in remote_slugs if s not in local_slugs]
    return plan
