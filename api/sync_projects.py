#!/usr/bin/env python3
"""
sync_projects.py

Syncs content/projects.json -> Webflow Projects collection, refreshing
GitHub stats in memory on the way. Nothing is committed back to the repo
and nothing in Webflow is ever deleted or unpublished.

Steps:
  1. Load projects.json (fails on duplicate slugs)
  2. Enrich with GitHub metadata (per-record failures are logged, not fatal)
  3. Read every item of the Webflow collection
  4. Reconcile by slug -> CREATE / UPDATE / no-op
  5. Create, then update, then publish everything that was written

Env: WEBFLOW_TOKEN, WEBFLOW_COLLECTION_ID, GH_META_TOKEN (optional)

Usage:
    # See what would change without writing to Webflow
    python -m api.sync_projects --dry-run

    # Full run
    python -m api.sync_projects

    # Skip GitHub, push the file as-is
    python -m api.sync_projects --no-enrich --source content/projects.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import requests

from api.enricher import FetchRepo, enrich_projects
from api.field_mapping import Discriminator, FieldSchema, get_schema, to_field_data
from api.github_client import GitHubClient
from api.reconciler import ReconcilePlan, reconcile
from api.webflow_client import WebflowAPIError, WebflowClient
from utils.config import ConfigError, SyncConfig
from utils.project_records import DuplicateSlugError, ProjectRecord, load_projects

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


class PartialWriteError(RuntimeError):
    """Webflow acknowledged fewer items than were sent."""


@dataclass
class SyncResult:
    plan: ReconcilePlan
    created_ids: List[str] = field(default_factory=list)
    updated_ids: List[str] = field(default_factory=list)
    published_ids: List[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"Created: {len(self.created_ids)}, "
            f"Updated: {len(self.updated_ids)}, "
            f"Published: {len(self.published_ids)}"
        )


def apply_plan(
    plan: ReconcilePlan,
    writer: WebflowClient,
    schema: FieldSchema,
    discriminator: Discriminator,
) -> SyncResult:
    """
    Execute a plan: all creates, then all updates, then one publish call
    covering created ids first, then updated ids.

    A raised write error stops here with nothing published. When Webflow
    answers with fewer ids than it was sent, only the ids it returned are
    published and PartialWriteError is raised afterwards.
    """
    result = SyncResult(plan=plan)

    if plan.to_create:
        payloads = [to_field_data(r, schema, discriminator, include_slug=True) for r in plan.to_create]
        logger.info(f"Creating {len(payloads)} item(s)...")
        result.created_ids = writer.create_items(payloads)

    if plan.to_update:
        pairs = [
            (u.item_id, to_field_data(u.record, schema, discriminator, include_slug=False))
            for u in plan.to_update
        ]
        logger.info(f"Updating {len(pairs)} item(s)...")
        result.updated_ids = writer.update_items(pairs)

    problems = []
    if len(result.created_ids) < len(plan.to_create):
        problems.append(
            f"created {len(result.created_ids)} of {len(plan.to_create)} "
            f"({', '.join(r.slug for r in plan.to_create)})"
        )
    acknowledged = set(result.updated_ids)
    missing_updates = [u.record.slug for u in plan.to_update if u.item_id not in acknowledged]
    if missing_updates:
        problems.append(f"update not acknowledged for: {', '.join(missing_updates)}")

    to_publish = result.created_ids + result.updated_ids
    if to_publish:
        logger.info(f"Publishing {len(to_publish)} item(s)...")
        writer.publish_items(to_publish)
        result.published_ids = list(to_publish)

    if problems:
        for problem in problems:
            logger.error(f"Partial write: {problem}")
        raise PartialWriteError("; ".join(problems))

    return result


def run_sync(
    config: SyncConfig,
    records: Sequence[ProjectRecord],
    webflow: WebflowClient,
    fetch_repo: Optional[FetchRepo] = None,
    dry_run: bool = False,
) -> SyncResult:
    schema = get_schema(config.field_schema)
    discriminator = Discriminator(config.project_type_field, config.project_type_option_id)

    # --- Step 1: Enrich in memory ---
    if fetch_repo is not None:
        logger.info(f"Enriching {len(records)} project(s) with GitHub metadata...")
        records = enrich_projects(records, fetch_repo, max_workers=config.enrich_workers)

    # --- Step 2: Remote state ---
    existing = webflow.list_all_items()

    # --- Step 3: Reconcile ---
    plan = reconcile(records, existing, schema, discriminator)
    logger.info(
        f"Plan: {len(plan.to_create)} to create, {len(plan.to_update)} to update, "
        f"{len(plan.unchanged)} unchanged, {len(plan.untouched)} remote-only (left alone)"
    )

    if dry_run:
        print_plan(plan)
        return SyncResult(plan=plan)

    # --- Step 4: Write & publish ---
    return apply_plan(plan, webflow, schema, discriminator)


def print_plan(plan: ReconcilePlan) -> None:
    for record in plan.to_create:
        print(f"[dry-run] Would create '{record.slug}'")
    for update in plan.to_update:
        print(f"[dry-run] Would update '{update.record.slug}' (ID: {update.item_id}): {', '.join(update.changed)}")
    for slug in plan.untouched:
        print(f"[dry-run] Leaving remote-only item '{slug}' untouched")
    if plan.is_empty:
        print("[dry-run] Nothing to do.")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Sync projects.json to the Webflow Projects collection.")
    parser.add_argument("--source", help="Path to projects.json (default: PROJECTS_JSON or content/projects.json).")
    parser.add_argument("--dry-run", action="store_true", help="Show the plan without writing to Webflow.")
    parser.add_argument("--no-enrich", action="store_true", help="Skip the GitHub metadata refresh.")
    parser.add_argument("--verbose", action="store_true", help="Log per-project decisions.")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = SyncConfig.from_env()
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG

    source = args.source or config.projects_path
    try:
        records = load_projects(source)
    except DuplicateSlugError as e:
        logger.error(f"{source}: {e}")
        return EXIT_FAILURE
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load {source}: {e}")
        return EXIT_FAILURE

    webflow = WebflowClient.from_config(config)
    fetch_repo = None if args.no_enrich else GitHubClient.from_config(config).get_repo
    try:
        result = run_sync(config, records, webflow, fetch_repo=fetch_repo, dry_run=args.dry_run)
    except DuplicateSlugError as e:
        logger.error(f"Webflow collection: {e}")
        return EXIT_FAILURE
    except WebflowAPIError as e:
        logger.error(f"Webflow call failed: {e}")
        return EXIT_FAILURE
    except PartialWriteError as e:
        logger.error(f"Sync incomplete: {e}")
        return EXIT_FAILURE
    except requests.RequestException as e:
        logger.error(f"Network error talking to Webflow: {e}")
        return EXIT_FAILURE

    if not args.dry_run:
        print(result.summary())
    return EXIT_OK


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
