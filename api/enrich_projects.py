#!/usr/bin/env python3
"""
enrich_projects.py

Refreshes the GitHub stats stored in projects.json and writes the file
back, but only when at least one stats field actually changed.
Does NOT call Webflow.

Env: GH_META_TOKEN (optional, avoids rate limits)

Usage:
    python -m api.enrich_projects
    python -m api.enrich_projects --source content/projects.json --dry-run
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from api.enricher import enrich_projects, enrichment_changed
from api.github_client import GitHubClient
from api.sync_projects import EXIT_CONFIG, EXIT_FAILURE, EXIT_OK, setup_logging
from utils.config import ConfigError, SyncConfig
from utils.project_records import load_projects, save_projects

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Refresh GitHub metadata in projects.json.")
    parser.add_argument("--source", help="Path to projects.json (default: PROJECTS_JSON or content/projects.json).")
    parser.add_argument("--dry-run", action="store_true", help="Report changes without rewriting the file.")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        config = SyncConfig.from_env(require_webflow=False)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG

    source = args.source or config.projects_path
    try:
        records = load_projects(source)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Could not load {source}: {e}")
        return EXIT_FAILURE

    github = GitHubClient.from_config(config)
    enriched = enrich_projects(records, github.get_repo, max_workers=config.enrich_workers)

    changed = [after.slug for before, after in zip(records, enriched) if enrichment_changed(before, after)]
    if not changed:
        print("No enrichment changes.")
        return EXIT_OK

    logger.info(f"Stats changed for: {', '.join(changed)}")
    if args.dry_run:
        print(f"[dry-run] Would update {len(changed)} project(s) in {source}.")
        return EXIT_OK

    save_projects(source, enriched)
    print("projects.json updated with GitHub metadata.")
    return EXIT_OK


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
