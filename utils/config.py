#!/usr/bin/env python3
"""
config.py
Builds the single SyncConfig for a run.

Reads WEBFLOW_TOKEN, WEBFLOW_COLLECTION_ID, GH_META_TOKEN and the optional
tuning variables from the environment (and from .env outside CI), once,
and hands the result to every component explicitly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_PROJECTS_JSON = "content/projects.json"
DEFAULT_WEBFLOW_API = "https://api.webflow.com/v2"
DEFAULT_GITHUB_API = "https://api.github.com"
DEFAULT_FIELD_SCHEMA = "hyphenated"
FIELD_SCHEMA_NAMES = ("hyphenated", "snake")
DEFAULT_PROJECT_TYPE_FIELD = "project-type-3"
DEFAULT_PROJECT_TYPE_OPTION_ID = "d6e4ce0b1493150f2104fb1e05af3685"


class ConfigError(EnvironmentError):
    """Missing or invalid configuration. Raised before any network call."""


@dataclass(frozen=True)
class SyncConfig:
    webflow_token: Optional[str]
    collection_id: Optional[str]
    github_token: Optional[str] = None
    projects_path: str = DEFAULT_PROJECTS_JSON
    field_schema: str = DEFAULT_FIELD_SCHEMA
    project_type_field: str = DEFAULT_PROJECT_TYPE_FIELD
    project_type_option_id: str = DEFAULT_PROJECT_TYPE_OPTION_ID
    webflow_api_base: str = DEFAULT_WEBFLOW_API
    github_api_base: str = DEFAULT_GITHUB_API
    enrich_workers: int = 4
    request_timeout: float = 30.0

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        require_webflow: bool = True,
    ) -> "SyncConfig":
        """
        Build the config from `env` (defaults to os.environ).

        When reading the real environment outside CI, a local .env file is
        loaded first. Pass require_webflow=False for runs that never touch
        the CMS (enrich-only).
        """
        if env is None:
            if not os.getenv("CI"):
                load_dotenv()
            env = os.environ

        def _get(name: str) -> Optional[str]:
            value = env.get(name)
            if value is None:
                return None
            value = value.strip()
            return value or None

        webflow_token = _get("WEBFLOW_TOKEN")
        collection_id = _get("WEBFLOW_COLLECTION_ID")
        if require_webflow:
            missing = [
                name for name, value in (
                    ("WEBFLOW_TOKEN", webflow_token),
                    ("WEBFLOW_COLLECTION_ID", collection_id),
                )
                if not value
            ]
            if missing:
                raise ConfigError(f"Missing env: {', '.join(missing)}")

        field_schema = _get("WEBFLOW_FIELD_SCHEMA") or DEFAULT_FIELD_SCHEMA
        if field_schema not in FIELD_SCHEMA_NAMES:
            raise ConfigError(
                f"Unknown WEBFLOW_FIELD_SCHEMA '{field_schema}'. "
                f"Supported: {', '.join(FIELD_SCHEMA_NAMES)}"
            )

        return cls(
            webflow_token=webflow_token,
            collection_id=collection_id,
            github_token=_get("GH_META_TOKEN") or _get("GITHUB_TOKEN"),
            projects_path=_get("PROJECTS_JSON") or DEFAULT_PROJECTS_JSON,
            field_schema=field_schema,
            project_type_field=_get("PROJECT_TYPE_FIELD") or DEFAULT_PROJECT_TYPE_FIELD,
            project_type_option_id=_get("PROJECT_TYPE_OPTION_ID") or DEFAULT_PROJECT_TYPE_OPTION_ID,
            webflow_api_base=(_get("WEBFLOW_API_BASE") or DEFAULT_WEBFLOW_API).rstrip("/"),
            github_api_base=(_get("GITHUB_API_BASE") or DEFAULT_GITHUB_API).rstrip("/"),
            enrich_workers=_int_setting(_get("ENRICH_WORKERS"), "ENRICH_WORKERS", 4),
            request_timeout=_float_setting(_get("REQUEST_TIMEOUT"), "REQUEST_TIMEOUT", 30.0),
        )


def _int_setting(raw: Optional[str], name: str, default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'") from None
    if value < 1:
        raise ConfigError(f"{name} must be >= 1, got {value}")
    return value


def _float_setting(raw: Optional[str], name: str, default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{raw}'") from None
    if value <= 0:
        raise ConfigError(f"{name} must be > 0, got {value}")
    return value
