"""Tests for SyncConfig construction."""

from __future__ import annotations

import pytest

from utils.config import ConfigError, SyncConfig

BASE_ENV = {"WEBFLOW_TOKEN": "token", "WEBFLOW_COLLECTION_ID": "coll"}


def test_defaults() -> None:
    config = SyncConfig.from_env(dict(BASE_ENV))

    assert config.webflow_token == "token"
    assert config.collection_id == "coll"
    assert config.github_token is None
    assert config.projects_path == "content/projects.json"
    assert config.field_schema == "hyphenated"
    assert config.project_type_field == "project-type-3"
    assert config.project_type_option_id == "d6e4ce0b1493150f2104fb1e05af3685"
    assert config.enrich_workers == 4
    assert config.request_timeout == 30.0


def test_overrides() -> None:
    env = dict(
        BASE_ENV,
        GITHUB_TOKEN="fallback",
        WEBFLOW_FIELD_SCHEMA="snake",
        PROJECTS_JSON="data/projects.json",
        WEBFLOW_API_BASE="http://localhost:9000/v2/",
        ENRICH_WORKERS="8",
        REQUEST_TIMEOUT="2.5",
    )

    config = SyncConfig.from_env(env)

    assert config.github_token == "fallback"
    assert config.field_schema == "snake"
    assert config.projects_path == "data/projects.json"
    assert config.webflow_api_base == "http://localhost:9000/v2"
    assert config.enrich_workers == 8
    assert config.request_timeout == 2.5


def test_meta_token_wins_over_github_token() -> None:
    config = SyncConfig.from_env(dict(BASE_ENV, GH_META_TOKEN="meta", GITHUB_TOKEN="plain"))
    assert config.github_token == "meta"


@pytest.mark.parametrize("missing", ["WEBFLOW_TOKEN", "WEBFLOW_COLLECTION_ID"])
def test_missing_required_values(missing) -> None:
    env = dict(BASE_ENV)
    env[missing] = "   "

    with pytest.raises(ConfigError, match=missing):
        SyncConfig.from_env(env)


def test_enrich_only_does_not_need_webflow() -> None:
    config = SyncConfig.from_env({}, require_webflow=False)
    assert config.webflow_token is None


@pytest.mark.parametrize(
    "key, value",
    [
        ("WEBFLOW_FIELD_SCHEMA", "camel"),
        ("ENRICH_WORKERS", "zero"),
        ("ENRICH_WORKERS", "0"),
        ("REQUEST_TIMEOUT", "-1"),
    ],
)
def test_invalid_values(key, value) -> None:
    with pytest.raises(ConfigError):
        SyncConfig.from_env(dict(BASE_ENV, **{key: value}))
