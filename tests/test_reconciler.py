"""Tests for slug-based reconciliation."""

from __future__ import annotations

import pytest

from api.field_mapping import SNAKE_SCHEMA, to_field_data
from api.reconciler import item_slug, reconcile
from utils.project_records import DuplicateSlugError, ProjectRecord


def _remote(item_id, record, schema, discriminator, **overrides) -> dict:
    field_data = to_field_data(record, schema, discriminator)
    field_data.update(overrides)
    return {"id": item_id, "fieldData": field_data}


def test_unmatched_local_records_are_created(schema, discriminator) -> None:
    records = [ProjectRecord(slug="gh-a", name="A"), ProjectRecord(slug="gh-b", name="B")]

    plan = reconcile(records, [], schema, discriminator)

    assert [r.slug for r in plan.to_create] == ["gh-a", "gh-b"]
    assert plan.to_update == []
    assert plan.unchanged == []


def test_identical_pair_is_noop(schema, discriminator) -> None:
    record = ProjectRecord(slug="gh-b", summary="x")
    remote = [_remote("item-1", record, schema, discriminator)]

    plan = reconcile([record], remote, schema, discriminator)

    assert plan.is_empty
    assert plan.unchanged == ["gh-b"]


def test_changed_field_is_update_with_remote_id(schema, discriminator) -> None:
    record = ProjectRecord(slug="gh-a", name="A", github_stars=6)
    remote = [_remote("item-9", record, schema, discriminator, **{"github-stars": 5})]

    plan = reconcile([record], remote, schema, discriminator)

    assert plan.to_create == []
    assert len(plan.to_update) == 1
    update = plan.to_update[0]
    assert update.item_id == "item-9"
    assert update.record is record
    assert update.changed == ["github-stars"]


def test_remote_only_items_are_left_alone(schema, discriminator) -> None:
    keep = ProjectRecord(slug="gh-a", name="A")
    orphan = ProjectRecord(slug="old-project", name="Old")
    remote = [
        _remote("item-1", keep, schema, discriminator),
        _remote("item-2", orphan, schema, discriminator),
    ]

    plan = reconcile([keep], remote, schema, discriminator)

    assert plan.untouched == ["old-project"]
    assert "item-2" not in [u.item_id for u in plan.to_update]
    assert all(r.slug != "old-project" for r in plan.to_create)


def test_slug_match_is_case_sensitive(schema, discriminator) -> None:
    record = ProjectRecord(slug="gh-A")
    remote = [_remote("item-1", ProjectRecord(slug="gh-a"), schema, discriminator)]

    plan = reconcile([record], remote, schema, discriminator)

    assert [r.slug for r in plan.to_create] == ["gh-A"]
    assert plan.untouched == ["gh-a"]


def test_slug_falls_back_to_top_level_attribute(schema, discriminator) -> None:
    record = ProjectRecord(slug="gh-a")
    field_data = to_field_data(record, schema, discriminator)
    field_data.pop("slug")
    remote = [{"id": "item-1", "slug": "gh-a", "fieldData": field_data}]

    plan = reconcile([record], remote, schema, discriminator)

    assert plan.unchanged == ["gh-a"]


def test_item_slug_prefers_field_data() -> None:
    assert item_slug({"slug": "top", "fieldData": {"slug": "inner"}}) == "inner"
    assert item_slug({"slug": "top", "fieldData": {}}) == "top"
    assert item_slug({"fieldData": None}) is None


def test_records_without_repo_are_still_synced(schema, discriminator) -> None:
    record = ProjectRecord(slug="design-site", name="Site", live_url="https://example.com")
    plan = reconcile([record], [], schema, discriminator)
    assert plan.to_create == [record]


def test_tags_joined_string_scenario(schema, discriminator) -> None:
    record = ProjectRecord(slug="gh-c", tags=("a", "b"))
    remote = [_remote("item-1", record, schema, discriminator, tags="a, b")]

    plan = reconcile([record], remote, schema, discriminator)

    assert plan.is_empty


def test_snake_schema_reconciles_with_tag_lists(discriminator) -> None:
    record = ProjectRecord(slug="gh-c", tags=("a", "b"))
    remote = [_remote("item-1", record, SNAKE_SCHEMA, discriminator)]
    assert remote[0]["fieldData"]["tags"] == ["a", "b"]

    plan = reconcile([record], remote, SNAKE_SCHEMA, discriminator)

    assert plan.is_empty


def test_duplicate_remote_slugs_fail_fast(schema, discriminator) -> None:
    record = ProjectRecord(slug="gh-a")
    remote = [
        _remote("item-1", record, schema, discriminator),
        _remote("item-2", record, schema, discriminator),
    ]

    with pytest.raises(DuplicateSlugError) as exc:
        reconcile([record], remote, schema, discriminator)

    assert exc.value.source == "remote"
    assert exc.value.slugs == ["gh-a"]


def test_duplicate_local_slugs_fail_fast(schema, discriminator) -> None:
    records = [ProjectRecord(slug="gh-a"), ProjectRecord(slug="gh-a", name="again")]
    with pytest.raises(DuplicateSlugError):
        reconcile(records, [], schema, discriminator)


def test_reconcile_does_not_mutate_inputs(schema, discriminator) -> None:
    record = ProjectRecord(slug="gh-a", github_stars=2)
    remote = [_remote("item-1", record, schema, discriminator, **{"github-stars": 1})]
    snapshot = dict(remote[0]["fieldData"])

    reconcile([record], remote, schema, discriminator)

    assert remote[0]["fieldData"] == snapshot
    assert record.github_stars == 2
