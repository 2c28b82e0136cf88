"""Tests for deterministic project identifiers."""

from selection_sync.domain.projects import stable_project_id


def test_stable_project_id_is_deterministic_across_devices() -> None:
    first = stable_project_id("Surveyor@Example.com ", "current")
    second = stable_project_id("surveyor@example.com", "current")

    assert first == second
    assert first.startswith("proj_")
    assert stable_project_id("surveyor@example.com", "bridge") != first


def test_stable_project_id_known_value() -> None:
    assert stable_project_id("a", "b") == "proj_2cf921"
