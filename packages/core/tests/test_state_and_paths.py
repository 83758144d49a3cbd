"""Tests for status-state mapping and Harness repo path resolution."""

import pytest

from prcomment_core.harness.paths import build_repo_path
from prcomment_core.state import State, map_harness_state, map_status_state


class TestMapStatusState:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("success", State.SUCCESS),
            ("failure", State.FAILURE),
            ("failed", State.FAILURE),
            ("error", State.ERROR),
            ("pending", State.PENDING),
            ("running", State.RUNNING),
            ("unknown", State.UNKNOWN),
            ("", State.UNKNOWN),
        ],
    )
    def test_maps_known_states(self, value, expected):
        assert map_status_state(value) is expected

    @pytest.mark.parametrize("value", ["success", "failure", "failed", "error", "pending", "running"])
    def test_is_case_insensitive(self, value):
        assert map_status_state(value.upper()) is map_status_state(value)
        assert map_harness_state(value.title()) == map_harness_state(value)

    def test_none_maps_to_unknown(self):
        assert map_status_state(None) is State.UNKNOWN


class TestMapHarnessState:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("success", "success"),
            ("failure", "failure"),
            ("failed", "failure"),
            ("error", "error"),
            ("pending", "pending"),
            ("running", "running"),
        ],
    )
    def test_maps_known_states(self, value, expected):
        assert map_harness_state(value) == expected

    @pytest.mark.parametrize("value", ["unknown", "queued", "", None])
    def test_unrecognised_defaults_to_pending(self, value):
        assert map_harness_state(value) == "pending"


class TestBuildRepoPath:
    def test_bare_repo_uses_configured_org_and_project(self):
        assert build_repo_path("repo", "o", "p") == "o/p/+/repos/repo"

    def test_project_prefixed_repo_overrides_project(self):
        assert build_repo_path("p/repo", "o", "p") == "o/p/+/repos/repo"
        assert build_repo_path("p2/repo", "o", "p") == "o/p2/+/repos/repo"

    def test_fully_qualified_repo_overrides_org_and_project(self):
        assert build_repo_path("o2/p2/repo", "o", "p") == "o2/p2/+/repos/repo"

    def test_extra_segments_stay_in_repo_name(self):
        assert build_repo_path("o2/p2/group/repo", "o", "p") == "o2/p2/+/repos/group/repo"

    def test_account_level_repo_passes_through(self):
        assert build_repo_path("repo") == "repo"
        assert build_repo_path("p/repo") == "p/repo"

    def test_org_without_project_is_account_level(self):
        assert build_repo_path("repo", "o", "") == "repo"
        assert build_repo_path("repo", None, "p") == "repo"

    def test_empty_repo_passes_through_without_scope(self):
        assert build_repo_path("") == ""
