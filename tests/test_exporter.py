"""Unit tests for exporter utilities - no internet."""

import json

from rbxprofile.core.exporter import (
    load_json,
    save_json,
    save_many_json,
    to_dict,
    to_json,
)
from rbxprofile.models.result import ErrorInfo, ProfileResult


class TestToJson:
    """Test JSON string conversion."""

    def test_to_json_is_valid_json(self, sample_profile):
        parsed = json.loads(to_json(sample_profile))
        assert parsed["username"] == "builderman"
        assert parsed["previous_usernames"] == ["builder", "bman2006"]

    def test_to_json_uses_iso_timestamps(self, sample_profile):
        parsed = json.loads(to_json(sample_profile))
        assert parsed["last_updated"].startswith("2026-05-01T12:00:00")


class TestToDict:
    """Test dictionary conversion."""

    def test_to_dict_has_expected_keys(self, sample_profile):
        d = to_dict(sample_profile)
        for key in (
            "user_id",
            "username",
            "display_name",
            "estimated_creation_date",
            "account_age",
            "followers",
            "avatar",
            "online_status",
            "profile_link",
            "last_updated",
        ):
            assert key in d

    def test_to_dict_is_json_compatible(self, sample_profile):
        d = to_dict(sample_profile)
        assert isinstance(d["last_updated"], str)
        json.dumps(d)


class TestSaveLoadJson:
    """Test file I/O operations."""

    def test_save_and_load(self, tmp_path, sample_profile):
        filepath = tmp_path / "builderman.json"
        save_json(sample_profile, filepath)
        assert load_json(filepath) == sample_profile

    def test_save_creates_parent_dirs(self, tmp_path, sample_profile):
        filepath = tmp_path / "nested" / "dir" / "output.json"
        assert save_json(sample_profile, filepath) == filepath
        assert filepath.exists()


class TestSaveManyJson:
    """Test batch export of lookup results."""

    def test_skips_failed_lookups(self, tmp_path, sample_profile):
        results = [
            ProfileResult(success=True, username="builderman", profile=sample_profile),
            ProfileResult(
                success=False,
                username="doesnotexist123",
                error=ErrorInfo(error="UserNotFound", message="User not found"),
            ),
        ]

        paths = save_many_json(results, tmp_path / "out")

        assert paths == [tmp_path / "out" / "builderman.json"]

    def test_filename_template(self, tmp_path, sample_profile):
        results = [ProfileResult(success=True, username="builderman", profile=sample_profile)]
        paths = save_many_json(results, tmp_path, filename_template="rbx_{username}.json")
        assert paths[0].name == "rbx_builderman.json"
