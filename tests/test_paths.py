"""
Unit tests for object and job path validation
"""

import pytest

from manta_sdk import ValidationError
from manta_sdk.paths import validate_job_path, validate_object_path, validate_object_paths


class TestObjectPaths:
    """Test object path validation"""

    @pytest.mark.parametrize("path", [
        "/john/stor",
        "/john/stor/file.txt",
        "/john/public/a/b/c",
        "/john/reports/usage",
    ])
    def test_valid(self, path):
        """Paths under stor, public and reports are accepted"""
        assert validate_object_path(path) == path

    @pytest.mark.parametrize("path", [
        "john/stor/file",
        "/john/jobs/123",
        "/john/storage/file",
        "/john/stor/file\n",
        None,
    ])
    def test_invalid(self, path):
        """Anything else is rejected"""
        with pytest.raises(ValidationError):
            validate_object_path(path)

    def test_path_lists(self):
        """Lists are validated element by element; a bare string is rejected"""
        assert validate_object_paths(("/john/stor/a",)) == ["/john/stor/a"]

        with pytest.raises(ValidationError):
            validate_object_paths("/john/stor/a")
        with pytest.raises(ValidationError):
            validate_object_paths(["/john/stor/a", "/john/elsewhere"])


class TestJobPaths:
    """Test job path validation"""

    @pytest.mark.parametrize("path", ["/john/jobs/abc", "/john/jobs/abc/live/status"])
    def test_valid(self, path):
        """Job paths and their live resources are accepted"""
        assert validate_job_path(path) == path

    @pytest.mark.parametrize("path", ["/john/jobs/", "/john/stor/abc", "/john/jobs/abc\n"])
    def test_invalid(self, path):
        """Paths not naming a job are rejected"""
        with pytest.raises(ValidationError):
            validate_job_path(path)
