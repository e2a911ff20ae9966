"""Tests for environment-based settings."""
import pytest
from pydantic import ValidationError

from reviewer_core.config import Settings


class TestReviewersPerPr:
    """Test the bounded reviewer count setting."""

    def test_defaults_to_two(self):
        assert Settings().reviewers_per_pr == 2

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("REVIEWER_REVIEWERS_PER_PR", "1")
        assert Settings().reviewers_per_pr == 1

    @pytest.mark.parametrize("value", ["3", "-1"])
    def test_out_of_range_is_rejected(self, monkeypatch, value):
        monkeypatch.setenv("REVIEWER_REVIEWERS_PER_PR", value)
        with pytest.raises(ValidationError):
            Settings()
