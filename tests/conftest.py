"""Shared test fixtures."""

from pathlib import Path

import pytest

from hunkstage.models.patch import file_diffs_from_string
from hunkstage.view.view_model import DiffViewModel

FIXTURES = Path(__file__).parent / "fixtures"


def load_file_diffs(name: str):
    return file_diffs_from_string((FIXTURES / name).read_text(encoding="utf-8"))


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def two_file_diffs():
    """Two files: three hunks in the first, one hunk in the second."""
    return load_file_diffs("two_file_diff.txt")


@pytest.fixture
def view_model(two_file_diffs):
    return DiffViewModel(two_file_diffs)


@pytest.fixture
def three_lists():
    return [
        {"key": "list1", "items": ["a", "b", "c"]},
        {"key": "list2", "items": ["d", "e"]},
        {"key": "list3", "items": ["f", "g", "h"]},
    ]
