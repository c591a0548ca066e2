# =============================================================================
# tests/test_locator.py - File Locator Tests
# =============================================================================
# Tests for glob expansion (lib/locator.py).
#
# Run with: poetry run pytest tests/test_locator.py -v
# =============================================================================

import os

import pytest

from lib.locator import DiscoveryError, DiscoveryErrorKind, iter_matches, locate_files


class TestLocateFiles:
    """Tests for locate_files()."""

    def test_matches_across_directory_segments(self, mixed_tree):
        files = locate_files(str(mixed_tree / "*" / "*.csv"))

        names = [os.path.basename(path) for path in files]
        assert names == ["empty.csv", "list.csv", "sales_2019.csv", "sales_2020.csv"]

    def test_paths_are_absolute_and_sorted(self, mixed_tree):
        files = locate_files(str(mixed_tree / "*" / "*.csv"))

        assert all(os.path.isabs(path) for path in files)
        assert files == sorted(files)

    def test_recursive_double_star(self, mixed_tree):
        files = locate_files(str(mixed_tree / "**" / "*.csv"))
        assert len(files) == 4

    def test_directories_are_excluded(self, tmp_path, write_csv):
        write_csv("x/a.csv", "id\n1\n")
        (tmp_path / "x" / "dir.csv").mkdir()

        files = locate_files(str(tmp_path / "x" / "*.csv"))

        assert [os.path.basename(path) for path in files] == ["a.csv"]

    def test_broken_symlink_is_excluded(self, tmp_path, write_csv):
        write_csv("x/a.csv", "id\n1\n")
        os.symlink(tmp_path / "missing.csv", tmp_path / "x" / "broken.csv")

        files = locate_files(str(tmp_path / "x" / "*.csv"))

        assert [os.path.basename(path) for path in files] == ["a.csv"]

    def test_no_matches_is_empty(self, tmp_path):
        assert locate_files(str(tmp_path / "nothing" / "*.csv")) == []

    def test_no_matches_raises_when_required(self, tmp_path):
        with pytest.raises(DiscoveryError) as exc_info:
            locate_files(str(tmp_path / "*.csv"), require_matches=True)

        assert exc_info.value.kind == DiscoveryErrorKind.NO_MATCHES
        assert exc_info.value.code == "DISCOVERY_NO_MATCHES"

    def test_empty_pattern(self):
        assert locate_files("") == []
        assert locate_files("   ") == []


class TestIterMatches:
    """Tests for the lazy iter_matches() generator."""

    def test_deduplicates_equivalent_paths(self, people_dir):
        pattern = str(people_dir / ".." / "people" / "a.csv")
        matches = list(iter_matches(pattern))

        assert matches == [str(people_dir / "a.csv")]

    def test_symlinked_directory_is_yielded_once(self, tmp_path, people_dir):
        os.symlink(people_dir, tmp_path / "alias")

        matches = list(iter_matches(str(tmp_path / "*" / "a.csv")))

        assert len(matches) == 1

    def test_is_lazy(self, people_dir):
        matches = iter_matches(str(people_dir / "*.csv"))
        assert next(matches).endswith(".csv")
