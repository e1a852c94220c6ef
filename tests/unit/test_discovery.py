"""
Unit tests for the discovery module.

Tests convention file listing, candidate directory scanning and the reversible
display formatting used by the directory picker.
"""

import logging
import os
import tempfile
import shutil
from pathlib import Path
import pytest

from convention_compiler.exceptions import ConventionsNotFoundError
from convention_compiler.models.config import CompilerConfig
from convention_compiler.tools.discovery import (
    CandidateFormatter,
    DirectoryScanner,
    find_convention_files,
    CURRENT_DIR_LABEL,
    PARENT_DIR_LABEL,
)


class TestFindConventionFiles:
    """Test cases for find_convention_files."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.conventions = Path(self.temp_dir) / "conventions"

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_returns_markdown_files_sorted(self):
        """Test that exactly the .md files are returned, sorted by name."""
        self.conventions.mkdir()
        for name in ["testing.md", "python.md", "notes.txt", "README", "api.md"]:
            (self.conventions / name).write_text(name)

        files = find_convention_files(self.conventions)

        assert [f.name for f in files] == ["api.md", "python.md", "testing.md"]
        assert all(f.path.parent == self.conventions for f in files)

    def test_subdirectories_are_excluded(self):
        """Test that directories, even ones named like Markdown, are skipped."""
        self.conventions.mkdir()
        (self.conventions / "agents").mkdir()
        (self.conventions / "folder.md").mkdir()
        (self.conventions / "style.md").write_text("style")

        files = find_convention_files(self.conventions)

        assert [f.name for f in files] == ["style.md"]

    def test_empty_directory(self):
        """Test that an existing directory with no Markdown files yields an empty list."""
        self.conventions.mkdir()
        (self.conventions / "notes.txt").write_text("x")

        assert find_convention_files(self.conventions) == []

    def test_missing_directory(self):
        """Test that a missing conventions directory raises a specific error."""
        with pytest.raises(ConventionsNotFoundError, match="conventions/ directory not found"):
            find_convention_files(self.conventions)

    def test_stem(self):
        """Test that the stem strips the extension."""
        self.conventions.mkdir()
        (self.conventions / "rust-style.md").write_text("")

        assert find_convention_files(self.conventions)[0].stem == "rust-style"


class TestDirectoryScanner:
    """Test cases for the DirectoryScanner class."""

    def setup_method(self):
        """Create a search root with nested project directories."""
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir) / "Code"
        self.root.mkdir()

        (self.root / "alpha" / "frontend").mkdir(parents=True)
        (self.root / "alpha" / "backend").mkdir()
        (self.root / "alpha" / "README.md").write_text("not a directory")
        (self.root / ".dotfiles" / "nvim").mkdir(parents=True)
        (self.root / "notes.txt").write_text("not a directory")

        # More children than the breadth cap
        for i in range(12):
            (self.root / "monorepo" / f"pkg{i:02d}").mkdir(parents=True)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _scan(self, **fuzzy_options):
        config = CompilerConfig(search_root=str(self.root), fuzzy_search=fuzzy_options)
        return DirectoryScanner(config).find_candidate_directories()

    def test_includes_root_children_and_fallbacks(self):
        """Test the standard depth-2 candidate set."""
        directories = self._scan().directories
        root = str(self.root)

        assert root in directories
        assert os.path.join(root, "alpha") in directories
        assert os.path.join(root, "alpha", "frontend") in directories
        assert os.path.join(root, "alpha", "backend") in directories
        assert "." in directories
        assert ".." in directories

    def test_files_are_not_candidates(self):
        """Test that only directories are offered."""
        directories = self._scan().directories

        assert os.path.join(str(self.root), "notes.txt") not in directories
        assert os.path.join(str(self.root), "alpha", "README.md") not in directories

    def test_sorted_and_deduplicated(self):
        """Test that candidates are sorted with no duplicates."""
        directories = self._scan().directories

        assert directories == sorted(set(directories))

    def test_breadth_cap_per_subdirectory(self):
        """Test that at most max_children directories are taken from a subdirectory."""
        directories = self._scan().directories
        monorepo = os.path.join(str(self.root), "monorepo")
        packages = [d for d in directories if d.startswith(monorepo + os.sep)]

        assert len(packages) == 10
        assert os.path.join(monorepo, "pkg00") in packages
        assert os.path.join(monorepo, "pkg11") not in packages

    def test_breadth_cap_is_configurable(self):
        """Test overriding the breadth cap."""
        directories = self._scan(max_children=3).directories
        monorepo = os.path.join(str(self.root), "monorepo")

        assert len([d for d in directories if d.startswith(monorepo + os.sep)]) == 3

    def test_hidden_directories_skipped_by_default(self):
        """Test that dot-directories are not offered unless show_hidden is set."""
        hidden = os.path.join(str(self.root), ".dotfiles")

        assert hidden not in self._scan().directories
        assert hidden in self._scan(show_hidden=True).directories

    def test_max_depth_one(self):
        """Test that depth 1 offers only immediate children."""
        directories = self._scan(max_depth=1).directories

        assert os.path.join(str(self.root), "alpha") in directories
        assert os.path.join(str(self.root), "alpha", "frontend") not in directories

    def test_max_depth_zero(self):
        """Test that depth 0 offers only the root and fallbacks."""
        assert self._scan(max_depth=0).directories == sorted([str(self.root), ".", ".."])

    def test_missing_root_degrades_to_current_directory(self):
        """Test that a missing search root yields fallbacks and a warning."""
        config = CompilerConfig(search_root=str(Path(self.temp_dir) / "missing"))

        scan = DirectoryScanner(config).find_candidate_directories()

        assert scan.directories == [".", ".."]
        assert len(scan.warnings) == 1
        assert "falling back to current directory" in scan.warnings[0]

    def test_missing_root_is_not_logged_as_warning(self, caplog):
        """Test that the missing-root message is left to the caller to display."""
        config = CompilerConfig(search_root=str(Path(self.temp_dir) / "missing"))

        with caplog.at_level(logging.DEBUG, logger="convention_compiler"):
            DirectoryScanner(config).find_candidate_directories()

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_default_config_scans_home_code_directory(self, monkeypatch):
        """Test that the default ~/Code root is found without a config file."""
        monkeypatch.setenv("HOME", self.temp_dir)

        scan = DirectoryScanner(CompilerConfig()).find_candidate_directories()

        assert scan.warnings == []
        assert str(self.root / "alpha") in scan.directories

    def test_stats_tracking(self):
        """Test that listing statistics are recorded."""
        config = CompilerConfig(search_root=str(self.root))
        scanner = DirectoryScanner(config)
        scanner.find_candidate_directories()

        stats = scanner.get_stats()
        assert stats['directories_listed'] > 0
        assert stats['directories_skipped'] >= 1


class TestCandidateFormatter:
    """Test cases for CandidateFormatter."""

    def setup_method(self):
        self.formatter = CandidateFormatter("/home/user/Code")

    def test_special_directories(self):
        assert self.formatter.to_display(".") == CURRENT_DIR_LABEL
        assert self.formatter.to_display("..") == PARENT_DIR_LABEL
        assert self.formatter.to_path(CURRENT_DIR_LABEL) == "."
        assert self.formatter.to_path(PARENT_DIR_LABEL) == ".."

    def test_paths_under_root_are_shortened(self):
        assert self.formatter.to_display("/home/user/Code/app") == "~/app"
        assert self.formatter.to_display("/home/user/Code/app/web") == "~/app/web"
        assert self.formatter.to_display("/home/user/Code") == "~/"

    def test_sibling_with_common_prefix_is_not_shortened(self):
        """Test that a directory merely sharing the root's prefix is left alone."""
        assert self.formatter.to_display("/home/user/CodeArchive") == "/home/user/CodeArchive"

    def test_paths_outside_root_are_unchanged(self):
        assert self.formatter.to_display("/opt/project") == "/opt/project"
        assert self.formatter.to_path("/opt/project") == "/opt/project"

    def test_round_trip(self):
        """Test that display formatting is reversible for every kind of candidate."""
        candidates = [
            ".",
            "..",
            "/home/user/Code",
            "/home/user/Code/app",
            "/home/user/Code/app/web",
            "/home/user/CodeArchive",
            "/srv/other",
        ]
        for candidate in candidates:
            assert self.formatter.to_path(self.formatter.to_display(candidate)) == candidate

    def test_root_with_trailing_separator(self):
        formatter = CandidateFormatter("/home/user/Code/")

        assert formatter.to_display("/home/user/Code/app") == "~/app"
        assert formatter.to_path("~/app") == "/home/user/Code/app"

    def test_scanned_candidates_round_trip(self, tmp_path):
        """Test reversibility against a real scan."""
        (tmp_path / "one" / "two").mkdir(parents=True)
        config = CompilerConfig(search_root=str(tmp_path))
        formatter = CandidateFormatter(config.search_root)

        for directory in DirectoryScanner(config).find_candidate_directories().directories:
            assert formatter.to_path(formatter.to_display(directory)) == directory
