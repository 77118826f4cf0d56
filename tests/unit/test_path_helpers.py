"""Unit tests for path helper functions."""

from pathlib import Path

import pytest

from kitty_deploy.exceptions import ContractNotFoundError
from kitty_deploy.paths import (
    ScriptPaths,
    directory_has_files,
    find_contract_source,
    get_script_paths,
)


class TestGetScriptPaths:
    """Test the get_script_paths function."""

    def test_default_layout(self, tmp_path: Path):
        """Test that every directory defaults to a fixed name under the root."""
        paths = get_script_paths(tmp_path)

        assert isinstance(paths, ScriptPaths)
        assert paths.root == tmp_path
        assert paths.artifacts == tmp_path / "artifacts"
        assert paths.archive == tmp_path / "archive"
        assert paths.cache == tmp_path / "cache"
        assert paths.deployments == tmp_path / "deployments"
        assert paths.sources == tmp_path / "contracts"
        assert paths.tests == tmp_path / "test"
        assert paths.typechain == tmp_path / "typechain"

    def test_defaults_to_working_directory(self, tmp_path: Path, monkeypatch):
        """Test that the root falls back to the current working directory."""
        monkeypatch.chdir(tmp_path)
        paths = get_script_paths()

        assert paths.root == Path.cwd()
        assert paths.deployments == Path.cwd() / "deployments"

    def test_returns_absolute_paths(self, tmp_path: Path, monkeypatch):
        """Test that a relative root is made absolute."""
        monkeypatch.chdir(tmp_path)
        paths = get_script_paths("project")

        assert paths.root.is_absolute()
        assert paths.artifacts.is_absolute()

    def test_root_as_string(self, tmp_path: Path):
        """Test that the root can be provided as a string."""
        paths = get_script_paths(str(tmp_path))
        assert paths.root == tmp_path

    def test_relative_override(self, tmp_path: Path):
        """Test that an override is interpreted relative to the root."""
        paths = get_script_paths(tmp_path, sources="src/contracts")
        assert paths.sources == tmp_path / "src" / "contracts"

    def test_absolute_override(self, tmp_path: Path):
        """Test that an absolute override is used as-is."""
        elsewhere = tmp_path / "elsewhere"
        paths = get_script_paths(tmp_path / "project", deployments=elsewhere)
        assert paths.deployments == elsewhere

    def test_unknown_override_raises(self, tmp_path: Path):
        """Test that an unknown directory name is rejected."""
        with pytest.raises(TypeError, match="bogus"):
            get_script_paths(tmp_path, bogus="x")


class TestDirectoryHasFiles:
    """Test the directory_has_files function."""

    def test_missing_directory(self, tmp_path: Path):
        """Test that a missing directory has no files."""
        assert directory_has_files(tmp_path / "missing") is False

    def test_empty_directory(self, tmp_path: Path):
        """Test that an empty directory has no files."""
        (tmp_path / "empty").mkdir()
        assert directory_has_files(tmp_path / "empty") is False

    def test_directory_with_file(self, tmp_path: Path):
        """Test that a directory containing a file is detected."""
        (tmp_path / "full").mkdir()
        (tmp_path / "full" / "a.json").write_text("{}")
        assert directory_has_files(tmp_path / "full") is True

    def test_directory_with_subdirectory(self, tmp_path: Path):
        """Test that a nested directory counts as content."""
        (tmp_path / "outer" / "inner").mkdir(parents=True)
        assert directory_has_files(tmp_path / "outer") is True


class TestFindContractSource:
    """Test the find_contract_source function."""

    def test_finds_top_level_source(self, script_paths: ScriptPaths):
        """Test locating a source directly under contracts/."""
        assert find_contract_source(script_paths, "HelloWorld") == "contracts/HelloWorld.sol"

    def test_finds_nested_source(self, script_paths: ScriptPaths):
        """Test locating a source in a subdirectory."""
        assert (
            find_contract_source(script_paths, "ConfigShowcase")
            == "contracts/showcase/ConfigShowcase.sol"
        )

    def test_missing_source_raises(self, script_paths: ScriptPaths):
        """Test that a missing source raises ContractNotFoundError."""
        with pytest.raises(ContractNotFoundError, match="Missing"):
            find_contract_source(script_paths, "Missing")

    def test_missing_sources_directory_raises(self, tmp_path: Path):
        """Test that a project without a sources directory raises."""
        with pytest.raises(ContractNotFoundError):
            find_contract_source(get_script_paths(tmp_path), "HelloWorld")

    def test_name_must_match_whole_file(self, script_paths: ScriptPaths):
        """Test that a prefix of a file name does not match."""
        with pytest.raises(ContractNotFoundError):
            find_contract_source(script_paths, "Hello")

    def test_ambiguous_source_uses_first_sorted(self, script_paths: ScriptPaths, caplog):
        """Test that duplicate file names resolve to the first in sorted order with a warning."""
        duplicate = script_paths.sources / "zz" / "HelloWorld.sol"
        duplicate.parent.mkdir()
        duplicate.write_text("contract HelloWorld {}\n")

        with caplog.at_level("WARNING"):
            result = find_contract_source(script_paths, "HelloWorld")

        assert result == "contracts/HelloWorld.sol"
        assert "Found 2 source files" in caplog.text
