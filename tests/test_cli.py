"""Tests for the CLI.

These tests run without network access or a Fuel toolchain; fetch
commands use the fake git/forc toolchain from conftest.
"""

import json

import pytest
from typer.testing import CliRunner

from fetch_abis import __version__
from fetch_abis.cli import app

runner = CliRunner()

# Keep log output out of stdout for JSON parsing
QUIET_ENV = {"FETCH_ABIS_LOG_LEVEL": "ERROR"}


@pytest.fixture
def dirs(tmp_path) -> list[str]:
    """CLI flags rooting a run in a temporary directory."""
    return [
        "--output-dir",
        str(tmp_path / "sway_abis"),
        "--scratch-dir",
        str(tmp_path / "tmp_abis"),
    ]


class TestCLIHelp:
    """Test CLI help and version commands."""

    def test_help_returns_zero(self) -> None:
        """CLI --help should return exit code 0."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Sway ABI fetcher" in result.stdout

    def test_version_flag(self) -> None:
        """CLI --version should print version and exit 0."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_no_args_shows_help(self) -> None:
        """CLI with no args should show help."""
        result = runner.invoke(app, [])
        assert "Usage:" in result.stdout


class TestCLIConfig:
    """Test CLI config command."""

    def test_config_command(self) -> None:
        """CLI config should show all sections."""
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Paths:" in result.stdout
        assert "Tools:" in result.stdout
        assert "Output directory" in result.stdout
        assert "Build timeout" in result.stdout

    def test_config_json(self) -> None:
        """CLI config --json should output JSON."""
        result = runner.invoke(app, ["config", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["output_dir"] == "sway_abis"


class TestCLILayout:
    """Test CLI layout command."""

    def test_default_layout_yaml(self) -> None:
        """Should print the built-in layout."""
        result = runner.invoke(app, ["layout"])
        assert result.exit_code == 0
        assert "mira-v1-core" in result.stdout
        assert "swap_exact_output_script" in result.stdout

    def test_layout_json(self) -> None:
        """Should print the layout as JSON."""
        result = runner.invoke(app, ["layout", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data["artifacts"]) == 6

    def test_invalid_layout_file(self, tmp_path) -> None:
        """Should exit 1 for an invalid layout file."""
        path = tmp_path / "layout.yaml"
        path.write_text("repositories: []\n")
        result = runner.invoke(app, ["layout", "--file", str(path)])
        assert result.exit_code == 1
        assert "layout_invalid" in result.stdout


class TestCLIFetch:
    """Test CLI fetch command."""

    def test_fetch_success(self, fake_toolchain, dirs, tmp_path) -> None:
        """Should relocate six artifacts and exit 0."""
        result = runner.invoke(app, ["fetch", *dirs], env=QUIET_ENV)
        assert result.exit_code == 0, result.stdout
        assert "Relocated 6 artifact(s)" in result.stdout
        assert (tmp_path / "sway_abis" / "mira_amm_contract" / "release").is_dir()
        assert not (tmp_path / "tmp_abis").exists()

    def test_fetch_json(self, fake_toolchain, dirs) -> None:
        """Should print the run result as JSON."""
        result = runner.invoke(app, ["fetch", *dirs, "--json"], env=QUIET_ENV)
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "succeeded"
        assert len(data["relocated"]) == 6
        assert data["scratch_removed"] is True

    def test_fetch_keep_scratch(self, fake_toolchain, dirs, tmp_path) -> None:
        """Should keep the scratch directory with --keep-scratch."""
        result = runner.invoke(app, ["fetch", *dirs, "--keep-scratch"], env=QUIET_ENV)
        assert result.exit_code == 0
        assert (tmp_path / "tmp_abis").is_dir()

    def test_fetch_clone_failure(self, fake_toolchain, dirs, tmp_path) -> None:
        """Should exit 1 and report the clone error code."""
        fake_toolchain.fail_clone.add("mira-v1-core")
        result = runner.invoke(app, ["fetch", *dirs], env=QUIET_ENV)
        assert result.exit_code == 1
        assert "clone_failed" in result.stdout
        assert not (tmp_path / "sway_abis").exists()

    def test_fetch_build_failure(self, fake_toolchain, dirs) -> None:
        """Should exit 1 and report the build error code."""
        fake_toolchain.fail_build.add("mira-v1-periphery")
        result = runner.invoke(app, ["fetch", *dirs], env=QUIET_ENV)
        assert result.exit_code == 1
        assert "build_failed" in result.stdout

    def test_fetch_missing_layout(self, dirs, tmp_path) -> None:
        """Should exit 1 for a missing layout file."""
        result = runner.invoke(
            app,
            ["fetch", *dirs, "--layout", str(tmp_path / "missing.yaml")],
            env=QUIET_ENV,
        )
        assert result.exit_code == 1
        assert "layout_not_found" in result.stdout


class TestCLIArtifacts:
    """Test CLI artifacts command."""

    def test_empty(self, tmp_path) -> None:
        """Should print [] for an empty output directory."""
        result = runner.invoke(
            app, ["artifacts", "--output-dir", str(tmp_path), "--json"], env=QUIET_ENV
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout) == []

    def test_after_fetch(self, fake_toolchain, dirs, tmp_path) -> None:
        """Should list relocated files."""
        runner.invoke(app, ["fetch", *dirs], env=QUIET_ENV)
        result = runner.invoke(
            app,
            ["artifacts", "--output-dir", str(tmp_path / "sway_abis"), "--json"],
            env=QUIET_ENV,
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data) == 12
        assert {a["kind"] for a in data} == {"abi", "bytecode"}


class TestCLICheck:
    """Test CLI check command."""

    def test_missing_tools(self) -> None:
        """Should exit 1 when tools are missing."""
        result = runner.invoke(
            app,
            ["check", "--json"],
            env={"FETCH_ABIS_FORC_BINARY": "definitely-not-a-forc-binary"},
        )
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["definitely-not-a-forc-binary"] is None
