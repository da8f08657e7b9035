"""Shared fixtures: a fake git/forc toolchain driven through subprocess.run."""

import subprocess
from collections import defaultdict
from pathlib import Path

import pytest

from fetch_abis.config import Settings
from fetch_abis.layout.defaults import mira_v1_layout
from fetch_abis.layout.schema import LayoutSchema


class FakeToolchain:
    """Stand-in for `subprocess.run` that emulates `git clone` and `forc build`.

    Clones create a checkout holding one Forc.toml per project of the
    layout; builds write deterministic `out/<profile>/` files for every
    project under the working directory.
    """

    def __init__(self, layout: LayoutSchema) -> None:
        self.layout = layout
        self.calls: list[tuple[list[str], Path]] = []
        self.fail_clone: set[str] = set()
        self.fail_build: set[str] = set()
        self.skip_outputs: set[str] = set()
        self.projects: dict[str, list[str]] = defaultdict(list)
        for artifact in layout.artifacts:
            self.projects[artifact.repository].append(artifact.project_path)

    def __call__(self, cmd, cwd=None, stdout=None, stderr=None, **kwargs):
        cwd = Path(cwd)
        self.calls.append((list(cmd), cwd))
        if cmd[1] == "clone":
            return self._clone(cmd, cwd, stdout)
        if cmd[1] == "build":
            return self._build(cmd, cwd, stdout)
        raise AssertionError(f"unexpected command: {cmd}")

    def _clone(self, cmd, cwd, stdout):
        dest = cwd / cmd[-1]
        if dest.name in self.fail_clone:
            if stdout is not None:
                stdout.write("fatal: Could not read from remote repository.\n")
            return subprocess.CompletedProcess(cmd, 128)
        dest.mkdir(parents=True)
        (dest / "Forc.toml").write_text("[workspace]\n")
        for project in self.projects[dest.name]:
            (dest / project).mkdir(parents=True)
            (dest / project / "Forc.toml").write_text("[project]\n")
        if stdout is not None:
            stdout.write(f"Cloning into '{dest.name}'...\n")
        return subprocess.CompletedProcess(cmd, 0)

    def _build(self, cmd, cwd, stdout):
        if cwd.name in self.fail_build:
            if stdout is not None:
                stdout.write("error: Failed to compile\n")
            return subprocess.CompletedProcess(cmd, 1)
        profile = "release" if "--release" in cmd else cmd[-1]
        for toml in sorted(cwd.rglob("Forc.toml")):
            project = toml.parent
            if project == cwd or project.name in self.skip_outputs:
                continue
            out = project / "out" / profile
            out.mkdir(parents=True, exist_ok=True)
            (out / f"{project.name}.bin").write_bytes(project.name.encode() * 4)
            (out / f"{project.name}-abi.json").write_text(
                f'{{"programType": "{project.name}"}}\n'
            )
        return subprocess.CompletedProcess(cmd, 0)


@pytest.fixture
def layout() -> LayoutSchema:
    """The built-in Mira v1 layout."""
    return mira_v1_layout()


@pytest.fixture
def fake_toolchain(layout, monkeypatch) -> FakeToolchain:
    """Patch subprocess.run with a fake git/forc toolchain."""
    toolchain = FakeToolchain(layout)
    monkeypatch.setattr(subprocess, "run", toolchain)
    return toolchain


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings rooted in a temporary directory."""
    return Settings(
        output_dir=tmp_path / "sway_abis",
        scratch_dir=tmp_path / "tmp_abis",
    )
