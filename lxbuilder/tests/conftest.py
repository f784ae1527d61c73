"""
Pytest Configuration and Fixtures
==================================

Shared fixtures for builder testing.
"""

import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from lxbuilder.models import BuildConfig, PackageDefinition, load_definitions
from lxbuilder.runner import CommandError, CommandRunner

BUILD_DATE = "20261018"


class RecordingRunner(CommandRunner):
    """CommandRunner double that records commands instead of running them.

    Responses are keyed by the space-joined command and hold
    (returncode, stdout).
    """

    def __init__(self, responses: Optional[Dict[str, Tuple[int, str]]] = None, dry_run: bool = False):
        super().__init__(dry_run=dry_run)
        self.responses = responses or {}
        self.calls: List[List[str]] = []
        self.cwds: List[Optional[Path]] = []

    def run(self, cmd, check=True, capture=False, cwd=None):
        cmd = [str(part) for part in cmd]
        self.calls.append(cmd)
        self.cwds.append(cwd)
        returncode, stdout = self.responses.get(" ".join(cmd), (0, ""))
        if check and returncode != 0:
            raise CommandError(cmd, returncode)
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr="")


def write_stub_command(bin_dir: Path, name: str, log_file: Path, body: str = "") -> Path:
    """Create an executable stub that logs its invocations for assertions."""
    stub_path = bin_dir / name
    stub_path.write_text(
        "#!/usr/bin/env bash\n"
        f'printf "%s %s\\n" "$(basename "$0")" "$*" >> "{log_file}"\n'
        f"{body}\n"
        "exit 0\n"
    )
    stub_path.chmod(0o755)
    return stub_path


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    path = tmp_path / "chroot"
    path.mkdir()
    return path


@pytest.fixture
def build_config(install_dir: Path) -> BuildConfig:
    """A fully populated configuration with a fixed build date."""
    return BuildConfig(
        install_dir=install_dir,
        mirror="https://mirror.example.org/fedora/releases/41/Everything/x86_64/os/Packages/f/",
        release="41",
        release_package="fedora-release-41-25.noarch.rpm",
        image_name="lx-fedora-41",
        name="Fedora 41 LX Brand",
        description="Fedora 41 64-bit lx-brand image.",
        docs_url="https://docs.example.org/images/lx",
        build_date=BUILD_DATE,
    )


@pytest.fixture
def relative_config(build_config: BuildConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> BuildConfig:
    """The same configuration with the install directory given as ``chroot/``."""
    monkeypatch.chdir(tmp_path)
    return BuildConfig(**{**build_config.model_dump(), "install_dir": "chroot/"})


@pytest.fixture
def definitions() -> PackageDefinition:
    return load_definitions()


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def stub_bin(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Directory placed first on PATH for stub executables."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ['PATH']}")
    return bin_dir
