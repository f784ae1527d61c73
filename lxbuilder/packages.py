"""
Package Installation
====================

Installs the release package, the server group and the extra utilities
into the image root. Every command is pointed at the install root and
never touches the host's package set.
"""

import logging
from pathlib import Path
from typing import List

from .models import BuildConfig, PackageDefinition
from .runner import CommandRunner

logger = logging.getLogger(__name__)


def dnf_command(config: BuildConfig, *args: str) -> List[str]:
    """Build a dnf invocation rooted at the install directory."""
    return [
        "dnf",
        f"--installroot={config.root}",
        f"--releasever={config.release}",
        *args,
    ]


def install_release_package(config: BuildConfig, package: Path, runner: CommandRunner) -> None:
    logger.info("Installing %s", package.name)
    runner.run(["rpm", "-i", f"--root={config.root}", "--nodeps", str(package)])


def install_group(config: BuildConfig, definitions: PackageDefinition, runner: CommandRunner) -> None:
    logger.info("Installing @%s group packages", definitions.group)
    args = ["-y", "group", "install", definitions.group]
    if definitions.exclude:
        args.append(f"--exclude={','.join(definitions.exclude)}")
    runner.run(dnf_command(config, *args))


def install_extras(config: BuildConfig, definitions: PackageDefinition, runner: CommandRunner) -> None:
    if not definitions.extras:
        return
    logger.info("Installing additional packages: %s", " ".join(definitions.extras))
    runner.run(dnf_command(config, "-y", "install", *definitions.extras))


def update_packages(config: BuildConfig, runner: CommandRunner) -> None:
    logger.info("Updating packages")
    runner.run(dnf_command(config, "-y", "update"))


def clean_cache(config: BuildConfig, runner: CommandRunner) -> None:
    logger.info("Cleaning up dnf cache")
    runner.run(dnf_command(config, "clean", "all"))


def install_packages(
    config: BuildConfig,
    definitions: PackageDefinition,
    release_package: Path,
    runner: CommandRunner,
) -> None:
    """Run the full installation sequence in order."""
    install_release_package(config, release_package, runner)
    install_group(config, definitions, runner)
    install_extras(config, definitions, runner)
    update_packages(config, runner)
    clean_cache(config, runner)
