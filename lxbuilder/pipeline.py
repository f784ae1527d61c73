"""
Build Pipeline
==============

Runs the image build as one ordered sequence of steps sharing a single
validated configuration. A failing step raises and ends the run; nothing
is rolled back, and the next run starts by wiping the install directory.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import httpx

from .archive import create_archive
from .config import settings
from .customize import customize
from .guesttools import install_guest_tools
from .models import BuildConfig, PackageDefinition
from .packages import install_packages
from .release import download_release_package, ensure_signing_keys, verify_release_package
from .rootfs import reset_install_dir
from .runner import CommandRunner

logger = logging.getLogger(__name__)


class BuildPipeline:
    """
    Build an lx-brand Fedora image from an empty install directory.

    Steps:
    - reset: recreate the install directory with an empty rpm database
    - release: download and verify the release package
    - packages: install the release package, server group and extras
    - customize: timezone, locale, service overrides, sshd, motd, product
    - guesttools: run the guest tools installer
    - archive: tar the result
    """

    def __init__(
        self,
        config: BuildConfig,
        definitions: PackageDefinition,
        runner: Optional[CommandRunner] = None,
        output_dir: Optional[Path] = None,
        exclude_file: Optional[Path] = None,
        guesttools_dir: Optional[Path] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        self.config = config
        self.definitions = definitions
        self.runner = runner or CommandRunner()
        self.output_dir = Path(output_dir or settings.OUTPUT_DIR)
        self.exclude_file = exclude_file
        self.guesttools_dir = guesttools_dir
        self.http_client = http_client
        self.release_package: Optional[Path] = None
        self.archive: Optional[Path] = None

    @property
    def steps(self) -> List[Tuple[str, Callable[[], None]]]:
        return [
            ("reset", self._reset),
            ("release", self._release),
            ("packages", self._packages),
            ("customize", self._customize),
            ("guesttools", self._guesttools),
            ("archive", self._archive),
        ]

    def run(self) -> Path:
        """Run every step in order and return the archive path."""
        logger.info(
            "Building %s (Fedora %s) in %s",
            self.config.image_name,
            self.config.release,
            self.config.install_dir,
        )
        for name, step in self.steps:
            logger.info("==> Step: %s", name)
            step()

        logger.info("Installation complete!")
        logger.info("==> %s", self.archive)
        return self.archive

    def _reset(self) -> None:
        reset_install_dir(self.config, self.runner)

    def _release(self) -> None:
        if self.runner.dry_run:
            self.release_package = self.output_dir / self.config.release_package
            logger.info("[DRY RUN] Would download %s", self.config.release_url)
        else:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.release_package = download_release_package(
                self.config, self.output_dir, client=self.http_client
            )

        imported = ensure_signing_keys(self.definitions.signing_keys, self.runner)
        if imported:
            logger.info("Imported signing keys: %s", ", ".join(imported))

        verify_release_package(self.release_package, self.runner)

    def _packages(self) -> None:
        install_packages(self.config, self.definitions, self.release_package, self.runner)

    def _customize(self) -> None:
        if self.runner.dry_run:
            logger.info("[DRY RUN] Would customize %s", self.config.install_dir)
            return
        customize(self.config, self.definitions.host_services)

    def _guesttools(self) -> None:
        install_guest_tools(self.config, self.runner, self.guesttools_dir)

    def _archive(self) -> None:
        self.archive = create_archive(
            self.config,
            self.runner,
            exclude_file=self.exclude_file,
            output_dir=self.output_dir,
        )
