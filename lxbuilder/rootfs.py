"""Reset the image root and give it an empty rpm database."""

import logging
import shutil

from .models import BuildConfig
from .runner import CommandRunner

logger = logging.getLogger(__name__)


def reset_install_dir(config: BuildConfig, runner: CommandRunner) -> None:
    """Discard the install directory and recreate it with an empty rpm database.

    Prior contents are always removed, so re-running a build starts from
    the same empty state.
    """
    install_dir = config.install_dir

    logger.info("Deleting %s", install_dir)
    if not runner.dry_run:
        if install_dir.is_symlink() or install_dir.is_file():
            install_dir.unlink()
        elif install_dir.exists():
            shutil.rmtree(install_dir)
        install_dir.mkdir(parents=True)

    logger.info("Creating rpm database")
    runner.run(["rpm", "--initdb", f"--root={config.root}"])
