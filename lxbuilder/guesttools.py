"""Install the platform guest tools into the image root."""

import logging
from pathlib import Path
from typing import Optional

from .config import settings
from .models import BuildConfig
from .runner import CommandRunner

logger = logging.getLogger(__name__)


def install_guest_tools(
    config: BuildConfig,
    runner: CommandRunner,
    guesttools_dir: Optional[Path] = None,
) -> None:
    """
    Run the guest tools installer against the install directory.

    The installer lives in a git submodule and is run from inside its
    checkout so it can find its own payload.

    Raises:
        FileNotFoundError: If the submodule has not been checked out
        CommandError: If the installer exits non-zero
    """
    guesttools_dir = Path(guesttools_dir or settings.GUESTTOOLS_DIR).resolve()
    installer = guesttools_dir / settings.GUESTTOOLS_INSTALLER

    if not installer.is_file():
        raise FileNotFoundError(
            f"Guest tools installer not found: {installer} "
            "(run 'git submodule update --init')"
        )

    logger.info("Installing guest tools in %s", config.install_dir)
    runner.run([str(installer), "-i", str(config.root)], cwd=guesttools_dir)
