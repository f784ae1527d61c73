"""
Image Packaging
===============

Archives the finished image root into <image-name>-<YYYYMMDD>.tar.gz,
leaving out the paths listed in the exclusion file.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .config import settings
from .models import BuildConfig
from .runner import CommandRunner

logger = logging.getLogger(__name__)


def read_exclusions(exclude_file: Path) -> List[str]:
    """Return the tar exclusion patterns, skipping blank lines and comments."""
    patterns = []
    for line in Path(exclude_file).read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


def create_archive(
    config: BuildConfig,
    runner: CommandRunner,
    exclude_file: Optional[Path] = None,
    output_dir: Optional[Path] = None,
) -> Path:
    """
    Tar and gzip the install directory.

    Members are stored relative to the image root (./etc/motd, ./usr/...).

    Returns:
        Path to the archive

    Raises:
        FileNotFoundError: If the exclusion file is missing
        CommandError: If tar fails
    """
    exclude_file = Path(exclude_file or settings.EXCLUDE_FILE)
    output_dir = Path(output_dir or settings.OUTPUT_DIR)

    if not exclude_file.is_file():
        raise FileNotFoundError(f"Exclusion list not found: {exclude_file}")

    target = output_dir / config.target
    logger.info("Saving installation as %s. This may take a few minutes.", target)
    logger.debug("Excluding %d pattern(s) from %s", len(read_exclusions(exclude_file)), exclude_file)

    if not runner.dry_run:
        output_dir.mkdir(parents=True, exist_ok=True)

    runner.run([
        "tar",
        "-czf", str(target.resolve()),
        f"--exclude-from={exclude_file.resolve()}",
        "-C", str(config.install_dir),
        ".",
    ])
    return target
