#!/usr/bin/env python3
"""
lx-fedora-builder
=================

Install and customize Fedora in a given directory using a given mirror,
then package it as an lx-brand image archive.

Usage:
    lx-fedora-builder -d <INSTALL_DIR> -m <MIRROR> -R <RELEASE> -r <RELEASE_PACKAGE>
                      -i <IMAGE_NAME> -p <NAME> -D <DESC> [-u <DOCS>]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx
from pydantic import ValidationError

from .config import settings
from .models import BuildConfig, load_definitions
from .pipeline import BuildPipeline
from .runner import CommandRunner

logger = logging.getLogger(__name__)

# (attribute, flag, label) in the order they are reported when missing
REQUIRED_FLAGS = [
    ("install_dir", "-d", "install directory"),
    ("mirror", "-m", "mirror"),
    ("release", "-R", "release version"),
    ("release_package", "-r", "release package"),
    ("image_name", "-i", "image name"),
    ("name", "-p", "name"),
    ("description", "-D", "description"),
]


class BuilderArgumentParser(argparse.ArgumentParser):
    """Argument parser that answers bad flags with the usage text."""

    def error(self, message):
        sys.stderr.write(f"{self.prog}: {message}\n")
        self.print_help(sys.stderr)
        self.exit(0)


def build_parser() -> BuilderArgumentParser:
    parser = BuilderArgumentParser(
        prog="lx-fedora-builder",
        description="Install and modify Fedora in a given directory using a given mirror",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
  lx-fedora-builder -d /data/chroot \\
      -m https://dl.fedoraproject.org/pub/fedora/linux/releases/41/Everything/x86_64/os/Packages/f \\
      -R 41 -r fedora-release-41-25.noarch.rpm -i lx-fedora-41 \\
      -p "Fedora 41 LX Brand" -D "Fedora 41 64-bit lx-brand image." \\
      -u https://docs.joyent.com/images/container-native-linux
        """,
    )

    parser.add_argument("-d", dest="install_dir", metavar="INSTALL_DIR",
                        help="A path to the install directory")
    parser.add_argument("-m", dest="mirror", metavar="MIRROR",
                        help="A URL for the desired archive mirror")
    parser.add_argument("-R", dest="release", metavar="RELEASE",
                        help="Release version (e.g. 41)")
    parser.add_argument("-r", dest="release_package", metavar="RELEASE_PACKAGE",
                        help="The release package filename")
    parser.add_argument("-i", dest="image_name", metavar="IMAGE_NAME",
                        help="The name of the image, used for the archive name")
    parser.add_argument("-p", dest="name", metavar="NAME",
                        help="The proper name of the image")
    parser.add_argument("-D", dest="description", metavar="DESC",
                        help="A description of the image")
    parser.add_argument("-u", dest="docs_url", metavar="DOCS",
                        help=f"A URL to the image documentation (default: {settings.DEFAULT_DOCS_URL})")

    parser.add_argument("-o", "--output-dir", type=Path, default=settings.OUTPUT_DIR,
                        help="Directory for the release package download and the archive")
    parser.add_argument("--exclude-file", type=Path, default=settings.EXCLUDE_FILE,
                        help="Paths to leave out of the archive, one tar pattern per line")
    parser.add_argument("--guesttools-dir", type=Path, default=settings.GUESTTOOLS_DIR,
                        help="Guest tools submodule checkout")
    parser.add_argument("--definitions", type=Path, default=settings.DEFINITIONS_FILE,
                        help="YAML package definitions file")
    parser.add_argument("--dry-run", action="store_true",
                        help="Log external commands without running them")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def missing_flag(args: argparse.Namespace) -> Optional[str]:
    """Return the error for the first required flag without a value."""
    for attr, flag, label in REQUIRED_FLAGS:
        if not getattr(args, attr):
            return f"Error: missing {label} ({flag}) value"
    return None


def parse_config(args: argparse.Namespace) -> BuildConfig:
    """
    Build the validated configuration record from parsed arguments.

    Raises:
        ValidationError: If a value is rejected
    """
    return BuildConfig(
        install_dir=args.install_dir,
        mirror=args.mirror,
        release=args.release,
        release_package=args.release_package,
        image_name=args.image_name,
        name=args.name,
        description=args.description,
        docs_url=args.docs_url,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on any failure."""
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()

    if not argv:
        parser.print_help(sys.stderr)
        return 1

    args = parser.parse_args(argv)

    error = missing_flag(args)
    if error:
        print(error, file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    try:
        config = parse_config(args)
    except ValidationError as e:
        for err in e.errors():
            print(f"Error: {err['msg']}", file=sys.stderr)
        return 1

    configure_logging(args.verbose)

    try:
        definitions = load_definitions(args.definitions)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1

    pipeline = BuildPipeline(
        config,
        definitions,
        runner=CommandRunner(dry_run=args.dry_run),
        output_dir=args.output_dir,
        exclude_file=args.exclude_file,
        guesttools_dir=args.guesttools_dir,
    )

    try:
        pipeline.run()
    except (RuntimeError, OSError, httpx.HTTPError) as e:
        logger.error("Build failed: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
