"""
Release Package Acquisition
===========================

Downloads the distribution release package from the configured mirror,
makes sure the allow-listed Fedora signing keys are trusted and verifies
the package signature before anything is installed from it.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

import httpx

from .config import settings
from .models import BuildConfig, SigningKey
from .runner import CommandRunner

logger = logging.getLogger(__name__)


class VerificationError(RuntimeError):
    """The release package signature could not be verified."""


def download_release_package(
    config: BuildConfig,
    dest_dir: Path,
    client: Optional[httpx.Client] = None,
) -> Path:
    """
    Download the release package into dest_dir.

    Args:
        config: Build configuration
        dest_dir: Directory to save the package in
        client: Optional httpx client (a short-lived one is created otherwise)

    Returns:
        Path to the downloaded package

    Raises:
        httpx.HTTPError: If the mirror cannot be reached or answers with an error
    """
    dest = Path(dest_dir) / config.release_package
    url = config.release_url
    logger.info("Downloading release package %s", url)

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=settings.DOWNLOAD_TIMEOUT, follow_redirects=True)

    try:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            with open(dest, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
    except httpx.HTTPError:
        dest.unlink(missing_ok=True)
        raise
    finally:
        if owns_client:
            client.close()

    logger.debug("Saved %s", dest)
    return dest


def is_key_trusted(key_id: str, runner: CommandRunner) -> bool:
    """Return True if the signing key is already in the host rpm keyring."""
    result = runner.run(["rpm", "-q", f"gpg-pubkey-{key_id}"], check=False, capture=True)
    return result.returncode == 0


def import_key(key: SigningKey, runner: CommandRunner) -> None:
    logger.info("Importing signing key %s from %s", key.id, key.url)
    runner.run(["rpm", "--import", key.url])


def ensure_signing_keys(keys: Iterable[SigningKey], runner: CommandRunner) -> List[str]:
    """
    Import every allow-listed key that is not trusted yet.

    Returns:
        Ids of the keys that were imported
    """
    imported = []
    for key in keys:
        if is_key_trusted(key.id, runner):
            logger.debug("Signing key %s already trusted", key.id)
            continue
        import_key(key, runner)
        imported.append(key.id)
    return imported


def verify_release_package(package: Path, runner: CommandRunner) -> None:
    """
    Check the release package signature with rpm.

    Raises:
        VerificationError: If rpm reports a bad or unknown signature
    """
    logger.info("Verifying %s", package.name)
    result = runner.run(["rpm", "-K", str(package)], check=False, capture=True)
    report = f"{result.stdout or ''}{result.stderr or ''}".strip()

    if result.returncode != 0 or "NOT OK" in report:
        raise VerificationError(f"Signature check failed for {package.name}: {report}")

    logger.debug(report)
