"""
System Customization
====================

Fixed configuration edits applied inside the image root once packages are
installed: timezone, locale, systemd sandbox overrides for services that
talk to the host, SSH hardening, the login banner and /etc/product.
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from .config import settings
from .models import BuildConfig

logger = logging.getLogger(__name__)

LOCALE = "en_US.UTF-8"
ZONEINFO_UTC = "/usr/share/zoneinfo/UTC"

# Namespacing features that cannot be set up from inside an lx zone
HOST_SERVICE_OVERRIDE = """\
[Service]
PrivateTmp=no
PrivateDevices=no
PrivateNetwork=no
ProtectSystem=no
ProtectHome=no
ProtectKernelTunables=no
ProtectControlGroups=no
NoNewPrivileges=no
"""

HTTPD_OVERRIDE = """\
[Service]
PrivateTmp=no
PrivateDevices=no
"""

SSHD_DIRECTIVES = {
    "passwordauthentication": "PasswordAuthentication no",
    "usedns": "UseDNS no",
}

MOTD_TEMPLATE = """\
   __        .                   .
 _|  |_      | .-. .  . .-. :--. |-
|_    _|     ;|   ||  |(.-' |  | |
  |__|   `--'  `-' `;-| `-' '  ' `-'
                   /  ;  Instance ({name} {build_date})
                   `-'   {docs_url}

"""

PRODUCT_TEMPLATE = """\
Name: {product}
Image: {name} {build_date}
Documentation: {docs_url}
Description: {description}
"""


def _root_path(config: BuildConfig, path: str) -> Path:
    return config.install_dir / path.lstrip("/")


def _write(config: BuildConfig, path: str, content: str) -> None:
    target = _root_path(config, path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")


def set_timezone(config: BuildConfig) -> None:
    logger.info("Setting TZ to UTC")
    localtime = _root_path(config, "/etc/localtime")
    localtime.parent.mkdir(parents=True, exist_ok=True)
    if localtime.is_symlink() or localtime.exists():
        localtime.unlink()
    os.symlink(ZONEINFO_UTC, localtime)


def set_locale(config: BuildConfig) -> None:
    logger.info("Setting locale to %s", LOCALE)
    _write(config, "/etc/locale.conf", f'LANG="{LOCALE}"\n')


def write_service_override(config: BuildConfig, service: str, content: str) -> Path:
    """Write /etc/systemd/system/<service>.service.d/override.conf."""
    override_dir = _root_path(config, f"/etc/systemd/system/{service}.service.d")
    override_dir.mkdir(parents=True, exist_ok=True)
    override = override_dir / "override.conf"
    override.write_text(content, encoding="utf-8")
    return override


def write_service_overrides(config: BuildConfig, host_services: Iterable[str]) -> None:
    for service in host_services:
        logger.info("Adding systemd override for %s", service)
        write_service_override(config, service, HOST_SERVICE_OVERRIDE)

    logger.info("Adding systemd override for httpd")
    write_service_override(config, "httpd", HTTPD_OVERRIDE)


def harden_sshd(config: BuildConfig) -> None:
    logger.info("Hardening sshd_config")
    sshd_config = _root_path(config, "/etc/ssh/sshd_config")
    sshd_config.parent.mkdir(parents=True, exist_ok=True)
    existing = sshd_config.read_text(encoding="utf-8").splitlines() if sshd_config.exists() else []

    # sshd keeps the first value it sees for a keyword
    lines = []
    for line in existing:
        words = line.split()
        if words and words[0].lower() in SSHD_DIRECTIVES:
            line = f"#{line}"
        lines.append(line)

    lines.append("")
    lines.append("# Disable password logins and reverse DNS lookups")
    lines.extend(SSHD_DIRECTIVES.values())
    sshd_config.write_text("\n".join(lines) + "\n", encoding="utf-8")


def render_motd(config: BuildConfig) -> str:
    return MOTD_TEMPLATE.format(
        name=config.name,
        build_date=config.build_date,
        docs_url=config.docs_url,
    )


def render_product(config: BuildConfig) -> str:
    return PRODUCT_TEMPLATE.format(
        product=settings.PRODUCT_NAME,
        name=config.name,
        build_date=config.build_date,
        docs_url=config.docs_url,
        description=config.description,
    )


def write_motd(config: BuildConfig) -> None:
    logger.info("Writing /etc/motd")
    _write(config, "/etc/motd", render_motd(config))


def write_product(config: BuildConfig) -> None:
    logger.info("Writing /etc/product")
    _write(config, "/etc/product", render_product(config))


def customize(config: BuildConfig, host_services: Iterable[str]) -> None:
    """Apply every image customization in order."""
    set_timezone(config)
    set_locale(config)
    write_service_overrides(config, host_services)
    harden_sshd(config)
    write_motd(config)
    write_product(config)
