"""
Command Runner
==============

Thin wrapper around subprocess for the external tools the build drives
(rpm, dnf, tar and the guest tools installer).
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """An external command exited non-zero."""

    def __init__(self, cmd: Sequence[str], returncode: int, stderr: str = ""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command failed with exit status {returncode}: {shlex.join(self.cmd)}"
        if stderr:
            message = f"{message}\n{stderr.strip()}"
        super().__init__(message)


class CommandRunner:
    """Run external commands, logging each one before it starts."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def run(
        self,
        cmd: Sequence[str],
        check: bool = True,
        capture: bool = False,
        cwd: Optional[Path] = None,
    ) -> subprocess.CompletedProcess:
        """Run a command with optional output capture.

        Raises:
            CommandError: If check is set and the command exits non-zero
        """
        cmd = [str(part) for part in cmd]
        logger.debug("Running: %s", shlex.join(cmd))

        if self.dry_run:
            logger.info("[DRY RUN] %s", shlex.join(cmd))
            return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

        kwargs = {"cwd": cwd}
        if capture:
            kwargs.update({"stdout": subprocess.PIPE, "stderr": subprocess.PIPE, "text": True})

        result = subprocess.run(cmd, **kwargs)
        if check and result.returncode != 0:
            raise CommandError(cmd, result.returncode, result.stderr or "")
        return result
