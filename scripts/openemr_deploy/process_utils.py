"""Shared helpers for shelling out to docker, compose, openssl, composer and npm."""

from __future__ import annotations

import shlex
import shutil
import subprocess
import sys
from pathlib import Path

from scripts.openemr_deploy.console import logger


def command_available(name: str) -> bool:
    return shutil.which(name) is not None


def run_command(
    args: list[str],
    *,
    cwd: Path | None = None,
    capture_output: bool = False,
    ignore_errors: bool = False,
) -> subprocess.CompletedProcess:
    """Run an external command and return the completed process.

    Non-zero exits raise CalledProcessError unless `ignore_errors` is set.
    Captured output of a failed command is echoed to stderr before raising.
    """
    logger.debug("$ %s", shlex.join(args))

    result = subprocess.run(
        args,
        cwd=str(cwd) if cwd is not None else None,
        stdout=subprocess.PIPE if capture_output else None,
        stderr=subprocess.PIPE if capture_output else None,
        text=True,
        check=False,
    )

    if result.returncode != 0 and not ignore_errors:
        if capture_output:
            if result.stdout:
                print(result.stdout.rstrip(), file=sys.stderr)
            if result.stderr:
                print(result.stderr.rstrip(), file=sys.stderr)
        raise subprocess.CalledProcessError(result.returncode, args, output=result.stdout, stderr=result.stderr)

    return result


def command_succeeds(args: list[str], *, cwd: Path | None = None) -> bool:
    """True when the command exists and exits 0; its output is discarded."""
    try:
        result = run_command(args, cwd=cwd, capture_output=True, ignore_errors=True)
    except FileNotFoundError:
        return False
    return result.returncode == 0
