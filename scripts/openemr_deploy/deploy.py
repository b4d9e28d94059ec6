#!/usr/bin/env python3
"""Set up a local OpenEMR development environment with Docker Compose.

Usage:
  openemr-deploy [start|stop|restart|status|logs|cleanup|build]

The deploy directory (default: current directory) holds
`docker-compose.local.yml` and `.env`; the OpenEMR checkout whose assets are
built is its parent unless --project-root is given.
"""

from __future__ import annotations

from pathlib import Path

from scripts.openemr_deploy.cli import run
from scripts.openemr_deploy.profiles import LOCAL_PROFILE


def main(argv: list[str] | None = None, deploy_dir_override: Path | None = None) -> int:
    return run(LOCAL_PROFILE, argv, prog="openemr-deploy", deploy_dir_override=deploy_dir_override)


if __name__ == "__main__":
    raise SystemExit(main())
