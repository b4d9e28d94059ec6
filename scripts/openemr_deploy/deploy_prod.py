#!/usr/bin/env python3
"""Run a production-like OpenEMR environment locally for testing.

Usage:
  openemr-deploy-prod [start|stop|restart|status|logs|cleanup|security]

Compared to the local variant this stack sits behind an nginx TLS proxy.
`start` writes `.env.production` and a self-signed `ssl/server.crt` /
`ssl/server.key` pair on first run, then waits for the containers to report
healthy.
"""

from __future__ import annotations

from pathlib import Path

from scripts.openemr_deploy.cli import run
from scripts.openemr_deploy.profiles import PRODUCTION_PROFILE


def main(argv: list[str] | None = None, deploy_dir_override: Path | None = None) -> int:
    return run(PRODUCTION_PROFILE, argv, prog="openemr-deploy-prod", deploy_dir_override=deploy_dir_override)


if __name__ == "__main__":
    raise SystemExit(main())
