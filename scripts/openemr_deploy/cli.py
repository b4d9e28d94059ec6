"""Argument parsing and sub-command dispatch shared by both entry points."""

from __future__ import annotations

import argparse
import os
import shlex
import subprocess
from pathlib import Path

from scripts.openemr_deploy.asset_builder import build_assets
from scripts.openemr_deploy.console import configure_logging, print_error
from scripts.openemr_deploy.env_materializer import materialize_env_file_if_missing
from scripts.openemr_deploy.prerequisites import PreconditionError, check_docker, check_ports
from scripts.openemr_deploy.profiles import DeployContext, DeploymentProfile
from scripts.openemr_deploy.service_controller import (
    cleanup,
    restart_services,
    show_logs,
    start_services,
    stop_services,
)
from scripts.openemr_deploy.status_report import security_check, show_status
from scripts.openemr_deploy.tls_certs import generate_ssl_certs

ENV_DEPLOY_DIR = "OPENEMR_DEPLOY_DIR"

COMMAND_HELP = {
    "start": "Start the {title} (default)",
    "stop": "Stop the deployment",
    "restart": "Restart the deployment",
    "status": "Show service URLs and credentials",
    "logs": "Show service logs",
    "cleanup": "Stop services and remove all data",
    "build": "Build OpenEMR assets only",
    "security": "Run basic security checks",
}


def usage_text(prog: str, profile: DeploymentProfile) -> str:
    width = max(len(c) for c in profile.commands) + 1
    lines = [f"Usage: {prog} {{{'|'.join(profile.commands)}}}", "", "Commands:"]
    for command in profile.commands:
        description = COMMAND_HELP[command].format(title=f"{profile.title.split()[0]} OpenEMR deployment")
        lines.append(f"  {command.ljust(width)} - {description}")
    return "\n".join(lines)


def build_parser(prog: str, profile: DeploymentProfile) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description=f"Manage the OpenEMR {profile.title} with Docker Compose",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="start",
        help=f"One of: {', '.join(profile.commands)} (default: start)",
    )
    parser.add_argument(
        "--deploy-dir",
        default=None,
        help=(
            f"Directory holding {profile.compose_file_name} and {profile.env_file_name}. "
            f"Resolution: CLI -> {ENV_DEPLOY_DIR} env var -> current directory"
        ),
    )
    parser.add_argument(
        "--project-root",
        default=None,
        help="OpenEMR checkout used for asset builds (default: parent of the deploy directory)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every external command")
    return parser


def resolve_deploy_dir(cli_value: str | None) -> Path:
    raw = str(cli_value or "").strip()
    if not raw:
        raw = str(os.getenv(ENV_DEPLOY_DIR) or "").strip()
    if not raw:
        return Path.cwd()
    return Path(raw).expanduser().resolve()


def start(ctx: DeployContext) -> None:
    check_docker()
    check_ports(ctx)
    materialize_env_file_if_missing(ctx)
    if ctx.profile.generate_tls:
        generate_ssl_certs(ctx.ssl_dir)
    if ctx.profile.build_assets:
        build_assets(ctx)
    start_services(ctx)
    show_status(ctx)


def dispatch(command: str, ctx: DeployContext) -> int:
    if command == "start":
        start(ctx)
    elif command == "stop":
        stop_services(ctx)
    elif command == "restart":
        restart_services(ctx)
    elif command == "status":
        show_status(ctx)
    elif command == "logs":
        return show_logs(ctx)
    elif command == "cleanup":
        cleanup(ctx)
    elif command == "build":
        build_assets(ctx)
    elif command == "security":
        security_check(ctx)
    return 0


def run(
    profile: DeploymentProfile,
    argv: list[str] | None = None,
    *,
    prog: str,
    deploy_dir_override: Path | None = None,
) -> int:
    args, extra = build_parser(prog, profile).parse_known_args(argv)
    configure_logging(args.verbose)

    command = str(args.command).strip()
    if extra or command not in profile.commands:
        print(usage_text(prog, profile))
        return 1

    deploy_dir = deploy_dir_override or resolve_deploy_dir(args.deploy_dir)
    project_root = Path(args.project_root).expanduser().resolve() if args.project_root else deploy_dir.parent
    ctx = DeployContext(profile=profile, deploy_dir=deploy_dir, project_root=project_root)

    try:
        return dispatch(command, ctx)
    except PreconditionError as e:
        for line in e.format().splitlines():
            print_error(line)
        return 1
    except subprocess.CalledProcessError as e:
        cmd = shlex.join(str(c) for c in e.cmd) if isinstance(e.cmd, (list, tuple)) else str(e.cmd)
        print_error(f"Command failed with exit code {e.returncode}: {cmd}")
        return 1
    except FileNotFoundError as e:
        print_error(f"Required tool not found: {e.filename or e}")
        return 1
