"""Start/stop/inspect the OpenEMR stack through the compose CLI.

All container state is owned by the container engine; these functions only
issue compose commands against the profile's compose file and read back the
textual `ps` output.
"""

from __future__ import annotations

import subprocess
import time

from scripts.openemr_deploy.console import print_status, print_success, print_warning
from scripts.openemr_deploy.docker_compose_helpers import (
    build_compose_cmd,
    build_volume_prune_cmd,
    detect_compose_command,
    services_report_healthy,
)
from scripts.openemr_deploy.prerequisites import PreconditionError, check_docker, check_ports
from scripts.openemr_deploy.process_utils import run_command
from scripts.openemr_deploy.profiles import DeployContext
from scripts.openemr_deploy.status_report import show_status

RESTART_DELAY_SECONDS = 2


def compose_cmd(ctx: DeployContext, *args: str) -> list[str]:
    if not ctx.compose_file.exists():
        raise PreconditionError(f"Compose file not found: {ctx.compose_file}")
    if ctx.compose_cmd is None:
        ctx.compose_cmd = detect_compose_command()

    env_file = None
    if ctx.profile.pass_env_file and ctx.env_file.exists():
        env_file = ctx.env_file
    return build_compose_cmd(ctx.compose_cmd, compose_file=ctx.compose_file, env_file=env_file, args=list(args))


def run_compose(
    ctx: DeployContext,
    *args: str,
    capture_output: bool = False,
    ignore_errors: bool = False,
) -> subprocess.CompletedProcess:
    return run_command(
        compose_cmd(ctx, *args),
        cwd=ctx.deploy_dir,
        capture_output=capture_output,
        ignore_errors=ignore_errors,
    )


def wait_for_healthy(ctx: DeployContext, *, max_attempts: int | None = None, interval: float | None = None) -> bool:
    """Poll `compose ps` until its output mentions "healthy".

    Gives up after `max_attempts` polls with a warning; never fails the run.
    A failing `ps` counts as "not healthy yet".
    """
    attempts = ctx.profile.health_poll_attempts if max_attempts is None else max_attempts
    delay = ctx.profile.health_poll_interval if interval is None else interval

    for _ in range(attempts):
        result = run_compose(ctx, "ps", capture_output=True, ignore_errors=True)
        if result.returncode == 0 and services_report_healthy(result.stdout or ""):
            print()
            print_success("Services are healthy and ready!")
            return True
        print(".", end="", flush=True)
        time.sleep(delay)

    print()
    print_warning("Services may still be starting up. Check logs if issues persist.")
    return False


def start_services(ctx: DeployContext) -> None:
    print_status(f"Starting OpenEMR {ctx.profile.title}...")
    run_compose(ctx, "up", "-d")

    print_success("Services started successfully!")
    print_status("Waiting for services to be ready...")
    if ctx.profile.health_poll_attempts > 0:
        wait_for_healthy(ctx)
    elif ctx.profile.startup_grace_seconds > 0:
        time.sleep(ctx.profile.startup_grace_seconds)


def stop_services(ctx: DeployContext) -> None:
    print_status(f"Stopping OpenEMR {ctx.profile.title}...")
    run_compose(ctx, "down")
    print_success("Services stopped")


def restart_services(ctx: DeployContext) -> None:
    stop_services(ctx)
    time.sleep(RESTART_DELAY_SECONDS)
    check_docker()
    check_ports(ctx)
    start_services(ctx)
    show_status(ctx)


def cleanup(ctx: DeployContext) -> None:
    """Remove containers, named volumes and orphans. Irreversible."""
    print_status(f"Cleaning up OpenEMR {ctx.profile.title}...")
    run_compose(ctx, "down", "-v", "--remove-orphans")
    run_command(build_volume_prune_cmd(), cwd=ctx.deploy_dir)
    print_success("Cleanup completed")


def show_logs(ctx: DeployContext) -> int:
    try:
        run_compose(ctx, "logs", "-f")
    except KeyboardInterrupt:
        return 130
    return 0
