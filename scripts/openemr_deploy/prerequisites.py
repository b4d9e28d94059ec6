"""Fail-fast host checks run before any container is started."""

from __future__ import annotations

import socket
from typing import Iterable

from scripts.openemr_deploy.console import print_success
from scripts.openemr_deploy.process_utils import command_succeeds
from scripts.openemr_deploy.profiles import DeployContext


class PreconditionError(RuntimeError):
    def __init__(self, *problems: str):
        super().__init__("; ".join(problems))
        self.problems = list(problems)

    def format(self) -> str:
        return "\n".join(self.problems)


def docker_daemon_reachable() -> bool:
    return command_succeeds(["docker", "info"])


def check_docker() -> None:
    if not docker_daemon_reachable():
        raise PreconditionError("Docker is not running. Please start Docker Desktop and try again.")
    print_success("Docker is running")


def port_in_use(port: int, host: str = "127.0.0.1", *, timeout: float = 0.5) -> bool:
    """True when something is listening on `host:port`."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(timeout)
        return sock.connect_ex((host, port)) == 0


def find_busy_ports(ports: Iterable[int]) -> list[int]:
    return [port for port in ports if port_in_use(port)]


def check_ports(ctx: DeployContext) -> None:
    try:
        ports = ctx.ports()
    except ValueError as e:
        raise PreconditionError(f"Invalid port in {ctx.env_file.name}: {e}") from e

    busy = find_busy_ports(ports)
    if busy:
        raise PreconditionError(
            "The following ports are busy: " + " ".join(str(p) for p in busy),
            ctx.profile.busy_ports_hint,
        )
    print_success("All required ports are available")
