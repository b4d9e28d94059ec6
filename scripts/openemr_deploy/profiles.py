from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from scripts.openemr_deploy.env_schema import (
    LOCAL_SCHEMA,
    PRODUCTION_SCHEMA,
    EnvKeySpec,
    SettingsKey,
    resolve_settings,
)

MIN_PORT = 1
MAX_PORT = 65535


@dataclass(frozen=True)
class DeploymentProfile:
    """Everything that differs between the local and production-like variants."""
    name: str  # "local" or "production"
    title: str  # used in progress lines, e.g. "local deployment"
    compose_file_name: str
    env_file_name: str
    schema: tuple[EnvKeySpec, ...]
    port_keys: tuple[SettingsKey, ...]
    busy_ports_hint: str

    # Compose reads `.env` from its working directory on its own; other
    # settings files must be passed explicitly.
    pass_env_file: bool = False

    # Startup wait: a flat grace sleep, or a bounded health poll when
    # health_poll_attempts > 0.
    startup_grace_seconds: float = 0.0
    health_poll_attempts: int = 0
    health_poll_interval: float = 2.0

    build_assets: bool = False
    generate_tls: bool = False
    commands: tuple[str, ...] = ("start", "stop", "restart", "status", "logs", "cleanup")


LOCAL_PROFILE = DeploymentProfile(
    name="local",
    title="local deployment",
    compose_file_name="docker-compose.local.yml",
    env_file_name=".env",
    schema=LOCAL_SCHEMA,
    port_keys=(
        SettingsKey.HTTP_PORT,
        SettingsKey.HTTPS_PORT,
        SettingsKey.PHPMYADMIN_PORT,
        SettingsKey.MYSQL_PORT,
    ),
    busy_ports_hint="Please stop services on these ports or customize ports in .env file",
    startup_grace_seconds=10.0,
    build_assets=True,
    commands=("start", "stop", "restart", "status", "logs", "cleanup", "build"),
)


PRODUCTION_PROFILE = DeploymentProfile(
    name="production",
    title="production-like deployment",
    compose_file_name="docker-compose.production.yml",
    env_file_name=".env.production",
    schema=PRODUCTION_SCHEMA,
    port_keys=(
        SettingsKey.HTTP_PORT,
        SettingsKey.HTTPS_PORT,
        SettingsKey.NGINX_HTTP_PORT,
        SettingsKey.NGINX_HTTPS_PORT,
        SettingsKey.MYSQL_PORT,
    ),
    busy_ports_hint="Please stop services on these ports or modify docker-compose.production.yml",
    pass_env_file=True,
    health_poll_attempts=30,
    health_poll_interval=2.0,
    generate_tls=True,
    commands=("start", "stop", "restart", "status", "logs", "cleanup", "security"),
)


@dataclass
class DeployContext:
    """Per-invocation state handed to every step."""
    profile: DeploymentProfile
    deploy_dir: Path  # holds the compose file, settings file and ssl/
    project_root: Path  # OpenEMR checkout used by the asset build
    compose_cmd: list[str] | None = None  # resolved lazily, e.g. ["docker", "compose"]
    year: int | None = None

    @property
    def compose_file(self) -> Path:
        return self.deploy_dir / self.profile.compose_file_name

    @property
    def env_file(self) -> Path:
        return self.deploy_dir / self.profile.env_file_name

    @property
    def ssl_dir(self) -> Path:
        return self.deploy_dir / "ssl"

    def settings(self) -> dict[str, str]:
        return resolve_settings(self.profile.schema, self.env_file, year=self.year)

    def ports(self) -> list[int]:
        settings = self.settings()
        ports = []
        for key in self.profile.port_keys:
            port = int(settings[key.value])
            if not MIN_PORT <= port <= MAX_PORT:
                raise ValueError(f"{key.value}={port} is outside {MIN_PORT}-{MAX_PORT}")
            ports.append(port)
        return ports
