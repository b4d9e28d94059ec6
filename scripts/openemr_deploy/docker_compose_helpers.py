import os
import re
import shlex
import yaml
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from scripts.openemr_deploy.prerequisites import PreconditionError
from scripts.openemr_deploy.process_utils import command_available, command_succeeds

ENV_COMPOSE_COMMAND = "OPENEMR_COMPOSE_COMMAND"

# Regex to match ${VAR:-default} or ${VAR}
INTERPOLATION_PATTERN = re.compile(r'\$\{([^}:]+)(?::-([^}]*))?\}')


def detect_compose_command() -> list[str]:
    """
    Resolve the compose CLI.
    Resolution: OPENEMR_COMPOSE_COMMAND -> `docker compose` plugin -> standalone `docker-compose`.
    """
    override = str(os.getenv(ENV_COMPOSE_COMMAND) or "").strip()
    if override:
        return shlex.split(override)
    if command_succeeds(["docker", "compose", "version"]):
        return ["docker", "compose"]
    if command_available("docker-compose"):
        return ["docker-compose"]
    raise PreconditionError(
        "Neither `docker compose` nor `docker-compose` is available. "
        f"Install Docker Compose or set {ENV_COMPOSE_COMMAND}."
    )


def build_compose_cmd(base: list[str], *, compose_file: Path, env_file: Optional[Path] = None, args: list[str]) -> list[str]:
    cmd = list(base)
    cmd.extend(["-f", str(compose_file)])
    if env_file is not None:
        cmd.extend(["--env-file", str(env_file)])
    cmd.extend(args)
    return cmd


def build_volume_prune_cmd() -> list[str]:
    return ["docker", "volume", "prune", "-f"]


def services_report_healthy(ps_output: str) -> bool:
    """
    Substring heuristic over `compose ps` text: any container whose status
    mentions "healthy" counts. "unhealthy" matches too.
    """
    return "healthy" in (ps_output or "")


def interpolate_value(value: str, env: Optional[Mapping[str, str]] = None) -> str:
    """
    Interpolates variables in a string.
    Supports ${VAR} and ${VAR:-default}.
    """
    if not isinstance(value, str):
        return value
    source = os.environ if env is None else env

    def replace_match(match):
        var_name = match.group(1)
        default_value = match.group(2)
        env_val = source.get(var_name)
        if env_val is not None:
            return env_val
        return default_value if default_value is not None else ""

    return INTERPOLATION_PATTERN.sub(replace_match, value)


def interpolate_dict(data: Any, env: Optional[Mapping[str, str]] = None) -> Any:
    """Recursively interpolates strings in a dictionary or list."""
    if isinstance(data, dict):
        return {k: interpolate_dict(v, env) for k, v in data.items()}
    elif isinstance(data, list):
        return [interpolate_dict(v, env) for v in data]
    elif isinstance(data, str):
        return interpolate_value(data, env)
    else:
        return data


def load_docker_compose_config(compose_path: Path, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Parses a compose file using PyYAML and interpolates variables from `env`
    (default: the process environment).
    """
    if not compose_path.exists():
        raise FileNotFoundError(f"{compose_path.name} not found in {compose_path.parent}")

    try:
        with open(compose_path, "r") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RuntimeError(f"Failed to parse {compose_path.name}: {e}") from e

    if not isinstance(raw_config, dict):
        raise RuntimeError(f"{compose_path.name} is not a valid compose mapping")
    return interpolate_dict(raw_config, env)


def get_service_names(compose_config: Dict[str, Any]) -> list[str]:
    services = compose_config.get("services") or {}
    if not isinstance(services, dict):
        return []
    return [str(name) for name in services]


def get_ports(service_config: Dict[str, Any]) -> list:
    """Raw `ports` entries of a service (short strings, bare ints or long-syntax dicts)."""
    ports = service_config.get("ports", [])
    if ports is None:
        return []
    return ports


def _published_port(entry: Any) -> Optional[str]:
    if isinstance(entry, dict):
        published = entry.get("published")
        return str(published) if published not in (None, "") else None
    if not isinstance(entry, str):
        # A bare container port publishes nothing fixed.
        return None
    mapping = entry.split("/", 1)[0]
    parts = mapping.rsplit(":", 2)
    if len(parts) < 2 or not parts[-2]:
        return None
    return parts[-2]


def get_published_ports(compose_config: Dict[str, Any]) -> Dict[str, list[str]]:
    """Host ports per service, in file order. Services publishing nothing are omitted."""
    services = compose_config.get("services") or {}
    if not isinstance(services, dict):
        return {}
    published: Dict[str, list[str]] = {}
    for name, service_config in services.items():
        if not isinstance(service_config, dict):
            continue
        host_ports = [p for p in (_published_port(e) for e in get_ports(service_config)) if p]
        if host_ports:
            published[str(name)] = host_ports
    return published
