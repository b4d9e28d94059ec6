"""Settings keys, defaults and dotenv I/O for the deployment settings files.

This module is the single source of truth for:
- which keys each deployment profile understands
- their defaults (a `{year}` placeholder renders the current year)
- which keys are written when a settings file is created from scratch

Values are read only from the settings file; keys missing from it fall back
to the schema defaults.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Mapping

from dotenv import dotenv_values


class SettingsKey(str, Enum):
    # Host ports
    HTTP_PORT = "HTTP_PORT"
    HTTPS_PORT = "HTTPS_PORT"
    PHPMYADMIN_PORT = "PHPMYADMIN_PORT"
    NGINX_HTTP_PORT = "NGINX_HTTP_PORT"
    NGINX_HTTPS_PORT = "NGINX_HTTPS_PORT"
    MYSQL_PORT = "MYSQL_PORT"

    # OpenEMR admin login
    OE_USER = "OE_USER"
    OE_PASS = "OE_PASS"

    # Database
    MYSQL_USER = "MYSQL_USER"
    MYSQL_PASSWORD = "MYSQL_PASSWORD"
    MYSQL_ROOT_PASSWORD = "MYSQL_ROOT_PASSWORD"


@dataclass(frozen=True)
class EnvKeySpec:
    key: SettingsKey
    default: str | None = None
    materialize: bool = True


LOCAL_SCHEMA: tuple[EnvKeySpec, ...] = (
    EnvKeySpec(key=SettingsKey.HTTP_PORT, default="8080"),
    EnvKeySpec(key=SettingsKey.HTTPS_PORT, default="8443"),
    EnvKeySpec(key=SettingsKey.PHPMYADMIN_PORT, default="8081"),
    EnvKeySpec(key=SettingsKey.MYSQL_PORT, default="3307"),
    EnvKeySpec(key=SettingsKey.OE_USER, default="admin"),
    EnvKeySpec(key=SettingsKey.OE_PASS, default="admin_password"),
    EnvKeySpec(key=SettingsKey.MYSQL_USER, default="openemr"),
    EnvKeySpec(key=SettingsKey.MYSQL_PASSWORD, default="openemr_user_pass"),
    EnvKeySpec(key=SettingsKey.MYSQL_ROOT_PASSWORD, default="root_pass"),
)


# Production ports are pinned by docker-compose.production.yml, so they are
# never written into `.env.production`.
PRODUCTION_SCHEMA: tuple[EnvKeySpec, ...] = (
    EnvKeySpec(key=SettingsKey.HTTP_PORT, default="8090", materialize=False),
    EnvKeySpec(key=SettingsKey.HTTPS_PORT, default="8453", materialize=False),
    EnvKeySpec(key=SettingsKey.NGINX_HTTP_PORT, default="8091", materialize=False),
    EnvKeySpec(key=SettingsKey.NGINX_HTTPS_PORT, default="8454", materialize=False),
    EnvKeySpec(key=SettingsKey.MYSQL_PORT, default="3308", materialize=False),
    EnvKeySpec(key=SettingsKey.MYSQL_ROOT_PASSWORD, default="secure_root_pass_{year}"),
    EnvKeySpec(key=SettingsKey.MYSQL_PASSWORD, default="secure_openemr_pass_{year}"),
    EnvKeySpec(key=SettingsKey.MYSQL_USER, default="openemr", materialize=False),
    EnvKeySpec(key=SettingsKey.OE_USER, default="admin"),
    EnvKeySpec(key=SettingsKey.OE_PASS, default="secure_admin_pass_{year}"),
)


def current_year() -> int:
    return datetime.date.today().year


def render_default(spec: EnvKeySpec, *, year: int | None = None) -> str | None:
    if spec.default is None:
        return None
    return spec.default.format(year=year if year is not None else current_year())


def parse_dotenv_file(path: Path) -> dict[str, str]:
    """Parse a dotenv file.

    - Comments are ignored.
    - Keys are preserved even if they have empty values ("").
    """
    kv: dict[str, str] = {}
    raw = dotenv_values(path)
    for k, v in raw.items():
        if k is None:
            continue
        key = str(k).strip()
        if not key:
            continue
        val = "" if v is None else str(v).strip()
        kv[key] = val
    return kv


def apply_defaults(schema: Iterable[EnvKeySpec], kv: Mapping[str, str], *, year: int | None = None) -> dict[str, str]:
    out = dict(kv)
    for spec in schema:
        if spec.key.value in out and str(out.get(spec.key.value) or "").strip():
            continue
        default = render_default(spec, year=year)
        if default is None:
            continue
        out[spec.key.value] = default
    return out


def resolve_settings(schema: Iterable[EnvKeySpec], env_file: Path, *, year: int | None = None) -> dict[str, str]:
    """Settings file values layered over the schema defaults."""
    kv: dict[str, str] = {}
    if env_file.exists():
        kv = parse_dotenv_file(env_file)
    return apply_defaults(schema, kv, year=year)


def materialized_defaults(schema: Iterable[EnvKeySpec], *, year: int | None = None) -> dict[str, str]:
    out: dict[str, str] = {}
    for spec in schema:
        if not spec.materialize:
            continue
        default = render_default(spec, year=year)
        if default is not None:
            out[spec.key.value] = default
    return out


def _format_dotenv_value(value: str) -> str:
    # Generated values are plain tokens and safe unquoted.
    return str(value)


def write_dotenv_values(
    *,
    path: Path,
    updates: Mapping[str, str],
    create: bool = False,
    header: str = "# Generated by openemr-deploy",
) -> None:
    """Update (or create) a dotenv file in-place.

    - Preserves existing lines/comments.
    - Replaces existing KEY=... lines for keys in `updates`.
    - Appends missing keys at the end in sorted order.
    """
    if not updates:
        return

    if not path.exists():
        if not create:
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(header + "\n")

    original_lines = path.read_text().splitlines()
    remaining = {k: _format_dotenv_value(v) for k, v in updates.items() if str(v).strip()}
    if not remaining:
        return

    out: list[str] = []
    for line in original_lines:
        s = line.strip()
        if not s or s.startswith("#") or "=" not in line:
            out.append(line)
            continue

        key = line.split("=", 1)[0].strip()
        if key in remaining:
            out.append(f"{key}={remaining.pop(key)}")
            continue

        out.append(line)

    for key in sorted(remaining.keys()):
        out.append(f"{key}={remaining[key]}")

    path.write_text("\n".join(out) + "\n")


def get_spec(schema: Iterable[EnvKeySpec], key: SettingsKey) -> EnvKeySpec:
    for spec in schema:
        if spec.key == key:
            return spec
    raise KeyError(key)
