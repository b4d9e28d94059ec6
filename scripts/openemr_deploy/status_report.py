"""Print service URLs and credentials; never contacts the services."""

from __future__ import annotations

from scripts.openemr_deploy.console import GREEN, paint, print_error, print_field, print_status, print_success, print_warning
from scripts.openemr_deploy.docker_compose_helpers import get_published_ports, get_service_names, load_docker_compose_config
from scripts.openemr_deploy.env_schema import SettingsKey, get_spec, render_default
from scripts.openemr_deploy.profiles import DeployContext
from scripts.openemr_deploy.tls_certs import CERT_FILE_NAME, certificate_readable

DATABASE_NAME = "openemr"

PRODUCTION_FEATURES = (
    "Production-grade database configuration",
    "Nginx reverse proxy with SSL",
    "Security headers and rate limiting",
    "Health checks and monitoring",
    "Proper SSL/TLS configuration",
)


def service_urls(ctx: DeployContext, settings: dict[str, str]) -> list[tuple[str, str]]:
    def port(key: SettingsKey) -> str:
        return settings[key.value]

    if ctx.profile.name == "production":
        return [
            ("OpenEMR (Direct)", f"http://localhost:{port(SettingsKey.HTTP_PORT)}"),
            ("OpenEMR (Nginx)", f"https://localhost:{port(SettingsKey.NGINX_HTTPS_PORT)}"),
            ("Nginx HTTP", f"http://localhost:{port(SettingsKey.NGINX_HTTP_PORT)} (redirects to HTTPS)"),
        ]
    return [
        ("OpenEMR Application", f"http://localhost:{port(SettingsKey.HTTP_PORT)}"),
        ("OpenEMR HTTPS", f"https://localhost:{port(SettingsKey.HTTPS_PORT)}"),
        ("phpMyAdmin", f"http://localhost:{port(SettingsKey.PHPMYADMIN_PORT)}"),
    ]


def compose_config(ctx: DeployContext, settings: dict[str, str]) -> dict:
    try:
        return load_docker_compose_config(ctx.compose_file, settings)
    except (FileNotFoundError, RuntimeError):
        return {}


def published_ports_line(published: dict[str, list[str]]) -> str:
    return ", ".join(f"{name} {' '.join(ports)}" for name, ports in published.items())


def show_status(ctx: DeployContext) -> None:
    settings = ctx.settings()
    has_env_file = ctx.env_file.exists()
    production = ctx.profile.name == "production"

    print_status("Production-like Service URLs:" if production else "Service URLs:")
    for label, url in service_urls(ctx, settings):
        print_field(label, url, color=GREEN, width=21 if production else 20)
    print()

    if not production:
        print_status("Credentials:")
    elif has_env_file:
        print_status(f"Credentials (from {ctx.env_file}):")
    else:
        print_status("Default credentials:")
    print_field("Username", settings[SettingsKey.OE_USER.value])
    print_field("Password", settings[SettingsKey.OE_PASS.value])
    print()

    print_status("Database access:")
    print_field("Host", f"localhost:{settings[SettingsKey.MYSQL_PORT.value]}", width=9)
    print_field("Database", DATABASE_NAME, width=9)
    print_field("Username", settings[SettingsKey.MYSQL_USER.value], width=9)
    print_field("Password", settings[SettingsKey.MYSQL_PASSWORD.value], width=9)
    print()

    config = compose_config(ctx, settings)
    services = get_service_names(config)
    if services:
        print_status(f"Services in {ctx.compose_file.name}: {', '.join(services)}")
        published = get_published_ports(config)
        if published:
            print_status(f"Published ports: {published_ports_line(published)}")
        print()

    if production:
        print_status("Features in this deployment:")
        for feature in PRODUCTION_FEATURES:
            print(f"  {paint('✓', GREEN)} {feature}")
    elif not has_env_file:
        print_warning(f"No {ctx.env_file.name} file found. Copy .env.example to .env and customize passwords.")


def security_check(ctx: DeployContext) -> None:
    print_status("Running basic security checks...")

    if certificate_readable(ctx.ssl_dir / CERT_FILE_NAME):
        print_success("SSL certificate is valid")
    else:
        print_error("SSL certificate issue detected")

    if ctx.env_file.exists():
        default_pass = render_default(get_spec(ctx.profile.schema, SettingsKey.OE_PASS), year=ctx.year)
        if default_pass and default_pass in ctx.env_file.read_text():
            print_warning(f"Using default admin password. Consider changing it in {ctx.env_file}")

    print_success("Security check completed")
