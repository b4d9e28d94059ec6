from __future__ import annotations

from pathlib import Path

import pytest

from scripts.openemr_deploy.env_schema import (
    LOCAL_SCHEMA,
    PRODUCTION_SCHEMA,
    SettingsKey,
    apply_defaults,
    get_spec,
    materialized_defaults,
    parse_dotenv_file,
    render_default,
    resolve_settings,
)


def test_render_default_substitutes_year():
    spec = get_spec(PRODUCTION_SCHEMA, SettingsKey.OE_PASS)
    assert render_default(spec, year=2031) == "secure_admin_pass_2031"


def test_render_default_plain_value_unchanged():
    spec = get_spec(LOCAL_SCHEMA, SettingsKey.HTTP_PORT)
    assert render_default(spec, year=2031) == "8080"


def test_get_spec_unknown_key_raises():
    with pytest.raises(KeyError):
        get_spec(LOCAL_SCHEMA, SettingsKey.NGINX_HTTPS_PORT)


def test_apply_defaults_fills_missing_and_blank_only():
    out = apply_defaults(LOCAL_SCHEMA, {"HTTP_PORT": "9000", "OE_USER": " "}, year=2030)
    assert out["HTTP_PORT"] == "9000"
    assert out["OE_USER"] == "admin"
    assert out["MYSQL_PORT"] == "3307"


def test_resolve_settings_without_file_uses_defaults(tmp_path: Path):
    out = resolve_settings(PRODUCTION_SCHEMA, tmp_path / ".env.production", year=2030)
    assert out["OE_USER"] == "admin"
    assert out["OE_PASS"] == "secure_admin_pass_2030"
    assert out["MYSQL_PASSWORD"] == "secure_openemr_pass_2030"
    assert out["MYSQL_PORT"] == "3308"


def test_resolve_settings_file_wins_over_defaults(tmp_path: Path):
    env_file = tmp_path / ".env"
    env_file.write_text("# local\nHTTP_PORT=18080\nOE_PASS='quoted pass'\n")
    out = resolve_settings(LOCAL_SCHEMA, env_file)
    assert out["HTTP_PORT"] == "18080"
    assert out["OE_PASS"] == "quoted pass"
    assert out["HTTPS_PORT"] == "8443"


def test_resolve_settings_ignores_process_env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HTTP_PORT", "12345")
    out = resolve_settings(LOCAL_SCHEMA, tmp_path / ".env")
    assert out["HTTP_PORT"] == "8080"


def test_parse_dotenv_file_keeps_empty_values(tmp_path: Path):
    env_file = tmp_path / ".env"
    env_file.write_text("OE_USER=\nOE_PASS=secret\n")
    assert parse_dotenv_file(env_file) == {"OE_USER": "", "OE_PASS": "secret"}


def test_production_materializes_credentials_only():
    out = materialized_defaults(PRODUCTION_SCHEMA, year=2030)
    assert out == {
        "MYSQL_ROOT_PASSWORD": "secure_root_pass_2030",
        "MYSQL_PASSWORD": "secure_openemr_pass_2030",
        "OE_USER": "admin",
        "OE_PASS": "secure_admin_pass_2030",
    }


def test_local_materializes_ports_and_credentials():
    out = materialized_defaults(LOCAL_SCHEMA)
    assert out["PHPMYADMIN_PORT"] == "8081"
    assert out["MYSQL_PASSWORD"] == "openemr_user_pass"
    assert len(out) == len(LOCAL_SCHEMA)
