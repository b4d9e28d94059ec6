from __future__ import annotations

from pathlib import Path

from scripts.openemr_deploy.env_materializer import materialize_env_file_if_missing
from scripts.openemr_deploy.profiles import LOCAL_PROFILE, PRODUCTION_PROFILE, DeployContext


def _ctx(profile, deploy_dir: Path) -> DeployContext:
    return DeployContext(profile=profile, deploy_dir=deploy_dir, project_root=deploy_dir.parent, year=2030)


def test_creates_production_env_file_with_year_passwords(tmp_path: Path, capsys):
    ctx = _ctx(PRODUCTION_PROFILE, tmp_path)

    assert materialize_env_file_if_missing(ctx) is True

    text = (tmp_path / ".env.production").read_text()
    assert text.startswith("# Production environment variables\n")
    assert "OE_PASS=secure_admin_pass_2030\n" in text
    assert "MYSQL_ROOT_PASSWORD=secure_root_pass_2030\n" in text
    assert "HTTP_PORT" not in text
    captured = capsys.readouterr()
    assert "[SUCCESS]" in captured.out
    assert "Please review and customize the passwords" in captured.err


def test_existing_env_file_is_left_untouched(tmp_path: Path):
    env_file = tmp_path / ".env.production"
    env_file.write_text("OE_PASS=my-own\n")
    ctx = _ctx(PRODUCTION_PROFILE, tmp_path)

    assert materialize_env_file_if_missing(ctx) is False
    assert env_file.read_text() == "OE_PASS=my-own\n"


def test_second_run_is_byte_identical(tmp_path: Path):
    ctx = _ctx(LOCAL_PROFILE, tmp_path)
    materialize_env_file_if_missing(ctx)
    first = (tmp_path / ".env").read_bytes()

    later = DeployContext(profile=LOCAL_PROFILE, deploy_dir=tmp_path, project_root=tmp_path.parent, year=2099)
    assert materialize_env_file_if_missing(later) is False
    assert (tmp_path / ".env").read_bytes() == first


def test_local_copies_env_example_when_present(tmp_path: Path):
    (tmp_path / ".env.example").write_text("HTTP_PORT=9999\nOE_PASS=change-me\n")
    ctx = _ctx(LOCAL_PROFILE, tmp_path)

    materialize_env_file_if_missing(ctx)
    assert (tmp_path / ".env").read_text() == "HTTP_PORT=9999\nOE_PASS=change-me\n"


def test_local_writes_defaults_without_example(tmp_path: Path):
    ctx = _ctx(LOCAL_PROFILE, tmp_path)

    materialize_env_file_if_missing(ctx)
    text = (tmp_path / ".env").read_text()
    assert "HTTP_PORT=8080\n" in text
    assert "OE_PASS=admin_password\n" in text
