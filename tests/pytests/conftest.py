from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import Callable

import pytest


def pytest_configure() -> None:
    # Allow tests to import `scripts.*` as a package.
    repo_root = Path(__file__).parents[2]
    sys.path.append(str(repo_root))


COMPOSE_CONTENT = """
services:
  openemr:
    image: openemr/openemr:7.0.2
    ports:
      - "${HTTP_PORT:-8080}:80"
  mysql:
    image: mariadb:10.11
    ports:
      - "${MYSQL_PORT:-3307}:3306"
"""


class FakeRunner:
    """Stand-in for subprocess.run that records every argv.

    `responses` maps a joined argv prefix (e.g. "docker info") to a
    (returncode, stdout) pair; anything unmatched succeeds with no output.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.responses: dict[str, tuple[int, str]] = {}
        self.on_call: Callable[[list[str]], None] | None = None

    def __call__(self, args, **kwargs):
        argv = [str(a) for a in args]
        self.calls.append(argv)
        if self.on_call is not None:
            self.on_call(argv)
        joined = " ".join(argv)
        returncode, stdout = 0, ""
        for prefix, response in self.responses.items():
            if joined.startswith(prefix):
                returncode, stdout = response
                break
        return subprocess.CompletedProcess(argv, returncode, stdout=stdout, stderr="")

    def compose_calls(self) -> list[list[str]]:
        return [c for c in self.calls if c[:2] == ["docker", "compose"] and c[2:3] != ["version"]]

    def compose_verbs(self) -> list[str]:
        # Verb follows `-f <file>` and an optional `--env-file <file>`.
        verbs = []
        for call in self.compose_calls():
            rest = call[4:]
            if rest[:1] == ["--env-file"]:
                rest = rest[2:]
            verbs.append(" ".join(rest))
        return verbs


@pytest.fixture(autouse=True)
def plain_output(monkeypatch) -> None:
    monkeypatch.setenv("NO_COLOR", "1")


@pytest.fixture
def fake_run(monkeypatch) -> FakeRunner:
    runner = FakeRunner()
    monkeypatch.setattr(subprocess, "run", runner)
    monkeypatch.delenv("OPENEMR_COMPOSE_COMMAND", raising=False)
    return runner


@pytest.fixture
def no_sleep(monkeypatch) -> list[float]:
    slept: list[float] = []
    monkeypatch.setattr("time.sleep", lambda s: slept.append(s))
    return slept


@pytest.fixture
def free_ports(monkeypatch) -> None:
    monkeypatch.setattr("scripts.openemr_deploy.prerequisites.port_in_use", lambda port, *a, **kw: False)


@pytest.fixture
def deploy_dir(tmp_path: Path) -> Path:
    d = tmp_path / "local-deploy"
    d.mkdir()
    (d / "docker-compose.local.yml").write_text(COMPOSE_CONTENT)
    (d / "docker-compose.production.yml").write_text(COMPOSE_CONTENT)
    return d
