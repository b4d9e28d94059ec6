"""Self-signed TLS pair for the nginx proxy of the production-like stack.

Uses openssl (must be installed). The pair lives in `<deploy_dir>/ssl/` as
`server.crt` / `server.key`, valid 365 days for localhost and 127.0.0.1.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from scripts.openemr_deploy.console import print_status, print_success
from scripts.openemr_deploy.prerequisites import PreconditionError
from scripts.openemr_deploy.process_utils import command_succeeds, run_command

CERT_FILE_NAME = "server.crt"
KEY_FILE_NAME = "server.key"
CERT_VALIDITY_DAYS = 365
CERT_SUBJECT = "/C=US/ST=CA/L=Local/O=OpenEMR/CN=localhost"
CERT_SUBJECT_ALT_NAME = "subjectAltName = DNS:localhost,IP:127.0.0.1"


def cert_paths(ssl_dir: Path) -> tuple[Path, Path]:
    return ssl_dir / CERT_FILE_NAME, ssl_dir / KEY_FILE_NAME


def cert_pair_present(ssl_dir: Path) -> bool:
    cert_path, key_path = cert_paths(ssl_dir)
    return cert_path.exists() and key_path.exists()


def build_openssl_req_cmd(*, cert_path: Path, key_path: Path, days: int = CERT_VALIDITY_DAYS) -> list[str]:
    return [
        "openssl", "req", "-x509", "-nodes",
        "-days", str(days),
        "-newkey", "rsa:2048",
        "-keyout", str(key_path),
        "-out", str(cert_path),
        "-subj", CERT_SUBJECT,
        "-addext", CERT_SUBJECT_ALT_NAME,
    ]


def build_openssl_verify_cmd(*, cert_path: Path) -> list[str]:
    return ["openssl", "x509", "-in", str(cert_path), "-text", "-noout"]


def generate_ssl_certs(ssl_dir: Path) -> bool:
    """Generate the pair unless both files already exist. Returns True if generated."""
    if cert_pair_present(ssl_dir):
        print_status("SSL certificates already exist")
        return False

    print_status("Generating self-signed SSL certificates...")
    ssl_dir.mkdir(parents=True, exist_ok=True)
    cert_path, key_path = cert_paths(ssl_dir)

    try:
        run_command(build_openssl_req_cmd(cert_path=cert_path, key_path=key_path), capture_output=True)
    except FileNotFoundError as e:
        raise PreconditionError("openssl not found. Install OpenSSL to generate the SSL certificates.") from e
    except subprocess.CalledProcessError as e:
        raise PreconditionError(f"openssl failed to generate certificates (exit code {e.returncode})") from e

    print_success("SSL certificates generated")
    return True


def certificate_readable(cert_path: Path) -> bool:
    if not cert_path.exists():
        return False
    return command_succeeds(build_openssl_verify_cmd(cert_path=cert_path))
