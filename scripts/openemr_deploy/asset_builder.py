from __future__ import annotations

from scripts.openemr_deploy.console import print_status, print_success, print_warning
from scripts.openemr_deploy.prerequisites import PreconditionError
from scripts.openemr_deploy.process_utils import command_available, run_command
from scripts.openemr_deploy.profiles import DeployContext

# Run in this order; any failure aborts the run.
BUILD_STEPS: tuple[tuple[str, list[str]], ...] = (
    ("Installing composer dependencies...", ["composer", "install", "--no-dev", "--optimize-autoloader"]),
    ("Installing npm dependencies...", ["npm", "install"]),
    ("Building assets...", ["npm", "run", "build"]),
    ("Optimizing autoloader...", ["composer", "dump-autoload", "-o"]),
)


def build_assets(ctx: DeployContext) -> bool:
    """Build OpenEMR's PHP and JS assets in the project root.

    Returns False when npm is missing and the build was skipped.
    """
    print_status("Building OpenEMR assets...")
    project_root = ctx.project_root

    if not (project_root / "composer.json").exists():
        raise PreconditionError("composer.json not found. Are you in the OpenEMR project root?")

    if not command_available("npm"):
        print_warning("npm not found. Skipping asset build. You may need to build assets manually.")
        return False

    for message, cmd in BUILD_STEPS:
        print_status(message)
        run_command(cmd, cwd=project_root)

    print_success("Assets built successfully")
    return True
