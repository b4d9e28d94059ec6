from __future__ import annotations

import shutil

from scripts.openemr_deploy.console import print_status, print_success, print_warning
from scripts.openemr_deploy.env_schema import materialized_defaults, write_dotenv_values
from scripts.openemr_deploy.profiles import DeployContext


def materialize_env_file_if_missing(ctx: DeployContext) -> bool:
    """Create the settings file once; an existing file is never touched.

    A `.env.example` next to the local compose file is copied as-is. Otherwise
    the profile's default (or year-derived) values are written.
    """
    env_file = ctx.env_file
    if env_file.exists():
        return False

    print_status(f"Creating {ctx.profile.name} environment file...")

    example = ctx.deploy_dir / ".env.example"
    if ctx.profile.name == "local" and example.exists():
        shutil.copyfile(example, env_file)
    else:
        write_dotenv_values(
            path=env_file,
            updates=materialized_defaults(ctx.profile.schema, year=ctx.year),
            create=True,
            header=f"# {ctx.profile.name.capitalize()} environment variables",
        )

    print_success(f"Environment file created at {env_file}")
    print_warning(f"Please review and customize the passwords in {env_file}")
    return True
