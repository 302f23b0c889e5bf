#!/usr/bin/env python3
"""
Print a SECRET_KEY line for .env, or write it there with --env-file
"""

import os
import secrets

import click


@click.command()
@click.option("--nbytes", default=32, show_default=True, type=click.IntRange(min=16))
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    help="Set SECRET_KEY in this file instead of printing it",
)
def generate_secrets(nbytes, env_file):
    """Create a random session signing key"""
    line = f"SECRET_KEY={secrets.token_urlsafe(nbytes)}"

    if not env_file:
        click.echo(line)
        return

    lines = []
    if os.path.exists(env_file):
        with open(env_file) as f:
            lines = [
                existing
                for existing in f.read().splitlines()
                if not existing.startswith("SECRET_KEY=")
            ]
    lines.append(line)

    with open(env_file, "w") as f:
        f.write("\n".join(lines) + "\n")
    click.echo(f"SECRET_KEY written to {env_file}; do not commit this file")


if __name__ == "__main__":
    generate_secrets()
