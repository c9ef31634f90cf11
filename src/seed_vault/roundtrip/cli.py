# Command-line entry point: seed-vault <key_name> <bucket_name>
from __future__ import annotations

from typing import List, Optional

import typer

from seed_vault.common.errors import ConfigurationError, IntegrityError, RemoteCallError
from seed_vault.common.logging import configure_logging
from seed_vault.common.settings import Settings
from seed_vault.roundtrip.handler import run_once


USAGE = "Usage: seed-vault <key_name> <bucket_name>"

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_REMOTE = 3
EXIT_INTEGRITY = 4


app = typer.Typer(
    help="Seal a random seed with a KMS key, store it in a bucket and verify the round trip.",
    add_completion=False,
)


@app.command(context_settings={"ignore_unknown_options": True, "allow_extra_args": True})
def roundtrip(
    args: Optional[List[str]] = typer.Argument(
        None, metavar="KEY_NAME BUCKET_NAME", help="KMS key reference and bucket name", show_default=False
    ),
):
    """Generate a seed, encrypt it, upload the ciphertext, download it and verify both round trips."""
    # No flags exist; a dash-prefixed token is a misuse, never a key or bucket name
    args = list(args or [])
    if len(args) != 2 or any(a.startswith("-") for a in args):
        typer.echo(USAGE, err=True)
        raise typer.Exit(code=EXIT_OK)
    key_name, bucket_name = args

    try:
        settings = Settings.from_env(key_name)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=EXIT_CONFIG)
    configure_logging(settings.log_level, json_output=settings.log_json)

    typer.echo(f"Key name: {key_name}, Bucket name: {bucket_name}")
    try:
        report = run_once(key_name, bucket_name, settings)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=EXIT_CONFIG)
    except IntegrityError as e:
        typer.echo(f"Integrity error: {e}", err=True)
        raise typer.Exit(code=EXIT_INTEGRITY)
    except RemoteCallError as e:
        typer.echo(f"Remote call failed after stage {e.stage}: {e}", err=True)
        raise typer.Exit(code=EXIT_REMOTE)

    typer.echo(
        f"Verified {report.seed_length}-byte seed and {report.ciphertext_length}-byte ciphertext "
        f"at {report.bucket_name}/{report.object_name}"
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
