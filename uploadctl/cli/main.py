"""Main CLI entry point for uploadctl."""

from __future__ import annotations

import click

from uploadctl import __version__
from uploadctl.cli.common import Context, global_options, handle_errors
from uploadctl.cli.config_cmd import config
from uploadctl.cli.folder import folder
from uploadctl.cli.upload import upload
from uploadctl.core.output import OutputFormat, print_output, print_success


# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="uploadctl")
def cli() -> None:
    """uploadctl - Hierarchical concurrent uploads to a storage server.

    Uploads files and whole directory trees, creating remote folders first
    and sending files on a bounded pool of parallel transfers.

    Get started:

      uploadctl config init          # Create config file

      export UPLOADCTL_TOKEN=...     # Bearer token

      uploadctl upload ./photos      # Upload a directory

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Command Groups
# =============================================================================

cli.add_command(config)
cli.add_command(folder)
cli.add_command(upload)


# =============================================================================
# Top-Level Commands
# =============================================================================


@cli.group()
def health() -> None:
    """Server health and connectivity checks."""
    pass


@health.command("ping")
@global_options
@handle_errors
def health_ping(ctx: Context) -> None:
    """Check server connectivity and token validity."""
    client = ctx.get_client()
    result = client.ping()
    result["authenticated"] = client.token is not None

    if ctx.output_format == OutputFormat.JSON:
        print_output(result, format=OutputFormat.JSON)
        return

    print_success(f"Server reachable: {result['url']}")
    print_output(
        {
            "status": result["status"],
            "home_folder": result["home_folder"],
            "latency": f"{result['latency_ms']}ms",
            "authenticated": result["authenticated"],
        },
        format=OutputFormat.TABLE,
    )


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
