"""Config commands for uploadctl."""

from __future__ import annotations

from typing import Optional

import click

from uploadctl.core.config import CONFIG_FILE, Config
from uploadctl.core.exceptions import UploadCtlError
from uploadctl.core.output import OutputFormat, print_error, print_key_value, print_output, print_success
from uploadctl.core.validation import validate_server_url, validate_workers
from uploadctl.uploaders.constants import DEFAULT_UPLOAD_WORKERS


@click.group()
def config() -> None:
    """Manage uploadctl configuration."""
    pass


@config.command("init")
@click.option("--url", prompt="Storage server URL", help="Storage server URL")
@click.option("--profile", default="default", help="Profile name")
@click.option("--folder", "default_folder", default=None, help="Default target folder ID")
@click.option("--workers", type=int, default=DEFAULT_UPLOAD_WORKERS, help="Parallel transfers")
@click.option("--force", is_flag=True, help="Overwrite existing config")
def config_init(
    url: str,
    profile: str,
    default_folder: Optional[str],
    workers: int,
    force: bool,
) -> None:
    """Create configuration file with a new profile.

    The bearer token is read from UPLOADCTL_TOKEN and never stored.

    Example:
        uploadctl config init --url https://cloud.example.org
    """
    try:
        url = validate_server_url(url)
        workers = validate_workers(workers)
    except UploadCtlError as e:
        print_error(str(e))
        raise SystemExit(1)

    if CONFIG_FILE.exists() and not force:
        cfg = Config.load()
        if cfg.has_profile(profile):
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(1)
    else:
        cfg = Config()

    cfg.add_profile(
        name=profile,
        url=url,
        default_folder=default_folder,
        workers=workers,
    )

    # First profile becomes the default
    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save()

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value({
        "profile": profile,
        "url": url,
        "default_folder": default_folder or "-",
        "workers": workers,
    })


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    try:
        cfg = Config.load()
    except UploadCtlError as e:
        print_error(str(e))
        raise SystemExit(1)

    if not cfg.profiles:
        print_error("No configuration found. Run 'uploadctl config init' first.")
        raise SystemExit(1)

    data = {
        "config_file": str(CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "output_format": cfg.output_format,
        "profiles": list(cfg.profiles.keys()),
    }

    if output == "json":
        data["profile_details"] = {name: p.to_dict() for name, p in cfg.profiles.items()}
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(data, title="Configuration")
    click.echo()
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "url": profile.url,
                "verify_ssl": profile.verify_ssl,
                "timeout": f"{profile.timeout}s",
                "default_folder": profile.default_folder or "-",
                "workers": profile.workers,
                "stall_timeout": f"{profile.stall_timeout:g}s",
                "hard_timeout": (
                    f"{profile.hard_timeout:g}s" if profile.hard_timeout else "derived"
                ),
            },
        )
        click.echo()


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        uploadctl config use-context production
    """
    try:
        cfg = Config.load()
    except UploadCtlError as e:
        print_error(str(e))
        raise SystemExit(1)

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save()

    print_success(f"Switched to profile '{profile}'")


@config.command("add-profile")
@click.argument("name")
@click.option("--url", required=True, help="Storage server URL")
@click.option("--folder", "default_folder", default=None, help="Default target folder ID")
@click.option("--timeout", type=int, default=30, help="Request timeout in seconds")
@click.option("--workers", type=int, default=DEFAULT_UPLOAD_WORKERS, help="Parallel transfers")
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
def config_add_profile(
    name: str,
    url: str,
    default_folder: Optional[str],
    timeout: int,
    workers: int,
    no_verify_ssl: bool,
) -> None:
    """Add a new profile.

    Example:
        uploadctl config add-profile dev --url https://cloud-dev.example.org
    """
    try:
        url = validate_server_url(url)
        workers = validate_workers(workers)
    except UploadCtlError as e:
        print_error(str(e))
        raise SystemExit(1)

    cfg = Config.load()

    if cfg.has_profile(name):
        print_error(f"Profile '{name}' already exists.")
        raise SystemExit(1)

    cfg.add_profile(
        name=name,
        url=url,
        default_folder=default_folder,
        timeout=timeout,
        workers=workers,
        verify_ssl=not no_verify_ssl,
    )
    cfg.save()

    print_success(f"Profile '{name}' added")


@config.command("remove-profile")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
def config_remove_profile(name: str, yes: bool) -> None:
    """Remove a profile.

    Example:
        uploadctl config remove-profile dev
    """
    cfg = Config.load()

    if not cfg.has_profile(name):
        print_error(f"Profile '{name}' not found.")
        raise SystemExit(1)

    if name == cfg.default_profile:
        print_error("Cannot remove the default profile. Switch to another profile first.")
        raise SystemExit(1)

    if not yes:
        click.confirm(f"Remove profile '{name}'?", abort=True)

    cfg.remove_profile(name)
    cfg.save()

    print_success(f"Profile '{name}' removed")
