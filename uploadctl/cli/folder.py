"""Folder commands for uploadctl."""

from __future__ import annotations

from typing import Optional

import click

from uploadctl.cli.common import Context, global_options, handle_errors
from uploadctl.core.output import print_output, print_success


@click.group()
def folder() -> None:
    """List and create remote folders."""
    pass


@folder.command("list")
@global_options
@handle_errors
def folder_list(ctx: Context) -> None:
    """List top-level folders (the first one is the home folder)."""
    from uploadctl.services.folders import FolderService

    service = FolderService(ctx.get_client())
    folders = service.list_root()

    if ctx.quiet:
        for f in folders:
            click.echo(f.id)
        return

    print_output(
        [f.to_dict() for f in folders],
        format=ctx.output_format,
        columns=["id", "name", "parent_id"],
        column_labels={"id": "ID", "name": "Name", "parent_id": "Parent"},
        title="Folders",
    )


@folder.command("show")
@click.argument("folder_id")
@global_options
@handle_errors
def folder_show(ctx: Context, folder_id: str) -> None:
    """Show one folder."""
    from uploadctl.services.folders import FolderService

    remote = FolderService(ctx.get_client()).get(folder_id)
    print_output(remote.to_dict(), format=ctx.output_format)


@folder.command("create")
@click.argument("name")
@click.option("--parent", "parent_id", default=None, help="Parent folder ID (default: home)")
@global_options
@handle_errors
def folder_create(ctx: Context, name: str, parent_id: Optional[str]) -> None:
    """Create a folder.

    Example:
        uploadctl folder create reports --parent 42
    """
    from uploadctl.services.folders import FolderService

    service = FolderService(ctx.get_client())
    parent = service.resolve_root(parent_id)
    created = service.create(name, parent)

    if ctx.quiet:
        click.echo(created.id)
    else:
        print_success(f"Created folder '{created.name}' ({created.id})")
