import json

import click

from hostprov.cli.utils import get_host, handle_errors


@click.group()
def storage():
    """Inspect block devices."""
    pass


@storage.command(name="disks")
@click.option("--free", "show_free", is_flag=True, help="Show only empty, non-system disks.")
@click.option("--json", "as_json", is_flag=True, help="Print JSON.")
@click.pass_context
def list_disks(ctx, show_free, as_json):
    """Show whole disks and whether they can be used."""
    from hostprov.storage.devices import get_system_disks, get_unused_disks

    with handle_errors():
        host = get_host(ctx)
        disks = get_unused_disks(host) if show_free else get_system_disks(host)

    if as_json:
        click.echo(json.dumps([d.model_dump() for d in disks], indent=4))
        return

    for disk in disks:
        state = "system" if disk.is_system else ("free" if disk.available else "in use")
        click.echo(f"{disk.path} - {disk.size} - {disk.model or 'N/A'} - {state}")
