"""Interactive parameter acquisition. Procedures never call into this module."""
from typing import List, Optional

import click
from pydantic import ValidationError as ModelValidationError

from hostprov.errors import HostprovError, ValidationError
from hostprov.host.context import HostContext
from hostprov.shares.models import ShareUser
from hostprov.storage.devices import get_system_disks
from hostprov.validation import CREATE_CONFIRMATION_TOKEN, ROOT_OVERRIDE_TOKEN, confirm_secret


def show_disks(host: HostContext):
    try:
        disks = get_system_disks(host)
    except (HostprovError, ValueError) as e:
        click.echo(f"Could not list disks: {e}", err=True)
        return
    for disk in disks:
        flags = []
        if disk.is_system:
            flags.append("system")
        if disk.available:
            flags.append("empty")
        click.echo(f"  {disk.path}\t{disk.size}\t{disk.model or ''}\t{' '.join(flags)}")


def prompt_devices(host: HostContext) -> List[str]:
    click.echo("Detecting block devices:")
    roots = host.root_devices()
    click.echo(f"Detected root devices (do NOT select unless intended): {' '.join(roots) or 'UNKNOWN'}")
    show_disks(host)
    click.echo()
    value = click.prompt("Enter the devices to use for RAID (space-separated). Example: /dev/sdb /dev/sdc")
    return value.split()


def prompt_root_override(device: str, root: str) -> str:
    click.echo(f"WARNING: {device} backs the root filesystem ({root}). This will destroy the running system.", err=True)
    return click.prompt(
        f"Type EXACTLY '{ROOT_OVERRIDE_TOKEN}' to continue or anything else to abort",
        default="", show_default=False,
    )


def prompt_create_confirmation(array_name: str, devices: List[str]) -> str:
    click.echo(f"Creating RAID1 device {array_name} with devices: {' '.join(devices)}")
    return click.prompt(
        f"Final confirmation: Type {CREATE_CONFIRMATION_TOKEN} to create RAID (this will destroy data on the devices)",
        default="", show_default=False,
    )


def prompt_wipe(devices: List[str]) -> bool:
    return click.confirm(f"Zero existing md superblocks on selected devices ({' '.join(devices)})?", default=False)


def prompt_password(username: str) -> str:
    """Ask twice; a mismatch asks again for the same user."""
    while True:
        first = click.prompt(f"New SMB password for {username}", hide_input=True)
        second = click.prompt(f"Retype SMB password for {username}", hide_input=True)
        try:
            return confirm_secret(first, second, field=f"Password for {username}")
        except ValidationError as e:
            click.echo(f"{e} Try again.", err=True)


def prompt_users(password_for=None) -> List[ShareUser]:
    """Ask for usernames until a blank line."""
    click.echo("A directory <share root>/<username> will be created for each Samba user.")
    click.echo("Leave username blank to finish.")
    users = []
    while True:
        username = click.prompt("Enter username (or press Enter to finish)", default="", show_default=False).strip()
        if not username:
            break
        try:
            user = ShareUser(username=username)
        except ModelValidationError as e:
            click.echo("; ".join(err["msg"] for err in e.errors()), err=True)
            continue
        password = password_for(user.username) if password_for else None
        if password is None:
            password = prompt_password(user.username)
        users.append(ShareUser(username=user.username, password=password))
    return users


def prompt_value(label: str, default: Optional[str]) -> str:
    return click.prompt(label, default=default)
