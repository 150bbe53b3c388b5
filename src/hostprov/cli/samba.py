import os

import click

from hostprov.cli import prompts
from hostprov.cli.raid import common_options, raid_options, resolve_raid_request
from hostprov.cli.utils import echo_report, echo_step, get_host, get_state_directory, handle_errors, require_root
from hostprov.config.settings import config
from hostprov.procedures import run_procedure, samba_steps
from hostprov.shares.models import SambaRequest, ShareUser
from hostprov.shares.presets import PRESETS, get_preset


def password_from_env(username: str):
    """HOSTPROV_SMB_PASSWORD_<USERNAME>, upper-cased with '-' as '_'."""
    key = "HOSTPROV_SMB_PASSWORD_" + username.upper().replace("-", "_")
    return os.environ.get(key)


@click.group()
def samba():
    """Manage Samba per-user shares."""
    pass


@samba.command(name="provision")
@click.option("--share-root", envvar="HOSTPROV_SHARE_ROOT", default=config.share_root, show_default=True,
              help="Directory holding one share per user.")
@click.option("--user", "-u", "usernames", multiple=True, envvar="HOSTPROV_SMB_USERS",
              help="User to provision (repeatable). Prompts for users when omitted.")
@click.option("--preset", type=click.Choice(sorted(PRESETS)), default="isolated", envvar="HOSTPROV_SMB_PRESET",
              show_default=True, help="Share defaults preset.")
@click.option("--workgroup", envvar="HOSTPROV_WORKGROUP", default=config.workgroup, show_default=True)
@click.option("--server-string", envvar="HOSTPROV_SERVER_STRING", default=config.server_string, show_default=True)
@click.option("--raid-device", "raid_devices", multiple=True, envvar="HOSTPROV_SMB_RAID_DEVICES",
              help="Build a RAID1 array from these devices and mount it at the share root first.")
@click.option("--no-services", is_flag=True, help="Do not enable smb/nmb.")
@click.option("--no-firewall", is_flag=True, help="Do not open the samba firewall service.")
@click.option("--no-selinux", is_flag=True, help="Do not apply SELinux labels and booleans.")
@raid_options
@common_options
@click.pass_context
def provision(ctx, share_root, usernames, preset, workgroup, server_string, raid_devices, no_services, no_firewall,
              no_selinux, array_name, filesystem, wipe_superblocks, confirmed, root_override, skip_packages, resume,
              non_interactive):
    """Provision isolated per-user Samba shares."""
    host = get_host(ctx)
    interactive = not non_interactive

    with handle_errors():
        require_root(host)

        raid_request = None
        if raid_devices:
            raid_request = resolve_raid_request(
                host, raid_devices, share_root, array_name, filesystem, wipe_superblocks,
                confirmed, root_override, interactive, fstab_options=get_preset(preset).fstab_options,
            )

        users = []
        for username in usernames:
            password = password_from_env(username)
            if password is None and interactive:
                password = prompts.prompt_password(username)
            users.append(ShareUser(username=username, password=password))
        if not users and interactive:
            users = prompts.prompt_users(password_for=password_from_env)

        request = SambaRequest(
            share_root=share_root,
            users=users,
            preset=preset,
            workgroup=workgroup,
            server_string=server_string,
            enable_services=not no_services,
            configure_firewall=not no_firewall,
            configure_selinux=not no_selinux,
        )
        steps = samba_steps(host, request, raid=raid_request, install_packages=not skip_packages)
        report = run_procedure("samba", steps, resume=resume, state_directory=get_state_directory(ctx), echo=echo_step)

    echo_report(report)


@samba.command(name="list")
@click.pass_context
def list_shares(ctx):
    """List Samba shares."""
    from hostprov.shares.smb import SMBManager

    manager = SMBManager(get_host(ctx))
    shares = manager.list_shares()
    if not shares:
        click.echo("No shares found.")
        return

    for share in shares:
        click.echo(f"Name: {share.name}")
        click.echo(f"  Path: {share.path}")
        click.echo(f"  Valid users: {share.valid_users or '-'}")
        click.echo(f"  Read Only: {share.read_only}")
        click.echo(f"  Browsable: {share.browsable}")
        click.echo("-" * 20)


@samba.command(name="presets")
def list_presets():
    """Show the available share presets."""
    for preset in PRESETS.values():
        click.echo(f"{preset.name}: {preset.description}")
        click.echo(f"  browsable={'yes' if preset.browsable else 'no'} create mask={preset.create_mask} "
                   f"directory mask={preset.directory_mask} smb.conf={preset.base_config.value}")
