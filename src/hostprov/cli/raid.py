import click

from hostprov.cli import prompts
from hostprov.cli.utils import echo_report, echo_step, get_host, get_state_directory, handle_errors, require_root
from hostprov.config.settings import config
from hostprov.errors import RootDeviceSelected
from hostprov.procedures import prepare_raid, raid_steps, run_procedure
from hostprov.storage.models import RaidRequest
from hostprov.validation import CREATE_CONFIRMATION_TOKEN, validate_devices


def raid_options(func):
    """Options shared by every command that can assemble a RAID1 array."""
    options = [
        click.option("--array-name", envvar="HOSTPROV_RAID_ARRAY_NAME", default=config.raid_array_name,
                     show_default=True, help="md device to create."),
        click.option("--filesystem", envvar="HOSTPROV_FILESYSTEM_TYPE", default=config.filesystem_type,
                     show_default=True, help="Filesystem created on the array."),
        click.option("--wipe-superblocks/--keep-superblocks", default=None, envvar="HOSTPROV_WIPE_SUPERBLOCKS",
                     help="Zero old md superblocks on the devices before creating the array."),
        click.option("--yes", "confirmed", is_flag=True, envvar="HOSTPROV_CONFIRM",
                     help="Confirm array creation (destroys data on the devices)."),
        click.option("--allow-root-device", "root_override", envvar="HOSTPROV_ROOT_OVERRIDE", metavar="TOKEN",
                     help="Type I_UNDERSTAND to allow selecting the device holding '/'."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def common_options(func):
    options = [
        click.option("--no-install-packages", "skip_packages", is_flag=True, help="Do not install missing packages."),
        click.option("--resume", is_flag=True, help="Skip steps completed by an interrupted previous run."),
        click.option("--non-interactive", is_flag=True, envvar="HOSTPROV_NON_INTERACTIVE",
                     help="Never prompt; fail when a required value is missing."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def resolve_raid_request(host, devices, mount_point, array_name, filesystem, wipe_superblocks,
                         confirmed, root_override, interactive, fstab_options="defaults", owner=None, mode=None):
    """Collect everything the RAID procedure needs, prompting only when allowed."""
    devices = list(devices)
    if not devices:
        if not interactive:
            raise click.UsageError("At least two --device options are required.")
        devices = prompts.prompt_devices(host)

    try:
        validate_devices(host, devices, root_override=root_override)
    except RootDeviceSelected as e:
        if not interactive:
            raise
        root_override = prompts.prompt_root_override(e.device, e.root_device)

    if wipe_superblocks is None:
        wipe_superblocks = prompts.prompt_wipe(devices) if interactive else False

    confirm = CREATE_CONFIRMATION_TOKEN if confirmed else None
    if confirm is None and interactive:
        confirm = prompts.prompt_create_confirmation(array_name, devices)

    request = RaidRequest(
        devices=devices,
        array_name=array_name,
        filesystem=filesystem,
        mount_point=mount_point,
        fstab_options=fstab_options,
        wipe_superblocks=wipe_superblocks,
        owner=owner,
        mode=mode,
    )
    return prepare_raid(host, request, confirm, root_override)


@click.group()
def raid():
    """Assemble and mount RAID1 mirrors."""
    pass


@raid.command(name="create")
@click.option("--device", "-d", "devices", multiple=True, envvar="HOSTPROV_RAID_DEVICES",
              help="Member device (repeat for each disk).")
@click.option("--mount-point", envvar="HOSTPROV_MOUNT_POINT", help="Where the array is mounted.")
@click.option("--fstab-options", default="defaults", show_default=True, help="Mount options written to /etc/fstab.")
@click.option("--owner", envvar="HOSTPROV_MOUNT_OWNER", help="Owner (user[:group]) of the mount point.")
@click.option("--mode", envvar="HOSTPROV_MOUNT_MODE", help="Octal permissions of the mount point.")
@raid_options
@common_options
@click.pass_context
def create(ctx, devices, mount_point, fstab_options, owner, mode, array_name, filesystem, wipe_superblocks,
           confirmed, root_override, skip_packages, resume, non_interactive):
    """Create a RAID1 array, persist it, format it and mount it."""
    host = get_host(ctx)
    interactive = not non_interactive

    with handle_errors():
        require_root(host)
        if not mount_point:
            mount_point = prompts.prompt_value("Mount point", config.mount_point) if interactive else config.mount_point
        if interactive and owner is None:
            owner = prompts.prompt_value("Owner", "nobody:nogroup")
        if interactive and mode is None:
            mode = prompts.prompt_value("Permissions", "0775")

        request = resolve_raid_request(
            host, devices, mount_point, array_name, filesystem, wipe_superblocks,
            confirmed, root_override, interactive, fstab_options=fstab_options, owner=owner, mode=mode,
        )
        steps = raid_steps(host, request, install_packages=not skip_packages)
        report = run_procedure("raid1", steps, resume=resume, state_directory=get_state_directory(ctx), echo=echo_step)

    echo_report(report)
