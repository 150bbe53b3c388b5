import logging
import os

import click

from hostprov.cli.containers import containers
from hostprov.cli.raid import raid
from hostprov.cli.samba import samba
from hostprov.cli.storage import storage
from hostprov.cli.utils import echo_report, echo_step, get_host, get_state_directory, handle_errors, require_root
from hostprov.config.settings import config


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log every command that is run.")
@click.option("--state-dir", envvar="HOSTPROV_STATE_DIRECTORY", default=config.state_directory,
              show_default=True, help="Where resume markers and locks are kept.")
@click.pass_context
def main(ctx, verbose, state_dir):
    """Host provisioning: RAID1 mirrors, Samba shares and quadlet services."""
    obj = ctx.ensure_object(dict)
    obj.setdefault("state_directory", state_dir)
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


main.add_command(raid)
main.add_command(samba)
main.add_command(containers)
main.add_command(storage)


@main.command()
@click.option("--config", "config_path", help="Path to the configuration file.")
@click.option("--resume", is_flag=True, help="Skip steps completed by an interrupted previous run.")
@click.pass_context
def apply(ctx, config_path, resume):
    """Apply a YAML configuration without prompting."""
    from hostprov.config.loader import find_config, load_config
    from hostprov.containers.presets import get_deployment
    from hostprov.procedures import container_steps, prepare_raid, raid_steps, run_procedure, samba_steps
    from hostprov.storage.models import RaidRequest

    path = find_config(config_path)
    if not path:
        raise click.FileError("hostprov.yaml", hint="Configuration file not found.")
    if not os.path.exists(path):
        raise click.FileError(path, hint="Configuration file not found.")

    host = get_host(ctx)
    with handle_errors():
        full_config = load_config(path)
        require_root(host)
        state_directory = full_config.state_directory or get_state_directory(ctx)
        install = full_config.install_packages

        procedures = []
        raid_request = None
        if full_config.raid:
            section = full_config.raid
            request = RaidRequest.model_validate(section.model_dump(exclude={"confirm", "root_override"}))
            raid_request = prepare_raid(host, request, section.confirm, section.root_override)

        if full_config.samba:
            procedures.append(("samba", samba_steps(host, full_config.samba, raid=raid_request, install_packages=install)))
        elif raid_request:
            procedures.append(("raid1", raid_steps(host, raid_request, install_packages=install)))

        for section in full_config.containers:
            deployment = get_deployment(
                section.name, base_dir=section.base_dir, image=section.image, write_policy=section.write_policy,
            )
            procedures.append((f"quadlet-{section.name}", container_steps(host, deployment, install_packages=install)))

        if not procedures:
            click.echo("Nothing to apply.")
            return

        for name, steps in procedures:
            click.echo(f"--- {name} ---")
            report = run_procedure(name, steps, resume=resume, state_directory=state_directory, echo=echo_step)
            echo_report(report)


@main.command()
def version():
    """Show the hostprov version."""
    from hostprov.version import get_version
    click.echo(get_version())
