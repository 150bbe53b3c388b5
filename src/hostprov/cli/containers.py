import click

from hostprov.cli.raid import common_options
from hostprov.cli.utils import echo_report, echo_step, get_host, get_state_directory, handle_errors, require_root
from hostprov.containers.models import UnitWritePolicy
from hostprov.containers.presets import DEPLOYMENTS, get_deployment
from hostprov.containers.quadlet import render_quadlet
from hostprov.procedures import container_steps, run_procedure


@click.group()
def containers():
    """Deploy containerized services as Podman quadlets."""
    pass


@containers.command(name="deploy")
@click.argument("name", type=click.Choice(sorted(DEPLOYMENTS)))
@click.option("--policy", type=click.Choice([p.value for p in UnitWritePolicy]),
              help="Overwrite or preserve an existing unit file (default depends on the service).")
@click.option("--base-dir", help="Host directory for the service's data.")
@click.option("--image", help="Override the container image.")
@click.option("--no-start", is_flag=True, help="Install the unit without starting it.")
@common_options
@click.pass_context
def deploy(ctx, name, policy, base_dir, image, no_start, skip_packages, resume, non_interactive):
    """Install and start a quadlet-managed service."""
    host = get_host(ctx)

    with handle_errors():
        require_root(host)
        deployment = get_deployment(
            name,
            base_dir=base_dir,
            image=image,
            write_policy=UnitWritePolicy(policy) if policy else None,
        )
        if no_start:
            deployment = deployment.model_copy(update={"start": False})
        steps = container_steps(host, deployment, install_packages=not skip_packages)
        report = run_procedure(f"quadlet-{name}", steps, resume=resume,
                               state_directory=get_state_directory(ctx), echo=echo_step)

    echo_report(report)


@containers.command(name="render")
@click.argument("name", type=click.Choice(sorted(DEPLOYMENTS)))
@click.option("--base-dir", help="Host directory for the service's data.")
@click.option("--image", help="Override the container image.")
def render(name, base_dir, image):
    """Print the quadlet unit file for a service."""
    with handle_errors():
        deployment = get_deployment(name, base_dir=base_dir, image=image)
    click.echo(render_quadlet(deployment.unit), nl=False)


@containers.command(name="presets")
def list_presets():
    """List deployable services."""
    for name in sorted(DEPLOYMENTS):
        deployment = get_deployment(name)
        click.echo(f"{name}: {deployment.unit.description} ({deployment.unit.image}, "
                   f"unit policy: {deployment.write_policy.value})")
