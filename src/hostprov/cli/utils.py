from contextlib import contextmanager

import click
from pydantic import ValidationError as ModelValidationError

from hostprov.errors import HostprovError, ProcedureAborted, ValidationError
from hostprov.host.context import HostContext, SystemHostContext


def get_host(ctx: click.Context) -> HostContext:
    obj = ctx.ensure_object(dict)
    if "host" not in obj:
        obj["host"] = SystemHostContext()
    return obj["host"]


def require_root(host: HostContext):
    if not host.is_root():
        raise click.ClickException("This command must be run as root (use sudo).")


def echo_step(message: str, error: bool = False):
    click.echo(message, err=error)


def echo_report(report):
    warnings = report.warnings
    if warnings:
        click.echo(f"Completed with {len(warnings)} warning(s):", err=True)
        for result in warnings:
            click.echo(f"  - {result.name}: {result.message}", err=True)
    else:
        click.echo("Done.")


@contextmanager
def handle_errors():
    """Turn hostprov errors into a non-zero exit with a message on stderr."""
    try:
        yield
    except ModelValidationError as e:
        errors = "; ".join(err["msg"] for err in e.errors())
        raise click.ClickException(f"Invalid parameters: {errors}")
    except ValidationError as e:
        raise click.ClickException(str(e))
    except ProcedureAborted as e:
        raise click.ClickException(f"{e}. Fix the problem and re-run with --resume to skip completed steps.")
    except HostprovError as e:
        raise click.ClickException(str(e))


def get_state_directory(ctx: click.Context):
    return ctx.ensure_object(dict).get("state_directory")
