import logging
from typing import Callable, List, Optional

from hostprov.config.settings import config
from hostprov.containers.models import ServiceDeployment
from hostprov.containers.quadlet import ContainerProvisioner
from hostprov.host.context import HostContext
from hostprov.pkgs.manager import install_step
from hostprov.procedure.models import ProcedureReport, Step
from hostprov.procedure.runner import ProcedureRunner
from hostprov.procedure.state import StateStore
from hostprov.shares.models import SambaRequest
from hostprov.shares.presets import get_preset
from hostprov.shares.provision import SambaProvisioner
from hostprov.storage.models import RaidRequest
from hostprov.storage.raid import RaidProvisioner
from hostprov.validation import CREATE_CONFIRMATION_TOKEN, require_confirmation, validate_devices

logger = logging.getLogger(__name__)


def prepare_raid(ctx: HostContext, request: RaidRequest, confirm: Optional[str], root_override: Optional[str] = None) -> RaidRequest:
    """Validate devices and the destructive-action token; no host mutation."""
    devices = validate_devices(ctx, request.devices, minimum=2, root_override=root_override)
    require_confirmation(confirm, CREATE_CONFIRMATION_TOKEN, "RAID creation")
    return request.model_copy(update={"devices": devices})


def raid_steps(ctx: HostContext, request: RaidRequest, install_packages: bool = True) -> List[Step]:
    steps = [install_step(ctx, "raid")] if install_packages else []
    return steps + RaidProvisioner(ctx, request).steps()


def samba_steps(
    ctx: HostContext,
    request: SambaRequest,
    raid: Optional[RaidRequest] = None,
    install_packages: bool = True,
) -> List[Step]:
    """Samba shares, optionally on a freshly assembled RAID1 mounted at the share root."""
    steps = []
    if install_packages:
        steps.append(install_step(ctx, *(["raid", "samba"] if raid else ["samba"])))
    if raid:
        preset = get_preset(request.preset)
        raid = raid.model_copy(update={
            "mount_point": request.share_root,
            "fstab_options": preset.fstab_options,
        })
        steps += RaidProvisioner(ctx, raid).steps()
    return steps + SambaProvisioner(ctx, request).steps()


def container_steps(ctx: HostContext, deployment: ServiceDeployment, install_packages: bool = True) -> List[Step]:
    steps = [install_step(ctx, "containers")] if install_packages else []
    return steps + ContainerProvisioner(ctx, deployment).steps()


def run_procedure(
    name: str,
    steps: List[Step],
    resume: bool = False,
    state_directory: Optional[str] = None,
    echo: Optional[Callable[..., None]] = None,
) -> ProcedureReport:
    store = StateStore(state_directory or config.state_directory)
    kwargs = {"echo": echo} if echo else {}
    runner = ProcedureRunner(name, steps, state_store=store, **kwargs)
    report = runner.run(resume=resume)
    for warning in report.warnings:
        logger.warning(f"{name}: {warning.name} finished with a warning: {warning.message}")
    return report
