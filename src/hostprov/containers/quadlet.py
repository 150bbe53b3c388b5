import logging
import os
from typing import List, Optional

from hostprov.config.settings import config
from hostprov.containers.models import QuadletUnit, ServiceDeployment, UnitWritePolicy
from hostprov.host.context import HostContext
from hostprov.procedure.models import Step
from hostprov.security import selinux
from hostprov.security.firewall import FirewallManager
from hostprov.systemd.manager import SystemdManager

logger = logging.getLogger(__name__)


def render_quadlet(unit: QuadletUnit) -> str:
    """Render a Podman quadlet `.container` file."""
    lines = [
        "[Unit]",
        f"Description={unit.description}",
    ]
    lines += [f"After={target}" for target in unit.after]
    lines += [f"Wants={target}" for target in unit.wants]

    lines += [
        "",
        "[Container]",
        f"ContainerName={unit.name}",
        f"Image={unit.image}",
    ]
    if unit.network:
        lines.append(f"Network={unit.network}")
    if unit.environment_file:
        lines.append(f"EnvironmentFile={unit.environment_file}")
    lines += [f"PublishPort={port.render()}" for port in unit.ports]
    lines += [f"Volume={volume.render()}" for volume in unit.volumes]
    lines += [f"Mount={mount.render()}" for mount in unit.tmpfs]
    if unit.shm_size:
        lines.append(f"ShmSize={unit.shm_size}")
    if unit.auto_update:
        lines.append(f"AutoUpdate={unit.auto_update}")

    lines += [
        "",
        "[Service]",
        f"Restart={unit.restart}",
        f"TimeoutStartSec={unit.timeout_start_sec}",
        "",
        "[Install]",
        f"WantedBy={unit.wanted_by}",
    ]
    return "\n".join(lines) + "\n"


class QuadletManager:
    def __init__(self, ctx: HostContext, quadlet_dir: Optional[str] = None):
        self.ctx = ctx
        self.quadlet_dir = quadlet_dir or config.quadlet_directory

    def unit_path(self, unit: QuadletUnit) -> str:
        return os.path.join(self.quadlet_dir, unit.file_name)

    def write_unit(self, unit: QuadletUnit, policy: UnitWritePolicy) -> bool:
        """Returns False when an existing unit was kept because of the policy."""
        path = self.unit_path(unit)
        if self.ctx.exists(path) and policy == UnitWritePolicy.PRESERVE:
            logger.info(f"Quadlet already exists: {path} (leaving it unchanged)")
            return False

        self.ctx.makedirs(self.quadlet_dir)
        self.ctx.write_text(path, render_quadlet(unit), mode=0o644)
        return True


class ContainerProvisioner:
    """Deploys one quadlet-managed container service."""

    def __init__(self, ctx: HostContext, deployment: ServiceDeployment, quadlets: Optional[QuadletManager] = None):
        self.ctx = ctx
        self.deployment = deployment
        self.quadlets = quadlets or QuadletManager(ctx)
        self.systemd = SystemdManager(ctx)

    def steps(self) -> List[Step]:
        name = self.deployment.unit.name
        steps = [Step("quadlet.directories", self.ensure_directories, description=f"Creating {name} directories")]
        if self.deployment.config_files:
            steps.append(Step("quadlet.config_files", self.write_config_files, description=f"Writing {name} configuration"))
        if self.deployment.env_file:
            steps.append(Step("quadlet.env_file", self.ensure_env_file, description=f"Ensuring {name} environment file"))
        steps.append(Step("quadlet.pull", self.pull_image, description=f"Pulling {self.deployment.unit.image}"))
        steps.append(Step("quadlet.unit", self.write_unit, description=f"Writing quadlet {self.deployment.unit.file_name}"))
        if self.deployment.selinux_root:
            steps.append(Step("quadlet.selinux", self.label, description="Applying SELinux labels"))
        if self.deployment.firewall_ports:
            steps.append(Step("quadlet.firewall", self.open_firewall, description="Opening firewall ports"))
        steps.append(Step("quadlet.reload", self.systemd.daemon_reload, description="Reloading systemd"))
        if self.deployment.start:
            steps.append(Step("quadlet.start", self.start, description=f"Starting {self.deployment.unit.service_name}"))
        return steps

    def ensure_directories(self):
        for directory in self.deployment.directories:
            self.ctx.makedirs(directory.path, mode=int(directory.mode, 8))
            if directory.owner:
                owner, _, group = directory.owner.partition(":")
                self.ctx.chown(directory.path, owner, group or None)

    def write_config_files(self):
        written = []
        for config_file in self.deployment.config_files:
            if self.ctx.exists(config_file.path) and not config_file.overwrite:
                continue
            self.ctx.makedirs(os.path.dirname(config_file.path))
            self.ctx.write_text(config_file.path, config_file.content, mode=int(config_file.mode, 8))
            written.append(config_file.path)
        if written:
            return f"Wrote {', '.join(written)}"
        return ""

    def ensure_env_file(self):
        env_file = self.deployment.env_file
        if self.ctx.exists(env_file.path):
            return f"Env file exists: {env_file.path}"
        self.ctx.makedirs(os.path.dirname(env_file.path))
        self.ctx.write_text(env_file.path, env_file.content, mode=0o600)
        return f"Created example env file at {env_file.path} (edit with real credentials)"

    def pull_image(self):
        self.ctx.run(["podman", "pull", self.deployment.unit.image])

    def write_unit(self):
        path = self.quadlets.unit_path(self.deployment.unit)
        if self.quadlets.write_unit(self.deployment.unit, self.deployment.write_policy):
            return f"Wrote quadlet to {path}"
        return f"Quadlet already exists: {path} (leaving it unchanged)"

    def label(self):
        return selinux.label_path(self.ctx, self.deployment.selinux_root, "container_file_t")

    def open_firewall(self):
        return FirewallManager(self.ctx, zone="public").open(ports=self.deployment.firewall_ports)

    def start(self):
        # Quadlet units are generated, so they are started rather than enabled;
        # [Install] WantedBy handles boot.
        self.systemd.start(self.deployment.unit.service_name)
        return f"Check status with: systemctl status {self.deployment.unit.service_name}"
