import logging
import os
from typing import List, Optional

from hostprov.config.settings import config
from hostprov.errors import StepFailed
from hostprov.host.context import HostContext
from hostprov.procedure.models import Step
from hostprov.storage import fstab, mdadm
from hostprov.storage.models import ArraySummary, RaidRequest

logger = logging.getLogger(__name__)


def format_bytes(size: int) -> str:
    value = float(size)
    for unit in ["B", "K", "M", "G"]:
        if value < 1024:
            return f"{value:.1f}{unit}"
        value /= 1024
    return f"{value:.1f}T"


class RaidProvisioner:
    """
    Turns two or more validated disks into a mounted RAID1 mirror.

    The request is expected to be validated already (see
    hostprov.validation.validate_devices); nothing here prompts.
    """

    def __init__(self, ctx: HostContext, request: RaidRequest, fstab_path: Optional[str] = None,
                 mdadm_conf_candidates: Optional[List[str]] = None):
        self.ctx = ctx
        self.request = request
        self.fstab_path = fstab_path or config.fstab_path
        self.mdadm_conf_candidates = mdadm_conf_candidates or config.mdadm_conf_candidates
        self.summary = ArraySummary(
            array_name=request.array_name,
            devices=list(request.devices),
            filesystem=request.filesystem,
            mount_point=request.mount_point,
        )

    def steps(self) -> List[Step]:
        return [
            Step("raid.teardown", self.teardown, description="Removing stale RAID state"),
            Step("raid.create", self.create, description=f"Creating RAID1 array {self.request.array_name}"),
            Step("raid.sync_wait", self.sync_wait, description="Waiting for array to become active"),
            Step("raid.persist_config", self.persist_config, description="Saving RAID configuration"),
            Step("raid.format", self.format, description=f"Formatting {self.request.array_name} as {self.request.filesystem}"),
            Step("raid.fstab", self.write_fstab, description="Updating /etc/fstab"),
            Step("raid.mount", self.mount, description=f"Mounting {self.request.mount_point}"),
            Step("raid.permissions", self.apply_permissions, description="Applying mount point permissions"),
            Step("raid.report", self.report, description="RAID status"),
        ]

    def teardown(self):
        mdadm.stop_array(self.ctx, self.request.array_name)
        if self.request.wipe_superblocks:
            mdadm.zero_superblocks(self.ctx, self.request.devices)
            return f"Zeroed superblocks on {' '.join(self.request.devices)}"
        return "Skipping zero-superblock step."

    def create(self):
        mdadm.create_mirror(self.ctx, self.request.array_name, self.request.devices, self.request.metadata)
        return f"Created {self.request.array_name} from {' '.join(self.request.devices)}"

    def sync_wait(self):
        expected = len(self.request.devices)
        ready = mdadm.wait_for_sync(
            self.ctx,
            self.request.array_name,
            expected,
            interval=self.request.sync_interval,
            attempts=self.request.sync_attempts,
        )
        if not ready:
            raise StepFailed(
                f"{self.request.array_name} did not report {expected} active devices after "
                f"{self.request.sync_attempts} polls; it may still be syncing or degraded."
            )
        self.summary.active_devices = expected
        return f"{self.request.array_name} is active with {expected} devices."

    def persist_config(self):
        path = mdadm.choose_config_path(self.ctx, self.mdadm_conf_candidates)
        if not path:
            raise StepFailed(f"No usable mdadm config path among: {', '.join(self.mdadm_conf_candidates)}")

        scan = mdadm.scan_config(self.ctx)
        self.ctx.makedirs(os.path.dirname(path))
        self.ctx.write_text(path, scan if scan.endswith("\n") else scan + "\n")
        logger.info(f"Wrote mdadm configuration to {path}")

        # The config must be on disk before the boot image is rebuilt.
        tool = mdadm.regenerate_boot_image(self.ctx)
        if tool:
            return f"Saved array configuration to {path} and regenerated boot image with {tool}"
        return f"Saved array configuration to {path}"

    def format(self):
        fs = self.request.filesystem
        self.ctx.run([f"mkfs.{fs}", "-F", self.request.array_name])

    def write_fstab(self):
        if fstab.has_mountpoint(self.ctx, self.request.mount_point, self.fstab_path):
            raise StepFailed(
                f"{self.fstab_path} already has an entry for {self.request.mount_point}; "
                "remove it or choose another mount point."
            )
        entry = fstab.build_entry(
            self.ctx,
            self.request.array_name,
            self.request.mount_point,
            self.request.filesystem,
            self.request.fstab_options,
        )
        backup_path = fstab.append_entry(self.ctx, entry, self.fstab_path)
        self.summary.fstab_spec = entry.spec
        if backup_path:
            return f"Added {entry.spec} to {self.fstab_path} (backup: {backup_path})"
        return f"Added {entry.spec} to {self.fstab_path}"

    def mount(self):
        self.ctx.makedirs(self.request.mount_point)
        # Mount by mount point so the fstab entry is exercised.
        self.ctx.run(["mount", self.request.mount_point])

    def apply_permissions(self):
        messages = []
        if self.request.owner:
            owner, _, group = self.request.owner.partition(":")
            self.ctx.chown(self.request.mount_point, owner, group or None, recursive=True)
            messages.append(f"owner {self.request.owner}")
        if self.request.mode:
            self.ctx.chmod(self.request.mount_point, int(self.request.mode, 8))
            messages.append(f"mode {self.request.mode}")
        if not messages:
            return ""
        return f"Set {', '.join(messages)} on {self.request.mount_point}"

    def report(self):
        usage = self.ctx.disk_usage(self.request.mount_point)
        lines = [
            f" RAID Array : {self.summary.array_name}",
            f" Devices    : {' '.join(self.summary.devices)}",
            f" Filesystem : {self.summary.filesystem}",
            f" Mount      : {self.summary.mount_point}",
            f" fstab      : {self.summary.fstab_spec or 'n/a'}",
            f" Usage      : {format_bytes(usage.used)} used of {format_bytes(usage.total)} "
            f"({usage.percent:.0f}%), {format_bytes(usage.free)} free",
        ]
        array_detail = mdadm.detail(self.ctx, self.request.array_name)
        if array_detail:
            lines.append("")
            lines.append(array_detail.rstrip())
        return "\n".join(lines)
