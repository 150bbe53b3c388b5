import logging
from typing import Optional

from hostprov.host.context import HostContext
from hostprov.storage.models import FstabEntry

logger = logging.getLogger(__name__)


def resolve_uuid(ctx: HostContext, device: str) -> Optional[str]:
    res = ctx.run(["blkid", "-s", "UUID", "-o", "value", device], check=False)
    uuid = res.stdout.strip() if res.ok else ""
    return uuid or None


def build_entry(ctx: HostContext, device: str, mountpoint: str, fstype: str, options: str = "defaults") -> FstabEntry:
    """
    Reference the filesystem by UUID; device names are not stable across
    reboots. The raw device path is used only when blkid reports no UUID.
    """
    uuid = resolve_uuid(ctx, device)
    if uuid:
        spec = f"UUID={uuid}"
    else:
        logger.warning(f"No filesystem UUID for {device}; falling back to device path in fstab")
        spec = device
    return FstabEntry(spec=spec, mountpoint=mountpoint, fstype=fstype, options=options)


def backup(ctx: HostContext, path: str) -> Optional[str]:
    if not ctx.exists(path):
        return None
    backup_path = f"{path}.bak.{int(ctx.time())}"
    ctx.copy_file(path, backup_path)
    logger.info(f"Backed up {path} to {backup_path}")
    return backup_path


def append_entry(ctx: HostContext, entry: FstabEntry, fstab_path: str = "/etc/fstab") -> Optional[str]:
    """Back up the mount table, then append the entry. Returns the backup path."""
    backup_path = backup(ctx, fstab_path)

    prefix = ""
    if ctx.exists(fstab_path):
        current = ctx.read_text(fstab_path)
        if current and not current.endswith("\n"):
            prefix = "\n"
    ctx.append_text(fstab_path, f"{prefix}{entry.render()}\n")
    return backup_path


def has_mountpoint(ctx: HostContext, mountpoint: str, fstab_path: str = "/etc/fstab") -> bool:
    if not ctx.exists(fstab_path):
        return False
    for line in ctx.read_text(fstab_path).splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) >= 2 and parts[1] == mountpoint:
            return True
    return False
