import logging
import os
import re
from typing import List, Optional

from hostprov.errors import StepFailed
from hostprov.host.context import HostContext

logger = logging.getLogger(__name__)

ACTIVE_DEVICES_RE = re.compile(r"^\s*Active Devices\s*:\s*(.*?)\s*$", re.MULTILINE)


def parse_active_devices(detail: Optional[str]) -> Optional[int]:
    """
    Extract the "Active Devices" count from `mdadm --detail` output.

    Returns None when the line is missing or its value is not a plain integer.
    """
    if not detail:
        return None
    match = ACTIVE_DEVICES_RE.search(detail)
    if not match:
        return None
    value = match.group(1).strip()
    if not value.isdigit():
        return None
    return int(value)


def detail(ctx: HostContext, array_name: str) -> str:
    res = ctx.run(["mdadm", "--detail", array_name], check=False)
    return res.stdout if res.ok else ""


def stop_array(ctx: HostContext, array_name: str):
    """Best effort: the array may not be assembled at all."""
    if not ctx.exists(array_name):
        return
    ctx.run(["mdadm", "--stop", array_name], check=False)
    ctx.run(["mdadm", "--remove", array_name], check=False)


def zero_superblocks(ctx: HostContext, devices: List[str]):
    for device in devices:
        logger.info(f"Zeroing md superblock on {device}")
        ctx.run(["mdadm", "--zero-superblock", device], check=False)
        ctx.run(["dd", "if=/dev/zero", f"of={device}", "bs=512", "count=2048", "conv=fsync"], check=False)


def create_mirror(ctx: HostContext, array_name: str, devices: List[str], metadata: str = "1.2"):
    ctx.run([
        "mdadm", "--create", array_name,
        "--level=1",
        f"--raid-devices={len(devices)}",
        *devices,
        f"--metadata={metadata}",
        "--force",
        "--run",
    ])


def wait_for_sync(ctx: HostContext, array_name: str, expected: int, interval: float = 1, attempts: int = 60) -> bool:
    """
    Poll until the array reports `expected` active devices.

    Returns False after `attempts` polls without reaching the target; an
    unreadable count is treated as "not ready yet".
    """
    for attempt in range(attempts):
        active = parse_active_devices(detail(ctx, array_name))
        logger.debug(f"{array_name}: active devices {active}/{expected} (poll {attempt + 1}/{attempts})")
        if active is not None and active == expected:
            return True
        if attempt < attempts - 1:
            ctx.sleep(interval)
    return False


def scan_config(ctx: HostContext) -> str:
    res = ctx.run(["mdadm", "--detail", "--scan"])
    if not res.stdout.strip():
        raise StepFailed("mdadm --detail --scan returned no arrays.")
    return res.stdout


def choose_config_path(ctx: HostContext, candidates: List[str]) -> Optional[str]:
    """
    The config file mdadm already reads on this distribution, i.e. the first
    candidate that exists as a file; otherwise the first candidate whose
    directory exists.
    """
    for candidate in candidates:
        if ctx.exists(candidate) and not ctx.is_dir(candidate):
            return candidate
    for candidate in candidates:
        if ctx.is_dir(os.path.dirname(candidate)):
            return candidate
    return None


def regenerate_boot_image(ctx: HostContext) -> Optional[str]:
    """Rebuild the initramfs so the array assembles at boot."""
    if ctx.which("update-initramfs"):
        ctx.run(["update-initramfs", "-u"])
        return "update-initramfs"
    if ctx.which("dracut"):
        ctx.run(["dracut", "-f"])
        return "dracut"
    logger.warning("No initramfs tool found (update-initramfs, dracut); boot image not regenerated")
    return None
