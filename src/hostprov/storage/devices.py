import json
from typing import List

from hostprov.host.context import HostContext
from hostprov.storage.models import Disk, Partition

SYSTEM_MOUNTPOINTS = ["/", "/boot", "/boot/efi", "/etc", "/var", "/usr"]


def get_raw_disks(ctx: HostContext) -> List[dict]:
    """Return lsblk's block device tree."""
    # -J: JSON output
    # -b: Bytes
    cmd = ["lsblk", "-J", "-b", "-o", "NAME,PATH,SIZE,MODEL,SERIAL,ROTA,TYPE,FSTYPE,UUID,MOUNTPOINT"]
    output = ctx.run(cmd).stdout
    return json.loads(output).get("blockdevices", [])


def get_system_disks(ctx: HostContext) -> List[Disk]:
    """
    Retrieves whole disks and parses them into Disk models.
    Determines availability based on partitions and mount points.
    """
    disks = []

    for device in get_raw_disks(ctx):
        # Skip loop devices, ram disks and anything that is not a whole disk
        if device.get("name", "").startswith(("loop", "ram")):
            continue
        if device.get("type") not in (None, "disk"):
            continue

        partitions = []
        is_system = False

        # lsblk nests partitions under 'children'
        raw_partitions = device.get("children", [])

        for p in raw_partitions:
            mountpoint = p.get("mountpoint")
            if mountpoint in SYSTEM_MOUNTPOINTS or p.get("fstype") == "swap":
                is_system = True

            partitions.append(Partition(
                name=p.get("name"),
                path=p.get("path"),
                size=int(p.get("size") or 0),
                fstype=p.get("fstype"),
                uuid=p.get("uuid"),
                mountpoint=mountpoint
            ))

        if device.get("mountpoint") in ["/", "/boot", "/boot/efi"]:
            is_system = True

        # Available only if NO children and NO fstype on the disk itself.
        available = not is_system and not raw_partitions and not device.get("fstype")

        disks.append(Disk(
            name=device.get("name"),
            path=device.get("path"),
            size=int(device.get("size") or 0),
            model=device.get("model"),
            serial=device.get("serial"),
            rotational=bool(device.get("rota")),
            partitions=partitions,
            is_system=is_system,
            available=available
        ))

    return disks


def get_unused_disks(ctx: HostContext) -> List[Disk]:
    """Returns only disks marked as available."""
    return [d for d in get_system_disks(ctx) if d.available]
