from typing import List, Optional
from pydantic import BaseModel, Field

from hostprov.config.settings import config


class Partition(BaseModel):
    name: str
    path: str
    size: int
    fstype: Optional[str] = None
    uuid: Optional[str] = None
    mountpoint: Optional[str] = None


class Disk(BaseModel):
    name: str
    path: str
    size: int
    model: Optional[str] = None
    serial: Optional[str] = None
    rotational: bool  # True if HDD, False if SSD
    partitions: List[Partition] = []
    is_system: bool = False  # True if contains root filesystem or boot
    available: bool = False  # True if empty/reusable


class RaidRequest(BaseModel):
    devices: List[str]
    array_name: str = Field(default_factory=lambda: config.raid_array_name)
    metadata: str = Field(default_factory=lambda: config.raid_metadata)
    filesystem: str = Field(default_factory=lambda: config.filesystem_type)
    mount_point: str = Field(default_factory=lambda: config.mount_point)
    fstab_options: str = "defaults"
    wipe_superblocks: bool = False
    owner: Optional[str] = None  # user[:group] applied to the mount point
    mode: Optional[str] = None  # octal string, e.g. "0775"
    sync_interval: float = Field(default_factory=lambda: config.sync_interval)
    sync_attempts: int = Field(default_factory=lambda: config.sync_attempts)

class FstabEntry(BaseModel):
    spec: str  # UUID=... or device path
    mountpoint: str
    fstype: str
    options: str = "defaults"
    dump: int = 0
    passno: int = 0

    def render(self) -> str:
        return f"{self.spec}\t{self.mountpoint}\t{self.fstype}\t{self.options}\t{self.dump} {self.passno}"


class ArraySummary(BaseModel):
    array_name: str
    devices: List[str]
    filesystem: str
    mount_point: str
    fstab_spec: Optional[str] = None
    active_devices: Optional[int] = None
