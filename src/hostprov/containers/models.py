from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class UnitWritePolicy(str, Enum):
    OVERWRITE = "overwrite"  # always replace an existing unit file
    PRESERVE = "preserve"  # leave an existing unit file untouched


class PublishPort(BaseModel):
    host_port: int
    container_port: int
    protocol: str = "tcp"

    def render(self) -> str:
        spec = f"{self.host_port}:{self.container_port}"
        if self.protocol != "tcp":
            spec += f"/{self.protocol}"
        return spec


class Volume(BaseModel):
    source: str
    target: str
    options: Optional[str] = "Z"

    def render(self) -> str:
        spec = f"{self.source}:{self.target}"
        if self.options:
            spec += f":{self.options}"
        return spec


class TmpfsMount(BaseModel):
    target: str
    size: Optional[int] = None  # bytes

    def render(self) -> str:
        spec = f"type=tmpfs,target={self.target}"
        if self.size:
            spec += f",tmpfs-size={self.size}"
        return spec


class QuadletUnit(BaseModel):
    name: str
    description: str
    image: str
    network: Optional[str] = None
    environment_file: Optional[str] = None
    ports: List[PublishPort] = []
    volumes: List[Volume] = []
    tmpfs: List[TmpfsMount] = []
    shm_size: Optional[str] = None
    auto_update: Optional[str] = "registry"
    restart: str = "on-failure"
    timeout_start_sec: int = 300
    after: List[str] = ["network-online.target"]
    wants: List[str] = ["network-online.target"]
    wanted_by: str = "multi-user.target"

    @property
    def file_name(self) -> str:
        return f"{self.name}.container"

    @property
    def service_name(self) -> str:
        return f"{self.name}.service"


class HostDirectory(BaseModel):
    path: str
    mode: str = "0755"
    owner: Optional[str] = None  # user[:group]


class ConfigFile(BaseModel):
    path: str
    content: str
    mode: str = "0644"
    overwrite: bool = True


class ServiceDeployment(BaseModel):
    unit: QuadletUnit
    directories: List[HostDirectory] = []
    config_files: List[ConfigFile] = []
    env_file: Optional[ConfigFile] = None
    selinux_root: Optional[str] = None
    firewall_ports: List[str] = []
    write_policy: UnitWritePolicy = UnitWritePolicy.OVERWRITE
    start: bool = True
