import os
from typing import List, Optional

import yaml
from pydantic import BaseModel

from hostprov.containers.models import UnitWritePolicy
from hostprov.shares.models import SambaRequest
from hostprov.storage.models import RaidRequest

SEARCH_PATHS = [
    "hostprov.yaml",
    "~/.config/hostprov/config.yaml",
    "/etc/hostprov/config.yaml",
]


class RaidSection(RaidRequest):
    confirm: Optional[str] = None
    root_override: Optional[str] = None


class ContainerSection(BaseModel):
    name: str
    write_policy: Optional[UnitWritePolicy] = None
    base_dir: Optional[str] = None
    image: Optional[str] = None


class ApplyConfig(BaseModel):
    install_packages: bool = True
    state_directory: Optional[str] = None
    raid: Optional[RaidSection] = None
    samba: Optional[SambaRequest] = None
    containers: List[ContainerSection] = []


def find_config(path: Optional[str] = None) -> Optional[str]:
    if path:
        return path
    for candidate in SEARCH_PATHS:
        expanded = os.path.expanduser(candidate)
        if os.path.exists(expanded):
            return expanded
    return None


def load_config(path: str) -> ApplyConfig:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    return ApplyConfig.model_validate(data)
