import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator

from hostprov.config.settings import config

USERNAME_RE = re.compile(r"^[a-z_][a-z0-9_-]{0,31}$")
# Section names smb.conf gives a special meaning
RESERVED_SHARE_NAMES = {"global", "homes", "printers"}


class SMBShare(BaseModel):
    name: str
    path: str
    comment: Optional[str] = None
    valid_users: Optional[str] = None
    read_only: bool = False
    browsable: bool = True
    guest_ok: bool = False


class ConfigWritePolicy(str, Enum):
    OVERWRITE = "overwrite"  # back up smb.conf and write a fresh [global]
    APPEND = "append"  # keep an existing smb.conf, only append shares


class SambaPreset(BaseModel):
    name: str
    description: str
    browsable: bool
    read_only: bool = False
    guest_ok: bool = False
    create_mask: str
    directory_mask: str
    share_mode: str  # mode of <share_root>/<user>
    base_config: ConfigWritePolicy
    fstab_options: str = "defaults,_netdev"


class ShareUser(BaseModel):
    username: str
    password: Optional[SecretStr] = None

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        value = value.strip()
        if not USERNAME_RE.match(value):
            raise ValueError(f"Invalid username '{value}'")
        if value in RESERVED_SHARE_NAMES:
            raise ValueError(f"'{value}' is a reserved Samba section name and cannot be a share user")
        return value


class SambaRequest(BaseModel):
    share_root: str = Field(default_factory=lambda: config.share_root)
    users: List[ShareUser] = []
    preset: str = "isolated"
    workgroup: str = Field(default_factory=lambda: config.workgroup)
    server_string: str = Field(default_factory=lambda: config.server_string)
    enable_services: bool = True
    configure_firewall: bool = True
    configure_selinux: bool = True
