import configparser
import logging
import os
from typing import List, Optional

from hostprov.config.settings import config
from hostprov.host.context import HostContext
from hostprov.shares.models import ConfigWritePolicy, SambaPreset, SMBShare
from hostprov.systemd.manager import SystemdManager

logger = logging.getLogger(__name__)

GLOBAL_TEMPLATE = """[global]
   workgroup = {workgroup}
   server string = {server_string}
   security = user
   map to guest = bad user
   obey pam restrictions = yes
   unix password sync = yes
   passwd program = /usr/bin/passwd %u
   passwd chat = *New*password* %n\\n *Retype*new*password* %n\\n .
   load printers = no
   printing = bsd
   printcap name = /dev/null
   disable spoolss = yes
   log level = 1
   max log size = 1000
   socket options = TCP_NODELAY SO_RCVBUF=131072 SO_SNDBUF=131072
"""

SAMBA_SERVICES = ["smb", "nmb"]


class SMBManager:
    def __init__(self, ctx: HostContext, conf_path: Optional[str] = None):
        self.ctx = ctx
        self.conf_path = conf_path or config.smb_conf_path

    def _str_to_bool(self, val: str) -> bool:
        return val.lower() in ('yes', 'true', '1', 'on')

    def _parse(self) -> Optional[configparser.ConfigParser]:
        if not self.ctx.exists(self.conf_path):
            return None
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        try:
            parser.read_string(self.ctx.read_text(self.conf_path))
        except configparser.Error as e:
            logger.warning(f"Could not parse {self.conf_path}: {e}")
            return None
        return parser

    def list_shares(self) -> List[SMBShare]:
        """List all samba shares."""
        parser = self._parse()
        if parser is None:
            return []

        shares = []
        for section in parser.sections():
            if section.lower() == 'global':
                continue
            shares.append(SMBShare(
                name=section,
                path=parser[section].get('path', 'N/A'),
                comment=parser[section].get('comment', ''),
                valid_users=parser[section].get('valid users'),
                read_only=self._str_to_bool(parser[section].get('read only', 'yes')),
                browsable=self._str_to_bool(parser[section].get('browsable', 'yes')),
                guest_ok=self._str_to_bool(parser[section].get('guest ok', 'no'))
            ))
        return shares

    def has_share(self, name: str) -> bool:
        parser = self._parse()
        return parser is not None and parser.has_section(name)

    def render_global(self, workgroup: str, server_string: str) -> str:
        return GLOBAL_TEMPLATE.format(workgroup=workgroup, server_string=server_string)

    def configure_base(self, preset: SambaPreset, workgroup: str, server_string: str) -> str:
        exists = self.ctx.exists(self.conf_path)
        if exists and preset.base_config == ConfigWritePolicy.APPEND:
            return f"Keeping existing {self.conf_path}"

        message = f"Wrote [global] to {self.conf_path}"
        if exists:
            backup_path = f"{self.conf_path}.bak.{int(self.ctx.time())}"
            self.ctx.copy_file(self.conf_path, backup_path)
            message += f" (backup: {backup_path})"
        else:
            self.ctx.makedirs(os.path.dirname(self.conf_path))

        self.ctx.write_text(self.conf_path, self.render_global(workgroup, server_string))
        return message

    def render_stanza(self, username: str, path: str, preset: SambaPreset) -> str:
        lines = [
            "",
            f"[{username}]",
            f"   path = {path}",
            f"   valid users = {username}",
            f"   read only = {'yes' if preset.read_only else 'no'}",
            f"   browsable = {'yes' if preset.browsable else 'no'}",
            f"   guest ok = {'yes' if preset.guest_ok else 'no'}",
            f"   create mask = {preset.create_mask}",
            f"   directory mask = {preset.directory_mask}",
        ]
        return "\n".join(lines) + "\n"

    def append_user_share(self, username: str, path: str, preset: SambaPreset) -> bool:
        """
        Append a share stanza for `username`. Existing stanzas are never
        rewritten; returns False when the user already has one.
        """
        if self.has_share(username):
            logger.info(f"Share [{username}] already present in {self.conf_path}")
            return False

        prefix = ""
        if self.ctx.exists(self.conf_path):
            current = self.ctx.read_text(self.conf_path)
            if current and not current.endswith("\n"):
                prefix = "\n"
        self.ctx.append_text(self.conf_path, prefix + self.render_stanza(username, path, preset))
        return True

    def set_password(self, username: str, password: str):
        # -s reads the new password twice from stdin
        self.ctx.run(["smbpasswd", "-a", "-s", username], input=f"{password}\n{password}\n")
        self.ctx.run(["smbpasswd", "-e", username])

    def validate_config(self) -> str:
        self.ctx.run(["testparm", "-s", self.conf_path])
        return f"{self.conf_path} passed testparm"

    def enable_services(self) -> List[str]:
        return SystemdManager(self.ctx).enable_now(SAMBA_SERVICES)

    def get_status(self) -> str:
        manager = SystemdManager(self.ctx)
        status = manager.get_service_status("smb")
        return status.active_state if status else "not found"
