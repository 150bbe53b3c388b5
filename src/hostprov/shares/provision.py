import logging
import os
from typing import List, Optional

from hostprov.errors import StepFailed
from hostprov.host.context import HostContext
from hostprov.procedure.models import Step
from hostprov.security import selinux
from hostprov.security.firewall import FirewallManager
from hostprov.shares.models import SambaRequest, ShareUser
from hostprov.shares.presets import get_preset
from hostprov.shares.smb import SMBManager

logger = logging.getLogger(__name__)

SHARE_ROOT_MODE = 0o2775
SAMBA_GROUP = "sambashare"
SAMBA_SELINUX_BOOLEANS = {
    "samba_enable_home_dirs": True,
    "samba_export_all_rw": True,
}


class SambaProvisioner:
    """Isolated per-user Samba shares under a common share root."""

    def __init__(self, ctx: HostContext, request: SambaRequest, smb: Optional[SMBManager] = None):
        self.ctx = ctx
        self.request = request
        self.preset = get_preset(request.preset)
        self.smb = smb or SMBManager(ctx)

    def share_dir(self, username: str) -> str:
        return os.path.join(self.request.share_root, username)

    def steps(self) -> List[Step]:
        steps = [Step("samba.base_config", self.configure_base, description="Configuring Samba")]
        for user in self.request.users:
            steps.extend(self.user_steps(user))
        steps.append(Step("samba.validate", self.smb.validate_config, description="Validating smb.conf"))
        steps.append(Step("samba.group", self.ensure_group, description=f"Ensuring group {SAMBA_GROUP}"))
        if self.request.enable_services:
            steps.append(Step("samba.services", self.enable_services, description="Enabling smb and nmb"))
        if self.request.configure_firewall:
            steps.append(Step("samba.firewall", self.open_firewall, description="Opening firewall for Samba"))
        if self.request.configure_selinux:
            steps.append(Step("samba.selinux", self.configure_selinux, description="Configuring SELinux for Samba"))
        steps.append(Step("samba.report", self.report, description="Samba status"))
        return steps

    def user_steps(self, user: ShareUser) -> List[Step]:
        """One isolated set of steps per user, named after the user."""
        name = user.username
        return [
            Step("samba.account", lambda: self.ensure_account(user), f"samba.account[{name}]", f"Ensuring account {name}"),
            Step("samba.directory", lambda: self.prepare_directory(user), f"samba.directory[{name}]", f"Preparing {self.share_dir(name)}"),
            Step("samba.password", lambda: self.set_password(user), f"samba.password[{name}]", f"Setting Samba password for {name}"),
            Step("samba.stanza", lambda: self.add_share(user), f"samba.stanza[{name}]", f"Adding share [{name}]"),
            Step("samba.acl", lambda: self.apply_acl(user), f"samba.acl[{name}]", f"Applying ACLs for {name}"),
        ]

    def configure_base(self):
        message = self.smb.configure_base(self.preset, self.request.workgroup, self.request.server_string)
        self.ctx.makedirs(self.request.share_root)
        self.ctx.chown(self.request.share_root, "root", "root")
        self.ctx.chmod(self.request.share_root, SHARE_ROOT_MODE)
        return message

    def _nologin_shell(self) -> str:
        return self.ctx.which("nologin") or "/sbin/nologin"

    def ensure_account(self, user: ShareUser):
        if self.ctx.user_exists(user.username):
            return f"System user {user.username} exists."
        self.ctx.run([
            "useradd",
            "--home-dir", self.share_dir(user.username),
            "--no-create-home",
            "--shell", self._nologin_shell(),
            user.username,
        ])
        return f"Created system user {user.username}"

    def prepare_directory(self, user: ShareUser):
        path = self.share_dir(user.username)
        self.ctx.makedirs(path)
        self.ctx.chown(path, user.username, user.username)
        self.ctx.chmod(path, int(self.preset.share_mode, 8))

    def set_password(self, user: ShareUser):
        if user.password is None:
            raise StepFailed(
                f"No Samba password supplied for {user.username}; set it later with 'smbpasswd -a {user.username}'."
            )
        self.smb.set_password(user.username, user.password.get_secret_value())

    def add_share(self, user: ShareUser):
        path = self.share_dir(user.username)
        if self.smb.append_user_share(user.username, path, self.preset):
            return f"Created Samba share for {user.username} at {path}"
        return f"Samba share for {user.username} already configured"

    def apply_acl(self, user: ShareUser):
        path = self.share_dir(user.username)
        acl = f"u:{user.username}:rwx"
        self.ctx.run(["setfacl", "-R", "-m", acl, path])
        self.ctx.run(["setfacl", "-d", "-m", acl, path])

    def ensure_group(self):
        if self.ctx.group_exists(SAMBA_GROUP):
            return ""
        self.ctx.run(["groupadd", SAMBA_GROUP])
        return f"Created group {SAMBA_GROUP}"

    def enable_services(self):
        units = self.smb.enable_services()
        return f"Enabled {' '.join(units)}"

    def open_firewall(self):
        return FirewallManager(self.ctx).open(services=["samba"])

    def configure_selinux(self):
        messages = [selinux.label_path(self.ctx, self.request.share_root, "samba_share_t")]
        messages.append(selinux.set_booleans(self.ctx, SAMBA_SELINUX_BOOLEANS))
        return "\n".join(messages)

    def report(self):
        lines = [f"Samba shares available under: {self.request.share_root}"]
        for share in self.smb.list_shares():
            if share.path.startswith(self.request.share_root):
                lines.append(f"  [{share.name}] -> {share.path}")
        lines.append(f"smb service: {self.smb.get_status()}")
        return "\n".join(lines)
