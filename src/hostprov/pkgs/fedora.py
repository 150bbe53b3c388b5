from hostprov.errors import UnsupportedPlatform
from hostprov.pkgs.base import PackageManager


class FedoraPackageManager(PackageManager):
    REQUIRED_PACKAGES = {
        "raid": ["mdadm", "e2fsprogs"],
        "samba": ["samba", "samba-client", "samba-common", "acl", "policycoreutils-python-utils", "firewalld"],
        "containers": ["podman", "systemd-container"],
    }

    def __init__(self, ctx):
        super().__init__(ctx)
        if ctx.which("dnf"):
            self.pm = "dnf"
        elif ctx.which("yum"):
            self.pm = "yum"
        else:
            raise UnsupportedPlatform("No package manager found (dnf or yum)")

    def is_installed(self, package):
        return self.ctx.run(["rpm", "-q", package], check=False).ok

    def install(self, packages):
        self.ctx.run([self.pm, "install", "-y", *packages])
