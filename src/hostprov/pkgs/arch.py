from hostprov.pkgs.base import PackageManager


class ArchPackageManager(PackageManager):
    REQUIRED_PACKAGES = {
        "raid": ["mdadm", "e2fsprogs"],
        "samba": ["samba", "acl"],
        "containers": ["podman"],
    }

    def is_installed(self, package):
        return self.ctx.run(["pacman", "-Q", package], check=False).ok

    def install(self, packages):
        self.ctx.run(["pacman", "-S", "--noconfirm", "--needed", *packages])
