from hostprov.pkgs.base import PackageManager


class DebianPackageManager(PackageManager):
    REQUIRED_PACKAGES = {
        "raid": ["mdadm", "e2fsprogs"],
        "samba": ["samba", "samba-common-bin", "smbclient", "acl"],
        "containers": ["podman"],
    }

    def is_installed(self, package):
        res = self.ctx.run(["dpkg-query", "-W", "-f=${Status}", package], check=False)
        return res.ok and "install ok installed" in res.stdout

    def install(self, packages):
        self.ctx.run(["apt-get", "update"])
        self.ctx.run(["apt-get", "install", "-y", *packages])
