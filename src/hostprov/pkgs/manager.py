from hostprov.errors import UnsupportedPlatform
from hostprov.host.context import HostContext
from hostprov.host.osinfo import get_os_info
from hostprov.pkgs.arch import ArchPackageManager
from hostprov.pkgs.base import PackageManager
from hostprov.pkgs.debian import DebianPackageManager
from hostprov.pkgs.fedora import FedoraPackageManager
from hostprov.procedure.models import Step

DEBIAN_FAMILY = ["debian", "ubuntu", "raspbian", "linuxmint"]
FEDORA_FAMILY = ["fedora", "centos", "rhel", "rocky", "almalinux"]


def get_package_manager(ctx: HostContext) -> PackageManager:
    os_info = get_os_info(ctx)
    candidates = [os_info.id] + os_info.id_like
    for distro in candidates:
        if distro in ["arch"]:
            return ArchPackageManager(ctx)
        elif distro in DEBIAN_FAMILY:
            return DebianPackageManager(ctx)
        elif distro in FEDORA_FAMILY:
            return FedoraPackageManager(ctx)
    raise UnsupportedPlatform(f"Unsupported distribution: {os_info.id}")


def install_step(ctx: HostContext, *features: str) -> Step:
    def action():
        pm = get_package_manager(ctx)
        return "\n".join(pm.ensure_installed(feature) for feature in features)

    return Step("pkgs.install", action, description=f"Installing required packages ({', '.join(features)})")
