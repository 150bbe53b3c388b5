import pytest

from hostprov.errors import UnsupportedPlatform
from hostprov.host.osinfo import parse_os_release
from hostprov.pkgs.arch import ArchPackageManager
from hostprov.pkgs.base import PackageManager
from hostprov.pkgs.debian import DebianPackageManager
from hostprov.pkgs.fedora import FedoraPackageManager
from hostprov.pkgs.manager import get_package_manager, install_step

UBUNTU = 'NAME="Ubuntu"\nID=ubuntu\nID_LIKE=debian\nPRETTY_NAME="Ubuntu 24.04 LTS"\nVERSION_ID="24.04"\n'
ROCKY = 'NAME="Rocky Linux"\nID="rocky"\nID_LIKE="rhel centos fedora"\nVERSION_ID="9.4"\n'


class MockPackageManager(PackageManager):
    REQUIRED_PACKAGES = {"raid": ["installed-pkg", "missing-pkg"]}

    def __init__(self, ctx):
        super().__init__(ctx)
        self.installed = []

    def is_installed(self, package):
        return package == "installed-pkg"

    def install(self, packages):
        self.installed.extend(packages)


def test_parse_os_release():
    info = parse_os_release(ROCKY)
    assert info.id == "rocky"
    assert info.id_like == ["rhel", "centos", "fedora"]
    assert info.version_id == "9.4"
    assert parse_os_release(UBUNTU).name == "Ubuntu 24.04 LTS"


def test_debian_family(host):
    host.files["/etc/os-release"] = UBUNTU
    assert isinstance(get_package_manager(host), DebianPackageManager)


def test_fedora_family_prefers_dnf(host):
    host.files["/etc/os-release"] = ROCKY
    host.tools |= {"dnf", "yum"}
    pm = get_package_manager(host)
    assert isinstance(pm, FedoraPackageManager)
    assert pm.pm == "dnf"


def test_fedora_without_package_tool(host):
    host.files["/etc/os-release"] = ROCKY
    with pytest.raises(UnsupportedPlatform):
        get_package_manager(host)


def test_arch(host):
    host.files["/etc/os-release"] = "ID=arch\n"
    assert isinstance(get_package_manager(host), ArchPackageManager)


def test_unknown_distribution(host):
    host.files["/etc/os-release"] = "ID=plan9\n"
    with pytest.raises(UnsupportedPlatform):
        get_package_manager(host)


def test_ensure_installed_only_missing(host):
    pm = MockPackageManager(host)
    assert pm.ensure_installed("raid") == "Installed: missing-pkg"
    assert pm.installed == ["missing-pkg"]


def test_ensure_installed_noop(host):
    pm = MockPackageManager(host)
    assert "already installed" in pm.ensure_installed("containers")
    assert pm.installed == []


def test_debian_install_commands(host):
    host.files["/etc/os-release"] = UBUNTU
    host.on(["dpkg-query"], returncode=1)
    host.on(["dpkg-query", "-W", "-f=${Status}", "mdadm"], stdout="install ok installed")

    message = install_step(host, "raid").action()

    assert message == "Installed: e2fsprogs"
    assert host.ran(["apt-get", "update"])
    assert host.ran(["apt-get", "install", "-y", "e2fsprogs"])


def test_install_step_kind(host):
    step = install_step(host, "samba", "raid")
    assert step.kind == "pkgs.install"
    assert "samba, raid" in step.description
