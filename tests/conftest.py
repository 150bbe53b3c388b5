import os
from typing import Callable, Dict, List, Optional, Union

import pytest

from hostprov.errors import CommandError
from hostprov.host.context import HostContext
from hostprov.host.models import CommandResult, DiskUsage

MDADM_DETAIL_TEMPLATE = """{name}:
           Version : 1.2
     Creation Time : Sat Oct 18 10:00:00 2026
        Raid Level : raid1
        Array Size : 976630464 (931.39 GiB 1000.07 GB)
      Raid Devices : {count}
     Total Devices : {count}
       Persistence : Superblock is persistent

             State : clean
    Active Devices : {active}
   Working Devices : {count}
    Failed Devices : 0
     Spare Devices : 0
"""


class FakeHost(HostContext):
    """
    In-memory host. Commands are recorded; a handful (mdadm, mkfs, blkid,
    mount, useradd, groupadd) update the fake state so whole procedures can
    run end to end. `on()` overrides any command by prefix.
    """

    def __init__(self):
        self.files: Dict[str, str] = {}
        self.dirs = {"/", "/etc", "/etc/mdadm", "/etc/samba", "/srv", "/opt", "/var"}
        self.modes: Dict[str, int] = {}
        self.owners: Dict[str, tuple] = {}
        self.block_devices = set()
        self.links: Dict[str, str] = {}
        self.roots: List[str] = []
        self.users = {"root"}
        self.groups = {"root"}
        self.tools = {"mdadm", "update-initramfs", "smbd", "podman", "systemctl"}
        self.root_user = True
        self.commands: List[List[str]] = []
        self.inputs: List[Optional[str]] = []
        self.responders: List[tuple] = []
        self.arrays: Dict[str, List[str]] = {}
        self.filesystems: Dict[str, str] = {}
        self.mounts: Dict[str, str] = {}
        self.clock = 1700000000.0
        self.sleeps: List[float] = []

    # Test helpers

    def on(self, prefix: List[str], result: Union[CommandResult, Callable, None] = None,
           stdout: str = "", returncode: int = 0, stderr: str = ""):
        if result is None:
            result = CommandResult(args=list(prefix), returncode=returncode, stdout=stdout, stderr=stderr)
        self.responders.insert(0, (list(prefix), result))

    def add_block_device(self, path: str):
        self.block_devices.add(path)

    def ran(self, prefix: List[str]) -> bool:
        return any(cmd[:len(prefix)] == prefix for cmd in self.commands)

    def index_of(self, prefix: List[str]) -> int:
        for i, cmd in enumerate(self.commands):
            if cmd[:len(prefix)] == prefix:
                return i
        raise AssertionError(f"{prefix} was never run; commands: {self.commands}")

    # HostContext

    def run(self, args, input=None, check=True):
        args = list(args)
        self.commands.append(args)
        self.inputs.append(input)

        result = None
        for prefix, responder in self.responders:
            if args[:len(prefix)] == prefix:
                result = responder(args, input) if callable(responder) else responder
                break
        if result is None:
            result = self._simulate(args)
        result = CommandResult(args=args, returncode=result.returncode, stdout=result.stdout, stderr=result.stderr)

        if check and result.returncode != 0:
            raise CommandError(args, result.returncode, result.stderr)
        return result

    def _simulate(self, args) -> CommandResult:
        ok = CommandResult(args=args, returncode=0)
        tool = args[0]
        if tool == "mdadm" and "--create" in args:
            name = args[args.index("--create") + 1]
            count = int(next(a for a in args if a.startswith("--raid-devices=")).split("=", 1)[1])
            members = [a for a in args[args.index("--create") + 2:] if not a.startswith("--")][:count]
            self.arrays[name] = members
            self.block_devices.add(name)
            return ok
        if tool == "mdadm" and args[1:] == ["--detail", "--scan"]:
            lines = [f"ARRAY {name} metadata=1.2 name=host:{os.path.basename(name)} UUID=fa11:0000:0000:0001"
                     for name in self.arrays]
            return CommandResult(args=args, returncode=0, stdout="\n".join(lines) + ("\n" if lines else ""))
        if tool == "mdadm" and args[1] == "--detail":
            name = args[2]
            if name not in self.arrays:
                return CommandResult(args=args, returncode=1, stderr=f"mdadm: cannot open {name}")
            count = len(self.arrays[name])
            return CommandResult(args=args, returncode=0,
                                 stdout=MDADM_DETAIL_TEMPLATE.format(name=name, count=count, active=count))
        if tool.startswith("mkfs."):
            device = args[-1]
            self.filesystems[device] = f"0000-uuid-{os.path.basename(device)}"
            return ok
        if tool == "blkid":
            uuid = self.filesystems.get(args[-1], "")
            return CommandResult(args=args, returncode=0 if uuid else 2, stdout=f"{uuid}\n" if uuid else "")
        if tool == "mount" and len(args) == 2:
            self.mounts[args[1]] = self._fstab_source(args[1])
            return ok
        if tool == "useradd":
            self.users.add(args[-1])
            self.groups.add(args[-1])
            return ok
        if tool == "groupadd":
            self.groups.add(args[-1])
            return ok
        if tool == "systemctl" and args[1:3] == ["show", "-p"]:
            return CommandResult(args=args, returncode=0, stdout="LoadState=loaded\n")
        return ok

    def _fstab_source(self, mountpoint: str) -> str:
        for line in self.files.get("/etc/fstab", "").splitlines():
            parts = line.split()
            if len(parts) >= 2 and parts[1] == mountpoint:
                return parts[0]
        return ""

    def which(self, name):
        return f"/usr/bin/{name}" if name in self.tools else None

    def is_root(self):
        return self.root_user

    def is_block_device(self, path):
        return path in self.block_devices

    def realpath(self, path):
        return self.links.get(path, path)

    def root_devices(self):
        return list(self.roots)

    def exists(self, path):
        return path in self.files or path in self.dirs or path in self.block_devices

    def is_dir(self, path):
        return path in self.dirs

    def read_text(self, path):
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write_text(self, path, content, mode=None):
        self.files[path] = content
        if mode is not None:
            self.modes[path] = mode

    def append_text(self, path, content):
        self.files[path] = self.files.get(path, "") + content

    def copy_file(self, src, dst):
        self.files[dst] = self.read_text(src)

    def makedirs(self, path, mode=None):
        current = path
        while current not in ("", "/"):
            self.dirs.add(current)
            current = os.path.dirname(current)
        if mode is not None:
            self.modes[path] = mode

    def chmod(self, path, mode):
        self.modes[path] = mode

    def chown(self, path, owner, group=None, recursive=False):
        self.owners[path] = (owner, group)

    def user_exists(self, name):
        return name in self.users

    def group_exists(self, name):
        return name in self.groups

    def disk_usage(self, path):
        return DiskUsage(path=path, total=1000 * 1024 ** 3, used=2 * 1024 ** 3, free=998 * 1024 ** 3, percent=0.2)

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.clock += seconds

    def time(self):
        return self.clock


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def raid_host(host):
    host.add_block_device("/dev/sdb")
    host.add_block_device("/dev/sdc")
    host.roots = ["/dev/sda2", "/dev/sda"]
    host.add_block_device("/dev/sda")
    host.files["/etc/fstab"] = "UUID=1111 / ext4 defaults 0 1\n"
    return host
