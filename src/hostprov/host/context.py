import logging
import os
import pwd
import grp
import re
import shutil
import stat
import subprocess
import time
from abc import ABC, abstractmethod
from typing import List, Optional

import psutil

from hostprov.errors import CommandError
from hostprov.host.models import CommandResult, DiskUsage

logger = logging.getLogger(__name__)


class HostContext(ABC):
    """
    The host surface a provisioning step is allowed to touch.

    Every query or mutation of the machine goes through one of these methods,
    so a whole procedure can run against an in-memory host in tests.
    """

    @abstractmethod
    def run(self, args: List[str], input: Optional[str] = None, check: bool = True) -> CommandResult:
        pass

    @abstractmethod
    def which(self, name: str) -> Optional[str]:
        pass

    @abstractmethod
    def is_root(self) -> bool:
        pass

    @abstractmethod
    def is_block_device(self, path: str) -> bool:
        pass

    @abstractmethod
    def realpath(self, path: str) -> str:
        pass

    @abstractmethod
    def root_devices(self) -> List[str]:
        """Every block device backing '/', from the mounted source down to its whole disks."""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def is_dir(self, path: str) -> bool:
        pass

    @abstractmethod
    def read_text(self, path: str) -> str:
        pass

    @abstractmethod
    def write_text(self, path: str, content: str, mode: Optional[int] = None):
        pass

    @abstractmethod
    def append_text(self, path: str, content: str):
        pass

    @abstractmethod
    def copy_file(self, src: str, dst: str):
        pass

    @abstractmethod
    def makedirs(self, path: str, mode: Optional[int] = None):
        pass

    @abstractmethod
    def chmod(self, path: str, mode: int):
        pass

    @abstractmethod
    def chown(self, path: str, owner: str, group: Optional[str] = None, recursive: bool = False):
        pass

    @abstractmethod
    def user_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    def group_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    def disk_usage(self, path: str) -> DiskUsage:
        pass

    @abstractmethod
    def sleep(self, seconds: float):
        pass

    @abstractmethod
    def time(self) -> float:
        pass


class SystemHostContext(HostContext):
    """HostContext backed by the running machine."""

    def run(self, args, input=None, check=True):
        logger.info(f"Running: {' '.join(args)}")
        try:
            result = subprocess.run(args, input=input, capture_output=True, text=True)
        except FileNotFoundError:
            if check:
                raise CommandError(args, 127, f"{args[0]}: command not found")
            return CommandResult(args=list(args), returncode=127, stderr=f"{args[0]}: command not found")

        completed = CommandResult(
            args=list(args),
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
        if result.returncode != 0:
            logger.debug(f"Command {args[0]} exited with {result.returncode}: {completed.stderr.strip()}")
            if check:
                raise CommandError(args, result.returncode, completed.stderr)
        return completed

    def which(self, name):
        return shutil.which(name)

    def is_root(self):
        return os.geteuid() == 0

    def is_block_device(self, path):
        try:
            return stat.S_ISBLK(os.stat(path).st_mode)
        except OSError:
            return False

    def realpath(self, path):
        return os.path.realpath(path)

    def root_devices(self):
        res = self.run(["findmnt", "-n", "-o", "SOURCE", "/"], check=False)
        # btrfs subvolumes are reported as /dev/sda2[/@]
        source = res.stdout.strip().split("[", 1)[0]
        if not source.startswith("/dev/"):
            return []

        # -s lists the device followed by its ancestors (partition, LUKS, LVM, disk)
        res = self.run(["lsblk", "-nrs", "-o", "PATH,TYPE", source], check=False)
        devices = [source]
        for line in res.stdout.splitlines():
            parts = line.split()
            if parts and parts[0].startswith("/dev/") and parts[0] not in devices:
                devices.append(parts[0])

        if len(devices) == 1:
            disk = re.sub(r"(?<=\d)p\d+$", "", source)
            if disk == source:
                disk = source.rstrip("0123456789")
            if disk != source:
                devices.append(disk)
        return devices

    def exists(self, path):
        return os.path.exists(path)

    def is_dir(self, path):
        return os.path.isdir(path)

    def read_text(self, path):
        with open(path, "r") as f:
            return f.read()

    def write_text(self, path, content, mode=None):
        if mode is not None:
            # Final mode is applied at creation time.
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.chmod(path, mode)
            return
        with open(path, "w") as f:
            f.write(content)

    def append_text(self, path, content):
        with open(path, "a") as f:
            f.write(content)

    def copy_file(self, src, dst):
        shutil.copy2(src, dst)

    def makedirs(self, path, mode=None):
        os.makedirs(path, exist_ok=True)
        if mode is not None:
            os.chmod(path, mode)

    def chmod(self, path, mode):
        os.chmod(path, mode)

    def chown(self, path, owner, group=None, recursive=False):
        spec = f"{owner}:{group}" if group else owner
        cmd = ["chown"]
        if recursive:
            cmd.append("-R")
        self.run(cmd + [spec, path])

    def user_exists(self, name):
        try:
            pwd.getpwnam(name)
            return True
        except KeyError:
            return False

    def group_exists(self, name):
        try:
            grp.getgrnam(name)
            return True
        except KeyError:
            return False

    def disk_usage(self, path):
        usage = psutil.disk_usage(path)
        return DiskUsage(path=path, total=usage.total, used=usage.used, free=usage.free, percent=usage.percent)

    def sleep(self, seconds):
        time.sleep(seconds)

    def time(self):
        return time.time()
