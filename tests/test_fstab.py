from hostprov.storage import fstab
from hostprov.storage.models import FstabEntry


def test_build_entry_prefers_uuid(host):
    host.on(["blkid"], stdout="5a6b-uuid\n")
    entry = fstab.build_entry(host, "/dev/md0", "/srv/samba", "ext4", "defaults,_netdev")
    assert entry.spec == "UUID=5a6b-uuid"
    assert entry.render() == "UUID=5a6b-uuid\t/srv/samba\text4\tdefaults,_netdev\t0 0"


def test_build_entry_falls_back_to_device_when_uuid_empty(host):
    host.on(["blkid"], stdout="\n")
    entry = fstab.build_entry(host, "/dev/md0", "/mnt/raid", "ext4")
    assert entry.spec == "/dev/md0"


def test_build_entry_falls_back_when_blkid_fails(host):
    host.on(["blkid"], returncode=2)
    assert fstab.build_entry(host, "/dev/md0", "/mnt/raid", "ext4").spec == "/dev/md0"


def test_append_entry_backs_up_then_appends(host):
    host.files["/etc/fstab"] = "UUID=1111 / ext4 defaults 0 1"
    entry = FstabEntry(spec="UUID=abcd", mountpoint="/mnt/raid", fstype="ext4")

    backup_path = fstab.append_entry(host, entry, "/etc/fstab")

    assert backup_path == f"/etc/fstab.bak.{int(host.time())}"
    assert host.files[backup_path] == "UUID=1111 / ext4 defaults 0 1"
    assert host.files["/etc/fstab"] == "UUID=1111 / ext4 defaults 0 1\nUUID=abcd\t/mnt/raid\text4\tdefaults\t0 0\n"


def test_append_entry_creates_missing_fstab(host):
    entry = FstabEntry(spec="UUID=abcd", mountpoint="/mnt/raid", fstype="ext4")
    assert fstab.append_entry(host, entry, "/etc/fstab") is None
    assert host.files["/etc/fstab"] == "UUID=abcd\t/mnt/raid\text4\tdefaults\t0 0\n"


def test_has_mountpoint_ignores_comments(host):
    host.files["/etc/fstab"] = "# /dev/md0 /mnt/raid ext4 defaults 0 0\nUUID=1 / ext4 defaults 0 1\n"
    assert fstab.has_mountpoint(host, "/mnt/raid") is False
    assert fstab.has_mountpoint(host, "/") is True
