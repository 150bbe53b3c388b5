import pytest

from hostprov.errors import RootDeviceSelected, ValidationError
from hostprov.validation import (
    ROOT_OVERRIDE_TOKEN,
    confirm_secret,
    require_confirmation,
    require_value,
    validate_devices,
)


def test_require_value_rejects_empty():
    with pytest.raises(ValidationError):
        require_value("", "Mount point")
    with pytest.raises(ValidationError):
        require_value("   ", "Mount point")
    assert require_value(" /mnt/data ", "Mount point") == "/mnt/data"


def test_validate_devices_accepts_two_distinct_block_devices(raid_host):
    assert validate_devices(raid_host, ["/dev/sdb", "/dev/sdc"]) == ["/dev/sdb", "/dev/sdc"]


def test_validate_devices_rejects_empty_path(raid_host):
    with pytest.raises(ValidationError, match="required"):
        validate_devices(raid_host, ["/dev/sdb", ""])


def test_validate_devices_rejects_non_block_device(raid_host):
    raid_host.files["/tmp/disk.img"] = ""
    with pytest.raises(ValidationError, match="not a block device"):
        validate_devices(raid_host, ["/dev/sdb", "/tmp/disk.img"])


def test_validate_devices_rejects_identical_paths(raid_host):
    with pytest.raises(ValidationError, match="must be different"):
        validate_devices(raid_host, ["/dev/sdb", "/dev/sdb"])


def test_validate_devices_rejects_aliases_of_same_device(raid_host):
    raid_host.add_block_device("/dev/disk/by-id/ata-WD-1")
    raid_host.links["/dev/disk/by-id/ata-WD-1"] = "/dev/sdb"
    with pytest.raises(ValidationError, match="must be different"):
        validate_devices(raid_host, ["/dev/sdb", "/dev/disk/by-id/ata-WD-1"])


def test_validate_devices_requires_two_devices(raid_host):
    with pytest.raises(ValidationError, match="At least 2"):
        validate_devices(raid_host, ["/dev/sdb"])


def test_validate_devices_rejects_root_device_without_token(raid_host):
    with pytest.raises(RootDeviceSelected) as excinfo:
        validate_devices(raid_host, ["/dev/sda", "/dev/sdb"])
    assert excinfo.value.device == "/dev/sda"

    with pytest.raises(RootDeviceSelected):
        validate_devices(raid_host, ["/dev/sda", "/dev/sdb"], root_override="yes")


def test_validate_devices_rejects_disk_under_stacked_root(raid_host):
    raid_host.roots = ["/dev/mapper/rl-root", "/dev/sda3", "/dev/sda"]
    with pytest.raises(RootDeviceSelected) as excinfo:
        validate_devices(raid_host, ["/dev/sdb", "/dev/sda"])
    assert excinfo.value.device == "/dev/sda"
    assert excinfo.value.root_device == "/dev/sda"


def test_validate_devices_rejects_root_partition(raid_host):
    raid_host.add_block_device("/dev/sda2")
    with pytest.raises(RootDeviceSelected):
        validate_devices(raid_host, ["/dev/sda2", "/dev/sdb"])


def test_validate_devices_allows_root_device_with_token(raid_host):
    devices = validate_devices(raid_host, ["/dev/sda", "/dev/sdb"], root_override=ROOT_OVERRIDE_TOKEN)
    assert devices == ["/dev/sda", "/dev/sdb"]


def test_validate_devices_does_not_mutate_host(raid_host):
    validate_devices(raid_host, ["/dev/sdb", "/dev/sdc"])
    assert raid_host.commands == []


def test_confirm_secret_mismatch_does_not_leak_value():
    with pytest.raises(ValidationError) as excinfo:
        confirm_secret("hunter2-secret", "hunter3-secret")
    assert "hunter2-secret" not in str(excinfo.value)
    assert "hunter3-secret" not in str(excinfo.value)
    assert "do not match" in str(excinfo.value)


def test_confirm_secret_rejects_empty():
    with pytest.raises(ValidationError):
        confirm_secret("", "")


def test_confirm_secret_returns_matching_value():
    assert confirm_secret("s3cret", "s3cret") == "s3cret"


def test_require_confirmation():
    require_confirmation("YES", "YES", "RAID creation")
    with pytest.raises(ValidationError, match="not confirmed"):
        require_confirmation("yes", "YES", "RAID creation")
    with pytest.raises(ValidationError):
        require_confirmation(None, "YES", "RAID creation")
