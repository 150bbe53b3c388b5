from click.testing import CliRunner

from hostprov.cli import main


def test_main_help():
    runner = CliRunner()
    result = runner.invoke(main, ['--help'])
    assert result.exit_code == 0
    assert "Host provisioning" in result.output
    for command in ("raid", "samba", "containers", "storage", "apply", "version"):
        assert command in result.output


def test_raid_help():
    runner = CliRunner()
    result = runner.invoke(main, ['raid', '--help'])
    assert result.exit_code == 0
    assert "Assemble and mount RAID1 mirrors." in result.output


def test_samba_help():
    runner = CliRunner()
    result = runner.invoke(main, ['samba', '--help'])
    assert result.exit_code == 0
    assert "Manage Samba per-user shares." in result.output


def test_version(monkeypatch):
    monkeypatch.setenv("HOSTPROV_VERSION", "9.9.9")
    runner = CliRunner()
    result = runner.invoke(main, ['version'])
    assert result.exit_code == 0
    assert result.output.strip() == "9.9.9"


def test_storage_disks(host):
    host.on(["lsblk"], stdout='{"blockdevices": [{"name": "sdb", "path": "/dev/sdb", "size": 1024, "type": "disk"}]}')
    runner = CliRunner()
    result = runner.invoke(main, ['storage', 'disks', '--free'], obj={"host": host})
    assert result.exit_code == 0
    assert "/dev/sdb - 1024 - N/A - free" in result.output


def test_apply_requires_root(host, tmp_path):
    host.root_user = False
    path = tmp_path / "hostprov.yaml"
    path.write_text("containers:\n  - name: mosquitto\n")
    runner = CliRunner()
    result = runner.invoke(main, ['apply', '--config', str(path)], obj={"host": host, "state_directory": str(tmp_path)})
    assert result.exit_code == 1
    assert "must be run as root" in result.output
    assert host.commands == []


def test_apply_missing_config(tmp_path):
    runner = CliRunner()
    result = runner.invoke(main, ['apply', '--config', str(tmp_path / "missing.yaml")])
    assert result.exit_code != 0
    assert "Configuration file not found" in result.output


def test_apply_samba_on_raid(raid_host, tmp_path):
    path = tmp_path / "hostprov.yaml"
    path.write_text(
        "install_packages: false\n"
        "raid:\n"
        "  devices: [/dev/sdb, /dev/sdc]\n"
        "  confirm: 'YES'\n"
        "  sync_interval: 0\n"
        "samba:\n"
        "  share_root: /srv/samba\n"
        "  users:\n"
        "    - username: alice\n"
        "      password: pw\n"
    )
    runner = CliRunner()
    result = runner.invoke(main, ['apply', '--config', str(path)],
                           obj={"host": raid_host, "state_directory": str(tmp_path)})

    assert result.exit_code == 0, result.output
    assert "--- samba ---" in result.output
    assert "UUID=0000-uuid-md0\t/srv/samba\text4\tdefaults,_netdev\t0 0" in raid_host.files["/etc/fstab"]
    assert raid_host.index_of(["mount", "/srv/samba"]) < raid_host.index_of(["useradd"])
    assert "[alice]" in raid_host.files["/etc/samba/smb.conf"]


def test_apply_without_confirmation_changes_nothing(raid_host, tmp_path):
    path = tmp_path / "hostprov.yaml"
    path.write_text("raid:\n  devices: [/dev/sdb, /dev/sdc]\n")
    runner = CliRunner()
    result = runner.invoke(main, ['apply', '--config', str(path)],
                           obj={"host": raid_host, "state_directory": str(tmp_path)})
    assert result.exit_code == 1
    assert "not confirmed" in result.output
    assert raid_host.commands == []
