import pytest
from pydantic import ValidationError as ModelValidationError

from hostprov.config.loader import find_config, load_config
from hostprov.containers.models import UnitWritePolicy

APPLY_YAML = """
install_packages: false
raid:
  devices: [/dev/sdb, /dev/sdc]
  mount_point: /mnt/data
  confirm: "YES"
samba:
  preset: shared
  users:
    - username: alice
      password: hunter2
containers:
  - name: mosquitto
  - name: frigate
    write_policy: overwrite
"""


def test_load_config(tmp_path):
    path = tmp_path / "hostprov.yaml"
    path.write_text(APPLY_YAML)

    cfg = load_config(str(path))

    assert cfg.install_packages is False
    assert cfg.raid.devices == ["/dev/sdb", "/dev/sdc"]
    assert cfg.raid.mount_point == "/mnt/data"
    assert cfg.raid.array_name == "/dev/md0"
    assert cfg.raid.confirm == "YES"
    assert cfg.samba.preset == "shared"
    assert cfg.samba.users[0].password.get_secret_value() == "hunter2"
    assert [c.name for c in cfg.containers] == ["mosquitto", "frigate"]
    assert cfg.containers[1].write_policy == UnitWritePolicy.OVERWRITE


def test_empty_config(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    cfg = load_config(str(path))
    assert cfg.raid is None
    assert cfg.containers == []


def test_invalid_config(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("containers:\n  - name: frigate\n    write_policy: sometimes\n")
    with pytest.raises(ModelValidationError):
        load_config(str(path))


def test_find_config_explicit_path():
    assert find_config("/tmp/custom.yaml") == "/tmp/custom.yaml"


def test_find_config_search_paths(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("hostprov.config.loader.SEARCH_PATHS", ["hostprov.yaml", str(tmp_path / "other.yaml")])
    assert find_config() is None
    (tmp_path / "other.yaml").write_text("{}")
    assert find_config() == str(tmp_path / "other.yaml")
