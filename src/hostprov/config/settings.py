import os


def _list_env(name: str, default: str):
    return [item for item in os.getenv(name, default).split(":") if item]


class Config:
    state_directory = os.getenv("HOSTPROV_STATE_DIRECTORY", "/var/lib/hostprov")
    log_level = os.getenv("HOSTPROV_LOG_LEVEL", "WARNING")

    # Storage
    raid_array_name = os.getenv("HOSTPROV_RAID_ARRAY_NAME", "/dev/md0")
    raid_metadata = os.getenv("HOSTPROV_RAID_METADATA", "1.2")
    filesystem_type = os.getenv("HOSTPROV_FILESYSTEM_TYPE", "ext4")
    mount_point = os.getenv("HOSTPROV_MOUNT_POINT", "/mnt/raid1_share")
    fstab_path = os.getenv("HOSTPROV_FSTAB_PATH", "/etc/fstab")
    mdadm_conf_candidates = _list_env("HOSTPROV_MDADM_CONF_CANDIDATES", "/etc/mdadm.conf:/etc/mdadm/mdadm.conf")
    sync_interval = float(os.getenv("HOSTPROV_SYNC_INTERVAL", "1"))
    sync_attempts = int(os.getenv("HOSTPROV_SYNC_ATTEMPTS", "60"))

    # Samba
    smb_conf_path = os.getenv("HOSTPROV_SMB_CONF_PATH", "/etc/samba/smb.conf")
    share_root = os.getenv("HOSTPROV_SHARE_ROOT", "/srv/samba")
    workgroup = os.getenv("HOSTPROV_WORKGROUP", "WORKGROUP")
    server_string = os.getenv("HOSTPROV_SERVER_STRING", "Samba Server")

    # Containers
    quadlet_directory = os.getenv("HOSTPROV_QUADLET_DIRECTORY", "/etc/containers/systemd")
    containers_directory = os.getenv("HOSTPROV_CONTAINERS_DIRECTORY", "/opt/containers")

config = Config()
