# Dictionary of managed services.
# Key: Internal ID/Name
# Value: List of possible systemd unit names (first match wins)

MANAGED_SERVICES = {
    "smb": ["smb.service", "smbd.service"],
    "nmb": ["nmb.service", "nmbd.service"],
    "firewalld": ["firewalld.service"],
}
