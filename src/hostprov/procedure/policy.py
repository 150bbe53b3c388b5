from hostprov.procedure.models import Severity

# Failure tier for every step kind. Fatal aborts the run; warning is reported
# and the run continues.
STEP_POLICIES = {
    # Packages
    "pkgs.install": Severity.FATAL,

    # RAID assembly
    "raid.teardown": Severity.FATAL,
    "raid.create": Severity.FATAL,
    "raid.sync_wait": Severity.WARNING,
    "raid.persist_config": Severity.FATAL,
    "raid.format": Severity.FATAL,
    "raid.fstab": Severity.FATAL,
    "raid.mount": Severity.FATAL,
    "raid.permissions": Severity.WARNING,
    "raid.report": Severity.WARNING,

    # Samba
    "samba.base_config": Severity.FATAL,
    "samba.account": Severity.FATAL,
    "samba.directory": Severity.FATAL,
    "samba.password": Severity.WARNING,
    "samba.stanza": Severity.FATAL,
    "samba.acl": Severity.WARNING,
    "samba.validate": Severity.WARNING,
    "samba.group": Severity.WARNING,
    "samba.services": Severity.WARNING,
    "samba.firewall": Severity.WARNING,
    "samba.selinux": Severity.WARNING,
    "samba.report": Severity.WARNING,

    # Quadlet services
    "quadlet.directories": Severity.FATAL,
    "quadlet.config_files": Severity.FATAL,
    "quadlet.env_file": Severity.FATAL,
    "quadlet.pull": Severity.FATAL,
    "quadlet.unit": Severity.FATAL,
    "quadlet.selinux": Severity.WARNING,
    "quadlet.firewall": Severity.WARNING,
    "quadlet.reload": Severity.FATAL,
    "quadlet.start": Severity.FATAL,
}
