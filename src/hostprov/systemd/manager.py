import logging
from typing import List, Optional

from hostprov.host.context import HostContext
from hostprov.systemd.models import SystemdServiceStatus
from hostprov.systemd.registry import MANAGED_SERVICES

logger = logging.getLogger(__name__)


class SystemdManager:
    def __init__(self, ctx: HostContext):
        self.ctx = ctx

    def resolve_unit(self, service_key: str) -> Optional[str]:
        """Resolves the actual systemd unit name from the registry list."""
        if service_key.endswith(".service"):
            candidates = [service_key]
        elif service_key in MANAGED_SERVICES:
            candidates = MANAGED_SERVICES[service_key]
        else:
            candidates = [f"{service_key}.service"]

        for unit in candidates:
            # 'systemctl show' reports LoadState even for inactive units
            res = self.ctx.run(["systemctl", "show", "-p", "LoadState", unit], check=False)
            logger.debug(f"Resolving {service_key}: {unit} -> {res.stdout.strip()}")
            if "LoadState=loaded" in res.stdout:
                return unit
        logger.info(f"Service {service_key} not found, candidates: {candidates}")
        return None

    def _require_unit(self, service_key: str) -> str:
        unit = self.resolve_unit(service_key)
        if not unit:
            raise ValueError(f"Service {service_key} not found or not installed.")
        return unit

    def daemon_reload(self):
        self.ctx.run(["systemctl", "daemon-reload"])

    def enable_now(self, service_keys: List[str]) -> List[str]:
        units = [self._require_unit(key) for key in service_keys]
        self.ctx.run(["systemctl", "enable", "--now", *units])
        return units

    def start(self, unit: str):
        self.ctx.run(["systemctl", "start", unit])

    def is_active(self, service_key: str) -> bool:
        unit = self.resolve_unit(service_key) or service_key
        res = self.ctx.run(["systemctl", "is-active", "--quiet", unit], check=False)
        return res.ok

    def get_service_status(self, service_key: str) -> Optional[SystemdServiceStatus]:
        unit = self.resolve_unit(service_key)
        if not unit:
            return None

        props = ["LoadState", "ActiveState", "SubState", "UnitFileState", "Description", "MainPID"]
        cmd = ["systemctl", "show", "--no-pager"] + [f"-p{p}" for p in props] + [unit]
        res = self.ctx.run(cmd, check=False)
        data = {}
        for line in res.stdout.splitlines():
            if "=" in line:
                k, v = line.split("=", 1)
                data[k] = v.strip()

        try:
            main_pid = int(data.get("MainPID") or 0)
        except ValueError:
            main_pid = 0

        return SystemdServiceStatus(
            name=service_key,
            unit=unit,
            description=data.get("Description"),
            load_state=data.get("LoadState", "unknown"),
            active_state=data.get("ActiveState", "unknown"),
            sub_state=data.get("SubState", "unknown"),
            unit_file_state=data.get("UnitFileState") or None,
            main_pid=main_pid,
        )
