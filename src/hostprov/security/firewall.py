import logging
from typing import List, Optional

from hostprov.errors import StepFailed
from hostprov.host.context import HostContext

logger = logging.getLogger(__name__)


class FirewallManager:
    """firewalld through firewall-cmd; every rule is added permanently."""

    def __init__(self, ctx: HostContext, zone: Optional[str] = None):
        self.ctx = ctx
        self.zone = zone

    def is_active(self) -> bool:
        if not self.ctx.which("firewall-cmd"):
            return False
        return self.ctx.run(["systemctl", "is-active", "--quiet", "firewalld"], check=False).ok

    def _cmd(self, *args) -> List[str]:
        cmd = ["firewall-cmd", "--permanent"]
        if self.zone:
            cmd.append(f"--zone={self.zone}")
        return cmd + list(args)

    def open(self, services: List[str] = (), ports: List[str] = ()) -> str:
        if not self.is_active():
            return "firewalld not present or not active; skipping firewall changes"

        failed = []
        for service in services:
            if not self.ctx.run(self._cmd(f"--add-service={service}"), check=False).ok:
                failed.append(service)
        for port in ports:
            if not self.ctx.run(self._cmd(f"--add-port={port}"), check=False).ok:
                failed.append(port)
        self.ctx.run(["firewall-cmd", "--reload"])

        if failed:
            raise StepFailed(f"Could not open firewall rules: {', '.join(failed)}")
        return f"Opened firewall: {', '.join(list(services) + list(ports))}"
