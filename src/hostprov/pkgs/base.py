from abc import ABC, abstractmethod
from typing import Dict, List

from hostprov.host.context import HostContext


class PackageManager(ABC):
    # Distribution package names needed by each provisioning feature
    REQUIRED_PACKAGES: Dict[str, List[str]] = {}

    def __init__(self, ctx: HostContext):
        self.ctx = ctx

    @abstractmethod
    def is_installed(self, package: str) -> bool:
        pass

    @abstractmethod
    def install(self, packages: List[str]):
        pass

    def required_packages(self, feature: str) -> List[str]:
        return list(self.REQUIRED_PACKAGES.get(feature, []))

    def missing_packages(self, packages: List[str]) -> List[str]:
        return [p for p in packages if not self.is_installed(p)]

    def ensure_installed(self, feature: str) -> str:
        missing = self.missing_packages(self.required_packages(feature))
        if not missing:
            return f"Required packages for {feature} are already installed."
        self.install(missing)
        return f"Installed: {' '.join(missing)}"
