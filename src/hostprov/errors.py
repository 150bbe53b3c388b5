from typing import List, Optional


class HostprovError(Exception):
    """Base class for every error raised by hostprov."""


class ValidationError(HostprovError):
    """Operator input rejected before any host mutation."""


class RootDeviceSelected(ValidationError):
    def __init__(self, device: str, root_device: str):
        self.device = device
        self.root_device = root_device
        super().__init__(
            f"{device} backs the root filesystem ({root_device}); selecting it will destroy the running system."
        )


class CommandError(HostprovError):
    def __init__(self, args: List[str], returncode: int, stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        message = f"Command '{' '.join(self.args_list)}' failed with exit code {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)


class StepFailed(HostprovError):
    """Raised by a step body to report a failure without a failing command."""


class ProcedureAborted(HostprovError):
    def __init__(self, step: str, message: str, report=None):
        self.step = step
        self.report = report
        super().__init__(f"Step '{step}' failed: {message}")


class ProcedureLocked(HostprovError):
    def __init__(self, procedure: str, lock_path: Optional[str] = None):
        self.procedure = procedure
        self.lock_path = lock_path
        super().__init__(
            f"Procedure '{procedure}' is already running (lock file {lock_path}). "
            "Remove the lock file if no other run is active."
        )


class UnsupportedPlatform(HostprovError):
    pass
