from typing import List, Optional

from hostprov.errors import RootDeviceSelected, ValidationError
from hostprov.host.context import HostContext

ROOT_OVERRIDE_TOKEN = "I_UNDERSTAND"
CREATE_CONFIRMATION_TOKEN = "YES"


def require_value(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required.")
    return value.strip()


def validate_devices(
    ctx: HostContext,
    devices: List[str],
    minimum: int = 2,
    root_override: Optional[str] = None,
) -> List[str]:
    """
    Check a device selection before anything destructive happens.

    Every entry must be a distinct, existing block special file. A device
    backing the running root filesystem is refused unless `root_override`
    is exactly ROOT_OVERRIDE_TOKEN.
    """
    if len(devices) < minimum:
        raise ValidationError(f"At least {minimum} devices are required, got {len(devices)}.")

    cleaned = []
    seen = {}
    for raw in devices:
        device = require_value(raw, "Device path")
        if not ctx.is_block_device(device):
            raise ValidationError(f"Device {device} not found or not a block device.")

        resolved = ctx.realpath(device)
        if resolved in seen:
            raise ValidationError(f"Devices must be different: {seen[resolved]} and {device} are the same device.")
        seen[resolved] = device
        cleaned.append(device)

    if root_override != ROOT_OVERRIDE_TOKEN:
        # Every layer under '/' counts, down to the whole disk
        roots = {ctx.realpath(root): root for root in ctx.root_devices()}
        for device in cleaned:
            root = roots.get(ctx.realpath(device))
            if root:
                raise RootDeviceSelected(device, root)

    return cleaned


def confirm_secret(first: Optional[str], second: Optional[str], field: str = "Password") -> str:
    """Both entries must match; the value is never part of the error."""
    if not first:
        raise ValidationError(f"{field} must not be empty.")
    if first != second:
        raise ValidationError(f"{field} entries do not match.")
    return first


def require_confirmation(token: Optional[str], expected: str, action: str):
    if (token or "").strip() != expected:
        raise ValidationError(f"{action} not confirmed (expected '{expected}'). Aborted.")
