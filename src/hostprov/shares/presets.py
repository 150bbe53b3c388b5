from typing import Dict

from hostprov.errors import ValidationError
from hostprov.shares.models import ConfigWritePolicy, SambaPreset

PRESETS: Dict[str, SambaPreset] = {
    "isolated": SambaPreset(
        name="isolated",
        description="Private per-user shares: hidden from browsing, owner-only masks, fresh smb.conf.",
        browsable=False,
        create_mask="0700",
        directory_mask="0700",
        share_mode="0700",
        base_config=ConfigWritePolicy.OVERWRITE,
    ),
    "shared": SambaPreset(
        name="shared",
        description="Browsable per-user shares with group-writable masks, appended to the existing smb.conf.",
        browsable=True,
        create_mask="0770",
        directory_mask="0770",
        share_mode="0770",
        base_config=ConfigWritePolicy.APPEND,
    ),
}


def get_preset(name: str) -> SambaPreset:
    try:
        return PRESETS[name]
    except KeyError:
        raise ValidationError(f"Unknown Samba preset '{name}'. Available: {', '.join(sorted(PRESETS))}")
