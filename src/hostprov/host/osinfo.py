import shlex

from hostprov.host.context import HostContext
from hostprov.host.models import OSInfo

OS_RELEASE_PATHS = ["/etc/os-release", "/usr/lib/os-release"]


def parse_os_release(content: str) -> OSInfo:
    data = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        try:
            parts = shlex.split(value)
            value = parts[0] if parts else ""
        except ValueError:
            value = value.strip('"\'')
        data[key.strip()] = value

    return OSInfo(
        id=data.get("ID", "unknown").lower(),
        id_like=data.get("ID_LIKE", "").lower().split(),
        name=data.get("PRETTY_NAME") or data.get("NAME"),
        version_id=data.get("VERSION_ID"),
    )


def get_os_info(ctx: HostContext) -> OSInfo:
    for path in OS_RELEASE_PATHS:
        if ctx.exists(path):
            return parse_os_release(ctx.read_text(path))
    return OSInfo(id="unknown")
