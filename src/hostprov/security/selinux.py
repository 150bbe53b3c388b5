import logging

from hostprov.errors import StepFailed
from hostprov.host.context import HostContext

logger = logging.getLogger(__name__)


def is_enabled(ctx: HostContext) -> bool:
    if not ctx.which("getenforce"):
        return False
    res = ctx.run(["getenforce"], check=False)
    return res.ok and res.stdout.strip().lower() in ("enforcing", "permissive")


def label_path(ctx: HostContext, path: str, context_type: str) -> str:
    """
    Apply `context_type` to `path` and everything below it.

    Uses a persistent semanage rule when available, otherwise a one-off chcon
    that a relabel will undo.
    """
    if not is_enabled(ctx):
        return f"SELinux disabled; not labeling {path}"

    if ctx.which("semanage"):
        spec = f"{path}(/.*)?"
        res = ctx.run(["semanage", "fcontext", "-a", "-t", context_type, spec], check=False)
        if not res.ok:
            # Rule already present: modify it instead of adding it
            ctx.run(["semanage", "fcontext", "-m", "-t", context_type, spec])
        ctx.run(["restorecon", "-R", path])
        return f"Labeled {path} as {context_type} (persistent)"

    logger.warning("semanage not found; applying non-persistent chcon. Install policycoreutils-python-utils.")
    ctx.run(["chcon", "-R", "-t", context_type, path])
    return f"Labeled {path} as {context_type} with chcon (not persistent)"


def set_booleans(ctx: HostContext, booleans: dict) -> str:
    if not is_enabled(ctx):
        return "SELinux disabled; booleans unchanged"
    failed = []
    for name, value in booleans.items():
        res = ctx.run(["setsebool", "-P", name, "1" if value else "0"], check=False)
        if not res.ok:
            failed.append(name)
    if failed:
        raise StepFailed(f"Could not set SELinux booleans: {', '.join(failed)}")
    return f"Set SELinux booleans: {', '.join(booleans)}"
